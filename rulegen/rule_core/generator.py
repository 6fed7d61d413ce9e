"""
Rule Generator
==============

Main orchestrator: role classification, interaction synthesis, critical
entity selection and termination synthesis.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

from rulegen.rule_core.classification import (
    ClassificationContext,
    CriticalEntities,
    sprite_set_structure,
)
from rulegen.rule_core.config_loader import GeneratorConfig, get_config
from rulegen.rule_core.interactions import InteractionSynthesizer
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.rng import SeedLike, make_rng
from rulegen.rule_core.roles import RoleAssignment, classify_roles
from rulegen.rule_core.rules import RuleSet
from rulegen.rule_core.sprite_catalog import GameDescription
from rulegen.rule_core.terminations import TerminationSynthesizer

logger = logging.getLogger(__name__)


class RuleGenerator:
    """
    Constructive rule generator for one game level.

    Roles are assigned once, at construction. Each :meth:`generate` call
    starts from empty classification sets and returns an independent rule
    set. An instance holds per-call state and must not be shared between
    threads without serializing ``generate`` calls.
    """

    def __init__(
        self,
        level: Union[GameDescription, LevelAnalyzer],
        config: Optional[GeneratorConfig] = None,
        seed: SeedLike = None
    ):
        """
        Initialize generator.

        Args:
            level: Game description, or an analyzer already built for it.
            config: Generator configuration. Uses default if None.
            seed: Integer seed or random.Random instance for reproducibility.
        """
        if config is None:
            config = get_config()
        if isinstance(level, GameDescription):
            level = LevelAnalyzer(level)

        self._config = config
        self._analyzer = level
        self._rng = make_rng(seed)

        self._roles = classify_roles(self._analyzer, self._rng, config)
        self._interactions = InteractionSynthesizer(self._analyzer, self._roles, config)
        self._terminations = TerminationSynthesizer(self._analyzer, self._roles, config)

        self._context = ClassificationContext()

    @property
    def config(self) -> GeneratorConfig:
        """Generator configuration."""
        return self._config

    @property
    def analyzer(self) -> LevelAnalyzer:
        """Level inventory."""
        return self._analyzer

    @property
    def roles(self) -> RoleAssignment:
        """Wall / score / spike / exit assignment."""
        return self._roles

    @property
    def context(self) -> ClassificationContext:
        """Classification state of the last generate call."""
        return self._context

    @property
    def critical(self) -> CriticalEntities:
        """Critical entities chosen by the last generate call."""
        return self._context.critical

    def generate(self, seed: SeedLike = None) -> RuleSet:
        """
        Generate a complete rule set.

        Args:
            seed: If given, reseed the random source before generating.
                Roles are not reassigned.

        Returns:
            RuleSet with interactions and terminations.
        """
        if seed is not None:
            self._rng = make_rng(seed)

        self._context = ClassificationContext()
        self._interactions.synthesize(self._context, self._rng)
        terminations = self._terminations.synthesize(self._context, self._rng)

        rule_set = RuleSet(list(self._context.interactions), terminations)
        logger.info(
            "Generated %d interactions and %d terminations for %s",
            len(rule_set.interactions),
            len(rule_set.terminations),
            self._analyzer.game.name,
        )
        return rule_set

    def sprite_set_structure(self) -> Dict[str, List[str]]:
        """Sprite set grouping of the last generate call."""
        return sprite_set_structure(self._context)
