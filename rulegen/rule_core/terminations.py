"""
Termination Synthesizer
=======================

Builds the TerminationSet of a generated game.

Win condition, first match wins:

- Door: reach the door (optionally after collecting the critical collectible)
- Critical collectible: collect them all before a long timeout
- NPC to catch: catch them all before a medium timeout
- Critical enemy (avatar can shoot): kill them all before a medium timeout
- Otherwise: survive until a short timeout

Lose condition: the avatar dies, added whenever something can kill it.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from rulegen.rule_core.classification import ClassificationContext
from rulegen.rule_core.config_loader import GeneratorConfig, TimeoutConfig, get_config
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.roles import RoleAssignment
from rulegen.rule_core.rules import TerminationRule

logger = logging.getLogger(__name__)


def draw_timeout(timeout: TimeoutConfig, rng: random.Random) -> int:
    """Draw a timeout limit in ``[timeout.min_limit, timeout.max_limit]``."""
    return timeout.base + timeout.step * rng.randint(0, timeout.steps)


class TerminationSynthesizer:
    """Turns roles and classification results into termination rules."""

    def __init__(
        self,
        analyzer: LevelAnalyzer,
        roles: RoleAssignment,
        config: Optional[GeneratorConfig] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._roles = roles
        self._live_avatars = analyzer.avatars(live_only=True)

    @property
    def avatar_can_shoot(self) -> bool:
        """True if a live avatar owns at least one projectile type."""
        return any(avatar.children for avatar in self._live_avatars)

    def synthesize(
        self,
        context: ClassificationContext,
        rng: random.Random
    ) -> List[TerminationRule]:
        """
        Build the termination list.

        Args:
            context: Classification results of the current call, with
                critical entities already selected.
            rng: Random source.

        Returns:
            Non-empty termination list holding at least one win condition.
        """
        timeouts = self._config.timeouts
        critical = context.critical
        door = self._roles.door
        terminations: List[TerminationRule] = []

        if door is not None:
            if (critical.collectible is not None
                    and rng.random() < self._config.probabilities.door_collectible):
                terminations.append(
                    TerminationRule.multi_sprite_counter(critical.collectible, door.name, win=True)
                )
                terminations.append(
                    TerminationRule.timeout(draw_timeout(timeouts.collectible, rng), win=False)
                )
            else:
                terminations.append(TerminationRule.sprite_counter(door.name, win=True))
        elif critical.collectible is not None:
            terminations.append(TerminationRule.sprite_counter(critical.collectible, win=True))
            terminations.append(
                TerminationRule.timeout(draw_timeout(timeouts.collectible, rng), win=False)
            )
        elif critical.npc_to_catch is not None:
            terminations.append(TerminationRule.sprite_counter(critical.npc_to_catch, win=True))
            terminations.append(
                TerminationRule.timeout(draw_timeout(timeouts.catch, rng), win=False)
            )
        elif critical.enemy_npc is not None and self.avatar_can_shoot:
            terminations.append(TerminationRule.sprite_counter(critical.enemy_npc, win=True))
            terminations.append(
                TerminationRule.timeout(draw_timeout(timeouts.catch, rng), win=False)
            )
        else:
            terminations.append(
                TerminationRule.timeout(draw_timeout(timeouts.survival, rng), win=True)
            )

        if context.has_hazards:
            for avatar in self._live_avatars:
                terminations.append(TerminationRule.sprite_counter(avatar.name, win=False))

        logger.debug("Terminations: %s", [t.to_vgdl() for t in terminations])
        return terminations
