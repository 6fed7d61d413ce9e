"""
Critical Entity Selector
========================

Picks one live representative per role to anchor a win condition.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from rulegen.rule_core.classification import ClassificationContext, CriticalEntities
from rulegen.rule_core.config_loader import GeneratorConfig, get_config
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.rng import select_with_retry

logger = logging.getLogger(__name__)


def select_critical_entities(
    analyzer: LevelAnalyzer,
    context: ClassificationContext,
    rng: random.Random,
    config: Optional[GeneratorConfig] = None
) -> CriticalEntities:
    """
    Choose the critical enemy, the NPC to catch, and the critical collectible.

    Each role is drawn from its classification set, accepting only sprites
    that are in the level or spawned by a spawner in the level. A role is
    None when the set is empty or no live sprite was drawn within
    ``selection.max_attempts`` probes.

    Fleeing NPCs anchor only the catch goal and are never the critical
    collectible.

    Args:
        analyzer: Level inventory used for liveness checks.
        context: Classification sets of the current call.
        rng: Random source, consumed in role order.
        config: Generator configuration. Uses default if None.
    """
    if config is None:
        config = get_config()
    max_attempts = config.selection.max_attempts

    picks = {}
    for role, candidates in (
        ("enemy_npc", context.harmful_npcs),
        ("npc_to_catch", context.fleeing_npcs),
        ("collectible", [n for n in context.collectibles if n not in context.fleeing_npcs]),
    ):
        picks[role] = select_with_retry(candidates, analyzer.has_live_source, rng, max_attempts)
        if candidates and picks[role] is None:
            logger.debug("No live %s among %s after %d probes", role, candidates, max_attempts)

    critical = CriticalEntities(**picks)
    logger.debug("Critical entities: %s", critical)
    return critical
