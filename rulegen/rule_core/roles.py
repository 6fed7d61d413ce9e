"""
Role Classifier
===============

Identifies the structurally special sprites of a level once per generator:
the wall, the score and spike sprites, and the exits (with the door).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from rulegen.rule_core.config_loader import GeneratorConfig, get_config
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.sprite_catalog import SpriteDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleAssignment:
    """Special sprites of a level. Any role may be missing."""
    wall: Optional[SpriteDescriptor] = None
    score: Optional[SpriteDescriptor] = None
    spike: Optional[SpriteDescriptor] = None
    exits: Tuple[SpriteDescriptor, ...] = ()
    door: Optional[SpriteDescriptor] = None

    @property
    def wall_name(self) -> Optional[str]:
        return self.wall.name if self.wall is not None else None


def find_wall(
    analyzer: LevelAnalyzer,
    config: GeneratorConfig
) -> Optional[SpriteDescriptor]:
    """
    Pick the wall sprite.

    Among the border objects, the one with the fewest instances wins; ties
    keep the first declared sprite.
    """
    if analyzer.area == 0:
        return None
    candidates = analyzer.border_objects(
        analyzer.perimeter / analyzer.area,
        config.roles.wall_percentage
    )
    wall: Optional[SpriteDescriptor] = None
    for candidate in candidates:
        if wall is None or analyzer.count(candidate.name) < analyzer.count(wall.name):
            wall = candidate
    return wall


def score_spike_candidates(
    analyzer: LevelAnalyzer,
    config: GeneratorConfig,
    wall: Optional[SpriteDescriptor]
) -> Tuple[SpriteDescriptor, ...]:
    """
    Immovables eligible for the score and spike roles.

    The wall itself is never a candidate. Sprites sharing a tile with the wall
    are dropped too, unless that would leave no candidate at all.
    """
    ceiling = int(config.roles.score_spike_fraction * analyzer.area)
    candidates = analyzer.immovables(1, ceiling)
    if wall is None or not candidates:
        return candidates

    candidates = tuple(c for c in candidates if c.name != wall.name)
    on_wall = {s.name for s in analyzer.sprites_on_same_tile(wall.name)}
    filtered = tuple(c for c in candidates if c.name not in on_wall)
    return filtered if filtered else candidates


def find_exits(
    analyzer: LevelAnalyzer,
    config: GeneratorConfig
) -> Tuple[Tuple[SpriteDescriptor, ...], Optional[SpriteDescriptor]]:
    """
    Exits are present portals that are not teleport sources.

    Returns:
        (exits, door) where door is the first exit of a door subtype.
    """
    exits = tuple(
        p for p in analyzer.portals(live_only=True)
        if not p.has_subtype(config.subtypes.teleport)
    )
    door = next((e for e in exits if e.has_subtype(config.subtypes.door)), None)
    return exits, door


def classify_roles(
    analyzer: LevelAnalyzer,
    rng: random.Random,
    config: Optional[GeneratorConfig] = None
) -> RoleAssignment:
    """
    Assign the wall, score, spike, exit and door roles.

    Score and spike are drawn independently from the same candidates; a
    spike equal to the score is rejected.

    Args:
        analyzer: Level inventory.
        rng: Random source, consumed for the score and spike draws.
        config: Generator configuration. Uses default if None.

    Returns:
        The role assignment.
    """
    if config is None:
        config = get_config()

    wall = find_wall(analyzer, config)

    score: Optional[SpriteDescriptor] = None
    spike: Optional[SpriteDescriptor] = None
    candidates = score_spike_candidates(analyzer, config, wall)
    if candidates:
        score = rng.choice(candidates)
        spike = rng.choice(candidates)
        if spike.name == score.name:
            spike = None

    exits, door = find_exits(analyzer, config)

    roles = RoleAssignment(wall=wall, score=score, spike=spike, exits=exits, door=door)
    logger.info(
        "Roles for %s: wall=%s score=%s spike=%s exits=%s door=%s",
        analyzer.game.name,
        roles.wall_name,
        score.name if score else None,
        spike.name if spike else None,
        [e.name for e in exits],
        door.name if door else None,
    )
    return roles
