"""
Level Analyzer
==============

Answers the structural questions the rule generator asks about a level:
which sprites of each category exist, how many instances they have, how
much of the border they cover, and which sprites share tiles.

Every sprite gets a boolean occupancy mask over the level grid; all queries
are computed from those masks.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

import numpy as np

from rulegen.rule_core.sprite_catalog import (
    GameDescription,
    SpriteCategory,
    SpriteDescriptor,
)


class LevelAnalyzer:
    """
    Read-only sprite inventory for one game level.

    Query results keep the sprite declaration order of the game file, so
    repeated queries are deterministic.
    """

    def __init__(self, game: GameDescription):
        """
        Analyze a level.

        Args:
            game: Game description holding sprites and the level layout.
        """
        self._game = game
        height, width = game.height, game.width

        self._masks: Dict[str, np.ndarray] = {
            sprite.name: np.zeros((height, width), dtype=bool) for sprite in game.sprites
        }
        for y, row in enumerate(game.level):
            for x, char in enumerate(row):
                for name in game.level_mapping[char]:
                    self._masks[name][y, x] = True

        self._border = np.zeros((height, width), dtype=bool)
        if height > 0 and width > 0:
            self._border[0, :] = True
            self._border[-1, :] = True
            self._border[:, 0] = True
            self._border[:, -1] = True

        self._counts: Dict[str, int] = {
            name: int(mask.sum()) for name, mask in self._masks.items()
        }

        # Ownership indexes
        self._avatar_names: FrozenSet[str] = frozenset(
            s.name for s in self._by_category(SpriteCategory.AVATAR, live_only=False)
        )
        self._avatar_owned: FrozenSet[str] = frozenset(
            child
            for s in self._by_category(SpriteCategory.AVATAR, live_only=False)
            for child in s.children
        )
        self._spawner_owned: FrozenSet[str] = frozenset(
            child
            for s in self._by_category(SpriteCategory.SPAWNER, live_only=False)
            for child in s.children
        )

    @property
    def game(self) -> GameDescription:
        return self._game

    @property
    def area(self) -> int:
        """Number of tiles in the level."""
        return self._game.width * self._game.height

    @property
    def perimeter(self) -> int:
        """Number of tiles on the level border."""
        return int(self._border.sum())

    @property
    def avatar_names(self) -> FrozenSet[str]:
        """Names of every avatar sprite, present or not."""
        return self._avatar_names

    @property
    def avatar_owned(self) -> FrozenSet[str]:
        """Sprites owned by any avatar (projectiles, tools)."""
        return self._avatar_owned

    @property
    def spawner_owned(self) -> FrozenSet[str]:
        """Sprites produced by any spawner."""
        return self._spawner_owned

    def count(self, name: str) -> int:
        """Number of instances of a sprite in the level (0 if unknown)."""
        return self._counts.get(name, 0)

    def occupancy(self, name: str) -> np.ndarray:
        """Copy of the occupancy mask of a sprite."""
        return self._masks[name].copy()

    def is_avatar(self, name: str) -> bool:
        return name in self._avatar_names

    def _by_category(
        self,
        category: SpriteCategory,
        live_only: bool
    ) -> Tuple[SpriteDescriptor, ...]:
        return tuple(
            s for s in self._game.sprites
            if s.category is category and (not live_only or self.count(s.name) > 0)
        )

    def avatars(self, live_only: bool = False) -> Tuple[SpriteDescriptor, ...]:
        return self._by_category(SpriteCategory.AVATAR, live_only)

    def resources(self, live_only: bool = False) -> Tuple[SpriteDescriptor, ...]:
        return self._by_category(SpriteCategory.RESOURCE, live_only)

    def movables(self, live_only: bool = False) -> Tuple[SpriteDescriptor, ...]:
        return self._by_category(SpriteCategory.MOVABLE, live_only)

    def npcs(self, live_only: bool = False) -> Tuple[SpriteDescriptor, ...]:
        return self._by_category(SpriteCategory.NPC, live_only)

    def spawners(self, live_only: bool = False) -> Tuple[SpriteDescriptor, ...]:
        return self._by_category(SpriteCategory.SPAWNER, live_only)

    def portals(self, live_only: bool = False) -> Tuple[SpriteDescriptor, ...]:
        return self._by_category(SpriteCategory.PORTAL, live_only)

    def immovables(self, low: int, high: int) -> Tuple[SpriteDescriptor, ...]:
        """
        Immovable sprites whose population lies in ``[low, high]``.

        Args:
            low: Minimum number of instances.
            high: Maximum number of instances.
        """
        return tuple(
            s for s in self._by_category(SpriteCategory.IMMOVABLE, live_only=False)
            if low <= self.count(s.name) <= high
        )

    def border_ratio(self, name: str) -> float:
        """Fraction of the border tiles occupied by a sprite."""
        perimeter = self.perimeter
        if perimeter == 0:
            return 0.0
        return float((self._masks[name] & self._border).sum()) / perimeter

    def border_objects(
        self,
        density_threshold: float,
        border_threshold: float
    ) -> Tuple[SpriteDescriptor, ...]:
        """
        Sprites that look like level boundaries.

        A sprite qualifies when its population per tile is at least
        ``density_threshold`` and it covers at least ``border_threshold`` of
        the border. Avatars and sprites covering every tile (floors) never
        qualify.

        Args:
            density_threshold: Minimum instances / area.
            border_threshold: Minimum fraction of border tiles covered.
        """
        area = self.area
        if area == 0:
            return ()

        result = []
        for sprite in self._game.sprites:
            if sprite.category is SpriteCategory.AVATAR:
                continue
            population = self.count(sprite.name)
            if population == 0 or population == area:
                continue
            if population / area < density_threshold:
                continue
            if self.border_ratio(sprite.name) >= border_threshold:
                result.append(sprite)
        return tuple(result)

    def sprites_on_same_tile(self, name: str) -> Tuple[SpriteDescriptor, ...]:
        """Other sprites sharing at least one tile with ``name``."""
        mask = self._masks.get(name)
        if mask is None:
            return ()
        return tuple(
            s for s in self._game.sprites
            if s.name != name and bool((self._masks[s.name] & mask).any())
        )

    def is_produced_by_live_spawner(self, name: str) -> bool:
        """True if a spawner present in the level produces ``name``."""
        return any(name in s.children for s in self.spawners(live_only=True))

    def has_live_source(self, name: str) -> bool:
        """True if ``name`` is in the level or will be spawned into it."""
        return self.count(name) > 0 or self.is_produced_by_live_spawner(name)
