"""
Sprite Catalog
==============

Sprite descriptors and game descriptions loaded from YAML game files.

A game file lists the sprites of a game, how level characters map to
sprites, and a single level layout::

    name: aliens
    sprites:
      - {name: avatar, category: avatar, subtype: FlakAvatar, children: [sam]}
      - {name: alien, category: npc, subtype: Bomber, children: [bomb]}
    level_mapping:
      A: [avatar]
      1: [alien]
    level: |
      ...1...
      ...A...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


class SpriteCategory(str, Enum):
    """Sprite families reported by level analysis."""
    AVATAR = "avatar"
    RESOURCE = "resource"
    MOVABLE = "movable"
    NPC = "npc"
    SPAWNER = "spawner"
    IMMOVABLE = "immovable"
    PORTAL = "portal"


@dataclass(frozen=True)
class SpriteDescriptor:
    """
    A named sprite type.

    Attributes:
        name: Unique sprite name.
        category: Sprite family.
        subtype: Behavioral class tag (e.g. ``"Fleeing"``, ``"Door"``), may be empty.
        children: Sprite names this sprite shoots, spawns, or refers to.
    """
    name: str
    category: SpriteCategory
    subtype: str = ""
    children: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def has_subtype(self, family: Tuple[str, ...]) -> bool:
        """Case-insensitive membership of the subtype in a subtype family."""
        return self.subtype.lower() in family

    def __repr__(self) -> str:
        return f"SpriteDescriptor({self.name}: {self.category.value}/{self.subtype})"


@dataclass(frozen=True)
class GameDescription:
    """A game's sprites plus one level layout."""
    name: str
    sprites: Tuple[SpriteDescriptor, ...]
    level_mapping: Dict[str, Tuple[str, ...]]
    level: Tuple[str, ...]

    @property
    def width(self) -> int:
        return len(self.level[0]) if self.level else 0

    @property
    def height(self) -> int:
        return len(self.level)

    def get_sprite(self, name: str) -> Optional[SpriteDescriptor]:
        """Get a sprite descriptor by name."""
        for sprite in self.sprites:
            if sprite.name == name:
                return sprite
        return None


def _parse_sprite(sprite_data: dict) -> SpriteDescriptor:
    """Parse a single sprite descriptor from YAML."""
    category_name = str(sprite_data["category"]).lower()
    try:
        category = SpriteCategory(category_name)
    except ValueError:
        raise ValueError(
            f"Unknown category '{category_name}' for sprite '{sprite_data['name']}'"
        ) from None
    return SpriteDescriptor(
        name=str(sprite_data["name"]),
        category=category,
        subtype=str(sprite_data.get("subtype") or ""),
        children=tuple(str(c) for c in sprite_data.get("children") or ())
    )


def _parse_level(level_data) -> Tuple[str, ...]:
    """Parse the level layout, accepting a block string or a list of rows."""
    if isinstance(level_data, str):
        rows = level_data.splitlines()
    else:
        rows = [str(row) for row in level_data]
    rows = [row for row in rows if row]
    if rows and any(len(row) != len(rows[0]) for row in rows):
        raise ValueError("Level rows must all have the same width")
    return tuple(rows)


def _validate_game(game: GameDescription) -> None:
    """Validate that names, children and level characters are consistent."""
    names = [sprite.name for sprite in game.sprites]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate sprite names in game '{game.name}'")

    known = set(names)
    for sprite in game.sprites:
        for child in sprite.children:
            if child not in known:
                raise ValueError(f"Sprite '{sprite.name}' refers to unknown sprite '{child}'")

    for char, mapped in game.level_mapping.items():
        for name in mapped:
            if name not in known:
                raise ValueError(f"Level character '{char}' maps to unknown sprite '{name}'")

    for row in game.level:
        for char in row:
            if char not in game.level_mapping:
                raise ValueError(f"Level character '{char}' has no mapping")


def parse_game(raw: dict) -> GameDescription:
    """
    Build a validated GameDescription from already-parsed YAML data.

    Raises:
        ValueError: If the description is inconsistent.
    """
    mapping: Dict[str, Tuple[str, ...]] = {}
    for char, names in (raw.get("level_mapping") or {}).items():
        char = str(char)
        if len(char) != 1:
            raise ValueError(f"Level mapping keys must be single characters, got '{char}'")
        if isinstance(names, str):
            names = [names]
        mapping[char] = tuple(str(n) for n in names or ())
    # Unmapped blank cells are allowed
    mapping.setdefault(" ", ())
    mapping.setdefault(".", ())

    game = GameDescription(
        name=str(raw.get("name", "unnamed")),
        sprites=tuple(_parse_sprite(s) for s in raw.get("sprites") or ()),
        level_mapping=mapping,
        level=_parse_level(raw.get("level") or ())
    )
    _validate_game(game)
    return game


def load_game(game_path: str) -> GameDescription:
    """
    Load a game description from a YAML file.

    Args:
        game_path: Path to the game file.

    Returns:
        Validated GameDescription.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the description is inconsistent.
    """
    game_path = Path(game_path)
    if not game_path.exists():
        raise FileNotFoundError(f"Game file not found: {game_path}")

    with open(game_path, "r") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Game file must contain a mapping: {game_path}")
    raw.setdefault("name", game_path.stem)
    return parse_game(raw)


def games_dir() -> Path:
    """Directory holding the bundled sample games."""
    return Path(os.path.dirname(os.path.dirname(__file__))) / "games"


def list_games() -> List[str]:
    """Names of the bundled sample games."""
    return sorted(p.stem for p in games_dir().glob("*.yaml"))


def load_sample_game(name: str) -> GameDescription:
    """Load one of the bundled sample games by name."""
    return load_game(str(games_dir() / f"{name}.yaml"))
