"""
Classification Context
======================

Mutable state shared by the generation passes of a single ``generate`` call:
the interactions emitted so far and the sprite classifications they imply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rulegen.rule_core.rules import EOS, Effect, InteractionRule


@dataclass(frozen=True)
class CriticalEntities:
    """Sprites anchoring win conditions. ``None`` means no live candidate was found."""
    enemy_npc: Optional[str] = None
    npc_to_catch: Optional[str] = None
    collectible: Optional[str] = None


@dataclass
class ClassificationContext:
    """
    Accumulators for one generation call.

    Name lists keep insertion order and never hold duplicates; iteration
    order feeds straight into the emitted rules, so it must not depend on
    hashing.
    """
    interactions: List[InteractionRule] = field(default_factory=list)
    harmful_objects: List[str] = field(default_factory=list)
    harmful_npcs: List[str] = field(default_factory=list)
    fleeing_npcs: List[str] = field(default_factory=list)
    collectibles: List[str] = field(default_factory=list)
    critical: CriticalEntities = field(default_factory=CriticalEntities)

    @staticmethod
    def _add(bucket: List[str], name: str) -> None:
        if name not in bucket:
            bucket.append(name)

    def mark_harmful(self, name: str) -> None:
        self._add(self.harmful_objects, name)

    def mark_harmful_npc(self, name: str) -> None:
        self._add(self.harmful_npcs, name)

    def mark_fleeing(self, name: str) -> None:
        self._add(self.fleeing_npcs, name)

    def mark_collectible(self, name: str) -> None:
        self._add(self.collectibles, name)

    @property
    def has_hazards(self) -> bool:
        """True if anything can kill the avatar."""
        return bool(self.harmful_objects or self.harmful_npcs)

    def add(
        self,
        actor: str,
        target: str,
        effect: Effect,
        **params
    ) -> InteractionRule:
        """Append an interaction and return it."""
        rule = InteractionRule(actor, target, effect, **params)
        self.interactions.append(rule)
        return rule

    def kill(self, actor: str, target: str, score_change: Optional[int] = None) -> InteractionRule:
        """``actor`` is destroyed when it touches ``target``."""
        return self.add(actor, target, Effect.KILL_SPRITE, score_change=score_change)

    def at_edge(self, actor: str, effect: Effect) -> InteractionRule:
        """``actor`` applies ``effect`` at the edge of the screen."""
        return self.add(actor, EOS, effect)


def sprite_set_structure(context: ClassificationContext) -> Dict[str, List[str]]:
    """
    Group classified sprites into named sprite sets.

    Groups are "fleeing", "harmful" and "collectible", in that order. A sprite
    is listed only in the first group it belongs to; a group is left out when
    nothing was classified into it.
    Harmful NPCs are not grouped.
    """
    structure: Dict[str, List[str]] = {}
    seen = set()
    for group, names in (
        ("fleeing", context.fleeing_npcs),
        ("harmful", context.harmful_objects),
        ("collectible", context.collectibles),
    ):
        if not names:
            continue
        structure[group] = []
        for name in names:
            if name not in seen:
                seen.add(name)
                structure[group].append(name)
    return structure
