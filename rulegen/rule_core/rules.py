"""
Game Rules
==========

Structured interaction and termination rules produced by the generator.

Rules are plain frozen records; ``to_vgdl`` renders the rule-language text
consumed by the game engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

# Pseudo-sprite standing for the level boundary
EOS = "EOS"


class Effect(str, Enum):
    """Effects an interaction may apply to its actor."""
    STEP_BACK = "stepBack"
    FLIP_DIRECTION = "flipDirection"
    REVERSE_DIRECTION = "reverseDirection"
    TURN_AROUND = "turnAround"
    WRAP_AROUND = "wrapAround"
    KILL_SPRITE = "killSprite"
    KILL_IF_HAS_LESS = "killIfHasLess"
    COLLECT_RESOURCE = "collectResource"
    TRANSFORM_TO = "transformTo"
    TELEPORT_TO_EXIT = "teleportToExit"
    PULL_WITH_IT = "pullWithIt"


# Effects movables and NPCs may use against walls and the screen edge
WALL_PALETTE: Tuple[Effect, ...] = (
    Effect.STEP_BACK,
    Effect.FLIP_DIRECTION,
    Effect.REVERSE_DIRECTION,
    Effect.TURN_AROUND,
    Effect.WRAP_AROUND,
)


@dataclass(frozen=True)
class InteractionRule:
    """
    A collision between ``actor`` and ``target`` applying ``effect`` to the actor.

    ``target`` may be :data:`EOS` for the edge of the screen.
    """
    actor: str
    target: str
    effect: Effect
    score_change: Optional[int] = None
    resource: Optional[str] = None
    limit: Optional[int] = None
    stype: Optional[str] = None

    def __post_init__(self) -> None:
        if self.effect is Effect.KILL_IF_HAS_LESS and (self.resource is None or self.limit is None):
            raise ValueError("killIfHasLess requires both resource and limit")
        if self.effect is Effect.TRANSFORM_TO and self.stype is None:
            raise ValueError("transformTo requires stype")

    @property
    def params(self) -> Dict[str, object]:
        """Effect parameters in rule-language order, unset ones omitted."""
        params: Dict[str, object] = {}
        if self.stype is not None:
            params["stype"] = self.stype
        if self.resource is not None:
            params["resource"] = self.resource
        if self.limit is not None:
            params["limit"] = self.limit
        if self.score_change is not None:
            params["scoreChange"] = self.score_change
        return params

    def to_vgdl(self) -> str:
        """Render as an InteractionSet line, e.g. ``coin avatar > killSprite scoreChange=1``."""
        parts = [f"{self.actor} {self.target} > {self.effect.value}"]
        parts.extend(f"{key}={value}" for key, value in self.params.items())
        return " ".join(parts)

    def to_dict(self) -> Dict[str, object]:
        return {
            "actor": self.actor,
            "target": self.target,
            "effect": self.effect.value,
            "params": self.params,
        }

    def __str__(self) -> str:
        return self.to_vgdl()


class TerminationKind(str, Enum):
    """Termination condition families understood by the engine."""
    SPRITE_COUNTER = "SpriteCounter"
    MULTI_SPRITE_COUNTER = "MultiSpriteCounter"
    TIMEOUT = "Timeout"


@dataclass(frozen=True)
class TerminationRule:
    """A global end-of-game predicate with its outcome."""
    kind: TerminationKind
    limit: int
    win: bool
    stypes: Tuple[str, ...] = ()

    @staticmethod
    def sprite_counter(stype: str, win: bool, limit: int = 0) -> "TerminationRule":
        return TerminationRule(TerminationKind.SPRITE_COUNTER, limit, win, (stype,))

    @staticmethod
    def multi_sprite_counter(stype1: str, stype2: str, win: bool, limit: int = 0) -> "TerminationRule":
        return TerminationRule(TerminationKind.MULTI_SPRITE_COUNTER, limit, win, (stype1, stype2))

    @staticmethod
    def timeout(limit: int, win: bool) -> "TerminationRule":
        return TerminationRule(TerminationKind.TIMEOUT, limit, win)

    def to_vgdl(self) -> str:
        """Render as a TerminationSet line."""
        win = "True" if self.win else "False"
        if self.kind is TerminationKind.SPRITE_COUNTER:
            return f"SpriteCounter stype={self.stypes[0]} limit={self.limit} win={win}"
        if self.kind is TerminationKind.MULTI_SPRITE_COUNTER:
            return (
                f"MultiSpriteCounter stype1={self.stypes[0]} stype2={self.stypes[1]} "
                f"limit={self.limit} win={win}"
            )
        return f"Timeout limit={self.limit} win={win}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "stypes": list(self.stypes),
            "limit": self.limit,
            "win": self.win,
        }

    def __str__(self) -> str:
        return self.to_vgdl()


@dataclass
class RuleSet:
    """Output of one generation call: interactions and terminations, in order."""
    interactions: List[InteractionRule] = field(default_factory=list)
    terminations: List[TerminationRule] = field(default_factory=list)

    @property
    def has_win(self) -> bool:
        """True if at least one termination ends the game in a win."""
        return any(t.win for t in self.terminations)

    def interactions_between(self, actor: str, target: str) -> List[InteractionRule]:
        """All interactions with the given actor and target, in order."""
        return [r for r in self.interactions if r.actor == actor and r.target == target]

    def to_vgdl(self) -> Tuple[List[str], List[str]]:
        """Render both sequences as rule-language lines."""
        return (
            [rule.to_vgdl() for rule in self.interactions],
            [rule.to_vgdl() for rule in self.terminations],
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "interactions": [rule.to_dict() for rule in self.interactions],
            "terminations": [rule.to_dict() for rule in self.terminations],
        }
