"""
Configuration Loader
====================

Loads and validates rule_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from rulegen.rule_core.rules import Effect, WALL_PALETTE

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)),
    "rule_config.yaml"
)


@dataclass(frozen=True)
class RolesConfig:
    """Thresholds used to pick the wall, score and spike sprites."""
    wall_percentage: float       # Minimum border coverage for a wall
    score_spike_fraction: float  # Population ceiling as a fraction of area


@dataclass(frozen=True)
class ProbabilityConfig:
    """Probabilities driving every random decision of the generator."""
    door_collectible: float
    kill_if_has_less: float
    kill_resource: float
    kill_resource_score: float
    destroy_wall: float
    spike: float
    double_npc: float
    harmful_movable: float
    useful_movable: float
    firewall: float
    random_npc: float
    spawned: float
    bomber: float


@dataclass(frozen=True)
class SelectionConfig:
    """Critical entity probing."""
    max_attempts: int


@dataclass(frozen=True)
class TimeoutConfig:
    """A timeout limit drawn as base + step * randint(0, steps)."""
    base: int
    step: int
    steps: int

    @property
    def min_limit(self) -> int:
        return self.base

    @property
    def max_limit(self) -> int:
        return self.base + self.step * self.steps


@dataclass(frozen=True)
class TimeoutsConfig:
    """Timeouts attached to each termination branch."""
    collectible: TimeoutConfig  # Lose fallback for collect-all and door goals
    catch: TimeoutConfig        # Lose fallback for catch/kill goals
    survival: TimeoutConfig     # Win condition when nothing else applies


@dataclass(frozen=True)
class SubtypeConfig:
    """Lower-cased sprite subtype families."""
    fleeing: Tuple[str, ...]
    bomber: Tuple[str, ...]
    chaser: Tuple[str, ...]
    random: Tuple[str, ...]
    door: Tuple[str, ...]
    teleport: Tuple[str, ...]


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Complete generator configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    roles: RolesConfig
    probabilities: ProbabilityConfig
    selection: SelectionConfig
    timeouts: TimeoutsConfig
    subtypes: SubtypeConfig
    wall_actions: Tuple[Effect, ...]


def _parse_timeout(data: dict) -> TimeoutConfig:
    """Parse a single timeout range from YAML."""
    return TimeoutConfig(
        base=int(data["base"]),
        step=int(data.get("step", 100)),
        steps=int(data["steps"])
    )


def _parse_family(data: dict, key: str) -> Tuple[str, ...]:
    """Parse a subtype family, normalizing names to lower case."""
    return tuple(str(name).lower() for name in data.get(key, ()))


def _parse_wall_actions(names: list) -> Tuple[Effect, ...]:
    """Parse the wall action palette from effect names."""
    actions = []
    for name in names:
        try:
            effect = Effect(str(name))
        except ValueError:
            raise ValueError(f"Unknown wall action '{name}'") from None
        actions.append(effect)
    return tuple(actions)


def _validate_config(config: GeneratorConfig) -> None:
    """Validate configuration consistency."""
    probabilities = vars(config.probabilities)
    for name, value in probabilities.items():
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Probability '{name}' must be in [0, 1], got {value}")

    # Movables use a single draw split into harmful / neutral / useful bands
    if config.probabilities.useful_movable < config.probabilities.harmful_movable:
        raise ValueError(
            f"useful_movable ({config.probabilities.useful_movable}) must not be "
            f"below harmful_movable ({config.probabilities.harmful_movable})"
        )

    if not 0.0 <= config.roles.wall_percentage <= 1.0:
        raise ValueError(f"wall_percentage must be in [0, 1], got {config.roles.wall_percentage}")
    if config.roles.score_spike_fraction < 0.0:
        raise ValueError(
            f"score_spike_fraction must be non-negative, got {config.roles.score_spike_fraction}"
        )

    if config.selection.max_attempts <= 0:
        raise ValueError(f"max_attempts must be positive, got {config.selection.max_attempts}")

    for name in ("collectible", "catch", "survival"):
        timeout = getattr(config.timeouts, name)
        if timeout.base < 0 or timeout.step < 0 or timeout.steps < 0:
            raise ValueError(f"Timeout '{name}' must not have negative values: {timeout}")

    if not config.wall_actions:
        raise ValueError("wall_actions must contain at least one effect")
    for effect in config.wall_actions:
        if effect not in WALL_PALETTE:
            raise ValueError(f"'{effect.value}' is not a wall action")


def load_config(config_path: Optional[str] = None) -> GeneratorConfig:
    """
    Load and validate generator configuration from YAML.

    Args:
        config_path: Path to rule_config.yaml. If None, uses default location.

    Returns:
        Validated GeneratorConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    roles_data = raw["roles"]
    roles = RolesConfig(
        wall_percentage=float(roles_data["wall_percentage"]),
        score_spike_fraction=float(roles_data["score_spike_fraction"])
    )

    prob_data = raw["probabilities"]
    probabilities = ProbabilityConfig(
        door_collectible=float(prob_data["door_collectible"]),
        kill_if_has_less=float(prob_data["kill_if_has_less"]),
        kill_resource=float(prob_data["kill_resource"]),
        kill_resource_score=float(prob_data["kill_resource_score"]),
        destroy_wall=float(prob_data["destroy_wall"]),
        spike=float(prob_data["spike"]),
        double_npc=float(prob_data["double_npc"]),
        harmful_movable=float(prob_data["harmful_movable"]),
        useful_movable=float(prob_data["useful_movable"]),
        firewall=float(prob_data["firewall"]),
        random_npc=float(prob_data["random_npc"]),
        spawned=float(prob_data["spawned"]),
        bomber=float(prob_data["bomber"])
    )

    selection_data = raw.get("selection", {})
    selection = SelectionConfig(
        max_attempts=int(selection_data.get("max_attempts", 100))
    )

    timeout_data = raw["timeouts"]
    timeouts = TimeoutsConfig(
        collectible=_parse_timeout(timeout_data["collectible"]),
        catch=_parse_timeout(timeout_data["catch"]),
        survival=_parse_timeout(timeout_data["survival"])
    )

    subtype_data = raw["subtypes"]
    subtypes = SubtypeConfig(
        fleeing=_parse_family(subtype_data, "fleeing"),
        bomber=_parse_family(subtype_data, "bomber"),
        chaser=_parse_family(subtype_data, "chaser"),
        random=_parse_family(subtype_data, "random"),
        door=_parse_family(subtype_data, "door"),
        teleport=_parse_family(subtype_data, "teleport")
    )

    config = GeneratorConfig(
        roles=roles,
        probabilities=probabilities,
        selection=selection,
        timeouts=timeouts,
        subtypes=subtypes,
        wall_actions=_parse_wall_actions(raw["wall_actions"])
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GeneratorConfig] = None


def get_config() -> GeneratorConfig:
    """Get the cached generator configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GeneratorConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
