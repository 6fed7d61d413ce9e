"""
Shared fixtures for the rule generator tests.

Provides the default configuration, probability overrides, and a small
builder for in-memory game descriptions.
"""

from dataclasses import replace

import pytest

from rulegen.rule_core.config_loader import load_config
from rulegen.rule_core.sprite_catalog import parse_game


def build_game(sprites, mapping, level, name="test"):
    """
    Build a GameDescription from compact test data.

    Args:
        sprites: List of (name, category, subtype, children) tuples.
        mapping: Dict of level character -> list of sprite names.
        level: List of level rows.
    """
    return parse_game({
        "name": name,
        "sprites": [
            {"name": n, "category": c, "subtype": s, "children": list(ch)}
            for n, c, s, ch in sprites
        ],
        "level_mapping": mapping,
        "level": level,
    })


def with_probabilities(config, **overrides):
    """Copy of ``config`` with some probabilities replaced."""
    return replace(config, probabilities=replace(config.probabilities, **overrides))


@pytest.fixture
def make_game():
    return build_game


@pytest.fixture
def override():
    return with_probabilities


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def calm_config(config):
    """Config where nothing random alters walls or destroys resources."""
    return with_probabilities(
        config,
        firewall=0.0,
        destroy_wall=0.0,
        kill_resource=0.0,
    )
