"""
Rule Core - The constructive rule generator.

This module analyzes a game level, classifies its sprites, and synthesizes
the interactions and termination conditions of a playable game.

Main exports:
- RuleGenerator: Orchestrates one generation per call
- LevelAnalyzer: Sprite inventory queries over a level
- GeneratorConfig: Configuration loaded from rule_config.yaml
- RuleSet, InteractionRule, TerminationRule: Generated rules
"""

from rulegen.rule_core.config_loader import GeneratorConfig, load_config
from rulegen.rule_core.sprite_catalog import (
    GameDescription,
    SpriteCategory,
    SpriteDescriptor,
    load_game,
    load_sample_game,
    parse_game,
)
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.rules import (
    EOS,
    Effect,
    InteractionRule,
    RuleSet,
    TerminationKind,
    TerminationRule,
)
from rulegen.rule_core.generator import RuleGenerator
from rulegen.rule_core.formatting import render_game_text

__all__ = [
    "GeneratorConfig",
    "load_config",
    "GameDescription",
    "SpriteCategory",
    "SpriteDescriptor",
    "load_game",
    "load_sample_game",
    "parse_game",
    "LevelAnalyzer",
    "EOS",
    "Effect",
    "InteractionRule",
    "RuleSet",
    "TerminationKind",
    "TerminationRule",
    "RuleGenerator",
    "render_game_text",
]
