"""
Tests for rule records and their text rendering.
"""

import pytest

from rulegen.rule_core.formatting import render_game_text, render_sprite_sets
from rulegen.rule_core.rules import (
    EOS,
    Effect,
    InteractionRule,
    RuleSet,
    TerminationKind,
    TerminationRule,
)


@pytest.fixture
def rule_set():
    return RuleSet(
        interactions=[
            InteractionRule("avatar", EOS, Effect.STEP_BACK),
            InteractionRule("coin", "avatar", Effect.KILL_SPRITE, score_change=1),
            InteractionRule("avatar", "wall", Effect.KILL_IF_HAS_LESS, resource="key", limit=2),
        ],
        terminations=[
            TerminationRule.sprite_counter("coin", win=True),
            TerminationRule.timeout(2300, win=False),
        ],
    )


class TestRules:
    """Test rule records."""

    def test_interaction_lines(self, rule_set):
        interactions, _ = rule_set.to_vgdl()
        assert interactions == [
            "avatar EOS > stepBack",
            "coin avatar > killSprite scoreChange=1",
            "avatar wall > killIfHasLess resource=key limit=2",
        ]

    def test_negative_score(self):
        rule = InteractionRule("key", "sword", Effect.KILL_SPRITE, score_change=-1)
        assert str(rule) == "key sword > killSprite scoreChange=-1"

    def test_transform_needs_stype(self):
        with pytest.raises(ValueError, match="stype"):
            InteractionRule("sheep", "wolf", Effect.TRANSFORM_TO)

    def test_kill_if_has_less_needs_resource(self):
        with pytest.raises(ValueError, match="resource"):
            InteractionRule("avatar", "wall", Effect.KILL_IF_HAS_LESS, limit=1)

    def test_termination_lines(self):
        multi = TerminationRule.multi_sprite_counter("coin", "door", win=True)
        assert multi.kind is TerminationKind.MULTI_SPRITE_COUNTER
        assert multi.to_vgdl() == "MultiSpriteCounter stype1=coin stype2=door limit=0 win=True"
        assert str(TerminationRule.timeout(600, win=True)) == "Timeout limit=600 win=True"

    def test_has_win(self, rule_set):
        assert rule_set.has_win
        assert not RuleSet(terminations=[TerminationRule.timeout(500, win=False)]).has_win

    def test_to_dict(self, rule_set):
        data = rule_set.to_dict()
        assert data["interactions"][1] == {
            "actor": "coin",
            "target": "avatar",
            "effect": "killSprite",
            "params": {"scoreChange": 1},
        }
        assert data["terminations"][0] == {
            "kind": "SpriteCounter",
            "stypes": ["coin"],
            "limit": 0,
            "win": True,
        }


class TestRendering:
    """Test game text output."""

    def test_game_text(self, rule_set):
        text = render_game_text(rule_set)
        assert text == (
            "InteractionSet\n"
            "    avatar EOS > stepBack\n"
            "    coin avatar > killSprite scoreChange=1\n"
            "    avatar wall > killIfHasLess resource=key limit=2\n"
            "TerminationSet\n"
            "    SpriteCounter stype=coin limit=0 win=True\n"
            "    Timeout limit=2300 win=False\n"
        )

    def test_sprite_sets_block(self, rule_set):
        text = render_game_text(rule_set, {"fleeing": ["goat"], "collectible": ["coin", "gem"]})
        assert text.startswith(
            "SpriteSetStructure\n"
            "    fleeing > goat\n"
            "    collectible > coin gem\n"
            "InteractionSet\n"
        )

    def test_empty_groups_skipped(self):
        assert render_sprite_sets({"harmful": [], "collectible": ["coin"]}) == "    collectible > coin"
