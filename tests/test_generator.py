"""
End-to-end tests for the rule generator.
"""

import random

import pytest

from rulegen.evaluation.run_eval import check_rule_set, win_condition_kind
from rulegen.rule_core.classification import ClassificationContext, CriticalEntities
from rulegen.rule_core.generator import RuleGenerator
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.roles import classify_roles
from rulegen.rule_core.rules import EOS, Effect, TerminationKind
from rulegen.rule_core.sprite_catalog import list_games, load_sample_game
from rulegen.rule_core.terminations import TerminationSynthesizer, draw_timeout


def lines(rule_set):
    interactions, terminations = rule_set.to_vgdl()
    return interactions + terminations


@pytest.fixture
def door_game(make_game):
    return make_game(
        [("hero", "avatar", "", []), ("wall", "immovable", "", []), ("door", "portal", "Door", [])],
        {"w": ["wall"], "A": ["hero"], "d": ["door"]},
        ["wwwww", "wA.dw", "wwwww"],
    )


@pytest.fixture
def empty_game(make_game):
    return make_game(
        [("hero", "avatar", "", []), ("wall", "immovable", "", [])],
        {"w": ["wall"], "A": ["hero"]},
        ["wwwww", "wA..w", "wwwww"],
    )


class TestDeterminism:
    """Test that a seed fully determines the output."""

    @pytest.mark.parametrize("name", ["aliens", "zelda", "chase", "butterflies"])
    def test_same_seed_same_rules(self, name, config):
        game = load_sample_game(name)
        for seed in (0, 7, 123):
            a = RuleGenerator(game, config=config, seed=seed).generate()
            b = RuleGenerator(game, config=config, seed=seed).generate()
            assert lines(a) == lines(b)

    def test_reseeded_generate(self, config):
        """generate(seed) reproduces the rules of that seed on the same instance."""
        generator = RuleGenerator(load_sample_game("butterflies"), config=config, seed=1)
        first = generator.generate(seed=99)
        generator.generate(seed=5)
        again = generator.generate(seed=99)
        assert lines(first) == lines(again)

    def test_accepts_random_instance(self, config):
        game = load_sample_game("zelda")
        a = RuleGenerator(game, config=config, seed=random.Random(4)).generate()
        b = RuleGenerator(game, config=config, seed=4).generate()
        assert lines(a) == lines(b)

    def test_accepts_analyzer(self, config):
        analyzer = LevelAnalyzer(load_sample_game("chase"))
        generator = RuleGenerator(analyzer, config=config, seed=0)
        assert generator.analyzer is analyzer

    def test_state_reset_between_calls(self, config):
        """Classification sets never leak from one call into the next."""
        generator = RuleGenerator(load_sample_game("aliens"), config=config, seed=3)
        generator.generate()
        first_context = generator.context
        generator.generate()
        assert generator.context is not first_context
        for bucket in (generator.context.harmful_objects, generator.context.collectibles):
            assert len(bucket) == len(set(bucket))


class TestInvariants:
    """Test properties every generated game must have."""

    @pytest.mark.parametrize("name", ["aliens", "zelda", "chase", "butterflies"])
    def test_sample_games_are_well_formed(self, name, config):
        game = load_sample_game(name)
        generator = RuleGenerator(game, config=config, seed=0)
        for seed in range(40):
            rule_set = generator.generate(seed=seed)
            assert rule_set.terminations
            assert rule_set.has_win
            assert check_rule_set(generator, rule_set) == []

    def test_no_teleport_without_portals(self, config):
        generator = RuleGenerator(load_sample_game("chase"), config=config)
        for seed in range(20):
            rule_set = generator.generate(seed=seed)
            effects = {r.effect for r in rule_set.interactions}
            assert Effect.TELEPORT_TO_EXIT not in effects
            assert Effect.COLLECT_RESOURCE not in effects

    def test_loss_only_for_live_avatars(self, make_game, override, config):
        """Each avatar present in the level gets one loss condition."""
        game = make_game(
            [
                ("hero", "avatar", "", []),
                ("ghost", "avatar", "", []),
                ("wall", "immovable", "", []),
                ("bat", "npc", "RandomNPC", []),
            ],
            {"w": ["wall"], "A": ["hero"], "b": ["bat"]},
            ["wwwwww", "wA.b.w", "wwwwww"],
        )
        generator = RuleGenerator(game, config=override(config, random_npc=1.0), seed=0)
        rule_set = generator.generate()
        losses = [t for t in rule_set.terminations if not t.win and t.kind is TerminationKind.SPRITE_COUNTER]
        assert [t.stypes for t in losses] == [("hero",)]

    def test_roles_fixed_across_calls(self, config):
        generator = RuleGenerator(load_sample_game("zelda"), config=config, seed=2)
        roles = generator.roles
        generator.generate(seed=10)
        generator.generate(seed=11)
        assert generator.roles is roles
        assert roles.wall_name == "wall"
        assert roles.door.name == "goal"


class TestScenarios:
    """Worked examples of the generator's behavior."""

    def test_door_level(self, door_game, config):
        """Reaching the door is the only goal; nothing can kill the avatar."""
        for seed in range(20):
            generator = RuleGenerator(door_game, config=config, seed=seed)
            rule_set = generator.generate()

            assert rule_set.interactions_between("hero", EOS)
            wall_rules = rule_set.interactions_between("hero", "wall")
            assert len(wall_rules) == 1
            assert wall_rules[0].effect in (
                Effect.STEP_BACK, Effect.KILL_SPRITE, Effect.KILL_IF_HAS_LESS
            )
            assert rule_set.interactions_between("door", "hero")[0].effect is Effect.KILL_SPRITE

            _, terminations = rule_set.to_vgdl()
            assert terminations == ["SpriteCounter stype=door limit=0 win=True"]

    def test_bomber_scenario(self, make_game, override, config):
        """Shooting the critical bomber is worth two points, its bombs one."""
        game = make_game(
            [
                ("hero", "avatar", "ShootAvatar", ["missile"]),
                ("missile", "movable", "Missile", []),
                ("alien", "npc", "Bomber", ["bomb"]),
                ("bomb", "movable", "Missile", []),
                ("wall", "immovable", "", []),
            ],
            {"w": ["wall"], "A": ["hero"], "n": ["alien"]},
            ["wwwwwww", "w..n..w", "w..A..w", "wwwwwww"],
        )
        generator = RuleGenerator(game, config=override(config, bomber=1.0), seed=0)
        rule_set = generator.generate()

        assert generator.context.harmful_npcs == ["alien"]
        assert "bomb" in generator.context.harmful_objects
        assert generator.critical.enemy_npc == "alien"
        assert rule_set.interactions_between("alien", "missile")[0].score_change == 2
        assert rule_set.interactions_between("bomb", "missile")[0].score_change == 1
        assert rule_set.interactions_between("missile", "alien")[0].effect is Effect.KILL_SPRITE

        win = [t for t in rule_set.terminations if t.win]
        assert win[0].to_vgdl() == "SpriteCounter stype=alien limit=0 win=True"
        assert "SpriteCounter stype=hero limit=0 win=False" in rule_set.to_vgdl()[1]

    def test_survival_fallback(self, empty_game, config):
        """With nothing to reach, collect, catch or kill, the avatar must survive."""
        seen = set()
        for seed in range(30):
            rule_set = RuleGenerator(empty_game, config=config, seed=seed).generate()
            assert len(rule_set.terminations) == 1
            timeout = rule_set.terminations[0]
            assert timeout.kind is TerminationKind.TIMEOUT
            assert timeout.win
            assert 500 <= timeout.limit <= 1100
            assert timeout.limit % 100 == 0
            seen.add(timeout.limit)
        assert len(seen) > 1

    def test_door_after_collectibles(self, make_game, override, config):
        """With a door and a coin, the door may require collecting first."""
        game = make_game(
            [
                ("hero", "avatar", "", []),
                ("wall", "immovable", "", []),
                ("coin", "immovable", "", []),
                ("door", "portal", "Door", []),
            ],
            {"w": ["wall"], "A": ["hero"], "c": ["coin"], "d": ["door"]},
            ["wwwwwwwwww", "wA..c...dw", "w........w", "w........w", "wwwwwwwwww"],
        )
        generator = RuleGenerator(game, config=override(config, door_collectible=1.0), seed=0)
        rule_set = generator.generate()
        first, second = rule_set.terminations[:2]
        assert first.to_vgdl() == "MultiSpriteCounter stype1=coin stype2=door limit=0 win=True"
        assert second.kind is TerminationKind.TIMEOUT and not second.win
        assert 2000 <= second.limit <= 2500


class TestTerminations:
    """Test the win-condition tree in isolation."""

    @pytest.fixture
    def synth(self, config):
        analyzer = LevelAnalyzer(load_sample_game("chase"))
        roles = classify_roles(analyzer, random.Random(0), config)
        return TerminationSynthesizer(analyzer, roles, config)

    def test_catch_branch(self, synth):
        context = ClassificationContext(critical=CriticalEntities(npc_to_catch="goat"))
        terminations = synth.synthesize(context, random.Random(0))
        assert terminations[0].to_vgdl() == "SpriteCounter stype=goat limit=0 win=True"
        assert 1000 <= terminations[1].limit <= 1500
        assert len(terminations) == 2

    def test_enemy_requires_shooting(self, synth):
        """The chase avatar cannot shoot, so an enemy does not make a goal."""
        assert not synth.avatar_can_shoot
        context = ClassificationContext(critical=CriticalEntities(enemy_npc="angry"))
        context.mark_harmful_npc("angry")
        terminations = synth.synthesize(context, random.Random(0))
        assert terminations[0].kind is TerminationKind.TIMEOUT and terminations[0].win
        assert terminations[1].to_vgdl() == "SpriteCounter stype=avatar limit=0 win=False"

    def test_collectible_precedes_catch(self, synth):
        context = ClassificationContext(
            critical=CriticalEntities(npc_to_catch="goat", collectible="coin")
        )
        terminations = synth.synthesize(context, random.Random(0))
        assert 2000 <= terminations[1].limit <= 2500

    def test_draw_timeout_range(self, config):
        rng = random.Random(0)
        limits = {draw_timeout(config.timeouts.catch, rng) for _ in range(200)}
        assert limits == {1000, 1100, 1200, 1300, 1400, 1500}

    def test_chase_is_won_by_catching(self, config):
        """A live fleeing NPC with no other collectible makes a catch goal."""
        generator = RuleGenerator(load_sample_game("chase"), config=config)
        for seed in range(50):
            rule_set = generator.generate(seed=seed)
            assert generator.critical.npc_to_catch == "goat"
            assert generator.critical.collectible is None
            assert win_condition_kind(generator, rule_set) == "catch"
            catch, timeout = rule_set.terminations[:2]
            assert catch.to_vgdl() == "SpriteCounter stype=goat limit=0 win=True"
            assert timeout.kind is TerminationKind.TIMEOUT and not timeout.win
            assert 1000 <= timeout.limit <= 1500

    def test_fleeing_npc_is_never_the_critical_collectible(self, make_game, config):
        """With a coin and a fleeing goat, the coin anchors the collect goal."""
        game = make_game(
            [
                ("hero", "avatar", "", []),
                ("wall", "immovable", "", []),
                ("coin", "immovable", "", []),
                ("goat", "npc", "Fleeing", ["hero"]),
            ],
            {"w": ["wall"], "A": ["hero"], "c": ["coin"], "g": ["goat"]},
            ["wwwwwwwwww", "wA..c...gw", "w........w", "w........w", "wwwwwwwwww"],
        )
        generator = RuleGenerator(game, config=config)
        for seed in range(30):
            rule_set = generator.generate(seed=seed)
            assert "goat" in generator.context.collectibles
            assert generator.critical.collectible == "coin"
            assert generator.critical.npc_to_catch == "goat"
            assert win_condition_kind(generator, rule_set) == "collectible"


class TestSpriteSets:

    def test_structure_groups(self, config):
        generator = RuleGenerator(load_sample_game("chase"), config=config, seed=0)
        generator.generate()
        structure = generator.sprite_set_structure()
        assert structure["fleeing"] == ["goat"]
        assert "goat" not in structure.get("collectible", [])

    @pytest.mark.parametrize("name", list_games())
    def test_names_listed_once(self, name, config):
        generator = RuleGenerator(load_sample_game(name), config=config, seed=1)
        generator.generate()
        names = [n for members in generator.sprite_set_structure().values() for n in members]
        assert len(names) == len(set(names))
