"""
Tests for the seeded random source and bounded selection.
"""

import random

from rulegen.rule_core.rng import make_rng, select_with_retry


class TestMakeRng:

    def test_passes_instances_through(self):
        rng = random.Random(5)
        assert make_rng(rng) is rng

    def test_integer_seed_is_reproducible(self):
        a, b = make_rng(11), make_rng(11)
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]


class TestSelectWithRetry:
    """Test bounded live-candidate probing."""

    def test_empty_candidates_consume_nothing(self):
        """An empty list returns None without touching the random source."""
        rng = random.Random(1)
        state = rng.getstate()
        assert select_with_retry([], lambda name: True, rng, 100) is None
        assert rng.getstate() == state

    def test_gives_up_after_max_attempts(self):
        """Never-live candidates are probed exactly max_attempts times."""
        probes = []

        def is_live(name):
            probes.append(name)
            return False

        assert select_with_retry(["a", "b", "c"], is_live, random.Random(2), 100) is None
        assert len(probes) == 100

    def test_returns_live_candidate(self):
        """Only live candidates are returned."""
        live = {"b"}
        for seed in range(20):
            pick = select_with_retry(["a", "b", "c"], live.__contains__, random.Random(seed), 100)
            assert pick == "b"

    def test_deterministic(self):
        """The same seed yields the same pick."""
        picks = {
            select_with_retry(["a", "b", "c", "d"], lambda n: n != "a", random.Random(7), 100)
            for _ in range(5)
        }
        assert len(picks) == 1
