"""
RNG - Seeded Random Source and Bounded Selection
================================================

The generator draws every random decision from one ``random.Random``
instance, so a seed fully determines the generated rules.
"""

from __future__ import annotations

import random
from typing import Callable, Optional, Sequence, Union

SeedLike = Union[int, random.Random, None]


def make_rng(seed: SeedLike = None) -> random.Random:
    """
    Build the generator's random source.

    Args:
        seed: An integer seed, an existing Random instance (used as is),
            or None for a random seed.
    """
    if isinstance(seed, random.Random):
        return seed
    return random.Random(seed)


def select_with_retry(
    candidates: Sequence[str],
    is_live: Callable[[str], bool],
    rng: random.Random,
    max_attempts: int
) -> Optional[str]:
    """
    Draw random candidates until one satisfies ``is_live``.

    Every attempt is an independent uniform draw, so a candidate may be
    probed more than once.

    Args:
        candidates: Names to draw from.
        is_live: Predicate accepting a candidate.
        rng: Random source.
        max_attempts: Maximum number of draws.

    Returns:
        The accepted name, or None if the candidates are empty or no draw
        was accepted within ``max_attempts``.
    """
    if not candidates:
        return None
    for _ in range(max_attempts):
        name = candidates[rng.randrange(len(candidates))]
        if is_live(name):
            return name
    return None
