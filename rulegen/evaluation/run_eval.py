"""
Evaluation Harness
==================

Generates a rule set for every seed of the seed bank and checks that each
generated game is well formed: it can be won, it can be lost whenever
something is harmful, and its rules only mention sprites the level has.

Usage:
    python -m rulegen.evaluation.run_eval --game zelda
    python -m rulegen.evaluation.run_eval --game path/to/game.yaml --output report.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from rulegen.rule_core.config_loader import GeneratorConfig, load_config
from rulegen.rule_core.generator import RuleGenerator
from rulegen.rule_core.rules import Effect, RuleSet, TerminationKind
from rulegen.rule_core.sprite_catalog import (
    GameDescription,
    games_dir,
    load_game,
)


@dataclass
class EvalResult:
    """Result for a single seed."""
    seed: int
    interaction_count: int
    termination_count: int
    win_condition: str
    has_loss: bool
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass
class EvalSummary:
    """Summary of evaluation across all seeds."""
    game: str
    mean_interactions: float
    std_interactions: float
    min_interactions: int
    max_interactions: int
    win_conditions: Dict[str, int]
    failed_seeds: List[int]
    total_time: float
    results: List[EvalResult]


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """
    Load the evaluation seed bank.

    Args:
        path: Path to seed_bank.json. Uses default if None.

    Returns:
        List of seeds.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r") as f:
        data = json.load(f)

    return [int(seed) for seed in data["seeds"]]


def resolve_game(game: str) -> GameDescription:
    """
    Load a game from a file path or a bundled sample game name.

    Raises:
        FileNotFoundError: If neither a file nor a sample game matches.
    """
    path = Path(game)
    if not path.exists():
        path = games_dir() / f"{game}.yaml"
    return load_game(str(path))


def win_condition_kind(generator: RuleGenerator, rule_set: RuleSet) -> str:
    """Name the win condition a rule set ended up with."""
    win = next((t for t in rule_set.terminations if t.win), None)
    if win is None:
        return "none"
    if win.kind is TerminationKind.TIMEOUT:
        return "survival"
    if win.kind is TerminationKind.MULTI_SPRITE_COUNTER:
        return "door_collectible"

    stype = win.stypes[0]
    door = generator.roles.door
    critical = generator.critical
    if door is not None and stype == door.name:
        return "door"
    if stype == critical.collectible:
        return "collectible"
    if stype == critical.npc_to_catch:
        return "catch"
    if stype == critical.enemy_npc:
        return "kill"
    return "other"


def check_rule_set(generator: RuleGenerator, rule_set: RuleSet) -> List[str]:
    """
    Structural checks on a generated rule set.

    Returns:
        Human-readable issues; empty when the rule set is well formed.
    """
    issues: List[str] = []
    analyzer = generator.analyzer
    roles = generator.roles

    if not rule_set.terminations:
        issues.append("empty termination list")
    elif not rule_set.has_win:
        issues.append("no win condition")

    live_avatars = [a.name for a in analyzer.avatars(live_only=True)]
    losses = [
        t.stypes[0] for t in rule_set.terminations
        if t.kind is TerminationKind.SPRITE_COUNTER and not t.win and t.stypes[0] in live_avatars
    ]
    if generator.context.has_hazards:
        if sorted(losses) != sorted(live_avatars):
            issues.append(f"loss conditions {losses} do not cover avatars {live_avatars}")
    elif losses:
        issues.append("loss condition without any harmful sprite")

    if roles.score is not None and roles.spike is not None and roles.score.name == roles.spike.name:
        issues.append(f"score and spike are both '{roles.score.name}'")

    effects = {rule.effect for rule in rule_set.interactions}
    if not analyzer.portals() and Effect.TELEPORT_TO_EXIT in effects:
        issues.append("teleportToExit without portals")
    if not analyzer.resources(live_only=True):
        resource_names = {r.name for r in analyzer.resources()}
        if Effect.COLLECT_RESOURCE in effects or any(
            rule.actor in resource_names or rule.target in resource_names
            for rule in rule_set.interactions
        ):
            issues.append("resource rules without resources in the level")

    return issues


def evaluate_single_seed(
    game: GameDescription,
    seed: int,
    config: Optional[GeneratorConfig] = None,
    verbose: bool = False
) -> EvalResult:
    """
    Generate and check the rules for a single seed.

    Args:
        game: Game description.
        seed: Random seed.
        config: Generator configuration. Uses default if None.
        verbose: If True, print progress.

    Returns:
        EvalResult for this seed.
    """
    generator = RuleGenerator(game, config=config, seed=seed)
    rule_set = generator.generate()

    result = EvalResult(
        seed=seed,
        interaction_count=len(rule_set.interactions),
        termination_count=len(rule_set.terminations),
        win_condition=win_condition_kind(generator, rule_set),
        has_loss=any(not t.win and t.kind is not TerminationKind.TIMEOUT for t in rule_set.terminations),
        issues=check_rule_set(generator, rule_set)
    )

    if verbose:
        status = "ok" if result.ok else "; ".join(result.issues)
        print(f"  Seed {seed}: interactions={result.interaction_count}, "
              f"win={result.win_condition}, loss={result.has_loss} [{status}]")

    return result


def evaluate_game(
    game: GameDescription,
    seeds: Optional[List[int]] = None,
    config: Optional[GeneratorConfig] = None,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate rule generation for a game on all seeds in the seed bank.

    Args:
        game: Game description.
        seeds: List of seeds. Uses seed_bank.json if None.
        config: Generator configuration. Uses default if None.
        verbose: If True, print progress.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if config is None:
        config = load_config()

    if verbose:
        print(f"Evaluating {game.name} on {len(seeds)} seeds...")

    results: List[EvalResult] = []
    total_start = time.time()

    for seed in seeds:
        results.append(evaluate_single_seed(game, seed, config=config, verbose=verbose))

    total_time = time.time() - total_start

    counts = np.array([r.interaction_count for r in results], dtype=np.int64)
    if counts.size == 0:
        counts = np.zeros(1, dtype=np.int64)

    summary = EvalSummary(
        game=game.name,
        mean_interactions=float(np.mean(counts)),
        std_interactions=float(np.std(counts)),
        min_interactions=int(np.min(counts)),
        max_interactions=int(np.max(counts)),
        win_conditions=dict(Counter(r.win_condition for r in results)),
        failed_seeds=[r.seed for r in results if not r.ok],
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("EVALUATION SUMMARY")
        print("=" * 50)
        print(f"Game:              {summary.game}")
        print(f"Seeds evaluated:   {len(seeds)}")
        print(f"Mean interactions: {summary.mean_interactions:.2f}")
        print(f"Std deviation:     {summary.std_interactions:.2f}")
        print(f"Min interactions:  {summary.min_interactions}")
        print(f"Max interactions:  {summary.max_interactions}")
        for kind, count in sorted(summary.win_conditions.items()):
            print(f"Win '{kind}':{' ' * max(1, 13 - len(kind))}{count}")
        print(f"Failed seeds:      {summary.failed_seeds or 'none'}")
        print(f"Total time:        {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(summary: EvalSummary, output_path: str) -> None:
    """Save evaluation results to JSON."""
    data = {
        "game": summary.game,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_interactions": summary.mean_interactions,
        "std_interactions": summary.std_interactions,
        "min_interactions": summary.min_interactions,
        "max_interactions": summary.max_interactions,
        "win_conditions": summary.win_conditions,
        "failed_seeds": summary.failed_seeds,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "interaction_count": r.interaction_count,
                "termination_count": r.termination_count,
                "win_condition": r.win_condition,
                "has_loss": r.has_loss,
                "issues": r.issues
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate generated rule sets for a game")
    parser.add_argument(
        "--game",
        type=str,
        required=True,
        help="Path to a game YAML file or name of a bundled sample game"
    )
    parser.add_argument(
        "--seeds",
        type=str,
        default=None,
        help="Path to seed bank JSON (uses default if not specified)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to rule_config.yaml (uses default if not specified)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable generator debug logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        game = resolve_game(args.game)
        config = load_config(args.config)
        seeds = load_seed_bank(args.seeds) if args.seeds else None
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    summary = evaluate_game(game, seeds=seeds, config=config, verbose=not args.quiet)

    if args.output:
        save_results(summary, args.output)

    return 0 if not summary.failed_seeds else 2


if __name__ == "__main__":
    sys.exit(main())
