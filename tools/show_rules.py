"""
Rule Viewer
===========

Prints the rules generated for one game and seed.

Usage:
    python -m tools.show_rules --game aliens [--seed 42] [--format vgdl|json]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from rulegen.evaluation.run_eval import resolve_game
from rulegen.rule_core.config_loader import load_config
from rulegen.rule_core.formatting import render_game_text
from rulegen.rule_core.generator import RuleGenerator
from rulegen.rule_core.sprite_catalog import list_games


def describe_roles(generator: RuleGenerator) -> str:
    """One-line summary of the special sprites."""
    roles = generator.roles

    def name(sprite) -> str:
        return sprite.name if sprite is not None else "-"

    exits = ", ".join(e.name for e in roles.exits) or "-"
    return (f"wall={name(roles.wall)} score={name(roles.score)} "
            f"spike={name(roles.spike)} exits={exits} door={name(roles.door)}")


def main():
    parser = argparse.ArgumentParser(description="Show generated rules for a game")
    parser.add_argument(
        "--game",
        type=str,
        default=None,
        help=f"Game YAML path or sample name ({', '.join(list_games())})"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--config", type=str, default=None, help="Path to rule_config.yaml")
    parser.add_argument(
        "--format",
        choices=("vgdl", "json"),
        default="vgdl",
        help="Output format"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.game is None:
        print("Available games: " + ", ".join(list_games()))
        return 0

    try:
        game = resolve_game(args.game)
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    generator = RuleGenerator(game, config=config, seed=args.seed)
    rule_set = generator.generate()

    if args.format == "json":
        data = rule_set.to_dict()
        data["game"] = game.name
        data["seed"] = args.seed
        data["sprite_sets"] = generator.sprite_set_structure()
        print(json.dumps(data, indent=2))
    else:
        print(f"# {game.name} (seed {args.seed}): {describe_roles(generator)}")
        print(render_game_text(rule_set, generator.sprite_set_structure()), end="")

    return 0


if __name__ == "__main__":
    sys.exit(main())
