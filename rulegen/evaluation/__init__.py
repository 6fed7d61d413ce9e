"""
Evaluation Package
==================

Contains the seed bank and the harness checking generated rule sets.
"""

from rulegen.evaluation.run_eval import check_rule_set, evaluate_game, load_seed_bank

__all__ = ["check_rule_set", "evaluate_game", "load_seed_bank"]
