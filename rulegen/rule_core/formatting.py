"""
Rule Formatting
===============

Renders generated rule sets as rule-language text blocks.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from rulegen.rule_core.rules import RuleSet

INDENT = "    "


def render_sprite_sets(structure: Dict[str, List[str]]) -> str:
    """
    Render sprite set groups, one ``group > member member`` line each.

    Empty groups are skipped.
    """
    lines = [
        f"{INDENT}{group} > {' '.join(members)}"
        for group, members in structure.items()
        if members
    ]
    return "\n".join(lines)


def render_game_text(
    rule_set: RuleSet,
    structure: Optional[Dict[str, List[str]]] = None
) -> str:
    """
    Render the InteractionSet and TerminationSet blocks of a game.

    Args:
        rule_set: Generated rules.
        structure: Optional sprite set grouping, rendered as a leading
            ``SpriteSetStructure`` block.

    Returns:
        Game text with a trailing newline.
    """
    interactions, terminations = rule_set.to_vgdl()
    blocks = []

    if structure:
        sprite_sets = render_sprite_sets(structure)
        if sprite_sets:
            blocks.append("SpriteSetStructure\n" + sprite_sets)

    blocks.append("\n".join(["InteractionSet"] + [INDENT + line for line in interactions]))
    blocks.append("\n".join(["TerminationSet"] + [INDENT + line for line in terminations]))
    return "\n".join(blocks) + "\n"
