"""
Engine - Rule collection management and the apply/serialize phase.
"""

from .rule_engine import (
    RuleCollection,
    Transformer,
    apply_rules,
    resolve_selectors,
)

__all__ = [
    "RuleCollection",
    "Transformer",
    "apply_rules",
    "resolve_selectors",
]
