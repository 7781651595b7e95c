"""
Discard-return rules package.

Importing this package registers every rule, with its fix provider, in the
global registry of ``discard_engine``. The list below is the whole
registry; add new rules to it explicitly.
"""

from typing import List

from discard_engine.registry import register_rule
from discard_engine.types import Rule

from .discard_return_value import (
    FIX_PROVIDER, RULE_ID, DiscardReturnValueRule, analyze, apply_fix, fix_all, fix_edit,
    try_apply_fix,
)

RULES: List[Rule] = [DiscardReturnValueRule()]

FIX_PROVIDERS = {
    RULE_ID: FIX_PROVIDER,
}


def register_all() -> None:
    """Register every rule in the global registry. Safe to call repeatedly."""
    for rule in RULES:
        register_rule(rule, FIX_PROVIDERS.get(rule.meta.id))


register_all()


__all__ = [
    "RULES", "FIX_PROVIDERS", "RULE_ID", "register_all",
    "DiscardReturnValueRule", "analyze", "apply_fix", "try_apply_fix", "fix_edit", "fix_all",
]
