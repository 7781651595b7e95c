"""
Static registry of rules and their fix providers.

Rules are registered explicitly when ``discard_rules`` is imported; there
is no package scanning. Each entry maps a rule identity to the rule (the
detector) and, optionally, its fix provider.
"""

import fnmatch
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .types import FixProvider, Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEntry:
    rule: Rule
    fix_provider: Optional[FixProvider] = None


class Registry:
    """Central registry for rules and fix providers."""

    def __init__(self):
        self._entries: Dict[str, RegistryEntry] = {}

    def register_rule(self, rule: Rule, fix_provider: Optional[FixProvider] = None) -> None:
        """Register a rule. Registering an id twice keeps the first entry."""
        if rule.meta.id in self._entries:
            logger.debug("Rule %s already registered", rule.meta.id)
            return
        self._entries[rule.meta.id] = RegistryEntry(rule, fix_provider)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        entry = self._entries.get(rule_id)
        return entry.rule if entry else None

    def get_fix_provider(self, rule_id: str) -> Optional[FixProvider]:
        entry = self._entries.get(rule_id)
        return entry.fix_provider if entry else None

    def get_all_rules(self) -> List[Rule]:
        return [entry.rule for entry in self._entries.values()]

    def get_rule_ids(self) -> List[str]:
        return list(self._entries)

    def get_enabled_rules(self, enabled_patterns: List[str], language: str) -> List[Rule]:
        """Rules for ``language`` that are enabled by default and match a pattern."""
        enabled = []
        for rule in self.get_all_rules():
            if language not in rule.meta.langs or not rule.meta.enabled_by_default:
                continue
            if any(fnmatch.fnmatch(rule.meta.id, pattern) for pattern in enabled_patterns):
                enabled.append(rule)
        return enabled

    def clear(self) -> None:
        """Clear all registered rules (mainly for testing)."""
        self._entries.clear()


# Global registry instance
_global_registry = Registry()


def register_rule(rule: Rule, fix_provider: Optional[FixProvider] = None) -> None:
    """Register a rule in the global registry."""
    _global_registry.register_rule(rule, fix_provider)


def get_rule(rule_id: str) -> Optional[Rule]:
    return _global_registry.get_rule(rule_id)


def get_fix_provider(rule_id: str) -> Optional[FixProvider]:
    return _global_registry.get_fix_provider(rule_id)


def get_all_rules() -> List[Rule]:
    return _global_registry.get_all_rules()


def get_rule_ids() -> List[str]:
    return _global_registry.get_rule_ids()


def get_enabled_rules(enabled_patterns: List[str], language: str) -> List[Rule]:
    return _global_registry.get_enabled_rules(enabled_patterns, language)


def clear() -> None:
    """Clear the global registry (mainly for testing)."""
    _global_registry.clear()

