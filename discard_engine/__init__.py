"""
Discard-return engine package.

This package provides the immutable syntax tree, documents, resolvers and
registry that the discard-return rules run on. Parsing is done with
tree-sitter (see ``discard_engine.csharp_adapter``).
"""

from .types import (
    Diagnostic, Edit, FixAllResult, FixProvider, FixResult, LanguageAdapter, ReturnKind,
    Rule, RuleContext, RuleMeta, SemanticResolver, Severity, Span, Symbol,
)

from .syntax import (
    GreenNode, GreenToken, SyntaxArena, SyntaxNode, Trivia, lex_trivia, split_trivia,
)

from .document import Document

from .errors import (
    DiscardEngineError, FixError, InvalidFixTarget, ParserUnavailableError, StaleFixTarget,
    TreeBuildError,
)

from .registry import (
    register_rule, get_rule, get_fix_provider, get_all_rules, get_rule_ids, get_enabled_rules, clear,
)

from .config import (
    EngineConfig, load_config, get_default_config, save_config, find_config_file, configure_logging,
)

__all__ = [
    # Types
    "Diagnostic", "Edit", "FixAllResult", "FixProvider", "FixResult", "LanguageAdapter",
    "ReturnKind", "Rule", "RuleContext", "RuleMeta", "SemanticResolver", "Severity", "Span", "Symbol",

    # Syntax
    "GreenNode", "GreenToken", "SyntaxArena", "SyntaxNode", "Trivia", "lex_trivia", "split_trivia",
    "Document",

    # Errors
    "DiscardEngineError", "FixError", "InvalidFixTarget", "ParserUnavailableError",
    "StaleFixTarget", "TreeBuildError",

    # Registry
    "register_rule", "get_rule", "get_fix_provider", "get_all_rules", "get_rule_ids",
    "get_enabled_rules", "clear",

    # Config
    "EngineConfig", "load_config", "get_default_config", "save_config", "find_config_file",
    "configure_logging",
]
