"""
Core types for the discard-return engine.

This module provides shared dataclasses and protocols used across the
engine, the language adapter, the resolver and the rules.
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Protocol, Tuple


Severity = Literal["info", "warn", "error"]


@dataclass(frozen=True, order=True)
class Span:
    """Half-open character range ``[start, end)`` in a rendered document."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def __str__(self):
        return f"[{self.start}..{self.end})"


@dataclass(frozen=True)
class Edit:
    """A text edit equivalent to one applied fix."""
    start: int
    end: int
    replacement: str

    def apply(self, text: str) -> str:
        return text[:self.start] + self.replacement + text[self.end:]


class ReturnKind(enum.Enum):
    VOID = "void"
    NON_VOID = "non_void"


@dataclass(frozen=True)
class Symbol:
    """A callable resolved for an invocation."""
    name: str
    return_type: str
    return_kind: ReturnKind
    span: Optional[Span] = None


class SemanticResolver(Protocol):
    """Maps invocations to callable symbols. Must be safe for concurrent reads."""

    def resolve(self, invocation: Any) -> Optional[Symbol]:
        """Return the symbol called by ``invocation``, or None when unresolved."""
        ...

    def return_kind(self, symbol: Symbol) -> ReturnKind:
        ...


@dataclass(frozen=True)
class Diagnostic:
    """One flagged location."""
    rule_id: str
    message: str
    span: Span
    severity: Severity = "warn"
    target: Any = field(default=None, compare=False, repr=False)
    file: str = "<memory>"

    def to_dict(self) -> Dict[str, Any]:
        """Record handed to a diagnostic sink."""
        record = {
            "rule_id": self.rule_id,
            "message": self.message,
            "severity": self.severity,
            "file_path": self.file,
            "start": self.span.start,
            "end": self.span.end,
        }
        if self.target is not None:
            line, col = self.target.document.line_col(self.span.start)
            record["line"] = line
            record["column"] = col
        return record


@dataclass(frozen=True)
class RuleMeta:
    """Metadata about a rule, as registered with a diagnostic sink.

    Attributes:
        id: Fixed rule identity (e.g., "DiscardReturnValueAnalyzer")
        category: Rule category for grouping
        default_severity: Severity findings are reported with
        enabled_by_default: Whether hosts run the rule without opting in
        title: Short human-readable title
        message_format: ``str.format`` template, ``{0}`` is the flagged text
        description: Longer explanation
        langs: Supported languages
    """
    id: str
    category: str
    default_severity: Severity = "warn"
    enabled_by_default: bool = True
    title: str = ""
    message_format: str = "{0}"
    description: str = ""
    langs: List[str] = None

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', [])


@dataclass
class RuleContext:
    """Context passed to rules during execution."""
    document: Any
    resolver: SemanticResolver
    config: Any = None

    @property
    def file_path(self) -> str:
        return self.document.file_path

    @property
    def language(self) -> str:
        return self.document.language


class Rule(Protocol):
    """Protocol for all rules in the engine.

    Rules analyze a document and return diagnostics. They should be stateless and thread-safe.
    """
    meta: RuleMeta

    def visit(self, ctx: RuleContext) -> Iterable[Diagnostic]:
        ...


@dataclass(frozen=True)
class FixResult:
    """Outcome of one fix. On failure ``document`` is the input, unchanged."""
    document: Any
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FixAllResult:
    document: Any
    applied: List[Diagnostic]
    skipped: List[Tuple[Diagnostic, Exception]]


@dataclass(frozen=True)
class FixProvider:
    """Fix descriptor registered against a rule identity."""
    title: str
    equivalence_key: str
    apply_fix: Callable[..., Any]
    fix_all: Optional[Callable[..., FixAllResult]] = None


class LanguageAdapter(ABC):
    """Abstract base class for language adapters."""

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return the language identifier (e.g., 'csharp')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions (e.g., ('.cs',))."""
        pass

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse text and return a Tree-sitter tree."""
        pass

    @abstractmethod
    def build_document(self, text: str, file_path: str = "<memory>") -> Any:
        """Parse text into an immutable, trivia-carrying Document."""
        pass

    @abstractmethod
    def list_files(self, paths: List[str], exclude_dirs: Iterable[str] = ()) -> List[str]:
        """List all files matching this adapter's extensions in the given paths."""
        pass
