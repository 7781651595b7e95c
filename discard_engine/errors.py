"""
Exceptions raised by the discard-return engine.
"""

from typing import Optional

from .types import Span


class DiscardEngineError(Exception):
    """Base class for engine errors."""


class ParserUnavailableError(DiscardEngineError):
    """The tree-sitter grammar for a language could not be loaded."""


class FixError(DiscardEngineError):
    """A fix was abandoned; the document it targeted is left unchanged."""

    def __init__(self, message: str, span: Optional[Span] = None):
        super().__init__(message)
        self.span = span


class InvalidFixTarget(FixError):
    """The target does not resolve to a call wrapped in an expression statement."""


class StaleFixTarget(FixError):
    """The document changed shape at the target since the diagnostic was computed."""


class TreeBuildError(DiscardEngineError):
    """A parse tree could not be lowered into a lossless document."""
