"""
Immutable documents over a shared syntax arena.
"""

import bisect
from typing import Optional, Tuple, Union

from .syntax import GreenElement, SyntaxArena, SyntaxNode, rebuild_ancestors
from .types import Span


class Document:
    """One version of a source file.

    A document never changes after construction. ``with_replaced_node``
    returns a new version that shares the arena and every subtree not on the
    path from the root to the replaced node.
    """

    def __init__(self, arena: SyntaxArena, root_id: int, file_path: str = "<memory>",
                 language: str = "csharp"):
        self.arena = arena
        self.root_id = root_id
        self.file_path = file_path
        self.language = language
        self._text: Optional[str] = None
        self._line_starts = None

    def __repr__(self):
        return f"Document({self.file_path!r}, root={self.root_id})"

    @property
    def root(self) -> SyntaxNode:
        return SyntaxNode(self, self.root_id)

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = self.root.full_text
        return self._text

    def find_token(self, offset: int) -> Optional[SyntaxNode]:
        """Return the token whose full span contains ``offset``.

        An offset at the very end of the document maps to the last token.
        """
        node = self.root
        if offset < 0 or offset > node.full_span.end:
            return None
        while not node.is_token:
            children = node.children
            chosen = None
            for child in children:
                if child.full_span.contains(offset):
                    chosen = child
                    break
            if chosen is None:
                # Offset at the end or only zero-width children left.
                non_empty = [child for child in children if child.full_span.length > 0]
                if not non_empty:
                    return None
                chosen = non_empty[-1]
            node = chosen
        return node

    def with_replaced_node(self, old: SyntaxNode, new: Union[int, GreenElement]) -> "Document":
        """Return a new document in which ``old`` is replaced by ``new``.

        ``new`` is a green element or the id of one already in this
        document's arena. Only the ancestors of ``old`` are rebuilt.
        """
        if old.document is not self:
            raise ValueError(f"{old!r} does not belong to {self!r}")
        new_id = new if isinstance(new, int) else self.arena.add(new)
        root_id = rebuild_ancestors(old, new_id)
        return Document(self.arena, root_id, self.file_path, self.language)

    def line_col(self, offset: int) -> Tuple[int, int]:
        """Convert a character offset to a 1-based (line, column)."""
        if self._line_starts is None:
            starts = [0]
            for index, char in enumerate(self.text):
                if char == "\n":
                    starts.append(index + 1)
            self._line_starts = starts
        offset = max(0, min(offset, len(self.text)))
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def span_text(self, span: Span) -> str:
        return self.text[span.start:span.end]
