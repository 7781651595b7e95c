"""
Persistent syntax tree for the discard-return engine.

Green elements are immutable, parent-free and stored in an append-only
``SyntaxArena`` where they are addressed by stable integer ids. Any number
of document versions share one arena: an edit appends the replacement and
the rebuilt ancestor chain, everything else is reused by id.

``SyntaxNode`` is the positioned facade over a green element. It knows its
document, its parent and its absolute offset, and is created on demand
while walking down from the root.
"""

import re
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .types import Span


# Trivia kinds
WHITESPACE = "whitespace"
END_OF_LINE = "end_of_line"
SINGLE_LINE_COMMENT = "single_line_comment"
MULTI_LINE_COMMENT = "multi_line_comment"
SKIPPED = "skipped"

# Token kind appended to every root so the text after the last token has an owner
END_OF_FILE = "end_of_file"

_TRIVIA_PATTERN = re.compile(
    r"(?P<single_line_comment>//[^\r\n]*)"
    r"|(?P<multi_line_comment>/\*.*?(?:\*/|\Z))"
    r"|(?P<end_of_line>\r\n|\n|\r)"
    r"|(?P<whitespace>[ \t\f\v\u00a0\ufeff]+)"
    r"|(?P<skipped>.)",
    re.DOTALL,
)


@dataclass(frozen=True)
class Trivia:
    """A piece of non-semantic text attached to a token boundary."""
    kind: str
    text: str

    @property
    def is_comment(self) -> bool:
        return self.kind in (SINGLE_LINE_COMMENT, MULTI_LINE_COMMENT)


TriviaList = Tuple[Trivia, ...]


def lex_trivia(text: str) -> TriviaList:
    """Split C-family trivia text into pieces that concatenate back to ``text``."""
    if not text:
        return ()
    return tuple(Trivia(match.lastgroup, match.group()) for match in _TRIVIA_PATTERN.finditer(text))


def split_trivia(pieces: TriviaList) -> Tuple[TriviaList, TriviaList]:
    """
    Split the trivia between two tokens into (trailing, leading).

    The previous token keeps everything up to and including the first end of
    line; whatever follows leads the next token.
    """
    for index, piece in enumerate(pieces):
        if piece.kind == END_OF_LINE:
            return pieces[:index + 1], pieces[index + 1:]
    return pieces, ()


def trivia_text(pieces: Sequence[Trivia]) -> str:
    return "".join(piece.text for piece in pieces)


def _as_trivia(value: Union[str, Sequence[Trivia], None]) -> TriviaList:
    if value is None:
        return ()
    if isinstance(value, str):
        return lex_trivia(value)
    return tuple(value)


@dataclass(frozen=True)
class GreenToken:
    kind: str
    text: str
    leading: TriviaList = ()
    trailing: TriviaList = ()

    @property
    def full_width(self) -> int:
        return len(trivia_text(self.leading)) + len(self.text) + len(trivia_text(self.trailing))

    def with_leading(self, leading: Union[str, Sequence[Trivia], None]) -> "GreenToken":
        return GreenToken(self.kind, self.text, _as_trivia(leading), self.trailing)

    def with_trailing(self, trailing: Union[str, Sequence[Trivia], None]) -> "GreenToken":
        return GreenToken(self.kind, self.text, self.leading, _as_trivia(trailing))


@dataclass(frozen=True)
class GreenNode:
    kind: str
    children: Tuple[int, ...]
    full_width: int


GreenElement = Union[GreenNode, GreenToken]


class SyntaxArena:
    """Append-only store of green elements.

    Ids are never reused or invalidated, so documents built from the same
    arena can be read concurrently while new versions are appended.
    """

    def __init__(self):
        self._elements: List[GreenElement] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._elements)

    def __getitem__(self, element_id: int) -> GreenElement:
        return self._elements[element_id]

    def add(self, element: GreenElement) -> int:
        with self._lock:
            self._elements.append(element)
            return len(self._elements) - 1

    def token(self, kind: str, text: str,
              leading: Union[str, Sequence[Trivia], None] = None,
              trailing: Union[str, Sequence[Trivia], None] = None) -> int:
        """Allocate a token. Trivia may be given as raw text or as pieces."""
        return self.add(GreenToken(kind, text, _as_trivia(leading), _as_trivia(trailing)))

    def node(self, kind: str, children: Sequence[int]) -> int:
        """Allocate an interior node over already allocated children."""
        children = tuple(children)
        width = sum(self._elements[child].full_width for child in children)
        return self.add(GreenNode(kind, children, width))


class SyntaxNode:
    """A green element positioned inside one document version."""

    __slots__ = ("document", "node_id", "parent", "position", "index")

    def __init__(self, document, node_id: int, parent: Optional["SyntaxNode"] = None,
                 position: int = 0, index: int = 0):
        self.document = document
        self.node_id = node_id
        self.parent = parent
        self.position = position
        self.index = index

    def __repr__(self):
        return f"SyntaxNode({self.kind!r}, {self.span.start}..{self.span.end}, id={self.node_id})"

    def __eq__(self, other):
        if not isinstance(other, SyntaxNode):
            return NotImplemented
        return (self.document is other.document and self.node_id == other.node_id
                and self.position == other.position)

    def __hash__(self):
        return hash((id(self.document), self.node_id, self.position))

    @property
    def green(self) -> GreenElement:
        return self.document.arena[self.node_id]

    @property
    def kind(self) -> str:
        return self.green.kind

    @property
    def is_token(self) -> bool:
        return isinstance(self.green, GreenToken)

    @property
    def children(self) -> List["SyntaxNode"]:
        green = self.green
        if isinstance(green, GreenToken):
            return []
        arena = self.document.arena
        result = []
        offset = self.position
        for index, child_id in enumerate(green.children):
            result.append(SyntaxNode(self.document, child_id, self, offset, index))
            offset += arena[child_id].full_width
        return result

    @property
    def full_span(self) -> Span:
        return Span(self.position, self.position + self.green.full_width)

    @property
    def span(self) -> Span:
        """Span of the node without the outer leading and trailing trivia."""
        full = self.full_span
        first = self.first_token()
        if first is None:
            return full
        last = self.last_token()
        start = full.start + len(trivia_text(first.green.leading))
        end = full.end - len(trivia_text(last.green.trailing))
        return Span(start, max(start, end))

    @property
    def leading_trivia(self) -> TriviaList:
        first = self.first_token()
        return first.green.leading if first is not None else ()

    @property
    def trailing_trivia(self) -> TriviaList:
        last = self.last_token()
        return last.green.trailing if last is not None else ()

    @property
    def full_text(self) -> str:
        return "".join(_render(self.document.arena, self.node_id))

    @property
    def text(self) -> str:
        full = self.full_span
        span = self.span
        return self.full_text[span.start - full.start:span.end - full.start]

    def first_token(self) -> Optional["SyntaxNode"]:
        return next(self.tokens(), None)

    def last_token(self) -> Optional["SyntaxNode"]:
        # Mirror of descendants(): visit the rightmost child first.
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_token:
                return node
            stack.extend(node.children)
        return None

    def ancestors(self, include_self: bool = False) -> Iterator["SyntaxNode"]:
        node = self if include_self else self.parent
        while node is not None:
            yield node
            node = node.parent

    def descendants(self, include_self: bool = True) -> Iterator["SyntaxNode"]:
        """Pre-order walk, which is document order."""
        stack = [self] if include_self else list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def tokens(self) -> Iterator["SyntaxNode"]:
        for node in self.descendants():
            if node.is_token:
                yield node


def _render(arena: SyntaxArena, node_id: int) -> Iterator[str]:
    stack = [node_id]
    while stack:
        green = arena[stack.pop()]
        if isinstance(green, GreenToken):
            yield trivia_text(green.leading)
            yield green.text
            yield trivia_text(green.trailing)
        else:
            stack.extend(reversed(green.children))


def rebuild_ancestors(node: SyntaxNode, replacement_id: int, stop_at: Optional[SyntaxNode] = None) -> int:
    """
    Path-copy the ancestors of ``node`` with ``replacement_id`` in its slot.

    Walks up to the root, or up to and including ``stop_at`` when given, and
    returns the id of the topmost rebuilt node. Siblings are shared by id.
    """
    arena = node.document.arena
    current_id = replacement_id
    current = node
    while current.parent is not None and current != stop_at:
        parent = current.parent
        children = list(arena[parent.node_id].children)
        children[current.index] = current_id
        current_id = arena.node(parent.kind, children)
        current = parent
    return current_id


def replace_token(node: SyntaxNode, token: SyntaxNode, new_token: GreenToken) -> int:
    """Return the id of a copy of ``node`` in which ``token`` is swapped for ``new_token``."""
    new_id = node.document.arena.add(new_token)
    if token == node:
        return new_id
    return rebuild_ancestors(token, new_id, stop_at=node)
