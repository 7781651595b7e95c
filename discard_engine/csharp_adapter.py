"""
C# language adapter for tree-sitter.

Parses C# with tree-sitter and lowers the concrete syntax tree into an
immutable ``Document``. Tree-sitter leaves become tokens; the text between
two tokens (whitespace, comments) becomes trivia of the neighbouring
tokens, so rendering the document reproduces the source exactly.
"""

import logging
import os
from typing import Any, Iterable, List, Tuple

import tree_sitter

from .document import Document
from .errors import ParserUnavailableError, TreeBuildError
from .syntax import END_OF_FILE, SyntaxArena, lex_trivia, split_trivia
from .types import LanguageAdapter

logger = logging.getLogger(__name__)

# Nodes kept whole even when tree-sitter gives them children
ATOMIC_TOKEN_TYPES = {
    "string_literal", "verbatim_string_literal", "raw_string_literal",
    "character_literal", "interpolated_string_expression",
}

# Extras that are folded into trivia
TRIVIA_TYPES = {"comment"}

DEFAULT_EXCLUDE_DIRS = ("bin", "obj", "node_modules", "packages", "__pycache__")


class CSharpAdapter(LanguageAdapter):
    """Tree-sitter adapter for C# language."""

    def __init__(self):
        self._parser = None

    @property
    def language_id(self) -> str:
        return "csharp"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        return (".cs",)

    def _get_parser(self):
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            try:
                from tree_sitter_c_sharp import language
            except ImportError as e:
                raise ParserUnavailableError(f"tree-sitter-c-sharp not available: {e}") from e

            parser = tree_sitter.Parser()
            parser.language = tree_sitter.Language(language())
            self._parser = parser
            logger.debug("C# parser initialized")
        return self._parser

    def parse(self, text: str) -> Any:
        """Parse text and return a Tree-sitter tree."""
        return self._get_parser().parse(text.encode('utf-8'))

    def build_document(self, text: str, file_path: str = "<memory>") -> Document:
        tree = self.parse(text)
        source = text.encode('utf-8')

        leaves: List[Any] = []
        for child in tree.root_node.children:
            _collect_leaves(child, leaves)

        # Distribute the gaps between leaves over leading/trailing trivia.
        leading = [()] * len(leaves)
        trailing = [()] * len(leaves)
        previous_end = 0
        for index, leaf in enumerate(leaves):
            gap = lex_trivia(source[previous_end:leaf.start_byte].decode('utf-8'))
            if index == 0:
                leading[index] = gap
            else:
                trailing[index - 1], leading[index] = split_trivia(gap)
            previous_end = max(previous_end, leaf.end_byte)

        tail = lex_trivia(source[previous_end:].decode('utf-8'))
        if leaves:
            trailing[-1], eof_leading = split_trivia(tail)
        else:
            eof_leading = tail

        arena = SyntaxArena()
        token_ids = [
            arena.token(leaf.type, source[leaf.start_byte:leaf.end_byte].decode('utf-8'),
                        leading[index], trailing[index])
            for index, leaf in enumerate(leaves)
        ]
        token_iter = iter(token_ids)
        root_children = list(_lower_children(tree.root_node, arena, token_iter))
        root_children.append(arena.token(END_OF_FILE, "", eof_leading))
        root_id = arena.node(tree.root_node.type, root_children)

        document = Document(arena, root_id, file_path, self.language_id)
        if document.text != text:
            # Overlapping leaves (error recovery) can reorder text; never hand out such a tree.
            raise TreeBuildError(f"could not build a lossless tree for {file_path}")
        return document

    def list_files(self, paths: List[str], exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS) -> List[str]:
        """List all C# files in the given paths."""
        exclude_dirs = set(exclude_dirs)
        cs_files = []

        for path in paths:
            if os.path.isfile(path):
                if any(path.endswith(ext) for ext in self.file_extensions):
                    cs_files.append(path)
            elif os.path.isdir(path):
                for root, dirs, files in os.walk(path):
                    dirs[:] = [d for d in dirs if not d.startswith('.') and d not in exclude_dirs]

                    for file in files:
                        if any(file.endswith(ext) for ext in self.file_extensions):
                            cs_files.append(os.path.join(root, file))

        return sorted(set(cs_files))


def _is_leaf(node) -> bool:
    return node.child_count == 0 or node.type in ATOMIC_TOKEN_TYPES


def _collect_leaves(node, out: List[Any]) -> None:
    if node.type in TRIVIA_TYPES:
        return
    if _is_leaf(node):
        out.append(node)
        return
    for child in node.children:
        _collect_leaves(child, out)


def _lower_children(node, arena: SyntaxArena, token_iter) -> Iterable[int]:
    """Yield green ids for the children of ``node``, in the order _collect_leaves saw them."""
    for child in node.children:
        if child.type in TRIVIA_TYPES:
            continue
        if _is_leaf(child):
            yield next(token_iter)
        else:
            yield arena.node(child.type, list(_lower_children(child, arena, token_iter)))


def parse_document(text: str, file_path: str = "<memory>") -> Document:
    """Build a C# document with the default adapter."""
    return default_csharp_adapter.build_document(text, file_path)


# Default instance
default_csharp_adapter = CSharpAdapter()
