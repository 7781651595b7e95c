"""
C# symbol resolution for invocations.

Two resolvers are provided:

- ``CSharpSymbolResolver`` indexes the methods and local functions declared
  in one document and resolves calls made to them by simple name, through
  ``this.``/``base.`` or with explicit type arguments. Calls on any other
  receiver, and calls to names the document does not declare, are left
  unresolved.
- ``StaticSymbolResolver`` answers from a fixed ``name -> return type``
  table supplied by the host, for when richer semantic information lives
  outside the engine.

Overloads that disagree on whether they return a value are unresolved.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from .syntax import SyntaxNode
from .types import ReturnKind, Symbol

logger = logging.getLogger(__name__)

DECLARATION_TYPES = {"method_declaration", "local_function_statement"}

# Tokens that may sit between the return type and the parameter list
_NAME_SUFFIX_TYPES = {"type_parameter_list"}
_NAME_PREFIX_TYPES = {"explicit_interface_specifier"}

SELF_RECEIVERS = {"this", "base"}


def return_kind_for_type(type_text: str) -> ReturnKind:
    return ReturnKind.VOID if type_text.strip() == "void" else ReturnKind.NON_VOID


def invocation_callee(invocation: SyntaxNode) -> Optional[str]:
    """
    Name used to resolve an invocation, or None when the callee has a foreign receiver.

    ``Foo()`` and ``Foo<T>()`` give ``Foo``; ``this.Foo()`` and ``base.Foo()``
    give ``Foo``; ``other.Foo()`` gives None.
    """
    children = invocation.children
    if not children:
        return None
    return _simple_name(children[0], allow_member_access=True)


def _simple_name(node: SyntaxNode, allow_member_access: bool = False) -> Optional[str]:
    if node.kind == "identifier":
        return node.text
    if node.kind == "generic_name":
        children = node.children
        return children[0].text if children else None
    if allow_member_access and node.kind == "member_access_expression":
        children = node.children
        if len(children) < 3 or children[0].text not in SELF_RECEIVERS:
            return None
        return _simple_name(children[-1])
    return None


def declaration_signature(declaration: SyntaxNode) -> Optional[Tuple[str, str]]:
    """Return ``(name, return_type_text)`` for a method or local function declaration."""
    children = declaration.children
    kinds = [child.kind for child in children]
    if "parameter_list" not in kinds:
        return None
    index = kinds.index("parameter_list") - 1
    if index >= 0 and kinds[index] in _NAME_SUFFIX_TYPES:
        index -= 1
    if index < 1 or kinds[index] != "identifier":
        return None
    name = children[index].text
    index -= 1
    if kinds[index] in _NAME_PREFIX_TYPES:
        index -= 1
    if index < 0:
        return None
    return name, children[index].text


class CSharpSymbolResolver:
    """Resolves invocations against the declarations of one document.

    The index is built once in the constructor and only read afterwards,
    so one instance can serve concurrent analyses of that document.
    """

    def __init__(self, document):
        self.document = document
        self._symbols: Dict[str, List[Symbol]] = {}
        self._build_index()

    def _build_index(self):
        for node in self.document.root.descendants():
            if node.kind not in DECLARATION_TYPES:
                continue
            signature = declaration_signature(node)
            if signature is None:
                logger.debug("Could not read signature of %s in %s", node.kind, self.document.file_path)
                continue
            name, return_type = signature
            self._symbols.setdefault(name, []).append(
                Symbol(name, return_type, return_kind_for_type(return_type), node.span)
            )

    @property
    def declared_names(self) -> List[str]:
        return sorted(self._symbols)

    def resolve(self, invocation: SyntaxNode) -> Optional[Symbol]:
        name = invocation_callee(invocation)
        if name is None:
            return None
        candidates = self._symbols.get(name)
        if not candidates:
            return None
        if len({symbol.return_kind for symbol in candidates}) > 1:
            logger.debug("Ambiguous overloads for %s in %s", name, self.document.file_path)
            return None
        return candidates[0]

    def return_kind(self, symbol: Symbol) -> ReturnKind:
        return symbol.return_kind


class StaticSymbolResolver:
    """Resolves invocations from a ``callee name -> return type`` mapping."""

    def __init__(self, return_types: Mapping[str, str]):
        self._symbols = {
            name: Symbol(name, return_type, return_kind_for_type(return_type))
            for name, return_type in return_types.items()
        }

    def resolve(self, invocation: SyntaxNode) -> Optional[Symbol]:
        name = invocation_callee(invocation)
        if name is None:
            return None
        return self._symbols.get(name)

    def return_kind(self, symbol: Symbol) -> ReturnKind:
        return symbol.return_kind
