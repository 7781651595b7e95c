# discard_rules/discard_return_value.py
"""
Rule to detect calls whose non-void return value is silently discarded.

A call used as a bare expression statement (``GetValue();``) throws its
result away implicitly. The rule flags such statements when the resolver
knows the callee returns a value, and the fix rewrites them to an explicit
discard (``_ = GetValue();``) without touching any surrounding trivia.

Calls the resolver cannot resolve (for example calls into other
assemblies) are never flagged.
"""

import logging
from typing import List, Optional, Union

from discard_engine.document import Document
from discard_engine.errors import FixError, InvalidFixTarget, StaleFixTarget
from discard_engine.syntax import SyntaxNode, replace_token
from discard_engine.types import (
    Diagnostic, Edit, FixAllResult, FixProvider, FixResult, ReturnKind, RuleContext,
    RuleMeta, SemanticResolver, Span,
)

logger = logging.getLogger(__name__)

RULE_ID = "DiscardReturnValueAnalyzer"

# Language-specific call expression node types
CALL_EXPRESSION_TYPES = {
    "csharp": {"invocation_expression"},
}

# Language-specific statement node types whose value is discarded
EXPRESSION_STATEMENT_TYPES = {
    "csharp": {"expression_statement"},
}

# Language-specific discard binding
DISCARD_NAMES = {
    "csharp": "_",
}

ASSIGNMENT_EXPRESSION_TYPE = "assignment_expression"

FixTarget = Union[Diagnostic, SyntaxNode, Span]


class DiscardReturnValueRule:
    """Rule to detect non-void calls used as bare statements."""

    meta = RuleMeta(
        id=RULE_ID,
        category="Naming",
        default_severity="warn",
        enabled_by_default=True,
        title="Return value is discarded implicitly",
        message_format="The return value of '{0}' is discarded implicitly; assign it to '_' to discard it explicitly",
        description="Flags calls whose non-void result is dropped by a bare expression statement.",
        langs=["csharp"],
    )

    def visit(self, ctx: RuleContext) -> List[Diagnostic]:
        diagnostics = analyze(ctx.document.root, ctx.resolver)
        limit = getattr(ctx.config, "max_findings_per_file", None)
        if limit is not None and len(diagnostics) > limit:
            logger.warning("Dropping %d of %d findings in %s over max_findings_per_file=%d",
                           len(diagnostics) - limit, len(diagnostics), ctx.file_path, limit)
            diagnostics = diagnostics[:limit]
        return diagnostics


def analyze(root: SyntaxNode, resolver: SemanticResolver) -> List[Diagnostic]:
    """
    Flag every invocation under ``root`` whose non-void value is discarded.

    Returns diagnostics in document order. The result depends only on the
    tree and the resolver, so repeated calls give identical output.
    """
    document = root.document
    call_types = CALL_EXPRESSION_TYPES.get(document.language)
    if call_types is None:
        logger.debug("No call expression types for language %s", document.language)
        return []
    statement_types = EXPRESSION_STATEMENT_TYPES[document.language]

    diagnostics = []
    for node in root.descendants():
        if node.kind not in call_types:
            continue
        diagnostic = _analyze_invocation(node, resolver, statement_types)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
    return diagnostics


def _analyze_invocation(invocation: SyntaxNode, resolver: SemanticResolver,
                        statement_types) -> Optional[Diagnostic]:
    try:
        symbol = resolver.resolve(invocation)
        if symbol is None:
            logger.debug("Unresolved call %r at %s", invocation.text, invocation.span)
            return None
        if resolver.return_kind(symbol) is ReturnKind.VOID:
            return None
    except Exception as e:
        # One bad node must not abort the pass.
        logger.warning("Resolver failed for %r at %s: %s", invocation.text, invocation.span, e)
        return None

    parent = invocation.parent
    if parent is None:
        logger.debug("Call %r at %s has no parent", invocation.text, invocation.span)
        return None
    if parent.kind not in statement_types:
        return None

    meta = DiscardReturnValueRule.meta
    return Diagnostic(
        rule_id=meta.id,
        message=meta.message_format.format(invocation.text),
        span=invocation.span,
        severity=meta.default_severity,
        target=invocation,
        file=invocation.document.file_path,
    )


def apply_fix(document: Document, target: FixTarget) -> Document:
    """
    Rewrite the flagged statement to assign the call to the discard binding.

    ``target`` is a diagnostic, an invocation node or a span. Returns a new
    document; ``document`` itself is never modified. Raises
    ``InvalidFixTarget`` or ``StaleFixTarget`` when the target does not
    point at a call wrapped in an expression statement.
    """
    invocation = _resolve_target(document, target)
    statement = invocation.parent
    arena = document.arena

    first = invocation.first_token()
    leading = first.green.leading
    trailing = statement.last_token().green.trailing

    trimmed_id = replace_token(invocation, first, first.green.with_leading(()))
    discard_id = arena.token("identifier", DISCARD_NAMES[document.language], leading, " ")
    equals_id = arena.token("=", "=", None, " ")
    assignment_id = arena.node(ASSIGNMENT_EXPRESSION_TYPE, [discard_id, equals_id, trimmed_id])

    children = list(statement.green.children)
    children[invocation.index] = assignment_id
    new_statement = Document(arena, arena.node(statement.kind, children), document.file_path,
                             document.language).root
    last = new_statement.last_token()
    new_statement_id = replace_token(new_statement, last, last.green.with_trailing(trailing))

    return document.with_replaced_node(statement, new_statement_id)


def try_apply_fix(document: Document, target: FixTarget) -> FixResult:
    """Like ``apply_fix`` but returns the input document and the error on failure."""
    try:
        return FixResult(apply_fix(document, target))
    except FixError as e:
        logger.info("Fix abandoned: %s", e)
        return FixResult(document, e)


def fix_edit(document: Document, target: FixTarget) -> Edit:
    """Return the text edit equivalent to ``apply_fix``."""
    statement = _resolve_target(document, target).parent
    old_text = document.text
    new_text = apply_fix(document, target).text
    start, end = statement.full_span.start, statement.full_span.end
    return Edit(start, end, new_text[start:end + len(new_text) - len(old_text)])


def fix_all(document: Document, diagnostics: List[Diagnostic]) -> FixAllResult:
    """
    Apply every diagnostic's fix to ``document``.

    Fixes run from the end of the document backwards. Each target is
    re-resolved against the current version by identity and skipped if it
    no longer fits.
    """
    current = document
    applied, skipped = [], []
    for diagnostic in sorted(diagnostics, key=lambda d: d.span, reverse=True):
        try:
            current = apply_fix(current, diagnostic)
        except FixError as e:
            logger.info("Skipping fix for %s at %s: %s", diagnostic.rule_id, diagnostic.span, e)
            skipped.append((diagnostic, e))
        else:
            applied.append(diagnostic)
    applied.reverse()
    return FixAllResult(current, applied, skipped)


def _resolve_target(document: Document, target: FixTarget) -> SyntaxNode:
    node = None
    if isinstance(target, Diagnostic):
        span = target.span
        node = target.target
    elif isinstance(target, SyntaxNode):
        span = target.span
        node = target
    elif isinstance(target, Span):
        span = target
    else:
        raise TypeError(f"Unsupported fix target: {target!r}")

    call_types = CALL_EXPRESSION_TYPES.get(document.language, set())
    statement_types = EXPRESSION_STATEMENT_TYPES.get(document.language, set())

    if node is not None and node.document is not document:
        if node.document.arena is not document.arena:
            raise InvalidFixTarget(f"Target at {span} belongs to an unrelated document", span)
        error = StaleFixTarget
        invocation = _relocate(document, node)
        if invocation is None or invocation.kind not in call_types:
            raise error(f"Call at {span} no longer exists in this version", span)
    else:
        error = InvalidFixTarget
        invocation = _find_invocation(document, span, call_types)

    parent = invocation.parent
    if parent is None or parent.kind not in statement_types:
        raise error(f"Call at {invocation.span} is not a bare expression statement", span)
    if invocation.first_token() is None:
        raise error(f"Call at {invocation.span} has no tokens", span)
    return invocation


def _find_invocation(document: Document, span: Span, call_types) -> SyntaxNode:
    token = document.find_token(span.start)
    if token is None:
        raise InvalidFixTarget(f"No token at {span}", span)

    invocations = [node for node in token.ancestors(include_self=True) if node.kind in call_types]
    if not invocations:
        raise InvalidFixTarget(f"No call starts at {span}", span)
    return (
        next((node for node in invocations if node.span == span), None)
        or next((node for node in invocations if node.span.start == span.start), None)
        or invocations[0]
    )


def _relocate(document: Document, node: SyntaxNode) -> Optional[SyntaxNode]:
    """
    Find ``node``, taken from an older version, in ``document``.

    An untouched subtree keeps its green id. A node whose descendants were
    rewritten gets a new id but keeps its (index, kind) path from the root,
    because a fix only changes shape inside the statement it rewrites.
    """
    for candidate in document.root.descendants():
        if candidate.node_id == node.node_id:
            return candidate

    path = [(ancestor.index, ancestor.kind) for ancestor in node.ancestors(include_self=True)
            if ancestor.parent is not None]
    current = document.root
    for index, kind in reversed(path):
        children = current.children
        if index >= len(children) or children[index].kind != kind:
            return None
        current = children[index]
    return current


FIX_PROVIDER = FixProvider(
    title="Assign the return value to '_'",
    equivalence_key="DiscardReturnValueAnalyzer.AssignDiscard",
    apply_fix=apply_fix,
    fix_all=fix_all,
)
