"""no-array-fill-with-reference-type — flags array fills that alias one mutable value."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from tree_sitter import Node, Tree

from . import constants
from .classifier import TypeClassifier, Verdict
from .config import FillOptions
from .diagnostics import Diagnostic, SourceLocation
from .labels import format_type_slot
from .nodes import COMMENT_TYPES, node_text, unwrap_parentheses
from .scope import BindingResolver, ScopeResolver
from .tracing import NullTracer, Tracer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FillCall:
    """A matched ``<array>.fill(x, ...)`` call."""

    call: Node
    argument: Node
    shape: str


def _is_identifier(node: Node | None, name: str) -> bool:
    return node is not None and node.type == "identifier" and node_text(node) == name


def _array_receiver_shape(receiver: Node | None) -> str:
    """Describe the array-producing receiver of ``.fill``, or ``""`` if it is not one."""
    if receiver is None:
        return ""
    if receiver.type == "new_expression":
        constructor = unwrap_parentheses(receiver.child_by_field_name("constructor"))
        if _is_identifier(constructor, constants.ARRAY_GLOBAL):
            return f"new {constants.ARRAY_GLOBAL}()"
        return ""
    if receiver.type != "call_expression":
        return ""
    func = unwrap_parentheses(receiver.child_by_field_name("function"))
    if _is_identifier(func, constants.ARRAY_GLOBAL):
        return f"{constants.ARRAY_GLOBAL}()"
    if func is not None and func.type == "member_expression":
        obj = unwrap_parentheses(func.child_by_field_name("object"))
        prop = func.child_by_field_name("property")
        if (
            _is_identifier(obj, constants.ARRAY_GLOBAL)
            and prop is not None
            and node_text(prop) in constants.ARRAY_FACTORY_METHODS
        ):
            return f"{constants.ARRAY_GLOBAL}.{node_text(prop)}()"
    return ""


def match_fill_call(node: Node) -> FillCall | None:
    """Match ``new Array(n).fill(x)``, ``Array(n).fill(x)``, ``Array.from(..).fill(x)``."""
    if node.type != "call_expression":
        return None
    callee = unwrap_parentheses(node.child_by_field_name("function"))
    if callee is None or callee.type != "member_expression":
        return None
    prop = callee.child_by_field_name("property")
    if prop is None or node_text(prop) != constants.FILL_METHOD:
        return None
    args_node = node.child_by_field_name("arguments")
    if args_node is None or args_node.type != "arguments":
        return None
    fill_args = [c for c in args_node.named_children if c.type not in COMMENT_TYPES]
    if not fill_args:
        return None
    shape = _array_receiver_shape(
        unwrap_parentheses(callee.child_by_field_name("object"))
    )
    if not shape:
        return None
    return FillCall(
        call=node, argument=fill_args[0], shape=f"{shape}.{constants.FILL_METHOD}()"
    )


def iter_fill_calls(root: Node) -> Iterator[FillCall]:
    """Yield every fill call under *root* in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        match = match_fill_call(node)
        if match is not None:
            yield match
        stack.extend(reversed(node.named_children))


def format_message(call: FillCall, verdict: Verdict) -> str:
    return constants.MESSAGE_TEMPLATE.format(
        call=call.shape, type=format_type_slot(verdict.type_label)
    )


class NoArrayFillWithReferenceType:
    """Reports fill calls whose fill value is a reference type."""

    rule_id = constants.RULE_ID

    def __init__(self, options: FillOptions | None = None, tracer: Tracer | None = None):
        self._options = options or FillOptions()
        self._tracer = tracer or NullTracer()

    def check(
        self,
        tree: Tree,
        path: str = constants.DEFAULT_DISPLAY_NAME,
        resolver: BindingResolver | None = None,
    ) -> list[Diagnostic]:
        classifier = TypeClassifier(
            resolver or ScopeResolver(tree), self._options, self._tracer
        )
        diagnostics: list[Diagnostic] = []
        for call in iter_fill_calls(tree.root_node):
            verdict = classifier.classify(call.argument)
            if not verdict.is_reference_type:
                continue
            logger.debug(
                "%s at %s: fill value is %s",
                call.shape,
                SourceLocation.of(call.call),
                verdict.type_label or "a reference type",
            )
            diagnostics.append(
                Diagnostic(
                    message=format_message(call, verdict),
                    call_shape=call.shape,
                    type_label=verdict.type_label,
                    path=path,
                    location=SourceLocation.of(call.call),
                )
            )
        return diagnostics
