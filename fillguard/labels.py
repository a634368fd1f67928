"""Type labels shown in diagnostics."""

from __future__ import annotations

import re

from tree_sitter import Node

from . import constants
from .nodes import ExprKind, expression_kind, node_text, unwrap_parentheses

# Leading identifier path such as `Foo`, `A.B` or `class`
_LEADING_TOKEN_RE = re.compile(r"[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*")


def leading_token(text: str) -> str:
    """Return the first token of *text*, capped at MAX_CALLEE_LABEL_LENGTH."""
    stripped = text.lstrip()
    match = _LEADING_TOKEN_RE.match(stripped)
    token = match.group(0) if match else (stripped.split() or [""])[0]
    return token[: constants.MAX_CALLEE_LABEL_LENGTH]


def constructor_label(node: Node) -> str:
    """Label a ``new X(...)`` expression as ``new X()``."""
    callee = unwrap_parentheses(node.child_by_field_name("constructor"))
    if callee is None:
        return ""
    if callee.type == "identifier":
        name = node_text(callee)
    else:
        name = leading_token(node_text(callee))
    return constants.NEW_LABEL_TEMPLATE.format(name=name) if name else ""


def derive_type_label(node: Node | None) -> str:
    """Map an expression to its diagnostic label, or ``""`` when none applies."""
    node = unwrap_parentheses(node)
    kind = expression_kind(node)
    if kind == ExprKind.OBJECT:
        return constants.LABEL_OBJECT
    if kind == ExprKind.ARRAY:
        return constants.LABEL_ARRAY
    if kind == ExprKind.CONSTRUCTION:
        return constructor_label(node)
    if kind == ExprKind.FUNCTION:
        return constants.LABEL_FUNCTION
    if kind == ExprKind.REGEX_LITERAL:
        return constants.LABEL_REGEXP
    if kind == ExprKind.IDENTIFIER:
        return constants.VARIABLE_LABEL_TEMPLATE.format(name=node_text(node))
    return ""


def format_type_slot(label: str) -> str:
    return f" ({label})" if label else ""
