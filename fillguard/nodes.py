"""Expression kinds — maps tree-sitter JavaScript node types onto a closed variant set."""

from __future__ import annotations

from enum import Enum

from tree_sitter import Node


class ExprKind(str, Enum):
    # Always-primitive shapes
    LITERAL = "LITERAL"
    TEMPLATE_LITERAL = "TEMPLATE_LITERAL"
    PRIMITIVE_OPERATION = "PRIMITIVE_OPERATION"
    # Shapes whose verdict depends on options or resolution
    REGEX_LITERAL = "REGEX_LITERAL"
    IDENTIFIER = "IDENTIFIER"
    FUNCTION = "FUNCTION"
    CALL = "CALL"
    CONSTRUCTION = "CONSTRUCTION"
    CONDITIONAL = "CONDITIONAL"
    # Reference shapes
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"
    CLASS = "CLASS"
    OTHER = "OTHER"
    # Absent or unparseable
    MALFORMED = "MALFORMED"


_KIND_BY_NODE_TYPE: dict[str, ExprKind] = {
    "number": ExprKind.LITERAL,
    "string": ExprKind.LITERAL,
    "true": ExprKind.LITERAL,
    "false": ExprKind.LITERAL,
    "null": ExprKind.LITERAL,
    "undefined": ExprKind.LITERAL,
    "regex": ExprKind.REGEX_LITERAL,
    "template_string": ExprKind.TEMPLATE_LITERAL,
    "identifier": ExprKind.IDENTIFIER,
    "object": ExprKind.OBJECT,
    "array": ExprKind.ARRAY,
    "new_expression": ExprKind.CONSTRUCTION,
    "call_expression": ExprKind.CALL,
    "function": ExprKind.FUNCTION,
    "function_expression": ExprKind.FUNCTION,
    "arrow_function": ExprKind.FUNCTION,
    "generator_function": ExprKind.FUNCTION,
    "function_declaration": ExprKind.FUNCTION,
    "generator_function_declaration": ExprKind.FUNCTION,
    "class": ExprKind.CLASS,
    "class_declaration": ExprKind.CLASS,
    # Operators that always yield a primitive are value-type, so `fill(-1)`
    # and `fill(i + 1)` are not reported.
    "unary_expression": ExprKind.PRIMITIVE_OPERATION,
    "update_expression": ExprKind.PRIMITIVE_OPERATION,
    "binary_expression": ExprKind.PRIMITIVE_OPERATION,
    "ternary_expression": ExprKind.CONDITIONAL,
}

# Binary operators that evaluate to one of their operands rather than a primitive
LOGICAL_OPERATORS: frozenset[str] = frozenset({"&&", "||", "??"})

PAREN_EXPR_TYPE = "parenthesized_expression"
COMMENT_TYPES: frozenset[str] = frozenset({"comment", "html_comment"})


def is_malformed(node: Node | None) -> bool:
    return node is None or node.type == "ERROR" or node.is_missing


def unwrap_parentheses(node: Node | None) -> Node | None:
    """Strip any number of enclosing ``( ... )`` from *node*."""
    while node is not None and node.type == PAREN_EXPR_TYPE:
        inner = [c for c in node.named_children if c.type not in COMMENT_TYPES]
        node = inner[0] if inner else None
    return node


def binary_operator(node: Node) -> str:
    op_node = node.child_by_field_name("operator")
    return op_node.type if op_node is not None else ""


def conditional_operands(node: Node) -> list[Node]:
    """Return the operands whose value a conditional/logical expression may yield."""
    if node.type == "ternary_expression":
        fields = ("consequence", "alternative")
    else:
        fields = ("left", "right")
    return [
        child
        for child in (node.child_by_field_name(f) for f in fields)
        if child is not None
    ]


def expression_kind(node: Node | None) -> ExprKind:
    """Classify a (parenthesis-free) expression node into an :class:`ExprKind`."""
    if is_malformed(node):
        return ExprKind.MALFORMED
    kind = _KIND_BY_NODE_TYPE.get(node.type, ExprKind.OTHER)
    if kind == ExprKind.PRIMITIVE_OPERATION and node.type == "binary_expression":
        if binary_operator(node) in LOGICAL_OPERATORS:
            return ExprKind.CONDITIONAL
    return kind


def node_text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""
