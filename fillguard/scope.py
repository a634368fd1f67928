"""Lexical scope analysis — maps identifier references to their declaring bindings.

The resolver walks a tree-sitter JavaScript tree once, recording every
declaration in the scope that owns it, then answers lookups by walking
outward from the referencing identifier.  Only declaration sites are
considered; later assignments are ignored.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from tree_sitter import Node, Tree

from .nodes import node_text

logger = logging.getLogger(__name__)

NodeKey = tuple[str, int, int]


class DeclarationKind(str, Enum):
    CONST = "const"
    LET = "let"
    VAR = "var"
    FUNCTION = "function"
    CLASS = "class"
    PARAMETER = "parameter"
    CATCH_PARAMETER = "catch_parameter"
    IMPORT = "import"


class Mutability(str, Enum):
    FIXED = "fixed"
    REASSIGNABLE = "reassignable"


_REASSIGNABLE_KINDS: frozenset[DeclarationKind] = frozenset(
    {
        DeclarationKind.LET,
        DeclarationKind.VAR,
        DeclarationKind.PARAMETER,
        DeclarationKind.CATCH_PARAMETER,
    }
)

_KIND_BY_KEYWORD: dict[str, DeclarationKind] = {
    "const": DeclarationKind.CONST,
    "let": DeclarationKind.LET,
    "var": DeclarationKind.VAR,
}

FUNCTION_SCOPE_TYPES: frozenset[str] = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

BLOCK_SCOPE_TYPES: frozenset[str] = frozenset(
    {
        "statement_block",
        "for_statement",
        "for_in_statement",
        "switch_body",
        "catch_clause",
        "class_body",
        "class_static_block",
    }
)

PROGRAM_TYPE = "program"

SCOPE_TYPES: frozenset[str] = FUNCTION_SCOPE_TYPES | BLOCK_SCOPE_TYPES | {PROGRAM_TYPE}

# Scopes that receive hoisted `var` declarations
HOISTING_SCOPE_TYPES: frozenset[str] = FUNCTION_SCOPE_TYPES | {
    PROGRAM_TYPE,
    "class_static_block",
}


def node_key(node: Node) -> NodeKey:
    """Stable identity for a node within one tree."""
    return (node.type, node.start_byte, node.end_byte)


@dataclass(frozen=True)
class Binding:
    """A declaration site for one name.

    ``declaration`` is the identifier node that introduces the name;
    ``initializer`` is the expression evaluated at that site, if any.
    """

    name: str
    kind: DeclarationKind
    declaration: Node
    initializer: Node | None = None

    @property
    def mutability(self) -> Mutability:
        if self.kind in _REASSIGNABLE_KINDS:
            return Mutability.REASSIGNABLE
        return Mutability.FIXED

    @property
    def is_reassignable(self) -> bool:
        return self.mutability == Mutability.REASSIGNABLE

    @property
    def key(self) -> NodeKey:
        return node_key(self.declaration)


class BindingResolver(ABC):
    """Strategy for following an identifier reference to its declaration."""

    @abstractmethod
    def resolve_identifier(self, node: Node) -> Binding | None:
        """Return the nearest visible binding for *node*, or None."""
        ...


def pattern_names(node: Node | None) -> list[Node]:
    """Return every identifier node bound by a (possibly destructuring) pattern."""
    if node is None:
        return []
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [node]
    if node.type in ("assignment_pattern", "object_assignment_pattern"):
        return pattern_names(node.child_by_field_name("left"))
    if node.type == "pair_pattern":
        return pattern_names(node.child_by_field_name("value"))
    if node.type in ("object_pattern", "array_pattern", "rest_pattern"):
        return [name for child in node.named_children for name in pattern_names(child)]
    return []


class ScopeResolver(BindingResolver):
    """Lexical resolver over a single parsed JavaScript tree.

    Scope tables are built on the first lookup and reused afterwards; the
    tree must not change between calls.
    """

    def __init__(self, tree: Tree):
        self._root = tree.root_node
        self._tables: dict[NodeKey, dict[str, Binding]] | None = None
        self._DECLARATION_DISPATCH: dict[str, Callable[[Node], None]] = {
            "lexical_declaration": self._declare_lexical,
            "variable_declaration": self._declare_var,
            "function_declaration": self._declare_function,
            "generator_function_declaration": self._declare_function,
            "function_expression": self._declare_function_expression,
            "function": self._declare_function_expression,
            "generator_function": self._declare_function_expression,
            "class_declaration": self._declare_class,
            "class": self._declare_class_expression,
            "formal_parameters": self._declare_parameters,
            "arrow_function": self._declare_arrow_parameter,
            "catch_clause": self._declare_catch_parameter,
            "for_in_statement": self._declare_for_in,
            "import_clause": self._declare_imports,
        }

    # ── lookup ───────────────────────────────────────────────────

    def resolve_identifier(self, node: Node) -> Binding | None:
        tables = self._scope_tables()
        name = node_text(node)
        scope = node.parent
        while scope is not None:
            if scope.type in SCOPE_TYPES:
                binding = tables.get(node_key(scope), {}).get(name)
                if binding is not None:
                    return binding
            scope = scope.parent
        return None

    def bindings_in(self, scope: Node) -> dict[str, Binding]:
        """Return a copy of the bindings declared directly in *scope*."""
        return dict(self._scope_tables().get(node_key(scope), {}))

    # ── table construction ───────────────────────────────────────

    def _scope_tables(self) -> dict[NodeKey, dict[str, Binding]]:
        if self._tables is None:
            self._tables = {}
            stack = [self._root]
            while stack:
                node = stack.pop()
                handler = self._DECLARATION_DISPATCH.get(node.type)
                if handler is not None:
                    handler(node)
                stack.extend(reversed(node.named_children))
            logger.debug(
                "Built %d scope tables (%d bindings)",
                len(self._tables),
                sum(len(t) for t in self._tables.values()),
            )
        return self._tables

    def _enclosing_scope(self, node: Node | None, scope_types: frozenset[str]) -> Node:
        current = node
        while current is not None:
            if current.type in scope_types:
                return current
            current = current.parent
        return self._root

    def _bind(
        self,
        scope: Node,
        name_node: Node,
        kind: DeclarationKind,
        initializer: Node | None = None,
    ) -> None:
        name = node_text(name_node)
        table = self._tables.setdefault(node_key(scope), {})
        if name in table:
            return
        table[name] = Binding(
            name=name, kind=kind, declaration=name_node, initializer=initializer
        )

    def _declare_declarators(
        self, node: Node, kind: DeclarationKind, scope: Node
    ) -> None:
        for child in node.named_children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            if name_node is None:
                continue
            if name_node.type == "identifier":
                self._bind(scope, name_node, kind, value_node)
                continue
            # Destructured names do not evaluate to the whole initializer
            for bound in pattern_names(name_node):
                self._bind(scope, bound, kind)

    def _declare_lexical(self, node: Node) -> None:
        keyword = node.children[0].type if node.children else ""
        kind = _KIND_BY_KEYWORD.get(keyword, DeclarationKind.LET)
        self._declare_declarators(
            node, kind, self._enclosing_scope(node.parent, SCOPE_TYPES)
        )

    def _declare_var(self, node: Node) -> None:
        self._declare_declarators(
            node,
            DeclarationKind.VAR,
            self._enclosing_scope(node.parent, HOISTING_SCOPE_TYPES),
        )

    def _declare_function(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            scope = self._enclosing_scope(node.parent, SCOPE_TYPES)
            self._bind(scope, name_node, DeclarationKind.FUNCTION, node)

    def _declare_function_expression(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            self._bind(node, name_node, DeclarationKind.FUNCTION, node)

    def _declare_class(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            scope = self._enclosing_scope(node.parent, SCOPE_TYPES)
            self._bind(scope, name_node, DeclarationKind.CLASS, node)

    def _declare_class_expression(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        body_node = node.child_by_field_name("body")
        if name_node is not None and body_node is not None:
            self._bind(body_node, name_node, DeclarationKind.CLASS, node)

    def _declare_parameters(self, node: Node) -> None:
        owner = node.parent
        if owner is None:
            return
        for child in node.named_children:
            for bound in pattern_names(child):
                self._bind(owner, bound, DeclarationKind.PARAMETER)

    def _declare_arrow_parameter(self, node: Node) -> None:
        param = node.child_by_field_name("parameter")
        if param is not None and param.type == "identifier":
            self._bind(node, param, DeclarationKind.PARAMETER)

    def _declare_catch_parameter(self, node: Node) -> None:
        param = node.child_by_field_name("parameter")
        for bound in pattern_names(param):
            self._bind(node, bound, DeclarationKind.CATCH_PARAMETER)

    def _declare_for_in(self, node: Node) -> None:
        keyword = next(
            (c.type for c in node.children if c.type in _KIND_BY_KEYWORD), None
        )
        if keyword is None:
            # `for (x of xs)` assigns to an existing binding
            return
        kind = _KIND_BY_KEYWORD[keyword]
        scope = (
            self._enclosing_scope(node.parent, HOISTING_SCOPE_TYPES)
            if kind == DeclarationKind.VAR
            else node
        )
        for bound in pattern_names(node.child_by_field_name("left")):
            self._bind(scope, bound, kind)

    def _declare_imports(self, node: Node) -> None:
        scope = self._enclosing_scope(node.parent, SCOPE_TYPES)
        for child in node.named_children:
            if child.type == "identifier":
                self._bind(scope, child, DeclarationKind.IMPORT)
            elif child.type == "namespace_import":
                for name_node in child.named_children:
                    if name_node.type == "identifier":
                        self._bind(scope, name_node, DeclarationKind.IMPORT)
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    local = spec.child_by_field_name(
                        "alias"
                    ) or spec.child_by_field_name("name")
                    if local is not None and local.type == "identifier":
                        self._bind(scope, local, DeclarationKind.IMPORT)
