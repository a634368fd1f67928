"""Type Classifier — decides whether an expression evaluates to a reference type.

Reference types (objects, arrays, class instances, functions, regex
objects) are aliased when one value is shared; value types (numbers,
strings, booleans, null/undefined/bigint, template strings, symbols) are
not.  Any shape the classifier cannot prove to be a reference type
degrades to value-type, so callers under-report rather than crash.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from tree_sitter import Node

from . import constants
from .config import FillOptions
from .labels import derive_type_label
from .nodes import (
    ExprKind,
    conditional_operands,
    expression_kind,
    node_text,
    unwrap_parentheses,
)
from .scope import Binding, BindingResolver, NodeKey
from .tracing import NullTracer, TraceEvent, Tracer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    """Classification result: reference/value flag plus a diagnostic label."""

    is_reference_type: bool
    type_label: str = ""

    @classmethod
    def value_type(cls) -> Verdict:
        return cls(is_reference_type=False)

    @classmethod
    def reference(cls, type_label: str = "") -> Verdict:
        return cls(is_reference_type=True, type_label=type_label)


@dataclass(frozen=True)
class _ResolutionChain:
    """Bindings already followed while resolving one expression."""

    visited: frozenset[NodeKey] = field(default_factory=frozenset)
    depth: int = 0

    def extend(self, key: NodeKey) -> _ResolutionChain:
        return _ResolutionChain(visited=self.visited | {key}, depth=self.depth + 1)


class TypeClassifier:
    """Classifies expression nodes of one parsed tree.

    The classifier holds no per-call state: ``classify`` may be called any
    number of times, in any order, with identical results.
    """

    def __init__(
        self,
        resolver: BindingResolver,
        options: FillOptions | None = None,
        tracer: Tracer | None = None,
        max_depth: int = constants.MAX_RESOLUTION_DEPTH,
    ):
        self._resolver = resolver
        self._options = options or FillOptions()
        self._tracer = tracer or NullTracer()
        self._max_depth = max_depth
        self._KIND_DISPATCH: dict[
            ExprKind, Callable[[Node, _ResolutionChain], Verdict]
        ] = {
            ExprKind.LITERAL: self._classify_value,
            ExprKind.TEMPLATE_LITERAL: self._classify_value,
            ExprKind.PRIMITIVE_OPERATION: self._classify_value,
            ExprKind.REGEX_LITERAL: self._classify_regex_literal,
            ExprKind.IDENTIFIER: self._classify_identifier,
            ExprKind.CALL: self._classify_call,
            ExprKind.FUNCTION: self._classify_function,
            ExprKind.CONSTRUCTION: self._classify_construction,
            ExprKind.CONDITIONAL: self._classify_conditional,
            ExprKind.OBJECT: self._classify_reference,
            ExprKind.ARRAY: self._classify_reference,
            ExprKind.CLASS: self._classify_reference,
            ExprKind.OTHER: self._classify_reference,
            ExprKind.MALFORMED: self._classify_malformed,
        }

    @property
    def options(self) -> FillOptions:
        return self._options

    def classify(self, node: Node | None) -> Verdict:
        """Return the verdict for *node*; ``None`` classifies as value-type."""
        return self._classify(node, _ResolutionChain())

    # ── dispatch ─────────────────────────────────────────────────

    def _classify(self, node: Node | None, chain: _ResolutionChain) -> Verdict:
        node = unwrap_parentheses(node)
        if node is None:
            return Verdict.value_type()
        kind = expression_kind(node)
        handler = self._KIND_DISPATCH.get(kind, self._classify_malformed)
        verdict = handler(node, chain)
        logger.debug(
            "%s (%s) → %s",
            node.type,
            kind.value,
            "reference" if verdict.is_reference_type else "value",
        )
        return verdict

    def _emit(self, kind: str, node: Node, detail: str = "") -> None:
        self._tracer.trace(TraceEvent(kind=kind, node_type=node.type, detail=detail))

    # ── per-kind handlers ────────────────────────────────────────

    def _classify_value(self, node: Node, chain: _ResolutionChain) -> Verdict:
        return Verdict.value_type()

    def _classify_reference(self, node: Node, chain: _ResolutionChain) -> Verdict:
        return Verdict.reference(derive_type_label(node))

    def _classify_malformed(self, node: Node, chain: _ResolutionChain) -> Verdict:
        self._emit(constants.EVENT_MALFORMED_NODE, node)
        return Verdict.value_type()

    def _classify_regex_literal(self, node: Node, chain: _ResolutionChain) -> Verdict:
        if self._options.can_fill_with_regexp:
            return Verdict.value_type()
        return Verdict.reference(constants.LABEL_REGEXP)

    def _classify_function(self, node: Node, chain: _ResolutionChain) -> Verdict:
        if self._options.can_fill_with_function:
            return Verdict.value_type()
        return Verdict.reference(constants.LABEL_FUNCTION)

    def _classify_conditional(self, node: Node, chain: _ResolutionChain) -> Verdict:
        # Nested ternaries and logical chains are flattened with an explicit
        # stack; only the non-conditional leaves recurse.
        stack = list(reversed(conditional_operands(node)))
        while stack:
            operand = unwrap_parentheses(stack.pop())
            if operand is not None and expression_kind(operand) == ExprKind.CONDITIONAL:
                stack.extend(reversed(conditional_operands(operand)))
                continue
            verdict = self._classify(operand, chain)
            if verdict.is_reference_type:
                return verdict
        return Verdict.value_type()

    def _classify_call(self, node: Node, chain: _ResolutionChain) -> Verdict:
        callee = unwrap_parentheses(node.child_by_field_name("function"))
        if callee is not None and callee.type == "identifier":
            name = node_text(callee)
            if name == constants.SYMBOL_GLOBAL:
                if self._resolve(callee) is not None:
                    self._emit(constants.EVENT_SYMBOL_SHADOWED, node, name)
                return Verdict.value_type()
            if name == constants.REGEXP_GLOBAL and self._resolve(callee) is None:
                return self._regexp_construction_verdict(constants.LABEL_REGEXP)
        return Verdict.reference(derive_type_label(node))

    def _classify_construction(self, node: Node, chain: _ResolutionChain) -> Verdict:
        label = derive_type_label(node)
        callee = unwrap_parentheses(node.child_by_field_name("constructor"))
        if (
            callee is not None
            and callee.type == "identifier"
            and node_text(callee) == constants.REGEXP_GLOBAL
            and self._resolve(callee) is None
        ):
            return self._regexp_construction_verdict(label)
        return Verdict.reference(label)

    def _regexp_construction_verdict(self, label: str) -> Verdict:
        if self._options.can_fill_with_regexp:
            return Verdict.value_type()
        return Verdict.reference(label)

    def _classify_identifier(self, node: Node, chain: _ResolutionChain) -> Verdict:
        name = node_text(node)
        binding = self._resolve(node)
        if binding is None:
            self._emit(constants.EVENT_UNRESOLVED_IDENTIFIER, node, name)
            return Verdict.value_type()
        if binding.is_reassignable:
            self._emit(
                constants.EVENT_REASSIGNABLE_BINDING, node, f"{name}: {binding.kind.value}"
            )
            return Verdict.value_type()
        if binding.initializer is None:
            return Verdict.value_type()
        if binding.key in chain.visited:
            logger.debug("Cycle while resolving %s", name)
            self._emit(constants.EVENT_CYCLE_DETECTED, node, name)
            return Verdict.value_type()
        if chain.depth >= self._max_depth:
            logger.debug("Resolution depth %d exceeded at %s", self._max_depth, name)
            self._emit(constants.EVENT_DEPTH_EXCEEDED, node, name)
            return Verdict.value_type()

        verdict = self._classify(binding.initializer, chain.extend(binding.key))
        if verdict.is_reference_type and not verdict.type_label:
            return Verdict.reference(constants.VARIABLE_LABEL_TEMPLATE.format(name=name))
        return verdict

    # ── collaborator access ──────────────────────────────────────

    def _resolve(self, node: Node) -> Binding | None:
        try:
            return self._resolver.resolve_identifier(node)
        except Exception:
            name = node_text(node)
            logger.warning(
                "Binding resolution failed for %s, treating as unresolved",
                name,
                exc_info=True,
            )
            self._emit(constants.EVENT_RESOLVER_FAULT, node, name)
            return None
