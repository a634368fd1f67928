"""Composable API functions for the fill rule pipeline.

Each function corresponds to a CLI workflow but is callable
programmatically without argparse.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from tree_sitter import Tree

from . import constants
from .classifier import TypeClassifier, Verdict
from .config import FillOptions, load_options
from .diagnostics import Diagnostic
from .parser import JavaScriptParser
from .rule import FillCall, NoArrayFillWithReferenceType, iter_fill_calls
from .scope import ScopeResolver
from .tracing import Tracer

logger = logging.getLogger(__name__)

OptionsLike = FillOptions | Mapping[str, Any] | list | None


def _coerce_options(options: OptionsLike) -> FillOptions:
    if isinstance(options, FillOptions):
        return options
    return load_options(options)


def parse_source(source: str) -> Tree:
    return JavaScriptParser().parse(source)


def find_fill_calls(source: str) -> list[FillCall]:
    """Return every ``Array``-fill call in *source*, flagged or not."""
    return list(iter_fill_calls(parse_source(source).root_node))


def check_source(
    source: str,
    options: OptionsLike = None,
    tracer: Tracer | None = None,
    path: str = constants.DEFAULT_DISPLAY_NAME,
) -> list[Diagnostic]:
    """Run the fill rule over JavaScript source text.

    Args:
        source: The JavaScript source text.
        options: Rule options as a FillOptions, a mapping, or a one-element list.
        tracer: Optional tracer receiving classifier events.
        path: Display name recorded on each diagnostic.

    Returns:
        Diagnostics in source order; empty when nothing is flagged.

    Raises:
        InvalidOptionsError: If *options* fail validation.
    """
    fill_options = _coerce_options(options)
    logger.info("Checking %s (%s)", path, fill_options.to_dict())
    tree = parse_source(source)
    rule = NoArrayFillWithReferenceType(fill_options, tracer)
    return rule.check(tree, path=path)


def check_file(
    path: str | Path,
    options: OptionsLike = None,
    tracer: Tracer | None = None,
) -> list[Diagnostic]:
    """Read *path* and run the fill rule over it; ``OSError`` propagates."""
    source = Path(path).read_text(encoding="utf-8")
    return check_source(source, options, tracer, path=str(path))


def classify_expression(
    source: str,
    options: OptionsLike = None,
    tracer: Tracer | None = None,
) -> Verdict:
    """Classify the expression of the last top-level expression statement.

    Earlier statements in *source* are visible to identifier resolution, so
    ``"const p = {}; p"`` classifies ``p`` through its declaration.

    Raises:
        ValueError: If *source* has no top-level expression statement.
    """
    tree = parse_source(source)
    statements = [
        child
        for child in tree.root_node.named_children
        if child.type == "expression_statement"
    ]
    if not statements:
        raise ValueError("No expression statement found in source")
    expression = statements[-1].named_children[0] if statements[-1].named_children else None
    classifier = TypeClassifier(ScopeResolver(tree), _coerce_options(options), tracer)
    return classifier.classify(expression)
