"""Diagnostic records emitted by the fill rule."""

from __future__ import annotations

from pydantic import BaseModel
from tree_sitter import Node

from . import constants


class SourceLocation(BaseModel):
    """Structured source span from tree-sitter AST nodes (1-based lines, 0-based columns)."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @classmethod
    def of(cls, node: Node) -> SourceLocation:
        s, e = node.start_point, node.end_point
        return cls(
            start_line=s[0] + 1,
            start_col=s[1],
            end_line=e[0] + 1,
            end_col=e[1],
        )

    def __str__(self) -> str:
        return f"{self.start_line}:{self.start_col + 1}"


class Diagnostic(BaseModel):
    rule_id: str = constants.RULE_ID
    message: str
    call_shape: str
    type_label: str = ""
    path: str = constants.DEFAULT_DISPLAY_NAME
    location: SourceLocation

    def __str__(self) -> str:
        return f"{self.path}:{self.location}  {self.message}  [{self.rule_id}]"
