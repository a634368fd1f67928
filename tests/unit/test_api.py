"""Tests for the composable API functions in fillguard.api."""

import pytest

from fillguard.api import check_file, check_source, classify_expression, find_fill_calls
from fillguard.classifier import Verdict
from fillguard.config import FillOptions, InvalidOptionsError
from fillguard.diagnostics import Diagnostic
from fillguard.tracing import RecordingTracer

FLAGGED_SOURCE = """\
const shared = new Map();
const grid = new Array(3).fill(shared);
const ok = new Array(3).fill(0);
"""


class TestCheckSource:
    def test_returns_diagnostics(self):
        result = check_source(FLAGGED_SOURCE)
        assert len(result) == 1
        assert isinstance(result[0], Diagnostic)
        assert result[0].type_label == "new Map()"

    def test_accepts_options_model(self):
        result = check_source("Array(2).fill(/x/);", FillOptions(can_fill_with_regexp=False))
        assert [d.type_label for d in result] == ["RegExp"]

    def test_invalid_options_raise(self):
        with pytest.raises(InvalidOptionsError):
            check_source("Array(2).fill({});", {"unknownOption": True})

    def test_path_recorded(self):
        [diagnostic] = check_source(FLAGGED_SOURCE, path="grid.js")
        assert diagnostic.path == "grid.js"

    def test_tracer_receives_events(self):
        tracer = RecordingTracer()
        check_source("let a = {}; Array(2).fill(a);", tracer=tracer)
        assert "reassignable_binding" in tracer.kinds()

    def test_syntax_errors_do_not_raise(self):
        assert check_source("new Array(3).fill(;") == []


class TestCheckFile:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "grid.js"
        path.write_text(FLAGGED_SOURCE, encoding="utf-8")
        [diagnostic] = check_file(path)
        assert diagnostic.path == str(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            check_file(tmp_path / "missing.js")


class TestClassifyExpression:
    def test_last_statement_is_classified(self):
        assert classify_expression("[]; 1") == Verdict.value_type()

    def test_no_expression_statement(self):
        with pytest.raises(ValueError, match="No expression statement"):
            classify_expression("const a = 1;")


class TestFindFillCalls:
    def test_returns_arguments(self):
        [call] = find_fill_calls("Array(3).fill(x => x);")
        assert call.argument.type == "arrow_function"
        assert call.shape == "Array().fill()"
