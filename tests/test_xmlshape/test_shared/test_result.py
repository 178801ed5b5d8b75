"""Tests for parse results and diagnostics."""

import pytest

from xmlshape.shared.errors import MalformedInputError, UnclosedDocumentError
from xmlshape.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseResult,
    PerformanceMetrics,
)


class TestDiagnosticEntry:
    """Test diagnostic entry validation."""

    def test_valid_entry(self):
        entry = DiagnosticEntry(DiagnosticSeverity.INFO, "Empty input", "parser")
        assert entry.details is None
        assert entry.timestamp > 0

    def test_empty_message_rejected(self):
        with pytest.raises(ValueError, match="message"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "parser")

    def test_empty_component_rejected(self):
        with pytest.raises(ValueError, match="component"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "Empty input", "")


class TestPerformanceMetrics:
    """Test performance metric derivations."""

    def test_characters_per_second(self):
        metrics = PerformanceMetrics(processing_time_ms=500.0, characters_processed=1000)
        assert metrics.characters_per_second == 2000.0

    def test_zero_time_has_zero_rate(self):
        assert PerformanceMetrics(characters_processed=10).characters_per_second == 0.0


class TestParseResult:
    """Test success and failure results."""

    def test_success_result(self):
        result = ParseResult(value={"root": "x"}, correlation_id="abc")

        assert result.success is True
        assert result.unwrap() == {"root": "x"}
        assert result.is_empty_document is False
        assert result.has_errors() is False

    def test_empty_document_result(self):
        result = ParseResult(value=None)
        assert result.is_empty_document is True
        assert result.unwrap() is None

    def test_failure_result(self):
        error = UnclosedDocumentError(["root", "item"])
        result = ParseResult.failure(error, correlation_id="abc")

        assert result.success is False
        assert result.error is error
        assert result.has_errors() is True
        errors = result.get_diagnostics_by_severity(DiagnosticSeverity.ERROR)
        assert len(errors) == 1
        assert errors[0].details == {
            "kind": "unclosed-document",
            "error_type": "UnclosedDocumentError",
        }
        assert errors[0].correlation_id == "abc"

    def test_unwrap_raises_the_error(self):
        error = MalformedInputError("mismatched tag", line=1, column=9)
        with pytest.raises(MalformedInputError) as exc_info:
            ParseResult.failure(error).unwrap()
        assert exc_info.value is error

    def test_error_cannot_be_successful(self):
        with pytest.raises(ValueError):
            ParseResult(success=True, error=MalformedInputError("bad"))

    def test_summary(self):
        result = ParseResult.failure(MalformedInputError("bad"))
        result.performance.chunks_fed = 3

        summary = result.summary()

        assert summary["success"] is False
        assert summary["error_kind"] == "malformed-input"
        assert summary["chunks_fed"] == 3
        assert summary["diagnostics"] == 1
