"""Result objects and diagnostic types for xmlshape parses.

A :class:`ParseResult` is the single outcome of one parse: either a value
tree (``None`` for an empty document) or the :class:`ParseError` that ended
it, together with diagnostics and timing information.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from .errors import ParseError


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class PerformanceMetrics:
    """Counters collected while a parse runs."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    chunks_fed: int = 0
    events_processed: int = 0
    elements_closed: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms


@dataclass
class ParseResult:
    """Outcome of a single parse.

    Exactly one of ``value`` (on success) and ``error`` (on failure) is
    meaningful. A successful parse of an empty or whitespace-only input has
    ``value is None``.
    """

    value: Any = None
    success: bool = True
    error: Optional[ParseError] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Keep success and error consistent."""
        if self.error is not None and self.success:
            raise ValueError("A result carrying an error cannot be successful")

    @classmethod
    def failure(
        cls, error: ParseError, correlation_id: Optional[str] = None
    ) -> "ParseResult":
        """Create a failed result with an ERROR diagnostic for ``error``."""
        result = cls(success=False, error=error, correlation_id=correlation_id)
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            str(error),
            "parser",
            details={"kind": error.kind.value, "error_type": type(error).__name__},
        )
        return result

    @property
    def is_empty_document(self) -> bool:
        """True when the parse succeeded on an input with no document."""
        return self.success and self.value is None

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def unwrap(self) -> Any:
        """Return the value tree, raising the parse error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(diag.severity == DiagnosticSeverity.ERROR for diag in self.diagnostics)

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        return {
            "success": self.success,
            "empty_document": self.is_empty_document,
            "error_kind": self.error.kind.value if self.error else None,
            "processing_time_ms": self.performance.processing_time_ms,
            "characters_processed": self.performance.characters_processed,
            "chunks_fed": self.performance.chunks_fed,
            "events_processed": self.performance.events_processed,
            "elements_closed": self.performance.elements_closed,
            "diagnostics": len(self.diagnostics),
            "correlation_id": self.correlation_id,
        }
