"""Shared configuration, errors, results and logging for xmlshape."""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)
from .errors import (
    ErrorKind,
    InvalidArgumentError,
    MalformedInputError,
    ParseError,
    ParserBusyError,
    ProcessorError,
    UnclosedDocumentError,
    ValidationError,
    XMLShapeError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseResult,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "ErrorKind",
    "InvalidArgumentError",
    "MalformedInputError",
    "ParseError",
    "ParserBusyError",
    "ProcessorError",
    "UnclosedDocumentError",
    "ValidationError",
    "XMLShapeError",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ParseResult",
    "PerformanceMetrics",
]
