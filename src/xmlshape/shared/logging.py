"""Correlation-aware logging for xmlshape.

Every record emitted through a :class:`CorrelationLogger` carries the
``component`` that produced it and the ``correlation_id`` of the parse it
belongs to, so log lines from interleaved parses can be told apart.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Thin wrapper over :class:`logging.Logger` that injects parse context."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID of the parse being logged
            component: Component name; defaults to the last dotted part of name
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def with_correlation_id(self, correlation_id: Optional[str]) -> "CorrelationLogger":
        """Return a logger for the same component bound to another parse."""
        return CorrelationLogger(self.logger.name, correlation_id, self.component)

    def _extra(self, extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        combined = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined.update(extra)
        return combined

    def is_debug_enabled(self) -> bool:
        """Check whether DEBUG records would be emitted."""
        return self.logger.isEnabledFor(logging.DEBUG)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with parse context."""
        self.logger.debug(message, extra=self._extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with parse context."""
        self.logger.info(message, extra=self._extra(extra))

    def warning(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log warning message with parse context."""
        self.logger.warning(message, extra=self._extra(extra), exc_info=exc_info)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True
    ) -> None:
        """Log error message with parse context."""
        self.logger.error(message, extra=self._extra(extra), exc_info=exc_info)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log error message with parse context and the active traceback."""
        self.logger.exception(message, extra=self._extra(extra))


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID of the parse being logged
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)
