"""Core parser API with progressive disclosure.

Module-level functions cover one-off parses:

- :func:`parse` returns a :class:`ParseResult` and never raises for document
  errors
- :func:`parse_string` returns the value tree and raises the
  :class:`ParseError` instead
- :func:`parse_file` reads a path first
- :func:`parse_async` feeds the document through the running event loop

:class:`Parser` is the reusable handle behind them. It keeps one
configuration, tracks statistics across parses and notifies ``ready`` /
``failed`` listeners.
"""

import asyncio
import time
import uuid
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, TextIO, Union

from xmlshape.shared import (
    DiagnosticSeverity,
    InvalidArgumentError,
    ParserBusyError,
    ParserConfig,
    ParseResult,
    get_logger,
)
from xmlshape.tokenization import ChunkedFeed, create_event_source
from xmlshape.tree import CollapsePolicy, TreeBuilder

# Type definitions for input data
InputType = Union[str, bytes, bytearray, BinaryIO, TextIO]
Listener = Callable[[Any], None]

# Constants for API operations
BYTE_ORDER_MARK = "\ufeff"
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


def _read_input(input_data: Any) -> str:
    """Turn accepted input types into text with any BOM removed.

    Raises:
        InvalidArgumentError: If the input is absent, of an unsupported type
            or not valid UTF-8
    """
    if input_data is None:
        raise InvalidArgumentError("Input must not be None")
    if not isinstance(input_data, (str, bytes, bytearray, memoryview)) and hasattr(input_data, "read"):
        input_data = input_data.read()
    if isinstance(input_data, (bytes, bytearray, memoryview)):
        try:
            input_data = bytes(input_data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidArgumentError(f"Input is not valid UTF-8: {exc}") from exc
    if not isinstance(input_data, str):
        raise InvalidArgumentError(
            f"Unsupported input type: {type(input_data).__name__}"
        )
    if input_data.startswith(BYTE_ORDER_MARK):
        input_data = input_data[len(BYTE_ORDER_MARK):]
    return input_data


def _preview(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


class Parser:
    """Reusable XML-to-value-tree parser.

    A handle holds one immutable :class:`ParserConfig` and creates a fresh
    :class:`TreeBuilder` for every parse, so it can be reused after both
    successful and failed parses. Starting a parse while another one on the
    same handle is still in flight raises :class:`ParserBusyError`.

    Examples:
        >>> parser = Parser(array_coercion=False)
        >>> parser.parse_string("<a><b>1</b></a>")
        {'a': {'b': '1'}}

        Listening for outcomes:
        >>> seen = []
        >>> parser.on(Parser.READY, seen.append)
        >>> parser.parse("<a/>").success
        True
        >>> seen
        [{'a': ''}]
    """

    READY = "ready"
    FAILED = "failed"

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
        **options: Any
    ) -> None:
        """Initialize parser.

        Args:
            config: Base configuration (defaults to ParserConfig())
            correlation_id: Optional correlation ID; a fresh one is generated
                for each parse otherwise
            **options: Overrides applied on top of ``config``, by field name or
                camelCase option name

        Raises:
            ConfigValidationError: If an option is unknown or invalid
        """
        config = config or ParserConfig()
        self.config = config.override(**options) if options else config
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "parser")

        self._policy = CollapsePolicy(self.config)
        self._listeners: Dict[str, List[Listener]] = {self.READY: [], self.FAILED: []}
        self._busy = False

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    # Listeners

    def on(self, event: str, listener: Listener) -> None:
        """Register ``listener`` for ``Parser.READY`` or ``Parser.FAILED``."""
        self._listener_list(event).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener registered with :meth:`on`; unknown ones are ignored."""
        listeners = self._listener_list(event)
        if listener in listeners:
            listeners.remove(listener)

    def _listener_list(self, event: str) -> List[Listener]:
        if event not in self._listeners:
            raise ValueError(
                f"Unknown parser event {event!r}; expected {self.READY!r} or {self.FAILED!r}"
            )
        return self._listeners[event]

    # Parsing

    def parse(self, input_data: InputType) -> ParseResult:
        """Parse a document and report the outcome as a result.

        Document errors (malformed input, unclosed elements, validator
        rejections, processor failures, unusable input) become a failed
        result; they are not raised.

        Raises:
            ParserBusyError: If another parse on this handle is in flight
        """
        self._acquire()
        try:
            start_time = time.time()
            correlation_id = self._next_correlation_id()
            prepared = self._prepare(input_data, correlation_id)
            if isinstance(prepared, ParseResult):
                result = prepared
            else:
                builder, feed = prepared
                feed.drain()
                result = self._finish(builder, feed, correlation_id)
            self._record(result, start_time)
        finally:
            self._busy = False
        self._notify(result)
        return result

    def parse_string(self, input_data: InputType) -> Any:
        """Parse a document and return its value tree.

        Returns:
            The value tree, or ``None`` for an empty document

        Raises:
            ParseError: If the parse failed
            ParserBusyError: If another parse on this handle is in flight
        """
        return self.parse(input_data).unwrap()

    async def parse_async(self, input_data: InputType) -> Any:
        """Parse a document on the running event loop.

        The input is fed in ``chunk_size`` slices, one per loop turn, so other
        tasks keep running while a large document is parsed.

        Returns:
            The value tree, or ``None`` for an empty document

        Raises:
            ParseError: If the parse failed
            ParserBusyError: If another parse on this handle is in flight
        """
        self._acquire()
        try:
            start_time = time.time()
            correlation_id = self._next_correlation_id()
            prepared = self._prepare(input_data, correlation_id, chunked=True)
            if isinstance(prepared, ParseResult):
                result = prepared
            else:
                builder, feed = prepared
                loop = asyncio.get_running_loop()
                done: "asyncio.Future[Optional[BaseException]]" = loop.create_future()

                def on_done(exc: Optional[BaseException]) -> None:
                    if not done.done():
                        done.set_result(exc)

                feed.schedule(loop, on_done)
                failure = await done
                if failure is not None:
                    raise failure
                result = self._finish(builder, feed, correlation_id)
            self._record(result, start_time)
        finally:
            self._busy = False
        self._notify(result)
        return result.unwrap()

    def reset(self) -> None:
        """Make the handle ready for a new parse.

        Per-parse state (frame stack, driver state, outcome guards) never
        lives on the handle: every parse builds its own tree builder. This
        only checks that no parse is running. Registered listeners,
        configuration and statistics are kept; use :meth:`off` and
        :meth:`reset_statistics` to clear those.

        Raises:
            ParserBusyError: If a parse on this handle is in flight
        """
        if self._busy:
            raise ParserBusyError("Cannot reset a parser while a parse is in flight")
        self.logger.debug("Parser reset")

    def _acquire(self) -> None:
        if self._busy:
            raise ParserBusyError(
                "A parse is already in flight on this parser; "
                "wait for it or use another Parser"
            )
        self._busy = True

    def _next_correlation_id(self) -> str:
        return self.correlation_id or str(uuid.uuid4())

    def _prepare(
        self,
        input_data: Any,
        correlation_id: str,
        chunked: bool = False
    ) -> Union[ParseResult, tuple]:
        """Read the input and set up a builder and feed for it.

        Returns a finished result instead when there is nothing to tokenize:
        unusable input or an empty document.
        """
        logger = self.logger.with_correlation_id(correlation_id)
        try:
            text = _read_input(input_data)
        except InvalidArgumentError as exc:
            logger.warning("Rejected parse input", extra={"error": str(exc)})
            return ParseResult.failure(exc, correlation_id)

        logger.info(
            "Starting parse",
            extra={
                "content_length": len(text),
                "preview": _preview(text),
                "strict": self.config.strict,
            }
        )

        if not text.strip():
            result = ParseResult(value=None, correlation_id=correlation_id)
            result.performance.characters_processed = len(text)
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "Input is empty or whitespace only; no document",
                "parser",
            )
            return result

        chunk_size = len(text)
        if chunked or self.config.cooperative_chunking:
            chunk_size = self.config.chunk_size

        builder = TreeBuilder(self.config, correlation_id, self._policy)
        source = create_event_source(builder, self.config)
        feed = ChunkedFeed(source, text, chunk_size, stop_when=lambda: builder.terminated)
        return builder, feed

    def _finish(
        self, builder: TreeBuilder, feed: ChunkedFeed, correlation_id: str
    ) -> ParseResult:
        if not builder.terminated:
            # the feed stopped before the source reported the end
            builder.on_end()

        if builder.error is not None:
            result = ParseResult.failure(builder.error, correlation_id)
        else:
            result = ParseResult(value=builder.value, correlation_id=correlation_id)

        metrics = result.performance
        metrics.characters_processed = len(feed.text)
        metrics.chunks_fed = feed.chunks_fed
        metrics.events_processed = builder.events_processed
        metrics.elements_closed = builder.elements_closed
        return result

    def _record(self, result: ParseResult, start_time: float) -> None:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        result.performance.processing_time_ms = processing_time

        self._parse_count += 1
        self._total_processing_time += processing_time
        if result.success:
            self._successful_parses += 1

        logger = self.logger.with_correlation_id(result.correlation_id)
        if result.success:
            logger.info(
                "Parse completed",
                extra={
                    "processing_time_ms": processing_time,
                    "elements_closed": result.performance.elements_closed,
                    "total_parses": self._parse_count,
                }
            )
        else:
            logger.warning(
                "Parse failed",
                extra={
                    "processing_time_ms": processing_time,
                    "error_kind": result.error.kind.value,
                    "error": str(result.error),
                }
            )

    def _notify(self, result: ParseResult) -> None:
        if result.success:
            event, payload = self.READY, result.value
        else:
            event, payload = self.FAILED, result.error
        for listener in list(self._listeners[event]):
            listener(payload)

    # Statistics

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "config": self.config.to_dict(),
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    **options: Any
) -> ParseResult:
    """Parse XML into a value tree, reporting the outcome as a result.

    Args:
        input_data: XML as ``str``, UTF-8 ``bytes`` or a file-like object
        config: Optional base configuration
        **options: Configuration overrides (field or camelCase names)

    Returns:
        ParseResult with ``value`` on success or ``error`` on failure

    Examples:
        >>> parse('<root a="1"><item>x</item></root>').value
        {'root': {'$': {'a': '1'}, 'item': ['x']}}
        >>> parse('<root>').error.kind.value
        'unclosed-document'
    """
    return Parser(config, **options).parse(input_data)


def parse_string(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    **options: Any
) -> Any:
    """Parse XML and return the value tree, raising on failure.

    Examples:
        >>> parse_string("<root><item>x</item><item>y</item></root>")
        {'root': {'item': ['x', 'y']}}
        >>> parse_string("   ") is None
        True
    """
    return Parser(config, **options).parse_string(input_data)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    **options: Any
) -> ParseResult:
    """Parse an XML file.

    The file is read as bytes and decoded as UTF-8. A missing or unreadable
    file is reported as an ``InvalidArgumentError`` failure.
    """
    parser = Parser(config, **options)
    path = Path(file_path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        error = InvalidArgumentError(f"Cannot read {path}: {exc}")
        parser.logger.warning("Cannot read input file", extra={"path": str(path)})
        return ParseResult.failure(error)
    return parser.parse(content)


async def parse_async(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    **options: Any
) -> Any:
    """Parse XML on the running event loop and return the value tree.

    Example:
        >>> asyncio.run(parse_async("<a>1</a>", chunk_size=2))
        {'a': '1'}
    """
    return await Parser(config, **options).parse_async(input_data)


__all__ = [
    "InputType",
    "Parser",
    "parse",
    "parse_string",
    "parse_file",
    "parse_async",
]
