"""Error types raised or reported by xmlshape parses.

Every document-level failure is a :class:`ParseError` tagged with an
:class:`ErrorKind`. A parse reports exactly one of them as its outcome;
:class:`ParserBusyError` is the only one raised directly at the caller,
because it concerns misuse of a parser handle rather than the document.
"""

from enum import Enum
from typing import Optional, Sequence, Tuple


class ErrorKind(Enum):
    """Categories of parse failure."""

    MALFORMED_INPUT = "malformed-input"
    UNCLOSED_DOCUMENT = "unclosed-document"
    VALIDATION_FAILURE = "validation-failure"
    INVALID_ARGUMENT = "invalid-argument"
    PROCESSOR_FAILURE = "processor-failure"


class XMLShapeError(Exception):
    """Base exception for all xmlshape errors."""


class ParseError(XMLShapeError):
    """A parse terminated with a failure."""

    kind: ErrorKind = ErrorKind.MALFORMED_INPUT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MalformedInputError(ParseError):
    """The tokenizer rejected the document as ill-formed."""

    kind = ErrorKind.MALFORMED_INPUT

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.code = code

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


class UnclosedDocumentError(ParseError):
    """Input ended while elements were still open."""

    kind = ErrorKind.UNCLOSED_DOCUMENT

    def __init__(self, open_tags: Sequence[str]) -> None:
        self.open_tags: Tuple[str, ...] = tuple(open_tags)
        super().__init__(
            "Unclosed root tag: input ended inside "
            + "/".join(self.open_tags)
        )

    @property
    def depth(self) -> int:
        """Number of elements left open."""
        return len(self.open_tags)


class ValidationError(ParseError):
    """Raised by a validator hook to reject an element.

    Validators may raise it with just a message; the driver fills in the
    document path of the rejected element.
    """

    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidArgumentError(ParseError, TypeError):
    """Input was absent or not text-like."""

    kind = ErrorKind.INVALID_ARGUMENT


class ProcessorError(ParseError):
    """A caller-supplied name or value processor raised."""

    kind = ErrorKind.PROCESSOR_FAILURE


class ParserBusyError(XMLShapeError, RuntimeError):
    """A parse was started on a handle whose previous parse is still running."""
