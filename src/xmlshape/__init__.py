"""xmlshape.

Event-driven conversion of XML documents into plain Python value trees:
dicts for elements, lists for repeated children and strings (or whatever
your value processors return) for text.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file(), parse_async()
- Level 2: Reusable parser - Parser class with listeners and statistics
- Level 3: Shaping policies - ParserConfig and the processors module
"""

__version__ = "0.1.0"
__author__ = "xmlshape Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Reusable parser
from . import processors
from .api import Parser, parse, parse_async, parse_file, parse_string

# Configuration classes for advanced usage
from .shared.config import ConfigError, ConfigValidationError, ParserConfig

# Error types reported by parses
from .shared.errors import (
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

# Core result objects for all API levels
from .shared.result import DiagnosticSeverity, ParseResult

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",
    "parse_async",

    # Level 2: Reusable parser
    "Parser",

    # Level 3: Shaping policies
    "ParserConfig",
    "processors",

    # Result objects
    "ParseResult",
    "DiagnosticSeverity",

    # Errors
    "XMLShapeError",
    "ParseError",
    "ErrorKind",
    "MalformedInputError",
    "UnclosedDocumentError",
    "ValidationError",
    "InvalidArgumentError",
    "ProcessorError",
    "ParserBusyError",
    "ConfigError",
    "ConfigValidationError",
]
