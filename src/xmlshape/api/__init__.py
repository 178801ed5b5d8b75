"""Public parsing API."""

from .parser import InputType, Parser, parse, parse_async, parse_file, parse_string

__all__ = [
    "InputType",
    "Parser",
    "parse",
    "parse_async",
    "parse_file",
    "parse_string",
]
