"""Name and value processors.

A processor is any callable taking one value and returning its replacement.
Processors are configured as ordered sequences (see
:class:`~xmlshape.shared.config.ParserConfig`) and applied left to right by a
:class:`ProcessorChain`. The functions in this module are ready-made
processors for the common cases.

Example:
    >>> from xmlshape import parse_string, processors
    >>> parse_string("<Root><Count>3</Count></Root>",
    ...              tag_name_processors=[processors.first_char_lower_case],
    ...              value_processors=[processors.parse_numbers])
    {'root': {'count': [3]}}
"""

import math
import re
from typing import Any, Callable, Iterable, Union

from xmlshape.shared.errors import ProcessorError

_PREFIX_MATCH = re.compile(r"^(?!xmlns).*:")
_BOOLEAN_MATCH = re.compile(r"(?:true|false)", re.IGNORECASE)


def normalize(value: str) -> str:
    """Lowercase the whole string."""
    return value.lower()


def first_char_lower_case(value: str) -> str:
    """Lowercase only the first character."""
    return value[:1].lower() + value[1:]


def strip_prefix(value: str) -> str:
    """Remove a namespace prefix (``pfx:name`` -> ``name``).

    Names starting with ``xmlns`` are namespace declarations and are returned
    untouched.
    """
    return _PREFIX_MATCH.sub("", value, count=1)


def parse_numbers(value: Any) -> Any:
    """Convert integer and decimal strings to numbers.

    Decimals with an integral value become ``int`` (``"10.00"`` -> ``10``).
    Anything that is not a finite number is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    candidate = value.strip()
    if not candidate or "_" in candidate:
        return value
    try:
        return int(candidate, 10)
    except ValueError:
        pass
    try:
        number = float(candidate)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    return int(number) if number.is_integer() else number


def parse_booleans(value: Any) -> Any:
    """Convert ``"true"``/``"false"`` (any case) to ``bool``."""
    if isinstance(value, str) and _BOOLEAN_MATCH.fullmatch(value):
        return value.lower() == "true"
    return value


class ProcessorChain:
    """Ordered composition of processors.

    An empty chain is falsy and returns its input unchanged. A processor that
    raises aborts the parse with :class:`ProcessorError`.
    """

    __slots__ = ("_processors", "_target")

    def __init__(self, processors: Iterable[Callable[[Any], Any]] = (), target: str = "value") -> None:
        self._processors = tuple(processors)
        self._target = target

    def __call__(self, value: Any) -> Any:
        for processor in self._processors:
            try:
                value = processor(value)
            except Exception as exc:
                name = getattr(processor, "__name__", repr(processor))
                raise ProcessorError(
                    f"{self._target} processor {name} failed: {exc}"
                ) from exc
        return value

    def __bool__(self) -> bool:
        return bool(self._processors)

    def __len__(self) -> int:
        return len(self._processors)

    def __repr__(self) -> str:
        names = ", ".join(getattr(p, "__name__", repr(p)) for p in self._processors)
        return f"ProcessorChain({self._target}: [{names}])"


def apply_processors(
    processors: Union[ProcessorChain, Iterable[Callable[[Any], Any]]], value: Any
) -> Any:
    """Run ``value`` through ``processors`` in order."""
    chain = processors if isinstance(processors, ProcessorChain) else ProcessorChain(processors)
    return chain(value)


__all__ = [
    "ProcessorChain",
    "apply_processors",
    "first_char_lower_case",
    "normalize",
    "parse_booleans",
    "parse_numbers",
    "strip_prefix",
]
