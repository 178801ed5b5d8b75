"""Value-tree node shapes and the array-coercion assignment rule."""

from enum import Enum, auto
from typing import Any, Dict, MutableMapping

# Reserved keys of the ordered-children representation.
NAME_KEY = "#name"
TEXT_NODE_NAME = "__text__"


class NodeKind(Enum):
    """Shape of a value-tree node."""

    SCALAR = auto()     # str, None, placeholder or any processed value
    MAPPING = auto()    # dict of keys to child values
    SEQUENCE = auto()   # list of sibling values


def kind_of(value: Any) -> NodeKind:
    """Classify a value-tree node."""
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def assign_or_push(
    target: MutableMapping[str, Any], key: str, value: Any, array_coercion: bool = True
) -> None:
    """Store ``value`` under ``key``, turning repeats into a list.

    A first occurrence is stored as ``[value]`` under array coercion and as the
    bare ``value`` otherwise. Any later occurrence promotes the stored value to
    a list (if it is not one already) and appends.
    """
    if key not in target:
        target[key] = [value] if array_coercion else value
        return
    existing = target[key]
    if kind_of(existing) is not NodeKind.SEQUENCE:
        existing = target[key] = [existing]
    existing.append(value)


def text_node(text_key: str, text: str) -> Dict[str, Any]:
    """Build a ``__text__`` pseudo-child for ordered children."""
    return {NAME_KEY: TEXT_NODE_NAME, text_key: text}
