"""In-progress elements and the stack that holds them.

This module is bookkeeping only: deciding what a frame turns into when it
closes is the job of :mod:`xmlshape.tree.collapse`.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass(eq=False)
class Frame:
    """One open element.

    ``properties`` is the mapping the element contributes once collapsed:
    its attribute map (or merged attributes), namespace info and every child
    value assigned so far. Text is kept apart in ``text`` until the close.
    """

    name: str
    namespace: Optional[Dict[str, str]] = None
    text: str = ""
    is_cdata: bool = False
    properties: Dict[str, Any] = field(default_factory=dict)

    def append_text(self, text: str) -> None:
        """Append character data seen directly under this element."""
        self.text += text

    def consume_cdata(self) -> bool:
        """Return and clear the CDATA marker."""
        was_cdata, self.is_cdata = self.is_cdata, False
        return was_cdata


class FrameStack:
    """LIFO of open frames, document root at the bottom."""

    def __init__(self) -> None:
        self._frames: List[Frame] = []

    def push(self, name: str, namespace: Optional[Dict[str, str]] = None) -> Frame:
        """Open a new innermost frame."""
        frame = Frame(name=name, namespace=namespace)
        self._frames.append(frame)
        return frame

    def pop(self) -> Frame:
        """Remove and return the innermost frame."""
        if not self._frames:
            raise IndexError("pop from empty frame stack")
        return self._frames.pop()

    def top(self) -> Frame:
        """Return the innermost frame without removing it."""
        if not self._frames:
            raise IndexError("top of empty frame stack")
        return self._frames[-1]

    def names(self) -> List[str]:
        """Tag names from the root down to the innermost frame."""
        return [frame.name for frame in self._frames]

    def clear(self) -> None:
        self._frames.clear()

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)
