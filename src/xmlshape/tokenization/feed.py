"""Feeding a document to an event source, whole or in chunks.

:class:`ChunkedFeed` cuts the input into fixed-size slices. Used
synchronously (:meth:`ChunkedFeed.drain`) every slice is written in a loop;
used cooperatively (:meth:`ChunkedFeed.schedule`) each slice is written in
its own event-loop turn, so other tasks run between slices of a large
document. Either way the tokenizer sees the same text, in the same order.
"""

import asyncio
from typing import Callable, Optional

from xmlshape.shared import get_logger

from .events import EventSource

logger = get_logger(__name__, component="feed")


class ChunkedFeed:
    """Writes ``text`` into ``source`` one slice at a time."""

    def __init__(
        self,
        source: EventSource,
        text: str,
        chunk_size: int,
        stop_when: Optional[Callable[[], bool]] = None
    ) -> None:
        """Initialize feed.

        Args:
            source: Event source receiving the slices
            text: Whole document
            chunk_size: Maximum characters per slice, must be positive
            stop_when: Checked before every slice; a true result stops the feed
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.source = source
        self.text = text
        self.chunk_size = chunk_size
        self.stop_when = stop_when or (lambda: False)
        self.position = 0
        self.chunks_fed = 0
        self.finished = False

    def step(self) -> bool:
        """Write the next slice; the last one also closes the source.

        Returns:
            True while there is more to feed
        """
        if self.finished:
            return False
        if self.stop_when() or self.source.stopped:
            self.finished = True
            return False

        end = self.position + self.chunk_size
        self.source.write(self.text[self.position:end])
        self.position = min(end, len(self.text))
        self.chunks_fed += 1

        if self.position >= len(self.text):
            if not self.stop_when():
                self.source.close()
            self.finished = True
            logger.debug(
                "Feed complete",
                extra={"chunks_fed": self.chunks_fed, "chunk_size": self.chunk_size}
            )
            return False
        return True

    def drain(self) -> int:
        """Feed everything synchronously and return the number of slices."""
        while self.step():
            pass
        return self.chunks_fed

    def schedule(
        self,
        loop: asyncio.AbstractEventLoop,
        on_done: Callable[[Optional[BaseException]], None]
    ) -> None:
        """Feed one slice per loop turn, then call ``on_done(None)``.

        An exception escaping the source stops the feed and is handed to
        ``on_done`` instead.
        """

        def turn() -> None:
            try:
                more = self.step()
            except Exception as exc:
                logger.debug("Feed interrupted", extra={"chunks_fed": self.chunks_fed})
                self.finished = True
                on_done(exc)
                return
            if more:
                loop.call_soon(turn)
            else:
                on_done(None)

        loop.call_soon(turn)
