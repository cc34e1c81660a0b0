"""Accumulate streamed fragments while echoing them to the terminal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape

from ..utils import ERROR_LABEL, console as default_console

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    """One streamed piece: either generated ``content`` or an ``error``."""

    content: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def text(cls, content: str) -> "Fragment":
        return cls(content=content)

    @classmethod
    def failure(cls, error: object) -> "Fragment":
        return cls(error=str(error))


class StreamAggregator:
    """Fold a finite fragment sequence into the final message.

    Content is written the moment it arrives and appended to the result.
    Errors are written inline and do not stop the stream; only exhaustion
    of the sequence moves the aggregator to the done state.
    """

    def __init__(self, out: Optional[Console] = None):
        self.out = out or default_console
        self.done = False
        self.errors: List[str] = []
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, fragment: Fragment) -> None:
        if self.done:
            raise RuntimeError("Cannot feed a finished stream.")
        if fragment.error is not None:
            logger.debug("stream error fragment: %s", fragment.error)
            self.errors.append(fragment.error)
            self.out.print(
                f"\n\\[{ERROR_LABEL}] An error occurred: {escape(fragment.error)}",
                highlight=False,
                soft_wrap=True,
            )
        if fragment.content:
            self.out.print(
                fragment.content,
                end="",
                markup=False,
                highlight=False,
                emoji=False,
                soft_wrap=True,
            )
            self._parts.append(fragment.content)
        self.out.file.flush()

    def run(self, fragments: Iterable[Fragment]) -> str:
        for fragment in fragments:
            self.feed(fragment)
        self.done = True
        return self.text
