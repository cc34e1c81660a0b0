"""Spinner shown while waiting for the first streamed fragment."""
from __future__ import annotations

from yaspin import yaspin  # type: ignore

from .ansi import console


class Spinner:
    """Display a small spinner while work is done.

    ``stop`` is idempotent so callers can stop on the first fragment and
    again in a ``finally`` block.
    """

    def __init__(self):
        self._started = False
        self._spinner = yaspin(text="", side="right")

    def start(self) -> None:
        if self._started:
            return
        console.file.flush()
        self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._spinner.stop()
        console.file.flush()
        self._started = False
