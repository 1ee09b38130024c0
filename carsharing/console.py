"""Blocking line/token console I/O for the menus."""

from __future__ import annotations

import re
import sys
from collections import deque
from typing import TextIO

from rich.console import Console, RenderableType

_INT_TOKEN = re.compile(r"[+-]?[0-9]+")


def make_console(file: TextIO | None = None) -> Console:
    """Build a rich console that prints text literally, one line per call."""
    return Console(file=file, markup=False, emoji=False, highlight=False, soft_wrap=True)


class ConsoleIO:
    """Reads whitespace-delimited integers and whole lines, prints lines.

    Integer reads consume one token at a time, so several selections may be
    typed on one line. A token that is not an integer discards the rest of
    its line.
    """

    def __init__(self, stream: TextIO | None = None, console: Console | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self.console = console if console is not None else make_console()
        self._pending: deque[str] = deque()

    def print(self, renderable: RenderableType = "") -> None:
        self.console.print(renderable)

    def _readline(self) -> str:
        line = self.stream.readline()
        if line == "":
            raise EOFError("end of input")
        return line

    def read_int(self) -> int | None:
        """Return the next token as an int, or None if it is not one."""
        while not self._pending:
            self._pending.extend(self._readline().split())
        token = self._pending.popleft()
        if _INT_TOKEN.fullmatch(token):
            return int(token)
        self.discard_line()
        return None

    def discard_line(self) -> None:
        """Drop the tokens left over from the current input line."""
        self._pending.clear()

    def read_line(self) -> str:
        """Discard leftover tokens and return the next full line, stripped."""
        self.discard_line()
        return self._readline().strip()
