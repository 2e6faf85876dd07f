"""Virtual terminal for testing -- implements the Terminal protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``evo.installer.terminal.Terminal`` protocol without performing any real
I/O.  Output is captured in a buffer for assertions and keystrokes are
replayed from a script.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Iterator


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    keys:
        Chunks returned, in order, by ``read_key``.
    """

    def __init__(
        self, rows: int = 40, columns: int = 100, keys: Iterable[str] = ()
    ) -> None:
        self._rows = rows
        self._columns = columns
        self._buffer: list[str] = []
        self._keys: list[str] = list(keys)
        self._cursor_visible = True
        self.raw = False
        self.raw_enter_count = 0
        self.raw_exit_count = 0

    # -- Terminal protocol: properties --------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @rows.setter
    def rows(self, value: int) -> None:
        self._rows = value

    @property
    def columns(self) -> int:
        return self._columns

    @columns.setter
    def columns(self, value: int) -> None:
        self._columns = value

    @property
    def cursor_visible(self) -> bool:
        return self._cursor_visible

    # -- Terminal protocol: output ------------------------------------------

    def write(self, data: str) -> None:
        """Append *data* to the internal buffer."""
        self._buffer.append(data)

    def move_to(self, row: int, col: int = 1) -> None:
        self.write(f"\x1b[{max(1, row)};{max(1, col)}H")

    def clear_screen(self) -> None:
        self.write("\x1b[2J\x1b[H")

    def clear_line(self) -> None:
        self.write("\x1b[2K")

    def cursor_down(self) -> None:
        self.write("\x1b[1B")

    def hide_cursor(self) -> None:
        self._cursor_visible = False
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self._cursor_visible = True
        self.write("\x1b[?25h")

    # -- Terminal protocol: input -------------------------------------------

    def read_key(self) -> str:
        """Pop the next scripted chunk.

        Raises ``EOFError`` once the script is exhausted, like a closed
        stdin would.
        """
        if not self._keys:
            raise EOFError("no more scripted keys")
        return self._keys.pop(0)

    @contextmanager
    def raw_mode(self) -> Iterator[None]:
        self.raw = True
        self.raw_enter_count += 1
        try:
            yield
        finally:
            self.raw = False
            self.raw_exit_count += 1

    # -- Test helpers -------------------------------------------------------

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def write_count(self) -> int:
        """Return the number of individual ``write`` calls made."""
        return len(self._buffer)

    @property
    def pending_keys(self) -> list[str]:
        return list(self._keys)

    def clear_buffer(self) -> None:
        """Discard all recorded output."""
        self._buffer.clear()

    def feed(self, *chunks: str) -> None:
        """Queue more keystroke chunks for ``read_key``."""
        self._keys.extend(chunks)
