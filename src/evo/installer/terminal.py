"""Terminal abstraction for the installer dashboard.

Provides the ``Terminal`` protocol the renderer draws against, the concrete
``ProcessTerminal`` backed by ``sys.stdin``/``sys.stdout``, and
:func:`is_interactive`, which decides once per session whether the full
dashboard or the plain line-per-event output is used.

Raw mode here means cbreak: ``ICANON`` and ``ECHO`` are cleared, ``ISIG``
stays on, so Ctrl-C still raises ``KeyboardInterrupt`` and unwinds through
:meth:`ProcessTerminal.raw_mode`, which restores the saved attributes.
"""

from __future__ import annotations

import codecs
import logging
import os
import shutil
import subprocess
import sys
from contextlib import AbstractContextManager, contextmanager
from typing import IO, Iterator, Mapping, Protocol

from evo.installer.config import env_flag

try:
    import termios
except ImportError:  # Windows: no termios, raw mode goes through stty if present
    termios = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_CURSOR_DOWN = "\x1b[1B"
_MOVE_TO_FMT = "\x1b[{};{}H"

DEFAULT_COLUMNS = 120
DEFAULT_ROWS = 30


# ---------------------------------------------------------------------------
# Capability detection
# ---------------------------------------------------------------------------


def is_interactive(
    stream: IO[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Return ``True`` when the dashboard can be drawn on *stream*.

    Requires an attached, colour-capable terminal and no CI signal in the
    environment.  Pure: reads state, changes nothing.
    """
    env = os.environ if environ is None else environ
    out = sys.stdout if stream is None else stream

    if env_flag(env, "CI"):
        return False
    if env.get("TERM", "").lower() == "dumb":
        return False
    try:
        return bool(out.isatty())
    except (AttributeError, ValueError, OSError):
        return False


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations used by the renderer."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def write(self, data: str) -> None: ...

    def read_key(self) -> str: ...

    def raw_mode(self) -> AbstractContextManager[None]: ...

    def move_to(self, row: int, col: int = 1) -> None: ...

    def clear_screen(self) -> None: ...

    def clear_line(self) -> None: ...

    def cursor_down(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by the process's standard streams.

    Dimensions are queried live on every access so a resize between
    installer steps is picked up by the next paint.
    """

    def __init__(
        self,
        output: IO[str] | None = None,
        input_stream: IO[str] | None = None,
        write_log_path: str = "",
    ) -> None:
        self._output = output if output is not None else sys.stdout
        self._input = input_stream if input_stream is not None else sys.stdin
        self._write_log_path = write_log_path
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(self._output.fileno()).columns
        except (AttributeError, ValueError, OSError):
            return DEFAULT_COLUMNS

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(self._output.fileno()).lines
        except (AttributeError, ValueError, OSError):
            return DEFAULT_ROWS

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to the output stream and optionally to the write log."""
        try:
            self._output.write(data)
            self._output.flush()
        except OSError:
            pass

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    def move_to(self, row: int, col: int = 1) -> None:
        self.write(_MOVE_TO_FMT.format(max(1, row), max(1, col)))

    def clear_screen(self) -> None:
        self.write(_CLEAR_SCREEN)

    def clear_line(self) -> None:
        self.write(_CLEAR_LINE)

    def cursor_down(self) -> None:
        self.write(_CURSOR_DOWN)

    def hide_cursor(self) -> None:
        self.write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self.write(_SHOW_CURSOR)

    # -- input --------------------------------------------------------------

    def read_key(self) -> str:
        """Block until at least one character arrives and return it.

        Reads up to three bytes at a time, which is enough for a whole
        arrow-key sequence.  Raises ``EOFError`` when stdin is closed.
        """
        fd = self._input.fileno()
        while True:
            raw = os.read(fd, 3)
            if not raw:
                raise EOFError("stdin closed while waiting for a key")
            data = self._decoder.decode(raw)
            if data:
                return data

    @contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Disable echo and line buffering for the duration of the block.

        The previous mode is restored on every exit path.  Restoration is
        best effort: a failure is logged, never raised.
        """
        try:
            fd = self._input.fileno()
            attached = os.isatty(fd)
        except (AttributeError, ValueError, OSError):
            attached = False

        if not attached:
            yield
            return

        if termios is not None:
            with _termios_cbreak(fd):
                yield
        else:
            with _stty_cbreak(self._input):
                yield


# ---------------------------------------------------------------------------
# Raw-mode back-ends
# ---------------------------------------------------------------------------


@contextmanager
def _termios_cbreak(fd: int) -> Iterator[None]:
    saved = termios.tcgetattr(fd)
    mode = termios.tcgetattr(fd)
    mode[3] &= ~(termios.ICANON | termios.ECHO)  # c_lflag
    mode[6][termios.VMIN] = 1
    mode[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSADRAIN, mode)
    logger.debug("raw mode entered on fd %d", fd)
    try:
        yield
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            logger.debug("raw mode restored on fd %d", fd)
        except termios.error as e:
            logger.warning("Could not restore terminal mode: %s", e)


@contextmanager
def _stty_cbreak(stream: IO[str]) -> Iterator[None]:
    stty = shutil.which("stty")
    if stty is None:
        logger.debug("stty not found, raw mode unavailable")
        yield
        return

    _run_stty(stty, stream, "-icanon", "-echo", "min", "1", "time", "0")
    try:
        yield
    finally:
        _run_stty(stty, stream, "sane")


def _run_stty(stty: str, stream: IO[str], *args: str) -> None:
    # stty acts on the terminal attached to its own stdin.
    try:
        subprocess.run([stty, *args], stdin=stream, check=True, capture_output=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning("stty %s failed: %s", " ".join(args), e)
