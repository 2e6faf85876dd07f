"""Scrolling log region: the line buffer, its viewport and progress lines."""

from __future__ import annotations

from typing import Iterable, Sequence

from evo.installer import theme
from evo.installer.utils import pad_to_width, strip_ansi, truncate_to_width, visible_width

LOG_TITLE = "Log"
PROGRESS_BAR_WIDTH = 20

_BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]


class LogBuffer:
    """Append-only list of styled lines with tail replacement.

    Replacement never touches more lines than exist, so asking to collapse
    three lines when only one is present just swaps that one.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def last(self) -> str | None:
        return self._lines[-1] if self._lines else None

    def append(self, line: str) -> None:
        self._lines.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        self._lines.extend(lines)

    def replace_last(self, line: str) -> None:
        self.replace_last_many([line], 1)

    def replace_last_many(self, lines: Sequence[str], count: int) -> None:
        """Pop up to *count* lines, then append *lines*."""
        drop = min(max(0, count), len(self._lines))
        if drop:
            del self._lines[-drop:]
        self._lines.extend(lines)

    def clear(self) -> None:
        self._lines.clear()


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------


def log_viewport_height(rows: int, fixed_lines: int) -> int:
    """Number of log lines that fit below the header (borders excluded)."""
    return max(1, rows - fixed_lines - 2)


def visible_tail(lines: Sequence[str], active_input: str | None, available: int) -> list[str]:
    """The last *available* lines, with the in-progress input line last."""
    tail = list(lines)
    if active_input is not None:
        tail.append(active_input)
    return tail[-available:] if available > 0 else []


def render_log_block(lines: Sequence[str], columns: int) -> list[str]:
    """Frame *lines* in a full-width box titled ``Log``.

    Lines wider than the box are cut with an ellipsis so nothing wraps and
    shifts the rows below.
    """
    inner = max(0, columns - 2)
    lead = "─" * min(2, inner)
    label = truncate_to_width(f" {LOG_TITLE} ", max(0, inner - len(lead)), "")
    rest = "─" * max(0, inner - len(lead) - visible_width(label))

    out = [theme.frame("┌" + lead) + theme.white(label) + theme.frame(rest + "┐")]
    content_width = max(0, inner - 2)
    for line in lines:
        body = truncate_to_width(line, content_width, "…")
        out.append(
            theme.frame("│") + " " + pad_to_width(body, content_width) + " " + theme.frame("│")
        )
    out.append(theme.frame("└" + "─" * inner + "┘"))
    return out


# ---------------------------------------------------------------------------
# Progress lines
# ---------------------------------------------------------------------------


def format_bytes(value: float, unit: str = "bytes") -> str:
    """Human-readable size.

    ``unit="MB"`` always divides by 1024² regardless of magnitude; any other
    unit picks the largest of B/KB/MB/GB/TB that keeps the value ≥ 1.
    """
    if unit == "MB":
        return f"{value / (1024 * 1024):.2f} MB"

    size = float(value)
    index = 0
    while size >= 1024 and index < len(_BYTE_UNITS) - 1:
        size /= 1024
        index += 1
    return f"{size:.2f} {_BYTE_UNITS[index]}"


def progress_percent(current: float, total: float) -> int:
    if total <= 0:
        return 0
    return max(0, min(100, int(current * 100 / total)))


def format_progress_line(label: str, current: float, total: float, unit: str = "bytes") -> str:
    """``label: [████░░░…] 42% (…)`` with a 20-cell bar."""
    if total > 0:
        filled = max(0, min(PROGRESS_BAR_WIDTH, int(PROGRESS_BAR_WIDTH * current / total)))
    else:
        filled = 0
    bar = theme.green("█" * filled) + theme.gray("░" * (PROGRESS_BAR_WIDTH - filled))
    percent = progress_percent(current, total)

    if unit == "files":
        counts = f"{int(current)}/{int(total)} files"
    else:
        counts = f"{format_bytes(current, unit)} / {format_bytes(total, unit)}"

    return f"{progress_prefix(label)}[{bar}] {percent}% ({counts})"


def progress_prefix(label: str) -> str:
    return f"{label}: "


def is_progress_line(line: str | None, label: str) -> bool:
    return line is not None and strip_ansi(line).startswith(progress_prefix(label) + "[")
