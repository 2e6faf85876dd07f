"""Fixed header panels: logo/version, step checklist, system status.

The header is two columns of framed boxes joined line by line.  The left
column stacks the title box over the step checklist; the right column is
the system-status box, padded with blank framed rows so both columns have
the same height.  Every function here is pure: it takes a content width
and returns lines, leaving cursor placement to the renderer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from evo.installer import theme
from evo.installer.utils import pad_to_width, truncate_to_width, visible_width

LOGO = [
    " ███████╗██╗   ██╗ ██████╗ ",
    " ██╔════╝██║   ██║██╔═══██╗",
    " █████╗  ██║   ██║██║   ██║",
    " ██╔══╝  ╚██╗ ██╔╝██║   ██║",
    " ███████╗ ╚████╔╝ ╚██████╔╝",
    " ╚══════╝  ╚═══╝   ╚═════╝ ",
]

TITLE = "Evolution CMS Installer"
TAGLINE = "Build something amazing."
STEPS_TITLE = "Quest track"
STATUS_TITLE = "System status"

PANEL_GAP = 1


@dataclass
class StepItem:
    label: str
    completed: bool = False
    key: str = ""


@dataclass
class StatusItem:
    label: str
    status: bool = True
    warning: bool = False


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def panel_inner_width(columns: int, gap: int = PANEL_GAP) -> int:
    """Content width of one of the two side-by-side panels.

    Two panels, four border characters and the gap share *columns*.  Never
    negative: a terminal too narrow for the layout gets zero-width panels.
    """
    return max(0, (columns - 4 - gap) // 2)


# ---------------------------------------------------------------------------
# Box drawing
# ---------------------------------------------------------------------------


def _top_border(title: str, inner: int) -> str:
    lead = "─" * min(2, inner)
    label = truncate_to_width(f" {title} ", max(0, inner - len(lead)), "")
    rest = "─" * max(0, inner - len(lead) - visible_width(label))
    return theme.frame("┌" + lead) + theme.white(label) + theme.frame(rest + "┐")


def _bottom_border(inner: int) -> str:
    return theme.frame("└" + "─" * inner + "┘")


def _row(content: str, inner: int) -> str:
    return theme.frame("│") + pad_to_width(content, inner) + theme.frame("│")


def _blank_row(inner: int) -> str:
    return theme.frame("│" + " " * inner + "│")


def _centered(text: str, inner: int) -> str:
    left = max(0, (inner - visible_width(text)) // 2)
    return " " * left + text


def frame_box(title: str, body: Sequence[str], inner: int, min_body: int = 0) -> list[str]:
    """Frame *body* lines in a titled box *inner* columns wide.

    The body is padded with blank rows up to *min_body* lines.
    """
    lines = [_top_border(title, inner)]
    lines.extend(_row(line, inner) for line in body)
    lines.extend(_blank_row(inner) for _ in range(max(0, min_body - len(body))))
    lines.append(_bottom_border(inner))
    return lines


# ---------------------------------------------------------------------------
# Individual panels
# ---------------------------------------------------------------------------


def render_title_block(inner: int, version: str) -> list[str]:
    """Logo, latest release version and tagline in a framed box."""
    body = [_centered(theme.bright_cyan(line), inner) for line in LOGO]
    body.append("")
    body.append(_centered(f"Latest release: {theme.green(version)}", inner))
    body.append(_centered(theme.dim(TAGLINE), inner))
    return frame_box(TITLE, body, inner)


def render_step_checklist(
    steps: Sequence[StepItem], inner: int, min_body: int = 0
) -> list[str]:
    body = []
    for step in steps:
        marker = theme.green("✔") if step.completed else "□"
        body.append(f" {marker} {step.label}")
    return frame_box(STEPS_TITLE, body, inner, min_body)


def status_marker(status: bool, warning: bool) -> tuple[str, Callable[[str], str]]:
    """Marker glyph and colour for a status item.

    A warning wins over the ``status`` flag, since warned checks still pass.
    """
    if warning:
        return "▲", theme.yellow
    if status:
        return "●", theme.green
    return "✗", theme.red


def render_status_checklist(
    items: Sequence[StatusItem], inner: int, min_body: int = 0
) -> list[str]:
    body = []
    for item in items:
        marker, colour = status_marker(item.status, item.warning)
        label = item.label if item.status else colour(item.label)
        body.append(f" {colour(marker)} {label}")
    return frame_box(STATUS_TITLE, body, inner, min_body)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def compose_fixed_block(
    columns: int,
    version: str,
    steps: Sequence[StepItem],
    status: Sequence[StatusItem],
) -> list[str]:
    """Lay out the whole header for a terminal *columns* wide.

    Columns are aligned row for row: whichever side is shorter receives
    blank framed rows before its bottom border.
    """
    inner = panel_inner_width(columns)
    title = render_title_block(inner, version)

    # Bodies exclude the two border rows of each box.
    steps_body = max(len(steps), len(status) - len(title))
    left = title + render_step_checklist(steps, inner, min_body=steps_body)
    right = render_status_checklist(status, inner, min_body=len(left) - 2)

    gap = " " * PANEL_GAP
    return [l + gap + r for l, r in zip(left, right)]
