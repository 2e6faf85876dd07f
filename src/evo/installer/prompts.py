"""Keystroke-driven prompt state machines.

``TextPrompt`` collects one line of text with type-to-replace defaults;
``MenuSelect`` tracks the highlighted option of a single-choice menu.  Both
consume key tokens from :func:`evo.installer.keys.split_keys` and know
nothing about the terminal; the renderer owns raw mode and repainting.
"""

from __future__ import annotations

import enum
from typing import Sequence

from evo.installer import theme
from evo.installer.keys import Key, is_printable, parse_key

MASK = "•"
MASKED_VALUE = MASK * 8
EMPTY_VALUE = "(empty)"


class PromptState(enum.Enum):
    AWAITING_FIRST_KEY = "awaiting_first_key"
    EDITING = "editing"
    COMMITTED = "committed"


class TextPrompt:
    """Single-line text entry.

    The default is shown dimmed until the first key.  Typing replaces it
    rather than editing it, and backspace on the untouched default clears
    it.  Enter commits the trimmed buffer, or the default when the buffer
    is blank.
    """

    def __init__(self, default: str = "", hidden: bool = False) -> None:
        self.default = default
        self.hidden = hidden
        self.state = PromptState.AWAITING_FIRST_KEY
        self.buffer = ""

    @property
    def committed(self) -> bool:
        return self.state is PromptState.COMMITTED

    @property
    def value(self) -> str:
        stripped = self.buffer.strip()
        return stripped if stripped else self.default

    def handle_key(self, token: str) -> bool:
        """Apply one key token.  Returns ``True`` if the display changed."""
        if self.committed:
            return False

        key = parse_key(token)
        if key == Key.enter:
            self.state = PromptState.COMMITTED
            return True

        if key == Key.backspace:
            if self.state is PromptState.AWAITING_FIRST_KEY:
                self.state = PromptState.EDITING
                return True
            if self.buffer:
                self.buffer = self.buffer[:-1]
                return True
            return False

        if is_printable(token):
            self.state = PromptState.EDITING
            self.buffer += token
            return True

        return False

    def display(self) -> str:
        """The in-progress input line shown under the question."""
        if self.state is PromptState.AWAITING_FIRST_KEY:
            shown = MASK * len(self.default) if self.hidden else self.default
            return f"  {theme.cyan('›')} {theme.dim(shown)}"
        shown = MASK * len(self.buffer) if self.hidden else self.buffer
        return f"  {theme.cyan('›')} {shown}{theme.dim('▏')}"

    def resolved_line(self) -> str:
        """``✔ value`` for the committed answer, masked when hidden."""
        value = self.value
        if self.hidden:
            value = MASKED_VALUE if value else EMPTY_VALUE
        return theme.resolved(value)


class MenuSelect:
    """Clamped highlight index over a fixed option list.

    Left/up move back, right/down move forward, neither wraps.  Anything
    else is ignored.
    """

    def __init__(self, options: Sequence[str], default_index: int = 0) -> None:
        if not options:
            raise ValueError("menu needs at least one option")
        self.options = list(options)
        self.active = max(0, min(len(self.options) - 1, default_index))
        self.committed = False

    @property
    def value(self) -> str:
        return self.options[self.active]

    def handle_key(self, token: str) -> bool:
        """Apply one key token.  Returns ``True`` if the display changed."""
        if self.committed:
            return False

        key = parse_key(token)
        previous = self.active
        if key in (Key.left, Key.up):
            self.active = max(0, self.active - 1)
        elif key in (Key.right, Key.down):
            self.active = min(len(self.options) - 1, self.active + 1)
        elif key == Key.enter:
            self.committed = True
            return True
        return self.active != previous


# ---------------------------------------------------------------------------
# Menu rendering
# ---------------------------------------------------------------------------


def _label_for(options: Sequence[str], labels: Sequence[str] | None, index: int) -> str:
    if labels is not None and index < len(labels):
        return labels[index]
    return options[index]


def render_radio(
    options: Sequence[str], active: int, labels: Sequence[str] | None = None
) -> str:
    """All options on one line: ``● MySQL  ○ PostgreSQL  ○ SQLite``."""
    parts = []
    for i in range(len(options)):
        label = _label_for(options, labels, i)
        if i == active:
            parts.append(f"{theme.green('●')} {theme.bold(label)}")
        else:
            parts.append(f"{theme.gray('○')} {label}")
    return "  " + "  ".join(parts)


def render_radio_vertical(
    options: Sequence[str],
    active: int,
    labels: Sequence[str] | None = None,
    max_visible: int | None = None,
) -> list[str]:
    """One option per line with its value as a dimmed hint.

    With *max_visible* smaller than the option count, a window centred on
    the active option is shown followed by a ``(n/total)`` line, so the
    number of lines stays constant while the highlight moves.
    """
    total = len(options)
    start, end = 0, total
    if max_visible is not None and 0 < max_visible < total:
        start = max(0, min(active - max_visible // 2, total - max_visible))
        end = start + max_visible

    lines = []
    for i in range(start, end):
        value = options[i]
        label = _label_for(options, labels, i)
        if i == active:
            lines.append(f"  {theme.green('●')} {theme.bold(label)} {theme.gray(f'({value})')}")
        else:
            lines.append(f"  {theme.gray('○')} {label} {theme.gray(f'({value})')}")

    if end - start < total:
        lines.append(theme.gray(f"  ({active + 1}/{total})"))
    return lines
