"""Installer dashboard renderer.

``TuiRenderer`` owns the whole screen for one installation run.  The top of
the screen is a fixed header (logo and version, step checklist, system
status) that is repainted only when its content or the terminal size
changes.  Below it sits the log region, which is cleared and repainted in
place on every update so the header never scrolls away and nothing piles
up in the scrollback.

Prompts (:meth:`TuiRenderer.ask`, :meth:`TuiRenderer.select`,
:meth:`TuiRenderer.confirm`) read single keystrokes in raw mode while the
dashboard stays live.  The question is logged as an ``ask`` line, the
in-progress answer is layered under it without being committed, and on
Enter it becomes a single ``✔ answer`` log line.

When the output is not an interactive terminal the renderer switches to
plain mode: no cursor control, each log mutation prints the newest log
line with styling stripped, and prompts fall back to click's line-based
prompts.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import IO, Any, Callable, Iterable, Mapping, Sequence

import click

from evo.installer import theme
from evo.installer.config import RENDER_THROTTLE_SECONDS, InstallerSettings
from evo.installer.keys import KeyBuffer
from evo.installer.log_region import (
    LogBuffer,
    format_progress_line,
    is_progress_line,
    log_viewport_height,
    progress_percent,
    render_log_block,
    visible_tail,
)
from evo.installer.panels import StatusItem, StepItem, compose_fixed_block
from evo.installer.prompts import (
    MenuSelect,
    TextPrompt,
    render_radio,
    render_radio_vertical,
)
from evo.installer.terminal import ProcessTerminal, Terminal, is_interactive
from evo.installer.utils import strip_ansi
from evo.installer.version import DEFAULT_VERSION, fetch_latest_version

logger = logging.getLogger(__name__)

__all__ = [
    "StatusItem",
    "StepItem",
    "TuiRenderer",
    "match_choice",
    "new_renderer",
]


def _to_status_item(item: StatusItem | Mapping[str, Any]) -> StatusItem:
    if isinstance(item, StatusItem):
        return StatusItem(item.label, item.status, item.warning)
    return StatusItem(
        label=str(item.get("label", "")),
        status=bool(item.get("status", True)),
        warning=bool(item.get("warning", False)),
    )


def _to_step_items(
    items: Iterable[StepItem | Mapping[str, Any]] | Mapping[str, Mapping[str, Any]],
) -> list[StepItem]:
    keyed: Iterable[tuple[str, Any]]
    if isinstance(items, Mapping):
        keyed = items.items()
    else:
        keyed = (("", item) for item in items)

    steps = []
    for i, (key, item) in enumerate(keyed):
        if isinstance(item, StepItem):
            steps.append(StepItem(item.label, item.completed, item.key or key))
        else:
            steps.append(
                StepItem(
                    label=str(item.get("label") or f"Step {i + 1}"),
                    completed=bool(item.get("completed", False)),
                    key=key,
                )
            )
    return steps


def match_choice(
    answer: str, options: Sequence[str], labels: Sequence[str] | None = None
) -> int | None:
    """Resolve typed text to an option index.

    Tries, in order: exact value or label (case-insensitive), a 1-based
    number, then the first value or label starting with the text.
    """
    text = answer.strip().lower()
    if not text:
        return None
    names = [
        (opt.lower(), (labels[i] if labels and i < len(labels) else opt).lower())
        for i, opt in enumerate(options)
    ]
    for i, (value, label) in enumerate(names):
        if text in (value, label):
            return i
    if text.isdigit() and 1 <= int(text) <= len(options):
        return int(text) - 1
    for i, (value, label) in enumerate(names):
        if value.startswith(text) or label.startswith(text):
            return i
    return None


class TuiRenderer:
    """Session state and drawing for one installer run."""

    def __init__(
        self,
        terminal: Terminal | None = None,
        *,
        interactive: bool | None = None,
        settings: InstallerSettings | None = None,
        version_fetcher: Callable[[], str] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or InstallerSettings.from_env()
        self.terminal: Terminal = terminal or ProcessTerminal(
            write_log_path=self.settings.write_log_path
        )
        if interactive is None:
            interactive = not self.settings.ci and is_interactive()
        self.interactive: bool = interactive

        self._version_fetcher = version_fetcher or (
            lambda: fetch_latest_version(self.settings)
        )
        # None until the banner first needs it.
        self._latest_version: str | None = None

        self._clock = clock
        self._last_render: float | None = None

        self._logs = LogBuffer()
        self._steps: list[StepItem] = []
        self._system_status: list[StatusItem] = []
        self._active_input: str | None = None

        # Header state
        self._fixed_rendered: bool = False
        self._fixed_lines: int = 0
        self._fixed_size: tuple[int, int] | None = None

        # Plain mode bookkeeping
        self._plain_dirty: bool = False
        self._plain_progress: dict[str, int] = {}

        # Log lines occupied by the menu currently on screen
        self._menu_lines: int = 0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def logs(self) -> list[str]:
        return self._logs.lines

    @property
    def steps(self) -> list[StepItem]:
        return [dataclasses.replace(step) for step in self._steps]

    @property
    def system_status(self) -> list[StatusItem]:
        return [dataclasses.replace(item) for item in self._system_status]

    @property
    def active_input(self) -> str | None:
        return self._active_input

    @property
    def fixed_rendered(self) -> bool:
        return self._fixed_rendered

    @property
    def fixed_lines(self) -> int:
        return self._fixed_lines

    @property
    def latest_version(self) -> str:
        """Release shown in the banner, fetched on first use."""
        if self._latest_version is None:
            try:
                self._latest_version = self._version_fetcher()
            except Exception as e:
                logger.debug("Version fetcher failed: %s", e)
                self._latest_version = ""
            if not self._latest_version:
                self._latest_version = DEFAULT_VERSION
        return self._latest_version

    # ------------------------------------------------------------------
    # Fixed region mutators
    # ------------------------------------------------------------------

    def set_system_status(self, items: Iterable[StatusItem | Mapping[str, Any]]) -> None:
        self._system_status = [_to_status_item(item) for item in items]
        self._fixed_rendered = False
        self.render(force=True)

    def set_steps(
        self,
        items: Iterable[StepItem | Mapping[str, Any]] | Mapping[str, Mapping[str, Any]],
    ) -> None:
        self._steps = _to_step_items(items)
        self._fixed_rendered = False
        self.render(force=True)

    def complete_step(self, key: str) -> None:
        """Tick the step whose key or label is *key*.  Steps never untick."""
        changed = False
        for step in self._steps:
            if (step.key == key or step.label == key) and not step.completed:
                step.completed = True
                changed = True
        if changed:
            self._fixed_rendered = False
            self.render(force=True)

    # ------------------------------------------------------------------
    # Log region mutators
    # ------------------------------------------------------------------

    def add_log(self, message: str, kind: theme.LogKind = "info") -> None:
        self._logs.append(theme.style_log_line(message, kind))
        self._plain_dirty = True
        self.render(force=True)

    def replace_last_log(self, line: str) -> None:
        self._logs.replace_last(line)
        self._plain_dirty = True
        self.render(force=True)

    def replace_last_logs(self, line: str, count: int) -> None:
        """Collapse up to *count* trailing lines into *line*."""
        self._logs.replace_last_many([line], count)
        self._plain_dirty = True
        self.render(force=True)

    def replace_last_logs_multiple(self, lines: Sequence[str], count: int) -> None:
        self._logs.replace_last_many(lines, count)
        self._plain_dirty = True
        self.render(force=True)

    def clear_logs(self) -> None:
        self._logs.clear()
        self._active_input = None
        self._plain_progress.clear()
        self.render(force=True)

    def update_progress(
        self, label: str, current: float, total: float, unit: str = "bytes"
    ) -> None:
        """Add or update the progress line for *label* in place."""
        line = format_progress_line(label, current, total, unit)
        if is_progress_line(self._logs.last(), label):
            self._logs.replace_last(line)
        else:
            self._logs.append(line)
            self._plain_progress.pop(label, None)

        percent = progress_percent(current, total)
        if self._plain_progress.get(label) != percent:
            self._plain_progress[label] = percent
            self._plain_dirty = True
        self.render(force=True)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, force: bool = False) -> None:
        """Repaint what changed.

        Unforced calls within the throttle window are dropped.  Every public
        mutator forces, so the window only coalesces future periodic
        repaints.
        """
        now = self._clock()
        if (
            not force
            and self._last_render is not None
            and now - self._last_render < RENDER_THROTTLE_SECONDS
        ):
            return
        self._last_render = now

        if not self.interactive:
            self._render_plain()
            return

        columns, rows = self.terminal.columns, self.terminal.rows
        if not self._fixed_rendered or self._fixed_size != (columns, rows):
            self._paint_fixed(columns, rows)
        self._paint_logs(columns, rows)

    def _paint_fixed(self, columns: int, rows: int) -> None:
        block = compose_fixed_block(
            columns, self.latest_version, self._steps, self._system_status
        )
        self.terminal.hide_cursor()
        self.terminal.clear_screen()
        for row, line in enumerate(block, start=1):
            self.terminal.move_to(row)
            self.terminal.write(line)
        self._fixed_lines = len(block)
        self._fixed_size = (columns, rows)
        self._fixed_rendered = True

    def _paint_logs(self, columns: int, rows: int) -> None:
        available = log_viewport_height(rows, self._fixed_lines)
        start = self._fixed_lines + 1

        self.terminal.move_to(start)
        for _ in range(available + 2):
            self.terminal.clear_line()
            self.terminal.cursor_down()

        visible = visible_tail(self._logs.lines, self._active_input, available)
        for offset, line in enumerate(render_log_block(visible, columns)):
            self.terminal.move_to(start + offset)
            self.terminal.write(line)

    def _render_plain(self) -> None:
        if not self._plain_dirty:
            return
        self._plain_dirty = False
        last = self._logs.last()
        if last is not None:
            self.terminal.write(strip_ansi(last) + "\n")

    def close(self) -> None:
        """Leave the cursor below the dashboard and make it visible again."""
        if not self.interactive:
            return
        self.terminal.move_to(self.terminal.rows)
        self.terminal.write("\r\n")
        self.terminal.show_cursor()

    def __enter__(self) -> TuiRenderer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def render_radio(
        self, options: Sequence[str], active: int, labels: Sequence[str] | None = None
    ) -> str:
        return render_radio(options, active, labels)

    def render_radio_vertical(
        self,
        options: Sequence[str],
        active: int,
        labels: Sequence[str] | None = None,
        max_visible: int | None = None,
    ) -> list[str]:
        return render_radio_vertical(options, active, labels, max_visible)

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def ask(self, label: str, default: str = "", hidden: bool = False) -> str:
        """Ask for one line of text.

        Leaves two log lines behind: the question and ``✔ answer``.  Callers
        usually collapse both with ``replace_last_logs(summary, 2)``.
        """
        self.add_log(label, "ask")
        prompt = TextPrompt(default, hidden)

        if not self.interactive:
            prompt.buffer = self._plain_ask(default, hidden)
        else:
            self._active_input = prompt.display()
            self.render(force=True)
            keys = KeyBuffer()
            try:
                with self.terminal.raw_mode():
                    while not prompt.committed:
                        if self._feed(prompt, keys, self.terminal.read_key()):
                            self._active_input = prompt.display()
                            self.render(force=True)
            finally:
                self._active_input = None

        self._logs.append(prompt.resolved_line())
        self.render(force=True)
        return prompt.value

    def select(
        self,
        question: str,
        options: Sequence[str],
        labels: Sequence[str] | None = None,
        default_index: int = 0,
        vertical: bool = False,
        summary: str = "Selected",
    ) -> int:
        """Single choice from *options*; returns the chosen index.

        The question and menu collapse into ``✔ summary: label.``
        """
        menu = MenuSelect(options, default_index)
        self.add_log(question, "ask")

        if not self.interactive:
            self._plain_select(menu, labels)
        else:
            self._run_menu(menu, labels, vertical)

        label = labels[menu.active] if labels and menu.active < len(labels) else menu.value
        self._collapse_menu(theme.resolved(f"{summary}: {label}."))
        return menu.active

    def confirm(
        self,
        question: str,
        no: str = "No",
        yes: str = "Yes",
        default: bool = False,
    ) -> bool:
        """Two-option menu (*no* first, *yes* second) returning a boolean."""
        menu = MenuSelect([no, yes], 1 if default else 0)
        self.add_log(question, "ask")

        if not self.interactive:
            self._plain_select(menu, None)
        else:
            self._run_menu(menu, None, vertical=False)

        self._collapse_menu(theme.resolved(menu.value))
        return menu.active == 1

    # -- menu internals --------------------------------------------------

    def _run_menu(
        self, menu: MenuSelect, labels: Sequence[str] | None, vertical: bool
    ) -> None:
        max_visible = None
        if vertical:
            viewport = log_viewport_height(self.terminal.rows, self._fixed_lines)
            # Leave room for the question and the position line.
            max_visible = max(1, viewport - 2)

        def draw() -> list[str]:
            if vertical:
                return render_radio_vertical(menu.options, menu.active, labels, max_visible)
            return [render_radio(menu.options, menu.active, labels)]

        lines = draw()
        self._logs.extend(lines)
        self.render(force=True)
        self._menu_lines = len(lines)

        keys = KeyBuffer()
        with self.terminal.raw_mode():
            while not menu.committed:
                if self._feed(menu, keys, self.terminal.read_key()) and not menu.committed:
                    lines = draw()
                    self.replace_last_logs_multiple(lines, self._menu_lines)
                    self._menu_lines = len(lines)

    def _collapse_menu(self, line: str) -> None:
        # Question line plus whatever menu lines were drawn.
        count = 1 + self._menu_lines
        self._menu_lines = 0
        self.replace_last_logs(line, count)

    @staticmethod
    def _feed(machine: TextPrompt | MenuSelect, keys: KeyBuffer, data: str) -> bool:
        changed = False
        for token in keys.feed(data):
            changed = machine.handle_key(token) or changed
            if machine.committed:
                break
        return changed

    # -- plain mode ------------------------------------------------------

    def _plain_ask(self, default: str, hidden: bool) -> str:
        answer = click.prompt(
            "›",
            default=default,
            show_default=bool(default) and not hidden,
            hide_input=hidden,
            prompt_suffix=" ",
        )
        return str(answer)

    def _plain_select(self, menu: MenuSelect, labels: Sequence[str] | None) -> None:
        names = [
            labels[i] if labels and i < len(labels) else opt
            for i, opt in enumerate(menu.options)
        ]
        hint = " / ".join(f"{i + 1}) {name}" for i, name in enumerate(names))
        while True:
            answer = click.prompt(
                f"  {hint}",
                default=menu.value,
                show_default=True,
                prompt_suffix="\n› ",
            )
            index = match_choice(str(answer), menu.options, labels)
            if index is not None:
                menu.active = index
                menu.committed = True
                return
            click.echo(f"Unknown choice: {answer}", err=True)


def new_renderer(
    output: IO[str] | None = None,
    settings: InstallerSettings | None = None,
) -> TuiRenderer:
    """Renderer drawing to *output* (stdout by default).

    Interactivity is decided here, once, from *output* and the
    environment.
    """
    settings = settings or InstallerSettings.from_env()
    terminal = ProcessTerminal(output=output, write_log_path=settings.write_log_path)
    return TuiRenderer(
        terminal,
        interactive=not settings.ci and is_interactive(output),
        settings=settings,
    )
