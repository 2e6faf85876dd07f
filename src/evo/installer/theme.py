"""ANSI colour helpers and log-line prefixes for the installer dashboard."""

from __future__ import annotations

from typing import Literal

# ── ANSI helpers ─────────────────────────────────────────────────────

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[0;31m"
_GREEN = "\033[0;32m"
_YELLOW = "\033[0;33m"
_CYAN = "\033[0;36m"
_WHITE = "\033[0;37m"
_GRAY = "\033[0;90m"
_BRIGHT_CYAN = "\033[1;36m"
_BRIGHT_WHITE = "\033[1;37m"


def _wrap(code: str, text: str) -> str:
    return f"{code}{text}{_RESET}"


def bold(text: str) -> str:
    return _wrap(_BOLD, text)


def dim(text: str) -> str:
    return _wrap(_DIM, text)


def red(text: str) -> str:
    return _wrap(_RED, text)


def green(text: str) -> str:
    return _wrap(_GREEN, text)


def yellow(text: str) -> str:
    return _wrap(_YELLOW, text)


def cyan(text: str) -> str:
    return _wrap(_CYAN, text)


def white(text: str) -> str:
    return _wrap(_WHITE, text)


def gray(text: str) -> str:
    return _wrap(_GRAY, text)


def bright_cyan(text: str) -> str:
    return _wrap(_BRIGHT_CYAN, text)


def frame(text: str) -> str:
    """Border colour shared by every panel."""
    return _wrap(_BRIGHT_WHITE, text)


# ── Log kinds ────────────────────────────────────────────────────────

LogKind = Literal["info", "success", "error", "warning", "ask"]

CHECK = "✔"
CROSS = "✗"
WARN = "⚠"
QUESTION = "?"

ICONS: dict[str, str] = {
    "success": CHECK,
    "error": CROSS,
    "warning": WARN,
    "ask": QUESTION,
}


def style_log_line(message: str, kind: LogKind = "info") -> str:
    """Prefix *message* with the icon and colour for *kind*.

    ``info`` lines are passed through untouched.  Unknown kinds are treated
    as ``info``.
    """
    if kind == "success":
        return f"{green(ICONS[kind])} {message}"
    if kind == "error":
        return f"{red(ICONS[kind])} {red(message)}"
    if kind == "warning":
        return f"{yellow(ICONS[kind])} {yellow(message)}"
    if kind == "ask":
        return f"{cyan(ICONS[kind])} {cyan(message)}"
    return message


def resolved(message: str) -> str:
    """A committed prompt answer: ``✔ message``."""
    return f"{green(CHECK)} {message}"
