"""Terminal text utilities: ANSI stripping, width measurement, truncation.

Panel and log lines carry SGR colour codes, so every layout computation
goes through :func:`visible_width` rather than ``len``.
"""

from __future__ import annotations

import functools
import re
import unicodedata

import grapheme
import wcwidth

RESET = "\x1b[0m"

# Cursor and colour controls the renderer itself emits.
_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

# Anything a log message might carry: CSI, OSC 8 links, APC payloads.
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"
    r"|\x1b\]8;;[^\x07]*\x07"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

_TAB = "   "


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from *text*."""
    return _ESCAPE_RE.sub("", text)


@functools.lru_cache(maxsize=1024)
def cluster_width(cluster: str) -> int:
    """Columns taken by one grapheme cluster (0, 1 or 2)."""
    first = ord(cluster[0])
    if len(cluster) == 1:
        if first < 0x20 or 0x7F <= first <= 0x9F:
            return 0
        return max(wcwidth.wcwidth(cluster), 0)

    # Emoji sequences: ZWJ joins, VS16 presentation, skin tones, flags.
    for ch in cluster:
        cp = ord(ch)
        if cp in (0x200D, 0xFE0F) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2
    if first >= 0x1F000:
        return 2
    if unicodedata.category(cluster[0])[0] == "M" or unicodedata.category(cluster[0]) == "Cf":
        return 0
    return max(wcwidth.wcwidth(cluster[0]), 0)


@functools.lru_cache(maxsize=512)
def _plain_width(plain: str) -> int:
    if plain.isascii() and plain.isprintable():
        return len(plain)
    return sum(cluster_width(g) for g in grapheme.graphemes(plain))


def visible_width(text: str) -> int:
    """Columns *text* occupies once escape codes are removed.

    Tabs count as three columns; wide and emoji clusters count as two.
    """
    if not text:
        return 0
    plain = strip_ansi(text).replace("\t", _TAB)
    return _plain_width(plain) if plain else 0


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Cut *text* to at most *max_width* columns.

    A cut line ends with *ellipsis*, which is counted inside the limit.
    With *pad*, the result is space-filled to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    width = visible_width(text)
    if width > max_width:
        room = max_width - visible_width(ellipsis)
        if room <= 0:
            text = _take_columns(ellipsis, max_width)
        else:
            text = _take_columns(text, room) + ellipsis
        width = visible_width(text)

    if pad and width < max_width:
        text += " " * (max_width - width)
    return text


def pad_to_width(text: str, width: int) -> str:
    """Fit *text* into exactly *width* columns, truncating without ellipsis."""
    return truncate_to_width(text, width, ellipsis="", pad=True)


def _take_columns(text: str, limit: int) -> str:
    """Longest prefix of *text* fitting in *limit* columns.

    Escape codes are copied through.  If any were copied, a reset closes
    the prefix so a colour cut mid-span cannot leak into a panel border.
    """
    pieces: list[str] = []
    used = 0
    coloured = False
    pos = 0
    full = False

    for match in _CSI_RE.finditer(text):
        used, full = _take_clusters(text[pos:match.start()], limit, used, pieces)
        if full:
            break
        pieces.append(match.group(0))
        coloured = True
        pos = match.end()
    if not full:
        _take_clusters(text[pos:], limit, used, pieces)

    if coloured:
        pieces.append(RESET)
    return "".join(pieces)


def _take_clusters(
    chunk: str, limit: int, used: int, pieces: list[str]
) -> tuple[int, bool]:
    for g in grapheme.graphemes(chunk):
        w = cluster_width(g)
        if used + w > limit:
            return used, True
        pieces.append(g)
        used += w
    return used, False
