"""Keyboard input decoding for raw-mode prompts.

Raw reads hand back whatever bytes the terminal produced: a single
printable character, a burst of pasted text, or an ANSI escape sequence
such as ``ESC [ A`` for the up arrow.  :func:`split_keys` cuts a chunk into
individual key tokens and :func:`parse_key` names the ones the prompts
care about.
"""

from __future__ import annotations

ESC = "\x1b"


class Key:
    """Named key identifiers returned by :func:`parse_key`."""

    enter = "enter"
    backspace = "backspace"
    up = "up"
    down = "down"
    left = "left"
    right = "right"


# Legacy (non-kitty) sequences.  SS3 forms are sent by terminals in
# application cursor mode.
_SEQUENCES: dict[str, str] = {
    "\x1b[A": Key.up,
    "\x1b[B": Key.down,
    "\x1b[C": Key.right,
    "\x1b[D": Key.left,
    "\x1bOA": Key.up,
    "\x1bOB": Key.down,
    "\x1bOC": Key.right,
    "\x1bOD": Key.left,
    "\r": Key.enter,
    "\n": Key.enter,
    "\x7f": Key.backspace,
    "\x08": Key.backspace,
}


def split_keys(data: str) -> list[str]:
    """Split a raw input chunk into key tokens.

    CSI sequences (``ESC [`` params final-byte) and SS3 sequences
    (``ESC O`` x) are kept whole; every other character is its own token,
    including an ``ESC`` that does not start one of those.
    """
    tokens: list[str] = []
    i = 0
    n = len(data)
    while i < n:
        ch = data[i]
        if ch != ESC or i + 1 >= n:
            tokens.append(ch)
            i += 1
            continue

        nxt = data[i + 1]
        if nxt == "[":
            j = i + 2
            # Parameter and intermediate bytes, then one final byte.
            while j < n and 0x20 <= ord(data[j]) <= 0x3F:
                j += 1
            end = min(j + 1, n)
            tokens.append(data[i:end])
            i = end
        elif nxt == "O" and i + 2 < n:
            tokens.append(data[i:i + 3])
            i += 3
        else:
            tokens.append(ESC)
            i += 1
    return tokens


def _unfinished_at(data: str) -> int:
    """Index where a trailing, still incomplete escape sequence starts.

    Returns ``len(data)`` when the chunk ends cleanly.
    """
    start = data.rfind(ESC)
    if start == -1:
        return len(data)
    rest = data[start + 1:]
    if not rest:
        return start
    if rest[0] == "[" and all(0x20 <= ord(c) <= 0x3F for c in rest[1:]):
        return start
    if rest == "O":
        return start
    return len(data)


class KeyBuffer:
    """Reassembles key tokens from raw reads.

    A read may end in the middle of an escape sequence (``a ESC [`` now,
    ``A`` on the next read).  The unfinished tail is held back and
    prepended to the next chunk instead of being split into stray keys.
    """

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, data: str) -> list[str]:
        """Add a raw chunk; return the key tokens completed by it."""
        data = self._pending + data
        cut = _unfinished_at(data)
        self._pending = data[cut:]
        return split_keys(data[:cut])


def parse_key(token: str) -> str | None:
    """Return the :class:`Key` name for *token*, or ``None``."""
    return _SEQUENCES.get(token)


def is_printable(token: str) -> bool:
    """True for a single printable character (no controls, no escapes)."""
    if len(token) != 1:
        return False
    cp = ord(token)
    return not (cp < 32 or cp == 0x7F or 0x80 <= cp <= 0x9F)
