"""Environment checks shown in the dashboard's system-status panel.

Checks are run once at startup.  Each produces a ``StatusCheck`` with a
level of ``ok``, ``warn`` or ``error``; :func:`to_status_items` maps those
onto the renderer's ``status``/``warning`` flags.
"""

from __future__ import annotations

import enum
import logging
import platform
import re
import shutil
import subprocess
from dataclasses import asdict, dataclass
from typing import Callable

from evo.installer.panels import StatusItem

logger = logging.getLogger(__name__)

MIN_PHP_VERSION = (8, 3, 0)
LOW_DISK_BYTES = 1024 ** 3

_UNITS = ["B", "KB", "MB", "GB", "TB"]


class StatusLevel(str, enum.Enum):
    OK = "ok"
    WARN = "warn"
    ERROR = "error"


@dataclass
class StatusCheck:
    key: str
    label: str
    level: StatusLevel = StatusLevel.OK

    def to_dict(self) -> dict[str, str]:
        d = asdict(self)
        d["level"] = self.level.value
        return d


# Returns stdout of a command, or None if it could not be run.
CommandRunner = Callable[[list[str]], "str | None"]


def run_command(args: list[str], timeout: float = 10.0) -> str | None:
    if shutil.which(args[0]) is None:
        return None
    try:
        proc = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("%s failed: %s", args[0], e)
        return None
    if proc.returncode != 0:
        logger.debug("%s exited with %d: %s", args[0], proc.returncode, proc.stderr.strip())
        return None
    return proc.stdout.strip()


def parse_version(text: str) -> tuple[int, ...] | None:
    match = re.search(r"(\d+)\.(\d+)(?:\.(\d+))?", text)
    if not match:
        return None
    return tuple(int(part or 0) for part in match.groups())


def format_disk_free(free: float) -> str:
    """``12.3 GB free``: one decimal, largest unit keeping the value ≥ 1."""
    index = 0
    while free >= 1024 and index < len(_UNITS) - 1:
        free /= 1024
        index += 1
    return f"{free:.1f} {_UNITS[index]} free"


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def check_os() -> StatusCheck:
    name = platform.system()
    pretty = {"Darwin": "macOS"}.get(name, name or "Unknown")
    return StatusCheck("os", f"{pretty} - {platform.release()} ({platform.machine()})")


def check_python() -> StatusCheck:
    return StatusCheck("python", f"Python - {platform.python_version()}")


def check_php(run: CommandRunner = run_command) -> StatusCheck:
    output = run(["php", "-r", "echo PHP_VERSION;"])
    version = parse_version(output) if output else None
    if version is None:
        return StatusCheck("php", "PHP - not found", StatusLevel.ERROR)
    label = f"PHP - {output}"
    level = StatusLevel.OK if version >= MIN_PHP_VERSION else StatusLevel.ERROR
    return StatusCheck("php", label, level)


def check_composer(run: CommandRunner = run_command) -> StatusCheck:
    output = run(["composer", "--version", "--no-ansi"])
    match = re.search(r"Composer version (\S+)", output or "")
    if not match:
        return StatusCheck("composer", "Composer - not found", StatusLevel.WARN)
    return StatusCheck("composer", f"Composer - {match.group(1)}")


def check_git(run: CommandRunner = run_command) -> StatusCheck:
    output = run(["git", "--version"])
    version = parse_version(output) if output else None
    if version is None:
        return StatusCheck("git", "Git - not found", StatusLevel.WARN)
    return StatusCheck("git", "Git - " + ".".join(str(v) for v in version))


def check_disk(path: str = ".") -> StatusCheck:
    try:
        free = shutil.disk_usage(path).free
    except OSError as e:
        logger.debug("disk_usage(%s) failed: %s", path, e)
        return StatusCheck("disk", "Disk - unknown", StatusLevel.WARN)
    level = StatusLevel.WARN if free < LOW_DISK_BYTES else StatusLevel.OK
    return StatusCheck("disk", f"Disk - {format_disk_free(free)}", level)


def collect_system_status(
    path: str = ".", run: CommandRunner = run_command
) -> list[StatusCheck]:
    """Run every check, in panel order."""
    return [
        check_os(),
        check_python(),
        check_php(run),
        check_composer(run),
        check_git(run),
        check_disk(path),
    ]


def to_status_items(checks: list[StatusCheck]) -> list[StatusItem]:
    return [
        StatusItem(
            label=check.label,
            status=check.level is not StatusLevel.ERROR,
            warning=check.level is StatusLevel.WARN,
        )
        for check in checks
    ]
