"""Environment-driven settings for the installer front-end."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

# Minimum spacing between two unforced repaints.
RENDER_THROTTLE_SECONDS = 0.03

_FALSY = {"", "0", "false", "no", "off"}


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    """True when *name* is set to anything other than an empty/false value."""
    value = environ.get(name)
    if value is None:
        return False
    return value.strip().lower() not in _FALSY


@dataclass
class InstallerSettings:
    """Settings read from ``EVO_INSTALLER_*`` variables."""

    ci: bool = False
    write_log_path: str = ""
    offline: bool = False
    github_api: str = "https://api.github.com"
    repository: str = "evolution-cms/evolution"
    http_timeout: float = 5.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InstallerSettings:
        env = os.environ if environ is None else environ
        try:
            timeout = float(env.get("EVO_INSTALLER_HTTP_TIMEOUT", "5"))
        except ValueError:
            timeout = 5.0
        return cls(
            ci=env_flag(env, "CI"),
            write_log_path=env.get("EVO_INSTALLER_WRITE_LOG", ""),
            offline=env_flag(env, "EVO_INSTALLER_OFFLINE"),
            github_api=env.get("EVO_INSTALLER_GITHUB_API", cls.github_api).rstrip("/"),
            repository=env.get("EVO_INSTALLER_REPO", cls.repository),
            http_timeout=timeout,
        )
