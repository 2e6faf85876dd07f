"""Latest Evolution CMS release lookup for the dashboard banner."""

from __future__ import annotations

import logging
import re

import httpx

from evo.installer.config import InstallerSettings

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "3.x"

_PRERELEASE_RE = re.compile(r"-(alpha|beta|rc|dev)", re.IGNORECASE)


def is_prerelease(tag: str) -> bool:
    return _PRERELEASE_RE.search(tag) is not None


def pick_latest_release(releases: list[dict]) -> str | None:
    """First stable tag in a GitHub releases listing (newest first)."""
    for release in releases:
        if not isinstance(release, dict):
            continue
        tag = release.get("tag_name")
        if not tag or release.get("prerelease") or release.get("draft"):
            continue
        if is_prerelease(tag):
            continue
        return tag
    return None


def fetch_latest_version(
    settings: InstallerSettings | None = None,
    client: httpx.Client | None = None,
) -> str:
    """Return the newest stable release tag, or :data:`DEFAULT_VERSION`.

    Never raises: network, HTTP and decoding errors all fall back to the
    default string.
    """
    settings = settings or InstallerSettings.from_env()
    if settings.offline:
        return DEFAULT_VERSION

    owns_client = client is None
    if client is None:
        client = httpx.Client(base_url=settings.github_api, timeout=settings.http_timeout)

    try:
        resp = client.get(
            f"/repos/{settings.repository}/releases",
            params={"per_page": 50, "page": 1},
            headers={
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "EvolutionCMS-Installer",
            },
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.debug("Release lookup failed: %s", e)
        return DEFAULT_VERSION
    finally:
        if owns_client:
            client.close()

    if not isinstance(data, list):
        logger.debug("Unexpected releases payload: %r", type(data))
        return DEFAULT_VERSION

    return pick_latest_release(data) or DEFAULT_VERSION
