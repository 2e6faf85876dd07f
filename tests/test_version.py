"""Tests for the latest-release lookup."""

from __future__ import annotations

import httpx

from evo.installer.config import InstallerSettings
from evo.installer.version import (
    DEFAULT_VERSION,
    fetch_latest_version,
    is_prerelease,
    pick_latest_release,
)

SETTINGS = InstallerSettings(github_api="https://api.test", repository="evolution-cms/evolution")


def _client(handler) -> httpx.Client:
    return httpx.Client(base_url=SETTINGS.github_api, transport=httpx.MockTransport(handler))


class TestPickLatestRelease:
    def test_skips_prereleases_and_drafts(self) -> None:
        releases = [
            {"tag_name": "3.4.0-beta1", "prerelease": False},
            {"tag_name": "3.3.9", "prerelease": True},
            {"tag_name": "3.3.8", "draft": True},
            {"tag_name": "3.3.7"},
            {"tag_name": "3.3.6"},
        ]
        assert pick_latest_release(releases) == "3.3.7"

    def test_none_when_nothing_stable(self) -> None:
        assert pick_latest_release([{"tag_name": "4.0.0-rc1"}]) is None

    def test_ignores_junk_entries(self) -> None:
        assert pick_latest_release(["x", {"name": "no tag"}, {"tag_name": "3.1.0"}]) == "3.1.0"

    def test_prerelease_markers(self) -> None:
        assert is_prerelease("3.0.0-alpha")
        assert is_prerelease("3.0.0-RC2")
        assert not is_prerelease("3.0.0")


class TestFetchLatestVersion:
    def test_returns_latest_stable(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["agent"] = request.headers.get("user-agent")
            return httpx.Response(200, json=[{"tag_name": "3.3.0"}, {"tag_name": "3.2.0"}])

        with _client(handler) as client:
            assert fetch_latest_version(SETTINGS, client) == "3.3.0"
        assert seen["path"] == "/repos/evolution-cms/evolution/releases"
        assert seen["agent"] == "EvolutionCMS-Installer"

    def test_http_error_falls_back(self) -> None:
        with _client(lambda request: httpx.Response(503)) as client:
            assert fetch_latest_version(SETTINGS, client) == DEFAULT_VERSION

    def test_network_error_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with _client(handler) as client:
            assert fetch_latest_version(SETTINGS, client) == DEFAULT_VERSION

    def test_bad_json_falls_back(self) -> None:
        with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            assert fetch_latest_version(SETTINGS, client) == DEFAULT_VERSION

    def test_unexpected_payload_falls_back(self) -> None:
        with _client(lambda request: httpx.Response(200, json={"message": "rate limited"})) as client:
            assert fetch_latest_version(SETTINGS, client) == DEFAULT_VERSION

    def test_offline_skips_network(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("network used while offline")

        offline = InstallerSettings(offline=True)
        with _client(handler) as client:
            assert fetch_latest_version(offline, client) == DEFAULT_VERSION
