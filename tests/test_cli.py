"""Tests for the click entry point, driven in plain mode by CliRunner."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from evo.installer import cli
from evo.installer.system_status import StatusCheck, StatusLevel

PLAIN_ENV = {"EVO_INSTALLER_OFFLINE": "1", "CI": "1"}

# driver, host, name, user, password, admin user, email, admin password,
# admin directory, language
ANSWERS = "\n".join(
    ["", "", "", "", "", "", "admin@example.com", "secret1", "cms-admin", ""]
) + "\n"


def _checks(php_level: StatusLevel = StatusLevel.OK) -> list[StatusCheck]:
    return [
        StatusCheck("os", "Linux - 6.8 (x86_64)"),
        StatusCheck("python", "Python - 3.12.1"),
        StatusCheck("php", "PHP - 8.3.4" if php_level is StatusLevel.OK else "PHP - 8.1.0", php_level),
        StatusCheck("composer", "Composer - not found", StatusLevel.WARN),
        StatusCheck("git", "Git - 2.43.0"),
        StatusCheck("disk", "Disk - 20.0 GB free"),
    ]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestInstallCommand:
    def test_full_run_in_plain_mode(self, runner: CliRunner, monkeypatch, tmp_path) -> None:
        monkeypatch.setattr(cli, "collect_system_status", lambda *a, **k: _checks())
        save = tmp_path / "answers.json"
        result = runner.invoke(
            cli.main, ["install", "--save", str(save)], input=ANSWERS, env=PLAIN_ENV
        )
        assert result.exit_code == 0, result.output
        assert "\x1b[" not in result.output
        assert "✔ PHP - 8.3.4 is supported." in result.output
        assert "✔ Your Admin email: admin@example.com." in result.output
        assert "✔ Your Admin directory: cms-admin." in result.output

        data = json.loads(save.read_text(encoding="utf-8"))
        assert data["database"]["driver"] == "mysql"
        assert data["admin"]["directory"] == "cms-admin"
        assert data["language"] == "en"
        assert "password" not in data["admin"]

    def test_save_with_secrets(self, runner: CliRunner, monkeypatch, tmp_path) -> None:
        monkeypatch.setattr(cli, "collect_system_status", lambda *a, **k: _checks())
        save = tmp_path / "answers.json"
        result = runner.invoke(
            cli.main,
            ["install", "--save", str(save), "--include-secrets"],
            input=ANSWERS,
            env=PLAIN_ENV,
        )
        assert result.exit_code == 0, result.output
        data = json.loads(save.read_text(encoding="utf-8"))
        assert data["admin"]["password"] == "secret1"

    def test_old_php_stops(self, runner: CliRunner, monkeypatch) -> None:
        monkeypatch.setattr(
            cli, "collect_system_status", lambda *a, **k: _checks(StatusLevel.ERROR)
        )
        result = runner.invoke(cli.main, ["install"], env=PLAIN_ENV)
        assert result.exit_code == 1
        assert "requires PHP 8.3 or newer" in result.output

    def test_closed_input_aborts(self, runner: CliRunner, monkeypatch) -> None:
        monkeypatch.setattr(cli, "collect_system_status", lambda *a, **k: _checks())
        result = runner.invoke(cli.main, ["install"], input="", env=PLAIN_ENV)
        assert result.exit_code == 1
        assert "Installation cancelled." in result.output

    def test_log_file(self, runner: CliRunner, monkeypatch, tmp_path) -> None:
        calls: list[tuple] = []
        monkeypatch.setattr(cli, "collect_system_status", lambda *a, **k: _checks())
        monkeypatch.setattr(cli, "_setup_logging", lambda log_file, verbose: calls.append((log_file, verbose)))
        log = tmp_path / "installer.log"
        runner.invoke(
            cli.main, ["install", "--log-file", str(log), "-v"], input=ANSWERS, env=PLAIN_ENV
        )
        assert calls == [(str(log), True)]


class TestSystemStatusCommand:
    def test_json(self, runner: CliRunner, monkeypatch) -> None:
        monkeypatch.setattr(cli, "collect_system_status", lambda *a, **k: _checks())
        result = runner.invoke(cli.main, ["system-status", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [c["key"] for c in data] == ["os", "python", "php", "composer", "git", "disk"]
        assert data[3]["level"] == "warn"

    def test_text_lists_markers(self, runner: CliRunner, monkeypatch) -> None:
        monkeypatch.setattr(cli, "collect_system_status", lambda *a, **k: _checks())
        result = runner.invoke(cli.main, ["system-status"])
        assert result.exit_code == 0
        assert "PHP - 8.3.4" in result.output
        assert "▲" in result.output

    def test_text_exit_code_on_error(self, runner: CliRunner, monkeypatch) -> None:
        monkeypatch.setattr(
            cli, "collect_system_status", lambda *a, **k: _checks(StatusLevel.ERROR)
        )
        result = runner.invoke(cli.main, ["system-status"])
        assert result.exit_code == 1


class TestGroup:
    def test_help_without_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.main, [])
        assert result.exit_code == 0
        assert "install" in result.output
        assert "system-status" in result.output
