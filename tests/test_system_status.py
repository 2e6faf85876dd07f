"""Tests for the environment checks."""

from __future__ import annotations

from evo.installer.system_status import (
    StatusCheck,
    StatusLevel,
    check_composer,
    check_disk,
    check_git,
    check_php,
    collect_system_status,
    format_disk_free,
    parse_version,
    to_status_items,
)


def _runner(outputs: dict[str, str | None]):
    def run(args: list[str]) -> str | None:
        return outputs.get(args[0])

    return run


class TestParsing:
    def test_parse_version(self) -> None:
        assert parse_version("git version 2.43.0") == (2, 43, 0)
        assert parse_version("8.3") == (8, 3, 0)
        assert parse_version("none") is None

    def test_format_disk_free(self) -> None:
        assert format_disk_free(512) == "512.0 B free"
        assert format_disk_free(5 * 1024 ** 3) == "5.0 GB free"


class TestChecks:
    def test_supported_php(self) -> None:
        check = check_php(_runner({"php": "8.3.4"}))
        assert check.level is StatusLevel.OK
        assert check.label == "PHP - 8.3.4"

    def test_old_php_is_error(self) -> None:
        check = check_php(_runner({"php": "8.2.0"}))
        assert check.level is StatusLevel.ERROR
        assert check.label == "PHP - 8.2.0"

    def test_missing_php_is_error(self) -> None:
        assert check_php(_runner({})).level is StatusLevel.ERROR

    def test_composer_found(self) -> None:
        check = check_composer(_runner({"composer": "Composer version 2.7.1 2024-02-09"}))
        assert check == StatusCheck("composer", "Composer - 2.7.1")

    def test_missing_composer_is_warning(self) -> None:
        assert check_composer(_runner({})).level is StatusLevel.WARN

    def test_git(self) -> None:
        assert check_git(_runner({"git": "git version 2.43.0"})).label == "Git - 2.43.0"
        assert check_git(_runner({})).level is StatusLevel.WARN

    def test_disk_of_missing_path_warns(self, tmp_path) -> None:
        check = check_disk(str(tmp_path / "missing"))
        assert check.level is StatusLevel.WARN

    def test_disk_of_existing_path(self, tmp_path) -> None:
        check = check_disk(str(tmp_path))
        assert check.label.startswith("Disk - ")
        assert check.label.endswith(" free")

    def test_collect_order(self, tmp_path) -> None:
        checks = collect_system_status(str(tmp_path), _runner({}))
        assert [c.key for c in checks] == ["os", "python", "php", "composer", "git", "disk"]


class TestStatusItems:
    def test_levels_map_to_flags(self) -> None:
        items = to_status_items(
            [
                StatusCheck("a", "A", StatusLevel.OK),
                StatusCheck("b", "B", StatusLevel.WARN),
                StatusCheck("c", "C", StatusLevel.ERROR),
            ]
        )
        assert [(i.status, i.warning) for i in items] == [(True, False), (True, True), (False, False)]

    def test_to_dict(self) -> None:
        assert StatusCheck("php", "PHP - 8.3.4").to_dict() == {
            "key": "php",
            "label": "PHP - 8.3.4",
            "level": "ok",
        }
