"""Installer questions asked through the dashboard.

Each helper asks one thing via :class:`~evo.installer.renderer.TuiRenderer`
and collapses the question and answer into a single ``✔ summary`` log line,
the way the installer's log reads after every answered question.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Callable

from evo.installer import theme
from evo.installer.panels import StepItem
from evo.installer.renderer import TuiRenderer

DATABASE_DRIVERS: dict[str, str] = {
    "mysql": "MySQL or MariaDB",
    "pgsql": "PostgreSQL",
    "sqlite": "SQLite",
    "sqlsrv": "SQL Server",
}

LANGUAGES: dict[str, str] = {
    "en": "English",
    "uk": "Ukrainian",
    "az": "Azerbaijani",
    "be": "Belarusian",
    "bg": "Bulgarian",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "es": "Spanish",
    "fa": "Persian",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "it": "Italian",
    "ja": "Japanese",
    "nl": "Dutch",
    "nn": "Norwegian",
    "pl": "Polish",
    "pt": "Portuguese",
    "ru": "Russian",
    "sv": "Swedish",
    "zh": "Chinese",
}

DEFAULT_LANGUAGE = "en"
MIN_ADMIN_PASSWORD = 6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ADMIN_DIR_RE = re.compile(r"[^a-zA-Z0-9_-]")


class InstallationAborted(Exception):
    """The user chose to leave the installer."""


@dataclass
class DatabaseConfig:
    driver: str = "mysql"
    host: str = "localhost"
    name: str = "evo_db"
    user: str = "root"
    password: str = ""


@dataclass
class AdminConfig:
    username: str = "admin"
    email: str = ""
    password: str = ""
    directory: str = "manager"


@dataclass
class InstallOptions:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    language: str = DEFAULT_LANGUAGE

    def to_dict(self, include_secrets: bool = False) -> dict:
        data = asdict(self)
        if not include_secrets:
            data["database"].pop("password", None)
            data["admin"].pop("password", None)
        return data


def default_steps() -> dict[str, StepItem]:
    return {
        "php": StepItem("Step 1: Validate PHP version"),
        "database": StepItem("Step 2: Check database connection"),
        "admin": StepItem("Step 3: Create admin account"),
        "language": StepItem("Step 4: Choose language"),
        "download": StepItem("Step 5: Download Evolution CMS"),
        "install": StepItem("Step 6: Install Evolution CMS"),
        "finalize": StepItem("Step 7: Finalize installation"),
    }


def _summarize(tui: TuiRenderer, text: str, count: int = 2) -> None:
    tui.replace_last_logs(theme.resolved(text), count)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


def ask_database_type(tui: TuiRenderer) -> str:
    options = list(DATABASE_DRIVERS)
    index = tui.select(
        "Which database driver do you want to use?",
        options,
        labels=list(DATABASE_DRIVERS.values()),
        summary="Selected database driver",
    )
    return options[index]


def ask_database_host(tui: TuiRenderer) -> str:
    answer = tui.ask("Where is your database server located?", "localhost")
    _summarize(tui, f"Selected database host: {answer}.")
    return answer or "localhost"


def ask_database_name(tui: TuiRenderer, driver: str | None = None) -> str:
    if driver == "sqlite":
        answer = tui.ask("What is the path to your SQLite database file?", "database.sqlite")
        _summarize(tui, f"Selected database path: {answer}.")
        return answer or "database.sqlite"

    answer = tui.ask("What is your database name?", "evo_db")
    _summarize(tui, f"Selected database name: {answer}.")
    return answer or "evo_db"


def ask_database_user(tui: TuiRenderer) -> str:
    answer = tui.ask("What is your database username?", "root")
    _summarize(tui, f"Selected database user: {answer}.")
    return answer or "root"


def ask_database_password(tui: TuiRenderer) -> str:
    answer = tui.ask("What is your database password?", "", hidden=True)
    shown = "••••••••" if answer else "(empty)"
    _summarize(tui, f"Selected database password: {shown}.")
    return answer


def ask_retry_database_connection(tui: TuiRenderer) -> bool:
    """``True`` to re-enter the connection details, ``False`` to exit."""
    return tui.confirm(
        "Would you like to try again or exit installation?",
        no="Exit installation",
        yes="Try again",
    )


def gather_database_inputs(tui: TuiRenderer) -> DatabaseConfig:
    driver = ask_database_type(tui)
    if driver == "sqlite":
        return DatabaseConfig(driver=driver, host="", name=ask_database_name(tui, driver), user="")
    return DatabaseConfig(
        driver=driver,
        host=ask_database_host(tui),
        name=ask_database_name(tui, driver),
        user=ask_database_user(tui),
        password=ask_database_password(tui),
    )


# ---------------------------------------------------------------------------
# Admin account
# ---------------------------------------------------------------------------


def ask_admin_username(tui: TuiRenderer) -> str:
    answer = tui.ask("Enter your Admin username:", "admin")
    _summarize(tui, f"Your Admin username: {answer}.")
    return answer or "admin"


def _ask_validated(
    tui: TuiRenderer,
    question: str,
    validate: Callable[[str], str | None],
    summary: Callable[[str], str],
    hidden: bool = False,
) -> str:
    # A rejected answer leaves a warning line under the question; the next
    # attempt folds it away together with its own question and answer.
    warned = False
    while True:
        answer = tui.ask(question, hidden=hidden)
        count = 3 if warned else 2
        problem = validate(answer)
        if problem is None:
            _summarize(tui, summary(answer), count)
            return answer
        tui.replace_last_logs(theme.style_log_line(problem, "warning"), count)
        warned = True


def validate_email(answer: str) -> str | None:
    if not answer:
        return "Email address cannot be empty. Please try again."
    if not _EMAIL_RE.match(answer):
        return "Please enter a valid email address. Try again."
    return None


def validate_admin_password(answer: str) -> str | None:
    if not answer:
        return "Password cannot be empty. Please try again."
    if len(answer) < MIN_ADMIN_PASSWORD:
        return f"Password must be at least {MIN_ADMIN_PASSWORD} characters long. Try again."
    return None


def ask_admin_email(tui: TuiRenderer) -> str:
    return _ask_validated(
        tui,
        "Enter your Admin email:",
        validate_email,
        lambda answer: f"Your Admin email: {answer}.",
    )


def ask_admin_password(tui: TuiRenderer) -> str:
    return _ask_validated(
        tui,
        "Enter your Admin password:",
        validate_admin_password,
        lambda answer: "Your Admin password: ••••••••.",
        hidden=True,
    )


def sanitize_admin_directory(value: str | None) -> str:
    """Keep only ``[A-Za-z0-9_-]``; fall back to ``manager``."""
    sanitized = _ADMIN_DIR_RE.sub("", (value or "").strip())
    return sanitized or "manager"


def ask_admin_directory(tui: TuiRenderer) -> str:
    answer = tui.ask("Enter your Admin directory:", "manager")
    directory = sanitize_admin_directory(answer)
    _summarize(tui, f"Your Admin directory: {directory}.")
    return directory


def gather_admin_inputs(tui: TuiRenderer) -> AdminConfig:
    return AdminConfig(
        username=ask_admin_username(tui),
        email=ask_admin_email(tui),
        password=ask_admin_password(tui),
        directory=ask_admin_directory(tui),
    )


# ---------------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------------


def ask_language(tui: TuiRenderer) -> str:
    options = list(LANGUAGES)
    index = tui.select(
        "Which language do you want to use for installation?",
        options,
        labels=list(LANGUAGES.values()),
        default_index=options.index(DEFAULT_LANGUAGE),
        vertical=True,
        summary="Selected language",
    )
    return options[index]


# ---------------------------------------------------------------------------
# Whole interview
# ---------------------------------------------------------------------------


DatabaseCheck = Callable[[DatabaseConfig], "str | None"]


def gather_inputs(
    tui: TuiRenderer,
    check_database: DatabaseCheck | None = None,
) -> InstallOptions:
    """Ask every installer question, ticking steps as sections finish.

    *check_database* returns an error message for a config that cannot
    connect, or ``None``.  On failure the user may retry or exit; exiting
    raises :class:`InstallationAborted`.
    """
    while True:
        database = gather_database_inputs(tui)
        if check_database is None:
            break
        tui.add_log("Testing database connection...")
        error = check_database(database)
        if error is None:
            _summarize(tui, "Database connection successful!", 1)
            break
        tui.replace_last_logs(
            theme.style_log_line(f"Database connection failed: {error}", "error"), 1
        )
        if not ask_retry_database_connection(tui):
            raise InstallationAborted("database connection failed")
    tui.complete_step("database")

    admin = gather_admin_inputs(tui)
    tui.complete_step("admin")

    language = ask_language(tui)
    tui.complete_step("language")

    return InstallOptions(database=database, admin=admin, language=language)
