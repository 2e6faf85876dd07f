"""CLI entry point for evo-installer. Uses Click for argument parsing."""

from __future__ import annotations

import json
import logging
import sys

import click

from evo.installer.config import InstallerSettings
from evo.installer.panels import status_marker
from evo.installer.questions import InstallationAborted, default_steps, gather_inputs
from evo.installer.renderer import new_renderer
from evo.installer.system_status import (
    StatusLevel,
    collect_system_status,
    to_status_items,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _setup_logging(log_file: str | None, verbose: bool) -> None:
    # The dashboard owns stdout; without a log file only warnings reach stderr.
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG if verbose else logging.INFO,
            format=LOG_FORMAT,
        )
    else:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format=LOG_FORMAT,
        )


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx):
    """Evolution CMS installer."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------

@main.command()
@click.argument("name", required=False, default=".")
@click.option("--save", "save_path", default=None, type=click.Path(dir_okay=False),
              help="Write the collected answers to a JSON file")
@click.option("--include-secrets", is_flag=True,
              help="Keep passwords in the --save output")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False),
              help="Write diagnostic logs to this file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def install(name, save_path, include_secrets, log_file, verbose):
    """Run the interactive installer for a new project in NAME."""
    _setup_logging(log_file, verbose)
    settings = InstallerSettings.from_env()
    tui = new_renderer(settings=settings)
    logger.info("Installer started for %s (interactive=%s)", name, tui.interactive)

    try:
        checks = collect_system_status()
        tui.set_system_status(to_status_items(checks))
        tui.set_steps(default_steps())

        php = next(c for c in checks if c.key == "php")
        if php.level is StatusLevel.ERROR:
            tui.add_log(f"{php.label}: Evolution CMS requires PHP 8.3 or newer.", "error")
            sys.exit(1)
        tui.add_log(f"{php.label} is supported.", "success")
        tui.complete_step("php")

        options = gather_inputs(tui)

        if save_path:
            with open(save_path, "w", encoding="utf-8") as f:
                json.dump(options.to_dict(include_secrets), f, indent=2)
                f.write("\n")
            tui.add_log(f"Answers saved to {save_path}", "success")

        tui.add_log(
            f"Ready to install Evolution CMS ({options.database.driver}, "
            f"language {options.language}).",
            "success",
        )
    except InstallationAborted as e:
        logger.info("Installation aborted: %s", e)
        tui.add_log("Installation cancelled.", "warning")
        sys.exit(1)
    except click.Abort:
        tui.add_log("Installation cancelled.", "warning")
        raise
    finally:
        tui.close()


# ---------------------------------------------------------------------------
# system-status
# ---------------------------------------------------------------------------

@main.command("system-status")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text",
              help="Output format")
@click.option("--path", default=".", type=click.Path(file_okay=False),
              help="Directory whose free disk space is checked")
def system_status(fmt, path):
    """Print the environment checks shown in the installer header."""
    checks = collect_system_status(path)

    if fmt == "json":
        click.echo(json.dumps([c.to_dict() for c in checks], indent=2))
        return

    for item in to_status_items(checks):
        marker, colour = status_marker(item.status, item.warning)
        click.echo(f"{colour(marker)} {item.label}")

    if any(c.level is StatusLevel.ERROR for c in checks):
        sys.exit(1)
