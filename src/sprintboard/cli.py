from __future__ import annotations

import logging
import os
import subprocess
import sys

import click

from sprintboard.config import ConfigError, ensure_config, get_config

# Restore the default excepthook so Rich (installed by Textual) doesn't
# hijack tracebacks with fancy formatting that breaks log parsing.
sys.excepthook = sys.__excepthook__

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_file: str | None) -> None:
    """Log to ``log_file`` at DEBUG; without one, logging stays silent.

    The terminal belongs to Textual, so records never go to stderr.
    """
    if not log_file:
        logging.getLogger("sprintboard").addHandler(logging.NullHandler())
        return
    logging.basicConfig(filename=log_file, level=logging.DEBUG, format=LOG_FORMAT)
    # The SDK logs every request body at DEBUG
    logging.getLogger("azure").setLevel(logging.INFO)
    logging.getLogger("msrest").setLevel(logging.INFO)


def run_board(log_file: str | None) -> None:
    setup_logging(log_file)
    try:
        config = get_config()
    except ConfigError as e:
        path = ensure_config()
        raise click.ClickException(f"{e}\nEdit {path} and try again.") from e

    from sprintboard.tui.app import SprintboardApp

    logging.getLogger(__name__).info(
        "Starting board for %s/%s (team %s)",
        config.organization,
        config.project,
        config.team,
    )
    SprintboardApp(config).run()


@click.group(invoke_without_command=True)
@click.option(
    "--log-file",
    envvar="SPRINTBOARD_LOG",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write debug logs to this file.",
)
@click.pass_context
def cli(ctx: click.Context, log_file: str | None) -> None:
    """sprintboard: browse and update Azure DevOps sprint work items."""
    ctx.ensure_object(dict)
    ctx.obj["log_file"] = log_file
    if ctx.invoked_subcommand is None:
        run_board(log_file)


@cli.command()
@click.option(
    "--log-file",
    envvar="SPRINTBOARD_LOG",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write debug logs to this file.",
)
@click.pass_context
def board(ctx: click.Context, log_file: str | None) -> None:
    """Open the sprint board TUI."""
    run_board(log_file or (ctx.obj or {}).get("log_file"))


@cli.command()
@click.option("--edit", is_flag=True, help="Open config in $EDITOR.")
def config(edit: bool) -> None:
    """Show the Azure DevOps connection config, or open it in $EDITOR with --edit."""
    config_path = ensure_config()

    if edit:
        editor = os.environ.get("EDITOR", "vi")
        subprocess.run([editor, str(config_path)])
    else:
        click.echo(config_path.read_text())
