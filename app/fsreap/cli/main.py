"""Main CLI application entry point.

Defines the single fsreap command. Fatal errors (bad arguments, invalid
thresholds, unreadable root, probe failure) exit with status 1; runs
that had nothing to do or could not reach the stop floor exit with 0.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import click
import typer
from rich.logging import RichHandler

from fsreap import __version__
from fsreap.cli.display import print_eviction_summary, print_protected_report, print_statistics
from fsreap.core.config import load_config
from fsreap.core.errors import ReapError, UsageError
from fsreap.core.reaper import Reaper, RunOutcome, RunReport
from fsreap.utils.formatting import console, err_console, print_error

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="fsreap",
    help="Free space on scratch filesystems by removing least-recently-accessed entries.",
    add_completion=False,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"fsreap version {__version__}")
        raise typer.Exit()


def help_callback(ctx: typer.Context, value: bool) -> None:
    """Print help and exit with status 1."""
    if value:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


@app.command(context_settings={"help_option_names": []})
def reap(
    root: Annotated[
        Path,
        typer.Argument(help="Root of the tree to clean.", show_default=False),
    ],
    preserve_directories: Annotated[
        bool,
        typer.Option("-d", help="Preserve directories: never inventory or remove them."),
    ] = False,
    statistics: Annotated[
        bool,
        typer.Option("-s", help="Report the access-time distribution instead of cleaning."),
    ] = False,
    start_percent: Annotated[
        int | None,
        typer.Option(
            "-m",
            metavar="PERCENT",
            help="Start cleaning when free space is at or below this percent. (default: 20)",
            show_default=False,
        ),
    ] = None,
    stop_percent: Annotated[
        int | None,
        typer.Option(
            "-M",
            metavar="PERCENT",
            help="Stop once free space exceeds this percent. (default: value of -m)",
            show_default=False,
        ),
    ] = None,
    inode_percent: Annotated[
        int | None,
        typer.Option(
            "-i",
            metavar="PERCENT",
            help="Start and stop floor for free inodes, in percent. (default: 20)",
            show_default=False,
        ),
    ] = None,
    exclude: Annotated[
        str | None,
        typer.Option(
            "-e",
            metavar="REGEX",
            help="Skip paths matching this pattern, anchored at the root "
            r"(e.g. '/keep(/|$)'). (default: '/lost\+found(/|$)')",
            show_default=False,
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("-D", help="Print diagnostic output."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be removed without removing it."),
    ] = False,
    cross_filesystems: Annotated[
        bool,
        typer.Option(
            "--cross-filesystems",
            help="Also walk directories mounted from other filesystems under ROOT.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Read defaults from this TOML file."),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    show_help: Annotated[
        bool | None,
        typer.Option(
            "--help",
            "-h",
            callback=help_callback,
            is_eager=True,
            help="Show this message and exit.",
        ),
    ] = None,
) -> None:
    """Remove least-recently-accessed entries under ROOT until free space recovers."""
    configure_logging(debug)

    overrides = {
        "start_percent": start_percent,
        "stop_percent": stop_percent,
        "inode_percent": inode_percent,
        "exclude": exclude,
        # Unset flags must not override values from the config file
        "preserve_directories": preserve_directories or None,
        "statistics": statistics or None,
        "dry_run": dry_run or None,
        "one_filesystem": False if cross_filesystems else None,
    }

    try:
        config = load_config(config_path, overrides)
        target = _validate_root(root)
        report = Reaper(config).run(target)
    except ReapError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _print_report(report)


def configure_logging(verbose: bool) -> None:
    """Route fsreap log records through Rich.

    Diagnostics go to stdout at DEBUG level when verbose; otherwise only
    warnings are shown, on stderr.
    """
    handler = RichHandler(
        console=console if verbose else err_console,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("fsreap")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


def _validate_root(root: Path) -> Path:
    """Check that the root is a readable, searchable directory.

    Raises:
        UsageError: If the root is missing or not accessible.
    """
    if not root.is_dir():
        raise UsageError(f"Not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise UsageError(f"Cannot access directory: {root}")
    return root.resolve()


def _print_report(report: RunReport) -> None:
    if report.outcome == RunOutcome.HEALTHY:
        logger.debug("Nothing to clean under %s", report.root)
        return

    if report.outcome == RunOutcome.STATISTICS:
        if report.statistics is not None:
            print_statistics(report.statistics)
        return

    if report.eviction is not None:
        print_eviction_summary(report.eviction, report.thresholds)
        print_protected_report(report)


def run() -> None:
    """Console script entry point.

    Runs the Typer app outside Click's standalone mode so that usage
    errors exit with status 1 instead of Click's default 2.
    """
    try:
        code = app(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        err_console.print("Aborted.")
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)


if __name__ == "__main__":
    run()
