"""
cloudprep CLI Entry Point.

This module implements the command-line interface for cloudprep, a tool that
prepares a folder tree for migration into a cloud document library with strict
naming, size and path-length rules. It runs the normalization pipeline in place
and writes every change to an audit log.

The ``run`` command works in three stages:

1.  **Configuration**: Merges built-in defaults, the optional JSON settings file
    and command-line options into one run configuration.
2.  **Confirmation**: Shows the target, log and passes, and asks before touching
    anything (skipped with ``--yes``).
3.  **Normalization**: Runs the passes in order (attributes, names, empty items,
    archives, duplicates, unsupported types, vendor artifacts, path length) and
    prints a per-pass summary.

The ``report`` command summarizes an existing audit log.

Usage:
    $ python main.py run /srv/share/Finance --log /var/log/finance-cleanup.log
    $ python main.py report /var/log/finance-cleanup.log

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors, and progress visualization.
    - Inquirer: Interactive confirmation prompt.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich import print as pr
from rich.markup import escape

from core.audit import summarize_log
from core.config import PASS_NAMES, build_config, load_settings
from core.exceptions import (
    AuditLogError,
    CleanupError,
    ConfigError,
    PathInvalidError,
)
from core.pipeline import run_pipeline
from ui.prompts import confirm_run
from ui.report import console, render_log_summary, render_pipeline_report

app = typer.Typer(help="Prepare a folder tree for migration to a cloud document library.")


@app.command()
def run(
    root: Annotated[
        Path,
        typer.Argument(
            resolve_path=True,  # Automatically converts to absolute path
            help="Root folder to normalize in place.",
        ),
    ],
    log: Annotated[
        Path,
        typer.Option(
            "--log",
            "-l",
            dir_okay=False,
            resolve_path=True,
            help="Audit log file. Created if missing, truncated if present.",
        ),
    ],
    max_path_length: Annotated[
        int | None,
        typer.Option(min=1, help="Longest accepted absolute path (default 260)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            exists=True,
            dir_okay=False,
            help="JSON settings file (default: ~/.cloudprep/settings.json).",
        ),
    ] = None,
    keep_empty_dirs: Annotated[
        bool,
        typer.Option(
            "--keep-empty-dirs",
            help="Do not remove folders emptied by the empty-item pass.",
        ),
    ] = False,
    skip: Annotated[
        list[str] | None,
        typer.Option(
            "--skip",
            help=f"Pass to leave out (repeatable): {', '.join(PASS_NAMES)}",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
):
    """
    Normalize ROOT in place and record every change in the audit log.

    All deletions and renames are final. Per-entry failures are logged and the
    run continues; re-running after fixing them is safe.

    Raises:
        typer.Exit: With code 1 if the configuration or root is invalid, the
            audit log cannot be written, or the user cancels.
    """
    try:
        settings = load_settings(config_file)
        config = build_config(
            root,
            log,
            settings,
            max_path_length=max_path_length,
            remove_empty_dirs=False if keep_empty_dirs else None,
            skip_passes=skip,
        )
    except ConfigError as e:
        print_config_err(e)
        return

    if not yes and not confirm_run(config):
        pr("[yellow]Cancelled. Nothing was changed.[/yellow]")
        raise typer.Exit(code=1)

    try:
        pipeline_report = run_pipeline(config)
    except PathInvalidError as e:
        print_path_err(e)
        return
    except (AuditLogError, ConfigError) as e:
        print_config_err(e)
        return
    except Exception as e:  # noqa: BLE001
        # Catch-all for any unexpected errors - ensures users always see
        # a friendly message instead of a raw Python stack trace
        print_unexpected_err(e)
        return

    console.print(render_pipeline_report(pipeline_report))
    pr(f"\n[green]Audit log written to:[/green] {escape(str(pipeline_report.log_path))}")
    if pipeline_report.total_failed:
        pr(
            f"[yellow]{pipeline_report.total_failed} entries could not be processed. "
            "Check the FAILED and SKIPPED lines of the log, fix them and run again.[/yellow]"
        )


@app.command()
def report(
    log: Annotated[
        Path,
        typer.Argument(
            exists=True,
            dir_okay=False,
            resolve_path=True,
            help="Audit log written by a previous run.",
        ),
    ],
):
    """
    Summarize an audit log by outcome and event.
    """
    try:
        counts = summarize_log(log)
    except AuditLogError as e:
        print_config_err(e)
        return

    if not counts:
        pr("[yellow]The audit log is empty: the last run changed nothing.[/yellow]")
        return
    console.print(render_log_summary(counts))


def print_path_err(e: PathInvalidError) -> None:
    """
    Displays a user-friendly error message when the source root cannot be used.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Invalid Source Folder[/bold red]")
    pr(f"{escape(e.message)}")
    pr(
        "\n[yellow]Quick Fix:[/yellow] Check the path, and that your account can "
        "read and modify it."
    )
    raise typer.Exit(code=1) from e


def print_config_err(e: CleanupError) -> None:
    """
    Displays a user-friendly error message for settings and audit log failures.

    Args:
        e (CleanupError): The exception that was raised, containing error details
            and file path information.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr(f"❌ [bold red]{e.code}[/bold red]")
    pr(escape(e.message))
    if e.path:
        pr(f"File path: [yellow]{escape(e.path)}[/yellow]")
    if e.original_exception:
        pr(f"\nTechnical details: {escape(str(e.original_exception))}")
    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Displays a user-friendly error message for unexpected errors.

    The audit log is closed before this runs, so it still holds every action
    taken up to the failure.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Unexpected Error[/bold red]")
    pr("The cleanup stopped. Actions taken so far are recorded in the audit log.")
    pr(f"\n[yellow]Error Type:[/yellow] {type(e).__name__}")
    pr(f"[yellow]Error Message:[/yellow] {escape(str(e))}")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Error Type: {type(e).__name__}")
    pr(f"Error Message: {escape(str(e))}")
    if e.__cause__:
        pr(f"Caused by: {escape(str(e.__cause__))}")

    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
