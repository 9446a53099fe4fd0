"""
Interactive confirmation before a destructive run.

Every pass deletes or renames in place and nothing can be undone, so the CLI
shows what is about to happen and asks before starting, unless ``--yes`` is given.

Dependencies:
    - inquirer: Interactive terminal prompts
    - rich: Terminal formatting and colors
"""

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
from rich.markup import escape
from rich.panel import Panel

from core.config import PASS_NAMES, PipelineConfig


def describe_run(config: PipelineConfig) -> Panel:
    """Build the panel summarizing the target, log and passes of a run."""
    passes = [name for name in PASS_NAMES if name not in config.skip_passes]
    skipped = sorted(config.skip_passes)
    lines = [
        f"Target:          [green]{escape(str(config.root))}[/green]",
        f"Audit log:       [green]{escape(str(config.log_path))}[/green]",
        f"Max path length: [cyan]{config.max_path_length}[/cyan]",
        f"Passes:          [cyan]{', '.join(passes) or 'none'}[/cyan]",
    ]
    if skipped:
        lines.append(f"Skipped:         [yellow]{', '.join(skipped)}[/yellow]")
    return Panel("\n".join(lines), title="[bold cyan]cloudprep[/bold cyan]")


def confirm_run(config: PipelineConfig) -> bool:
    """
    Show the run summary and ask the user to confirm.

    Returns:
        True only if the user explicitly answered yes. Cancelling the prompt
        (Ctrl+C) counts as no.
    """
    pr(describe_run(config))
    pr(
        "[bold red]Files and folders will be deleted and renamed in place. "
        "There is no undo.[/bold red]\n"
    )

    questions = [
        inquirer.Confirm("proceed", message="Start the cleanup?", default=False),
    ]
    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        return False
    return bool(answers["proceed"])
