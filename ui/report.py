"""
Rich tables for run results and audit log summaries.
"""

from collections import Counter

from rich.console import Console
from rich.table import Table

from core.models import Outcome, PipelineReport

console: Console = Console()


def render_pipeline_report(report: PipelineReport) -> Table:
    table = Table(title="Cleanup summary", title_style="bold magenta")
    table.add_column("Pass", style="cyan")
    table.add_column("Visited", justify="right")
    table.add_column("Changed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="yellow")

    for result in report.results:
        table.add_row(
            result.name,
            str(result.visited),
            str(result.changed),
            str(result.failed),
        )
    table.add_section()
    table.add_row(
        "total",
        "",
        str(report.total_changed),
        str(report.total_failed),
        style="bold",
    )
    return table


def render_log_summary(counts: Counter[tuple[str, str]]) -> Table:
    """Build a table of record counts per outcome and event, failures last."""
    table = Table(title="Audit log summary", title_style="bold magenta")
    table.add_column("Outcome")
    table.add_column("Event", style="cyan")
    table.add_column("Records", justify="right")

    problem_outcomes = {str(Outcome.FAILED), str(Outcome.SKIPPED)}
    for (outcome, event), count in sorted(
        counts.items(), key=lambda item: (item[0][0] in problem_outcomes, item[0])
    ):
        style = "yellow" if outcome in problem_outcomes else "green"
        table.add_row(f"[{style}]{outcome}[/{style}]", event, str(count))
    return table
