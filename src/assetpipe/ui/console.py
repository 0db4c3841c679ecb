"""Rich console rendering for task listings and lint reports."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from assetpipe.core.graph import TaskGraph
from assetpipe.tools import LintReport


def render_task_table(console: Console, graph: TaskGraph) -> None:
    table = Table(title="Tasks", box=box.SIMPLE_HEAVY, expand=False)
    table.add_column("Task", style="bold cyan", no_wrap=True)
    table.add_column("Depends on", style="magenta")
    table.add_column("Description")
    for name in sorted(graph):
        definition = graph[name]
        table.add_row(name, ", ".join(definition.dependencies) or "-", definition.description)
    console.print(table)


def render_lint_report(console: Console, report: LintReport) -> None:
    """Print a linter's output in a panel coloured by outcome."""

    if report.ok and not report.output:
        console.print(f"[green]{report.linter}[/]: {report.files} file(s), no problems")
        return
    body = Text(report.output or "No output.")
    console.print(
        Panel(
            body,
            title=f"{report.linter} ({report.files} file(s))",
            border_style="green" if report.ok else "red",
        )
    )
