"""Console output helpers."""

from .console import render_lint_report, render_task_table

__all__ = ["render_lint_report", "render_task_table"]
