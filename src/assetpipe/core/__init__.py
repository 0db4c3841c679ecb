"""Core orchestration components for Assetpipe."""

from .errors import (
    AssetIOError,
    BuildError,
    LayoutError,
    LintViolation,
    SourceCompileError,
    StyleCompileError,
    TaskFailedError,
    TaskGraphError,
    ToolNotFoundError,
)
from .executor import TaskContext, TaskExecutor, TaskOutcome, TaskStatus
from .globs import GlobPattern
from .graph import TaskDefinition, TaskGraph
from .layout import ProjectLayout, RunMode
from .notify import ErrorChannel, Notification, Notifier

__all__ = [
    "AssetIOError",
    "BuildError",
    "ErrorChannel",
    "GlobPattern",
    "LayoutError",
    "LintViolation",
    "Notification",
    "Notifier",
    "ProjectLayout",
    "RunMode",
    "SourceCompileError",
    "StyleCompileError",
    "TaskContext",
    "TaskDefinition",
    "TaskExecutor",
    "TaskFailedError",
    "TaskGraph",
    "TaskGraphError",
    "TaskOutcome",
    "TaskStatus",
    "ToolNotFoundError",
]
