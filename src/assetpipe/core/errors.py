"""Exception hierarchy for Assetpipe."""

from __future__ import annotations


class BuildError(Exception):
    """Base exception for build failures."""


class SourceCompileError(BuildError):
    """Raised when the bundler rejects script sources."""


class StyleCompileError(BuildError):
    """Raised when the stylesheet compiler or prefixer rejects style sources."""


class LintViolation(BuildError):
    """Raised when a linter reports rule violations."""

    def __init__(self, linter: str, message: str = "") -> None:
        super().__init__(message or f"{linter} reported violations")
        self.linter = linter


class AssetIOError(BuildError, OSError):
    """Raised for missing sources or unwritable outputs."""


class ToolNotFoundError(AssetIOError):
    """Raised when an external tool executable cannot be located."""


class LayoutError(BuildError):
    """Raised when a project layout violates its containment rules."""


class TaskGraphError(BuildError):
    """Raised for unknown task names, dangling dependencies, or cycles."""


class TaskFailedError(BuildError):
    """Raised by the executor to surface the first failure of a sequence."""

    def __init__(self, task: str, cause: BaseException) -> None:
        super().__init__(f"Task '{task}' failed: {cause}")
        self.task = task
        self.cause = cause


COMPILE_ERRORS: tuple[type[BuildError], ...] = (SourceCompileError, StyleCompileError)
