"""Async task graph executor."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from assetpipe.core.errors import BuildError, TaskFailedError
from assetpipe.core.graph import SequenceItem, TaskAction, TaskGraph
from assetpipe.core.notify import DEFAULT_TITLE, ErrorChannel, Notifier

if TYPE_CHECKING:
    from assetpipe.tasks.context import BuildContext


class TaskStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    REPORTED = "reported"


@dataclass(slots=True)
class TaskOutcome:
    """Result of one task execution."""

    name: str
    status: TaskStatus
    duration: float
    error: BaseException | None = None


@dataclass(slots=True)
class TaskContext:
    """Everything a task action receives."""

    name: str
    build: BuildContext
    errors: ErrorChannel
    executor: TaskExecutor
    tolerant: bool = False

    @property
    def logger(self) -> logging.Logger:
        return self.executor.logger

    async def run(self, *sequence: SequenceItem, tolerant: bool | None = None) -> None:
        """Run a nested sequence, inheriting this task's tolerance by default."""

        await self.executor.run(sequence, tolerant=self.tolerant if tolerant is None else tolerant)


DoneCallback = Callable[..., None]


@dataclass(slots=True)
class TaskExecutor:
    """Runs sequences of tasks and task groups from a :class:`TaskGraph`.

    Each sequence element is a task name or a group of names. Group members run
    concurrently and the element completes only when all of them have; a later
    element never starts before the previous one completed. When an element fails,
    the remaining members still finish, the first failure by start order is raised
    as :class:`TaskFailedError`, and no further element starts.
    """

    graph: TaskGraph
    build: BuildContext
    notifier: Notifier
    logger: logging.Logger
    notification_title: str = DEFAULT_TITLE
    outcomes: list[TaskOutcome] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.graph.validate()

    async def run(
        self, sequence: SequenceItem | Iterable[SequenceItem], *, tolerant: bool = False
    ) -> None:
        """Run an ordered sequence of task names and groups."""

        items = [sequence] if isinstance(sequence, str) else list(sequence)
        resolved = [self.graph.resolve(item) for item in items]
        for names in resolved:
            await self._run_group(names, tolerant=tolerant)

    def outcome(self, name: str) -> TaskOutcome | None:
        """Return the most recent outcome recorded for ``name``."""

        for outcome in reversed(self.outcomes):
            if outcome.name == name:
                return outcome
        return None

    async def _run_group(self, names: tuple[str, ...], *, tolerant: bool) -> None:
        if len(names) == 1:
            await self._run_task(names[0], tolerant=tolerant)
            return

        results = await asyncio.gather(
            *(self._run_task(name, tolerant=tolerant) for name in names),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _run_task(self, name: str, *, tolerant: bool) -> None:
        definition = self.graph[name]
        if definition.dependencies:
            await self._run_group(definition.dependencies, tolerant=tolerant)

        channel = ErrorChannel(
            task=name,
            notifier=self.notifier,
            logger=self.logger,
            tolerant=tolerant,
            title=self.notification_title,
        )
        context = TaskContext(
            name=name, build=self.build, errors=channel, executor=self, tolerant=tolerant
        )

        self.logger.info("Starting '%s'...", name)
        started = time.monotonic()
        try:
            if definition.action is not None:
                await _invoke(definition.action, context, channel)
        except asyncio.CancelledError:
            raise
        except TaskFailedError as exc:
            self._record(name, TaskStatus.FAILED, started, exc.cause)
            self.logger.error("'%s' errored after %s", name, _format_duration(started))
            raise
        except Exception as exc:  # pylint: disable=broad-except
            self._record(name, TaskStatus.FAILED, started, exc)
            self.logger.error(
                "'%s' errored after %s: %s", name, _format_duration(started), exc
            )
            raise TaskFailedError(name, exc) from exc

        if channel.failed:
            self._record(name, TaskStatus.REPORTED, started, channel.errors[0])
            self.logger.warning(
                "Finished '%s' with reported errors after %s", name, _format_duration(started)
            )
        else:
            self._record(name, TaskStatus.OK, started)
            self.logger.info("Finished '%s' after %s", name, _format_duration(started))

    def _record(
        self, name: str, status: TaskStatus, started: float, error: BaseException | None = None
    ) -> None:
        self.outcomes.append(
            TaskOutcome(
                name=name, status=status, duration=time.monotonic() - started, error=error
            )
        )


async def _invoke(action: TaskAction, context: TaskContext, channel: ErrorChannel) -> None:
    """Call an action in whichever completion style it uses.

    A callback-style action completes when it calls ``done`` or when its error
    channel ends, whichever happens first. An ended channel whose error was not
    swallowed fails the task with that error.
    """

    if not _takes_done(action):
        result = action(context)
        if inspect.isawaitable(result):
            await result
        return

    loop = asyncio.get_running_loop()
    finished: asyncio.Future[None] = loop.create_future()

    def _settle(error: Any) -> None:
        if finished.done():
            return
        if error is None or error is False:
            finished.set_result(None)
        elif isinstance(error, BaseException):
            finished.set_exception(error)
        else:
            finished.set_exception(BuildError(str(error)))

    def done(error: Any = None) -> None:
        loop.call_soon_threadsafe(_settle, error)

    result = action(context, done)
    if inspect.isawaitable(result):
        await result
    if finished.done():
        await finished
        return

    ended = asyncio.ensure_future(channel.ended.wait())
    try:
        await asyncio.wait({finished, ended}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        ended.cancel()
    if finished.done():
        await finished
        return

    finished.cancel()
    error = channel.errors[-1]
    if not channel.swallowed(error):
        raise error


def _takes_done(action: TaskAction) -> bool:
    try:
        parameters = inspect.signature(action).parameters
    except (TypeError, ValueError):
        return False
    return "done" in parameters


def _format_duration(started: float) -> str:
    elapsed = time.monotonic() - started
    if elapsed < 1:
        return f"{elapsed * 1000:.0f} ms"
    return f"{elapsed:.2f} s"
