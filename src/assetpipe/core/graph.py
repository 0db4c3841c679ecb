"""Task graph definitions."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

from assetpipe.core.errors import TaskGraphError

TaskAction = Callable[..., Any]
SequenceItem = str | Sequence[str] | frozenset[str]


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """A named unit of build work.

    ``action`` may be a plain function, an ``async def``, or a callback-style
    function declaring a ``done`` parameter. ``None`` makes the task a pure
    aggregate of its dependencies.
    """

    name: str
    action: TaskAction | None = None
    dependencies: tuple[str, ...] = ()
    description: str = ""


@dataclass(slots=True)
class TaskGraph(Mapping[str, TaskDefinition]):
    """Mapping of unique task names to definitions."""

    _tasks: dict[str, TaskDefinition] = field(default_factory=dict)

    @classmethod
    def of(cls, definitions: Iterable[TaskDefinition]) -> TaskGraph:
        graph = cls()
        for definition in definitions:
            graph.add(definition)
        graph.validate()
        return graph

    def add(self, definition: TaskDefinition) -> None:
        if definition.name in self._tasks:
            raise TaskGraphError(f"Task '{definition.name}' is already defined.")
        self._tasks[definition.name] = definition

    def __getitem__(self, name: str) -> TaskDefinition:
        return self._tasks[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def validate(self) -> None:
        """Check that every dependency resolves and that there are no cycles."""

        dependencies: nx.DiGraph[str] = nx.DiGraph()
        for definition in self._tasks.values():
            dependencies.add_node(definition.name)
            for dependency in definition.dependencies:
                if dependency not in self._tasks:
                    raise TaskGraphError(
                        f"Task '{definition.name}' depends on undefined task '{dependency}'."
                    )
                dependencies.add_edge(definition.name, dependency)

        try:
            cycle = nx.find_cycle(dependencies)
        except nx.NetworkXNoCycle:
            return
        path = [edge[0] for edge in cycle] + [cycle[-1][1]]
        raise TaskGraphError(f"Dependency cycle: {' -> '.join(path)}")

    def resolve(self, item: SequenceItem) -> tuple[str, ...]:
        """Normalize a sequence item to task names, checking they exist."""

        names = (item,) if isinstance(item, str) else tuple(item)
        for name in names:
            if name not in self._tasks:
                raise TaskGraphError(f"Task '{name}' is not defined.")
        return names
