# /*
# Copyright 2026 The Porter Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Named tasks with prerequisites.

Running a task first runs its prerequisites, depth-first, and every task
runs at most once per top-level :meth:`TaskGraph.run`. Task bodies may call
:meth:`TaskGraph.run` themselves and share the same bookkeeping.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass


class TaskGraphError(RuntimeError):
    """The task declarations are inconsistent."""


@dataclass(frozen=True)
class Task:
    """A named step.

    Attributes:
        name: Task name, also its CLI subcommand.
        fn: Task body.
        deps: Names of tasks that must run first.
        help: One-line description.
        hidden: Whether the task is left out of the CLI help.
    """

    name: str
    fn: Callable[[], None]
    deps: tuple[str, ...] = ()
    help: str = ""
    hidden: bool = False


class TaskGraph:
    """Registry of tasks and their prerequisites."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._completed: set[str] | None = None

    def task(
        self,
        name: str,
        deps: Iterable[str] = (),
        help: str | None = None,
        hidden: bool = False,
    ) -> Callable[[Callable[[], None]], Callable[[], None]]:
        """Register the decorated function as task *name*.

        Args:
            name: Task name.
            deps: Tasks to run before this one.
            help: Description, defaulting to the first docstring line.
            hidden: Keep the task out of the CLI help.

        Raises:
            TaskGraphError: If a task with this name already exists.
        """
        def decorator(fn: Callable[[], None]) -> Callable[[], None]:
            if name in self._tasks:
                raise TaskGraphError(f"task '{name}' is already defined")
            description = help
            if description is None:
                doc = (fn.__doc__ or "").strip()
                description = doc.splitlines()[0] if doc else ""
            self._tasks[name] = Task(name, fn, tuple(deps), description, hidden)
            return fn

        return decorator

    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def validate(self) -> None:
        """Check every dependency exists and there are no cycles.

        Raises:
            TaskGraphError: On an unknown dependency or a dependency cycle.
        """
        for task in self._tasks.values():
            for dep in task.deps:
                if dep not in self._tasks:
                    raise TaskGraphError(f"task '{task.name}' depends on unknown task '{dep}'")
        for name in self._tasks:
            self.plan(name)

    def plan(self, name: str) -> list[str]:
        """Order *name* and its transitive prerequisites.

        Returns:
            Task names in execution order, each once, ending with *name*.

        Raises:
            TaskGraphError: If *name* is unknown or a cycle is reachable.
        """
        order: list[str] = []
        done: set[str] = set()
        path: list[str] = []

        def visit(current: str) -> None:
            if current in done:
                return
            if current in path:
                cycle = " -> ".join([*path[path.index(current):], current])
                raise TaskGraphError(f"dependency cycle: {cycle}")
            task = self._tasks.get(current)
            if task is None:
                raise TaskGraphError(f"unknown task '{current}'")
            path.append(current)
            for dep in task.deps:
                visit(dep)
            path.pop()
            done.add(current)
            order.append(current)

        visit(name)
        return order

    def run(self, name: str) -> None:
        """Run task *name* after any prerequisites that have not run yet.

        Raises:
            TaskGraphError: If *name* is unknown or a cycle is reachable.
        """
        top_level = self._completed is None
        if top_level:
            self._completed = set()
        try:
            for step in self.plan(name):
                if step in self._completed:
                    continue
                self._tasks[step].fn()
                self._completed.add(step)
        finally:
            if top_level:
                self._completed = None
