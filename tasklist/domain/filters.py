from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .entities import TaskEntity


@dataclass(frozen=True)
class TaskFilters:
    search: str = ""

    def matches(self, task: TaskEntity) -> bool:
        if not self.search:
            return True
        needle = self.search.lower()
        return needle in task.title.lower() or needle in task.description.lower()


def _sort_key(task: TaskEntity) -> tuple[bool, int]:
    return (task.completed, -task.priority.rank)


def filter_tasks(tasks: Iterable[TaskEntity], filters: TaskFilters) -> list[TaskEntity]:
    return [task for task in tasks if filters.matches(task)]


def sort_tasks(tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
    """Incomplete tasks first, then by priority rank descending.

    ``sorted`` is stable, so tasks equal on both keys keep their input order.
    """
    return sorted(tasks, key=_sort_key)


def derive_view(tasks: Iterable[TaskEntity], filters: TaskFilters) -> list[TaskEntity]:
    return sort_tasks(filter_tasks(tasks, filters))
