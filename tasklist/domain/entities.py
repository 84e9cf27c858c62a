from __future__ import annotations

from dataclasses import dataclass

from .enums import Priority


@dataclass(frozen=True)
class TaskEntity:
    id: int
    title: str
    description: str
    priority: Priority
    completed: bool = False


@dataclass(frozen=True)
class DraftTask:
    title: str = ""
    description: str = ""
    priority: Priority = Priority.LOW

    def is_complete(self) -> bool:
        return bool(self.title) and bool(self.description)

    @classmethod
    def from_task(cls, task: TaskEntity) -> DraftTask:
        return cls(title=task.title, description=task.description, priority=task.priority)


EMPTY_DRAFT = DraftTask()
