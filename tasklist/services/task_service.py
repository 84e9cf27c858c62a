from __future__ import annotations

import logging
from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError

from tasklist.domain.entities import EMPTY_DRAFT, DraftTask, TaskEntity
from tasklist.domain.enums import Priority
from tasklist.domain.filters import TaskFilters, derive_view
from tasklist.domain.ids import TaskIdGenerator
from tasklist.infra.repository import TaskDecodeError, TaskRepository

logger = logging.getLogger(__name__)

DRAFT_FIELDS = {"title", "description", "priority"}


class TaskService:
    """Owns the task list, the edit draft and the search term.

    Every effective mutation writes the whole list back through the
    repository. The visible list is derived on each call to
    :meth:`visible_tasks`.
    """

    def __init__(self, repo: TaskRepository, id_generator: TaskIdGenerator | None = None) -> None:
        self._repo = repo
        self._ids = id_generator or TaskIdGenerator()
        self._tasks: list[TaskEntity] = []
        self._search = ""
        self._draft = EMPTY_DRAFT
        self._editing_id: int | None = None

    @property
    def tasks(self) -> tuple[TaskEntity, ...]:
        return tuple(self._tasks)

    @property
    def draft(self) -> DraftTask:
        return self._draft

    @property
    def is_editing(self) -> bool:
        return self._editing_id is not None

    @property
    def editing_id(self) -> int | None:
        return self._editing_id

    @property
    def search(self) -> str:
        return self._search

    def get_task(self, task_id: int) -> TaskEntity | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def load(self) -> None:
        try:
            tasks = self._repo.load_tasks()
        except TaskDecodeError as exc:
            logger.warning("Discarding unreadable stored tasks: %s", exc)
            tasks = []
        self._ids.seed(task.id for task in tasks)
        self._tasks = self._with_unique_ids(tasks)
        logger.info("Loaded %s tasks", len(self._tasks))

    def save(self) -> None:
        try:
            self._repo.save_tasks(self._tasks)
        except SQLAlchemyError:
            logger.exception("Failed to save %s tasks", len(self._tasks))

    def update_draft(self, **fields: object) -> DraftTask:
        unknown = set(fields) - DRAFT_FIELDS
        if unknown:
            raise TypeError(f"unknown draft fields: {', '.join(sorted(unknown))}")
        if "priority" in fields:
            fields["priority"] = Priority(fields["priority"])
        self._draft = replace(self._draft, **fields)
        return self._draft

    def submit(self, draft: DraftTask | None = None) -> TaskEntity | None:
        draft = draft if draft is not None else self._draft
        if not draft.is_complete():
            return None

        if self._editing_id is not None:
            task = self._apply_edit(self._editing_id, draft)
        else:
            task = TaskEntity(
                id=self._ids.next_id(),
                title=draft.title,
                description=draft.description,
                priority=draft.priority,
                completed=False,
            )
            self._tasks.append(task)
            logger.debug("Task created id=%s priority=%s", task.id, task.priority)

        self._draft = EMPTY_DRAFT
        self._editing_id = None
        if task is not None:
            self.save()
        return task

    def toggle_completed(self, task_id: int) -> TaskEntity | None:
        task = self.get_task(task_id)
        if not task:
            return None
        updated = replace(task, completed=not task.completed)
        self._replace(updated)
        logger.debug("Task toggled id=%s completed=%s", task_id, updated.completed)
        self.save()
        return updated

    def delete_task(self, task_id: int) -> None:
        remaining = [task for task in self._tasks if task.id != task_id]
        if len(remaining) == len(self._tasks):
            return
        self._tasks = remaining
        logger.debug("Task deleted id=%s", task_id)
        self.save()

    def start_edit(self, task_id: int) -> DraftTask | None:
        task = self.get_task(task_id)
        if not task:
            return None
        self._draft = DraftTask.from_task(task)
        self._editing_id = task.id
        return self._draft

    def set_search(self, term: str) -> None:
        self._search = term

    def visible_tasks(self) -> list[TaskEntity]:
        return derive_view(self._tasks, TaskFilters(search=self._search))

    def _apply_edit(self, task_id: int, draft: DraftTask) -> TaskEntity | None:
        task = self.get_task(task_id)
        if not task:
            logger.debug("Edited task id=%s no longer exists", task_id)
            return None
        updated = replace(
            task,
            title=draft.title,
            description=draft.description,
            priority=draft.priority,
        )
        self._replace(updated)
        logger.debug("Task updated id=%s", task_id)
        return updated

    def _with_unique_ids(self, tasks: list[TaskEntity]) -> list[TaskEntity]:
        # ids from a wall clock can repeat; later copies get fresh ids
        seen: set[int] = set()
        unique = []
        for task in tasks:
            if task.id in seen:
                fresh = self._ids.next_id()
                logger.info("Reassigned duplicate task id=%s to id=%s", task.id, fresh)
                task = replace(task, id=fresh)
            seen.add(task.id)
            unique.append(task)
        return unique

    def _replace(self, updated: TaskEntity) -> None:
        self._tasks = [updated if task.id == updated.id else task for task in self._tasks]
