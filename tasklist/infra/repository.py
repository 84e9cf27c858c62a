from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import sessionmaker

from tasklist.config import SETTINGS
from tasklist.domain.entities import TaskEntity
from tasklist.domain.enums import Priority

from .db import SessionLocal
from .models import StorageItemModel

logger = logging.getLogger(__name__)


class TaskDecodeError(ValueError):
    """Persisted task data could not be turned back into tasks."""


def _to_dict(task: TaskEntity) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "priority": task.priority.value,
        "completed": task.completed,
    }


def _field(data: dict[str, Any], name: str, expected: type) -> Any:
    if name not in data:
        raise TaskDecodeError(f"task is missing {name!r}")
    value = data[name]
    # bool is an int subclass; ids must be real integers
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise TaskDecodeError(f"task field {name!r} has unexpected type {type(value).__name__}")
    return value


def _to_entity(data: Any) -> TaskEntity:
    if not isinstance(data, dict):
        raise TaskDecodeError(f"expected a task object, got {type(data).__name__}")
    priority = _field(data, "priority", str)
    try:
        priority = Priority(priority)
    except ValueError as exc:
        raise TaskDecodeError(f"unknown priority {priority!r}") from exc
    return TaskEntity(
        id=_field(data, "id", int),
        title=_field(data, "title", str),
        description=_field(data, "description", str),
        priority=priority,
        completed=_field(data, "completed", bool),
    )


def tasks_to_json(tasks: Iterable[TaskEntity]) -> str:
    return json.dumps([_to_dict(task) for task in tasks], ensure_ascii=False)


def tasks_from_json(raw: str) -> list[TaskEntity]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TaskDecodeError(f"stored tasks are not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise TaskDecodeError("stored tasks are nested too deeply") from exc
    if not isinstance(payload, list):
        raise TaskDecodeError(f"expected a list of tasks, got {type(payload).__name__}")

    return [_to_entity(item) for item in payload]


class KeyValueStorage:
    """String slots addressed by key, backed by the ``storage_items`` table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def get_item(self, key: str) -> str | None:
        with self._session_factory() as session:
            item = session.get(StorageItemModel, key)
            return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            item = session.get(StorageItemModel, key)
            if item:
                item.value = value
            else:
                session.add(StorageItemModel(key=key, value=value))
            session.commit()

    def remove_item(self, key: str) -> None:
        with self._session_factory() as session:
            item = session.get(StorageItemModel, key)
            if not item:
                return
            session.delete(item)
            session.commit()


class TaskRepository:
    def __init__(self, storage: KeyValueStorage | None = None, key: str | None = None) -> None:
        self._storage = storage or KeyValueStorage()
        self._key = key or SETTINGS.storage_key

    @property
    def key(self) -> str:
        return self._key

    def load_tasks(self) -> list[TaskEntity]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []
        return tasks_from_json(raw)

    def save_tasks(self, tasks: Iterable[TaskEntity]) -> None:
        payload = tasks_to_json(tasks)
        self._storage.set_item(self._key, payload)
        logger.debug("Saved tasks key=%s bytes=%s", self._key, len(payload))
