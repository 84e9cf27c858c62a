from __future__ import annotations

import json
import logging

import pytest
from sqlalchemy.exc import SQLAlchemyError

from tasklist.domain.entities import DraftTask, TaskEntity
from tasklist.domain.enums import Priority
from tasklist.domain.ids import TaskIdGenerator
from tasklist.infra.repository import TaskRepository, tasks_from_json
from tasklist.services.task_service import TaskService


class FakeStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})
        self.writes = 0

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.writes += 1

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class BrokenStorage(FakeStorage):
    def set_item(self, key: str, value: str) -> None:
        raise SQLAlchemyError("database is locked")


def make_service(storage: FakeStorage | None = None) -> tuple[TaskService, FakeStorage]:
    storage = storage if storage is not None else FakeStorage()
    # frozen clock: ids only advance through the monotonic bump
    service = TaskService(
        TaskRepository(storage, key="tasks"),
        id_generator=TaskIdGenerator(clock=lambda: 1_000),
    )
    service.load()
    return service, storage


def stored_tasks(storage: FakeStorage) -> list[TaskEntity]:
    return tasks_from_json(storage.items["tasks"])


def test_submit_appends_incomplete_task() -> None:
    service, storage = make_service()

    task = service.submit(DraftTask("Write report", "Quarterly numbers", Priority.MEDIUM))

    assert task is not None
    assert service.tasks == (task,)
    assert task.completed is False
    assert task.priority is Priority.MEDIUM
    assert stored_tasks(storage) == [task]


@pytest.mark.parametrize(
    "draft",
    [
        DraftTask("", "description", Priority.HIGH),
        DraftTask("title", "", Priority.HIGH),
        DraftTask("", "", Priority.LOW),
    ],
)
def test_submit_with_empty_field_is_ignored(draft: DraftTask) -> None:
    service, storage = make_service()
    service.submit(DraftTask("Existing", "task", Priority.LOW))
    writes = storage.writes

    assert service.submit(draft) is None
    assert len(service.tasks) == 1
    assert storage.writes == writes


def test_submit_uses_current_draft_and_resets_it() -> None:
    service, _ = make_service()
    service.update_draft(title="Buy milk")
    service.update_draft(description="2 litres", priority="high")

    task = service.submit()

    assert task is not None
    assert (task.title, task.description, task.priority) == ("Buy milk", "2 litres", Priority.HIGH)
    assert service.draft == DraftTask()
    assert service.is_editing is False


def test_rejected_submit_keeps_draft() -> None:
    service, _ = make_service()
    service.update_draft(title="Only a title")

    assert service.submit() is None
    assert service.draft.title == "Only a title"


def test_update_draft_rejects_unknown_fields() -> None:
    service, _ = make_service()

    with pytest.raises(TypeError):
        service.update_draft(status="done")
    with pytest.raises(ValueError):
        service.update_draft(priority="urgent")


def test_ids_are_unique_on_rapid_creates() -> None:
    service, _ = make_service()

    ids = [service.submit(DraftTask(f"T{i}", "d", Priority.LOW)).id for i in range(5)]

    assert ids == sorted(set(ids))
    assert ids == [1_000, 1_001, 1_002, 1_003, 1_004]


def test_toggle_twice_restores_flag() -> None:
    service, _ = make_service()
    task = service.submit(DraftTask("A", "d", Priority.LOW))

    assert service.toggle_completed(task.id).completed is True
    assert service.toggle_completed(task.id).completed is False
    assert service.get_task(task.id).completed is False


def test_unknown_ids_are_noops() -> None:
    service, storage = make_service()
    task = service.submit(DraftTask("A", "d", Priority.LOW))
    writes = storage.writes

    assert service.toggle_completed(task.id + 99) is None
    service.delete_task(task.id + 99)
    assert service.start_edit(task.id + 99) is None

    assert service.tasks == (task,)
    assert service.is_editing is False
    assert storage.writes == writes


def test_delete_removes_task_and_persists() -> None:
    service, storage = make_service()
    first = service.submit(DraftTask("A", "d", Priority.LOW))
    second = service.submit(DraftTask("B", "d", Priority.HIGH))

    service.delete_task(first.id)

    assert service.tasks == (second,)
    assert stored_tasks(storage) == [second]


def test_start_edit_fills_draft() -> None:
    service, _ = make_service()
    task = service.submit(DraftTask("A", "desc", Priority.MEDIUM))

    draft = service.start_edit(task.id)

    assert draft == DraftTask("A", "desc", Priority.MEDIUM)
    assert service.is_editing is True
    assert service.editing_id == task.id


def test_edit_submit_replaces_fields_and_keeps_completed() -> None:
    service, storage = make_service()
    task = service.submit(DraftTask("A", "desc", Priority.LOW))
    other = service.submit(DraftTask("B", "desc", Priority.LOW))
    service.toggle_completed(task.id)

    service.start_edit(task.id)
    service.update_draft(title="A2", priority=Priority.HIGH)
    updated = service.submit()

    assert updated == TaskEntity(task.id, "A2", "desc", Priority.HIGH, completed=True)
    assert service.tasks == (updated, other)
    assert service.is_editing is False
    assert service.draft == DraftTask()
    assert stored_tasks(storage) == [updated, other]


def test_edit_of_deleted_task_adds_nothing() -> None:
    service, storage = make_service()
    task = service.submit(DraftTask("A", "desc", Priority.LOW))
    service.start_edit(task.id)
    service.delete_task(task.id)
    writes = storage.writes

    assert service.submit() is None
    assert storage.writes == writes
    assert service.tasks == ()
    assert service.is_editing is False


def test_search_filters_title_and_description_case_insensitively() -> None:
    service, storage = make_service()
    service.submit(DraftTask("Groceries", "milk and eggs", Priority.LOW))
    service.submit(DraftTask("Call MOM", "sunday", Priority.LOW))
    service.submit(DraftTask("Taxes", "file the forms", Priority.HIGH))
    writes = storage.writes

    service.set_search("mIlK")
    assert [task.title for task in service.visible_tasks()] == ["Groceries"]

    service.set_search("mom")
    assert [task.title for task in service.visible_tasks()] == ["Call MOM"]

    service.set_search("")
    assert len(service.visible_tasks()) == 3
    assert storage.writes == writes


def test_priority_and_completion_scenario() -> None:
    service, _ = make_service()
    a = service.submit(DraftTask("A", "d", Priority.LOW))
    b = service.submit(DraftTask("B", "d", Priority.HIGH))

    assert [task.title for task in service.visible_tasks()] == ["B", "A"]

    service.toggle_completed(a.id)
    assert [task.title for task in service.visible_tasks()] == ["B", "A"]
    assert service.visible_tasks()[1].completed is True

    service.delete_task(b.id)
    assert len(service.tasks) == 1
    assert service.tasks[0].id == a.id


def test_load_restores_tasks_and_seeds_ids() -> None:
    payload = json.dumps([
        {"id": 5_000, "title": "Old", "description": "d", "priority": "medium", "completed": True},
    ])
    service, _ = make_service(FakeStorage({"tasks": payload}))

    assert service.tasks == (TaskEntity(5_000, "Old", "d", Priority.MEDIUM, completed=True),)
    assert service.submit(DraftTask("New", "d", Priority.LOW)).id == 5_001


def test_load_keeps_tasks_with_repeated_ids() -> None:
    payload = json.dumps([
        {"id": 1_700_000_000_000, "title": "A", "description": "d", "priority": "low", "completed": False},
        {"id": 1_700_000_000_000, "title": "B", "description": "d", "priority": "high", "completed": True},
        {"id": 1_699_999_999_999, "title": "C", "description": "d", "priority": "medium", "completed": False},
    ])
    service, storage = make_service(FakeStorage({"tasks": payload}))

    assert [task.title for task in service.tasks] == ["A", "B", "C"]
    ids = [task.id for task in service.tasks]
    assert len(set(ids)) == 3
    assert ids[0] == 1_700_000_000_000
    assert ids[1] == 1_700_000_000_001
    assert service.tasks[1].completed is True

    service.toggle_completed(ids[1])
    assert [task.id for task in stored_tasks(storage)] == ids
    assert stored_tasks(storage)[1].completed is False


@pytest.mark.parametrize(
    "payload",
    ["{not json", '{"id": 1}', '[{"id": 1, "title": "x"}]', "[" * 100_000 + "]" * 100_000],
)
def test_load_discards_malformed_data(payload: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        service, _ = make_service(FakeStorage({"tasks": payload}))

    assert service.tasks == ()
    assert "Discarding unreadable stored tasks" in caplog.text


def test_save_failure_is_logged_and_state_kept(caplog: pytest.LogCaptureFixture) -> None:
    service, _ = make_service(BrokenStorage())

    with caplog.at_level(logging.ERROR):
        task = service.submit(DraftTask("A", "d", Priority.LOW))

    assert service.tasks == (task,)
    assert "Failed to save" in caplog.text
