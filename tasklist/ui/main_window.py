from __future__ import annotations

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from tasklist.domain.entities import DraftTask
from tasklist.services.task_service import TaskService

from .widgets import PRIORITY_OPTIONS, TaskItemWidget, TaskListWidget


class MainWindow(QWidget):
    def __init__(self, service: TaskService):
        super().__init__()
        self.setWindowTitle("Task Manager")
        self.resize(960, 720)

        self.service = service

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        layout.addWidget(self._build_header())
        layout.addWidget(self._build_form())

        self.task_list = TaskListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(8)
        layout.addWidget(self.task_list, 1)

        self.populate_form(self.service.draft)
        self.refresh_tasks()

        QShortcut(QKeySequence("Ctrl+S"), self, self.submit_task)

    def _build_header(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("AppBar")
        header = QHBoxLayout(frame)
        header.setContentsMargins(12, 8, 12, 8)

        title = QLabel("Task Manager")
        title.setProperty("class", "panel-title")

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search")
        self.search_input.setMinimumWidth(220)
        self.search_input.textChanged.connect(self.on_search_changed)

        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.search_input)
        return frame

    def _build_form(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("DraftForm")
        form = QVBoxLayout(frame)
        form.setContentsMargins(0, 0, 0, 0)
        form.setSpacing(8)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Title")
        self.title_input.textEdited.connect(lambda text: self.service.update_draft(title=text))

        self.description_input = QLineEdit()
        self.description_input.setPlaceholderText("Description")
        self.description_input.textEdited.connect(
            lambda text: self.service.update_draft(description=text)
        )

        self.priority_combo = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_combo.addItem(label, value)
        self.priority_combo.activated.connect(self.on_priority_changed)

        self.submit_button = QPushButton("Add Task")
        self.submit_button.clicked.connect(self.submit_task)

        form.addWidget(self.title_input)
        form.addWidget(self.description_input)
        form.addWidget(self.priority_combo)
        form.addWidget(self.submit_button)
        return frame

    def refresh_tasks(self) -> None:
        self.task_list.clear()
        for task in self.service.visible_tasks():
            item = QListWidgetItem()
            item.setData(Qt.UserRole, task.id)
            widget = TaskItemWidget(
                task,
                on_edit=self.start_edit,
                on_toggle=self.toggle_completed,
                on_delete=self.delete_task,
            )
            self.task_list.addItem(item)
            self.task_list.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())
        self.task_list.sync_item_sizes()

    def populate_form(self, draft: DraftTask) -> None:
        self.title_input.setText(draft.title)
        self.description_input.setText(draft.description)
        priority_index = self.priority_combo.findData(draft.priority)
        if priority_index >= 0:
            self.priority_combo.setCurrentIndex(priority_index)
        self.submit_button.setText("Update Task" if self.service.is_editing else "Add Task")

    def on_search_changed(self, text: str) -> None:
        self.service.set_search(text)
        self.refresh_tasks()

    def on_priority_changed(self, index: int) -> None:
        self.service.update_draft(priority=self.priority_combo.itemData(index))

    def submit_task(self) -> None:
        self.service.submit()
        self.populate_form(self.service.draft)
        self.refresh_tasks()

    def start_edit(self, task_id: int) -> None:
        draft = self.service.start_edit(task_id)
        if draft is None:
            return
        self.populate_form(draft)
        self.title_input.setFocus()

    def toggle_completed(self, task_id: int) -> None:
        self.service.toggle_completed(task_id)
        # row widgets are owned by the list; rebuild after the click returns
        QTimer.singleShot(0, self.refresh_tasks)

    def delete_task(self, task_id: int) -> None:
        self.service.delete_task(task_id)
        QTimer.singleShot(0, self.refresh_tasks)
