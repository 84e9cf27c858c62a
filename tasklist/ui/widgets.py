from __future__ import annotations

from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from tasklist.domain.entities import TaskEntity
from tasklist.domain.enums import Priority

PRIORITY_OPTIONS = [
    ("High", Priority.HIGH),
    ("Medium", Priority.MEDIUM),
    ("Low", Priority.LOW),
]

PRIORITY_COLORS = {
    Priority.HIGH: "#EF4444",
    Priority.MEDIUM: "#FACC15",
    Priority.LOW: "#22C55E",
}


class TaskItemWidget(QWidget):
    def __init__(self, task: TaskEntity, on_edit, on_toggle, on_delete, parent=None):
        super().__init__(parent)
        self.task = task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(64)
        self.setStyleSheet(
            f"#TaskCard {{ background-color: {PRIORITY_COLORS[task.priority]}; border-radius: 6px; }}"
        )

        title = QLabel(task.title)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)

        meta = QLabel(f"{task.description} - {task.priority.label}")
        meta.setProperty("class", "task-meta")
        meta.setWordWrap(True)

        for label in (title, meta):
            font = label.font()
            font.setStrikeOut(task.completed)
            label.setFont(font)
            label.setStyleSheet("color: black;")
            label.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        text_column = QVBoxLayout()
        text_column.setSpacing(4)
        text_column.addWidget(title)
        text_column.addWidget(meta)

        edit_button = QPushButton("Edit")
        edit_button.setProperty("variant", "secondary")
        edit_button.clicked.connect(lambda: on_edit(task.id))

        toggle_button = QPushButton("Undo" if task.completed else "Complete")
        toggle_button.setProperty("variant", "secondary")
        toggle_button.clicked.connect(lambda: on_toggle(task.id))

        delete_button = QPushButton("Delete")
        delete_button.setProperty("variant", "danger")
        delete_button.clicked.connect(lambda: on_delete(task.id))

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(8)
        layout.addLayout(text_column, 1)
        layout.addWidget(edit_button, 0, Qt.AlignVCenter)
        layout.addWidget(toggle_button, 0, Qt.AlignVCenter)
        layout.addWidget(delete_button, 0, Qt.AlignVCenter)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSelectionMode(QAbstractItemView.NoSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def sync_item_sizes(self) -> None:
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setFixedWidth(viewport_width)
                widget.adjustSize()
                item.setSizeHint(QSize(viewport_width, widget.sizeHint().height()))
