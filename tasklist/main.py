from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from tasklist.infra.db import init_db
from tasklist.infra.logging import setup_logging
from tasklist.infra.repository import TaskRepository
from tasklist.services.task_service import TaskService
from tasklist.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> None:
    log_file = setup_logging()
    logger.info("Logging to %s", log_file)
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Database is not reachable")
        app = QApplication(sys.argv)
        QMessageBox.critical(None, "DB error", str(exc))
        return

    service = TaskService(TaskRepository())
    service.load()

    app = QApplication(sys.argv)
    app.setStyle(QStyleFactory.create("Fusion"))

    window = MainWindow(service)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
