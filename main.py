import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.performance import FrameBudgetMonitor
from core.state import AppState, Notify
from db.database import get_config, initialize_database
from player.player import Player
from ui.main_window import MainWindow

logger = logging.getLogger("vinyl")


def configure_logging() -> None:
    level = logging.DEBUG if os.getenv("VINYL_DEBUG") == "1" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_app_data_dir() -> str:
    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return base


def init_app_state() -> AppState:
    app_state = AppState()

    app_data_dir = get_app_data_dir()
    app_state.app_data_dir = app_data_dir
    app_state.db = initialize_database(app_data_dir)
    app_state.config = get_config(app_state.db)

    try:
        app_state.player = Player()
    except Exception as e:
        logger.exception("Audio player initialization failed")
        app_state.player = None
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    # one monitor for the whole process, stopped at teardown
    monitor = FrameBudgetMonitor(recovery_policy=app_state.config.recovery_policy)
    app_state.attach_monitor(monitor)

    return app_state


def main() -> int:
    configure_logging()
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("VinylOS")

    app_state = init_app_state()
    main_window = MainWindow(app_state)
    main_window.show()

    app_state.monitor.start()

    def teardown():
        app_state.monitor.stop()
        app_state.detach_monitor()
        app_state.db.close()

    qt_app.aboutToQuit.connect(teardown)

    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
