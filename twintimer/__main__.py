"""Allow running TwinTimer as a module: python -m twintimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .settings import load_settings
from .app import TwinTimerApp


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    init_db()
    logging.getLogger("twintimer").info("twintimer_ready")

    app = QApplication(sys.argv)
    app.setApplicationName("TwinTimer")
    app.setOrganizationName("TwinTimer")

    window = TwinTimerApp(settings=settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
