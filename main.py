import logging
import sys

import pyqtgraph as pg
from PySide6.QtWidgets import QApplication

from gui import ScopeWindow
from gui.qsettings_adapter import create_gui_settings_store


pg.setConfigOptions(antialias=True)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    app.setApplicationName("RemoteScope")
    window = ScopeWindow(create_gui_settings_store())
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
