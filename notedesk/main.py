from __future__ import annotations

import argparse
from pathlib import Path

from notedesk.logging_setup import SESSION_ID, install_global_exception_hooks, log, setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="notedesk", description="Folder-based Markdown notes")
    p.add_argument(
        "--workspace",
        type=Path,
        default=None,
        help="Folder to open (default: the last opened workspace)",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging()
    install_global_exception_hooks()

    # Qt widgets are imported late so --help works without a display
    from PySide6.QtWidgets import QApplication
    from notedesk.ui.main_window import MainWindow

    app = QApplication([])
    win = MainWindow(workspace=args.workspace)
    win.show()
    log.info("Application started, SID=%s", SESSION_ID)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
