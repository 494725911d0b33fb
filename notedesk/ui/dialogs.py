from __future__ import annotations

from PySide6.QtWidgets import QInputDialog, QMessageBox, QWidget


def ask_text(parent: QWidget, *, title: str, label: str, text: str = "") -> str | None:
    """Single-line prompt. None when cancelled or left empty."""
    value, ok = QInputDialog.getText(parent, title, label, text=text)
    if not ok:
        return None
    value = (value or "").strip()
    return value or None


def confirm_trash(parent: QWidget, *, filename: str) -> bool:
    answer = QMessageBox.question(
        parent,
        "Move to Trash",
        f"Move “{filename}” to the trash?\nIt can be restored from the system trash.",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return answer == QMessageBox.Yes


def show_failure(parent: QWidget, *, kind: str, message: str) -> None:
    msg = QMessageBox(parent)
    msg.setIcon(QMessageBox.Warning)
    msg.setWindowTitle(kind)
    msg.setText(message)
    msg.exec()
