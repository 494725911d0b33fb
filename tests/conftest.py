import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session", autouse=True)
def qapp():
    # QTimer needs an event loop; QObject signals are fine either way
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def workspace(tmp_path):
    """/ws with a.md ("hello") and an empty subfolder sub/."""
    ws = tmp_path / "ws"
    ws.mkdir()
    (ws / "a.md").write_text("hello", encoding="utf-8")
    (ws / "sub").mkdir()
    return ws


@pytest.fixture
def fake_trash(tmp_path, monkeypatch):
    """Replace the OS trash with a plain folder so tests can look inside it."""
    trash_dir = tmp_path / "trash"
    trash_dir.mkdir()

    def _send2trash(path):
        src = os.fspath(path)
        os.replace(src, trash_dir / os.path.basename(src))

    monkeypatch.setattr("notedesk.vault.fs.send2trash", _send2trash)
    return trash_dir
