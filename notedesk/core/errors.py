from __future__ import annotations

from pathlib import Path


class WorkspaceError(Exception):
    """Base for every filesystem failure the workspace reports to the UI."""

    kind = "WorkspaceError"

    def __init__(self, message: str, *, path: Path | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class DirectoryUnreadable(WorkspaceError):
    kind = "DirectoryUnreadable"


class FileUnreadable(WorkspaceError):
    kind = "FileUnreadable"


class WriteFailed(WorkspaceError):
    kind = "WriteFailed"


class MoveFailed(WorkspaceError):
    """Rename or move-to-trash failed."""
    kind = "MoveFailed"


class CreateCollision(WorkspaceError):
    kind = "CreateCollision"


class InvalidName(WorkspaceError):
    kind = "InvalidName"
