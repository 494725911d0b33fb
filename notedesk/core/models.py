from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from notedesk.settings import NOTE_EXTENSION


def generate_note_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class Note:
    """
    One Markdown file of the current directory.

    Identity is `note_id`, not the path: a rename produces a new path for the
    same note. Two Note objects are equal when they share the id.
    """
    path: Path
    content: str = ""
    last_modified: datetime = field(default_factory=datetime.now)
    note_id: str = field(default_factory=generate_note_id)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Note):
            return NotImplemented
        return self.note_id == other.note_id

    def __hash__(self) -> int:
        return hash(self.note_id)

    @property
    def title(self) -> str:
        return self.path.stem

    @property
    def filename(self) -> str:
        return self.path.name

    def update_content(self, text: str, *, now: datetime | None = None) -> None:
        # content and timestamp move together; the timestamp never goes back
        stamp = now or datetime.now()
        if stamp < self.last_modified:
            stamp = self.last_modified
        self.content = text
        self.last_modified = stamp

    def snapshot(self) -> "Note":
        """Detached copy with the same identity."""
        return dataclasses.replace(self)

    def with_path(self, path: Path) -> "Note":
        return dataclasses.replace(self, path=Path(path))


@dataclass(frozen=True)
class DirectoryEntry:
    """A child (file or folder) of the directory being browsed. Identity is the path."""
    path: Path
    is_directory: bool

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_markdown_note(self) -> bool:
        return not self.is_directory and self.path.suffix.lower() == NOTE_EXTENSION
