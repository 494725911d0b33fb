from .blocks import Block, BlockKind, parse_blocks, blocks_to_html
from .errors import (
    WorkspaceError,
    DirectoryUnreadable,
    FileUnreadable,
    WriteFailed,
    MoveFailed,
    CreateCollision,
    InvalidName,
)
from .filenames import clean_entry_name, note_filename_for, new_note_filename
from .models import Note, DirectoryEntry

__all__ = ["Block",
           "BlockKind",
           "parse_blocks",
           "blocks_to_html",
           "WorkspaceError",
           "DirectoryUnreadable",
           "FileUnreadable",
           "WriteFailed",
           "MoveFailed",
           "CreateCollision",
           "InvalidName",
           "clean_entry_name",
           "note_filename_for",
           "new_note_filename",
           "Note",
           "DirectoryEntry",
           ]
