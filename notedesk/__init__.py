from .core.models import Note, DirectoryEntry
from .core.blocks import Block, BlockKind, parse_blocks
from .workspace.store import WorkspaceStore
from .workspace.autosave import AutoSaveScheduler

__all__ = ["Note",
           "DirectoryEntry",
           "Block",
           "BlockKind",
           "parse_blocks",
           "WorkspaceStore",
           "AutoSaveScheduler",
           ]
