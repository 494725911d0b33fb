from .store import WorkspaceStore
from .autosave import AutoSaveScheduler

__all__ = ["WorkspaceStore", "AutoSaveScheduler"]
