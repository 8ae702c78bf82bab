"""Code bookmark store with grouped and sorted views."""

from bookmark_manager.core.persistence.store_file import StoreFile
from bookmark_manager.core.store.results import OperationResult, OperationStatus, ToggleResult
from bookmark_manager.core.store.store import BookmarkStore, StoreSnapshot
from bookmark_manager.models.bookmark import Bookmark, BookmarkDraft, Position, Range
from bookmark_manager.models.group import Group

__all__ = [
    "Bookmark",
    "BookmarkDraft",
    "BookmarkStore",
    "Group",
    "OperationResult",
    "OperationStatus",
    "Position",
    "Range",
    "StoreFile",
    "StoreSnapshot",
    "ToggleResult",
]
