"""Status values returned by store operations instead of raising."""

from dataclasses import dataclass
from enum import StrEnum

from bookmark_manager.models.bookmark import Bookmark


class OperationStatus(StrEnum):
    OK = "ok"
    NOT_FOUND = "not_found"
    DUPLICATE_LABEL = "duplicate_label"
    INVARIANT_VIOLATION = "invariant_violation"
    NO_CHANGE = "no_change"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a store mutation.

    ``message`` is meant to be shown to the user for rejections.
    """

    status: OperationStatus
    message: str = ""
    id: str | None = None

    @property
    def success(self) -> bool:
        return self.status is OperationStatus.OK

    @classmethod
    def ok(cls, id: str | None = None) -> "OperationResult":
        return cls(OperationStatus.OK, id=id)

    @classmethod
    def not_found(cls, what: str, id: str) -> "OperationResult":
        return cls(OperationStatus.NOT_FOUND, f"{what} {id!r} not found", id=id)


class ToggleAction(StrEnum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of toggling a bookmark at a location."""

    action: ToggleAction
    bookmark: Bookmark
