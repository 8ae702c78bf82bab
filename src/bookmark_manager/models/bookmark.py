"""Domain models for bookmarks."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from pathlib import PurePosixPath

from bookmark_manager.config import (
    DEFAULT_BOOKMARK_COLOR,
    DEFAULT_BOOKMARK_ICON,
    DEFAULT_GROUP_ID,
    DEFAULT_ICONS,
    DEFAULT_LABELED_ICON,
    DEFAULT_LANGUAGE_ID,
)
from bookmark_manager.errors import MalformedBookmarkError
from bookmark_manager.models.view import Dimension


class SelectionKind(StrEnum):
    """Whether a bookmark covers a whole line or an explicit text range."""

    LINE = "line"
    SELECTION = "selection"


@dataclass(frozen=True, order=True)
class Position:
    """A zero-based line/character position in a document."""

    line: int
    character: int = 0


@dataclass(frozen=True)
class Range:
    """The span a bookmark covers, from start to end."""

    start: Position
    end: Position

    @classmethod
    def from_lines(
        cls,
        start_line: int,
        end_line: int | None = None,
        *,
        start_character: int = 0,
        end_character: int = 0,
    ) -> "Range":
        return cls(
            Position(start_line, start_character),
            Position(start_line if end_line is None else end_line, end_character),
        )

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class SortedInfo:
    """Per-dimension position of a bookmark inside its bucket.

    -1 means the index was never assigned (e.g. records from old store files).
    """

    color: int = -1
    file: int = -1
    workspace: int = -1
    custom: int = -1

    def get(self, dimension: Dimension) -> int:
        return getattr(self, dimension.value)

    def with_index(self, dimension: Dimension, index: int) -> "SortedInfo":
        return replace(self, **{dimension.value: index})


def default_icon_for(label: str, description: str) -> str:
    """Pick the labeled or unlabeled default icon."""
    return DEFAULT_LABELED_ICON if (label or description) else DEFAULT_BOOKMARK_ICON


def make_file_id(workspace_name: str, file_relative_path: str) -> str:
    """Identity of a file across workspace roots."""
    if not workspace_name:
        return file_relative_path
    return f"{workspace_name}/{file_relative_path}"


@dataclass(frozen=True)
class BookmarkDraft:
    """Caller-supplied fields for a bookmark that does not exist yet.

    Optional fields left as None are normalized by the store when the
    bookmark is created.
    """

    file_relative_path: str
    range: Range | None
    workspace_name: str | None
    workspace_index: int = 0
    label: str = ""
    description: str = ""
    color: str | None = None
    icon: str | None = None
    group_id: str | None = None
    selection_kind: SelectionKind = SelectionKind.LINE
    selection_content: str = ""
    language_id: str | None = None

    @property
    def file_id(self) -> str:
        return make_file_id(self.workspace_name or "", self.file_relative_path)

    def validate(self) -> Range:
        """Check file identity, range and workspace, returning the range.

        Raises:
            MalformedBookmarkError: If any of them is missing.
        """
        if not self.file_relative_path:
            msg = "Bookmark draft has no file path"
            raise MalformedBookmarkError(msg)
        if self.range is None:
            msg = f"Bookmark draft for {self.file_relative_path!r} has no range"
            raise MalformedBookmarkError(msg)
        if self.workspace_name is None:
            msg = f"Bookmark draft for {self.file_relative_path!r} has no workspace"
            raise MalformedBookmarkError(msg)
        return self.range


@dataclass(frozen=True)
class Bookmark:
    """A single bookmark.

    Instances are immutable; the ``with_*`` methods return an updated copy and
    never change ``id`` or ``created_at``.
    """

    id: str
    file_relative_path: str
    workspace_name: str
    workspace_index: int
    range: Range
    created_at: datetime
    updated_at: datetime
    label: str = ""
    description: str = ""
    color: str = DEFAULT_BOOKMARK_COLOR
    icon: str = DEFAULT_BOOKMARK_ICON
    group_id: str = DEFAULT_GROUP_ID
    selection_kind: SelectionKind = SelectionKind.LINE
    selection_content: str = ""
    language_id: str = DEFAULT_LANGUAGE_ID
    sorted_info: SortedInfo = field(default_factory=SortedInfo)

    @property
    def file_id(self) -> str:
        return make_file_id(self.workspace_name, self.file_relative_path)

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.file_relative_path).name

    @property
    def is_labeled(self) -> bool:
        return bool(self.label)

    @property
    def has_default_icon(self) -> bool:
        return self.icon in DEFAULT_ICONS

    def occupies(self, file_id: str, range_: Range) -> bool:
        """Check whether this bookmark sits exactly on the given location."""
        return self.file_id == file_id and self.range == range_

    def _with_text(self, *, label: str, description: str) -> "Bookmark":
        icon = default_icon_for(label, description) if self.has_default_icon else self.icon
        return replace(self, label=label, description=description, icon=icon)

    def with_label(self, label: str) -> "Bookmark":
        return self._with_text(label=label, description=self.description)

    def with_description(self, description: str) -> "Bookmark":
        return self._with_text(label=self.label, description=description)

    def with_color(self, color: str) -> "Bookmark":
        return replace(self, color=color)

    def with_icon(self, icon: str) -> "Bookmark":
        """Set a user-chosen icon; an empty icon resets to the matching default."""
        return replace(self, icon=icon or default_icon_for(self.label, self.description))

    def with_range(self, range_: Range) -> "Bookmark":
        return replace(self, range=range_)

    def with_selection_content(self, content: str) -> "Bookmark":
        return replace(self, selection_content=content)

    def with_group(self, group_id: str) -> "Bookmark":
        return replace(self, group_id=group_id)

    def with_sorted_index(self, dimension: Dimension, index: int) -> "Bookmark":
        return replace(self, sorted_info=self.sorted_info.with_index(dimension, index))

    def touched(self, at: datetime) -> "Bookmark":
        return replace(self, updated_at=at)
