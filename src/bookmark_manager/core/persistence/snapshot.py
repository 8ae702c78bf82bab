"""Convert between the persisted store document and live store state.

The document layout matches the extension's ``bookmark-manager.json``::

    {
        "version": "0.0.1",
        "workspace": "...",
        "updatedDate": "2024-01-01T00:00:00+00:00",
        "viewType": "tree", "groupView": "file", "sortedType": "lineNumber",
        "bookmarks": [...],
        "groups": [...]
    }

Older documents store bookmarks under ``content``. Fields missing from older
versions get their defaults here; version-specific migration is not done.
"""

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

from loguru import logger

from bookmark_manager.config import (
    DEFAULT_BOOKMARK_COLOR,
    DEFAULT_GROUP_COLOR,
    DEFAULT_GROUP_ID,
    DEFAULT_LANGUAGE_ID,
    STORE_FORMAT_VERSION,
)
from bookmark_manager.core.store.store import BookmarkStore, StoreSnapshot
from bookmark_manager.errors import MalformedBookmarkError
from bookmark_manager.models.bookmark import (
    Bookmark,
    Position,
    Range,
    SelectionKind,
    SortedInfo,
    default_icon_for,
)
from bookmark_manager.models.group import Group
from bookmark_manager.models.view import GroupView, SortType, ViewType

E = TypeVar("E", bound=StrEnum)


def _parse_datetime(value: Any, *, default: datetime, where: str) -> datetime:
    if not value:
        return default
    try:
        if isinstance(value, (int, float)):
            # Milliseconds since the epoch.
            return datetime.fromtimestamp(value / 1000, UTC)
        parsed = datetime.fromisoformat(str(value))
    except (ValueError, OverflowError, OSError) as e:
        msg = f"{where}: invalid timestamp {value!r}"
        raise MalformedBookmarkError(msg) from e
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _parse_enum(enum_cls: type[E], value: Any, default: E) -> E:
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown {} {!r}, using {!r}", enum_cls.__name__, value, default.value)
        return default


def _parse_position(raw: Any, *, where: str) -> Position:
    if not isinstance(raw, dict) or "line" not in raw:
        msg = f"{where}: range position without a line: {raw!r}"
        raise MalformedBookmarkError(msg)
    return Position(line=int(raw["line"]), character=int(raw.get("character", 0)))


def _parse_range(raw: dict[str, Any], *, where: str) -> Range:
    ranges = raw.get("rangesOrOptions") or {}
    range_raw = ranges.get("range") or raw.get("selection")
    if not range_raw:
        msg = f"{where}: bookmark has no range"
        raise MalformedBookmarkError(msg)
    start = _parse_position(range_raw.get("start"), where=where)
    end = _parse_position(range_raw.get("end", range_raw.get("start")), where=where)
    return Range(start=start, end=end)


def _parse_sorted_info(raw: Any) -> SortedInfo:
    if not isinstance(raw, dict):
        return SortedInfo()
    return SortedInfo(
        color=int(raw.get("color", -1)),
        file=int(raw.get("file", raw.get("default", -1))),
        workspace=int(raw.get("workspace", -1)),
        custom=int(raw.get("custom", -1)),
    )


def parse_bookmark(raw: dict[str, Any], *, now: datetime, where: str = "bookmark") -> Bookmark:
    """Hydrate one persisted bookmark record.

    Raises:
        MalformedBookmarkError: If the record has no file path, no range or an
            unreadable timestamp.
    """
    file_path = (raw.get("fileUri") or {}).get("fsPath") or raw.get("fileRelativePath")
    if not file_path:
        msg = f"{where}: bookmark has no file path"
        raise MalformedBookmarkError(msg)

    workspace = raw.get("workspaceFolder") or {}
    label = raw.get("label") or ""
    description = raw.get("description") or ""
    color = (raw.get("customColor") or {}).get("name") or raw.get("color") or DEFAULT_BOOKMARK_COLOR
    created_at = _parse_datetime(raw.get("createdAt"), default=now, where=where)

    return Bookmark(
        id=raw.get("id") or uuid.uuid4().hex,
        file_relative_path=file_path,
        workspace_name=workspace.get("name", ""),
        workspace_index=int(workspace.get("index", 0)),
        range=_parse_range(raw, where=where),
        created_at=created_at,
        updated_at=_parse_datetime(raw.get("updatedAt"), default=created_at, where=where),
        label=label,
        description=description,
        color=color,
        icon=raw.get("icon") or default_icon_for(label, description),
        group_id=raw.get("groupId") or DEFAULT_GROUP_ID,
        selection_kind=_parse_enum(SelectionKind, raw.get("type"), SelectionKind.LINE),
        selection_content=raw.get("selectionContent") or "",
        language_id=raw.get("languageId") or DEFAULT_LANGUAGE_ID,
        sorted_info=_parse_sorted_info(raw.get("sortedInfo")),
    )


def parse_group(raw: dict[str, Any], *, where: str = "group") -> Group:
    """Hydrate one persisted group record."""
    if not raw.get("id") or "label" not in raw:
        msg = f"{where}: group needs an id and a label: {raw!r}"
        raise MalformedBookmarkError(msg)
    return Group(
        id=raw["id"],
        label=raw["label"],
        color=raw.get("color") or DEFAULT_GROUP_COLOR,
        sorted_index=int(raw.get("sortedIndex", 0)),
        workspace_name=raw.get("workspace") or "",
        active_status=bool(raw.get("activeStatus", False)),
    )


def hydrate_store_data(data: dict[str, Any], *, now: datetime | None = None) -> StoreSnapshot:
    """Parse a persisted store document into a StoreSnapshot.

    Args:
        data: The decoded JSON document.
        now: Timestamp used for bookmarks without ``createdAt``.

    Raises:
        MalformedBookmarkError: If a bookmark lacks a file path or range, or a
            group lacks an id or label.
    """
    now = now or datetime.now(UTC)
    raw_bookmarks = data.get("bookmarks")
    if raw_bookmarks is None:
        raw_bookmarks = data.get("content") or []

    bookmarks = tuple(
        parse_bookmark(raw, now=now, where=f"bookmarks[{i}]") for i, raw in enumerate(raw_bookmarks)
    )
    groups = tuple(
        parse_group(raw, where=f"groups[{i}]") for i, raw in enumerate(data.get("groups") or [])
    )
    logger.debug(
        "Hydrated {} bookmarks, {} groups (version {})",
        len(bookmarks), len(groups), data.get("version"),
    )
    return StoreSnapshot(
        bookmarks=bookmarks,
        groups=groups,
        view_type=_parse_enum(ViewType, data.get("viewType"), ViewType.TREE),
        group_view=_parse_enum(GroupView, data.get("groupView"), GroupView.FILE),
        sort_type=_parse_enum(SortType, data.get("sortedType"), SortType.LINE_NUMBER),
        workspace=data.get("workspace") or "",
    )


def _dump_position(position: Position) -> dict[str, int]:
    return {"line": position.line, "character": position.character}


def dump_bookmark(bookmark: Bookmark) -> dict[str, Any]:
    info = bookmark.sorted_info
    return {
        "id": bookmark.id,
        "label": bookmark.label,
        "description": bookmark.description,
        "customColor": {"name": bookmark.color},
        "icon": bookmark.icon,
        "fileUri": {"fsPath": bookmark.file_relative_path},
        "type": bookmark.selection_kind.value,
        "selectionContent": bookmark.selection_content,
        "languageId": bookmark.language_id,
        "workspaceFolder": {"name": bookmark.workspace_name, "index": bookmark.workspace_index},
        "rangesOrOptions": {
            "range": {
                "start": _dump_position(bookmark.range.start),
                "end": _dump_position(bookmark.range.end),
            }
        },
        "createdAt": bookmark.created_at.isoformat(),
        "updatedAt": bookmark.updated_at.isoformat(),
        "groupId": bookmark.group_id,
        "sortedInfo": {
            "color": info.color,
            "custom": info.custom,
            "default": info.file,
            "file": info.file,
            "workspace": info.workspace,
        },
    }


def dump_group(group: Group) -> dict[str, Any]:
    return {
        "id": group.id,
        "label": group.label,
        "color": group.color,
        "sortedIndex": group.sorted_index,
        "workspace": group.workspace_name,
        "activeStatus": group.active_status,
    }


def dump_store(
    store: BookmarkStore, *, workspace: str, now: datetime | None = None
) -> dict[str, Any]:
    """Serialize the store into the persisted document layout."""
    return {
        "version": STORE_FORMAT_VERSION,
        "workspace": workspace,
        "updatedDate": (now or datetime.now(UTC)).isoformat(),
        "viewType": store.view_type.value,
        "groupView": store.group_view.value,
        "sortedType": store.sort_type.value,
        "bookmarks": [dump_bookmark(b) for b in store.bookmarks],
        "groups": [dump_group(g) for g in store.groups],
    }
