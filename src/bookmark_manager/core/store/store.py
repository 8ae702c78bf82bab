"""The bookmark store: owner of bookmarks, groups and the per-dimension bucket index.

Every mutation goes through ``BookmarkStore``. Grouped views are not stored;
they are recomputed from the bookmark list on each read by the functions in
``bookmark_manager.core.grouping.projections``.
"""

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from loguru import logger

from bookmark_manager.config import (
    DEFAULT_BOOKMARK_COLOR,
    DEFAULT_GROUP_COLOR,
    DEFAULT_GROUP_ID,
    DEFAULT_LANGUAGE_ID,
)
from bookmark_manager.core.grouping.projections import (
    ColorBucket,
    CustomBucket,
    FileBucket,
    WorkspaceBucket,
    group_by_color,
    group_by_custom,
    group_by_file,
    group_by_workspace,
)
from bookmark_manager.core.grouping.sorting import sort_key
from bookmark_manager.core.store.results import (
    OperationResult,
    OperationStatus,
    ToggleAction,
    ToggleResult,
)
from bookmark_manager.models.bookmark import (
    Bookmark,
    BookmarkDraft,
    Range,
    SortedInfo,
    default_icon_for,
)
from bookmark_manager.models.group import Group, GroupInfoEntry, make_default_group
from bookmark_manager.models.view import Dimension, GroupView, SortType, ViewType
from bookmark_manager.protocols import ChangeListener, ClockProtocol, IdFactoryProtocol

# Dimensions with a GroupInfo list. Custom groups carry their own sorted_index.
INDEXED_DIMENSIONS: tuple[Dimension, ...] = (Dimension.FILE, Dimension.COLOR, Dimension.WORKSPACE)

AnyBucket = FileBucket | ColorBucket | WorkspaceBucket | CustomBucket


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _uuid_hex() -> str:
    return uuid.uuid4().hex


def bucket_value(bookmark: Bookmark, dimension: Dimension) -> str:
    """The value identifying the bookmark's bucket in a dimension."""
    if dimension is Dimension.FILE:
        return bookmark.file_id
    if dimension is Dimension.COLOR:
        return bookmark.color
    if dimension is Dimension.WORKSPACE:
        return bookmark.workspace_name
    return bookmark.group_id


@dataclass(frozen=True)
class StoreSnapshot:
    """Hydrated contents of a persisted store document."""

    bookmarks: tuple[Bookmark, ...] = ()
    groups: tuple[Group, ...] = ()
    view_type: ViewType = ViewType.TREE
    group_view: GroupView = GroupView.FILE
    sort_type: SortType = SortType.LINE_NUMBER
    workspace: str = ""


class BookmarkStore:
    """In-memory bookmark state for one editor session.

    Construct one per session and pass it to whatever needs it. Lookups of
    unknown ids, duplicate group labels and changes to the Default Group are
    reported through ``OperationResult``; only malformed drafts raise.

    Listeners registered with ``subscribe`` are called once after each
    successful mutation, when all derived state is consistent.
    """

    def __init__(
        self,
        *,
        clock: ClockProtocol | None = None,
        id_factory: IdFactoryProtocol | None = None,
    ) -> None:
        self._clock: Callable[[], datetime] = clock or _utc_now
        self._new_id: Callable[[], str] = id_factory or _uuid_hex
        self._lock = threading.RLock()
        self._listeners: list[ChangeListener] = []

        self._bookmarks: list[Bookmark] = []
        self._groups: list[Group] = [make_default_group()]
        self._group_info: dict[Dimension, list[GroupInfoEntry]] = {
            d: [] for d in INDEXED_DIMENSIONS
        }

        self._view_type = ViewType.TREE
        self._group_view = GroupView.FILE
        self._sort_type = SortType.LINE_NUMBER

    # --- Change notification ---

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Change listener {!r} failed", listener)

    # --- View state ---

    @property
    def view_type(self) -> ViewType:
        return self._view_type

    @property
    def group_view(self) -> GroupView:
        return self._group_view

    @property
    def sort_type(self) -> SortType:
        return self._sort_type

    def set_view_type(self, view_type: ViewType | str) -> bool:
        """Switch between tree and list presentation. Returns False if unchanged."""
        view_type = ViewType(view_type)
        with self._lock:
            if self._view_type == view_type:
                return False
            self._view_type = view_type
            self._notify()
        return True

    def set_group_view(self, group_view: GroupView | str) -> bool:
        """Switch the active grouping. Returns False if unchanged."""
        group_view = GroupView(group_view)
        with self._lock:
            if self._group_view == group_view:
                return False
            self._group_view = group_view
            self._notify()
        return True

    def set_sort_type(self, sort_type: SortType | str) -> bool:
        """Switch the sort applied inside buckets. Returns False if unchanged."""
        sort_type = SortType(sort_type)
        with self._lock:
            if self._sort_type == sort_type:
                return False
            self._sort_type = sort_type
            self._notify()
        return True

    # --- Read accessors ---

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        with self._lock:
            return tuple(self._bookmarks)

    @property
    def groups(self) -> tuple[Group, ...]:
        """Groups in ``sorted_index`` order."""
        with self._lock:
            return tuple(sorted(self._groups, key=lambda g: (g.sorted_index, g.label, g.id)))

    @property
    def total_count(self) -> int:
        with self._lock:
            return len(self._bookmarks)

    @property
    def labeled_count(self) -> int:
        with self._lock:
            return sum(1 for b in self._bookmarks if b.is_labeled)

    @property
    def colors(self) -> tuple[str, ...]:
        """Distinct colors currently in use, in first-seen order."""
        with self._lock:
            return tuple(dict.fromkeys(b.color for b in self._bookmarks))

    @property
    def active_group(self) -> Group:
        """The group marked active, or the Default Group if none is."""
        with self._lock:
            for group in self._groups:
                if group.active_status:
                    return group
            return self._default_group()

    def get_bookmark(self, bookmark_id: str) -> Bookmark | None:
        with self._lock:
            idx = self._bookmark_index(bookmark_id)
            return None if idx is None else self._bookmarks[idx]

    def get_group(self, group_id: str) -> Group | None:
        with self._lock:
            idx = self._group_index(group_id)
            return None if idx is None else self._groups[idx]

    def bookmarks_in_file(self, file_id: str) -> tuple[Bookmark, ...]:
        with self._lock:
            return tuple(b for b in self._bookmarks if b.file_id == file_id)

    def bookmark_at(self, file_id: str, range_: Range) -> Bookmark | None:
        """Find the bookmark occupying exactly this file and range."""
        with self._lock:
            for bookmark in self._bookmarks:
                if bookmark.occupies(file_id, range_):
                    return bookmark
            return None

    def group_info(self, dimension: Dimension) -> tuple[GroupInfoEntry, ...]:
        """First-seen index of bucket values in a dimension.

        For the custom dimension the entries are derived from the groups.
        """
        with self._lock:
            if dimension is Dimension.CUSTOM:
                return tuple(GroupInfoEntry(id=g.id, sorted_index=g.sorted_index) for g in self.groups)
            return tuple(self._group_info[dimension])

    def _bucket_order(self, dimension: Dimension) -> dict[str, int]:
        return {e.id: e.sorted_index for e in self._group_info[dimension]}

    # --- Grouped projections ---

    def grouped_by_file(self) -> tuple[FileBucket, ...]:
        with self._lock:
            return group_by_file(
                self._bookmarks,
                sort_type=self._sort_type,
                bucket_order=self._bucket_order(Dimension.FILE),
            )

    def grouped_by_color(self) -> tuple[ColorBucket, ...]:
        with self._lock:
            return group_by_color(
                self._bookmarks,
                sort_type=self._sort_type,
                bucket_order=self._bucket_order(Dimension.COLOR),
            )

    def grouped_by_workspace(self) -> tuple[WorkspaceBucket, ...]:
        with self._lock:
            return group_by_workspace(
                self._bookmarks,
                sort_type=self._sort_type,
                bucket_order=self._bucket_order(Dimension.WORKSPACE),
                file_order=self._bucket_order(Dimension.FILE),
            )

    def grouped_by_custom(self) -> tuple[CustomBucket, ...]:
        with self._lock:
            return group_by_custom(self._bookmarks, self._groups, sort_type=self._sort_type)

    def grouped(self) -> tuple[AnyBucket, ...]:
        """The projection for the current group view."""
        with self._lock:
            if self._group_view is GroupView.COLOR:
                return self.grouped_by_color()
            if self._group_view is GroupView.WORKSPACE:
                return self.grouped_by_workspace()
            if self._group_view is GroupView.CUSTOM:
                return self.grouped_by_custom()
            return self.grouped_by_file()

    # --- Internal helpers ---

    def _bookmark_index(self, bookmark_id: str) -> int | None:
        for i, bookmark in enumerate(self._bookmarks):
            if bookmark.id == bookmark_id:
                return i
        return None

    def _group_index(self, group_id: str) -> int | None:
        for i, group in enumerate(self._groups):
            if group.id == group_id:
                return i
        return None

    def _default_group(self) -> Group:
        return next(g for g in self._groups if g.is_default)

    def _ensure_default_group(self) -> None:
        if self._group_index(DEFAULT_GROUP_ID) is None:
            self._groups.append(make_default_group(active=False))

    def _ensure_single_active(self) -> None:
        """Keep at most one active group, falling back to the Default Group."""
        active = [g.id for g in self._groups if g.active_status]
        keep = active[0] if active else self._default_group().id
        self._groups = [g.with_active_status(g.id == keep) for g in self._groups]

    def _next_sorted_index(self, dimension: Dimension, value: str) -> int:
        """Next free index in a bucket: one past the largest index in use."""
        indices = [
            b.sorted_info.get(dimension)
            for b in self._bookmarks
            if bucket_value(b, dimension) == value
        ]
        return max(indices, default=-1) + 1

    def _record_bucket(self, dimension: Dimension, value: str) -> None:
        entries = self._group_info[dimension]
        if any(e.id == value for e in entries):
            return
        entries.append(GroupInfoEntry(id=value, sorted_index=len(entries)))

    def _record_buckets(self, bookmark: Bookmark) -> None:
        for dimension in INDEXED_DIMENSIONS:
            self._record_bucket(dimension, bucket_value(bookmark, dimension))

    def _resolve_group_id(self, group_id: str | None) -> str:
        if group_id is None:
            return DEFAULT_GROUP_ID
        if self._group_index(group_id) is None:
            logger.debug("Unknown group {!r} for new bookmark, using Default Group", group_id)
            return self._default_group().id
        return group_id

    def _remove_where(self, predicate: Callable[[Bookmark], bool]) -> int:
        kept = [b for b in self._bookmarks if not predicate(b)]
        removed = len(self._bookmarks) - len(kept)
        self._bookmarks = kept
        return removed

    # --- Bookmark mutations ---

    def _create(self, draft: BookmarkDraft) -> Bookmark:
        range_ = draft.validate()
        now = self._clock()
        bookmark = Bookmark(
            id=self._new_id(),
            file_relative_path=draft.file_relative_path,
            workspace_name=draft.workspace_name or "",
            workspace_index=draft.workspace_index,
            range=range_,
            created_at=now,
            updated_at=now,
            label=draft.label,
            description=draft.description,
            color=draft.color or DEFAULT_BOOKMARK_COLOR,
            icon=draft.icon or default_icon_for(draft.label, draft.description),
            group_id=self._resolve_group_id(draft.group_id),
            selection_kind=draft.selection_kind,
            selection_content=draft.selection_content,
            language_id=draft.language_id or DEFAULT_LANGUAGE_ID,
        )
        sorted_info = SortedInfo(
            **{
                d.value: self._next_sorted_index(d, bucket_value(bookmark, d))
                for d in Dimension
            }
        )
        bookmark = replace(bookmark, sorted_info=sorted_info)
        self._record_buckets(bookmark)
        self._bookmarks.append(bookmark)
        logger.debug(
            "Added bookmark {} at {}:{}", bookmark.id, bookmark.file_id, bookmark.range.start.line
        )
        return bookmark

    def add_bookmark(self, draft: BookmarkDraft) -> Bookmark:
        """Create a bookmark from a draft and return it.

        Raises:
            MalformedBookmarkError: If the draft has no file path, range or workspace.
        """
        with self._lock:
            bookmark = self._create(draft)
            self._notify()
        return bookmark

    def toggle_bookmark(self, draft: BookmarkDraft) -> ToggleResult:
        """Remove the bookmark at the draft's location, or add one if there is none.

        Raises:
            MalformedBookmarkError: If the draft has no file path, range or workspace.
        """
        range_ = draft.validate()
        with self._lock:
            existing = self.bookmark_at(draft.file_id, range_)
            if existing is not None:
                self._bookmarks.remove(existing)
                logger.debug("Toggled off bookmark {} at {}", existing.id, existing.file_id)
                result = ToggleResult(ToggleAction.REMOVED, existing)
            else:
                result = ToggleResult(ToggleAction.ADDED, self._create(draft))
            self._notify()
        return result

    def update_bookmark(
        self,
        bookmark_id: str,
        *,
        label: str | None = None,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
        range: Range | None = None,
        selection_content: str | None = None,
        group_id: str | None = None,
    ) -> OperationResult:
        """Update the given fields of a bookmark.

        Only fields passed as non-None change. Identity, creation time and the
        per-dimension sorted indices are never touched.
        """
        with self._lock:
            idx = self._bookmark_index(bookmark_id)
            if idx is None:
                logger.debug("Update of unknown bookmark {} ignored", bookmark_id)
                return OperationResult.not_found("Bookmark", bookmark_id)
            if group_id is not None and self._group_index(group_id) is None:
                return OperationResult.not_found("Group", group_id)

            original = self._bookmarks[idx]
            updated = original
            if label is not None:
                updated = updated.with_label(label)
            if description is not None:
                updated = updated.with_description(description)
            if color is not None:
                updated = updated.with_color(color or DEFAULT_BOOKMARK_COLOR)
            if icon is not None:
                updated = updated.with_icon(icon)
            if range is not None:
                updated = updated.with_range(range)
            if selection_content is not None:
                updated = updated.with_selection_content(selection_content)
            if group_id is not None:
                updated = updated.with_group(group_id)

            if updated == original:
                return OperationResult(OperationStatus.NO_CHANGE, "No fields to update.", id=bookmark_id)

            updated = updated.touched(self._clock())
            self._bookmarks[idx] = updated
            self._record_buckets(updated)
            logger.debug("Updated bookmark {}", bookmark_id)
            self._notify()
        return OperationResult.ok(bookmark_id)

    def remove_bookmark(self, bookmark_id: str) -> OperationResult:
        """Remove a bookmark. The bucket index keeps its entries."""
        with self._lock:
            idx = self._bookmark_index(bookmark_id)
            if idx is None:
                logger.debug("Removal of unknown bookmark {} ignored", bookmark_id)
                return OperationResult.not_found("Bookmark", bookmark_id)
            del self._bookmarks[idx]
            logger.debug("Removed bookmark {}", bookmark_id)
            self._notify()
        return OperationResult.ok(bookmark_id)

    def move_bookmark_to_group(self, bookmark_id: str, group_id: str) -> OperationResult:
        """Reassign a bookmark to another group, placing it last in that group."""
        with self._lock:
            idx = self._bookmark_index(bookmark_id)
            if idx is None:
                return OperationResult.not_found("Bookmark", bookmark_id)
            if self._group_index(group_id) is None:
                return OperationResult.not_found("Group", group_id)
            original = self._bookmarks[idx]
            if original.group_id == group_id:
                return OperationResult(OperationStatus.NO_CHANGE, id=bookmark_id)
            next_index = self._next_sorted_index(Dimension.CUSTOM, group_id)
            self._bookmarks[idx] = (
                original.with_group(group_id)
                .with_sorted_index(Dimension.CUSTOM, next_index)
                .touched(self._clock())
            )
            logger.debug("Moved bookmark {} to group {}", bookmark_id, group_id)
            self._notify()
        return OperationResult.ok(bookmark_id)

    def reorder_bookmark(
        self, bookmark_id: str, dimension: Dimension, new_index: int
    ) -> OperationResult:
        """Move a bookmark to a new position inside its bucket for custom sorting.

        The bucket's indices in that dimension are renumbered 0..n-1 in the
        resulting order. ``new_index`` is clamped to the bucket size.
        """
        with self._lock:
            idx = self._bookmark_index(bookmark_id)
            if idx is None:
                return OperationResult.not_found("Bookmark", bookmark_id)
            target = self._bookmarks[idx]
            value = bucket_value(target, dimension)
            members = sorted(
                (b for b in self._bookmarks if bucket_value(b, dimension) == value),
                key=sort_key(SortType.CUSTOM, dimension),
            )
            members.remove(target)
            members.insert(max(0, min(new_index, len(members))), target)
            renumbered = {b.id: i for i, b in enumerate(members)}
            if all(b.sorted_info.get(dimension) == renumbered[b.id] for b in members):
                return OperationResult(OperationStatus.NO_CHANGE, id=bookmark_id)
            self._bookmarks = [
                b.with_sorted_index(dimension, renumbered[b.id]) if b.id in renumbered else b
                for b in self._bookmarks
            ]
            logger.debug("Reordered bookmark {} to {} in {} {!r}", bookmark_id, new_index, dimension, value)
            self._notify()
        return OperationResult.ok(bookmark_id)

    def clear_all(self, workspace_name: str | None = None) -> int:
        """Remove bookmarks and groups, returning the number of bookmarks removed.

        Without a workspace, everything goes: bookmarks, bucket index and all
        groups except a fresh Default Group. With a workspace, only bookmarks
        and groups of that workspace are removed, plus bookmarks of removed groups.
        """
        with self._lock:
            before_groups = list(self._groups)
            if workspace_name is None:
                removed = len(self._bookmarks)
                had_index = any(self._group_info.values())
                self._bookmarks = []
                self._groups = [make_default_group()]
                self._group_info = {d: [] for d in INDEXED_DIMENSIONS}
                changed = removed > 0 or had_index or self._groups != before_groups
            else:
                dropped = {
                    g.id for g in self._groups if g.workspace_name == workspace_name and not g.is_default
                }
                removed = self._remove_where(
                    lambda b: b.workspace_name == workspace_name or b.group_id in dropped
                )
                self._groups = [g for g in self._groups if g.id not in dropped]
                self._ensure_default_group()
                self._ensure_single_active()
                changed = removed > 0 or self._groups != before_groups
            if changed:
                logger.debug("Cleared {} bookmarks (workspace={!r})", removed, workspace_name)
                self._notify()
        return removed

    def _clear(self, predicate: Callable[[Bookmark], bool], what: str) -> int:
        with self._lock:
            removed = self._remove_where(predicate)
            if removed:
                logger.debug("Cleared {} bookmarks by {}", removed, what)
                self._notify()
        return removed

    def clear_by_file(self, file_id: str) -> int:
        return self._clear(lambda b: b.file_id == file_id, f"file {file_id!r}")

    def clear_by_color(self, color: str) -> int:
        return self._clear(lambda b: b.color == color, f"color {color!r}")

    def clear_by_group(self, group_id: str) -> int:
        """Remove the bookmarks of a group; the group itself stays."""
        return self._clear(lambda b: b.group_id == group_id, f"group {group_id!r}")

    # --- Group mutations ---

    def _reject_default(self, group_id: str, message: str) -> OperationResult | None:
        if group_id == DEFAULT_GROUP_ID:
            logger.info(message)
            return OperationResult(OperationStatus.INVARIANT_VIOLATION, message, id=group_id)
        return None

    def add_group(
        self,
        label: str,
        color: str = DEFAULT_GROUP_COLOR,
        workspace_name: str = "",
    ) -> OperationResult:
        """Create a group with a unique label. The result carries the new group's id."""
        with self._lock:
            if any(g.label == label for g in self._groups):
                message = "Group name already exists"
                logger.info("{}: {!r}", message, label)
                return OperationResult(OperationStatus.DUPLICATE_LABEL, message)
            group = Group(
                id=self._new_id(),
                label=label,
                color=color,
                sorted_index=max((g.sorted_index for g in self._groups), default=0) + 1,
                workspace_name=workspace_name,
            )
            self._groups.append(group)
            logger.debug("Added group {} ({!r})", group.id, label)
            self._notify()
        return OperationResult.ok(group.id)

    def delete_group(self, group_id: str) -> OperationResult:
        """Delete a group and every bookmark assigned to it."""
        rejected = self._reject_default(group_id, "Can't delete default group")
        if rejected:
            return rejected
        with self._lock:
            idx = self._group_index(group_id)
            if idx is None:
                return OperationResult.not_found("Group", group_id)
            removed = self._remove_where(lambda b: b.group_id == group_id)
            del self._groups[idx]
            self._ensure_single_active()
            logger.debug("Deleted group {} with {} bookmarks", group_id, removed)
            self._notify()
        return OperationResult.ok(group_id)

    def relabel_group(self, group_id: str, label: str) -> OperationResult:
        rejected = self._reject_default(group_id, "Can not change default group label")
        if rejected:
            return rejected
        with self._lock:
            idx = self._group_index(group_id)
            if idx is None:
                return OperationResult.not_found("Group", group_id)
            if self._groups[idx].label == label:
                return OperationResult(OperationStatus.NO_CHANGE, id=group_id)
            if any(g.label == label for g in self._groups):
                message = "Group name already exists"
                logger.info("{}: {!r}", message, label)
                return OperationResult(OperationStatus.DUPLICATE_LABEL, message, id=group_id)
            self._groups[idx] = self._groups[idx].with_label(label)
            self._notify()
        return OperationResult.ok(group_id)

    def recolor_group(self, group_id: str, color: str) -> OperationResult:
        rejected = self._reject_default(group_id, "Can not change default group color")
        if rejected:
            return rejected
        with self._lock:
            idx = self._group_index(group_id)
            if idx is None:
                return OperationResult.not_found("Group", group_id)
            if self._groups[idx].color == color:
                return OperationResult(OperationStatus.NO_CHANGE, id=group_id)
            self._groups[idx] = self._groups[idx].with_color(color)
            self._notify()
        return OperationResult.ok(group_id)

    def reindex_group(self, group_id: str, new_index: int) -> OperationResult:
        """Move a group to a new position; all groups are renumbered 0..n-1."""
        with self._lock:
            if self._group_index(group_id) is None:
                return OperationResult.not_found("Group", group_id)
            ordered = list(self.groups)
            target = next(g for g in ordered if g.id == group_id)
            ordered.remove(target)
            ordered.insert(max(0, min(new_index, len(ordered))), target)
            positions = {g.id: i for i, g in enumerate(ordered)}
            if all(g.sorted_index == positions[g.id] for g in self._groups):
                return OperationResult(OperationStatus.NO_CHANGE, id=group_id)
            self._groups = [g.with_sorted_index(positions[g.id]) for g in self._groups]
            self._notify()
        return OperationResult.ok(group_id)

    def set_active_group(self, group_id: str) -> OperationResult:
        """Mark one group as active and clear the flag on the others."""
        with self._lock:
            if self._group_index(group_id) is None:
                return OperationResult.not_found("Group", group_id)
            if all(g.active_status == (g.id == group_id) for g in self._groups):
                return OperationResult(OperationStatus.NO_CHANGE, id=group_id)
            self._groups = [g.with_active_status(g.id == group_id) for g in self._groups]
            self._notify()
        return OperationResult.ok(group_id)

    # --- Loading ---

    def load(self, snapshot: StoreSnapshot) -> None:
        """Replace the store contents with a hydrated snapshot.

        Duplicate ids keep their first occurrence. The Default Group is added
        if missing and the bucket index is rebuilt in bookmark order. Once every
        bookmark is in, those without an assigned sorted index get one past the
        largest index in their bucket.
        """
        with self._lock:
            groups: dict[str, Group] = {}
            for group in snapshot.groups:
                groups.setdefault(group.id, group)
            self._groups = list(groups.values())
            self._ensure_default_group()
            self._ensure_single_active()

            self._bookmarks = []
            self._group_info = {d: [] for d in INDEXED_DIMENSIONS}
            seen: set[str] = set()
            for bookmark in snapshot.bookmarks:
                if bookmark.id in seen:
                    continue
                seen.add(bookmark.id)
                self._bookmarks.append(bookmark)
                self._record_buckets(bookmark)
            for i, bookmark in enumerate(self._bookmarks):
                self._bookmarks[i] = self._with_assigned_indices(bookmark)

            self._view_type = snapshot.view_type
            self._group_view = snapshot.group_view
            self._sort_type = snapshot.sort_type
            logger.info(
                "Loaded {} bookmarks and {} groups", len(self._bookmarks), len(self._groups)
            )
            self._notify()

    def _with_assigned_indices(self, bookmark: Bookmark) -> Bookmark:
        for dimension in Dimension:
            if bookmark.sorted_info.get(dimension) < 0:
                bookmark = bookmark.with_sorted_index(
                    dimension, self._next_sorted_index(dimension, bucket_value(bookmark, dimension))
                )
        return bookmark

