"""Grouped projections of the bookmark list: by file, color, workspace and custom group.

All functions are pure. They scan the bookmark list once, accumulate buckets
keyed by the bucket value, then sort every bucket with the sort policy. There
is no cache; callers recompute on every read.
"""

from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TypeVar

from bookmark_manager.core.grouping.sorting import sort_bookmarks
from bookmark_manager.models.bookmark import Bookmark
from bookmark_manager.models.group import Group
from bookmark_manager.models.view import Dimension, SortType

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class FileBucket:
    """Bookmarks of one file."""

    file_id: str
    file_relative_path: str
    workspace_name: str
    bookmarks: tuple[Bookmark, ...]

    @property
    def file_name(self) -> str:
        return self.bookmarks[0].file_name if self.bookmarks else self.file_relative_path


@dataclass(frozen=True)
class ColorBucket:
    """Bookmarks sharing one color."""

    color: str
    bookmarks: tuple[Bookmark, ...]


@dataclass(frozen=True)
class WorkspaceBucket:
    """Bookmarks of one workspace root, subdivided by file."""

    workspace_name: str
    workspace_index: int
    files: tuple[FileBucket, ...]

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        return tuple(b for f in self.files for b in f.bookmarks)


@dataclass(frozen=True)
class CustomBucket:
    """Bookmarks assigned to one custom group."""

    group: Group
    bookmarks: tuple[Bookmark, ...]

    @property
    def id(self) -> str:
        return self.group.id

    @property
    def label(self) -> str:
        return self.group.label


def _accumulate(
    bookmarks: Iterable[Bookmark], key: Callable[[Bookmark], K]
) -> dict[K, list[Bookmark]]:
    """Bucket bookmarks by key, keeping first-seen bucket order."""
    buckets: dict[K, list[Bookmark]] = {}
    for bookmark in bookmarks:
        buckets.setdefault(key(bookmark), []).append(bookmark)
    return buckets


def _ordered_keys(keys: Iterable[K], bucket_order: Mapping[K, int] | None) -> list[K]:
    """Order bucket keys by their anchor index, unanchored keys last in first-seen order."""
    keys = list(keys)
    if not bucket_order:
        return keys
    return sorted(keys, key=lambda k: (k not in bucket_order, bucket_order.get(k, 0)))


def _file_buckets(
    bookmarks: Iterable[Bookmark],
    *,
    sort_type: SortType,
    dimension: Dimension,
    file_order: Mapping[str, int] | None,
) -> tuple[FileBucket, ...]:
    accumulated = _accumulate(bookmarks, lambda b: b.file_id)
    result = []
    for file_id in _ordered_keys(accumulated, file_order):
        members = accumulated[file_id]
        first = members[0]
        result.append(
            FileBucket(
                file_id=file_id,
                file_relative_path=first.file_relative_path,
                workspace_name=first.workspace_name,
                bookmarks=sort_bookmarks(members, sort_type=sort_type, dimension=dimension),
            )
        )
    return tuple(result)


def group_by_file(
    bookmarks: Iterable[Bookmark],
    *,
    sort_type: SortType,
    bucket_order: Mapping[str, int] | None = None,
) -> tuple[FileBucket, ...]:
    """Group bookmarks by file (qualified by workspace name).

    Args:
        bookmarks: The full bookmark list.
        sort_type: Sort applied inside each bucket.
        bucket_order: Optional file_id -> anchor index, from the store's GroupInfo.
    """
    return _file_buckets(
        bookmarks, sort_type=sort_type, dimension=Dimension.FILE, file_order=bucket_order
    )


def group_by_color(
    bookmarks: Iterable[Bookmark],
    *,
    sort_type: SortType,
    bucket_order: Mapping[str, int] | None = None,
) -> tuple[ColorBucket, ...]:
    """Group bookmarks by color name."""
    accumulated = _accumulate(bookmarks, lambda b: b.color)
    return tuple(
        ColorBucket(
            color=color,
            bookmarks=sort_bookmarks(
                accumulated[color], sort_type=sort_type, dimension=Dimension.COLOR
            ),
        )
        for color in _ordered_keys(accumulated, bucket_order)
    )


def group_by_workspace(
    bookmarks: Iterable[Bookmark],
    *,
    sort_type: SortType,
    bucket_order: Mapping[str, int] | None = None,
    file_order: Mapping[str, int] | None = None,
) -> tuple[WorkspaceBucket, ...]:
    """Group bookmarks by workspace, then by file inside each workspace.

    Bookmarks are sorted with the workspace dimension's indices when the sort
    type is ``custom``.
    """
    accumulated = _accumulate(bookmarks, lambda b: b.workspace_name)
    return tuple(
        WorkspaceBucket(
            workspace_name=name,
            workspace_index=accumulated[name][0].workspace_index,
            files=_file_buckets(
                accumulated[name],
                sort_type=sort_type,
                dimension=Dimension.WORKSPACE,
                file_order=file_order,
            ),
        )
        for name in _ordered_keys(accumulated, bucket_order)
    )


def group_by_custom(
    bookmarks: Sequence[Bookmark],
    groups: Iterable[Group],
    *,
    sort_type: SortType,
) -> tuple[CustomBucket, ...]:
    """Group bookmarks by custom group, in group ``sorted_index`` order.

    Every group yields a bucket, empty groups included. Bookmarks whose
    ``group_id`` matches no group are left out.
    """
    accumulated = _accumulate(bookmarks, lambda b: b.group_id)
    ordered_groups = sorted(groups, key=lambda g: (g.sorted_index, g.label, g.id))
    seen: set[str] = set()
    result = []
    for group in ordered_groups:
        if group.id in seen:
            continue
        seen.add(group.id)
        result.append(
            CustomBucket(
                group=group,
                bookmarks=sort_bookmarks(
                    accumulated.get(group.id, ()),
                    sort_type=sort_type,
                    dimension=Dimension.CUSTOM,
                ),
            )
        )
    return tuple(result)
