"""Sort policy: ordering of bookmarks inside a bucket."""

from collections.abc import Callable, Iterable
from typing import Any

from bookmark_manager.models.bookmark import Bookmark
from bookmark_manager.models.view import Dimension, SortType

SortKey = Callable[[Bookmark], tuple[Any, ...]]


def _by_line_number(bookmark: Bookmark) -> tuple[Any, ...]:
    start = bookmark.range.start
    return (start.line, start.character, bookmark.id)


def _by_created_time(bookmark: Bookmark) -> tuple[Any, ...]:
    return (bookmark.created_at, bookmark.id)


def _by_updated_time(bookmark: Bookmark) -> tuple[Any, ...]:
    return (bookmark.updated_at, bookmark.created_at, bookmark.id)


def sort_key(sort_type: SortType, dimension: Dimension) -> SortKey:
    """Return a key function giving a total order for the sort type.

    Every key ends with the bookmark id, so two bookmarks never compare equal
    and the ordering is the same on every recomputation.

    Args:
        sort_type: Active sort type.
        dimension: Grouping dimension of the bucket being sorted. Only used by
            ``custom`` sorting, which compares that dimension's sorted index.
    """
    if sort_type == SortType.LINE_NUMBER:
        return _by_line_number
    if sort_type == SortType.CREATED_TIME:
        return _by_created_time
    if sort_type == SortType.UPDATED_TIME:
        return _by_updated_time

    def by_custom_index(bookmark: Bookmark) -> tuple[Any, ...]:
        return (bookmark.sorted_info.get(dimension), bookmark.created_at, bookmark.id)

    return by_custom_index


def sort_bookmarks(
    bookmarks: Iterable[Bookmark],
    *,
    sort_type: SortType,
    dimension: Dimension,
) -> tuple[Bookmark, ...]:
    """Sort one bucket's bookmarks."""
    return tuple(sorted(bookmarks, key=sort_key(sort_type, dimension)))
