"""Render the store's current grouped view as indented text."""

import io

from bookmark_manager.core.grouping.projections import (
    ColorBucket,
    CustomBucket,
    FileBucket,
    WorkspaceBucket,
)
from bookmark_manager.core.store.store import AnyBucket, BookmarkStore
from bookmark_manager.models.bookmark import Bookmark
from bookmark_manager.models.view import ViewType

_INDENT = "    "


def format_bookmark(bookmark: Bookmark, *, with_file: bool = False) -> str:
    """One-line summary of a bookmark. Line numbers are shown 1-based."""
    start = bookmark.range.start
    location = f"{bookmark.file_relative_path}:{start.line + 1}" if with_file else f"L{start.line + 1}"
    text = bookmark.label or bookmark.selection_content.strip().split("\n")[0]
    parts = [f"- {location}"]
    if text:
        parts.append(text[:80])
    parts.append(f"[{bookmark.color}, {bookmark.icon}]")
    parts.append(f"id={bookmark.id}")
    return "  ".join(parts)


def _bucket_header(bucket: AnyBucket) -> str:
    if isinstance(bucket, FileBucket):
        return f"{bucket.file_id} ({len(bucket.bookmarks)})"
    if isinstance(bucket, ColorBucket):
        return f"{bucket.color} ({len(bucket.bookmarks)})"
    if isinstance(bucket, WorkspaceBucket):
        return f"{bucket.workspace_name or '(no workspace)'} ({len(bucket.bookmarks)})"
    marker = " *" if bucket.group.active_status else ""
    return f"{bucket.label}{marker} ({len(bucket.bookmarks)})"


def _write_tree(out: io.StringIO, buckets: tuple[AnyBucket, ...]) -> None:
    for bucket in buckets:
        out.write(f"{_bucket_header(bucket)}\n")
        if isinstance(bucket, WorkspaceBucket):
            for file_bucket in bucket.files:
                out.write(f"{_INDENT}{file_bucket.file_relative_path}\n")
                for bookmark in file_bucket.bookmarks:
                    out.write(f"{_INDENT * 2}{format_bookmark(bookmark)}\n")
            continue
        with_file = isinstance(bucket, (ColorBucket, CustomBucket))
        for bookmark in bucket.bookmarks:
            out.write(f"{_INDENT}{format_bookmark(bookmark, with_file=with_file)}\n")


def render_tree(store: BookmarkStore) -> str:
    """Render the current group view, as a tree or as a flat list.

    Returns:
        Text with one line per bucket header (tree view only) and per bookmark.
    """
    buckets = store.grouped()
    out = io.StringIO()
    if store.view_type is ViewType.LIST:
        for bucket in buckets:
            for bookmark in bucket.bookmarks:
                out.write(f"{format_bookmark(bookmark, with_file=True)}\n")
    else:
        _write_tree(out, buckets)
    return out.getvalue()
