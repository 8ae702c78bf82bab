"""CLI for the bookmark manager (toggle, edit, clear, groups, views)."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from bookmark_manager.config import DEFAULT_COLORS, DEFAULT_GROUP_COLOR, resolve_workspace_root
from bookmark_manager.core.persistence.snapshot import dump_bookmark
from bookmark_manager.core.persistence.store_file import StoreFile
from bookmark_manager.core.store.results import OperationResult, OperationStatus
from bookmark_manager.core.store.store import BookmarkStore
from bookmark_manager.core.tree.render import render_tree
from bookmark_manager.errors import BookmarkManagerError
from bookmark_manager.logging_config import configure_logging
from bookmark_manager.models.bookmark import BookmarkDraft, Range, SelectionKind, make_file_id
from bookmark_manager.models.group import Group
from bookmark_manager.models.view import Dimension, GroupView, SortType, ViewType

app = typer.Typer(help="Bookmark manager: mark lines in source files and browse them in groups.")
group_app = typer.Typer(help="Manage custom bookmark groups.")
app.add_typer(group_app, name="group")

WorkspaceOption = Annotated[
    Path | None,
    typer.Option("--workspace", "-w", help="Workspace root (default: $BOOKMARK_MANAGER_WORKSPACE or cwd)"),
]
DryRunOption = Annotated[bool, typer.Option("--dry-run", help="Do not write the store file")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _open_store(
    workspace: Path | None, *, dry_run: bool = False, read_only: bool = False
) -> tuple[BookmarkStore, StoreFile]:
    """Load the workspace's store; unless read-only, write every change back to it."""
    root = resolve_workspace_root(workspace)
    try:
        store_file = StoreFile(root, dry_run=dry_run)
        store = BookmarkStore()
        store_file.load_into(store)
    except (BookmarkManagerError, ValueError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    if not read_only:
        store_file.attach(store)
    return store, store_file


def _report(result: OperationResult, done: str) -> None:
    if result.success:
        typer.echo(done)
    elif result.status is OperationStatus.NO_CHANGE:
        typer.echo("Nothing changed.")
    else:
        typer.echo(result.message)
        raise typer.Exit(1)


def _relative_path(file: Path, root: Path) -> str:
    if not file.is_absolute():
        return file.as_posix()
    try:
        return file.resolve().relative_to(root).as_posix()
    except ValueError:
        return file.as_posix()


def _resolve_group(store: BookmarkStore, ref: str) -> Group | None:
    """Resolve a group label or id to a group."""
    group = store.get_group(ref)
    if group is not None:
        return group
    return next((g for g in store.groups if g.label == ref), None)


def _require_group(store: BookmarkStore, ref: str) -> Group:
    group = _resolve_group(store, ref)
    if group is None:
        typer.echo(f"Group '{ref}' not found.")
        raise typer.Exit(1)
    return group


def _draft(
    store_file: StoreFile,
    store: BookmarkStore,
    *,
    file: Path,
    line: int,
    end_line: int | None,
    label: str,
    description: str,
    color: str | None,
    icon: str | None,
    group: str | None,
    content: str,
) -> BookmarkDraft:
    # New bookmarks go to the active group unless one is named.
    group_id = _require_group(store, group).id if group else store.active_group.id
    kind = SelectionKind.SELECTION if end_line is not None and end_line != line else SelectionKind.LINE
    return BookmarkDraft(
        file_relative_path=_relative_path(file, store_file.workspace_root),
        range=Range.from_lines(line - 1, None if end_line is None else end_line - 1),
        workspace_name=store_file.workspace_name,
        label=label,
        description=description,
        color=color,
        icon=icon,
        group_id=group_id,
        selection_kind=kind,
        selection_content=content,
    )


@app.command()
def toggle(
    file: Path = typer.Argument(..., help="File, absolute or relative to the workspace root"),
    line: int = typer.Argument(..., min=1, help="Line number (1-based)"),
    end_line: Annotated[int | None, typer.Option("--end-line", "-e", min=1, help="Last line of a selection")] = None,
    label: str = typer.Option("", "--label", "-l", help="Bookmark label"),
    description: str = typer.Option("", "--description", help="Bookmark description"),
    color: Annotated[str | None, typer.Option("--color", "-c", help="Color name")] = None,
    icon: Annotated[str | None, typer.Option("--icon", help="Icon id, e.g. mdi:star")] = None,
    group: Annotated[str | None, typer.Option("--group", "-g", help="Group label or id")] = None,
    content: str = typer.Option("", "--content", help="Text snapshot of the bookmarked lines"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Add a bookmark at a location, or remove the one already there."""
    store, store_file = _open_store(workspace, dry_run=dry_run)
    draft = _draft(
        store_file, store, file=file, line=line, end_line=end_line, label=label,
        description=description, color=color, icon=icon, group=group, content=content,
    )
    result = store.toggle_bookmark(draft)
    typer.echo(f"{result.action.value.capitalize()} bookmark {result.bookmark.id}")


@app.command()
def add(
    file: Path = typer.Argument(..., help="File, absolute or relative to the workspace root"),
    line: int = typer.Argument(..., min=1, help="Line number (1-based)"),
    end_line: Annotated[int | None, typer.Option("--end-line", "-e", min=1, help="Last line of a selection")] = None,
    label: str = typer.Option("", "--label", "-l", help="Bookmark label"),
    description: str = typer.Option("", "--description", help="Bookmark description"),
    color: Annotated[str | None, typer.Option("--color", "-c", help="Color name")] = None,
    icon: Annotated[str | None, typer.Option("--icon", help="Icon id, e.g. mdi:star")] = None,
    group: Annotated[str | None, typer.Option("--group", "-g", help="Group label or id")] = None,
    content: str = typer.Option("", "--content", help="Text snapshot of the bookmarked lines"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Add a bookmark even if one already exists at the location."""
    store, store_file = _open_store(workspace, dry_run=dry_run)
    draft = _draft(
        store_file, store, file=file, line=line, end_line=end_line, label=label,
        description=description, color=color, icon=icon, group=group, content=content,
    )
    bookmark = store.add_bookmark(draft)
    typer.echo(f"Added bookmark {bookmark.id}")


@app.command(name="list")
def list_cmd(
    group_view: Annotated[
        GroupView | None, typer.Option("--group-view", "-G", help="Grouping for this listing")
    ] = None,
    sort: Annotated[SortType | None, typer.Option("--sort", "-s", help="Sort for this listing")] = None,
    flat: bool = typer.Option(False, "--flat", help="Show a flat list instead of a tree"),
    workspace: WorkspaceOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show bookmarks in the current (or given) grouping."""
    store, _store_file = _open_store(workspace, read_only=True)
    if group_view is not None:
        store.set_group_view(group_view)
    if sort is not None:
        store.set_sort_type(sort)
    if flat:
        store.set_view_type(ViewType.LIST)

    if output_json:
        data = {
            "total": store.total_count,
            "labeled": store.labeled_count,
            "bookmarks": [dump_bookmark(b) for bucket in store.grouped() for b in bucket.bookmarks],
        }
        typer.echo(json.dumps(data, indent=2))
        return

    if not store.total_count:
        typer.echo("No bookmarks.")
        return
    typer.echo(render_tree(store), nl=False)


@app.command()
def status(workspace: WorkspaceOption = None) -> None:
    """Show bookmark counts and view settings."""
    store, _store_file = _open_store(workspace, read_only=True)
    typer.echo(f"Bookmarks: {store.total_count} ({store.labeled_count} labeled)")
    typer.echo(f"Groups: {len(store.groups)} (active: {store.active_group.label})")
    typer.echo(
        f"View: {store.view_type.value}, grouped by {store.group_view.value}, "
        f"sorted by {store.sort_type.value}"
    )


@app.command()
def colors(workspace: WorkspaceOption = None) -> None:
    """List built-in colors and the colors bookmarks use."""
    store, _store_file = _open_store(workspace, read_only=True)
    in_use = set(store.colors)
    for name, value in DEFAULT_COLORS.items():
        marker = "*" if name in in_use else " "
        typer.echo(f"{marker} {name:<8} {value}")
    for name in store.colors:
        if name not in DEFAULT_COLORS:
            typer.echo(f"* {name}")


@app.command()
def edit(
    bookmark_id: str = typer.Argument(..., help="Bookmark id"),
    label: Annotated[str | None, typer.Option("--label", "-l", help="New label")] = None,
    description: Annotated[str | None, typer.Option("--description", help="New description")] = None,
    color: Annotated[str | None, typer.Option("--color", "-c", help="New color name")] = None,
    icon: Annotated[str | None, typer.Option("--icon", help="New icon id ('' resets)")] = None,
    line: Annotated[int | None, typer.Option("--line", min=1, help="Move to this line (1-based)")] = None,
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Change a bookmark's label, description, color, icon or line."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    result = store.update_bookmark(
        bookmark_id,
        label=label,
        description=description,
        color=color,
        icon=icon,
        range=None if line is None else Range.from_lines(line - 1),
    )
    _report(result, f"Updated bookmark {bookmark_id}")


@app.command()
def delete(
    bookmark_id: str = typer.Argument(..., help="Bookmark id"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Delete a bookmark."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    _report(store.remove_bookmark(bookmark_id), f"Deleted bookmark {bookmark_id}")


@app.command()
def move(
    bookmark_id: str = typer.Argument(..., help="Bookmark id"),
    group: str = typer.Argument(..., help="Target group label or id"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Move a bookmark into another group."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    target = _require_group(store, group)
    _report(store.move_bookmark_to_group(bookmark_id, target.id), f"Moved to {target.label}")


@app.command()
def reorder(
    bookmark_id: str = typer.Argument(..., help="Bookmark id"),
    index: int = typer.Argument(..., min=0, help="New 0-based position inside its bucket"),
    dimension: Dimension = typer.Option(Dimension.FILE, "--dimension", "-d", help="Grouping to reorder in"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Change a bookmark's position for custom sorting."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    _report(
        store.reorder_bookmark(bookmark_id, dimension, index),
        f"Moved bookmark {bookmark_id} to position {index}",
    )


@app.command()
def clear(
    file: Annotated[Path | None, typer.Option("--file", "-f", help="Only bookmarks in this file")] = None,
    color: Annotated[str | None, typer.Option("--color", "-c", help="Only bookmarks of this color")] = None,
    group: Annotated[str | None, typer.Option("--group", "-g", help="Only bookmarks in this group")] = None,
    scope: Annotated[
        str | None, typer.Option("--scope", help="Only bookmarks and groups of this workspace name")
    ] = None,
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Remove bookmarks: all of them, or those matching one filter."""
    store, store_file = _open_store(workspace, dry_run=dry_run)
    if sum(x is not None for x in (file, color, group, scope)) > 1:
        typer.echo("Use at most one of --file, --color, --group, --scope.")
        raise typer.Exit(1)

    if file is not None:
        file_path = _relative_path(file, store_file.workspace_root)
        removed = store.clear_by_file(make_file_id(store_file.workspace_name, file_path))
    elif color is not None:
        removed = store.clear_by_color(color)
    elif group is not None:
        removed = store.clear_by_group(_require_group(store, group).id)
    else:
        removed = store.clear_all(scope)
    typer.echo(f"Removed {removed} bookmarks")


@app.command()
def view(
    view_type: ViewType = typer.Argument(..., help="tree or list"),
    workspace: WorkspaceOption = None,
) -> None:
    """Set how bookmarks are presented."""
    store, _store_file = _open_store(workspace)
    changed = store.set_view_type(view_type)
    typer.echo(f"View type: {store.view_type.value}" + ("" if changed else " (unchanged)"))


@app.command(name="group-by")
def group_by(
    group_view: GroupView = typer.Argument(..., help="file, color, default, workspace or custom"),
    workspace: WorkspaceOption = None,
) -> None:
    """Set the grouping used by the bookmark tree."""
    store, _store_file = _open_store(workspace)
    changed = store.set_group_view(group_view)
    typer.echo(f"Grouped by: {store.group_view.value}" + ("" if changed else " (unchanged)"))


@app.command(name="sort-by")
def sort_by(
    sort_type: SortType = typer.Argument(..., help="lineNumber, custom, createdTime or updatedTime"),
    workspace: WorkspaceOption = None,
) -> None:
    """Set the sort applied inside each group."""
    store, _store_file = _open_store(workspace)
    changed = store.set_sort_type(sort_type)
    typer.echo(f"Sorted by: {store.sort_type.value}" + ("" if changed else " (unchanged)"))


# --- group subcommands ---


@group_app.command(name="add")
def group_add(
    label: str = typer.Argument(..., help="Group label"),
    color: str = typer.Option(DEFAULT_GROUP_COLOR, "--color", "-c", help="Group color"),
    scoped: bool = typer.Option(False, "--scoped", help="Scope the group to this workspace"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Create a group."""
    store, store_file = _open_store(workspace, dry_run=dry_run)
    result = store.add_group(label, color, store_file.workspace_name if scoped else "")
    _report(result, f"Added group {label} ({result.id})")


@group_app.command(name="list")
def group_list(workspace: WorkspaceOption = None) -> None:
    """List groups in display order."""
    store, _store_file = _open_store(workspace, read_only=True)
    counts = {b.id: len(b.bookmarks) for b in store.grouped_by_custom()}
    for g in store.groups:
        marker = "*" if g.active_status else " "
        typer.echo(f"{marker} {g.sorted_index:>3}  {g.label}  [{g.color}]  {counts.get(g.id, 0)}  id={g.id}")


@group_app.command(name="delete")
def group_delete(
    group: str = typer.Argument(..., help="Group label or id"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Delete a group together with its bookmarks."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    target = _require_group(store, group)
    _report(store.delete_group(target.id), f"Deleted group {target.label}")


@group_app.command(name="rename")
def group_rename(
    group: str = typer.Argument(..., help="Group label or id"),
    label: str = typer.Argument(..., help="New label"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Change a group's label."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    target = _require_group(store, group)
    _report(store.relabel_group(target.id, label), f"Renamed group to {label}")


@group_app.command(name="recolor")
def group_recolor(
    group: str = typer.Argument(..., help="Group label or id"),
    color: str = typer.Argument(..., help="New color"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Change a group's color."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    target = _require_group(store, group)
    _report(store.recolor_group(target.id, color), f"Changed color of {target.label}")


@group_app.command(name="activate")
def group_activate(
    group: str = typer.Argument(..., help="Group label or id"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Make new bookmarks go into this group."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    target = _require_group(store, group)
    _report(store.set_active_group(target.id), f"Active group: {target.label}")


@group_app.command(name="reindex")
def group_reindex(
    group: str = typer.Argument(..., help="Group label or id"),
    index: int = typer.Argument(..., min=0, help="New 0-based position"),
    workspace: WorkspaceOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Move a group to another position."""
    store, _store_file = _open_store(workspace, dry_run=dry_run)
    target = _require_group(store, group)
    _report(store.reindex_group(target.id, index), f"Moved {target.label} to position {index}")
