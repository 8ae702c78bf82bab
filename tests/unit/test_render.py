"""Tests for text rendering of the grouped views."""

from bookmark_manager.core.tree.render import format_bookmark, render_tree
from bookmark_manager.models.view import GroupView, ViewType
from tests.unit.fakes import make_draft


def test_format_bookmark(store):
    bookmark = store.add_bookmark(make_draft("src/a.ts", 4, label="entry", color="red"))
    assert format_bookmark(bookmark) == "- L5  entry  [red, mdi:tag]  id=id1"
    assert format_bookmark(bookmark, with_file=True).startswith("- src/a.ts:5  entry")


def test_format_falls_back_to_first_content_line(store):
    bookmark = store.add_bookmark(make_draft(selection_content="  def run():\n      pass"))
    assert "  def run():  " in format_bookmark(bookmark)


def test_tree_by_file(populated_store):
    lines = render_tree(populated_store).splitlines()
    assert lines[:3] == [
        "ws/src/f1.ts (2)",
        "    - L4  [blue, mdi:bookmark]  id=id2",
        "    - L11  A  [red, mdi:tag]  id=id1",
    ]
    assert "other/lib/g.py (1)" in lines


def test_tree_by_workspace(populated_store):
    populated_store.set_group_view(GroupView.WORKSPACE)
    lines = render_tree(populated_store).splitlines()
    assert lines[0] == "ws (3)"
    assert lines[1] == "    src/f1.ts"
    assert lines[2].startswith("        - L4")


def test_custom_view_marks_active_group(populated_store):
    populated_store.add_group("Todo")
    populated_store.set_group_view(GroupView.CUSTOM)
    lines = render_tree(populated_store).splitlines()
    assert lines[0] == "Default Group * (4)"
    assert lines[-1] == "Todo (0)"


def test_list_view_is_flat(populated_store):
    populated_store.set_view_type(ViewType.LIST)
    lines = render_tree(populated_store).splitlines()
    assert len(lines) == 4
    assert all(line.startswith("- ") for line in lines)
    assert lines[0].startswith("- src/f1.ts:4")


def test_empty_store(store):
    assert render_tree(store) == ""
