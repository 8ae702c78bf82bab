"""Tests for bookmark mutations, queries and change notification on BookmarkStore."""

import threading
from collections import defaultdict

import pytest

from bookmark_manager.config import DEFAULT_LABELED_ICON
from bookmark_manager.core.store.results import OperationStatus, ToggleAction
from bookmark_manager.core.store.store import BookmarkStore, StoreSnapshot, bucket_value
from bookmark_manager.errors import MalformedBookmarkError
from bookmark_manager.models.bookmark import BookmarkDraft, Range, SortedInfo
from bookmark_manager.models.group import Group
from bookmark_manager.models.view import Dimension, GroupView, SortType, ViewType
from tests.unit.fakes import RecordingListener, make_draft


def _ids(bookmarks) -> list[str]:
    return [b.id for b in bookmarks]


def _assert_consecutive_indices(store: BookmarkStore) -> None:
    for dimension in Dimension:
        buckets: dict[str, list[int]] = defaultdict(list)
        for bookmark in store.bookmarks:
            buckets[bucket_value(bookmark, dimension)].append(bookmark.sorted_info.get(dimension))
        for value, indices in buckets.items():
            assert sorted(indices) == list(range(len(indices))), (dimension, value)


class TestAddBookmark:
    def test_defaults(self, store):
        bookmark = store.add_bookmark(make_draft())
        assert bookmark.id == "id1"
        assert bookmark.color == "default"
        assert bookmark.icon == "mdi:bookmark"
        assert bookmark.group_id == "default"
        assert bookmark.language_id == "plaintext"
        assert bookmark.created_at == bookmark.updated_at
        assert store.total_count == 1

    def test_labeled_bookmark_gets_labeled_icon(self, store):
        bookmark = store.add_bookmark(make_draft(label="entry"))
        assert bookmark.icon == DEFAULT_LABELED_ICON
        assert store.labeled_count == 1

    def test_sorted_indices_consecutive_per_bucket(self, populated_store):
        _assert_consecutive_indices(populated_store)
        second = populated_store.get_bookmark("id2")
        assert second.sorted_info == SortedInfo(color=0, file=1, workspace=1, custom=1)

    def test_index_stays_unique_after_removal(self, populated_store):
        populated_store.remove_bookmark("id1")
        added = populated_store.add_bookmark(make_draft("src/f1.ts", 20))
        in_file = populated_store.bookmarks_in_file("ws/src/f1.ts")
        indices = [b.sorted_info.file for b in in_file]
        assert len(set(indices)) == len(indices)
        assert added.sorted_info.file == 2

    def test_malformed_draft_raises(self, store):
        listener = RecordingListener()
        store.subscribe(listener)
        with pytest.raises(MalformedBookmarkError):
            store.add_bookmark(BookmarkDraft("src/a.ts", None, "ws"))
        assert store.total_count == 0
        assert listener.calls == 0

    def test_without_group_goes_into_default_group(self, store):
        group_id = store.add_group("Todo").id
        store.set_active_group(group_id)
        assert store.add_bookmark(make_draft("f.ts", 1)).group_id == "default"

    def test_explicit_group(self, store):
        group_id = store.add_group("Todo").id
        assert store.add_bookmark(make_draft(group_id=group_id)).group_id == group_id

    def test_unknown_group_falls_back_to_default(self, store):
        assert store.add_bookmark(make_draft(group_id="missing")).group_id == "default"

    def test_records_bucket_order(self, populated_store):
        entries = populated_store.group_info(Dimension.COLOR)
        assert [(e.id, e.sorted_index) for e in entries] == [("red", 0), ("blue", 1), ("green", 2)]

    def test_concurrent_adds_keep_indices_unique(self, store):
        def add_many(offset: int) -> None:
            for i in range(25):
                store.add_bookmark(make_draft("src/busy.ts", offset * 100 + i))

        threads = [threading.Thread(target=add_many, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.total_count == 100
        _assert_consecutive_indices(store)


class TestToggleBookmark:
    def test_toggle_twice_restores_state(self, populated_store):
        before = populated_store.bookmarks
        added = populated_store.toggle_bookmark(make_draft("src/f3.ts", 4))
        removed = populated_store.toggle_bookmark(make_draft("src/f3.ts", 4))
        assert added.action is ToggleAction.ADDED
        assert removed.action is ToggleAction.REMOVED
        assert removed.bookmark.id == added.bookmark.id
        assert populated_store.bookmarks == before

    def test_toggle_off_existing(self, populated_store):
        result = populated_store.toggle_bookmark(make_draft("src/f1.ts", 10))
        assert result.action is ToggleAction.REMOVED
        assert result.bookmark.id == "id1"
        assert populated_store.get_bookmark("id1") is None

    def test_location_includes_workspace(self, populated_store):
        result = populated_store.toggle_bookmark(make_draft("src/f1.ts", 10, workspace="other"))
        assert result.action is ToggleAction.ADDED

    def test_malformed_draft_raises(self, store):
        with pytest.raises(MalformedBookmarkError):
            store.toggle_bookmark(BookmarkDraft("src/a.ts", Range.from_lines(0), None))


class TestUpdateBookmark:
    def test_label_update(self, populated_store):
        before = populated_store.get_bookmark("id2")
        result = populated_store.update_bookmark("id2", label="helper")
        after = populated_store.get_bookmark("id2")
        assert result.success
        assert after.label == "helper"
        assert after.icon == DEFAULT_LABELED_ICON
        assert after.updated_at > before.updated_at
        assert after.created_at == before.created_at
        assert after.sorted_info == before.sorted_info

    def test_color_update_moves_bucket(self, populated_store):
        populated_store.update_bookmark("id2", color="purple")
        colors = {b.color: _ids(b.bookmarks) for b in populated_store.grouped_by_color()}
        assert "blue" not in colors
        assert colors["purple"] == ["id2"]
        assert "purple" in [e.id for e in populated_store.group_info(Dimension.COLOR)]

    def test_range_update(self, populated_store):
        populated_store.update_bookmark("id1", range=Range.from_lines(1))
        assert populated_store.bookmark_at("ws/src/f1.ts", Range.from_lines(1)).id == "id1"

    def test_unknown_bookmark(self, populated_store):
        listener = RecordingListener()
        populated_store.subscribe(listener)
        result = populated_store.update_bookmark("nope", label="x")
        assert result.status is OperationStatus.NOT_FOUND
        assert listener.calls == 0

    def test_unknown_group(self, populated_store):
        result = populated_store.update_bookmark("id1", group_id="nope")
        assert result.status is OperationStatus.NOT_FOUND
        assert populated_store.get_bookmark("id1").group_id == "default"

    def test_nothing_to_update(self, populated_store):
        listener = RecordingListener()
        populated_store.subscribe(listener)
        result = populated_store.update_bookmark("id1", label="A")
        assert result.status is OperationStatus.NO_CHANGE
        assert listener.calls == 0


class TestRemoveAndClear:
    def test_remove(self, populated_store):
        assert populated_store.remove_bookmark("id3").success
        assert populated_store.total_count == 3
        assert populated_store.remove_bookmark("id3").status is OperationStatus.NOT_FOUND

    def test_remove_keeps_bucket_index(self, populated_store):
        populated_store.remove_bookmark("id4")
        assert "green" in [e.id for e in populated_store.group_info(Dimension.COLOR)]
        assert "green" not in populated_store.colors

    def test_clear_all(self, populated_store):
        populated_store.add_group("Todo")
        removed = populated_store.clear_all()
        assert removed == 4
        assert populated_store.total_count == 0
        assert [g.id for g in populated_store.groups] == ["default"]
        assert populated_store.active_group.is_default
        assert all(not populated_store.group_info(d) for d in (Dimension.FILE, Dimension.COLOR))
        assert populated_store.grouped_by_file() == ()
        assert populated_store.grouped_by_color() == ()
        assert populated_store.grouped_by_workspace() == ()
        assert [b.bookmarks for b in populated_store.grouped_by_custom()] == [()]

    def test_clear_all_scoped_to_workspace(self, populated_store):
        group_id = populated_store.add_group("Other work", workspace_name="other").id
        kept_id = populated_store.add_group("Shared").id
        populated_store.add_bookmark(make_draft("src/f9.ts", 0, group_id=group_id))

        removed = populated_store.clear_all("other")

        assert removed == 2
        assert populated_store.get_group(group_id) is None
        assert populated_store.get_group(kept_id) is not None
        assert all(b.workspace_name == "ws" for b in populated_store.bookmarks)

    def test_clear_by_file(self, populated_store):
        assert populated_store.clear_by_file("ws/src/f1.ts") == 2
        assert populated_store.bookmarks_in_file("ws/src/f1.ts") == ()

    def test_clear_by_color(self, populated_store):
        assert populated_store.clear_by_color("red") == 2
        assert populated_store.colors == ("blue", "green")

    def test_clear_by_group_keeps_group(self, populated_store):
        group_id = populated_store.add_group("Todo").id
        populated_store.move_bookmark_to_group("id1", group_id)
        assert populated_store.clear_by_group(group_id) == 1
        assert populated_store.get_group(group_id) is not None

    def test_clear_without_matches_does_not_notify(self, populated_store):
        listener = RecordingListener()
        populated_store.subscribe(listener)
        assert populated_store.clear_by_color("orange") == 0
        assert listener.calls == 0


class TestReorderAndMove:
    def test_reorder_in_file_bucket(self, populated_store):
        populated_store.set_sort_type(SortType.CUSTOM)
        before = populated_store.grouped_by_file()[0]
        assert _ids(before.bookmarks) == ["id1", "id2"]

        result = populated_store.reorder_bookmark("id2", Dimension.FILE, 0)

        assert result.success
        after = populated_store.grouped_by_file()[0]
        assert _ids(after.bookmarks) == ["id2", "id1"]
        _assert_consecutive_indices(populated_store)

    def test_reorder_to_same_position(self, populated_store):
        result = populated_store.reorder_bookmark("id1", Dimension.FILE, 0)
        assert result.status is OperationStatus.NO_CHANGE

    def test_reorder_clamps_index(self, populated_store):
        populated_store.reorder_bookmark("id1", Dimension.COLOR, 99)
        assert populated_store.get_bookmark("id1").sorted_info.color == 1
        assert populated_store.get_bookmark("id3").sorted_info.color == 0

    def test_move_to_group_goes_last(self, populated_store):
        group_id = populated_store.add_group("Todo").id
        populated_store.move_bookmark_to_group("id3", group_id)
        populated_store.move_bookmark_to_group("id1", group_id)
        populated_store.set_sort_type(SortType.CUSTOM)

        todo = next(b for b in populated_store.grouped_by_custom() if b.id == group_id)
        assert _ids(todo.bookmarks) == ["id3", "id1"]

    def test_move_to_unknown_group(self, populated_store):
        assert populated_store.move_bookmark_to_group("id1", "nope").status is OperationStatus.NOT_FOUND

    def test_move_to_current_group(self, populated_store):
        result = populated_store.move_bookmark_to_group("id1", "default")
        assert result.status is OperationStatus.NO_CHANGE


class TestViews:
    def test_scenario_file_and_color(self, store):
        a = store.add_bookmark(make_draft("f1.ts", 10, color="red"))
        b = store.add_bookmark(make_draft("f1.ts", 3, color="blue"))

        by_file = store.grouped_by_file()
        assert len(by_file) == 1
        assert _ids(by_file[0].bookmarks) == [b.id, a.id]

        by_color = {bucket.color: _ids(bucket.bookmarks) for bucket in store.grouped_by_color()}
        assert by_color == {"red": [a.id], "blue": [b.id]}

    @pytest.mark.parametrize("group_view", list(GroupView))
    def test_every_view_partitions_bookmarks(self, populated_store, group_view):
        populated_store.set_group_view(group_view)
        flattened = [b.id for bucket in populated_store.grouped() for b in bucket.bookmarks]
        assert sorted(flattened) == sorted(_ids(populated_store.bookmarks))

    def test_default_view_groups_by_file(self, populated_store):
        populated_store.set_group_view(GroupView.DEFAULT)
        assert populated_store.grouped() == populated_store.grouped_by_file()

    def test_file_buckets_keep_first_seen_order(self, populated_store):
        populated_store.remove_bookmark("id1")
        populated_store.remove_bookmark("id2")
        populated_store.add_bookmark(make_draft("src/f1.ts", 0))
        assert [b.file_id for b in populated_store.grouped_by_file()] == [
            "ws/src/f1.ts",
            "ws/src/f2.ts",
            "other/lib/g.py",
        ]

    def test_setters_report_change(self, store):
        assert store.set_view_type("list") is True
        assert store.set_view_type(ViewType.LIST) is False
        assert store.set_sort_type(SortType.CREATED_TIME) is True
        assert store.set_group_view("workspace") is True
        assert store.view_type is ViewType.LIST
        assert store.group_view is GroupView.WORKSPACE

    def test_unknown_view_value_raises(self, store):
        with pytest.raises(ValueError):
            store.set_group_view("by-planet")


class TestNotification:
    def test_one_notification_per_mutation(self, store):
        listener = RecordingListener()
        store.subscribe(listener)
        store.add_bookmark(make_draft())
        store.set_view_type(ViewType.LIST)
        store.set_view_type(ViewType.LIST)
        store.clear_all()
        assert listener.calls == 3

    def test_unsubscribe(self, store):
        listener = RecordingListener()
        unsubscribe = store.subscribe(listener)
        unsubscribe()
        store.add_bookmark(make_draft())
        assert listener.calls == 0

    def test_failing_listener_does_not_stop_others(self, store):
        def broken() -> None:
            raise RuntimeError("boom")

        listener = RecordingListener()
        store.subscribe(broken)
        store.subscribe(listener)
        store.add_bookmark(make_draft())
        assert listener.calls == 1
        assert store.total_count == 1

    def test_listener_sees_consistent_state(self, store):
        seen: list[int] = []
        store.subscribe(lambda: seen.append(sum(len(b.bookmarks) for b in store.grouped_by_file())))
        store.add_bookmark(make_draft())
        store.add_bookmark(make_draft(line=2))
        assert seen == [1, 2]


class TestLoad:
    def test_replaces_contents(self, populated_store, clock):
        bookmark = populated_store.get_bookmark("id1")
        snapshot = StoreSnapshot(
            bookmarks=(bookmark, bookmark),
            groups=(Group(id="todo", label="Todo", sorted_index=1),),
            view_type=ViewType.LIST,
            group_view=GroupView.COLOR,
            sort_type=SortType.CUSTOM,
        )
        populated_store.load(snapshot)

        assert _ids(populated_store.bookmarks) == ["id1"]
        assert [g.id for g in populated_store.groups] == ["default", "todo"]
        assert populated_store.active_group.is_default
        assert populated_store.view_type is ViewType.LIST
        assert populated_store.group_view is GroupView.COLOR
        assert populated_store.sort_type is SortType.CUSTOM

    def test_assigns_missing_indices(self, populated_store):
        bookmarks = tuple(
            b.with_sorted_index(Dimension.FILE, -1) for b in populated_store.bookmarks
        )
        fresh = BookmarkStore()
        fresh.load(StoreSnapshot(bookmarks=bookmarks))
        _assert_consecutive_indices(fresh)

    def test_missing_indices_do_not_reuse_stored_ones(self, populated_store):
        first, second = populated_store.bookmarks_in_file("ws/src/f1.ts")
        snapshot = StoreSnapshot(
            bookmarks=(
                first.with_sorted_index(Dimension.FILE, -1),
                second.with_sorted_index(Dimension.FILE, 0),
            )
        )
        fresh = BookmarkStore()
        fresh.load(snapshot)

        indices = [b.sorted_info.file for b in fresh.bookmarks]
        assert len(set(indices)) == len(indices)
        assert fresh.get_bookmark(first.id).sorted_info.file == 1

    def test_single_active_group(self, store):
        groups = (
            Group(id="a", label="A", active_status=True),
            Group(id="b", label="B", active_status=True),
        )
        store.load(StoreSnapshot(groups=groups))
        assert [g.id for g in store.groups if g.active_status] == ["a"]


class TestLocking:
    @pytest.mark.parametrize("read", [lambda s: s.total_count, lambda s: s.grouped()])
    def test_reads_wait_for_the_lock(self, populated_store, read):
        results: list[object] = []
        reader = threading.Thread(target=lambda: results.append(read(populated_store)))

        with populated_store._lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert results == []

        reader.join(timeout=5)
        assert len(results) == 1
