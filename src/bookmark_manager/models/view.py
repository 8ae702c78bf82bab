"""View-state enumerations shared by the store and the grouping engine."""

from enum import StrEnum


class ViewType(StrEnum):
    """How the bookmark tree is presented."""

    TREE = "tree"
    LIST = "list"


class GroupView(StrEnum):
    """Which grouping the presentation layer shows."""

    FILE = "file"
    COLOR = "color"
    DEFAULT = "default"
    WORKSPACE = "workspace"
    CUSTOM = "custom"


class SortType(StrEnum):
    """Ordering applied to bookmarks inside each bucket."""

    LINE_NUMBER = "lineNumber"
    CUSTOM = "custom"
    CREATED_TIME = "createdTime"
    UPDATED_TIME = "updatedTime"


class Dimension(StrEnum):
    """A way of partitioning the same bookmark list into buckets."""

    FILE = "file"
    COLOR = "color"
    WORKSPACE = "workspace"
    CUSTOM = "custom"


def dimension_for(group_view: GroupView) -> Dimension:
    """Map a group view to the dimension whose sort indices it uses.

    The ``default`` view groups by file.
    """
    if group_view in (GroupView.FILE, GroupView.DEFAULT):
        return Dimension.FILE
    return Dimension(group_view.value)
