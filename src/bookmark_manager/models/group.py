"""Domain models for custom bookmark groups and the per-dimension bucket index."""

from dataclasses import dataclass, replace

from bookmark_manager.config import DEFAULT_GROUP_COLOR, DEFAULT_GROUP_ID, DEFAULT_GROUP_LABEL


@dataclass(frozen=True)
class Group:
    """A user-defined, ordered bucket that bookmarks can be assigned to."""

    id: str
    label: str
    color: str = DEFAULT_GROUP_COLOR
    sorted_index: int = 0
    workspace_name: str = ""
    active_status: bool = False

    @property
    def is_default(self) -> bool:
        return self.id == DEFAULT_GROUP_ID

    def with_label(self, label: str) -> "Group":
        return replace(self, label=label)

    def with_color(self, color: str) -> "Group":
        return replace(self, color=color)

    def with_sorted_index(self, index: int) -> "Group":
        return replace(self, sorted_index=index)

    def with_active_status(self, active: bool) -> "Group":
        return replace(self, active_status=active)


def make_default_group(*, active: bool = True) -> Group:
    """Build the reserved Default Group."""
    return Group(
        id=DEFAULT_GROUP_ID,
        label=DEFAULT_GROUP_LABEL,
        sorted_index=0,
        active_status=active,
    )


@dataclass(frozen=True)
class GroupInfoEntry:
    """First-seen position of one bucket value (a color, file or workspace)."""

    id: str
    sorted_index: int
