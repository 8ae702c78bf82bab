"""Configuration constants for the bookmark manager."""

import os
from pathlib import Path

# Store file, relative to each workspace root.
STORE_FILE_NAME: str = "bookmark-manager.json"
STORE_RELATIVE_PATH: Path = Path(".vscode") / STORE_FILE_NAME
STORE_FORMAT_VERSION: str = "0.0.1"

# The default group always exists and can be neither deleted nor relabeled.
DEFAULT_GROUP_ID: str = "default"
DEFAULT_GROUP_LABEL: str = "Default Group"
DEFAULT_GROUP_COLOR: str = "default"

DEFAULT_BOOKMARK_COLOR: str = "default"

# Icon used when a bookmark has neither label nor description.
DEFAULT_BOOKMARK_ICON: str = "mdi:bookmark"
# Icon used when a bookmark has a label or description.
DEFAULT_LABELED_ICON: str = "mdi:tag"
DEFAULT_ICONS: frozenset[str] = frozenset({DEFAULT_BOOKMARK_ICON, DEFAULT_LABELED_ICON})

DEFAULT_LANGUAGE_ID: str = "plaintext"

# Built-in colors, name -> hex.
DEFAULT_COLORS: dict[str, str] = {
    "red": "#ff0000",
    "green": "#008000",
    "blue": "#2196F3",
    "white": "#0000ff",
    "yellow": "#FFD700",
    "orange": "#FF9800",
    "purple": "#9C27B0",
    "black": "#212121",
}

# Workspace root used by the CLI when --workspace is not passed.
WORKSPACE_ROOT_ENV: str = "BOOKMARK_MANAGER_WORKSPACE"


def resolve_workspace_root(explicit: Path | None = None) -> Path:
    """Return the workspace root: explicit path, then $BOOKMARK_MANAGER_WORKSPACE, then cwd."""
    if explicit is not None:
        return explicit.expanduser().resolve()
    from_env = os.environ.get(WORKSPACE_ROOT_ENV)
    if from_env:
        return Path(from_env).expanduser().resolve()
    return Path.cwd().resolve()
