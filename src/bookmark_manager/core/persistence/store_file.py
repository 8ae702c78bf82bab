"""Read and write the per-workspace store document, with write-through on change."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

from bookmark_manager.config import STORE_RELATIVE_PATH
from bookmark_manager.core.persistence.snapshot import dump_store, hydrate_store_data
from bookmark_manager.core.store.store import BookmarkStore
from bookmark_manager.errors import StoreFileError

# Ignored when deciding whether the document changed.
_VOLATILE_KEYS = ("updatedDate",)


def _stable_view(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in _VOLATILE_KEYS}


class StoreFile:
    """The ``.vscode/bookmark-manager.json`` document of one workspace.

    - Do not rewrite the file if only the update timestamp would change.
    - In dry-run mode, log what would be written instead of writing.
    """

    def __init__(self, workspace_root: str | Path, *, dry_run: bool = False) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self.path = self.workspace_root / STORE_RELATIVE_PATH
        self.dry_run = dry_run

        if not dry_run and not self.workspace_root.is_dir():
            msg = f"Workspace root {str(self.workspace_root)!r} not found"
            raise ValueError(msg)

        logger.debug("Store file {}, dry_run {!r}", self.path, dry_run)

    @property
    def workspace_name(self) -> str:
        return self.workspace_root.name

    def read(self) -> dict[str, Any] | None:
        """Read the document, returning None if the file does not exist.

        Raises:
            StoreFileError: If the file is not UTF-8 JSON or not a JSON object.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            msg = f"Store file {str(self.path)!r} is not valid UTF-8: {e}"
            raise StoreFileError(msg) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Store file {str(self.path)!r} is not valid JSON: {e}"
            raise StoreFileError(msg) from e
        if not isinstance(data, dict):
            msg = f"Store file {str(self.path)!r} does not contain a JSON object"
            raise StoreFileError(msg)
        return data

    def write(self, data: dict[str, Any]) -> bool:
        """Write the document. Returns False if nothing but the timestamp changed."""
        try:
            existing = self.read()
        except StoreFileError:
            existing = None
        if existing is not None and _stable_view(existing) == _stable_view(data):
            return False

        contents = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        action = "create" if existing is None else "update"
        if self.dry_run:
            logger.info("dry-run: would {} {}", action, self.path)
            return True

        logger.debug("Writing ({}) {}", action, self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(contents, encoding="utf-8")
        return True

    def load_into(self, store: BookmarkStore) -> bool:
        """Load the document into the store. Returns False if there is no document."""
        data = self.read()
        if data is None:
            logger.debug("No store file at {}", self.path)
            return False
        store.load(hydrate_store_data(data))
        return True

    def attach(self, store: BookmarkStore) -> Callable[[], None]:
        """Write the store through to this file after every change.

        Returns a function that detaches the listener.
        """

        def write_through() -> None:
            try:
                self.write(dump_store(store, workspace=str(self.workspace_root)))
            except OSError:
                logger.exception("Failed to write {}", self.path)

        return store.subscribe(write_through)
