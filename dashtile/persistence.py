"""
Workspace Persistence

Stores and loads the placement collection of each workspace. Saves are
fire-and-forget: they run on an executor, carry the full snapshot and
only log their failures.
"""

from __future__ import annotations
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "dashboard-workspaces"


class PersistenceError(Exception):
    """A workspace document exists but could not be read."""


def workspace_key(entity_id: str) -> str:
    """Workspace key for a business entity."""
    return f"dashboard-{entity_id}"


class WorkspaceStore(ABC):
    """Document store holding one document per workspace."""

    @abstractmethod
    def load_workspace(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Read a workspace document.

        Returns:
            The document, or None if it does not exist
        """
        pass

    @abstractmethod
    def save_workspace(self, key: str, document: Dict[str, Any]) -> None:
        """
        Create or overwrite a workspace document.

        Raises:
            Exception: Any failure; callers log it
        """
        pass


class MemoryWorkspaceStore(WorkspaceStore):
    """In-memory store, for tests and headless runs."""

    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None):
        self.documents: Dict[str, Dict[str, Any]] = documents or {}

    def load_workspace(self, key: str) -> Optional[Dict[str, Any]]:
        document = self.documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    def save_workspace(self, key: str, document: Dict[str, Any]) -> None:
        self.documents[key] = copy.deepcopy(document)


class JsonFileWorkspaceStore(WorkspaceStore):
    """
    Store keeping one JSON file per workspace.

    Files live in <root>/<collection>/<key>.json, with the key percent-encoded,
    and are written atomically (temp file + replace).
    """

    def __init__(self, root: Path | str, collection: str = DEFAULT_COLLECTION):
        self.root = Path(root)
        self.collection = collection

    @property
    def directory(self) -> Path:
        return self.root / self.collection

    def path_for(self, key: str) -> Path:
        """Get the file path for a workspace key."""
        name = quote(key, safe="")
        if not name or name.startswith("."):
            raise ValueError(f"Invalid workspace key: {key!r}")
        return self.directory / f"{name}.json"

    def load_workspace(self, key: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        if not path.exists():
            logger.debug("Workspace file not found: %s", path)
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable workspace file %s: %s", path, e)
            return None

        if not isinstance(document, dict):
            logger.warning("Ignoring workspace file %s: not an object", path)
            return None
        return document

    def save_workspace(self, key: str, document: Dict[str, Any]) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8")

        fd, temp_path = tempfile.mkstemp(
            prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise


class WorkspacePersistence:
    """Persistence adapter between workspaces and a WorkspaceStore."""

    def __init__(self, store: WorkspaceStore, executor: Optional[Executor] = None):
        """Initialize persistence.

        Args:
            store: Backing document store
            executor: Executor running saves; a single worker thread if omitted
        """
        self.store = store
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="dashtile-save"
        )

    def load(self, key: str) -> Optional[List[Dict[str, Any]]]:
        """Load the raw window list of a workspace.

        Returns:
            List of window dicts, or None if the workspace does not exist

        Raises:
            PersistenceError: If the store failed or the document is malformed
        """
        try:
            document = self.store.load_workspace(key)
        except Exception as e:
            raise PersistenceError(f"Loading workspace {key} failed: {e}") from e

        if document is None:
            return None

        windows = document.get("windows") or []
        if not isinstance(windows, list):
            raise PersistenceError(f"Workspace {key} has a malformed window list")
        return windows

    def save(
        self, key: str, entity_id: Optional[str], windows: List[Dict[str, Any]]
    ) -> Optional[Future]:
        """Write the full snapshot in the background.

        Returns:
            The pending future, or None if the save could not be scheduled
        """
        document = {
            "id": key,
            "entityId": entity_id,
            "windows": copy.deepcopy(windows),
        }
        try:
            future = self.executor.submit(self.store.save_workspace, key, document)
        except RuntimeError as e:
            logger.error("Could not schedule save of workspace %s: %s", key, e)
            return None

        future.add_done_callback(partial(self._on_saved, key, len(windows)))
        return future

    def shutdown(self, wait: bool = True):
        """Stop the save executor if we created it."""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)

    def _on_saved(self, key: str, count: int, future: Future):
        if future.cancelled():
            logger.warning("Save of workspace %s was cancelled", key)
            return

        error = future.exception()
        if error is not None:
            logger.error("Saving workspace %s failed: %s", key, error)
        else:
            logger.debug("Saved workspace %s (%d windows)", key, count)
