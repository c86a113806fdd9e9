"""
Persistence layer for the economy store.
Provides the keyed save-data interface and two implementations.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class PersistenceBackend(Protocol):
    """
    Save-data interface consumed by the economy.
    The economy does not know or care about the storage medium.
    """

    async def read(self, key: str) -> Optional[Dict[str, Any]]:
        """Returns the document stored under key, or None."""
        ...

    async def write(self, key: str, data: Dict[str, Any]) -> None:
        """Stores data under key, replacing any previous document."""
        ...

    async def initialize(self):
        ...

    async def shutdown(self):
        ...


class InMemoryStorageBackend:
    """
    A simple in-memory storage backend.
    NOT FOR PRODUCTION USE - primarily for testing and demonstration.
    """

    def __init__(self):
        self._documents: Dict[str, str] = {}
        self.writes = 0

    async def initialize(self):
        logger.debug("InMemoryStorageBackend initialized - no external connection needed.")

    async def shutdown(self):
        logger.debug("InMemoryStorageBackend shut down.")

    async def read(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._documents.get(key)
        if raw is None:
            logger.debug(f"No in-memory document stored under {key}")
            return None
        return json.loads(raw)

    async def write(self, key: str, data: Dict[str, Any]) -> None:
        # Stored as JSON text so callers never share mutable state with the store
        self._documents[key] = json.dumps(data)
        self.writes += 1
        logger.debug(f"Saved in-memory document {key}")


class JsonFileStorageBackend:
    """
    A file-based storage backend writing one JSON file per key.
    """

    def __init__(self, directory: str = "economy_state"):
        self.directory = Path(directory)

    async def initialize(self):
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"JsonFileStorageBackend ensured directory exists: {self.directory}")
        except OSError as e:
            logger.error(f"Failed to initialize JsonFileStorageBackend directory: {e}", exc_info=True)
            raise

    async def shutdown(self):
        logger.debug("JsonFileStorageBackend shut down.")

    def _get_path(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self.directory / f"{safe_key}.json"

    async def read(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._get_path(key)
        if not path.exists():
            logger.info(f"No saved economy under {key} at {path}.")
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read economy document {key} from {path}: {e}", exc_info=True)
            return None

    async def write(self, key: str, data: Dict[str, Any]) -> None:
        path = self._get_path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(path)
        except Exception as e:
            tmp_path.unlink(missing_ok=True)
            logger.error(f"Failed to save economy document {key} to {path}: {e}", exc_info=True)
            raise
        logger.debug(f"Saved economy document {key} to {path}")
