"""
Cart Persistence

Key/value storage for the serialized cart. The file backend writes one JSON
document per key inside the data directory, guarded by a ``FileLock`` so two
processes sharing the directory never interleave writes.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock, Timeout

from fooddelivery.core.config import get_settings

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "fooddelivery_cart"


class CartStorageError(Exception):
    """Raised when the cart cannot be read or written."""


class BaseCartStorage(ABC):
    """Abstract key/value store for JSON blobs."""

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Return the raw stored text, or None when nothing is stored."""
        pass

    @abstractmethod
    def save(self, key: str, data: dict[str, Any]) -> None:
        pass


class MemoryCartStorage(BaseCartStorage):
    """In-process storage, used in tests and one-shot scripts."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def save(self, key: str, data: dict[str, Any]) -> None:
        self._blobs[key] = json.dumps(data)


class FileCartStorage(BaseCartStorage):
    """JSON files under a directory, one per key."""

    def __init__(self, directory: Optional[Path] = None, lock_timeout: Optional[int] = None):
        settings = get_settings()
        self.directory = Path(directory or settings.data_directory)
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.cart_lock_timeout

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _lock(self, key: str) -> FileLock:
        return FileLock(str(self.directory / f"{key}.json.lock"), timeout=self.lock_timeout)

    def _ensure_directory(self) -> None:
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.directory}")

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with self._lock(key):
                return path.read_text(encoding="utf-8")
        except Timeout as e:
            logger.error(f"Lock timeout reading {path}")
            raise CartStorageError(f"Could not lock {path} within {self.lock_timeout}s") from e
        except (OSError, UnicodeDecodeError) as e:
            raise CartStorageError(f"Could not read {path}: {e}") from e

    def save(self, key: str, data: dict[str, Any]) -> None:
        self._ensure_directory()
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")

        try:
            with self._lock(key):
                tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
                os.replace(tmp_path, path)
        except Timeout as e:
            logger.error(f"Lock timeout writing {path}")
            raise CartStorageError(f"Could not lock {path} within {self.lock_timeout}s") from e

        logger.debug(f"Cart saved to {path}")
