"""DiskCache-backed key/value store for local client state."""

import logging
from pathlib import Path
from typing import Any

from diskcache import Cache

from hla.exceptions import CacheError

logger = logging.getLogger(__name__)


class DiskStore:
    """Small persistent key/value store in a local directory."""

    def __init__(self, directory: Path) -> None:
        """Initialize the store.

        Args:
            directory: Directory holding the DiskCache files (created if missing)
        """
        self.directory = Path(directory).expanduser()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.cache = Cache(str(self.directory))
        except OSError as e:
            raise CacheError(f"Cannot open local store at {self.directory}: {e}") from e

        logger.debug(f"Initialized store at {self.directory}")

    def __enter__(self) -> "DiskStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self.cache.close()

    def save(self, key: str, data: Any, expire: float | None = None) -> None:
        """Save data with optional expiration in seconds."""
        self.cache.set(key, data, expire=expire)
        logger.debug(f"Stored key: {key}")

    def load(self, key: str) -> Any | None:
        return self.cache.get(key)

    def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if the key existed
        """
        return bool(self.cache.delete(key))

    def exists(self, key: str) -> bool:
        return key in self.cache

    def clear(self) -> None:
        self.cache.clear()
        logger.info(f"Cleared store at {self.directory}")
