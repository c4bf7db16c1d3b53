"""
Key-value storage backends for persisted settings.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageResult:
    """Outcome of a storage read or write.

    A read of a missing key is successful with ``value`` set to None.
    """

    ok: bool
    value: str | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: str | None = None) -> "StorageResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "StorageResult":
        return cls(ok=False, error=error)


class StorageBackend(ABC):
    """A store of string values under string keys."""

    @abstractmethod
    def read(self, key: str) -> StorageResult:
        """Read the value stored under key."""

    @abstractmethod
    def write(self, key: str, value: str) -> StorageResult:
        """Store value under key, replacing any previous value."""


class MemoryStorage(StorageBackend):
    """Storage kept in a dictionary for the lifetime of the object."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> StorageResult:
        return StorageResult.success(self.data.get(key))

    def write(self, key: str, value: str) -> StorageResult:
        self.data[key] = value
        return StorageResult.success(value)


class JsonFileStorage(StorageBackend):
    """Storage keeping one ``<key>.json`` file per key in a directory."""

    def __init__(self, directory: Path, encoding: str = "utf-8"):
        self.directory = Path(directory)
        self.encoding = encoding

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> StorageResult:
        path = self.path_for(key)
        if not path.exists():
            logger.debug(f"Storage file {path} does not exist")
            return StorageResult.success(None)

        try:
            with open(path, encoding=self.encoding) as f:
                return StorageResult.success(f.read())
        except (OSError, UnicodeDecodeError) as e:
            return StorageResult.failure(f"Failed to read {path}: {e}")

    def write(self, key: str, value: str) -> StorageResult:
        """Write through a temporary file so the target is replaced whole."""
        path = self.path_for(key)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding=self.encoding) as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            return StorageResult.failure(f"Failed to write {path}: {e}")

        logger.debug(f"Wrote {len(value)} characters to {path}")
        return StorageResult.success(value)
