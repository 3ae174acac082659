# harness/test_data_manager.py
"""
Test Data Manager: read-through cache over a directory of JSON documents.

Layers:
- JsonDocumentStore: name -> path (".json" appended when missing) -> parsed
  document. Distinguishes "not found" from "malformed". No caching.
- resolve_key_path: walks a dot-separated path ("users.validUser.email")
  through nested mappings (and lists, by integer index).
- TestDataManager: name -> document cache with explicit invalidation
  (clear_cache / clear_file_cache / reload_data). No TTL and no size bound.

Cached documents are returned by reference; callers treat them as read-only.
There is no lock: two first accesses racing on the same name may both read
the file, and the last write to the cache wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from harness.exceptions import (
    TestDataException,
    TestDataKeyError,
    TestDataKeyPathError,
    TestDataNotFoundError,
    TestDataParseError,
)

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".json"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _is_list_index(segment: str) -> bool:
    """Canonical non-negative ASCII integer: "0", "12"; never "01" or "١"."""
    return segment.isascii() and segment.isdigit() and segment == str(int(segment))


# ==================== Store adapter ====================

class JsonDocumentStore:
    """Reads named JSON documents from a base directory."""

    def __init__(self, base_dir: str | Path = "test-data"):
        self.base_dir = Path(base_dir)
        if not self.base_dir.exists():
            self.base_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created test-data directory: {self.base_dir}")

    @staticmethod
    def canonical_name(name: str) -> str:
        return name if name.endswith(DOCUMENT_SUFFIX) else f"{name}{DOCUMENT_SUFFIX}"

    def path_for(self, name: str) -> Path:
        return self.base_dir / self.canonical_name(name)

    def read(self, name: str) -> Any:
        path = self.path_for(name)
        if not path.is_file():
            raise TestDataNotFoundError(f"Test data file not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f, parse_constant=_reject_constant)
        # UnicodeDecodeError and JSONDecodeError are ValueErrors; deep nesting recurses out.
        except (OSError, ValueError, RecursionError) as e:
            raise TestDataParseError(
                f"Failed to read or parse test data file: {path}. Error: {e}"
            ) from e

    def list_names(self) -> List[str]:
        return sorted(
            p.name for p in self.base_dir.iterdir()
            if p.is_file() and p.suffix == DOCUMENT_SUFFIX
        )


# ==================== Key-path resolver ====================

def resolve_key_path(document: Any, key_path: str, document_name: str = "<document>") -> Any:
    """
    Follow a dot-separated path from the document root.

    Mappings are walked by key, lists by non-negative integer index. Any
    absent segment, non-traversable node, empty path or empty segment fails
    with TestDataKeyPathError naming the full path and the document.
    """
    def fail() -> TestDataKeyPathError:
        return TestDataKeyPathError(
            f"Key path '{key_path}' not found in test data file: {document_name}"
        )

    segments = key_path.split(".") if isinstance(key_path, str) else []
    if not segments or any(s == "" for s in segments):
        raise fail()

    cursor = document
    for segment in segments:
        if isinstance(cursor, Mapping):
            if segment not in cursor:
                raise fail()
            cursor = cursor[segment]
        elif isinstance(cursor, Sequence) and not isinstance(cursor, (str, bytes)):
            if not _is_list_index(segment) or int(segment) >= len(cursor):
                raise fail()
            cursor = cursor[int(segment)]
        else:
            raise fail()
    return cursor


# ==================== Cache layer ====================

class TestDataManager:
    """Read-through document cache keyed by canonical file name."""

    __test__ = False

    def __init__(self, store: JsonDocumentStore | None = None):
        self.store = store or JsonDocumentStore()
        self._cache: Dict[str, Any] = {}

    @classmethod
    def from_dir(cls, base_dir: str | Path) -> "TestDataManager":
        return cls(JsonDocumentStore(base_dir))

    def _key(self, file_name: str) -> str:
        return self.store.canonical_name(file_name)

    def get_all_data(self, file_name: str) -> Any:
        key = self._key(file_name)
        if key in self._cache:
            logger.debug(f"Retrieved test data from cache: {key}")
            return self._cache[key]

        data = self.store.read(file_name)
        self._cache[key] = data
        logger.debug(f"Loaded test data file: {self.store.path_for(file_name)}")
        return data

    def get_data(self, file_name: str, key: str) -> Any:
        data = self.get_all_data(file_name)
        if not isinstance(data, Mapping) or key not in data:
            raise TestDataKeyError(f"Key '{key}' not found in test data file: {file_name}")
        return data[key]

    def get_nested_data(self, file_name: str, key_path: str) -> Any:
        return resolve_key_path(self.get_all_data(file_name), key_path, file_name)

    def has_key(self, file_name: str, key: str) -> bool:
        try:
            self.get_data(file_name, key)
            return True
        except TestDataException:
            return False

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Test data cache cleared")

    def clear_file_cache(self, file_name: str) -> None:
        self._cache.pop(self._key(file_name), None)
        logger.debug(f"Cache cleared for file: {file_name}")

    def reload_data(self, file_name: str) -> Any:
        self.clear_file_cache(file_name)
        return self.get_all_data(file_name)

    def get_available_data_files(self) -> List[str]:
        try:
            return self.store.list_names()
        except OSError as e:
            logger.error(f"Failed to list test data files in {self.store.base_dir}: {e}")
            return []

    def cached_files(self) -> List[str]:
        return sorted(self._cache)
