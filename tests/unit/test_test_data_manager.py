"""Tests for the test-data cache.

Tests cover:
  - JsonDocumentStore: name canonicalisation, not-found vs malformed, listing
  - resolve_key_path: mappings, list indices, empty paths and segments
  - TestDataManager: read-through identity, invalidation, failures not cached,
    has_key never raising, available files
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from harness.exceptions import (
    TestDataException,
    TestDataKeyError,
    TestDataKeyPathError,
    TestDataNotFoundError,
    TestDataParseError,
)
from harness.test_data_manager import JsonDocumentStore, TestDataManager, resolve_key_path


# ── Fixtures ──


def _write(directory: Path, name: str, content) -> Path:
    path = directory / name
    path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "test-data"
    directory.mkdir()
    _write(directory, "nested.json", {"a": {"b": {"c": 42}}, "list": [{"name": "first"}, {"name": "second"}]})
    _write(directory, "users.json", {"users": {"validUser": {"email": "a@b.c"}}, "count": 2})
    return directory


@pytest.fixture
def manager(data_dir):
    return TestDataManager.from_dir(data_dir)


# ── JsonDocumentStore ──


class TestJsonDocumentStore:
    def test_creates_base_dir(self, tmp_path):
        target = tmp_path / "missing" / "dir"
        JsonDocumentStore(target)
        assert target.is_dir()

    def test_canonical_name_appends_suffix_once(self):
        assert JsonDocumentStore.canonical_name("users") == "users.json"
        assert JsonDocumentStore.canonical_name("users.json") == "users.json"

    def test_read_missing_raises_not_found(self, data_dir):
        store = JsonDocumentStore(data_dir)
        with pytest.raises(TestDataNotFoundError, match="Test data file not found"):
            store.read("does-not-exist")

    def test_read_malformed_raises_parse_error(self, data_dir):
        _write(data_dir, "broken.json", "{not json")
        store = JsonDocumentStore(data_dir)
        with pytest.raises(TestDataParseError, match="Failed to read or parse test data file"):
            store.read("broken")

    def test_read_invalid_json_constant_raises_parse_error(self, data_dir):
        _write(data_dir, "nan.json", '{"a": NaN, "b": Infinity}')
        store = JsonDocumentStore(data_dir)
        with pytest.raises(TestDataParseError, match="Invalid JSON constant: NaN"):
            store.read("nan")

    def test_read_deeply_nested_raises_parse_error(self, data_dir):
        _write(data_dir, "deep.json", "[" * 200000 + "]" * 200000)
        store = JsonDocumentStore(data_dir)
        with pytest.raises(TestDataParseError):
            store.read("deep")

    def test_logs_when_directory_created(self, tmp_path, caplog):
        target = tmp_path / "fresh"
        with caplog.at_level(logging.INFO, logger="harness"):
            JsonDocumentStore(target)
            JsonDocumentStore(target)
        assert caplog.text.count(f"Created test-data directory: {target}") == 1

    def test_list_names_only_json_sorted(self, data_dir):
        _write(data_dir, "notes.txt", "ignored")
        store = JsonDocumentStore(data_dir)
        assert store.list_names() == ["nested.json", "users.json"]


# ── resolve_key_path ──


class TestResolveKeyPath:
    DOC = {"a": {"b": {"c": 42}}, "items": [10, 20], "text": "abc"}

    def test_resolves_nested_mapping(self):
        assert resolve_key_path(self.DOC, "a.b.c") == 42

    def test_resolves_list_index(self):
        assert resolve_key_path(self.DOC, "items.1") == 20

    def test_missing_segment_names_full_path(self):
        with pytest.raises(TestDataKeyPathError) as exc:
            resolve_key_path(self.DOC, "a.b.x", "nested.json")
        assert "a.b.x" in str(exc.value)
        assert "nested.json" in str(exc.value)

    @pytest.mark.parametrize(
        "path",
        ["", "a..b", ".a", "a.", "items.5", "items.-1", "items.01", "items.\u0661", "items. 1", "text.0", "a.b.c.d"],
    )
    def test_unresolvable_paths_fail(self, path):
        with pytest.raises(TestDataKeyPathError):
            resolve_key_path(self.DOC, path)


# ── TestDataManager ──


class TestReadThrough:
    def test_repeated_reads_return_same_object_and_read_once(self, manager):
        with patch.object(manager.store, "read", wraps=manager.store.read) as read:
            first = manager.get_all_data("nested")
            second = manager.get_all_data("nested")
            third = manager.get_all_data("nested.json")
        assert first is second is third
        assert read.call_count == 1

    def test_cache_hit_logs_debug(self, manager, caplog):
        manager.get_all_data("users")
        with caplog.at_level(logging.DEBUG, logger="harness"):
            manager.get_all_data("users")
        assert "Retrieved test data from cache: users.json" in caplog.text

    def test_cached_files_uses_canonical_names(self, manager):
        manager.get_all_data("users")
        manager.get_all_data("nested.json")
        assert manager.cached_files() == ["nested.json", "users.json"]


class TestInvalidation:
    def test_clear_file_cache_forces_reread_with_new_content(self, manager, data_dir):
        assert manager.get_data("users", "count") == 2
        _write(data_dir, "users.json", {"count": 3})
        assert manager.get_data("users", "count") == 2

        manager.clear_file_cache("users")
        assert manager.get_data("users", "count") == 3

    def test_clear_cache_rereads_every_document(self, manager):
        manager.get_all_data("users")
        manager.get_all_data("nested")
        manager.clear_cache()
        assert manager.cached_files() == []
        with patch.object(manager.store, "read", wraps=manager.store.read) as read:
            manager.get_all_data("users")
            manager.get_all_data("nested")
        assert read.call_count == 2

    def test_reload_data_returns_fresh_document(self, manager, data_dir):
        before = manager.get_all_data("users")
        _write(data_dir, "users.json", {"fresh": True})
        after = manager.reload_data("users")
        assert after == {"fresh": True}
        assert after is not before


class TestFailures:
    def test_missing_document_not_found(self, manager):
        with pytest.raises(TestDataNotFoundError):
            manager.get_all_data("does-not-exist")

    def test_parse_failure_is_not_cached(self, manager, data_dir):
        _write(data_dir, "late.json", "{oops")
        with pytest.raises(TestDataParseError):
            manager.get_all_data("late")
        assert "late.json" not in manager.cached_files()

        _write(data_dir, "late.json", {"ok": True})
        assert manager.get_all_data("late") == {"ok": True}

    def test_get_data_missing_key(self, manager):
        with pytest.raises(TestDataKeyError, match="Key 'nope' not found in test data file: users"):
            manager.get_data("users", "nope")

    def test_get_data_on_non_mapping_document(self, manager, data_dir):
        _write(data_dir, "array.json", [1, 2, 3])
        with pytest.raises(TestDataKeyError):
            manager.get_data("array", "0")

    def test_get_nested_data(self, manager):
        assert manager.get_nested_data("nested", "a.b.c") == 42
        assert manager.get_nested_data("nested", "list.1.name") == "second"
        with pytest.raises(TestDataKeyPathError, match="a.b.x"):
            manager.get_nested_data("nested", "a.b.x")

    def test_all_failures_share_domain_type(self, manager):
        with pytest.raises(TestDataException):
            manager.get_data("users", "missing")


class TestHasKey:
    def test_true_for_present_key(self, manager):
        assert manager.has_key("users", "users") is True

    @pytest.mark.parametrize("name,key", [("users", "missing"), ("does-not-exist", "users")])
    def test_false_for_absent(self, manager, name, key):
        assert manager.has_key(name, key) is False

    def test_false_for_malformed_document(self, manager, data_dir):
        _write(data_dir, "broken.json", "[")
        assert manager.has_key("broken", "anything") is False

    @pytest.mark.parametrize(
        "content",
        ["[1, 2, 3]", '"just a string"', "42", "null"],
        ids=["array", "string", "number", "null"],
    )
    def test_false_for_non_mapping_document(self, manager, data_dir, content):
        _write(data_dir, "scalar.json", content)
        assert manager.has_key("scalar", "0") is False
        assert manager.has_key("scalar", "length") is False

    def test_false_for_invalid_json_constants(self, manager, data_dir):
        _write(data_dir, "nan.json", '{"a": NaN}')
        assert manager.has_key("nan", "a") is False

    def test_false_for_deeply_nested_document(self, manager, data_dir):
        _write(data_dir, "deep.json", "[" * 200000 + "]" * 200000)
        assert manager.has_key("deep", "x") is False
        with pytest.raises(TestDataParseError):
            manager.get_all_data("deep")


class TestAvailableFiles:
    def test_lists_documents(self, manager):
        assert manager.get_available_data_files() == ["nested.json", "users.json"]

    def test_listing_error_returns_empty(self, manager, caplog):
        with patch.object(manager.store, "list_names", side_effect=OSError("denied")):
            with caplog.at_level(logging.ERROR, logger="harness"):
                assert manager.get_available_data_files() == []
        assert "denied" in caplog.text
