import json
from pathlib import Path

import pytest

from shellporter.cache import (
    CacheEntry,
    ResolutionCacheStore,
    get_cache_store,
    initialize_cache_store,
)
from shellporter.cache.models import format_timestamp, parse_timestamp

BUNDLE = "com.microsoft.VSCode"


def test_record_writes_exact_and_last_keys(tmp_path: Path, make_project) -> None:
    project = make_project("api")
    cache_file = tmp_path / "cache" / "resolution-cache.json"
    store = ResolutionCacheStore(cache_path=str(cache_file))

    store.record(BUNDLE, "  Main.go — API ", str(project))

    data = json.loads(cache_file.read_text(encoding="utf-8"))
    assert set(data) == {"com.microsoft.vscode|last", "com.microsoft.vscode|title|main.go — api"}
    assert data["com.microsoft.vscode|last"]["path"] == str(project)
    assert data["com.microsoft.vscode|last"]["lastUsed"].endswith("Z")


def test_lookup_prefers_exact_key_then_falls_back_to_last(tmp_path: Path, make_project) -> None:
    api = make_project("api")
    web = make_project("web")
    store = ResolutionCacheStore(cache_path=str(tmp_path / "c.json"))
    store.record(BUNDLE, "api window", str(api))
    store.record(BUNDLE, "web window", str(web))

    assert store.lookup(BUNDLE, "API Window") == str(api)
    assert store.lookup(BUNDLE, "unseen title") == str(web)
    assert store.lookup(BUNDLE, None) == str(web)
    assert store.lookup("com.other.app", "api window") is None


def test_round_trip_through_disk(tmp_path: Path, make_project) -> None:
    project = make_project("persisted")
    cache_file = tmp_path / "c.json"
    ResolutionCacheStore(cache_path=str(cache_file)).record(BUNDLE, "title", str(project))

    reloaded = ResolutionCacheStore(cache_path=str(cache_file))

    assert reloaded.lookup(BUNDLE, "title") == str(project)
    assert reloaded.entry_count == 2


def test_lookup_ignores_vanished_path_without_removing_it(tmp_path: Path, make_project) -> None:
    project = make_project("short-lived")
    store = ResolutionCacheStore(cache_path=str(tmp_path / "c.json"))
    store.record(BUNDLE, "title", str(project))
    (project / ".git").rmdir()
    project.rmdir()

    assert store.lookup(BUNDLE, "title") is None
    assert store.entry_count == 2


def test_stale_entries_are_pruned_on_load(tmp_path: Path, make_project) -> None:
    kept = make_project("kept")
    cache_file = tmp_path / "c.json"
    cache_file.write_text(json.dumps({
        "a|last": {"path": str(kept), "lastUsed": "2024-01-01T00:00:00Z"},
        "b|last": {"path": str(tmp_path / "gone"), "lastUsed": "2024-01-01T00:00:00Z"},
    }), encoding="utf-8")

    store = ResolutionCacheStore(cache_path=str(cache_file))

    assert set(store.entries()) == {"a|last"}
    assert set(json.loads(cache_file.read_text(encoding="utf-8"))) == {"a|last"}


def test_legacy_string_entries_are_migrated(tmp_path: Path, make_project) -> None:
    project = make_project("legacy")
    cache_file = tmp_path / "c.json"
    cache_file.write_text(json.dumps({"com.apple.dt.xcode|last": str(project)}), encoding="utf-8")

    store = ResolutionCacheStore(cache_path=str(cache_file))

    assert store.lookup("com.apple.dt.Xcode", None) == str(project)
    on_disk = json.loads(cache_file.read_text(encoding="utf-8"))
    assert on_disk["com.apple.dt.xcode|last"]["path"] == str(project)
    assert parse_timestamp(on_disk["com.apple.dt.xcode|last"]["lastUsed"]) is not None


def test_capacity_evicts_least_recently_used(tmp_path: Path, make_project) -> None:
    store = ResolutionCacheStore(cache_path=str(tmp_path / "c.json"), max_entries=3)
    projects = [make_project(f"p{index}") for index in range(4)]

    for index, project in enumerate(projects):
        store.record(f"com.app{index}", None, str(project))

    assert store.entry_count == 3
    assert store.lookup("com.app0", None) is None
    assert store.lookup("com.app3", None) == str(projects[3])


def test_corrupt_cache_file_starts_empty(tmp_path: Path) -> None:
    cache_file = tmp_path / "c.json"
    cache_file.write_text("{not json", encoding="utf-8")

    assert ResolutionCacheStore(cache_path=str(cache_file)).entry_count == 0


def test_max_entries_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        ResolutionCacheStore(cache_path=str(tmp_path / "c.json"), max_entries=0)


def test_initialize_cache_store_is_a_singleton(tmp_path: Path) -> None:
    assert get_cache_store() is None
    first = initialize_cache_store(str(tmp_path / "one.json"))
    second = initialize_cache_store(str(tmp_path / "two.json"))

    assert first is second
    assert get_cache_store() is first


def test_cache_entry_json_forms() -> None:
    entry = CacheEntry(path="/w/app", last_used=0.0)

    assert entry.to_json() == {"path": "/w/app", "lastUsed": "1970-01-01T00:00:00Z"}
    assert CacheEntry.from_json("/w/legacy", 5.0) == CacheEntry("/w/legacy", 5.0)
    assert CacheEntry.from_json({"path": "/w/x", "lastUsed": "garbage"}, 7.0) == CacheEntry("/w/x", 7.0)
    assert CacheEntry.from_json({"lastUsed": "1970-01-01T00:00:00Z"}, 7.0) is None
    assert parse_timestamp(format_timestamp(1_700_000_000.5)) == pytest.approx(1_700_000_000.5)


def test_deleted_path_is_gone_after_reload(tmp_path: Path, make_project) -> None:
    project = make_project("removed")
    cache_file = tmp_path / "c.json"
    ResolutionCacheStore(cache_path=str(cache_file)).record(BUNDLE, "title", str(project))
    (project / ".git").rmdir()
    project.rmdir()

    reloaded = ResolutionCacheStore(cache_path=str(cache_file))

    assert reloaded.lookup(BUNDLE, "title") is None
    assert reloaded.entry_count == 0
