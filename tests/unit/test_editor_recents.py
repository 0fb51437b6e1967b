import json
import os
from pathlib import Path

from shellporter.resolver.editor_recents import (
    EditorRecentsResolver,
    decode_path_token,
    extract_paths_by_regex,
    extract_paths_from_json,
)
from shellporter.resolver.models import EditorFamily


def _storage(folder: Path, payload) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / "storage.json"
    text = payload if isinstance(payload, str) else json.dumps(payload)
    target.write_text(text, encoding="utf-8")
    return target


def _recent_list(*uris: str) -> dict:
    return {
        "history.recentlyOpenedPathsList": {
            "entries": [{"folderUri": uri} for uri in uris],
        },
    }


def test_title_selects_matching_workspace(tmp_path: Path, make_project) -> None:
    api = make_project("api")
    web = make_project("web-client")
    storage_dir = tmp_path / "Code" / "User" / "globalStorage"
    _storage(storage_dir, _recent_list(api.as_uri(), web.as_uri()))
    resolver = EditorRecentsResolver(search_roots=[str(storage_dir)])

    assert resolver.resolve(EditorFamily.VSCODE, "index.ts — web-client") == str(web)
    assert resolver.resolve(EditorFamily.VSCODE, "main.go — api") == str(api)


def test_without_title_match_most_recent_entry_wins(tmp_path: Path, make_project) -> None:
    first = make_project("first")
    second = make_project("second")
    storage_dir = tmp_path / "Cursor"
    _storage(storage_dir, _recent_list(first.as_uri(), second.as_uri()))
    resolver = EditorRecentsResolver(search_roots=[str(storage_dir)])

    assert resolver.resolve(EditorFamily.CURSOR, None) == str(first)
    assert resolver.resolve(EditorFamily.CURSOR, "Welcome") == str(first)


def test_partial_name_match(tmp_path: Path, make_project) -> None:
    other = make_project("other")
    monorepo = make_project("acme-monorepo")
    storage_dir = tmp_path / "Code"
    _storage(storage_dir, _recent_list(other.as_uri(), monorepo.as_uri()))
    resolver = EditorRecentsResolver(search_roots=[str(storage_dir)])

    assert resolver.resolve(EditorFamily.VSCODE, "README.md — acme") == str(monorepo)


def test_file_entries_normalize_to_project_root(tmp_path: Path, make_project) -> None:
    repo = make_project("scripts", files=["tools/run.sh"])
    storage_dir = tmp_path / "Code"
    _storage(storage_dir, {
        "history.recentlyOpenedPathsList": {"entries": [{"fileUri": (repo / "tools" / "run.sh").as_uri()}]},
    })

    paths = EditorRecentsResolver(search_roots=[str(storage_dir)]).candidate_paths([str(storage_dir)])

    assert paths == [str(repo)]


def test_malformed_json_still_yields_regex_paths(tmp_path: Path, make_project) -> None:
    repo = make_project("broken-json")
    storage_dir = tmp_path / "Code"
    _storage(storage_dir, '{"history.recentlyOpenedPathsList": {"entries": [{"folderUri": "' + repo.as_uri())

    resolver = EditorRecentsResolver(search_roots=[str(storage_dir)])

    assert extract_paths_from_json((storage_dir / "storage.json").read_text(encoding="utf-8")) == []
    assert resolver.resolve(EditorFamily.VSCODE, None) == str(repo)


def test_regex_union_finds_paths_outside_recent_list(tmp_path: Path, make_project) -> None:
    listed = make_project("listed")
    elsewhere = make_project("elsewhere")
    storage_dir = tmp_path / "Code"
    payload = _recent_list(listed.as_uri())
    payload["windowsState"] = {"lastActiveWindow": {"folder": elsewhere.as_uri()}}
    _storage(storage_dir, payload)

    paths = EditorRecentsResolver().candidate_paths([str(storage_dir)])

    assert paths[0] == str(listed)
    assert str(elsewhere) in paths


def test_escaped_slashes_are_decoded() -> None:
    assert decode_path_token("file:\\u002F\\u002F\\u002FUsers\\u002Fme\\u002Fapp") == "/Users/me/app"
    assert decode_path_token("\\/Users\\/me\\/app") == "/Users/me/app"
    assert decode_path_token("vscode-remote://ssh/host/app") is None
    assert extract_paths_by_regex('"folderUri":"file:///Users/me/my%20app"')[0] == "/Users/me/my app"


def test_newest_storage_file_is_read_first(tmp_path: Path, make_project) -> None:
    stale = make_project("stale")
    fresh = make_project("fresh")
    old_dir = tmp_path / "Code"
    new_dir = tmp_path / "Code - Insiders"
    old_file = _storage(old_dir, _recent_list(stale.as_uri()))
    new_file = _storage(new_dir, _recent_list(fresh.as_uri()))
    os.utime(old_file, (1_000_000, 1_000_000))
    os.utime(new_file, (2_000_000, 2_000_000))

    resolver = EditorRecentsResolver(search_roots=[str(old_dir), str(new_dir)])

    assert resolver.resolve(EditorFamily.VSCODE, None) == str(fresh)


def test_no_storage_files_resolves_nothing(tmp_path: Path) -> None:
    resolver = EditorRecentsResolver(search_roots=[str(tmp_path / "missing")])

    assert resolver.resolve(EditorFamily.VSCODE, "anything") is None
    assert EditorRecentsResolver().resolve(EditorFamily.XCODE, "anything") is None


def test_single_folder_entry_matches_title(tmp_path: Path, make_project) -> None:
    project = make_project("proj")
    storage_dir = tmp_path / "Code"
    _storage(storage_dir, _recent_list(project.as_uri()))

    resolver = EditorRecentsResolver(search_roots=[str(storage_dir)])

    assert resolver.resolve(EditorFamily.VSCODE, "index.ts — proj") == str(project)


def test_filesystem_root_entry_never_matches_a_title(tmp_path: Path, make_project) -> None:
    alpha = make_project("alpha")
    storage_dir = tmp_path / "Code"
    _storage(storage_dir, _recent_list(alpha.as_uri(), "file:///"))

    resolver = EditorRecentsResolver(search_roots=[str(storage_dir)])

    assert resolver.resolve(EditorFamily.VSCODE, "Welcome - Untitled") == str(alpha)
