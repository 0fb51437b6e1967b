"""
Resolve the current project from VS Code / Cursor / Antigravity `storage.json`.

These editors record recently opened workspaces in
`~/Library/Application Support/<Editor>/User/globalStorage/storage.json`. Paths are
pulled out two ways and the results are concatenated:

1. JSON traversal for `history.recentlyOpenedPathsList.entries` (or a similarly named key).
2. A regex scan of the raw text for `file:///` URIs and absolute paths, so malformed
   JSON or an unexpected schema still produce candidates.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse

from .models import EditorFamily
from .path_heuristics import normalize_project_path, project_name_hints

logger = logging.getLogger(__name__)

STORAGE_FILE = "storage.json"
RECENT_LIST_KEY = "history.recentlyOpenedPathsList"
RECENT_LIST_KEY_FRAGMENTS = ("recentlyopenedpathslist", "openedpathslist")
URI_KEYS = ("folderUri", "workspaceUri", "fileUri", "uri")
PATH_KEYS = ("folder", "workspace", "path", "fsPath")

_FILE_URI_RE = re.compile(r'file:///[^"\\]+')
_ABSOLUTE_PATH_RE = re.compile(r"/[A-Za-z0-9._/\- ]+")

_EDITOR_SUPPORT_DIRS = {
    EditorFamily.VSCODE: ("Code", "Code - Insiders", "VSCodium"),
    EditorFamily.CURSOR: ("Cursor",),
    EditorFamily.ANTIGRAVITY: ("Antigravity",),
}


def default_search_roots(family: EditorFamily) -> List[str]:
    home = os.path.expanduser("~")
    return [
        os.path.join(home, "Library", "Application Support", name, "User", "globalStorage")
        for name in _EDITOR_SUPPORT_DIRS.get(family, ())
    ]


def _unescape_slashes(raw_value: str) -> str:
    # storage.json may write "/" as a unicode escape or as a JSON-escaped slash
    return raw_value.replace("\\u002F", "/").replace("\\/", "/").strip("\"'")


def _uri_to_path(uri: str) -> str:
    return unquote(urlparse(uri).path)


def decode_path_token(raw_value: str) -> Optional[str]:
    """
    Turn a URI or path token from storage.json into a plain absolute path.

    Args:
        raw_value: Value of a folderUri/path-style key

    Returns:
        Absolute path, or None if the token is not a local path
    """
    value = _unescape_slashes(raw_value)
    if value.startswith("file://"):
        return _uri_to_path(value)
    if value.startswith("/"):
        return value
    if value.startswith("~"):
        return os.path.expanduser(value)
    return None


def find_recent_entries(value: Any) -> List[Dict[str, Any]]:
    """Depth-first search for the recently-opened `entries` list."""
    if isinstance(value, dict):
        history = value.get(RECENT_LIST_KEY)
        if isinstance(history, dict):
            entries = _entry_list(history.get("entries"))
            if entries:
                return entries

        for key, nested in value.items():
            lowered = str(key).lower()
            if any(fragment in lowered for fragment in RECENT_LIST_KEY_FRAGMENTS) and isinstance(nested, dict):
                entries = _entry_list(nested.get("entries"))
                if entries:
                    return entries

        for nested in value.values():
            entries = find_recent_entries(nested)
            if entries:
                return entries
    elif isinstance(value, list):
        for item in value:
            entries = find_recent_entries(item)
            if entries:
                return entries
    return []


def _entry_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def extract_entry_path(entry: Dict[str, Any]) -> Optional[str]:
    """First decodable URI key, then first decodable plain path key."""
    for key in URI_KEYS + PATH_KEYS:
        raw = entry.get(key)
        if isinstance(raw, str):
            decoded = decode_path_token(raw)
            if decoded:
                return decoded
    return None


def extract_paths_from_json(text: str) -> List[str]:
    try:
        document = json.loads(text)
    except ValueError:
        return []
    paths = []
    for entry in find_recent_entries(document):
        path = extract_entry_path(entry)
        if path:
            paths.append(path)
    return paths


def extract_paths_by_regex(text: str) -> List[str]:
    results = []
    for pattern in (_FILE_URI_RE, _ABSOLUTE_PATH_RE):
        for match in pattern.finditer(text):
            raw = _unescape_slashes(match.group(0))
            results.append(_uri_to_path(raw) if raw.startswith("file://") else raw)
    return results


class EditorRecentsResolver:
    """Finds the open workspace of an Electron editor from its storage.json."""

    def __init__(self, search_roots: Optional[List[str]] = None):
        """
        Args:
            search_roots: Directories that may contain storage.json (defaults
                depend on the editor family)
        """
        self.search_roots = search_roots

    def resolve(self, family: EditorFamily, window_title: Optional[str]) -> Optional[str]:
        """
        Pick the workspace directory that best matches the window title.

        Args:
            family: Editor family, selects the default search roots
            window_title: Title of the selected editor window

        Returns:
            Existing project directory, or None
        """
        roots = self.search_roots if self.search_roots is not None else default_search_roots(family)
        if not roots:
            return None

        paths = self.candidate_paths(roots)
        if not paths:
            return None

        hints = project_name_hints(window_title)
        if hints:
            names = [(path, (os.path.basename(path) or path).lower()) for path in paths]
            for path, name in names:
                if name in hints:
                    return path
            for path, name in names:
                if any(name in hint or hint in name for hint in hints):
                    return path

        return paths[0]

    def candidate_paths(self, roots: List[str]) -> List[str]:
        """Normalized project directories from every storage.json, newest file first."""
        storage_files = []
        for root in roots:
            file_path = os.path.join(root, STORAGE_FILE)
            if not os.path.isfile(file_path):
                continue
            try:
                mtime = os.path.getmtime(file_path)
            except OSError:
                mtime = 0.0
            storage_files.append((mtime, file_path))
        storage_files.sort(key=lambda item: item[0], reverse=True)

        ordered: List[str] = []
        seen = set()
        for _, file_path in storage_files:
            try:
                with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                    text = f.read()
            except OSError as e:
                logger.debug("Skipping unreadable storage file %s: %s", file_path, e)
                continue

            for raw_path in extract_paths_from_json(text) + extract_paths_by_regex(text):
                normalized = normalize_project_path(raw_path)
                if normalized and normalized not in seen:
                    seen.add(normalized)
                    ordered.append(normalized)

        return ordered
