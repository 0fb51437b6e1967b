"""
Path utilities for window titles and AX document values.

Two jobs:
1. Title parsing: pull path-like tokens and project-name hints out of IDE window titles.
2. Path normalization: walk a file or directory up to its project root (.git,
   .xcworkspace, ...) and strip Xcode bundle suffixes.

Everything here is a pure function of its input and the filesystem.
"""

import os
import re
from typing import Iterator, List, Optional
from urllib.parse import unquote, urlparse

# Separators used by Electron, JetBrains and Xcode window titles (em dash, en dash, hyphen).
TITLE_SEPARATORS = (" — ", " – ", " - ")

VCS_MARKERS = (".git", ".hg", ".svn")
BUNDLE_EXTENSIONS = ("xcodeproj", "xcworkspace")
WORKSPACE_EXTENSIONS = ("xcworkspace", "xcodeproj", "code-workspace")

_TOKEN_TRIM_CHARS = "\"'`()[]{}<>.,;"
_EMBEDDED_PATH_RE = re.compile(r"(~|/)[A-Za-z0-9._/\-]+")


def path_from_document(value: str) -> str:
    """
    Interpret an AXDocument value as a filesystem path.

    Args:
        value: Either a file:// URI or a literal path

    Returns:
        Decoded filesystem path
    """
    if value.startswith("file://"):
        return unquote(urlparse(value).path) or "/"
    return value


def _standardize(path: str) -> str:
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


def _extension(path: str) -> str:
    return os.path.splitext(path)[1].lstrip(".").lower()


def normalize_project_path(raw_path: str) -> Optional[str]:
    """
    Normalize a file or directory to the project root that contains it.

    Files resolve from their parent directory. An .xcodeproj/.xcworkspace bundle
    resolves from the directory holding it. From there the first (deepest) ancestor
    with a VCS marker or a workspace file wins; when none is found the starting
    directory is returned unchanged.

    Args:
        raw_path: Path string or file:// URI

    Returns:
        Project root directory, or None if the input does not exist on disk
    """
    if not raw_path:
        return None
    standardized = _standardize(path_from_document(raw_path))
    if not os.path.exists(standardized):
        return None

    directory = standardized if os.path.isdir(standardized) else os.path.dirname(standardized)
    if _extension(directory) in BUNDLE_EXTENSIONS:
        directory = os.path.dirname(directory)

    root = _find_project_root(directory)
    return root if root is not None else directory


def _find_project_root(directory: str) -> Optional[str]:
    current = directory
    while True:
        if _is_project_root(current):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _is_project_root(directory: str) -> bool:
    for marker in VCS_MARKERS:
        if os.path.exists(os.path.join(directory, marker)):
            return True

    try:
        children = os.listdir(directory)
    except OSError:
        return False

    for child in children:
        if child.startswith("."):
            continue
        if _extension(child) in WORKSPACE_EXTENSIONS:
            return True
    return False


def _split_on_separators(title: str) -> List[str]:
    segments: List[str] = []
    for separator in TITLE_SEPARATORS:
        if separator in title:
            segments.extend(title.split(separator))
    return segments


def _clean_token(raw_value: str) -> Optional[str]:
    cleaned = raw_value.strip().strip(_TOKEN_TRIM_CHARS)
    if not cleaned:
        return None
    if not (cleaned.startswith("/") or cleaned.startswith("~")):
        return None
    return os.path.expanduser(cleaned)


def _raw_title_tokens(title: str) -> Iterator[str]:
    yield from _split_on_separators(title)

    for token in title.split(" "):
        if token.startswith("/") or token.startswith("~"):
            yield token

    # Bracketed/embedded paths, e.g. "FeedFlow [~/Workspace/feed-flow] - Main.kt"
    for match in _EMBEDDED_PATH_RE.finditer(title):
        value = match.group(0)
        if len(value) > 1:
            yield value


def title_path_candidates(title: Optional[str]) -> Iterator[str]:
    """
    Extract absolute path candidates from a window title.

    Tries, in order: separator segments, whitespace tokens starting with / or ~,
    then embedded path-like runs anywhere in the title. Results are deduplicated
    by normalized path and yielded in discovery order.

    Args:
        title: Window title text

    Yields:
        Absolute, tilde-expanded path strings (not checked for existence)
    """
    if not title:
        return
    seen = set()
    for raw in _raw_title_tokens(title):
        candidate = _clean_token(raw)
        if candidate is None:
            continue
        key = os.path.normpath(candidate)
        if key in seen:
            continue
        seen.add(key)
        yield candidate


def project_name_hints(title: Optional[str]) -> List[str]:
    """
    Derive lowercase project-name hints from a window title.

    The whole title plus every separator segment, lowercased and trimmed. Segments
    that are empty, contain a slash or are a single character are dropped. Hints are
    only used for matching, never to build a path.

    Args:
        title: Window title text

    Returns:
        Ordered, de-duplicated list of hints
    """
    if not title:
        return []
    hints: List[str] = []
    for segment in [title] + _split_on_separators(title):
        hint = segment.strip().lower()
        if not hint or "/" in hint or len(hint) <= 1:
            continue
        if hint not in hints:
            hints.append(hint)
    return hints


def canonical_token(value: str) -> str:
    """Letters and digits only, so "my-project" and "myproject" compare equal."""
    return "".join(ch for ch in value.lower() if ch.isalnum())
