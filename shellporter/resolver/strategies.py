"""
Resolution strategies and the per-family order they run in.

Each strategy is a descriptor holding a name and a function of
(snapshot, family) -> ResolverAttempt. The orchestrator folds over the family's
order and stops at the first success.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .editor_recents import EditorRecentsResolver
from .jetbrains_recents import JetBrainsRecentProjectsResolver
from .models import EditorFamily, ResolverAttempt, WindowSnapshot
from .path_heuristics import normalize_project_path, title_path_candidates


class StrategyName(Enum):
    """Strategy identifiers; the value is the name shown in diagnostics."""
    AX_DOCUMENT = "AXDocument"
    TITLE_PATHS = "AXTitle"
    JETBRAINS_RECENTS = "JetBrainsRecentProjects"
    EDITOR_RECENTS = "EditorRecents"
    CACHED_RESOLUTION = "CachedResolution"


StrategyFunc = Callable[[WindowSnapshot, EditorFamily], ResolverAttempt]


@dataclass(frozen=True)
class Strategy:
    name: StrategyName
    run: StrategyFunc


_ELECTRON_ORDER = (
    StrategyName.AX_DOCUMENT,
    StrategyName.TITLE_PATHS,
    StrategyName.EDITOR_RECENTS,
    StrategyName.CACHED_RESOLUTION,
)
_GENERIC_ORDER = (
    StrategyName.AX_DOCUMENT,
    StrategyName.TITLE_PATHS,
    StrategyName.CACHED_RESOLUTION,
)

# JetBrains titles always name the project while AXDocument points at a single file,
# so the title goes first there. Electron editors and Xcode expose the workspace or
# file via AXDocument. The cache is always last: live data wins when it exists.
STRATEGY_ORDER: Dict[EditorFamily, Tuple[StrategyName, ...]] = {
    EditorFamily.JETBRAINS: (
        StrategyName.TITLE_PATHS,
        StrategyName.JETBRAINS_RECENTS,
        StrategyName.AX_DOCUMENT,
        StrategyName.CACHED_RESOLUTION,
    ),
    EditorFamily.VSCODE: _ELECTRON_ORDER,
    EditorFamily.CURSOR: _ELECTRON_ORDER,
    EditorFamily.ANTIGRAVITY: _ELECTRON_ORDER,
    EditorFamily.XCODE: _GENERIC_ORDER,
    EditorFamily.UNKNOWN: _GENERIC_ORDER,
}


def strategy_sequence(family: EditorFamily) -> Tuple[StrategyName, ...]:
    return STRATEGY_ORDER.get(family, _GENERIC_ORDER)


def _failure(name: StrategyName, details: str) -> ResolverAttempt:
    return ResolverAttempt(strategy=name.value, success=False, details=details)


def _success(name: StrategyName, details: str, path: str) -> ResolverAttempt:
    return ResolverAttempt(strategy=name.value, success=True, details=details, candidate_path=path)


def resolve_using_document(snapshot: WindowSnapshot, family: EditorFamily) -> ResolverAttempt:
    """Normalize the window's AXDocument (file:// URI or plain path) to a project root."""
    name = StrategyName.AX_DOCUMENT
    if not snapshot.document:
        return _failure(name, "No AXDocument value on selected window.")

    normalized = normalize_project_path(snapshot.document)
    if normalized is None:
        return _failure(name, "AXDocument present but path does not exist on disk.")
    return _success(name, "Resolved from selected window AXDocument.", normalized)


def resolve_using_title(snapshot: WindowSnapshot, family: EditorFamily) -> ResolverAttempt:
    """Return the first path-like title token that normalizes to an existing directory."""
    name = StrategyName.TITLE_PATHS
    if not snapshot.title:
        return _failure(name, "No selected window title available.")

    found_any = False
    for candidate in title_path_candidates(snapshot.title):
        found_any = True
        normalized = normalize_project_path(candidate)
        if normalized is not None:
            return _success(name, "Resolved by parsing a title path candidate.", normalized)

    if not found_any:
        return _failure(name, "No path-like tokens in title.")
    return _failure(name, "Title had path candidates, but none existed on disk.")


def make_jetbrains_strategy(resolver: JetBrainsRecentProjectsResolver) -> StrategyFunc:
    def resolve_using_jetbrains_recents(snapshot: WindowSnapshot, family: EditorFamily) -> ResolverAttempt:
        name = StrategyName.JETBRAINS_RECENTS
        if family is not EditorFamily.JETBRAINS:
            return _failure(name, "Skipped: strategy only applies to JetBrains IDEs.")
        path = resolver.resolve(snapshot.title)
        if path is None:
            return _failure(name, "No candidate found in recentProjects.xml files.")
        return _success(name, "Resolved using JetBrains recent projects metadata.", path)

    return resolve_using_jetbrains_recents


def make_editor_recents_strategy(resolver: EditorRecentsResolver) -> StrategyFunc:
    def resolve_using_editor_recents(snapshot: WindowSnapshot, family: EditorFamily) -> ResolverAttempt:
        name = StrategyName.EDITOR_RECENTS
        if not family.is_electron:
            return _failure(name, "Skipped: strategy only applies to VS Code/Cursor/Antigravity families.")
        path = resolver.resolve(family, snapshot.title)
        if path is None:
            return _failure(name, "No candidate found in editor recents metadata.")
        return _success(name, "Resolved using VS Code/Cursor recent workspace metadata.", path)

    return resolve_using_editor_recents


def build_live_strategies(
    jetbrains_resolver: Optional[JetBrainsRecentProjectsResolver] = None,
    editor_resolver: Optional[EditorRecentsResolver] = None,
) -> Dict[StrategyName, Strategy]:
    """
    Build the non-cache strategy table.

    The cache strategy is not in the table: it runs in the cache's own domain,
    after the live chain is exhausted.

    Args:
        jetbrains_resolver: Resolver with custom search roots (optional)
        editor_resolver: Resolver with custom search roots (optional)

    Returns:
        Mapping from strategy name to descriptor
    """
    jetbrains_resolver = jetbrains_resolver or JetBrainsRecentProjectsResolver()
    editor_resolver = editor_resolver or EditorRecentsResolver()
    return {
        StrategyName.AX_DOCUMENT: Strategy(StrategyName.AX_DOCUMENT, resolve_using_document),
        StrategyName.TITLE_PATHS: Strategy(StrategyName.TITLE_PATHS, resolve_using_title),
        StrategyName.JETBRAINS_RECENTS: Strategy(
            StrategyName.JETBRAINS_RECENTS, make_jetbrains_strategy(jetbrains_resolver)
        ),
        StrategyName.EDITOR_RECENTS: Strategy(
            StrategyName.EDITOR_RECENTS, make_editor_recents_strategy(editor_resolver)
        ),
    }
