"""
Resolve the current project from JetBrains `recentProjects.xml` files.

JetBrains IDEs keep recent project metadata under
`~/Library/Application Support/JetBrains/*/options/` (Android Studio uses
`~/Library/Application Support/Google/*/options/`). Each file holds `<entry key="path">`
elements, optionally wrapped around `RecentProjectMetaInfo` with a frame title, an
opened flag and two timestamps.

Candidates are ranked against the live window title in tiers (lower is stronger):

- FRAME_TITLE: stored frame title equals the window title and mentions the candidate path
- EXACT_NAME: folder name equals a title hint (literally or canonically)
- FRAME_PATH: stored frame title contains the candidate path
- PARTIAL_NAME: folder name and a title hint are substrings of each other

Within a tier: opened, last opened, activation time, open time, source file rank,
path depth, then path.
"""

import logging
import os
import re
from enum import IntEnum
from functools import cmp_to_key
from typing import Iterable, List, NamedTuple, Optional, Tuple
from urllib.parse import unquote, urlparse

from .models import RecentProjectCandidate
from .path_heuristics import canonical_token, project_name_hints

logger = logging.getLogger(__name__)

RECENT_PROJECTS_FILE = "recentProjects.xml"
HOME_PLACEHOLDERS = ("$USER_HOME$", "&#36;USER_HOME&#36;")

_META_INFO_ENTRY_RE = re.compile(
    r'<entry\s+key="([^"]+)"[^>]*>\s*<value>\s*<RecentProjectMetaInfo([^>]*?)'
    r'(?:/>|>(.*?)</RecentProjectMetaInfo>)\s*</value>\s*</entry>',
    re.S,
)
_BARE_ENTRY_RE = re.compile(r'<entry\s+key="([^"]+)"[^>]*/?>')
_FRAME_TITLE_RE = re.compile(r'frameTitle="([^"]+)"')
_LAST_OPENED_RE = re.compile(r'<option\s+name="lastOpenedProject"\s+value="([^"]+)"')
_TIMESTAMP_RES = {
    "activationTimestamp": re.compile(r'<option\s+name="activationTimestamp"\s+value="([0-9]+)"'),
    "projectOpenTimestamp": re.compile(r'<option\s+name="projectOpenTimestamp"\s+value="([0-9]+)"'),
}


class MatchTier(IntEnum):
    """Evidence strength for a candidate; lower values win."""
    FRAME_TITLE = 0
    EXACT_NAME = 1
    FRAME_PATH = 2
    PARTIAL_NAME = 3


class ParsedEntry(NamedTuple):
    path_token: str
    frame_title: Optional[str]
    is_last_opened: bool
    is_opened: bool
    activation_timestamp: int
    project_open_timestamp: int


def default_search_roots() -> List[str]:
    home = os.path.expanduser("~")
    return [
        os.path.join(home, "Library", "Application Support", "JetBrains"),
        os.path.join(home, "Library", "Application Support", "Google"),
    ]


def _extract_timestamp(name: str, body: str) -> int:
    match = _TIMESTAMP_RES[name].search(body or "")
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        return 0


def _extract_frame_title(attributes: str) -> Optional[str]:
    match = _FRAME_TITLE_RE.search(attributes)
    if not match:
        return None
    return match.group(1).strip().lower()


def parse_entry_metadata(text: str) -> List[ParsedEntry]:
    """
    Parse the entries of one recentProjects.xml document.

    Args:
        text: Raw file contents

    Returns:
        Entries with metadata first, then bare entries, then the lastOpenedProject marker
    """
    entries: List[ParsedEntry] = []
    seen_keys = set()

    for match in _META_INFO_ENTRY_RE.finditer(text):
        path_token, attributes, body = match.group(1), match.group(2), match.group(3) or ""
        seen_keys.add(path_token)
        entries.append(ParsedEntry(
            path_token=path_token,
            frame_title=_extract_frame_title(attributes),
            is_last_opened=False,
            is_opened='opened="true"' in attributes,
            activation_timestamp=_extract_timestamp("activationTimestamp", body),
            project_open_timestamp=_extract_timestamp("projectOpenTimestamp", body),
        ))

    for match in _BARE_ENTRY_RE.finditer(text):
        path_token = match.group(1)
        if path_token in seen_keys:
            continue
        seen_keys.add(path_token)
        entries.append(ParsedEntry(path_token, None, False, False, 0, 0))

    last_opened = _LAST_OPENED_RE.search(text)
    if last_opened:
        entries.append(ParsedEntry(last_opened.group(1).strip(), None, True, False, 0, 0))

    return entries


def normalize_path_token(path_token: str) -> str:
    """Expand the $USER_HOME$ placeholder and strip URI/quote wrappers."""
    home = os.path.expanduser("~")
    value = path_token
    for placeholder in HOME_PLACEHOLDERS:
        value = value.replace(placeholder, home)
    value = value.strip().strip("\"'<>")
    if value.startswith("file://"):
        value = unquote(urlparse(value).path)
    return value


def frame_title_mentions_path(frame_title: Optional[str], candidate_path: str) -> bool:
    if not frame_title:
        return False
    expanded = frame_title.replace("~", os.path.expanduser("~")).lower()
    return candidate_path.lower() in expanded


def match_tier(
    candidate: RecentProjectCandidate,
    title_hints: List[str],
    window_title: Optional[str],
) -> Optional[MatchTier]:
    """
    Assign a candidate to the single best tier it qualifies for.

    Args:
        candidate: Candidate to score
        title_hints: Hints from project_name_hints(window_title)
        window_title: Live window title

    Returns:
        The best MatchTier, or None when the candidate matches nothing
    """
    # basename("/") is empty and would partially match every hint.
    path_name = (os.path.basename(candidate.path) or candidate.path).lower()
    canonical_name = canonical_token(path_name)
    normalized_title = window_title.lower() if window_title is not None else None

    # A stale frame title from another project could equal the window title, so the
    # frame title must also mention this candidate's path.
    if (candidate.frame_title is not None and normalized_title is not None
            and candidate.frame_title == normalized_title
            and frame_title_mentions_path(candidate.frame_title, candidate.path)):
        return MatchTier.FRAME_TITLE

    canonical_hints = [canonical_token(hint) for hint in title_hints]
    if path_name in title_hints or (canonical_name and canonical_name in canonical_hints):
        return MatchTier.EXACT_NAME

    if frame_title_mentions_path(candidate.frame_title, candidate.path):
        return MatchTier.FRAME_PATH

    if any(hint in path_name or path_name in hint for hint in title_hints):
        return MatchTier.PARTIAL_NAME

    return None


def compare_candidates(lhs: RecentProjectCandidate, rhs: RecentProjectCandidate) -> int:
    """
    Total order between candidates of the same tier; negative means lhs is preferred.

    The depth rule prefers nested directories over their parents. It is kept for
    compatibility with existing behaviour rather than for a known correctness reason.
    """
    lhs_key = _preference_key(lhs)
    rhs_key = _preference_key(rhs)
    if lhs_key != rhs_key:
        return -1 if lhs_key > rhs_key else 1
    if lhs.path != rhs.path:
        return -1 if lhs.path > rhs.path else 1
    return 0


def _preference_key(candidate: RecentProjectCandidate) -> Tuple[bool, bool, int, int, int, int]:
    return (
        candidate.is_opened,
        candidate.is_last_opened,
        candidate.activation_timestamp,
        candidate.project_open_timestamp,
        candidate.source_rank,
        candidate.depth,
    )


def rank_candidates(
    candidates: Iterable[RecentProjectCandidate],
    title_hints: List[str],
    window_title: Optional[str],
) -> List[Tuple[MatchTier, RecentProjectCandidate]]:
    """Score candidates and sort them best first; unmatched candidates are dropped."""
    scored: List[Tuple[MatchTier, RecentProjectCandidate]] = []
    for candidate in candidates:
        tier = match_tier(candidate, title_hints, window_title)
        if tier is not None:
            scored.append((tier, candidate))

    def compare(lhs, rhs):
        if lhs[0] != rhs[0]:
            return -1 if lhs[0] < rhs[0] else 1
        return compare_candidates(lhs[1], rhs[1])

    scored.sort(key=cmp_to_key(compare))
    return scored


class JetBrainsRecentProjectsResolver:
    """Finds the open JetBrains project from recentProjects.xml metadata."""

    def __init__(self, search_roots: Optional[List[str]] = None):
        """
        Args:
            search_roots: Directories to scan recursively (defaults to the
                JetBrains and Google Application Support folders)
        """
        self.search_roots = search_roots

    def resolve(self, window_title: Optional[str]) -> Optional[str]:
        """
        Pick the project directory that best matches the window title.

        Without title hints, a path is returned only when exactly one distinct
        candidate exists; several unranked candidates are never guessed between.

        Args:
            window_title: Title of the selected IDE window

        Returns:
            Existing project directory, or None
        """
        title_hints = project_name_hints(window_title)
        candidates = self.candidate_entries()
        unique_paths = sorted({candidate.path for candidate in candidates})
        if not unique_paths:
            return None

        if title_hints:
            ranked = rank_candidates(candidates, title_hints, window_title)
            if ranked:
                tier, best = ranked[0]
                logger.debug("JetBrains recents: %s matched at tier %s", best.path, tier.name)
                return best.path

        return unique_paths[0] if len(unique_paths) == 1 else None

    def recent_files(self) -> List[str]:
        """recentProjects.xml files under the search roots, newest first."""
        roots = self.search_roots if self.search_roots is not None else default_search_roots()
        found: List[Tuple[float, str]] = []
        for root in roots:
            if not os.path.isdir(root):
                continue
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames[:] = [name for name in dirnames if not name.startswith(".")]
                if RECENT_PROJECTS_FILE not in filenames:
                    continue
                file_path = os.path.join(dirpath, RECENT_PROJECTS_FILE)
                try:
                    mtime = os.path.getmtime(file_path)
                except OSError:
                    mtime = 0.0
                found.append((mtime, file_path))

        found.sort(reverse=True)
        return [file_path for _, file_path in found]

    def candidate_entries(self) -> List[RecentProjectCandidate]:
        """Existing project directories from every recents file, deduplicated."""
        files = self.recent_files()
        candidates: List[RecentProjectCandidate] = []
        seen = set()

        for index, file_path in enumerate(files):
            file_rank = len(files) - index
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    text = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping unreadable recents file %s: %s", file_path, e)
                continue

            for parsed in parse_entry_metadata(text):
                normalized = normalize_path_token(parsed.path_token)
                if not normalized or not os.path.exists(normalized):
                    continue
                standardized = os.path.normpath(os.path.abspath(normalized))
                key = (standardized, parsed.frame_title or "", parsed.is_last_opened, file_rank)
                if key in seen:
                    continue
                seen.add(key)
                candidates.append(RecentProjectCandidate(
                    path=standardized,
                    frame_title=parsed.frame_title,
                    is_last_opened=parsed.is_last_opened,
                    is_opened=parsed.is_opened,
                    activation_timestamp=parsed.activation_timestamp,
                    project_open_timestamp=parsed.project_open_timestamp,
                    source_rank=file_rank,
                ))

        return candidates
