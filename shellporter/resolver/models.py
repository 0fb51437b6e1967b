"""Data models for project path resolution."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class EditorFamily(Enum):
    """Closed set of editor families that resolve project paths alike."""
    JETBRAINS = "jetbrains"
    VSCODE = "vscode"
    CURSOR = "cursor"
    ANTIGRAVITY = "antigravity"
    XCODE = "xcode"
    UNKNOWN = "unknown"

    @property
    def is_electron(self) -> bool:
        """True for the Electron editors that keep a storage.json recency file."""
        return self in (EditorFamily.VSCODE, EditorFamily.CURSOR, EditorFamily.ANTIGRAVITY)


@dataclass(frozen=True)
class WindowSnapshot:
    """Attributes of the selected IDE window, captured once per resolution."""
    trusted: bool
    title: Optional[str] = None
    document: Optional[str] = None
    window_source: Optional[str] = None


@dataclass(frozen=True)
class ResolverAttempt:
    """One strategy invocation, recorded for diagnostics."""
    strategy: str
    success: bool
    details: str
    candidate_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "success": self.success,
            "details": self.details,
            "candidate_path": self.candidate_path,
        }


@dataclass(frozen=True)
class ResolvedContext:
    """
    Final output of a resolution call.

    Carries the resolved path (if any), the strategy that produced it and every
    attempt made on the way, so a failed resolution can be diagnosed after the fact.
    """
    app_name: str
    bundle_identifier: str
    family: EditorFamily
    project_path: Optional[str]
    source: str
    details: str
    attempts: Tuple[ResolverAttempt, ...] = ()
    window_title: Optional[str] = None
    document_value: Optional[str] = None
    window_source: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.project_path is not None

    @property
    def diagnostics_summary(self) -> str:
        """Human readable multi-line summary, suitable for copying into a bug report."""
        lines = [
            f"App: {self.app_name}",
            f"Bundle: {self.bundle_identifier}",
            f"IDE Family: {self.family.value}",
            f"Resolved: {self.project_path or 'no'}",
            f"Source: {self.source}",
            f"Details: {self.details}",
        ]
        if self.window_title is not None:
            lines.append(f"Window Title: {self.window_title}")
        if self.document_value is not None:
            lines.append(f"AXDocument: {self.document_value}")
        if self.window_source is not None:
            lines.append(f"Window Source: {self.window_source}")
        lines.append("Attempts:")
        if not self.attempts:
            lines.append("- (none)")
        for attempt in self.attempts:
            status = "ok" if attempt.success else "fail"
            path = attempt.candidate_path or "-"
            lines.append(f"- [{status}] {attempt.strategy} path={path} details={attempt.details}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app_name": self.app_name,
            "bundle_identifier": self.bundle_identifier,
            "family": self.family.value,
            "project_path": self.project_path,
            "source": self.source,
            "details": self.details,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
            "window_title": self.window_title,
            "document_value": self.document_value,
            "window_source": self.window_source,
        }


@dataclass(frozen=True)
class RecentProjectCandidate:
    """A project directory found in a JetBrains recentProjects.xml file."""
    path: str
    frame_title: Optional[str] = None
    is_last_opened: bool = False
    is_opened: bool = False
    activation_timestamp: int = 0
    project_open_timestamp: int = 0
    source_rank: int = 0
    depth: int = field(init=False)

    def __post_init__(self):
        components: List[str] = [part for part in self.path.split(os.sep) if part]
        # The filesystem root counts as one component.
        object.__setattr__(self, "depth", len(components) + 1)
