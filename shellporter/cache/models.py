"""Data models for the resolution cache."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def format_timestamp(timestamp: float) -> str:
    """Epoch seconds -> ISO-8601 UTC string, as written to the cache file."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[float]:
    """ISO-8601 string (or epoch number) -> epoch seconds; None if unparseable."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


@dataclass
class CacheEntry:
    """A previously resolved project path and when it was last used."""
    path: str
    last_used: float

    def to_json(self) -> Dict[str, str]:
        return {"path": self.path, "lastUsed": format_timestamp(self.last_used)}

    @classmethod
    def from_json(cls, value: Any, loaded_at: float) -> Optional["CacheEntry"]:
        """
        Decode one persisted value.

        Args:
            value: Either a {"path", "lastUsed"} record or a legacy bare path string
            loaded_at: Timestamp assigned to legacy entries and to records with a bad date

        Returns:
            CacheEntry, or None if the value is not usable
        """
        if isinstance(value, str):
            return cls(path=value, last_used=loaded_at) if value else None
        if not isinstance(value, dict):
            return None
        path = value.get("path")
        if not isinstance(path, str) or not path:
            return None
        last_used = parse_timestamp(value.get("lastUsed"))
        return cls(path=path, last_used=last_used if last_used is not None else loaded_at)
