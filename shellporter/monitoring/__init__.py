"""Window inspection for the frontmost application."""

from .window_inspector import (
    FrontmostApp,
    get_frontmost_app,
    is_accessibility_trusted,
    parse_snapshot_output,
    snapshot_window,
)

__all__ = [
    'FrontmostApp',
    'get_frontmost_app',
    'is_accessibility_trusted',
    'parse_snapshot_output',
    'snapshot_window',
]
