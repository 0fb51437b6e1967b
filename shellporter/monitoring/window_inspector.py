"""Frontmost application and window inspection using AppleScript (System Events)."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..resolver.models import WindowSnapshot
from ..utils import AppleScriptExecutor

logger = logging.getLogger(__name__)

# Create a module-level executor instance
_executor = AppleScriptExecutor()

FIELD_SEPARATOR = "|||"

# System Events reports missing Accessibility permission with these errors.
_UNTRUSTED_MARKERS = ("-1719", "-25211", "not allowed assistive access", "assistive access")


@dataclass(frozen=True)
class FrontmostApp:
    """Identity of the frontmost application process."""
    name: str
    bundle_identifier: str
    pid: int


def _is_permission_error(stderr: Optional[str]) -> bool:
    if not stderr:
        return False
    lowered = stderr.lower()
    return any(marker in lowered for marker in _UNTRUSTED_MARKERS)


def get_frontmost_app(executor: Optional[AppleScriptExecutor] = None) -> Optional[FrontmostApp]:
    """
    Get the frontmost application via System Events.

    Returns:
        FrontmostApp, or None if the query fails
    """
    script = '''
    tell application "System Events"
        set frontProc to first application process whose frontmost is true
        set bundleId to bundle identifier of frontProc
        if bundleId is missing value then set bundleId to "unknown"
        return (name of frontProc) & "|||" & bundleId & "|||" & ((unix id of frontProc) as text)
    end tell
    '''
    success, stdout, stderr = (executor or _executor).execute(script)
    if not success or not stdout:
        logger.warning("Could not query frontmost application: %s", stderr)
        return None

    parts = stdout.split(FIELD_SEPARATOR)
    if len(parts) != 3:
        logger.warning("Unexpected frontmost application output: %r", stdout)
        return None
    try:
        pid = int(parts[2].strip())
    except ValueError:
        return None
    return FrontmostApp(name=parts[0].strip() or "Unknown", bundle_identifier=parts[1].strip() or "unknown", pid=pid)


def is_accessibility_trusted(executor: Optional[AppleScriptExecutor] = None) -> bool:
    """
    Check whether this process may read UI element attributes.

    Returns:
        False only when System Events reports missing assistive access
    """
    script = '''
    tell application "System Events"
        set frontProc to first application process whose frontmost is true
        get value of attribute "AXRole" of frontProc
    end tell
    '''
    success, _, stderr = (executor or _executor).execute(script)
    return success or not _is_permission_error(stderr)


def snapshot_window(pid: int, executor: Optional[AppleScriptExecutor] = None) -> WindowSnapshot:
    """
    Capture title and document of the selected window of a process.

    Window priority is focused, then main, then the first window, so another
    project's window is not used when the user has a different one focused.

    Args:
        pid: Unix process id of the application

    Returns:
        WindowSnapshot; trusted=False when Accessibility permission is missing
    """
    script = f'''
    tell application "System Events"
        set proc to first application process whose unix id is {int(pid)}
        set winSource to ""
        set targetWindow to missing value
        try
            set targetWindow to value of attribute "AXFocusedWindow" of proc
            if targetWindow is not missing value then set winSource to "focused"
        end try
        if targetWindow is missing value then
            try
                set targetWindow to value of attribute "AXMainWindow" of proc
                if targetWindow is not missing value then set winSource to "main"
            end try
        end if
        if targetWindow is missing value then
            if (count of windows of proc) > 0 then
                set targetWindow to window 1 of proc
                set winSource to "windows[0]"
            end if
        end if
        if targetWindow is missing value then return "|||" & "|||"
        set winTitle to ""
        try
            set winTitle to value of attribute "AXTitle" of targetWindow
        end try
        if winTitle is missing value then set winTitle to ""
        set winDoc to ""
        try
            set winDoc to value of attribute "AXDocument" of targetWindow
        end try
        if winDoc is missing value then set winDoc to ""
        return winSource & "|||" & winTitle & "|||" & winDoc
    end tell
    '''
    success, stdout, stderr = (executor or _executor).execute(script)
    if not success:
        if _is_permission_error(stderr):
            return WindowSnapshot(trusted=False)
        logger.warning("Window snapshot failed for pid %s: %s", pid, stderr)
        return WindowSnapshot(trusted=True)

    return parse_snapshot_output(stdout)


def parse_snapshot_output(stdout: Optional[str]) -> WindowSnapshot:
    """Parse "source|||title|||document" into a trusted WindowSnapshot."""
    if not stdout:
        return WindowSnapshot(trusted=True)
    parts = stdout.split(FIELD_SEPARATOR)
    while len(parts) < 3:
        parts.append("")
    source, title, document = parts[0].strip(), parts[1], FIELD_SEPARATOR.join(parts[2:]).strip()
    return WindowSnapshot(
        trusted=True,
        title=title.strip() or None,
        document=document or None,
        window_source=source or None,
    )
