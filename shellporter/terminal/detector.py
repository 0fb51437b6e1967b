"""
Detect the user's default terminal.

macOS records the app chosen to open shell scripts in the LaunchServices handler list.
When that app is one of the supported terminals and is installed it becomes the default
choice; otherwise Terminal.app is used.
"""

import logging
import os
import plistlib
from typing import Any, Dict, List, Optional, Sequence

from .launcher import TerminalChoice

logger = logging.getLogger(__name__)

LAUNCH_SERVICES_PLIST = (
    "~/Library/Preferences/com.apple.LaunchServices/com.apple.launchservices.secure.plist"
)

# Checked in order; the first handler that maps to a supported terminal wins.
SHELL_SCRIPT_CONTENT_TYPES = (
    "public.shell-script",
    "public.unix-executable",
    "com.apple.terminal.shell-script",
)

HANDLER_ROLE_KEYS = ("LSHandlerRoleAll", "LSHandlerRoleShell", "LSHandlerRoleViewer")

APPLICATION_DIRECTORIES = (
    "/Applications",
    "/System/Applications/Utilities",
    "/Applications/Utilities",
    "~/Applications",
)


def _load_handlers(plist_path: str) -> List[Dict[str, Any]]:
    try:
        with open(plist_path, "rb") as f:
            data = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError) as e:
        logger.debug("No LaunchServices handlers at %s: %s", plist_path, e)
        return []
    handlers = data.get("LSHandlers") if isinstance(data, dict) else None
    if not isinstance(handlers, list):
        return []
    return [handler for handler in handlers if isinstance(handler, dict)]


def _handler_bundle_identifier(handler: Dict[str, Any]) -> Optional[str]:
    for key in HANDLER_ROLE_KEYS:
        value = handler.get(key)
        if isinstance(value, str) and value and value != "-":
            return value
    return None


def detect_default_terminal(plist_path: Optional[str] = None) -> Optional[TerminalChoice]:
    """
    Find the supported terminal registered to open shell scripts.

    Args:
        plist_path: LaunchServices preferences file (defaults to the user's)

    Returns:
        The matching TerminalChoice, or None when no supported terminal is registered
    """
    handlers = _load_handlers(os.path.expanduser(plist_path or LAUNCH_SERVICES_PLIST))
    for content_type in SHELL_SCRIPT_CONTENT_TYPES:
        for handler in handlers:
            if str(handler.get("LSHandlerContentType", "")).lower() != content_type:
                continue
            bundle_identifier = _handler_bundle_identifier(handler)
            choice = TerminalChoice.from_bundle_identifier(bundle_identifier) if bundle_identifier else None
            if choice is not None:
                return choice
    return None


def is_installed(choice: TerminalChoice, search_dirs: Optional[Sequence[str]] = None) -> bool:
    """True when the terminal's app bundle exists; the custom choice always counts as installed."""
    app_name = choice.application_name
    if app_name is None:
        return True
    for directory in search_dirs if search_dirs is not None else APPLICATION_DIRECTORIES:
        if os.path.isdir(os.path.join(os.path.expanduser(directory), app_name)):
            return True
    return False


def default_terminal(
    plist_path: Optional[str] = None,
    search_dirs: Optional[Sequence[str]] = None,
) -> TerminalChoice:
    """The detected terminal when it is installed, otherwise Terminal.app."""
    detected = detect_default_terminal(plist_path)
    if detected is not None and is_installed(detected, search_dirs):
        logger.info("Detected system terminal handler: %s", detected.display_name)
        return detected
    if detected is not None:
        logger.info("Detected terminal %s is not installed; using Terminal.app", detected.display_name)
    return TerminalChoice.TERMINAL
