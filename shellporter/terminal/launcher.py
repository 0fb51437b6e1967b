"""
Open a terminal application at a project directory.

Terminal.app and iTerm2 are only scriptable through AppleScript. kitty and Ghostty are
launched through their CLI binary when one is installed, falling back to `open -a`.
The custom choice runs a user-supplied shell template with `{path}` substituted.
"""

import logging
import os
import shlex
import subprocess
from enum import Enum
from typing import List, Optional, Sequence

from ..exceptions import AppleScriptError, InvalidCustomCommandError, TerminalLaunchError
from ..utils import AppleScriptExecutor, escape_applescript_string

logger = logging.getLogger(__name__)

# iTerm2 sessions are named with this prefix plus the path so they can be reused.
SESSION_TITLE_PREFIX = "shellporter:"

KITTY_EXECUTABLES = (
    "/Applications/kitty.app/Contents/MacOS/kitty",
    "/opt/homebrew/bin/kitty",
    "/usr/local/bin/kitty",
    "/usr/bin/kitty",
)
GHOSTTY_EXECUTABLES = (
    "/Applications/Ghostty.app/Contents/MacOS/Ghostty",
    "/opt/homebrew/bin/ghostty",
    "/usr/local/bin/ghostty",
)


class TerminalChoice(Enum):
    """Supported terminal applications."""
    TERMINAL = "terminal"
    ITERM2 = "iterm2"
    GHOSTTY = "ghostty"
    KITTY = "kitty"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return {
            TerminalChoice.TERMINAL: "Terminal.app",
            TerminalChoice.ITERM2: "iTerm2",
            TerminalChoice.GHOSTTY: "Ghostty",
            TerminalChoice.KITTY: "Kitty",
            TerminalChoice.CUSTOM: "Custom Command",
        }[self]

    @property
    def bundle_identifier(self) -> Optional[str]:
        return {
            TerminalChoice.TERMINAL: "com.apple.Terminal",
            TerminalChoice.ITERM2: "com.googlecode.iterm2",
            TerminalChoice.GHOSTTY: "com.mitchellh.ghostty",
            TerminalChoice.KITTY: "net.kovidgoyal.kitty",
        }.get(self)

    @property
    def application_name(self) -> Optional[str]:
        """App bundle directory name, used to check that the terminal is installed."""
        return {
            TerminalChoice.TERMINAL: "Terminal.app",
            TerminalChoice.ITERM2: "iTerm.app",
            TerminalChoice.GHOSTTY: "Ghostty.app",
            TerminalChoice.KITTY: "kitty.app",
        }.get(self)

    @property
    def default_command_template(self) -> str:
        return {
            TerminalChoice.TERMINAL: "open -a Terminal {path}",
            TerminalChoice.ITERM2: "open -a iTerm {path}",
            TerminalChoice.GHOSTTY: "open -a Ghostty {path}",
            TerminalChoice.KITTY: "open -a kitty --args --directory={path}",
            TerminalChoice.CUSTOM: "open -a Terminal {path}",
        }[self]

    @classmethod
    def from_bundle_identifier(cls, bundle_identifier: str) -> Optional['TerminalChoice']:
        lowered = (bundle_identifier or "").lower()
        for choice in cls:
            if choice.bundle_identifier and choice.bundle_identifier.lower() == lowered:
                return choice
        return None


def build_cd_command(path: str) -> str:
    """
    Build a shell command that changes into path.

    Args:
        path: Directory path

    Returns:
        "cd <quoted path>", safe to paste into any POSIX shell
    """
    return f"cd {shlex.quote(path)}"


def terminal_launch_script(path: str) -> List[str]:
    """
    AppleScript lines that open a Terminal.app tab at path.

    When Terminal is not running, `reopen` creates a window and the command runs in it
    instead of opening a second window.
    """
    command = escape_applescript_string(build_cd_command(path))
    return [
        'tell application "Terminal"',
        'if application "Terminal" is running then',
        f'do script "{command}"',
        'else',
        'reopen',
        'set waitAttempts to 0',
        'repeat while ((count of windows) = 0 and waitAttempts < 40)',
        'delay 0.05',
        'set waitAttempts to waitAttempts + 1',
        'end repeat',
        'if (count of windows) > 0 then',
        f'do script "{command}" in front window',
        'else',
        f'do script "{command}"',
        'end if',
        'end if',
        'activate',
        'end tell',
    ]


def iterm_reuse_script(marker: str) -> List[str]:
    """AppleScript lines that select an existing iTerm2 session named marker."""
    escaped = escape_applescript_string(marker)
    return [
        'tell application "iTerm2"',
        'if not running then return "not-running"',
        'repeat with w in windows',
        'repeat with t in tabs of w',
        'repeat with s in sessions of t',
        f'if name of s is "{escaped}" then',
        'set current window to w',
        'select t',
        'select s',
        'activate',
        'return "reused"',
        'end if',
        'end repeat',
        'end repeat',
        'end repeat',
        'return "not-found"',
        'end tell',
    ]


def iterm_launch_script(path: str, marker: str) -> List[str]:
    """AppleScript lines that open a new iTerm2 tab (or window) at path."""
    command = escape_applescript_string(build_cd_command(path))
    escaped_marker = escape_applescript_string(marker)
    return [
        'tell application "iTerm2"',
        'activate',
        'if (count of windows) > 0 then',
        'tell current window',
        f'set newTab to (create tab with default profile command "{command}")',
        f'set name of current session of newTab to "{escaped_marker}"',
        'end tell',
        'else',
        f'set newWindow to (create window with default profile command "{command}")',
        f'set name of current session of newWindow to "{escaped_marker}"',
        'end if',
        'end tell',
    ]


def render_custom_command(template: str, path: str) -> str:
    """
    Substitute the shell-quoted path into a custom command template.

    Raises:
        InvalidCustomCommandError: If the template is empty
    """
    template = (template or "").strip()
    if not template:
        raise InvalidCustomCommandError("Custom terminal command is empty. Set SHELLPORTER_CUSTOM_COMMAND.")
    return template.replace("{path}", shlex.quote(path))


class TerminalLauncher:
    """Opens the configured terminal at a directory."""

    def __init__(self, executor: Optional[AppleScriptExecutor] = None):
        """
        Args:
            executor: AppleScript runner for Terminal.app and iTerm2
        """
        self.executor = executor or AppleScriptExecutor(timeout=15.0)

    def launch(
        self,
        path: str,
        choice: TerminalChoice,
        custom_template: str = "",
        ghostty_new_window: bool = False,
    ) -> None:
        """
        Open a terminal window or tab at path.

        Args:
            path: Project directory
            choice: Terminal application to use
            custom_template: Shell template used by TerminalChoice.CUSTOM
            ghostty_new_window: Open a separate Ghostty instance instead of reusing one

        Raises:
            InvalidCustomCommandError: If choice is CUSTOM and the template is empty
            TerminalLaunchError: If the terminal could not be started
        """
        if choice is TerminalChoice.GHOSTTY:
            self._launch_ghostty(path, ghostty_new_window)
        elif choice is TerminalChoice.KITTY:
            if not self._launch_binary(KITTY_EXECUTABLES, ["--single-instance", f"--directory={path}"], "Kitty"):
                self._spawn(["/usr/bin/open", "-a", "kitty", "--args", f"--directory={path}"])
        elif choice is TerminalChoice.TERMINAL:
            self._run_script(terminal_launch_script(path))
        elif choice is TerminalChoice.ITERM2:
            self._launch_iterm(path)
        elif choice is TerminalChoice.CUSTOM:
            command = render_custom_command(custom_template, path)
            self._spawn(["/bin/zsh", "-lc", command])
        else:
            raise TerminalLaunchError(f"Unsupported terminal: {choice}")
        logger.info("Launched %s for %s", choice.display_name, path)

    def _launch_ghostty(self, path: str, new_window: bool) -> None:
        if new_window:
            self._spawn(["/usr/bin/open", "-na", "Ghostty", "--args", f"--working-directory={path}"])
            return
        if self._launch_binary(GHOSTTY_EXECUTABLES, ["+new-window", f"--working-directory={path}"], "Ghostty"):
            return
        self._spawn(["/usr/bin/open", "-a", "Ghostty", path])

    def _launch_iterm(self, path: str) -> None:
        marker = SESSION_TITLE_PREFIX + os.path.normpath(path)
        success, stdout, _ = self.executor.execute(iterm_reuse_script(marker))
        if success and stdout == "reused":
            logger.info("Reused iTerm2 session for %s", path)
            return
        self._run_script(iterm_launch_script(path, marker))

    def _launch_binary(self, candidates: Sequence[str], arguments: List[str], label: str) -> bool:
        executable = find_executable(candidates)
        if executable is None:
            logger.info("%s executable not found in known locations; using open fallback.", label)
            return False
        try:
            self._spawn([executable] + arguments)
        except TerminalLaunchError as e:
            logger.info("%s single-instance launch failed (%s); using open fallback.", label, e)
            return False
        return True

    def _run_script(self, lines: List[str]) -> None:
        try:
            self.executor.execute_or_raise(lines)
        except AppleScriptError as e:
            raise TerminalLaunchError(str(e)) from e

    @staticmethod
    def _spawn(arguments: List[str]) -> subprocess.Popen:
        try:
            return subprocess.Popen(arguments, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            raise TerminalLaunchError(f"Could not start {arguments[0]}: {e}") from e


def find_executable(candidates: Sequence[str]) -> Optional[str]:
    """Return the first candidate that is an executable file."""
    for candidate in candidates:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
    return None
