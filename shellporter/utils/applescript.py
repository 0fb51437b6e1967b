"""AppleScript execution utilities."""

import logging
import subprocess
from typing import List, Optional, Tuple, Union

from ..exceptions import AppleScriptError

logger = logging.getLogger(__name__)


def escape_applescript_string(text: str) -> str:
    """
    Escape special characters for AppleScript string literals.

    Args:
        text: String to escape

    Returns:
        Escaped string safe for use in AppleScript
    """
    # Backslashes first
    text = text.replace("\\", "\\\\")
    text = text.replace('"', '\\"')
    text = text.replace("\n", "\\n")
    text = text.replace("\r", "\\r")
    text = text.replace("\t", "\\t")
    return text


class AppleScriptExecutor:
    """Centralized AppleScript execution with standardized error handling."""

    def __init__(self, timeout: Optional[float] = 5.0):
        """
        Args:
            timeout: Seconds to wait for osascript (None = no limit)
        """
        self.timeout = timeout

    def execute(self, script: Union[str, List[str]]) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Execute an AppleScript program.

        Args:
            script: AppleScript source, or a list of lines passed as separate -e arguments

        Returns:
            Tuple of (success, stdout, stderr)
            - success: True if return code is 0, False otherwise
            - stdout: Standard output (None if empty)
            - stderr: Standard error (None if empty)
        """
        lines = [script] if isinstance(script, str) else list(script)
        command = ["osascript"]
        for line in lines:
            command.extend(["-e", line])

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning("osascript timed out after %ss", self.timeout)
            return False, None, "osascript timed out"
        except OSError as e:
            logger.warning("osascript could not be started: %s", e)
            return False, None, str(e)

        success = result.returncode == 0
        stdout = result.stdout.strip() if result.stdout and result.stdout.strip() else None
        stderr = result.stderr.strip() if result.stderr and result.stderr.strip() else None
        return success, stdout, stderr

    def execute_or_raise(self, script: Union[str, List[str]]) -> Optional[str]:
        """
        Execute an AppleScript program, raising on failure.

        Returns:
            Standard output or None

        Raises:
            AppleScriptError: If osascript exits non-zero or cannot run
        """
        success, stdout, stderr = self.execute(script)
        if not success:
            raise AppleScriptError(stderr or "AppleScript execution failed")
        return stdout
