"""Terminal launching."""

from .detector import default_terminal, detect_default_terminal, is_installed
from .launcher import (
    TerminalChoice,
    TerminalLauncher,
    build_cd_command,
    render_custom_command,
)

__all__ = [
    'default_terminal',
    'detect_default_terminal',
    'is_installed',
    'TerminalChoice',
    'TerminalLauncher',
    'build_cd_command',
    'render_custom_command',
]
