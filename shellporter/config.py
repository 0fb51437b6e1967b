"""Configuration for Shellporter."""

import os
from dotenv import load_dotenv

from .exceptions import ConfigError
from .terminal.detector import default_terminal

# Load environment variables from .env file
load_dotenv()

VALID_TERMINALS = ["terminal", "iterm2", "ghostty", "kitty", "custom"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration class for Shellporter."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Terminal to open: "terminal" (Terminal.app), "iterm2", "ghostty", "kitty" or "custom".
        # Unset means the installed terminal registered for shell scripts, else Terminal.app.
        detected = default_terminal()
        self.terminal = os.getenv("SHELLPORTER_TERMINAL", detected.value).strip().lower()

        # Shell command template for the custom terminal; {path} is replaced with the quoted path
        self.custom_command = os.getenv("SHELLPORTER_CUSTOM_COMMAND", detected.default_command_template)
        self.ghostty_new_window = _env_flag("SHELLPORTER_GHOSTTY_NEW_WINDOW")

        # Global hotkeys (e.g., 'ctrl+alt+cmd+t')
        self.hotkey = os.getenv("SHELLPORTER_HOTKEY", "ctrl+alt+cmd+t")
        self.copy_hotkey = os.getenv("SHELLPORTER_COPY_HOTKEY", "ctrl+alt+cmd+c")

        # Resolution cache
        self.cache_path = os.path.expanduser(os.getenv(
            "SHELLPORTER_CACHE_PATH",
            "~/Library/Application Support/Shellporter/resolution-cache.json",
        ))
        self.cache_max_entries = self._int_env("SHELLPORTER_CACHE_MAX_ENTRIES", "200")

        # Logging
        self.log_path = os.path.expanduser(os.getenv("SHELLPORTER_LOG_PATH", "~/Library/Logs/Shellporter/app.log"))
        self.log_level = os.getenv("SHELLPORTER_LOG_LEVEL", "INFO").strip().upper()

        # Local diagnostics API
        self.api_port = self._int_env("SHELLPORTER_API_PORT", "8771")

        # Validate configuration
        self._validate()

    @staticmethod
    def _int_env(name: str, default: str) -> int:
        raw = os.getenv(name, default)
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{name} must be an integer, got '{raw}'")

    def _validate(self):
        """Validate configuration values."""
        if self.terminal not in VALID_TERMINALS:
            raise ConfigError(
                f"Invalid terminal '{self.terminal}'. "
                f"Must be one of: {', '.join(VALID_TERMINALS)}"
            )

        if self.terminal == "custom" and not self.custom_command.strip():
            raise ConfigError("SHELLPORTER_CUSTOM_COMMAND must not be empty when the custom terminal is selected")

        if self.cache_max_entries < 1:
            raise ConfigError(f"Cache max entries must be positive, got {self.cache_max_entries}")

        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )

        if not 0 < self.api_port < 65536:
            raise ConfigError(f"API port must be between 1 and 65535, got {self.api_port}")


# Create a global config instance
_config = Config()

# Expose configuration values as module-level variables
TERMINAL = _config.terminal
CUSTOM_COMMAND = _config.custom_command
GHOSTTY_NEW_WINDOW = _config.ghostty_new_window
HOTKEY = _config.hotkey
COPY_HOTKEY = _config.copy_hotkey
CACHE_PATH = _config.cache_path
CACHE_MAX_ENTRIES = _config.cache_max_entries
LOG_PATH = _config.log_path
LOG_LEVEL = _config.log_level
API_PORT = _config.api_port

__all__ = [
    "Config",
    "TERMINAL",
    "CUSTOM_COMMAND",
    "GHOSTTY_NEW_WINDOW",
    "HOTKEY",
    "COPY_HOTKEY",
    "CACHE_PATH",
    "CACHE_MAX_ENTRIES",
    "LOG_PATH",
    "LOG_LEVEL",
    "API_PORT",
]
