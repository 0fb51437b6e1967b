"""Custom exception classes for Shellporter."""


class ShellporterError(Exception):
    """Base exception for Shellporter errors."""
    pass


class ConfigError(ShellporterError, ValueError):
    """Exception raised for invalid configuration values."""
    pass


class AppleScriptError(ShellporterError):
    """Exception raised for AppleScript execution errors."""
    pass


class WindowInspectionError(ShellporterError):
    """Exception raised when the frontmost application cannot be inspected."""
    pass


class TerminalLaunchError(ShellporterError):
    """Exception raised when a terminal cannot be opened."""
    pass


class InvalidCustomCommandError(TerminalLaunchError):
    """Exception raised when the custom terminal command template is empty."""
    pass
