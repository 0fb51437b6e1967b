"""Main entry point for Shellporter."""

import argparse
import sys
from typing import List, Optional

from .api_server import record_context, serve_forever
from .cache import initialize_cache_store
from .config import (
    API_PORT, CACHE_MAX_ENTRIES, CACHE_PATH, COPY_HOTKEY, CUSTOM_COMMAND,
    GHOSTTY_NEW_WINDOW, HOTKEY, LOG_LEVEL, LOG_PATH, TERMINAL
)
from .diagnostics import configure_logging
from .exceptions import ShellporterError, TerminalLaunchError, WindowInspectionError
from .resolver import FocusedProjectResolver, ResolvedContext
from .terminal import TerminalChoice, TerminalLauncher, build_cd_command


def print_help():
    """Print welcome message and help text."""
    print("=" * 60)
    print("Shellporter")
    print("=" * 60)
    print("\n⌨️  Hotkeys:")
    print(f"  - Open terminal: Press {HOTKEY} (works from any window)")
    print(f"  - Copy cd command: Press {COPY_HOTKEY}")
    print(f"\nTerminal: {TerminalChoice(TERMINAL).display_name}")
    print(f"Log file: {LOG_PATH}")
    print("=" * 60)
    print("\nPress Ctrl+C to stop.\n")


def build_resolver() -> FocusedProjectResolver:
    """Set up logging and the cache, and create a resolver."""
    try:
        configure_logging(LOG_PATH, LOG_LEVEL)
    except OSError as e:
        print(f"Warning: Could not open log file {LOG_PATH}: {e}\n")
    cache_store = initialize_cache_store(CACHE_PATH, CACHE_MAX_ENTRIES)
    return FocusedProjectResolver(cache_store=cache_store)


def resolve_command(resolver: FocusedProjectResolver) -> int:
    """Resolve the focused window and print the diagnostics summary."""
    context = resolver.resolve_frontmost()
    record_context(context)
    print(context.diagnostics_summary)
    return 0 if context.resolved else 1


def open_terminal(context: ResolvedContext, launcher: Optional[TerminalLauncher] = None) -> bool:
    """
    Launch the configured terminal at the resolved project path.

    Returns:
        True if a terminal was launched
    """
    if not context.resolved:
        print(f"❌ Could not resolve a project for {context.app_name}: {context.details}")
        return False
    launcher = launcher or TerminalLauncher()
    try:
        launcher.launch(
            context.project_path,
            TerminalChoice(TERMINAL),
            custom_template=CUSTOM_COMMAND,
            ghostty_new_window=GHOSTTY_NEW_WINDOW,
        )
    except TerminalLaunchError as e:
        print(f"❌ Could not open terminal: {e}")
        return False
    print(f"✓ Opened {context.project_path} ({context.source})")
    return True


def copy_cd_command(context: ResolvedContext) -> Optional[str]:
    """Print the cd command for the resolved project, or None when unresolved."""
    if not context.resolved:
        print(f"❌ Could not resolve a project for {context.app_name}: {context.details}")
        return None
    command = build_cd_command(context.project_path)
    print(command)
    return command


def listen(resolver: FocusedProjectResolver) -> int:
    """Run the hotkey loop until interrupted."""
    from .hotkey import COPY_ACTION, HotkeyListener

    try:
        hotkey_listener = HotkeyListener(HOTKEY, COPY_HOTKEY)
        hotkey_listener.start()
    except (RuntimeError, ValueError) as e:
        print(f"Error initializing hotkey listener: {e}")
        print("Please check your Accessibility permissions in System Settings.")
        return 1

    print_help()
    launcher = TerminalLauncher()
    try:
        while True:
            action = hotkey_listener.wait_for_hotkey(timeout=0.5)
            if action is None:
                continue
            try:
                context = resolver.resolve_frontmost()
            except WindowInspectionError as e:
                print(f"❌ {e}")
                continue
            record_context(context)
            if action == COPY_ACTION:
                copy_cd_command(context)
            else:
                open_terminal(context, launcher)
    except KeyboardInterrupt:
        print("\nExiting...")
    finally:
        hotkey_listener.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellporter",
        description="Open a terminal at the project of the focused IDE window.",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("resolve", help="Print how the focused window resolves")
    subparsers.add_parser("open", help="Resolve the focused window and open a terminal there")
    subparsers.add_parser("listen", help="Listen for global hotkeys (default)")
    serve_parser = subparsers.add_parser("serve", help="Run the local diagnostics API")
    serve_parser.add_argument("--port", type=int, default=API_PORT, help="Port on 127.0.0.1")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)
    command = args.command or "listen"

    with build_resolver() as resolver:
        try:
            if command == "resolve":
                return resolve_command(resolver)
            if command == "open":
                context = resolver.resolve_frontmost()
                record_context(context)
                return 0 if open_terminal(context) else 1
            if command == "serve":
                serve_forever(resolver, args.port)
                return 0
            return listen(resolver)
        except ShellporterError as e:
            print(f"❌ {e}")
            return 1


if __name__ == "__main__":
    sys.exit(main())
