import plistlib
from pathlib import Path

from shellporter.terminal import TerminalChoice
from shellporter.terminal.detector import default_terminal, detect_default_terminal, is_installed


def _write_handlers(path: Path, handlers) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        plistlib.dump({"LSHandlers": handlers}, f)
    return str(path)


def _install(apps_dir: Path, app_name: str) -> str:
    (apps_dir / app_name).mkdir(parents=True)
    return str(apps_dir)


def test_shell_script_handler_maps_to_terminal(tmp_path: Path) -> None:
    plist = _write_handlers(tmp_path / "ls.plist", [
        {"LSHandlerContentType": "public.html", "LSHandlerRoleAll": "com.apple.safari"},
        {"LSHandlerContentType": "public.shell-script", "LSHandlerRoleShell": "com.googlecode.iTerm2"},
    ])

    assert detect_default_terminal(plist) is TerminalChoice.ITERM2


def test_unsupported_handler_is_skipped_for_later_content_types(tmp_path: Path) -> None:
    plist = _write_handlers(tmp_path / "ls.plist", [
        {"LSHandlerContentType": "public.shell-script", "LSHandlerRoleAll": "com.sublimetext.4"},
        {"LSHandlerContentType": "public.unix-executable", "LSHandlerRoleAll": "net.kovidgoyal.kitty"},
    ])

    assert detect_default_terminal(plist) is TerminalChoice.KITTY


def test_missing_or_corrupt_plist_detects_nothing(tmp_path: Path) -> None:
    corrupt = tmp_path / "corrupt.plist"
    corrupt.write_bytes(b"not a plist")

    assert detect_default_terminal(str(tmp_path / "absent.plist")) is None
    assert detect_default_terminal(str(corrupt)) is None


def test_is_installed_checks_application_bundles(tmp_path: Path) -> None:
    apps = _install(tmp_path / "Applications", "Ghostty.app")

    assert is_installed(TerminalChoice.GHOSTTY, [apps])
    assert not is_installed(TerminalChoice.KITTY, [apps])
    assert is_installed(TerminalChoice.CUSTOM, [])


def test_default_terminal_requires_installed_app(tmp_path: Path) -> None:
    plist = _write_handlers(tmp_path / "ls.plist", [
        {"LSHandlerContentType": "public.shell-script", "LSHandlerRoleAll": "com.mitchellh.ghostty"},
    ])
    empty_apps = tmp_path / "none"
    empty_apps.mkdir()

    assert default_terminal(plist, [str(empty_apps)]) is TerminalChoice.TERMINAL
    assert default_terminal(plist, [_install(tmp_path / "Applications", "Ghostty.app")]) is TerminalChoice.GHOSTTY
    assert default_terminal(str(tmp_path / "absent.plist"), []) is TerminalChoice.TERMINAL
