from typing import List

import pytest

from shellporter import main as main_module
from shellporter.resolver.models import EditorFamily, ResolvedContext, ResolverAttempt


class FakeResolver:
    def __init__(self, context: ResolvedContext):
        self.context = context

    def resolve_frontmost(self) -> ResolvedContext:
        return self.context

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None


class FakeLauncher:
    def __init__(self):
        self.launched: List[str] = []

    def launch(self, path, choice, custom_template="", ghostty_new_window=False):
        self.launched.append(path)


def _context(path=None) -> ResolvedContext:
    return ResolvedContext(
        app_name="IDEA",
        bundle_identifier="com.jetbrains.intellij",
        family=EditorFamily.JETBRAINS,
        project_path=path,
        source="AXTitle" if path else "none",
        details="ok" if path else "No resolver strategy produced a valid path.",
        attempts=(ResolverAttempt("AXTitle", bool(path), "details", path),),
        window_title="feed-flow – Main.kt",
    )


def test_resolve_prints_summary_and_succeeds(monkeypatch, capsys) -> None:
    monkeypatch.setattr(main_module, "build_resolver", lambda: FakeResolver(_context("/w/feed-flow")))

    assert main_module.main(["resolve"]) == 0
    output = capsys.readouterr().out
    assert "Resolved: /w/feed-flow" in output
    assert "- [ok] AXTitle path=/w/feed-flow details=details" in output


def test_resolve_exits_nonzero_when_unresolved(monkeypatch, capsys) -> None:
    monkeypatch.setattr(main_module, "build_resolver", lambda: FakeResolver(_context()))

    assert main_module.main(["resolve"]) == 1
    assert "Resolved: no" in capsys.readouterr().out


def test_open_terminal_launches_resolved_path(capsys) -> None:
    launcher = FakeLauncher()

    assert main_module.open_terminal(_context("/w/feed-flow"), launcher)
    assert launcher.launched == ["/w/feed-flow"]


def test_open_terminal_skips_unresolved(capsys) -> None:
    launcher = FakeLauncher()

    assert not main_module.open_terminal(_context(), launcher)
    assert launcher.launched == []


def test_copy_cd_command(capsys) -> None:
    assert main_module.copy_cd_command(_context("/w/my app")) == "cd '/w/my app'"
    assert main_module.copy_cd_command(_context()) is None


def test_parser_rejects_unknown_command() -> None:
    with pytest.raises(SystemExit):
        main_module.build_parser().parse_args(["teleport"])


def test_unwritable_log_path_does_not_stop_startup(monkeypatch, tmp_path, capsys) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setattr(main_module, "LOG_PATH", str(blocker / "app.log"))
    monkeypatch.setattr(main_module, "CACHE_PATH", str(tmp_path / "cache.json"))

    with main_module.build_resolver() as resolver:
        assert resolver.cache_store is not None

    assert "Could not open log file" in capsys.readouterr().out
