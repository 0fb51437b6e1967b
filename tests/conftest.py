from pathlib import Path
from typing import Callable

import pytest

from shellporter.cache import reset_cache_store
from shellporter.resolver.models import WindowSnapshot


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    reset_cache_store()
    yield home
    reset_cache_store()


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Create a directory (optionally a git repo) under tmp_path/projects."""

    def _make(relative: str, git: bool = True, files=()) -> Path:
        project = tmp_path / "projects" / relative
        project.mkdir(parents=True, exist_ok=True)
        if git:
            (project / ".git").mkdir(exist_ok=True)
        for name in files:
            target = project / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("", encoding="utf-8")
        return project

    return _make


@pytest.fixture
def trusted_snapshot() -> Callable[..., WindowSnapshot]:
    def _snapshot(title=None, document=None) -> WindowSnapshot:
        return WindowSnapshot(trusted=True, title=title, document=document, window_source="focused")

    return _snapshot
