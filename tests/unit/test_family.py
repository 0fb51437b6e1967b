import pytest

from shellporter.resolver.family import classify
from shellporter.resolver.models import EditorFamily


@pytest.mark.parametrize(
    "bundle, family",
    [
        ("com.jetbrains.intellij", EditorFamily.JETBRAINS),
        ("com.jetbrains.pycharm.ce", EditorFamily.JETBRAINS),
        ("com.google.android.studio", EditorFamily.JETBRAINS),
        ("com.microsoft.VSCode", EditorFamily.VSCODE),
        ("com.microsoft.VSCodeInsiders", EditorFamily.VSCODE),
        ("com.todesktop.230313mzl4w4u92", EditorFamily.CURSOR),
        ("com.google.antigravity", EditorFamily.ANTIGRAVITY),
        ("com.apple.dt.Xcode", EditorFamily.XCODE),
        ("com.apple.Safari", EditorFamily.UNKNOWN),
        ("", EditorFamily.UNKNOWN),
    ],
)
def test_classify_maps_bundle_identifiers_case_insensitively(bundle: str, family: EditorFamily) -> None:
    assert classify(bundle) is family


def test_classify_handles_missing_bundle_identifier() -> None:
    assert classify(None) is EditorFamily.UNKNOWN  # type: ignore[arg-type]


def test_electron_families() -> None:
    electron = {family for family in EditorFamily if family.is_electron}
    assert electron == {EditorFamily.VSCODE, EditorFamily.CURSOR, EditorFamily.ANTIGRAVITY}
