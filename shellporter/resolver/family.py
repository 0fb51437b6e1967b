"""Classify the frontmost application into an editor family."""

from .models import EditorFamily

JETBRAINS_PREFIXES = (
    "com.jetbrains.",
    "org.jetbrains.",
    "com.intellij.",
    "com.google.android.studio",
)

VSCODE_BUNDLES = frozenset({
    "com.microsoft.vscode",
    "com.microsoft.vscodeinsiders",
    "com.vscodium",
})

CURSOR_BUNDLE = "com.todesktop.230313mzl4w4u92"
ANTIGRAVITY_BUNDLE = "com.google.antigravity"
XCODE_BUNDLE = "com.apple.dt.xcode"


def classify(bundle_identifier: str) -> EditorFamily:
    """
    Map an application bundle identifier to its editor family.

    Args:
        bundle_identifier: Application identifier, e.g. "com.jetbrains.pycharm"

    Returns:
        The matching EditorFamily, or EditorFamily.UNKNOWN
    """
    bundle = (bundle_identifier or "").lower()
    if bundle.startswith(JETBRAINS_PREFIXES):
        return EditorFamily.JETBRAINS
    if bundle in VSCODE_BUNDLES:
        return EditorFamily.VSCODE
    if "cursor" in bundle or bundle == CURSOR_BUNDLE:
        return EditorFamily.CURSOR
    if bundle == ANTIGRAVITY_BUNDLE:
        return EditorFamily.ANTIGRAVITY
    if bundle == XCODE_BUNDLE:
        return EditorFamily.XCODE
    return EditorFamily.UNKNOWN
