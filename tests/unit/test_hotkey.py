import pytest

# pynput needs a display backend on Linux; skip where it cannot load.
hotkey = pytest.importorskip("shellporter.hotkey")


def test_parse_hotkey_maps_modifiers() -> None:
    assert hotkey.parse_hotkey("ctrl+alt+cmd+t") == "<ctrl>+<alt>+<cmd>+t"
    assert hotkey.parse_hotkey("Option+Shift+F8") == "<alt>+<shift>+<f8>"


def test_modifier_only_hotkey_is_rejected() -> None:
    with pytest.raises(ValueError):
        hotkey.parse_hotkey("ctrl+alt")


def test_bindings_map_combinations_to_actions() -> None:
    listener = hotkey.HotkeyListener("ctrl+alt+cmd+t", "ctrl+alt+cmd+c")

    assert listener.bindings() == {
        "<ctrl>+<alt>+<cmd>+t": hotkey.OPEN_ACTION,
        "<ctrl>+<alt>+<cmd>+c": hotkey.COPY_ACTION,
    }


def test_duplicate_copy_hotkey_is_rejected() -> None:
    with pytest.raises(ValueError):
        hotkey.HotkeyListener("ctrl+alt+cmd+t", "control+option+command+t").bindings()


def test_wait_for_hotkey_returns_queued_action() -> None:
    listener = hotkey.HotkeyListener()
    listener._on_action(hotkey.COPY_ACTION)

    assert listener.wait_for_hotkey(timeout=0.1) == hotkey.COPY_ACTION
    assert listener.wait_for_hotkey(timeout=0.01) is None
