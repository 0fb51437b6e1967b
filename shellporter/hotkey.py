"""Global hotkey listener for opening a terminal at the focused project."""

import logging
import threading
from queue import Empty, Queue
from typing import Dict, Optional

from pynput import keyboard

logger = logging.getLogger(__name__)

OPEN_ACTION = "open"
COPY_ACTION = "copy"

# Map common key names to pynput format
_KEY_MAP = {
    'cmd': '<cmd>',
    'command': '<cmd>',
    'ctrl': '<ctrl>',
    'control': '<ctrl>',
    'alt': '<alt>',
    'option': '<alt>',
    'shift': '<shift>',
    'space': '<space>',
    'enter': '<enter>',
    'tab': '<tab>',
    'esc': '<esc>',
}
_MODIFIERS = {'<cmd>', '<ctrl>', '<alt>', '<shift>'}


def parse_hotkey(hotkey_str: str) -> str:
    """
    Parse hotkey string into pynput format.

    Examples:
        'ctrl+alt+cmd+t' -> '<ctrl>+<alt>+<cmd>+t'
        'cmd+shift+f8' -> '<cmd>+<shift>+<f8>'

    Raises:
        ValueError: If the combination has no non-modifier key
    """
    parsed = []
    for part in hotkey_str.lower().split('+'):
        part = part.strip()
        if not part:
            continue
        if part in _KEY_MAP:
            parsed.append(_KEY_MAP[part])
        elif len(part) > 1 and part.startswith('f') and part[1:].isdigit():
            parsed.append(f'<{part}>')
        else:
            parsed.append(part)

    if not parsed or all(key in _MODIFIERS for key in parsed):
        raise ValueError(f"Hotkey '{hotkey_str}' needs a non-modifier key (e.g. 'ctrl+alt+cmd+t')")
    return '+'.join(parsed)


class HotkeyListener:
    """Global hotkey listener that works from any application."""

    def __init__(self, hotkey: Optional[str] = None, copy_hotkey: Optional[str] = None):
        """
        Initialize hotkey listener.

        Args:
            hotkey: Combination that opens a terminal (default 'ctrl+alt+cmd+t')
            copy_hotkey: Combination that copies the cd command; None disables it
        """
        self.hotkey = hotkey or 'ctrl+alt+cmd+t'
        self.copy_hotkey = copy_hotkey
        self.event_queue: Queue = Queue()
        self.listener = None
        self.running = False

    def bindings(self) -> Dict[str, str]:
        """Map of pynput combination -> action name."""
        bindings = {parse_hotkey(self.hotkey): OPEN_ACTION}
        if self.copy_hotkey:
            copy_combo = parse_hotkey(self.copy_hotkey)
            if copy_combo in bindings:
                raise ValueError(f"Copy hotkey '{self.copy_hotkey}' duplicates the open hotkey")
            bindings[copy_combo] = COPY_ACTION
        return bindings

    def _on_action(self, action: str) -> None:
        """Called from the pynput thread when a combination fires."""
        self.event_queue.put(action)

    def start(self) -> None:
        """Start listening for hotkeys in background thread."""
        if self.running:
            return

        handlers = {
            combo: (lambda action=action: self._on_action(action))
            for combo, action in self.bindings().items()
        }
        try:
            self.listener = keyboard.GlobalHotKeys(handlers)
        except Exception as e:
            raise RuntimeError(
                f"Failed to register hotkey '{self.hotkey}': {e}\n"
                "On macOS, you may need to grant Accessibility permissions:\n"
                "System Settings > Privacy & Security > Accessibility > Add Terminal"
            ) from e

        self.running = True

        def run_listener():
            try:
                self.listener.start()
                self.listener.join()
            except KeyError as e:
                # pynput raises KeyError('AXIsProcessTrusted') when Accessibility is not granted
                if 'AXIsProcessTrusted' in str(e):
                    logger.warning("Hotkey listener is not trusted for Accessibility; events may be missed")
                else:
                    logger.exception("Error in hotkey listener")
            except Exception:
                logger.exception("Error in hotkey listener")

        thread = threading.Thread(target=run_listener, daemon=True)
        thread.start()
        logger.info("Global hotkeys registered: %s", ", ".join(self.bindings()))

    def stop(self) -> None:
        """Stop listening for hotkeys."""
        if self.listener:
            self.listener.stop()
        self.running = False

    def wait_for_hotkey(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Wait for a hotkey press.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Returns:
            OPEN_ACTION or COPY_ACTION, or None on timeout
        """
        try:
            return self.event_queue.get(timeout=timeout)
        except Empty:
            return None
