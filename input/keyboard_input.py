"""
Keyboard Input Provider

Terminal controller: a reader thread puts stdin in cbreak mode and turns
key presses into axis snapshots. POSIX terminals only.
"""

import logging
import select
import sys
import threading
from typing import Callable, Optional

from core.types import AxisState


logger = logging.getLogger(__name__)


# Escape sequences sent by arrow keys
ARROW_KEYS = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
}


def _clamp(value: float, low: float, high: float) -> float:
    return round(max(low, min(high, value)), 3)


class KeyboardInput:
    """
    Terminal keyboard input provider.

    Controls:
    - Arrow keys: Nudge horizontal / vertical
    - W / S: Throttle up / down
    - Space: Center sticks
    - X: Cut throttle
    - Q: Disarm and quit (Ctrl-C works too, via SIGINT)
    """

    def __init__(self, step: float = 0.1, throttle_step: float = 0.1,
                 poll_interval: float = 0.1) -> None:
        """
        Args:
            step: Stick change per arrow key press
            throttle_step: Throttle change per W/S press
            poll_interval: How often the reader thread checks for stop
        """
        self._step = step
        self._throttle_step = throttle_step
        self._poll_interval = poll_interval

        # Replaced, never mutated: readers always see a whole snapshot
        self._state = AxisState.rest()
        self._on_quit: Optional[Callable[[], None]] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._old_settings = None

    async def start(self, on_quit: Optional[Callable[[], None]] = None) -> None:
        """Switch the terminal to cbreak mode and start the reader thread"""
        if self._thread is not None:
            return
        if not sys.stdin.isatty():
            raise RuntimeError("Keyboard input needs an interactive terminal")

        try:
            import termios
            import tty
        except ImportError:
            raise RuntimeError("Keyboard input is not available on this platform, use --input gamepad")

        self._on_quit = on_quit
        self._old_settings = termios.tcgetattr(sys.stdin)
        tty.setcbreak(sys.stdin.fileno())

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._reader, name="keyboard-input", daemon=True)
        self._thread.start()

        logger.info("Controls: arrows=move, W/S=throttle, SPACE=center, X=cut throttle, Q=quit")

    async def stop(self) -> None:
        """Stop the reader thread and restore the terminal"""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._old_settings is not None:
            import termios
            termios.tcsetattr(sys.stdin, termios.TCSADRAIN, self._old_settings)
            self._old_settings = None

    def get_axis_state(self) -> AxisState:
        """Latest snapshot, never blocks"""
        return self._state

    def handle_key(self, key: str) -> None:
        """Apply one key press (single character or arrow escape sequence)"""
        state = self._state
        horizontal, vertical, throttle = state.horizontal, state.vertical, state.throttle
        key = ARROW_KEYS.get(key, key.lower())

        if key == "left":
            horizontal -= self._step
        elif key == "right":
            horizontal += self._step
        elif key == "up":
            vertical += self._step
        elif key == "down":
            vertical -= self._step
        elif key == "w":
            throttle += self._throttle_step
        elif key == "s":
            throttle -= self._throttle_step
        elif key == " ":
            horizontal = vertical = 0.0
        elif key == "x":
            throttle = 0.0
        elif key == "q":
            if self._on_quit is not None:
                self._on_quit()
            return
        else:
            return

        self._state = AxisState(
            horizontal=_clamp(horizontal, -1.0, 1.0),
            vertical=_clamp(vertical, -1.0, 1.0),
            throttle=_clamp(throttle, 0.0, 2.0),
        )
        logger.debug(
            f"Axis: H={self._state.horizontal:+.2f} V={self._state.vertical:+.2f} "
            f"T={self._state.throttle:.2f}"
        )

    def _reader(self) -> None:
        """Reader thread: poll stdin, decode keys"""
        while not self._stop_event.is_set():
            if not select.select([sys.stdin], [], [], self._poll_interval)[0]:
                continue
            key = sys.stdin.read(1)
            if key == "\x1b":
                # Arrow keys arrive as ESC [ X
                if select.select([sys.stdin], [], [], 0.01)[0]:
                    key += sys.stdin.read(2)
            self.handle_key(key)
