"""
Gamepad Input Provider

Reads control input from USB/wireless game controllers via pygame.
"""

import logging
from typing import Callable, Optional

try:
    import pygame
    HAS_PYGAME = True
except ImportError:
    HAS_PYGAME = False

from core.types import AxisState


logger = logging.getLogger(__name__)


class GamepadInput:
    """
    Game controller input provider.

    Maps gamepad controls to drone axes:
    - Left stick: Horizontal / vertical
    - Right stick Y: Throttle (centered = 1.0, up = 2.0, down = 0.0)
    - Start button: Quit (disarm and land)
    """

    def __init__(
        self,
        deadzone: float = 0.1,
        axis_horizontal: int = 0,
        axis_vertical: int = 1,
        axis_throttle: int = 3,
        quit_button: int = 7,
    ) -> None:
        """
        Initialize gamepad input.

        Args:
            deadzone: Ignore stick movements below this threshold
            axis_horizontal: Left stick X axis index
            axis_vertical: Left stick Y axis index
            axis_throttle: Right stick Y axis index
            quit_button: Button index that requests shutdown
        """
        if not HAS_PYGAME:
            raise RuntimeError(
                "pygame not installed. Install with: pip install pygame"
            )

        self._deadzone = deadzone
        self._axis_horizontal = axis_horizontal
        self._axis_vertical = axis_vertical
        self._axis_throttle = axis_throttle
        self._quit_button = quit_button

        self._joystick: Optional["pygame.joystick.Joystick"] = None
        self._running = False
        self._on_quit: Optional[Callable[[], None]] = None
        self._last_state = AxisState.rest()

    async def start(self, on_quit: Optional[Callable[[], None]] = None) -> None:
        """Initialize pygame and connect to controller"""
        if self._running:
            return

        logger.info("Initializing gamepad input...")
        self._on_quit = on_quit

        pygame.init()
        pygame.joystick.init()

        joystick_count = pygame.joystick.get_count()
        logger.info(f"Found {joystick_count} game controller(s)")

        if joystick_count == 0:
            raise RuntimeError("No game controllers found")

        # Use first controller
        self._joystick = pygame.joystick.Joystick(0)
        self._joystick.init()
        logger.info(f"Selected: {self._joystick.get_name()}")
        logger.info(f"Axes: {self._joystick.get_numaxes()}, Buttons: {self._joystick.get_numbuttons()}")
        logger.info("Controls:")
        logger.info("  Left stick: Horizontal / vertical")
        logger.info("  Right stick up/down: Throttle")
        logger.info("  Start: Disarm and quit")

        self._running = True

    async def stop(self) -> None:
        """Disconnect from controller"""
        logger.info("Stopping gamepad input")
        self._running = False

        if self._joystick:
            self._joystick.quit()
            self._joystick = None

        pygame.joystick.quit()
        pygame.quit()

    def get_axis_state(self) -> AxisState:
        """Read current controller state"""
        if not self._running or not self._joystick:
            return self._last_state

        # Process pygame events (required to update joystick state)
        pygame.event.pump()

        horizontal = self._read_axis(self._axis_horizontal)
        # Most controllers have up=negative, we want up=positive
        vertical = -self._read_axis(self._axis_vertical)
        throttle = 1.0 - self._read_axis(self._axis_throttle)

        if self._joystick.get_button(self._quit_button) and self._on_quit:
            self._on_quit()

        self._last_state = AxisState(
            horizontal=horizontal,
            vertical=vertical,
            throttle=max(0.0, min(2.0, throttle)),
        )
        return self._last_state

    def _read_axis(self, index: int) -> float:
        """Read one axis with deadzone, clamped to -1.0..1.0"""
        if index >= self._joystick.get_numaxes():
            return 0.0
        value = self._joystick.get_axis(index)
        if abs(value) < self._deadzone:
            return 0.0
        return max(-1.0, min(1.0, value))
