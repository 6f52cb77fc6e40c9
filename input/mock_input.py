"""
Mock (test) input provider.

Provides scripted axis input for testing without a keyboard or gamepad.
"""

import logging
import math
from typing import Callable, List, Optional

from core.types import AxisState


logger = logging.getLogger(__name__)


class MockInput:
    """
    Mock input provider for testing.

    Returns the scripted states in sequence, one per call, then keeps
    returning the last one. Can request quit after the script runs out.
    """

    def __init__(
        self,
        states: Optional[List[AxisState]] = None,
        quit_when_done: bool = False,
    ) -> None:
        """
        Initialize mock input.

        Args:
            states: Axis states to return in sequence.
                    If None, returns the rest state.
            quit_when_done: If True, call on_quit once the script is exhausted
        """
        self._states = list(states or [])
        self._index = 0
        self._running = False
        self._quit_when_done = quit_when_done
        self._on_quit: Optional[Callable[[], None]] = None

        self.read_count = 0

    async def start(self, on_quit: Optional[Callable[[], None]] = None) -> None:
        """Start the input provider"""
        logger.info(f"[MOCK INPUT] Started - Script mode ({len(self._states)} states)")
        self._on_quit = on_quit
        self._running = True
        self._index = 0

    async def stop(self) -> None:
        """Stop the input provider"""
        logger.info("[MOCK INPUT] Stopped")
        self._running = False

    def get_axis_state(self) -> AxisState:
        """Return next scripted state"""
        self.read_count += 1

        if not self._states:
            return AxisState.rest()

        if self._index >= len(self._states):
            if self._quit_when_done and self._on_quit is not None:
                self._on_quit()
            return self._states[-1]

        state = self._states[self._index]
        self._index += 1
        return state

    def load_script(self, script_name: str) -> None:
        """
        Load a predefined flight script.

        Args:
            script_name: Name of script to load from FlightScripts

        Raises:
            ValueError: unknown script name
        """
        script_map = {
            "hover": FlightScripts.hover,
            "climb_and_descend": FlightScripts.climb_and_descend,
            "circle": FlightScripts.circle,
        }

        if script_name not in script_map:
            raise ValueError(
                f"Unknown script '{script_name}' (choose from {', '.join(sorted(script_map))})"
            )
        self._states = script_map[script_name]()
        self._index = 0
        logger.info(f"Loaded script '{script_name}' with {len(self._states)} states")


class FlightScripts:
    """Pre-defined flight scripts, one state per 50ms tick"""

    @staticmethod
    def hover() -> List[AxisState]:
        """Spin up to hover throttle and hold"""
        spin_up = [AxisState(throttle=t / 10.0) for t in range(0, 11)]
        hold = [AxisState(throttle=1.0)] * 40
        return spin_up + hold

    @staticmethod
    def climb_and_descend() -> List[AxisState]:
        """Climb to near full throttle, then back down to zero"""
        climb = [AxisState(throttle=t / 10.0) for t in range(0, 19)]
        hold = [AxisState(throttle=1.8)] * 20
        descend = [AxisState(throttle=t / 10.0) for t in range(18, -1, -1)]
        return climb + hold + descend

    @staticmethod
    def circle() -> List[AxisState]:
        """Hover while sweeping the sticks around a circle"""
        states = [AxisState(throttle=1.0)] * 10
        for step in range(40):
            angle = 2 * math.pi * step / 40
            states.append(AxisState(
                horizontal=round(0.5 * math.cos(angle), 3),
                vertical=round(0.5 * math.sin(angle), 3),
                throttle=1.0,
            ))
        states.append(AxisState(throttle=1.0))
        return states
