"""Input provider base module"""

from input.mock_input import MockInput, FlightScripts
from input.keyboard_input import KeyboardInput
from input.gamepad_input import GamepadInput, HAS_PYGAME

__all__ = ["MockInput", "FlightScripts", "KeyboardInput", "GamepadInput", "HAS_PYGAME"]
