"""
Core interfaces (protocols) for pluggable components.

These define the contracts that all implementations must follow, so the
session can be driven by a real keyboard and socket or by test doubles.
"""

from typing import Callable, List, Optional, Protocol

from .types import AxisState, WifiNetwork


class InputProvider(Protocol):
    """
    Interface for input sources (keyboard, gamepad, scripted, etc.).

    Providers own the axis state; the session only reads snapshots.
    """

    async def start(self, on_quit: Optional[Callable[[], None]] = None) -> None:
        """
        Initialize and start the input provider.

        Args:
            on_quit: Called (from any thread) when the operator asks to quit
        """
        ...

    async def stop(self) -> None:
        """Stop and release devices, threads, terminal modes"""
        ...

    def get_axis_state(self) -> AxisState:
        """
        Latest known axis state.

        Must never block; called once per transmit tick indefinitely.
        If nothing new arrived, the previous snapshot is returned.
        """
        ...


class Channel(Protocol):
    """
    Interface for the datagram channel to the drone.

    Fire-and-forget: nothing is ever read back.
    """

    def open(self) -> None:
        """
        Open the channel to the fixed device endpoint.

        Raises:
            ChannelOpenError: socket could not be created or connected
        """
        ...

    def send(self, datagram: bytes) -> None:
        """
        Send one datagram without blocking.

        Raises:
            TransmitError: the send call failed
        """
        ...

    def close(self) -> None:
        """Close the channel; safe to call more than once"""
        ...

    @property
    def is_open(self) -> bool:
        """Check if the channel is open"""
        ...


class WifiBackend(Protocol):
    """
    Interface for the host's wireless integration.

    Both calls block until the operating system answers.
    """

    def scan(self) -> List[WifiNetwork]:
        """
        List currently visible networks.

        Raises:
            ScanError: radio/interface unavailable or query refused
        """
        ...

    def connect(self, ssid: str, timeout: float) -> Optional[str]:
        """
        Associate with an open network.

        Returns:
            Name of the interface that associated, if known

        Raises:
            PairingError: association rejected or timed out
        """
        ...
