"""
Flight - discovery, pairing, then the control session, in that order.

Scan and connect are blocking OS calls, so they run in the default executor
ahead of the session's state machine.
"""

import asyncio
import logging
from typing import Optional

from .discovery import find_target
from .interfaces import Channel, InputProvider, WifiBackend
from .pairing import connect
from .session import ControlSession
from .types import Connected, LinkConfig, SessionConfig


logger = logging.getLogger(__name__)


class Flight:
    """
    One end-to-end flight: find the drone, join its network, fly it.

    Establishment errors (ScanError, TargetNotFound, PairingError,
    ChannelOpenError) propagate to the caller before any datagram is sent.
    """

    def __init__(
        self,
        channel: Channel,
        input_provider: InputProvider,
        wifi: Optional[WifiBackend] = None,
        link_config: Optional[LinkConfig] = None,
        session_config: Optional[SessionConfig] = None,
    ) -> None:
        """
        Args:
            channel: Datagram channel to the drone
            input_provider: Source of axis snapshots
            wifi: Host wifi backend; None skips discovery and pairing
                  (host is already on the drone network)
            link_config: Discovery/pairing configuration
            session_config: Control session configuration
        """
        self.channel = channel
        self.input = input_provider
        self.wifi = wifi
        self.link_config = link_config or LinkConfig()
        self.session_config = session_config or SessionConfig()

        self.session: Optional[ControlSession] = None
        self.connected: Optional[Connected] = None
        self._abort = False

    async def establish_link(self) -> Connected:
        """Scan, select and join the drone network"""
        loop = asyncio.get_running_loop()
        target = await loop.run_in_executor(
            None, find_target, self.wifi, self.link_config.ssid_pattern
        )
        return await loop.run_in_executor(
            None, connect, self.wifi, target, self.link_config.connect_timeout
        )

    async def run(self) -> None:
        """Run the flight until the session terminates"""
        if self.wifi is not None:
            self.connected = await self.establish_link()
        else:
            logger.info("Skipping wifi discovery, assuming the drone network is joined")

        if self._abort:
            logger.info("Shutdown requested before the control session started")
            return

        self.session = ControlSession(self.channel, self.input, self.session_config)
        await self.session.run()

    def request_shutdown(self) -> None:
        """Disarm if flying, otherwise skip the session altogether"""
        if self.session is not None:
            self.session.request_shutdown()
        else:
            self._abort = True
