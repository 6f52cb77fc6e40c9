"""
Mock Transports - For testing without hardware.

Simulates the UDP channel and the host wifi integration without touching
the network.
"""

import logging
import time
from typing import List, Optional, Sequence, Set, Tuple

from core.codec import describe_frame
from core.errors import ChannelOpenError, PairingError, ScanError, TransmitError
from core.types import WifiNetwork

from .udp import UdpChannel
from .wifi import NmcliWifi, NetshWifi, create_wifi_backend


logger = logging.getLogger(__name__)


class MockChannel:
    """
    Mock datagram channel for testing.

    Records datagrams instead of sending them.
    """

    def __init__(self, fail_open: bool = False, fail_sends: Optional[Set[int]] = None) -> None:
        """
        Args:
            fail_open: If True, open() raises ChannelOpenError
            fail_sends: Indices (0-based, over all send attempts) that raise TransmitError
        """
        self._fail_open = fail_open
        self._fail_sends = fail_sends or set()
        self._open = False
        self._attempts = 0

        self.open_count = 0
        self.close_count = 0
        self.sent: List[Tuple[float, bytes]] = []

    def open(self) -> None:
        if self._fail_open:
            raise ChannelOpenError("[MOCK] Simulated socket failure")
        self._open = True
        self.open_count += 1
        logger.info("[MOCK] Channel opened")

    def send(self, datagram: bytes) -> None:
        attempt = self._attempts
        self._attempts += 1

        if not self._open:
            raise TransmitError("[MOCK] Channel is not open")
        if attempt in self._fail_sends:
            raise TransmitError(f"[MOCK] Simulated send failure #{attempt}")

        self.sent.append((time.monotonic(), bytes(datagram)))
        logger.debug(f"[MOCK] Datagram #{len(self.sent)}: {describe_frame(datagram)}")

    def close(self) -> None:
        if self._open:
            self.close_count += 1
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def datagrams(self) -> List[bytes]:
        """Datagrams sent so far, in order (for testing)"""
        return [data for _, data in self.sent]


class MockWifi:
    """
    Mock wifi backend for testing.

    Returns a fixed scan result and pretends to associate.
    """

    def __init__(
        self,
        networks: Sequence[WifiNetwork] = (),
        scan_error: Optional[str] = None,
        connect_error: Optional[str] = None,
        connection_delay: float = 0.0,
    ) -> None:
        """
        Args:
            networks: Scan result to return
            scan_error: If set, scan() raises ScanError with this message
            connect_error: If set, connect() raises PairingError with this message
            connection_delay: Simulated association time
        """
        self._networks = list(networks)
        self._scan_error = scan_error
        self._connect_error = connect_error
        self._connection_delay = connection_delay

        self.scan_count = 0
        self.connected_ssid: Optional[str] = None

    def scan(self) -> List[WifiNetwork]:
        self.scan_count += 1
        if self._scan_error:
            raise ScanError(self._scan_error)
        logger.info(f"[MOCK] Scan found {len(self._networks)} network(s)")
        return list(self._networks)

    def connect(self, ssid: str, timeout: float) -> Optional[str]:
        if self._connect_error:
            raise PairingError(self._connect_error)
        if self._connection_delay:
            time.sleep(self._connection_delay)
        self.connected_ssid = ssid
        logger.info(f"[MOCK] Associated with {ssid}")
        return "mock0"


__all__ = [
    "MockChannel",
    "MockWifi",
    "UdpChannel",
    "NmcliWifi",
    "NetshWifi",
    "create_wifi_backend",
]
