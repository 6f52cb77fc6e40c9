"""
UDP Transport - the datagram channel to the drone.

A connected, non-blocking IPv4 UDP socket. Send-only: the drone's replies
are never read.
"""

import logging
import socket
from typing import Optional

from core.errors import ChannelOpenError, TransmitError


logger = logging.getLogger(__name__)


class UdpChannel:
    """
    Send-only UDP channel bound to one fixed endpoint.

    Only the control session writes to it, so no locking.
    """

    def __init__(self, host: str, port: int) -> None:
        """
        Args:
            host: Drone IP address
            port: Drone control port
        """
        self.host = host
        self.port = port
        self._sock: Optional[socket.socket] = None
        self._sent_count = 0

    def open(self) -> None:
        """Create the socket and connect it to the drone endpoint"""
        if self._sock is not None:
            return

        logger.info(f"Opening control socket to {self.host}:{self.port}...")
        sock = None
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            sock.setblocking(False)
            sock.connect((self.host, self.port))
        except OSError as e:
            if sock is not None:
                sock.close()
            raise ChannelOpenError(
                f"Could not open UDP channel to {self.host}:{self.port}: {e}"
            ) from e

        self._sock = sock

    def send(self, datagram: bytes) -> None:
        """Send one datagram, never blocks"""
        if self._sock is None:
            raise TransmitError("Channel is not open")

        try:
            sent = self._sock.send(datagram)
        except OSError as e:
            raise TransmitError(f"Send to {self.host}:{self.port} failed: {e}") from e

        if sent != len(datagram):
            raise TransmitError(f"Short send: {sent} of {len(datagram)} bytes")
        self._sent_count += 1

    def close(self) -> None:
        """Close the socket"""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            logger.info(f"Control socket closed after {self._sent_count} datagram(s)")

    @property
    def is_open(self) -> bool:
        """Check if the socket is open"""
        return self._sock is not None

    @property
    def sent_count(self) -> int:
        """Datagrams sent successfully"""
        return self._sent_count
