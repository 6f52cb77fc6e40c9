"""
Core data types for the HelicMax control stack.

All the data structures that flow through the system, fully typed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time


# Wire layout of a control frame
FRAME_LENGTH = 14
HORIZONTAL_OFFSET = 8
VERTICAL_OFFSET = 9
THROTTLE_OFFSET = 10
TEMPLATE_BYTE_OFFSET = 11   # Opaque template byte, folded into the checksum
CHECKSUM_OFFSET = 13

# Fixed control-plane endpoint of the drone
DEFAULT_DRONE_IP = "192.168.0.1"
DEFAULT_DRONE_PORT = 40000

# Vendor prefix followed by digits, e.g. "HelicMax-3021"
DEFAULT_SSID_PATTERN = r"^HelicMax-\d+"


class SessionState(Enum):
    """Control session lifecycle states (one-way)"""
    IDLE = "idle"                  # Paired, channel not opened yet
    HANDSHAKING = "handshaking"    # Channel open, wake + neutral frames going out
    STREAMING = "streaming"        # Periodic control frames
    DISARMING = "disarming"        # Disarm frame sent, waiting out the grace delay
    TERMINATED = "terminated"      # Channel closed, session over


@dataclass(frozen=True)
class AxisState:
    """
    Normalized control input from any input provider.

    Immutable snapshot: providers publish a new instance on every change,
    the session only ever reads it.
    """
    horizontal: float = 0.0      # Left/right: -1.0 to 1.0
    vertical: float = 0.0        # Back/forward: -1.0 to 1.0
    throttle: float = 0.0        # 0.0 (rotors off) to 2.0 (full)
    timestamp: float = field(default_factory=time.time, compare=False)

    def __post_init__(self) -> None:
        """Validate ranges"""
        assert -1.0 <= self.horizontal <= 1.0, f"horizontal out of range: {self.horizontal}"
        assert -1.0 <= self.vertical <= 1.0, f"vertical out of range: {self.vertical}"
        assert 0.0 <= self.throttle <= 2.0, f"throttle out of range: {self.throttle}"

    @property
    def is_centered(self) -> bool:
        """Check if both sticks are at rest"""
        return abs(self.horizontal) < 0.01 and abs(self.vertical) < 0.01

    @property
    def is_idle(self) -> bool:
        """Check if rotors would be off"""
        return self.throttle < 0.01

    @classmethod
    def rest(cls) -> "AxisState":
        """Sticks centered, throttle off"""
        return cls(horizontal=0.0, vertical=0.0, throttle=0.0)


REST_AXIS = AxisState.rest()


@dataclass(frozen=True)
class WifiNetwork:
    """
    One network seen by a wifi scan.

    Only the SSID takes part in target selection; the rest is informational.
    """
    ssid: str
    bssid: str = ""
    signal: Optional[int] = None     # Signal quality 0-100, if reported
    security: str = ""               # Empty for open networks
    channel: Optional[int] = None

    @property
    def is_open(self) -> bool:
        """Check if the network needs no credential"""
        return self.security.strip() in ("", "--", "Open", "None")


@dataclass(frozen=True)
class Connected:
    """Result of a successful pairing"""
    network: WifiNetwork
    iface: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class LinkConfig:
    """Configuration for discovery and pairing"""
    ssid_pattern: str = DEFAULT_SSID_PATTERN
    iface: Optional[str] = None        # Wireless interface (None = any)
    connect_timeout: float = 30.0      # Max seconds to wait for association


@dataclass
class SessionConfig:
    """Configuration for the ControlSession"""
    drone_ip: str = DEFAULT_DRONE_IP
    drone_port: int = DEFAULT_DRONE_PORT
    tick_interval: float = 0.05        # Control frame period (20Hz)
    disarm_grace: float = 1.0          # Wait after the disarm frame before terminating
    wake_packet: Optional[bytes] = None        # None = built-in wake packet
    frame_template: Optional[bytes] = None     # None = built-in neutral template
