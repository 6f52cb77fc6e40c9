"""
HelicMax Core - Clean, typed, testable toy drone control architecture.

This package contains the core logic for flying a HelicMax quadcopter:
- Types: Data classes for axis state, networks, session configuration
- Interfaces: Protocols for pluggable components (input, channel, wifi)
- Codec: The 14-byte control frame wire format
- Discovery / Pairing: Finding and joining the drone's access point
- Session: Handshake, transmit loop, disarm sequence
"""

from .types import (
    AxisState,
    WifiNetwork,
    Connected,
    SessionState,
    SessionConfig,
    LinkConfig,
)
from .interfaces import (
    InputProvider,
    Channel,
    WifiBackend,
)
from .errors import (
    HelicMaxError,
    ConfigError,
    ScanError,
    TargetNotFound,
    PairingError,
    ChannelOpenError,
    TransmitError,
    ProtocolError,
)

__all__ = [
    "AxisState",
    "WifiNetwork",
    "Connected",
    "SessionState",
    "SessionConfig",
    "LinkConfig",
    "InputProvider",
    "Channel",
    "WifiBackend",
    "HelicMaxError",
    "ConfigError",
    "ScanError",
    "TargetNotFound",
    "PairingError",
    "ChannelOpenError",
    "TransmitError",
    "ProtocolError",
]
