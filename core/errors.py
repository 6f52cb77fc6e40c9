"""
Error types for the HelicMax control stack.

Establishment errors (scan, target, pairing, channel open) abort the session
before any datagram goes out. TransmitError is the only one the session
tolerates while streaming.
"""


class HelicMaxError(RuntimeError):
    """Base class for all errors raised by the control stack"""


class ConfigError(HelicMaxError):
    """Configuration is missing or malformed"""


class ScanError(HelicMaxError):
    """Wireless interface could not be queried for networks"""


class TargetNotFound(HelicMaxError):
    """No visible network matched the drone naming pattern"""


class PairingError(HelicMaxError):
    """Association with the drone network failed or timed out"""


class ChannelOpenError(HelicMaxError):
    """UDP control channel could not be opened"""


class TransmitError(HelicMaxError):
    """A single datagram send failed"""


class ProtocolError(HelicMaxError):
    """A frame violates the wire format (length or checksum)"""


# Errors that end session establishment; reported as fatal by the launcher
ESTABLISHMENT_ERRORS = (ScanError, TargetNotFound, PairingError, ChannelOpenError)
