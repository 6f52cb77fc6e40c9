"""
Packet codec - the only place that knows the control frame wire layout.

Frame layout (14 bytes):

    0-6   header       63 63 0a 00 07 00 00
    7     start marker 66
    8     horizontal   0..255 (127 = centered)
    9     vertical     0..255 (127 = centered)
    10    throttle     0..255 (0 = rotors off)
    11    template     opaque, folded into the checksum
    12    template     opaque
    13    checksum     XOR of bytes 8-11

Everything here is pure: frames go in as bytes and new bytes come out.
"""

import math
from typing import Optional

from .errors import ProtocolError
from .types import (
    AxisState,
    FRAME_LENGTH,
    HORIZONTAL_OFFSET,
    VERTICAL_OFFSET,
    THROTTLE_OFFSET,
    TEMPLATE_BYTE_OFFSET,
    CHECKSUM_OFFSET,
)


# Stops the pairing lights flashing and arms the receiver. Sent once.
WAKE_PACKET = bytes([0x63, 0x63, 0x01, 0x00, 0x00, 0x00, 0x00])

NEUTRAL_TEMPLATE = bytes([
    0x63, 0x63, 0x0A, 0x00, 0x07, 0x00, 0x00,   # Header
    0x66,                                       # Start marker
    0x80, 0x80, 0x00,                           # Horizontal, vertical, throttle
    0x80, 0x00,                                 # Template bytes
    0x80,                                       # Checksum for the rest state
])

AXIS_SCALE = 127


def wake_packet() -> bytes:
    """Return the wake datagram"""
    return WAKE_PACKET


def neutral_template() -> bytes:
    """Return the neutral base datagram (rest axes, valid checksum)"""
    return NEUTRAL_TEMPLATE


def _round_half_up(value: float) -> int:
    """Round x.5 towards +inf, like a JS Math.round"""
    return int(math.floor(value + 0.5))


def _clamp_byte(value: int) -> int:
    """Clamp to an unsigned 8-bit value"""
    return max(0, min(255, value))


def axis_to_byte(value: float) -> int:
    """Map a -1.0..1.0 axis onto 0..254 (127 = centered)"""
    return _clamp_byte(_round_half_up((value + 1.0) * AXIS_SCALE))


def throttle_to_byte(value: float) -> int:
    """Map a 0.0..2.0 throttle onto 0..254"""
    return _clamp_byte(_round_half_up(value * AXIS_SCALE))


def frame_checksum(frame: bytes) -> int:
    """XOR of the four control bytes (8-11)"""
    return (
        frame[HORIZONTAL_OFFSET]
        ^ frame[VERTICAL_OFFSET]
        ^ frame[THROTTLE_OFFSET]
        ^ frame[TEMPLATE_BYTE_OFFSET]
    )


def validate_frame(frame: bytes) -> None:
    """
    Check a control frame against the wire format.

    Raises:
        ProtocolError: wrong length or checksum mismatch
    """
    if len(frame) != FRAME_LENGTH:
        raise ProtocolError(f"Frame must be {FRAME_LENGTH} bytes, got {len(frame)}")
    expected = frame_checksum(frame)
    if frame[CHECKSUM_OFFSET] != expected:
        raise ProtocolError(
            f"Checksum mismatch: byte 13 is 0x{frame[CHECKSUM_OFFSET]:02x}, "
            f"expected 0x{expected:02x}"
        )


def _stamp(base: bytes, horizontal: Optional[int], vertical: Optional[int],
           throttle: int) -> bytes:
    """Copy base, overwrite the control bytes that are given, recompute checksum"""
    if len(base) != FRAME_LENGTH:
        raise ProtocolError(f"Template must be {FRAME_LENGTH} bytes, got {len(base)}")

    frame = bytearray(base)
    if horizontal is not None:
        frame[HORIZONTAL_OFFSET] = horizontal
    if vertical is not None:
        frame[VERTICAL_OFFSET] = vertical
    frame[THROTTLE_OFFSET] = throttle
    frame[CHECKSUM_OFFSET] = frame_checksum(frame)
    return bytes(frame)


def encode_frame(base: bytes, axis: AxisState) -> bytes:
    """
    Stamp axis values and checksum into a copy of the template.

    Args:
        base: Neutral template (never modified)
        axis: Snapshot to encode

    Returns:
        New 14-byte control frame
    """
    return _stamp(
        base,
        horizontal=axis_to_byte(axis.horizontal),
        vertical=axis_to_byte(axis.vertical),
        throttle=throttle_to_byte(axis.throttle),
    )


def encode_disarm_frame(base: bytes) -> bytes:
    """
    Build the frame that stops the rotors from any flight state.

    Sticks keep their template values, throttle is forced to 0.
    """
    return _stamp(base, horizontal=None, vertical=None, throttle=0)


def describe_frame(frame: bytes) -> str:
    """One-line summary of a frame for debug logs"""
    if len(frame) != FRAME_LENGTH:
        return f"<{len(frame)} bytes: {frame.hex()}>"
    return (
        f"H={frame[HORIZONTAL_OFFSET]:3d} V={frame[VERTICAL_OFFSET]:3d} "
        f"T={frame[THROTTLE_OFFSET]:3d} CK=0x{frame[CHECKSUM_OFFSET]:02x} "
        f"[{frame.hex()}]"
    )
