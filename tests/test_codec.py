"""Tests for the packet codec"""

import itertools

import pytest

from core.codec import (
    NEUTRAL_TEMPLATE,
    axis_to_byte,
    describe_frame,
    encode_disarm_frame,
    encode_frame,
    frame_checksum,
    neutral_template,
    throttle_to_byte,
    validate_frame,
    wake_packet,
)
from core.errors import ProtocolError
from core.types import AxisState, REST_AXIS, FRAME_LENGTH


AXIS_VALUES = [-1.0, -0.75, -0.5, -0.1, 0.0, 0.1, 0.33, 0.5, 0.999, 1.0]
THROTTLE_VALUES = [0.0, 0.01, 0.5, 1.0, 1.5, 1.99, 2.0]


def js_round(value: float) -> int:
    """Reference rounding: halves go up"""
    import math
    return int(math.floor(value + 0.5))


def test_neutral_template_is_valid():
    """Test the built-in template passes its own checksum"""
    template = neutral_template()
    assert len(template) == FRAME_LENGTH
    validate_frame(template)


def test_wake_packet_is_not_a_control_frame():
    """Test wake packet is constant and distinct from control frames"""
    assert wake_packet() == wake_packet()
    assert wake_packet() != neutral_template()
    assert len(wake_packet()) > 0


def test_encode_frame_byte_formulas():
    """Test bytes 8/9/10 follow the scaling formulas for every combination"""
    template = neutral_template()
    for h, v, t in itertools.product(AXIS_VALUES, AXIS_VALUES, THROTTLE_VALUES):
        frame = encode_frame(template, AxisState(horizontal=h, vertical=v, throttle=t))

        assert frame[8] == max(0, min(255, js_round((h + 1.0) * 127)))
        assert frame[9] == max(0, min(255, js_round((v + 1.0) * 127)))
        assert frame[10] == max(0, min(255, js_round(t * 127)))
        assert frame[13] == frame[8] ^ frame[9] ^ frame[10] ^ frame[11]


def test_encode_frame_keeps_template_bytes():
    """Test every byte outside 8, 9, 10, 13 comes from the template"""
    template = neutral_template()
    frame = encode_frame(template, AxisState(horizontal=0.4, vertical=-0.8, throttle=1.2))

    for offset in (0, 1, 2, 3, 4, 5, 6, 7, 11, 12):
        assert frame[offset] == template[offset]


def test_encode_frame_does_not_touch_base():
    """Test the template is never mutated and each call returns a new buffer"""
    template = bytes(NEUTRAL_TEMPLATE)
    first = encode_frame(template, AxisState(horizontal=1.0, vertical=1.0, throttle=2.0))
    second = encode_frame(template, REST_AXIS)

    assert template == NEUTRAL_TEMPLATE
    assert first != second
    assert isinstance(first, bytes)


def test_centered_hover_frame():
    """Test sticks centered at throttle 1.0 encode to 127/127/127"""
    frame = encode_frame(neutral_template(), AxisState(horizontal=0.0, vertical=0.0, throttle=1.0))

    assert list(frame[8:11]) == [127, 127, 127]
    assert frame[13] == 127 ^ 127 ^ 127 ^ frame[11]


def test_half_values_round_up():
    """Test x.5 rounds up rather than to even"""
    # (0.5 + 1) * 127 = 190.5
    assert axis_to_byte(0.5) == 191
    # (-0.5 + 1) * 127 = 63.5
    assert axis_to_byte(-0.5) == 64
    # 0.5 * 127 = 63.5
    assert throttle_to_byte(0.5) == 64


def test_axis_bytes_are_clamped():
    """Test out-of-range values saturate at 0 and 255"""
    assert axis_to_byte(-5.0) == 0
    assert axis_to_byte(5.0) == 255
    assert throttle_to_byte(-1.0) == 0
    assert throttle_to_byte(3.0) == 255


def test_disarm_frame_zero_throttle():
    """Test disarm frame forces throttle to 0 and recomputes the checksum"""
    frame = encode_disarm_frame(neutral_template())

    assert frame[10] == 0
    assert frame[13] == frame[8] ^ frame[9] ^ frame[10] ^ frame[11]
    validate_frame(frame)


def test_disarm_frame_from_flying_base():
    """Test disarm zeroes throttle even when the base frame carries throttle"""
    flying = encode_frame(neutral_template(), AxisState(horizontal=0.3, vertical=-0.2, throttle=2.0))
    assert flying[10] == 254

    frame = encode_disarm_frame(flying)

    assert frame[10] == 0
    assert frame[8] == flying[8]
    assert frame[9] == flying[9]
    validate_frame(frame)


def test_validate_frame_rejects_bad_checksum():
    """Test a corrupted checksum is a protocol error"""
    frame = bytearray(encode_frame(neutral_template(), AxisState(throttle=1.0)))
    frame[13] ^= 0xFF

    with pytest.raises(ProtocolError):
        validate_frame(bytes(frame))


def test_validate_frame_rejects_bad_length():
    """Test frames of the wrong size are rejected"""
    with pytest.raises(ProtocolError):
        validate_frame(neutral_template()[:-1])

    with pytest.raises(ProtocolError):
        encode_frame(neutral_template() + b"\x00", REST_AXIS)


def test_checksum_uses_template_byte_11():
    """Test byte 11 of the template takes part in the checksum"""
    template = bytearray(neutral_template())
    template[11] = 0x5A
    template[13] = frame_checksum(template)

    frame = encode_frame(bytes(template), AxisState(throttle=1.0))

    assert frame[11] == 0x5A
    assert frame[13] == frame[8] ^ frame[9] ^ frame[10] ^ 0x5A


def test_describe_frame():
    """Test debug summary names the control bytes"""
    text = describe_frame(encode_frame(neutral_template(), AxisState(throttle=1.0)))
    assert "H=127" in text
    assert "T=127" in text
    assert "<3 bytes" in describe_frame(b"\x01\x02\x03")
