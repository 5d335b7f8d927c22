"""Constants and byte helpers shared by the driver and the emulator."""


class ConstUtils:
    """Bitwise masks used for register values and report bytes."""

    MASK_8_BITS = 0xFF
    """8-bit mask: 0xFF"""

    MASK_16_BITS = 0xFFFF
    """16-bit mask: 0xFFFF"""


def split_le16(value: int) -> tuple[int, int]:
    """Split a 16-bit value into (low, high) bytes."""
    value &= ConstUtils.MASK_16_BITS
    return value & ConstUtils.MASK_8_BITS, (value >> 8) & ConstUtils.MASK_8_BITS


def join_le16(low: int, high: int) -> int:
    """Assemble a 16-bit value from little-endian bytes."""
    return (low & ConstUtils.MASK_8_BITS) | ((high & ConstUtils.MASK_8_BITS) << 8)


def round_half_up(value: float) -> int:
    """Round a non-negative float to the nearest integer, halves away from zero."""
    return int(value + 0.5)
