"""GPIO pin and group value types.

The 32 EDGE pins are split across two 16-bit register groups:

  GROUP0  pins 0-15   registers 0x03C0-0x03CB  (all models)
  GROUP1  pins 16-31  registers 0x03CC-0x03D7  (XR22802/XR22804 only)

A pin's bit inside its group register is ``number % 16``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from xr2280x.core import consts
from xr2280x.core.exceptions import PinArgumentOutOfRange
from xr2280x.utils.consts import ConstUtils


class GpioGroup(Enum):
    """One of the two 16-pin GPIO register groups."""

    GROUP0 = 0
    GROUP1 = 1

    @property
    def index(self) -> int:
        return self.value

    @property
    def first_pin(self) -> int:
        return self.value * consts.GPIO_PINS_PER_GROUP

    def register(self, group0_address: int) -> int:
        """Translate a Group 0 register address to this group's twin."""
        return group0_address + self.value * consts.GPIO_GROUP_STRIDE


@dataclass(frozen=True, order=True)
class GpioPin:
    """A validated GPIO pin number (0-31)."""

    number: int

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise TypeError(f"pin number must be an int, got {self.number!r}")
        if not 0 <= self.number <= consts.GPIO_MAX_PIN:
            raise PinArgumentOutOfRange(self.number)

    @classmethod
    def coerce(cls, pin: PinLike) -> GpioPin:
        """Return pin unchanged if it is a GpioPin, else validate it as a number."""
        if isinstance(pin, GpioPin):
            return pin
        return cls(pin)

    @property
    def group(self) -> GpioGroup:
        return GpioGroup(self.number // consts.GPIO_PINS_PER_GROUP)

    @property
    def group_index(self) -> int:
        return self.number // consts.GPIO_PINS_PER_GROUP

    @property
    def bit(self) -> int:
        return self.number % consts.GPIO_PINS_PER_GROUP

    @property
    def mask(self) -> int:
        return 1 << self.bit

    def __str__(self) -> str:
        return f"E{self.number}"


PinLike = Union[int, GpioPin]


def split_masked_write(mask: int, pattern: int) -> tuple[int, int]:
    """Split a masked level update into SET and CLEAR register values.

    Only bits inside mask are touched; the previous register contents play
    no part in the result.

    Args:
        mask: 16-bit mask of pins to update
        pattern: desired levels for the masked pins

    Returns:
        (set_subset, clear_subset)
    """
    mask &= ConstUtils.MASK_16_BITS
    set_subset = mask & pattern
    clear_subset = mask & ~pattern & ConstUtils.MASK_16_BITS
    return set_subset, clear_subset
