"""Capability detection (8-GPIO vs 32-GPIO silicon).

XR22800/XR22801 wire up 8 GPIOs; XR22802/XR22804 have 32 split across two
16-bit register groups. The Group 1 function-select register only exists on
the larger parts, so a single read of it tells the two apart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from xr2280x.core import consts
from xr2280x.core.exceptions import FeatureReportError, UnsupportedFeature

if TYPE_CHECKING:
    from xr2280x.core.gpio_pin import GpioGroup, GpioPin
    from xr2280x.core.register_access import RegisterAccess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    """Detected capabilities of an opened device."""

    gpio_count: int = consts.GPIO_COUNT_BASIC

    def __post_init__(self) -> None:
        if self.gpio_count not in (consts.GPIO_COUNT_BASIC, consts.GPIO_COUNT_FULL):
            raise ValueError(f"gpio_count must be 8 or 32, got {self.gpio_count}")

    def supports_pin(self, pin: GpioPin) -> bool:
        return pin.number < self.gpio_count

    def supports_group(self, group: GpioGroup) -> bool:
        return group.index * consts.GPIO_PINS_PER_GROUP < self.gpio_count

    def check_pin(self, pin: GpioPin) -> None:
        """Raise UnsupportedFeature if the pin does not exist on this chip."""
        if not self.supports_pin(pin):
            raise UnsupportedFeature(
                f"GPIO pin {pin.number} is not available on this device "
                f"(only pins 0-{self.gpio_count - 1} supported)"
            )

    def check_group(self, group: GpioGroup) -> None:
        """Raise UnsupportedFeature if the group does not exist on this chip."""
        if not self.supports_group(group):
            raise UnsupportedFeature(
                f"GPIO {group.name} (pins 16-31) requires XR22802/XR22804"
            )


def detect_capabilities(access: RegisterAccess) -> Capabilities:
    """Classify the device by reading a 32-GPIO-only register.

    A FeatureReportError means the register is absent (8 GPIOs). Any other
    exception propagates.
    """
    try:
        access.read_register(consts.CAPABILITY_DETECT_REGISTER)
    except FeatureReportError as exc:
        logger.debug(
            "Detected support for 8 GPIOs (GPIO Group 1 register unreadable: %s)", exc
        )
        return Capabilities(gpio_count=consts.GPIO_COUNT_BASIC)

    logger.debug("Detected support for 32 GPIOs")
    return Capabilities(gpio_count=consts.GPIO_COUNT_FULL)
