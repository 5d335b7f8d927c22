"""XR2280x device handle.

Binds up to two opened HID transports (I2C and EDGE) into one handle, queries
the chip once for its GPIO count, and exposes the peripheral controllers.
All controllers share the same register layer and capabilities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from xr2280x.core import consts
from xr2280x.core.capabilities import Capabilities, detect_capabilities
from xr2280x.core.exceptions import DeviceNotFound
from xr2280x.core.gpio import GpioController
from xr2280x.core.i2c import I2cController
from xr2280x.core.interrupt import InterruptReader
from xr2280x.core.pwm import PwmController
from xr2280x.core.register_access import RegisterAccess
from xr2280x.interfaces.transport import HidTransport
from xr2280x.utils.config_loader import DriverConfig, get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceDetails:
    manufacturer: Optional[str]
    product: Optional[str]
    serial_number: Optional[str]


class Xr2280x:
    """An opened XR2280x bridge.

    Args:
        i2c: Opened I2C HID interface, or None
        edge: Opened EDGE HID interface, or None
        config: Driver configuration; defaults to the bundled config.yaml

    Raises:
        DeviceNotFound: If neither interface is given
        Xr2280xError: If capability detection fails for a reason other than
            the detection register being absent
    """

    def __init__(
        self,
        i2c: Optional[HidTransport] = None,
        edge: Optional[HidTransport] = None,
        config: Optional[DriverConfig] = None,
    ):
        if i2c is None and edge is None:
            raise DeviceNotFound("At least one of the I2C or EDGE interfaces is required")

        self.config = config or get_config()
        self.registers = RegisterAccess(i2c=i2c, edge=edge)

        if edge is not None:
            self.capabilities = detect_capabilities(self.registers)
        else:
            logger.debug("No EDGE interface; assuming %d GPIOs", consts.GPIO_COUNT_BASIC)
            self.capabilities = Capabilities(gpio_count=consts.GPIO_COUNT_BASIC)

        self.gpio = GpioController(
            self.registers, self.capabilities, self.config.gpio_write
        )
        self.pwm = PwmController(self.registers, self.capabilities)
        self.i2c = I2cController(self.registers, self.config.i2c)
        self.interrupts = InterruptReader(self.registers, self.config.interrupt)

        logger.debug(
            "Opened XR2280x (i2c=%s, edge=%s, gpio_count=%d)",
            i2c is not None,
            edge is not None,
            self.capabilities.gpio_count,
        )

    @property
    def has_i2c(self) -> bool:
        return self.registers.i2c is not None

    @property
    def has_edge(self) -> bool:
        return self.registers.edge is not None

    def details(self) -> DeviceDetails:
        """Read the USB identity strings (EDGE interface preferred).

        Raises:
            DeviceNotFound: If both interfaces have been detached
        """
        device = self.registers.edge or self.registers.i2c
        if device is None:
            raise DeviceNotFound()
        return DeviceDetails(
            manufacturer=device.get_manufacturer_string(),
            product=device.get_product_string(),
            serial_number=device.get_serial_number_string(),
        )
