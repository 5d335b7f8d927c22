"""Emulated XR2280x chips.

Wires an EDGE register block, the I2C control registers and an I2C bus to
two emulated HID interfaces, the way the real chip exposes them.

Getting started:
    from xr2280x.emulator import EmulatedXr2280x

    chip = EmulatedXr2280x("XR22802")
    chip.bus.attach(0x50)
    device = chip.open()
    device.i2c.scan()
"""

from __future__ import annotations

from typing import Optional

from xr2280x.core import consts
from xr2280x.core.device import Xr2280x
from xr2280x.core.i2c import scl_cycles_for_speed
from xr2280x.emulator.edge import EdgeBlock
from xr2280x.emulator.hid import EmulatedHidInterface
from xr2280x.emulator.i2c_bus import EmulatedI2cBus
from xr2280x.emulator.register import RegisterFile, SimpleRegister
from xr2280x.utils.config_loader import DriverConfig

MODELS: dict[str, int] = {
    "XR22800": consts.GPIO_COUNT_BASIC,
    "XR22801": consts.GPIO_COUNT_BASIC,
    "XR22802": consts.GPIO_COUNT_FULL,
    "XR22804": consts.GPIO_COUNT_FULL,
}
"""Model name -> number of GPIOs."""


def list_models() -> list[str]:
    """List all emulated chip models."""
    return list(MODELS.keys())


class EmulatedXr2280x:
    """One emulated chip with its I2C and EDGE HID interfaces."""

    def __init__(self, model: str = "XR22802", serial_number: str = "EMU0001"):
        if model not in MODELS:
            raise ValueError(f"Unknown model '{model}'. Available: {list_models()}")
        self.model = model
        self.gpio_count = MODELS[model]

        self.edge = EdgeBlock(self.gpio_count)
        self.i2c_registers = RegisterFile()
        low, high = scl_cycles_for_speed(consts.I2C_STANDARD_MODE_KHZ)
        self.i2c_registers.add(SimpleRegister(consts.REG_SCL_LOW, low))
        self.i2c_registers.add(SimpleRegister(consts.REG_SCL_HIGH, high))
        self.bus = EmulatedI2cBus()

        self.i2c_interface = EmulatedHidInterface(
            self.i2c_registers,
            bus=self.bus,
            product=f"{model} I2C",
            serial_number=serial_number,
        )
        self.edge_interface = EmulatedHidInterface(
            self.edge,
            product=f"{model} EDGE",
            serial_number=serial_number,
        )

    def open(
        self,
        config: Optional[DriverConfig] = None,
        i2c: bool = True,
        edge: bool = True,
    ) -> Xr2280x:
        """Return a driver handle bound to this chip's interfaces."""
        return Xr2280x(
            i2c=self.i2c_interface if i2c else None,
            edge=self.edge_interface if edge else None,
            config=config,
        )

    def queue_interrupt(self, raw: bytes) -> None:
        """Queue a raw interrupt report on the EDGE interface."""
        self.edge_interface.queue_input_report(raw)

    def reset_counters(self) -> None:
        self.i2c_interface.reset_counters()
        self.edge_interface.reset_counters()

    @property
    def transaction_count(self) -> int:
        """Transport calls across both interfaces."""
        return (
            self.i2c_interface.transaction_count
            + self.edge_interface.transaction_count
        )
