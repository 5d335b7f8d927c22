"""In-memory XR2280x emulator.

Implements the HidTransport protocol over emulated registers and an emulated
I2C bus, so the driver can run without hardware.
"""

from xr2280x.emulator.device import MODELS, EmulatedXr2280x, list_models
from xr2280x.emulator.edge import EdgeBlock
from xr2280x.emulator.hid import EmulatedHidInterface
from xr2280x.emulator.i2c_bus import EmulatedI2cBus, EmulatedI2cTarget, I2cTransferRecord
from xr2280x.emulator.register import (
    ReadOnlyRegister,
    Register,
    RegisterFile,
    SimpleRegister,
    WriteOnlyRegister,
)

__all__ = [
    "EmulatedXr2280x",
    "MODELS",
    "list_models",
    "EdgeBlock",
    "EmulatedHidInterface",
    "EmulatedI2cBus",
    "EmulatedI2cTarget",
    "I2cTransferRecord",
    "Register",
    "SimpleRegister",
    "ReadOnlyRegister",
    "WriteOnlyRegister",
    "RegisterFile",
]
