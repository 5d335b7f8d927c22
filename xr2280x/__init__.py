"""Host-side driver for the Exar/MaxLinear XR2280x USB HID bridges.

The XR2280x family exposes I2C, GPIO ("EDGE") and PWM peripherals through
two HID interfaces. This package encodes the bridge's register and report
protocol on top of already-opened HID transports; finding and opening the
devices is left to the caller (for example with hidapi).

Getting started:
    import hid
    from xr2280x import Xr2280x, GpioLevel

    i2c_dev = hid.device()
    i2c_dev.open(0x04E2, 0x1100)
    edge_dev = hid.device()
    edge_dev.open(0x04E2, 0x1200)

    device = Xr2280x(i2c=i2c_dev, edge=edge_dev)
    device.gpio.setup_output(0, GpioLevel.HIGH)
    print(device.i2c.scan())
"""

from xr2280x.core.capabilities import Capabilities
from xr2280x.core.device import DeviceDetails, Xr2280x
from xr2280x.core.exceptions import (
    ArgumentOutOfRangeError,
    BufferTooSmall,
    ConfigurationError,
    DeviceNotFound,
    FeatureReportError,
    GpioVerificationError,
    I2cArbitrationLost,
    I2cError,
    I2cNack,
    I2cRequestError,
    I2cTimeout,
    I2cUnknownError,
    InterruptParseError,
    InvalidI2c10BitAddress,
    InvalidReportError,
    OperationTooLarge,
    PinArgumentOutOfRange,
    TransportError,
    UnsupportedFeature,
    Xr2280xError,
)
from xr2280x.core.gpio import GpioController, GpioInterruptConfig
from xr2280x.core.gpio_enums import GpioDirection, GpioEdge, GpioLevel, GpioPull
from xr2280x.core.gpio_pin import GpioGroup, GpioPin, split_masked_write
from xr2280x.core.gpio_transaction import GpioTransaction
from xr2280x.core.i2c import I2cAddress, I2cController, I2cFlags
from xr2280x.core.interrupt import (
    GpioInterruptReport,
    InterruptReader,
    ParsedGpioInterruptReport,
    parse_interrupt_report,
    triggered_pins,
)
from xr2280x.core.pwm import (
    PwmChannel,
    PwmCommand,
    PwmController,
    UndefinedPwmCommand,
    ns_to_units,
    units_to_ns,
)
from xr2280x.interfaces.transport import HidTransport
from xr2280x.utils.config_loader import (
    DriverConfig,
    GpioWriteConfig,
    I2cConfig,
    InterruptConfig,
    clear_config_cache,
    get_config,
    load_config,
)

__all__ = [
    # Device
    "Xr2280x",
    "DeviceDetails",
    "Capabilities",
    "HidTransport",
    # GPIO
    "GpioController",
    "GpioInterruptConfig",
    "GpioTransaction",
    "GpioPin",
    "GpioGroup",
    "GpioDirection",
    "GpioLevel",
    "GpioPull",
    "GpioEdge",
    "split_masked_write",
    # PWM
    "PwmController",
    "PwmChannel",
    "PwmCommand",
    "UndefinedPwmCommand",
    "ns_to_units",
    "units_to_ns",
    # I2C
    "I2cController",
    "I2cAddress",
    "I2cFlags",
    # Interrupts
    "InterruptReader",
    "GpioInterruptReport",
    "ParsedGpioInterruptReport",
    "parse_interrupt_report",
    "triggered_pins",
    # Configuration
    "DriverConfig",
    "I2cConfig",
    "InterruptConfig",
    "GpioWriteConfig",
    "load_config",
    "get_config",
    "clear_config_cache",
    # Errors
    "Xr2280xError",
    "ConfigurationError",
    "DeviceNotFound",
    "TransportError",
    "InvalidReportError",
    "FeatureReportError",
    "ArgumentOutOfRangeError",
    "PinArgumentOutOfRange",
    "InvalidI2c10BitAddress",
    "UnsupportedFeature",
    "BufferTooSmall",
    "OperationTooLarge",
    "InterruptParseError",
    "GpioVerificationError",
    "I2cError",
    "I2cNack",
    "I2cTimeout",
    "I2cArbitrationLost",
    "I2cRequestError",
    "I2cUnknownError",
]
