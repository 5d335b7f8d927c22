"""GPIO enumeration types."""

from enum import Enum, IntEnum


class GpioDirection(IntEnum):
    """Direction of a GPIO pin.

    Values match the DIR register bit: 0 = input, 1 = output.
    """

    INPUT = 0
    """High-impedance input."""

    OUTPUT = 1
    """Driven output."""


class GpioLevel(IntEnum):
    """GPIO pin logic level enumeration.

    Represents the digital logic level on a GPIO pin.
    """

    LOW = 0
    """Logic level LOW (0V, digital 0)."""

    HIGH = 1
    """Logic level HIGH (VCC, digital 1)."""


class GpioPull(Enum):
    """Pull resistor configuration.

    Pull-up and pull-down live in separate registers; at most one of them is
    asserted for a pin.
    """

    NONE = "none"
    """No pull resistor (floating input)."""

    UP = "up"
    """Weak pull to VCC."""

    DOWN = "down"
    """Weak pull to ground."""


class GpioEdge(Enum):
    """Edge reported for a pin by the speculative interrupt decode."""

    RISING = "rising"
    FALLING = "falling"
