"""PWM channel controller.

Each of the two channels owns a HIGH and a LOW period register, counted in
ticks of the 60 MHz / 16 PWM clock (~266.667 ns, 1-4095 ticks), and one
packed control register:

  bits [4:0]  output pin (0-31)
  bit  5      enable
  bits [8:6]  command (000 idle, 100 assert low, 101 one-shot, 110 free run)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

from xr2280x.core import consts
from xr2280x.core.capabilities import Capabilities
from xr2280x.core.exceptions import ArgumentOutOfRangeError
from xr2280x.core.gpio_pin import GpioPin, PinLike
from xr2280x.core.register_access import RegisterAccess
from xr2280x.utils.consts import round_half_up

logger = logging.getLogger(__name__)


class PwmChannel(Enum):
    PWM0 = 0
    PWM1 = 1

    @property
    def control_register(self) -> int:
        return (consts.REG_PWM0_CTRL, consts.REG_PWM1_CTRL)[self.value]

    @property
    def high_register(self) -> int:
        return (consts.REG_PWM0_HIGH, consts.REG_PWM1_HIGH)[self.value]

    @property
    def low_register(self) -> int:
        return (consts.REG_PWM0_LOW, consts.REG_PWM1_LOW)[self.value]


class PwmCommand(IntEnum):
    """Documented values of the 3-bit command field."""

    IDLE = consts.PWM_CMD_IDLE
    ASSERT_LOW = consts.PWM_CMD_ASSERT_LOW
    ONE_SHOT = consts.PWM_CMD_ONE_SHOT
    FREE_RUN = consts.PWM_CMD_FREE_RUN


@dataclass(frozen=True)
class UndefinedPwmCommand:
    """A command field value with no documented meaning.

    Reading one back from hardware yields this type, and it can be written
    again unchanged.
    """

    raw: int

    def __post_init__(self) -> None:
        if not 0 <= self.raw <= consts.PWM_CMD_RAW_MASK:
            raise ArgumentOutOfRangeError(
                f"PWM command value {self.raw} does not fit in 3 bits"
            )


AnyPwmCommand = Union[PwmCommand, UndefinedPwmCommand]


def decode_pwm_command(raw: int) -> AnyPwmCommand:
    raw &= consts.PWM_CMD_RAW_MASK
    try:
        return PwmCommand(raw)
    except ValueError:
        return UndefinedPwmCommand(raw)


def ns_to_units(nanoseconds: float) -> int:
    """Convert a duration to PWM ticks, rounding to the nearest tick.

    Raises:
        ArgumentOutOfRangeError: If the result falls outside 1-4095 ticks;
            values are never clamped
    """
    if nanoseconds <= 0:
        raise ArgumentOutOfRangeError(
            f"PWM time must be greater than 0 ns (got {nanoseconds})"
        )
    units = round_half_up(nanoseconds / consts.PWM_UNIT_TIME_NS)
    if units < consts.PWM_MIN_UNITS:
        raise ArgumentOutOfRangeError(
            f"PWM time {nanoseconds} ns is too small "
            f"(min {units_to_ns(consts.PWM_MIN_UNITS)} ns)"
        )
    if units > consts.PWM_MAX_UNITS:
        raise ArgumentOutOfRangeError(
            f"PWM time {nanoseconds} ns is too large "
            f"(max {units_to_ns(consts.PWM_MAX_UNITS)} ns)"
        )
    return units


def units_to_ns(units: int) -> int:
    """Convert PWM ticks to nanoseconds, rounded to the nearest ns."""
    return round_half_up(units * consts.PWM_UNIT_TIME_NS)


def _check_units(name: str, units: int) -> None:
    if not consts.PWM_MIN_UNITS <= units <= consts.PWM_MAX_UNITS:
        raise ArgumentOutOfRangeError(
            f"PWM {name} period {units} outside "
            f"{consts.PWM_MIN_UNITS}-{consts.PWM_MAX_UNITS} units"
        )


class PwmController:
    """Configures the two PWM channels through the EDGE registers."""

    def __init__(self, access: RegisterAccess, capabilities: Capabilities):
        self.access = access
        self.capabilities = capabilities

    def set_periods(self, channel: PwmChannel, high_units: int, low_units: int) -> None:
        """Write the HIGH and LOW periods in ticks.

        Both values are validated before either register is written.
        """
        _check_units("high", high_units)
        _check_units("low", low_units)
        logger.debug(
            "Setting %s periods: high=%d, low=%d units",
            channel.name,
            high_units,
            low_units,
        )
        self.access.write_register(channel.high_register, high_units)
        self.access.write_register(channel.low_register, low_units)

    def set_periods_ns(self, channel: PwmChannel, high_ns: float, low_ns: float) -> None:
        high_units = ns_to_units(high_ns)
        low_units = ns_to_units(low_ns)
        self.set_periods(channel, high_units, low_units)

    def get_periods(self, channel: PwmChannel) -> tuple[int, int]:
        """Return (high_units, low_units)."""
        high = self.access.read_register(channel.high_register)
        low = self.access.read_register(channel.low_register)
        return high, low

    def get_periods_ns(self, channel: PwmChannel) -> tuple[int, int]:
        high, low = self.get_periods(channel)
        return units_to_ns(high), units_to_ns(low)

    def set_pin(self, channel: PwmChannel, pin: PinLike) -> None:
        """Route a channel to a GPIO pin, preserving enable and command bits.

        Raises:
            UnsupportedFeature: If the pin does not exist on this chip
        """
        p = GpioPin.coerce(pin)
        self.capabilities.check_pin(p)
        logger.debug("Setting %s to pin %s", channel.name, p)
        self.access.update_field(
            channel.control_register,
            consts.PWM_CTRL_PIN_MASK,
            p.number << consts.PWM_CTRL_PIN_SHIFT,
        )

    def get_pin(self, channel: PwmChannel) -> GpioPin:
        value = self.access.read_register(channel.control_register)
        return GpioPin(
            (value & consts.PWM_CTRL_PIN_MASK) >> consts.PWM_CTRL_PIN_SHIFT
        )

    def control(self, channel: PwmChannel, enable: bool, command: AnyPwmCommand) -> None:
        """Set the enable bit and command field, preserving the pin field."""
        raw = command.raw if isinstance(command, UndefinedPwmCommand) else int(command)
        field = (raw << consts.PWM_CTRL_CMD_SHIFT) & consts.PWM_CTRL_CMD_MASK
        if enable:
            field |= consts.PWM_CTRL_ENABLE_MASK
        logger.debug(
            "Setting %s control: enable=%s, command=%s", channel.name, enable, command
        )
        self.access.update_field(
            channel.control_register,
            consts.PWM_CTRL_ENABLE_MASK | consts.PWM_CTRL_CMD_MASK,
            field,
        )

    def get_control(self, channel: PwmChannel) -> tuple[bool, AnyPwmCommand]:
        """Return (enabled, command) decoded from the control register."""
        value = self.access.read_register(channel.control_register)
        enabled = bool(value & consts.PWM_CTRL_ENABLE_MASK)
        raw = (value & consts.PWM_CTRL_CMD_MASK) >> consts.PWM_CTRL_CMD_SHIFT
        return enabled, decode_pwm_command(raw)
