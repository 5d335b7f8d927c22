"""Emulated EDGE register block (GPIO, PWM, interrupt configuration).

REGISTER BEHAVIOR
=================
- FUNC_SEL, DIR, TRI_STATE, OPEN_DRAIN, PULL_UP, PULL_DOWN, INTR_* are
  plain storage
- SET and CLEAR are write-only: writing a mask sets or clears those bits
  of the output latch, leaving the other bits alone
- STATE is read-only: output pins reflect the latch, input pins reflect
  the externally driven level, or the pull-up when nothing drives them

Group 1 registers only exist on 32-GPIO models; accessing them on an 8-GPIO
model raises LookupError, as the real chip rejects the feature report.
"""

from __future__ import annotations

from xr2280x.core import consts
from xr2280x.core.gpio_enums import GpioLevel
from xr2280x.core.gpio_pin import GpioGroup, GpioPin
from xr2280x.emulator.register import (
    ReadOnlyRegister,
    RegisterFile,
    SimpleRegister,
    WriteOnlyRegister,
)
from xr2280x.utils.consts import ConstUtils

_PLAIN_GPIO_REGISTERS = (
    consts.REG_FUNC_SEL_0,
    consts.REG_DIR_0,
    consts.REG_TRI_STATE_0,
    consts.REG_OPEN_DRAIN_0,
    consts.REG_PULL_UP_0,
    consts.REG_PULL_DOWN_0,
    consts.REG_INTR_MASK_0,
    consts.REG_INTR_POS_EDGE_0,
    consts.REG_INTR_NEG_EDGE_0,
)

_PWM_REGISTERS = (
    consts.REG_PWM0_CTRL,
    consts.REG_PWM0_HIGH,
    consts.REG_PWM0_LOW,
    consts.REG_PWM1_CTRL,
    consts.REG_PWM1_HIGH,
    consts.REG_PWM1_LOW,
)


class GpioSetRegister(WriteOnlyRegister):
    """SET: atomically drives the written bits of the latch high."""

    def __init__(self, address: int, latch: SimpleRegister):
        super().__init__(address)
        self.latch = latch

    def write(self, val: int) -> None:
        self.latch.write(self.latch.read() | val)


class GpioClearRegister(WriteOnlyRegister):
    """CLEAR: atomically drives the written bits of the latch low."""

    def __init__(self, address: int, latch: SimpleRegister):
        super().__init__(address)
        self.latch = latch

    def write(self, val: int) -> None:
        self.latch.write(self.latch.read() & ~val)


class GpioStateRegister(ReadOnlyRegister):
    """STATE: pin levels as seen on the pads."""

    def __init__(self, address: int, block: EdgeBlock, group: GpioGroup):
        super().__init__(address)
        self.block = block
        self.group = group

    def read(self) -> int:
        return self.block.pad_levels(self.group)


class EdgeBlock:
    """All EDGE registers of one chip."""

    def __init__(self, gpio_count: int = consts.GPIO_COUNT_BASIC):
        if gpio_count not in (consts.GPIO_COUNT_BASIC, consts.GPIO_COUNT_FULL):
            raise ValueError(f"gpio_count must be 8 or 32, got {gpio_count}")
        self.gpio_count = gpio_count
        self.registers = RegisterFile()
        self.groups = [GpioGroup.GROUP0]
        if gpio_count == consts.GPIO_COUNT_FULL:
            self.groups.append(GpioGroup.GROUP1)

        self._latches: dict[GpioGroup, SimpleRegister] = {}
        self._driven: dict[GpioGroup, int] = {}
        self._driven_levels: dict[GpioGroup, int] = {}
        self._forced: dict[GpioGroup, int] = {}
        self._forced_levels: dict[GpioGroup, int] = {}

        for group in self.groups:
            self._add_group(group)
        for address in _PWM_REGISTERS:
            self.registers.add(SimpleRegister(address))

    def _add_group(self, group: GpioGroup) -> None:
        for base in _PLAIN_GPIO_REGISTERS:
            self.registers.add(SimpleRegister(group.register(base)))

        latch = SimpleRegister(
            group.register(consts.REG_SET_0), name=f"LATCH_{group.index}"
        )
        self._latches[group] = latch
        self.registers.add(GpioSetRegister(group.register(consts.REG_SET_0), latch))
        self.registers.add(GpioClearRegister(group.register(consts.REG_CLEAR_0), latch))
        self.registers.add(
            GpioStateRegister(group.register(consts.REG_STATE_0), self, group)
        )
        self._driven[group] = 0
        self._driven_levels[group] = 0
        self._forced[group] = 0
        self._forced_levels[group] = 0

    # ==========================================================
    # Register access
    # ==========================================================

    def read(self, address: int) -> int:
        return self.registers.read(address)

    def write(self, address: int, value: int) -> None:
        self.registers.write(address, value)

    def reset(self) -> None:
        self.registers.reset()
        for latch in self._latches.values():
            latch.reset()
        for group in self.groups:
            self._driven[group] = 0
            self._forced[group] = 0

    # ==========================================================
    # Pad model
    # ==========================================================

    def latch(self, group: GpioGroup) -> int:
        """Return the output latch of a group."""
        return self._latches[group].read()

    def pad_levels(self, group: GpioGroup) -> int:
        direction = self.registers.read(group.register(consts.REG_DIR_0))
        pull_up = self.registers.read(group.register(consts.REG_PULL_UP_0))

        outputs = self.latch(group) & direction
        inputs_mask = ~direction & ConstUtils.MASK_16_BITS
        driven = self._driven[group]
        undriven_inputs = inputs_mask & ~driven & pull_up
        driven_inputs = inputs_mask & driven & self._driven_levels[group]
        levels = outputs | undriven_inputs | driven_inputs

        forced = self._forced[group]
        levels = (levels & ~forced) | (self._forced_levels[group] & forced)
        return levels & ConstUtils.MASK_16_BITS

    def drive_pin(self, pin: int, level: GpioLevel) -> None:
        """Drive an input pin externally (ignored while the pin is an output)."""
        p = self._pin(pin)
        self._driven[p.group] |= p.mask
        self._driven_levels[p.group] = _with_bit(
            self._driven_levels[p.group], p.mask, level
        )

    def force_pin(self, pin: int, level: GpioLevel) -> None:
        """Pin the pad at a level regardless of direction (bus contention)."""
        p = self._pin(pin)
        self._forced[p.group] |= p.mask
        self._forced_levels[p.group] = _with_bit(
            self._forced_levels[p.group], p.mask, level
        )

    def release_pin(self, pin: int) -> None:
        """Stop driving or forcing a pin."""
        p = self._pin(pin)
        self._driven[p.group] &= ~p.mask
        self._forced[p.group] &= ~p.mask

    def _pin(self, pin: int) -> GpioPin:
        p = GpioPin(pin)
        if p.number >= self.gpio_count:
            raise ValueError(f"Invalid pin {pin}; must be 0-{self.gpio_count - 1}")
        return p


def _with_bit(value: int, mask: int, level: GpioLevel) -> int:
    return (value | mask) if level == GpioLevel.HIGH else (value & ~mask)
