"""GPIO control plane over the EDGE virtual registers.

REGISTER ACCESS PATTERN
=======================
Configuration bits (function select, direction, tri-state, open-drain,
pull-up, pull-down, interrupt mask and edge select) are plain 16-bit
registers, one bit per pin, changed with a read-modify-write that is
skipped when the bit already holds the target value.

Output levels are different. Each group has a write-only SET and a
write-only CLEAR register: writing a mask to SET drives those pins high,
writing it to CLEAR drives them low, and the chip applies the change
without touching other pins. Level writes therefore never read first.

Every operation checks the pin or group against the detected capabilities
before any report is sent.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from xr2280x.core import consts
from xr2280x.core.capabilities import Capabilities
from xr2280x.core.exceptions import GpioVerificationError
from xr2280x.core.gpio_enums import GpioDirection, GpioLevel, GpioPull
from xr2280x.core.gpio_pin import GpioGroup, GpioPin, PinLike, split_masked_write
from xr2280x.core.gpio_transaction import GpioTransaction
from xr2280x.core.register_access import RegisterAccess
from xr2280x.utils.config_loader import GpioWriteConfig
from xr2280x.utils.consts import ConstUtils

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GpioInterruptConfig:
    """Interrupt mask and edge-select bits of one pin."""

    enabled: bool
    positive_edge: bool
    negative_edge: bool


class GpioController:
    """Pin and group operations for the EDGE GPIO block."""

    def __init__(
        self,
        access: RegisterAccess,
        capabilities: Capabilities,
        write_config: Optional[GpioWriteConfig] = None,
    ):
        self.access = access
        self.capabilities = capabilities
        self.write_config = write_config or GpioWriteConfig.default()

    # ==========================================================
    # Single-pin configuration
    # ==========================================================

    def assign_to_edge(self, pin: PinLike, enable: bool = True) -> None:
        """Route a pin to the EDGE (GPIO) function, or release it."""
        p = self._checked_pin(pin)
        logger.debug("Assigning GPIO pin %s to EDGE: %s", p, enable)
        self._update_bit(consts.REG_FUNC_SEL_0, p, enable)

    def is_assigned_to_edge(self, pin: PinLike) -> bool:
        return self._read_bit(consts.REG_FUNC_SEL_0, self._checked_pin(pin))

    def set_direction(self, pin: PinLike, direction: GpioDirection) -> None:
        p = self._checked_pin(pin)
        logger.debug("Setting GPIO pin %s direction to %s", p, direction.name)
        self._update_bit(consts.REG_DIR_0, p, direction == GpioDirection.OUTPUT)

    def get_direction(self, pin: PinLike) -> GpioDirection:
        p = self._checked_pin(pin)
        return GpioDirection(int(self._read_bit(consts.REG_DIR_0, p)))

    def write(self, pin: PinLike, level: GpioLevel) -> None:
        """Drive an output pin high or low through the SET/CLEAR registers."""
        p = self._checked_pin(pin)
        base = consts.REG_SET_0 if level == GpioLevel.HIGH else consts.REG_CLEAR_0
        logger.debug("Writing GPIO pin %s = %s", p, level.name)
        self.access.write_register(p.group.register(base), p.mask)

    def read(self, pin: PinLike) -> GpioLevel:
        """Read the current level of a pin from the STATE register."""
        p = self._checked_pin(pin)
        return GpioLevel(int(self._read_bit(consts.REG_STATE_0, p)))

    def write_verified(
        self,
        pin: PinLike,
        level: GpioLevel,
        config: Optional[GpioWriteConfig] = None,
    ) -> None:
        """Write a level and read it back, retrying per the write policy.

        With ``verify_writes`` off this is a single plain write. Otherwise
        the write is attempted ``1 + retry_attempts`` times, sleeping
        ``retry_delay_ms`` between attempts, until the read-back matches.

        Args:
            pin: Pin to drive
            level: Target level
            config: Policy for this call; defaults to the controller's policy

        Raises:
            GpioVerificationError: If the level never reads back as written
        """
        cfg = config or self.write_config
        p = self._checked_pin(pin)
        if not cfg.verify_writes:
            self.write(p, level)
            return

        attempts = 1 + cfg.retry_attempts
        actual = None
        for attempt in range(1, attempts + 1):
            self.write(p, level)
            actual = self.read(p)
            if actual == level:
                if attempt > 1:
                    logger.debug("GPIO pin %s verified after %d attempts", p, attempt)
                return
            logger.warning(
                "GPIO pin %s read back %s after writing %s (attempt %d/%d)",
                p,
                actual.name,
                level.name,
                attempt,
                attempts,
            )
            if attempt < attempts and cfg.retry_delay_ms:
                time.sleep(cfg.retry_delay_ms / 1000.0)

        raise GpioVerificationError(p.number, level, actual, attempts)

    def set_pull(self, pin: PinLike, pull: GpioPull) -> None:
        """Select the pull resistor; pull-up and pull-down are never both set."""
        p = self._checked_pin(pin)
        logger.debug("Setting GPIO pin %s pull to %s", p, pull.name)
        self._apply_pull(p.group, p.mask, pull)

    def get_pull(self, pin: PinLike) -> GpioPull:
        p = self._checked_pin(pin)
        up = self._read_bit(consts.REG_PULL_UP_0, p)
        down = self._read_bit(consts.REG_PULL_DOWN_0, p)
        if up and not down:
            return GpioPull.UP
        if down and not up:
            return GpioPull.DOWN
        return GpioPull.NONE

    def set_open_drain(self, pin: PinLike, enable: bool) -> None:
        p = self._checked_pin(pin)
        logger.debug("Setting GPIO pin %s open-drain: %s", p, enable)
        self._update_bit(consts.REG_OPEN_DRAIN_0, p, enable)

    def is_open_drain(self, pin: PinLike) -> bool:
        return self._read_bit(consts.REG_OPEN_DRAIN_0, self._checked_pin(pin))

    def set_tri_state(self, pin: PinLike, enable: bool) -> None:
        p = self._checked_pin(pin)
        logger.debug("Setting GPIO pin %s tri-state: %s", p, enable)
        self._update_bit(consts.REG_TRI_STATE_0, p, enable)

    def is_tri_stated(self, pin: PinLike) -> bool:
        return self._read_bit(consts.REG_TRI_STATE_0, self._checked_pin(pin))

    def configure_interrupt(
        self,
        pin: PinLike,
        enable: bool,
        positive_edge: bool = False,
        negative_edge: bool = False,
    ) -> None:
        """Enable or disable the interrupt of a pin.

        Edge-select bits are only written when enabling; disabling leaves
        them as they were.
        """
        p = self._checked_pin(pin)
        logger.debug(
            "Configuring interrupt for pin %s: enable=%s, pos_edge=%s, neg_edge=%s",
            p,
            enable,
            positive_edge,
            negative_edge,
        )
        self._update_bit(consts.REG_INTR_MASK_0, p, enable)
        if enable:
            self._update_bit(consts.REG_INTR_POS_EDGE_0, p, positive_edge)
            self._update_bit(consts.REG_INTR_NEG_EDGE_0, p, negative_edge)

    def get_interrupt_config(self, pin: PinLike) -> GpioInterruptConfig:
        p = self._checked_pin(pin)
        return GpioInterruptConfig(
            enabled=self._read_bit(consts.REG_INTR_MASK_0, p),
            positive_edge=self._read_bit(consts.REG_INTR_POS_EDGE_0, p),
            negative_edge=self._read_bit(consts.REG_INTR_NEG_EDGE_0, p),
        )

    # ==========================================================
    # Group (masked) operations
    # ==========================================================

    def assign_to_edge_masked(
        self, group: GpioGroup, mask: int, enable: bool = True
    ) -> None:
        self.capabilities.check_group(group)
        self._update_mask(consts.REG_FUNC_SEL_0, group, mask, enable)

    def set_direction_masked(
        self, group: GpioGroup, mask: int, direction: GpioDirection
    ) -> None:
        self.capabilities.check_group(group)
        logger.debug(
            "Setting %s pins (mask=0x%04X) direction to %s",
            group.name,
            mask,
            direction.name,
        )
        self._update_mask(
            consts.REG_DIR_0, group, mask, direction == GpioDirection.OUTPUT
        )

    def write_masked(self, group: GpioGroup, mask: int, pattern: int) -> int:
        """Set masked pins to the levels in pattern.

        At most one SET and one CLEAR write are issued, whatever the number of
        pins involved.

        Returns:
            Number of register writes issued (0-2)
        """
        self.capabilities.check_group(group)
        set_subset, clear_subset = split_masked_write(mask, pattern)
        logger.debug(
            "Writing %s pins (mask=0x%04X) = 0x%04X", group.name, mask, pattern
        )
        writes = 0
        if set_subset:
            self.access.write_register(group.register(consts.REG_SET_0), set_subset)
            writes += 1
        if clear_subset:
            self.access.write_register(
                group.register(consts.REG_CLEAR_0), clear_subset
            )
            writes += 1
        return writes

    def read_group(self, group: GpioGroup) -> int:
        """Return the 16-bit STATE register of a group."""
        self.capabilities.check_group(group)
        return self.access.read_register(group.register(consts.REG_STATE_0))

    def set_pull_masked(self, group: GpioGroup, mask: int, pull: GpioPull) -> None:
        self.capabilities.check_group(group)
        logger.debug(
            "Setting %s pins (mask=0x%04X) pull to %s", group.name, mask, pull.name
        )
        self._apply_pull(group, mask, pull)

    def set_open_drain_masked(self, group: GpioGroup, mask: int, enable: bool) -> None:
        self.capabilities.check_group(group)
        self._update_mask(consts.REG_OPEN_DRAIN_0, group, mask, enable)

    def set_tri_state_masked(self, group: GpioGroup, mask: int, enable: bool) -> None:
        self.capabilities.check_group(group)
        self._update_mask(consts.REG_TRI_STATE_0, group, mask, enable)

    # ==========================================================
    # Composite setup
    # ==========================================================

    def setup_output(
        self, pin: PinLike, level: GpioLevel, pull: GpioPull = GpioPull.NONE
    ) -> None:
        """Configure a pin as an output at the given level.

        Steps run in order assign -> direction -> pull -> level. Current state
        is read first and any step that already matches is skipped.
        """
        p = self._checked_pin(pin)
        levels = p.mask if level == GpioLevel.HIGH else 0
        self._setup_group(p.group, p.mask, GpioDirection.OUTPUT, pull, levels=levels)

    def setup_input(self, pin: PinLike, pull: GpioPull = GpioPull.NONE) -> None:
        """Configure a pin as an input (assign -> direction -> pull)."""
        p = self._checked_pin(pin)
        self._setup_group(p.group, p.mask, GpioDirection.INPUT, pull, levels=None)

    def setup_outputs(
        self,
        pins: Iterable[tuple[PinLike, GpioLevel]],
        pull: GpioPull = GpioPull.NONE,
    ) -> None:
        """Configure several outputs, touching each register once per group."""
        per_group: dict[GpioGroup, list[int]] = {}
        for pin, level in pins:
            p = self._checked_pin(pin)
            entry = per_group.setdefault(p.group, [0, 0])
            entry[0] |= p.mask
            if level == GpioLevel.HIGH:
                entry[1] |= p.mask
            else:
                entry[1] &= ~p.mask
        for group in sorted(per_group, key=lambda g: g.index):
            mask, levels = per_group[group]
            self._setup_group(group, mask, GpioDirection.OUTPUT, pull, levels=levels)

    def setup_inputs(
        self, pins: Sequence[PinLike], pull: GpioPull = GpioPull.NONE
    ) -> None:
        """Configure several inputs, touching each register once per group."""
        per_group: dict[GpioGroup, int] = {}
        for pin in pins:
            p = self._checked_pin(pin)
            per_group[p.group] = per_group.get(p.group, 0) | p.mask
        for group in sorted(per_group, key=lambda g: g.index):
            self._setup_group(
                group, per_group[group], GpioDirection.INPUT, pull, levels=None
            )

    def transaction(self) -> GpioTransaction:
        """Start a buffered multi-pin level update."""
        return GpioTransaction(self)

    # ==========================================================
    # Private helpers
    # ==========================================================

    def _checked_pin(self, pin: PinLike) -> GpioPin:
        p = GpioPin.coerce(pin)
        self.capabilities.check_pin(p)
        return p

    def _update_bit(self, group0_address: int, pin: GpioPin, enable: bool) -> bool:
        return self.access.update_register(
            pin.group.register(group0_address), pin.mask, enable
        )

    def _read_bit(self, group0_address: int, pin: GpioPin) -> bool:
        value = self.access.read_register(pin.group.register(group0_address))
        return bool(value & pin.mask)

    def _update_mask(
        self, group0_address: int, group: GpioGroup, mask: int, enable: bool
    ) -> bool:
        return self.access.update_register(
            group.register(group0_address), mask & ConstUtils.MASK_16_BITS, enable
        )

    def _apply_pull(
        self,
        group: GpioGroup,
        mask: int,
        pull: GpioPull,
        current: Optional[tuple[int, int]] = None,
    ) -> None:
        # The opposite resistor is always cleared before the requested one is set.
        reg_up = group.register(consts.REG_PULL_UP_0)
        reg_down = group.register(consts.REG_PULL_DOWN_0)
        if current is None:
            up = self.access.read_register(reg_up)
            down = self.access.read_register(reg_down)
        else:
            up, down = current

        new_up = (up | mask) if pull == GpioPull.UP else (up & ~mask)
        new_down = (down | mask) if pull == GpioPull.DOWN else (down & ~mask)
        new_up &= ConstUtils.MASK_16_BITS
        new_down &= ConstUtils.MASK_16_BITS

        if pull == GpioPull.DOWN:
            if new_up != up:
                self.access.write_register(reg_up, new_up)
            if new_down != down:
                self.access.write_register(reg_down, new_down)
        else:
            if new_down != down:
                self.access.write_register(reg_down, new_down)
            if new_up != up:
                self.access.write_register(reg_up, new_up)

    def _setup_group(
        self,
        group: GpioGroup,
        mask: int,
        direction: GpioDirection,
        pull: GpioPull,
        levels: Optional[int],
    ) -> None:
        reg_func = group.register(consts.REG_FUNC_SEL_0)
        reg_dir = group.register(consts.REG_DIR_0)

        func_sel = self.access.read_register(reg_func)
        dir_value = self.access.read_register(reg_dir)
        pulls = (
            self.access.read_register(group.register(consts.REG_PULL_UP_0)),
            self.access.read_register(group.register(consts.REG_PULL_DOWN_0)),
        )
        want_output = direction == GpioDirection.OUTPUT
        already_output = (dir_value & mask) == mask
        state = None
        if levels is not None and already_output:
            state = self.access.read_register(group.register(consts.REG_STATE_0))

        logger.debug(
            "Setting up %s pins (mask=0x%04X) as %s, pull %s",
            group.name,
            mask,
            direction.name,
            pull.name,
        )

        if func_sel & mask != mask:
            self.access.write_register(reg_func, func_sel | mask)

        new_dir = (dir_value | mask) if want_output else (dir_value & ~mask)
        if new_dir != dir_value:
            self.access.write_register(reg_dir, new_dir & ConstUtils.MASK_16_BITS)

        self._apply_pull(group, mask, pull, current=pulls)

        if levels is None:
            return
        pending = mask
        if state is not None:
            # Skip pins whose output already reads back at the target level.
            pending &= (state ^ levels) & mask
        if pending:
            self.write_masked(group, pending, levels)
