"""Buffered multi-pin level updates.

A transaction collects target levels and commits them with at most one SET
and one CLEAR write per GPIO group touched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from xr2280x.core.gpio_enums import GpioLevel
from xr2280x.core.gpio_pin import GpioGroup, GpioPin, PinLike

if TYPE_CHECKING:
    from xr2280x.core.gpio import GpioController

logger = logging.getLogger(__name__)


class GpioTransaction:
    """Accumulates pin levels and writes them in one batch.

    Example:
        tx = device.gpio.transaction()
        tx.set_high(0).set_low(1).set_pin(2, GpioLevel.HIGH)
        writes = tx.commit()  # at most 2 writes per group
    """

    def __init__(self, controller: GpioController):
        self._controller = controller
        self._pending: dict[GpioPin, GpioLevel] = {}

    def set_pin(self, pin: PinLike, level: GpioLevel) -> GpioTransaction:
        """Queue a level. A later call for the same pin replaces this one.

        Raises:
            PinArgumentOutOfRange: For numbers outside 0-31
            UnsupportedFeature: If the pin does not exist on this chip
        """
        p = GpioPin.coerce(pin)
        self._controller.capabilities.check_pin(p)
        self._pending[p] = level
        return self

    def set_high(self, pin: PinLike) -> GpioTransaction:
        return self.set_pin(pin, GpioLevel.HIGH)

    def set_low(self, pin: PinLike) -> GpioTransaction:
        return self.set_pin(pin, GpioLevel.LOW)

    def set_all_high(self, pins: Iterable[PinLike]) -> GpioTransaction:
        for pin in pins:
            self.set_pin(pin, GpioLevel.HIGH)
        return self

    def set_all_low(self, pins: Iterable[PinLike]) -> GpioTransaction:
        for pin in pins:
            self.set_pin(pin, GpioLevel.LOW)
        return self

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending)

    @property
    def pending_pin_count(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        """Drop all queued levels without writing anything."""
        self._pending.clear()

    def commit(self) -> int:
        """Write all queued levels and empty the transaction.

        Returns:
            Number of register writes issued
        """
        if not self._pending:
            return 0

        masks: dict[GpioGroup, list[int]] = {}
        for pin, level in self._pending.items():
            entry = masks.setdefault(pin.group, [0, 0])
            entry[0] |= pin.mask
            if level == GpioLevel.HIGH:
                entry[1] |= pin.mask

        writes = 0
        for group in sorted(masks, key=lambda g: g.index):
            mask, pattern = masks[group]
            writes += self._controller.write_masked(group, mask, pattern)

        logger.debug(
            "Committed GPIO transaction: %d pin(s), %d write(s)",
            len(self._pending),
            writes,
        )
        self._pending.clear()
        return writes
