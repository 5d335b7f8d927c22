"""GPIO interrupt reports from the EDGE interface.

The interrupt report format is not documented. Two separate paths exist:

- InterruptReader.read() captures a report and returns its bytes untouched.
  This is the trustworthy interface.
- parse_interrupt_report() and triggered_pins() apply a SPECULATIVE decode
  that matches observed packet shapes only. Nothing guarantees it reflects
  what the hardware means.

Speculative layout (byte 0 is the id added by the transport):

  [1:3]  group 0 state, little-endian
  [3:5]  group 1 state, little-endian
  [5:7]  group 0 trigger mask (optional)
  [7:9]  group 1 trigger mask (optional)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from xr2280x.core import consts
from xr2280x.core.exceptions import InterruptParseError, TransportError
from xr2280x.core.gpio_enums import GpioEdge
from xr2280x.core.gpio_pin import GpioPin
from xr2280x.core.register_access import RegisterAccess
from xr2280x.interfaces.transport import TRANSPORT_ERRORS
from xr2280x.utils.config_loader import InterruptConfig
from xr2280x.utils.consts import join_le16

logger = logging.getLogger(__name__)

_STATE_BYTES = 4
_TRIGGER_BYTES = 8


@dataclass(frozen=True)
class GpioInterruptReport:
    """Raw interrupt report, including the leading transport id byte."""

    raw_data: bytes = b""

    @property
    def data(self) -> bytes:
        """Report bytes after the transport id byte."""
        return self.raw_data[1:]

    def __bool__(self) -> bool:
        return bool(self.raw_data)


@dataclass(frozen=True)
class ParsedGpioInterruptReport:
    """SPECULATIVE decode of an interrupt report. Fields may be wrong."""

    current_state_group0: int
    current_state_group1: int
    trigger_mask_group0: int = 0
    trigger_mask_group1: int = 0


def parse_interrupt_report(report: GpioInterruptReport) -> ParsedGpioInterruptReport:
    """Apply the speculative decode to a raw report.

    Needs at least 4 data bytes. Trigger masks are decoded when 8 data bytes
    are present and default to 0 otherwise.

    Raises:
        InterruptParseError: If fewer than 4 data bytes are present
    """
    data = report.data
    if len(data) < _STATE_BYTES:
        raise InterruptParseError(
            f"report carries {len(data)} data byte(s), need at least {_STATE_BYTES}"
        )

    logger.warning(
        "Decoding GPIO interrupt report with an unverified layout: %s",
        report.raw_data.hex(" "),
    )
    state0 = join_le16(data[0], data[1])
    state1 = join_le16(data[2], data[3])
    trigger0 = trigger1 = 0
    if len(data) >= _TRIGGER_BYTES:
        trigger0 = join_le16(data[4], data[5])
        trigger1 = join_le16(data[6], data[7])

    return ParsedGpioInterruptReport(
        current_state_group0=state0,
        current_state_group1=state1,
        trigger_mask_group0=trigger0,
        trigger_mask_group1=trigger1,
    )


def triggered_pins(parsed: ParsedGpioInterruptReport) -> list[tuple[GpioPin, GpioEdge]]:
    """List (pin, edge) for every set trigger bit of a speculative decode.

    A pin whose state bit is set is reported as RISING, otherwise FALLING.
    This heuristic is not hardware-verified.
    """
    groups = (
        (parsed.trigger_mask_group0, parsed.current_state_group0),
        (parsed.trigger_mask_group1, parsed.current_state_group1),
    )
    events: list[tuple[GpioPin, GpioEdge]] = []
    for index, (trigger, state) in enumerate(groups):
        for bit in range(consts.GPIO_PINS_PER_GROUP):
            mask = 1 << bit
            if not trigger & mask:
                continue
            edge = GpioEdge.RISING if state & mask else GpioEdge.FALLING
            events.append((GpioPin(index * consts.GPIO_PINS_PER_GROUP + bit), edge))
    return events


class InterruptReader:
    """Captures raw interrupt reports from the EDGE interface."""

    def __init__(self, access: RegisterAccess, config: Optional[InterruptConfig] = None):
        self.access = access
        self.config = config or InterruptConfig()

    def read(self, timeout_ms: Optional[int] = None) -> GpioInterruptReport:
        """Block for one interrupt report.

        Returns:
            The report bytes, or an empty report if the timeout expired

        Raises:
            DeviceNotFound: If no EDGE interface is available
            TransportError: If the transport raised an error
        """
        if timeout_ms is None:
            timeout_ms = self.config.default_timeout_ms
        device = self.access.interface_for(consts.REG_FUNC_SEL_0)

        logger.debug("Reading GPIO interrupt report with timeout %dms", timeout_ms)
        try:
            raw = bytes(device.read(self.config.read_size, timeout_ms))
        except TRANSPORT_ERRORS as exc:
            logger.warning("Failed to read interrupt report: %s", exc)
            raise TransportError("interrupt report read") from exc

        if raw:
            logger.debug("Received interrupt report: %s", raw.hex(" "))
        return GpioInterruptReport(raw)
