"""Emulated HID interface implementing the HidTransport protocol.

One instance stands in for one opened hidapi device. Feature reports are
served from a register backend; interrupt OUT reports go to an optional
emulated I2C bus; interrupt IN reports come from a queue fed by the bus and
by queue_input_report().

Every transport call is counted so tests can assert on traffic, including
the absence of it.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Optional, Protocol, Sequence

from xr2280x.core import consts
from xr2280x.emulator.i2c_bus import EmulatedI2cBus
from xr2280x.utils.consts import join_le16, split_le16

logger = logging.getLogger(__name__)


class RegisterBackend(Protocol):
    """Anything that stores 16-bit registers by virtual address."""

    def read(self, address: int) -> int:
        ...

    def write(self, address: int, value: int) -> None:
        ...


class EmulatedHidInterface:
    """In-memory stand-in for an opened hidapi ``hid.device``."""

    def __init__(
        self,
        registers: RegisterBackend,
        bus: Optional[EmulatedI2cBus] = None,
        manufacturer: Optional[str] = "Exar Corp.",
        product: Optional[str] = None,
        serial_number: Optional[str] = None,
    ):
        self.registers = registers
        self.bus = bus
        self.manufacturer = manufacturer
        self.product = product
        self.serial_number = serial_number

        self._read_address: Optional[int] = None
        self._input_reports: deque[Optional[bytes]] = deque()
        self._pending_errors: deque[Exception] = deque()
        self._pending_codes: deque[int] = deque()
        self.closed = False

        self.feature_reports_sent = 0
        self.feature_reports_received = 0
        self.writes = 0
        self.reads = 0

    # ==========================================================
    # Test hooks
    # ==========================================================

    @property
    def transaction_count(self) -> int:
        """Total number of transport calls made so far."""
        return (
            self.feature_reports_sent
            + self.feature_reports_received
            + self.writes
            + self.reads
        )

    def reset_counters(self) -> None:
        self.feature_reports_sent = 0
        self.feature_reports_received = 0
        self.writes = 0
        self.reads = 0

    def fail_next(self, exc: Optional[Exception] = None) -> None:
        """Make the next transport call raise exc (an OSError by default)."""
        self._pending_errors.append(exc or OSError("emulated HID failure"))

    def fail_next_with_code(self, code: int = -1) -> None:
        """Make the next send_feature_report/write return code, doing nothing.

        hidapi reports most send failures this way instead of raising.
        """
        self._pending_codes.append(code)

    def queue_input_report(self, raw: bytes) -> None:
        """Queue an IN report (e.g. an interrupt report, id byte included)."""
        self._input_reports.append(bytes(raw))

    def close(self) -> None:
        self.closed = True

    # ==========================================================
    # HidTransport
    # ==========================================================

    def send_feature_report(self, data: Sequence[int]) -> int:
        self.feature_reports_sent += 1
        self._check_call()
        if self._pending_codes:
            return self._pending_codes.popleft()
        report = bytes(data)
        if not report:
            raise ValueError("empty feature report")

        report_id = report[0]
        if report_id == consts.REPORT_ID_WRITE_HID_REGISTER:
            if len(report) < consts.WRITE_REGISTER_REPORT_SIZE:
                raise OSError(f"short write-register report ({len(report)} bytes)")
            address = join_le16(report[1], report[2])
            value = join_le16(report[3], report[4])
            try:
                self.registers.write(address, value)
            except LookupError as exc:
                raise OSError(str(exc)) from exc
        elif report_id == consts.REPORT_ID_SET_HID_READ_ADDRESS:
            if len(report) < consts.SET_READ_ADDRESS_REPORT_SIZE:
                raise OSError(f"short set-address report ({len(report)} bytes)")
            self._read_address = join_le16(report[1], report[2])
        else:
            raise OSError(f"unsupported feature report id 0x{report_id:02X}")
        return len(report)

    def get_feature_report(self, report_num: int, max_length: int) -> list[int]:
        self.feature_reports_received += 1
        self._check_call()
        if report_num != consts.REPORT_ID_READ_HID_REGISTER:
            raise OSError(f"unsupported feature report id 0x{report_num:02X}")
        if self._read_address is None:
            raise OSError("read address not set")
        try:
            value = self.registers.read(self._read_address)
        except LookupError as exc:
            raise OSError(str(exc)) from exc
        lo, hi = split_le16(value)
        return [report_num, lo, hi][:max_length]

    def write(self, data: Sequence[int]) -> int:
        self.writes += 1
        self._check_call()
        if self._pending_codes:
            return self._pending_codes.popleft()
        if self.bus is None:
            raise OSError("interface has no interrupt OUT endpoint")
        response = self.bus.handle(data)
        if response is not None:
            self._input_reports.append(response)
        return len(data)

    def read(self, max_length: int, timeout_ms: int = 0) -> list[int]:
        self.reads += 1
        self._check_call()
        if not self._input_reports:
            logger.debug("Emulated read timed out after %d ms", timeout_ms)
            return []
        raw = self._input_reports.popleft()
        if raw is None:
            return []
        return list(raw[:max_length])

    def get_manufacturer_string(self) -> Optional[str]:
        return self.manufacturer

    def get_product_string(self) -> Optional[str]:
        return self.product

    def get_serial_number_string(self) -> Optional[str]:
        return self.serial_number

    # Private helpers -------------------------------------------------------

    def _check_call(self) -> None:
        if self.closed:
            raise ValueError("not open")
        if self._pending_errors:
            raise self._pending_errors.popleft()
