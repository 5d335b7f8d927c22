"""I2C transaction engine.

Unlike register access, I2C transfers use interrupt reports on the I2C HID
interface. One transfer is one OUT report followed by one IN report:

  OUT  [flags, writeLen, readLen, addrByte, data...]  padded to 36 bytes
  IN   [status, ?, readLen, ?, data...]

10-BIT ADDRESSING:
The address byte becomes the 11110XX0 header carrying address bits 9:8,
and the low address byte is sent as the first payload byte ahead of the
caller's data (writeLen counts it).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntFlag
from typing import Callable, Optional, Union

from xr2280x.core import consts
from xr2280x.core.exceptions import (
    ArgumentOutOfRangeError,
    BufferTooSmall,
    I2cArbitrationLost,
    I2cNack,
    I2cRequestError,
    I2cTimeout,
    I2cUnknownError,
    InvalidI2c10BitAddress,
    InvalidReportError,
    OperationTooLarge,
    TransportError,
)
from xr2280x.core.register_access import RegisterAccess
from xr2280x.interfaces.transport import TRANSPORT_ERRORS
from xr2280x.utils.config_loader import I2cConfig
from xr2280x.utils.consts import ConstUtils, round_half_up

logger = logging.getLogger(__name__)

ScanProgress = Callable[[int, bool, int, int], None]
"""progress(address, found, index, total)"""


class I2cFlags(IntFlag):
    """Bits of the OUT report flags byte."""

    NONE = 0
    START = consts.I2C_OUT_START_BIT
    STOP = consts.I2C_OUT_STOP_BIT
    ACK_LAST_READ = consts.I2C_OUT_ACK_LAST_READ


@dataclass(frozen=True)
class I2cAddress:
    """A validated 7-bit or 10-bit slave address.

    Build with new_7bit() or new_10bit(); range checks happen here so that
    transfers never see an invalid address.
    """

    value: int
    ten_bit: bool = False

    def __post_init__(self) -> None:
        if self.ten_bit:
            if not 0 <= self.value <= consts.I2C_MAX_10BIT_ADDRESS:
                raise InvalidI2c10BitAddress(self.value)
        elif not 0 <= self.value <= consts.I2C_MAX_7BIT_ADDRESS:
            raise ArgumentOutOfRangeError(
                f"7-bit I2C address must be 0-127 (got 0x{self.value:X})"
            )

    @classmethod
    def new_7bit(cls, address: int) -> I2cAddress:
        return cls(address, ten_bit=False)

    @classmethod
    def new_10bit(cls, address: int) -> I2cAddress:
        return cls(address, ten_bit=True)

    @property
    def header_byte(self) -> int:
        """Byte placed in the OUT report address slot."""
        if not self.ten_bit:
            return self.value
        return consts.I2C_10BIT_HEADER | (((self.value >> 8) & 0x3) << 1)

    @property
    def extra_byte(self) -> Optional[int]:
        """Low address byte sent ahead of the data (10-bit only)."""
        if not self.ten_bit:
            return None
        return self.value & ConstUtils.MASK_8_BITS

    def __str__(self) -> str:
        if self.ten_bit:
            return f"10-bit 0x{self.value:03X}"
        return f"7-bit 0x{self.value:02X}"


AddressLike = Union[int, I2cAddress]


def _coerce_address(address: AddressLike) -> I2cAddress:
    if isinstance(address, I2cAddress):
        return address
    return I2cAddress.new_7bit(address)


def scl_cycles_for_speed(speed_khz: int) -> tuple[int, int]:
    """Compute (SCL_LOW, SCL_HIGH) cycle counts for a bus speed.

    Raises:
        ArgumentOutOfRangeError: If speed_khz is not within 1-400
    """
    if not 1 <= speed_khz <= consts.I2C_MAX_SPEED_KHZ:
        raise ArgumentOutOfRangeError(
            f"I2C speed {speed_khz} kHz out of range (1-{consts.I2C_MAX_SPEED_KHZ})"
        )
    total = consts.I2C_CLOCK_BUDGET_KHZ // speed_khz
    low = total // 2
    high = total - low
    if speed_khz <= consts.I2C_STANDARD_MODE_KHZ:
        min_low, min_high = consts.I2C_MIN_CYCLES_STANDARD
    else:
        min_low, min_high = consts.I2C_MIN_CYCLES_FAST
    return max(low, min_low), max(high, min_high)


def build_out_report(
    address: I2cAddress, write_data: bytes, read_len: int, flags: int
) -> list[int]:
    """Build the fixed-size OUT report for one transfer.

    Raises:
        OperationTooLarge: If the payload or read length exceeds 32 bytes
    """
    payload = list(write_data)
    if address.extra_byte is not None:
        payload.insert(0, address.extra_byte)
    if len(payload) > consts.I2C_REPORT_MAX_DATA_SIZE:
        raise OperationTooLarge(consts.I2C_REPORT_MAX_DATA_SIZE, len(payload))
    if read_len > consts.I2C_REPORT_MAX_DATA_SIZE:
        raise OperationTooLarge(consts.I2C_REPORT_MAX_DATA_SIZE, read_len)

    report = [flags & ConstUtils.MASK_8_BITS, len(payload), read_len, address.header_byte]
    report.extend(payload)
    report.extend([0] * (consts.I2C_OUT_REPORT_SIZE - len(report)))
    return report


def check_status(address: I2cAddress, status: int) -> None:
    """Raise the I2C error matching an IN report status byte.

    Flags are checked in priority order: request error, NACK, arbitration
    lost, timeout. Any other non-zero status is reported as unknown.
    """
    if status & consts.I2C_IN_REQUEST_ERROR:
        raise I2cRequestError(address)
    if status & consts.I2C_IN_NAK_RECEIVED:
        raise I2cNack(address)
    if status & consts.I2C_IN_ARBITRATION_LOST:
        raise I2cArbitrationLost(address)
    if status & consts.I2C_IN_TIMEOUT:
        raise I2cTimeout(address)
    if status:
        raise I2cUnknownError(address, status)


class I2cController:
    """Runs I2C transfers through the I2C HID interface."""

    def __init__(self, access: RegisterAccess, config: Optional[I2cConfig] = None):
        self.access = access
        self.config = config or I2cConfig()

    # ==========================================================
    # Core transfer
    # ==========================================================

    def transfer(
        self,
        address: AddressLike,
        write_data: bytes = b"",
        read_buffer: Optional[bytearray] = None,
        flags: int = I2cFlags.START | I2cFlags.STOP,
        timeout_ms: Optional[int] = None,
    ) -> int:
        """Perform one I2C transaction.

        Sends one OUT report, then blocks for one IN report. Sizes are checked
        before anything is sent.

        Args:
            address: Target address (plain ints are 7-bit)
            write_data: Bytes to write, possibly empty
            read_buffer: Buffer to receive read data; its length is the
                number of bytes requested
            flags: I2cFlags for START/STOP/ACK_LAST_READ
            timeout_ms: Response timeout; defaults to the configured one

        Returns:
            Number of bytes copied into read_buffer

        Raises:
            OperationTooLarge: If write payload or read length exceeds 32 bytes
            DeviceNotFound: If no I2C interface is available
            I2cError: Status flags reported a failure, or no response arrived
            BufferTooSmall: The device returned more data than read_buffer holds
            InvalidReportError: The IN report was malformed
            TransportError: The transport raised an error, or sent only part
                of the OUT report
        """
        addr = _coerce_address(address)
        read_len = len(read_buffer) if read_buffer is not None else 0
        out_report = build_out_report(addr, bytes(write_data), read_len, int(flags))
        if timeout_ms is None:
            timeout_ms = self.config.default_timeout_ms

        device = self.access.interface_for(consts.REG_I2C_BASE)
        logger.debug(
            "I2C transfer to %s: write %d bytes, read %d bytes, flags=0x%02X",
            addr,
            len(write_data),
            read_len,
            int(flags),
        )
        logger.debug("I2C OUT report: %s", bytes(out_report).hex(" "))

        try:
            written = device.write(out_report)
        except TRANSPORT_ERRORS as exc:
            raise TransportError("I2C transfer", details={"address": str(addr)}) from exc
        if written < len(out_report):
            logger.debug("I2C OUT report: wrote %d of %d bytes", written, len(out_report))
            raise TransportError(
                "I2C transfer",
                details={"address": str(addr), "written": written},
            )

        try:
            response = bytes(device.read(consts.I2C_IN_REPORT_SIZE, timeout_ms))
        except TRANSPORT_ERRORS as exc:
            raise TransportError("I2C transfer", details={"address": str(addr)}) from exc

        if not response:
            logger.debug("I2C transfer to %s: no response within %d ms", addr, timeout_ms)
            raise I2cTimeout(addr, details={"timeout_ms": timeout_ms})
        logger.debug("I2C IN report: %s", response.hex(" "))
        if len(response) < consts.I2C_IN_HEADER_SIZE:
            raise InvalidReportError(len(response))

        check_status(addr, response[0])
        if read_buffer is None:
            return 0

        reported = response[consts.I2C_IN_READ_LENGTH_OFFSET]
        if reported != read_len:
            logger.warning(
                "I2C read length mismatch: expected %d, got %d", read_len, reported
            )
        if reported > read_len:
            raise BufferTooSmall(expected=reported, actual=read_len)
        available = len(response) - consts.I2C_IN_DATA_OFFSET
        if reported > available:
            raise InvalidReportError(
                len(response),
                f"I2C response reports {reported} bytes but carries {available}",
            )

        start = consts.I2C_IN_DATA_OFFSET
        read_buffer[:reported] = response[start : start + reported]
        return reported

    # ==========================================================
    # Convenience wrappers
    # ==========================================================

    def write(
        self, address: AddressLike, data: bytes, timeout_ms: Optional[int] = None
    ) -> None:
        self.transfer(address, write_data=data, timeout_ms=timeout_ms)

    def read(
        self, address: AddressLike, length: int, timeout_ms: Optional[int] = None
    ) -> bytes:
        """Read length bytes; returns only what the device actually sent."""
        buffer = bytearray(length)
        count = self.transfer(address, read_buffer=buffer, timeout_ms=timeout_ms)
        return bytes(buffer[:count])

    def write_read(
        self,
        address: AddressLike,
        data: bytes,
        length: int,
        timeout_ms: Optional[int] = None,
    ) -> bytes:
        """Write then read within a single transaction (repeated start).

        A short timeout_ms makes a call to an absent or stuck device fail fast;
        None uses the configured default.
        """
        buffer = bytearray(length)
        count = self.transfer(
            address, write_data=data, read_buffer=buffer, timeout_ms=timeout_ms
        )
        return bytes(buffer[:count])

    # ==========================================================
    # Bus configuration
    # ==========================================================

    def set_speed_khz(self, speed_khz: int) -> None:
        """Approximate a bus speed by programming the SCL half-periods."""
        low, high = scl_cycles_for_speed(speed_khz)
        logger.debug(
            "Setting I2C speed ~%dkHz: SCL_LOW=0x%04X, SCL_HIGH=0x%04X",
            speed_khz,
            low,
            high,
        )
        self.access.write_register(consts.REG_SCL_LOW, low)
        self.access.write_register(consts.REG_SCL_HIGH, high)

    def get_speed_khz(self) -> int:
        """Return the approximate bus speed from the SCL registers (0 if unset)."""
        low = self.access.read_register(consts.REG_SCL_LOW)
        high = self.access.read_register(consts.REG_SCL_HIGH)
        if low + high == 0:
            return 0
        return round_half_up(consts.I2C_CLOCK_BUDGET_KHZ / (low + high))

    # ==========================================================
    # Scanning
    # ==========================================================

    def scan(
        self,
        start: int = 0x08,
        end: int = 0x77,
        timeout_ms: Optional[int] = None,
        progress: Optional[ScanProgress] = None,
    ) -> list[int]:
        """Address every 7-bit slot in [start, end] with an empty write.

        ACK means present and NACK means absent. A timeout there also counts
        as absent, but too many in a row point at a stuck bus and the last
        I2cTimeout is raised.

        Returns:
            Sorted list of responding addresses
        """
        first = I2cAddress.new_7bit(start).value
        last = I2cAddress.new_7bit(end).value
        if first > last:
            raise ArgumentOutOfRangeError(
                f"scan range start 0x{first:02X} is after end 0x{last:02X}"
            )
        if timeout_ms is None:
            timeout_ms = self.config.scan_timeout_ms

        total = last - first + 1
        found: list[int] = []
        consecutive_timeouts = 0
        logger.debug("Scanning I2C bus 0x%02X-0x%02X", first, last)

        for index, value in enumerate(range(first, last + 1)):
            present = False
            try:
                self.transfer(I2cAddress.new_7bit(value), timeout_ms=timeout_ms)
                present = True
                consecutive_timeouts = 0
            except I2cNack:
                consecutive_timeouts = 0
            except I2cTimeout:
                consecutive_timeouts += 1
                logger.warning(
                    "I2C scan: timeout at 0x%02X (%d in a row)",
                    value,
                    consecutive_timeouts,
                )
                if consecutive_timeouts >= self.config.scan_max_consecutive_timeouts:
                    raise

            if present:
                found.append(value)
            if progress is not None:
                progress(value, present, index, total)

        logger.debug("I2C scan found %d device(s)", len(found))
        return found
