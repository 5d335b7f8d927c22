"""Emulated I2C bus behind the bridge's I2C interface.

The bus consumes OUT reports exactly as the driver builds them, dispatches
to attached targets, and answers with IN reports:

  IN  [status, writeLen, readLen, 0, data...]  padded to 36 bytes

Absent addresses answer with the NACK status bit. Tests can queue raw
responses, per-address status overrides, or put the bus in a stuck state
where no response is produced at all.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from xr2280x.core import consts
from xr2280x.core.i2c import I2cAddress
from xr2280x.utils.consts import ConstUtils

logger = logging.getLogger(__name__)

_10BIT_HEADER_MASK = 0xF8


class EmulatedI2cTarget:
    """A register-pointer memory device (EEPROM / sensor style).

    The first written byte selects the pointer, further bytes are stored
    from there; reads return bytes from the pointer, auto-incrementing.
    """

    def __init__(self, size: int = 256, data: Optional[bytes] = None):
        self.memory = bytearray(size)
        if data:
            self.memory[: len(data)] = data
        self.pointer = 0

    def write(self, data: bytes) -> None:
        if not data:
            return
        self.pointer = data[0] % len(self.memory)
        for byte in data[1:]:
            self.memory[self.pointer] = byte
            self.pointer = (self.pointer + 1) % len(self.memory)

    def read(self, length: int) -> bytes:
        out = bytearray()
        for _ in range(length):
            out.append(self.memory[self.pointer])
            self.pointer = (self.pointer + 1) % len(self.memory)
        return bytes(out)


@dataclass(frozen=True)
class I2cTransferRecord:
    """One decoded OUT report, as seen by the bus."""

    address: I2cAddress
    flags: int
    write_data: bytes
    read_len: int


@dataclass
class EmulatedI2cBus:
    """Targets keyed by address, plus fault injection."""

    targets: dict[I2cAddress, EmulatedI2cTarget] = field(default_factory=dict)
    status_overrides: dict[I2cAddress, int] = field(default_factory=dict)
    stuck: bool = False
    transfers: list[I2cTransferRecord] = field(default_factory=list)
    _queued: deque = field(default_factory=deque)

    def attach(
        self, address: Union[int, I2cAddress], target: Optional[EmulatedI2cTarget] = None
    ) -> EmulatedI2cTarget:
        """Attach a target (a fresh memory device if none is given)."""
        key = _key(address)
        target = target or EmulatedI2cTarget()
        self.targets[key] = target
        return target

    def detach(self, address: Union[int, I2cAddress]) -> None:
        self.targets.pop(_key(address), None)

    def set_status(self, address: Union[int, I2cAddress], status: int) -> None:
        """Answer every transfer to address with this status byte."""
        self.status_overrides[_key(address)] = status

    def queue_response(self, raw: Optional[bytes]) -> None:
        """Return raw (or no response for None) for the next transfer."""
        self._queued.append(raw)

    def handle(self, out_report: Sequence[int]) -> Optional[bytes]:
        """Process one OUT report; None means no response (timeout)."""
        report = bytes(out_report)
        record = self._decode(report)
        if record is not None:
            self.transfers.append(record)

        if self._queued:
            return self._queued.popleft()
        if self.stuck:
            logger.debug("I2C bus stuck: dropping transfer")
            return None
        if record is None:
            return self._response(consts.I2C_IN_REQUEST_ERROR, 0, 0)

        override = self.status_overrides.get(record.address)
        if override is not None:
            return self._response(override, len(record.write_data), 0)

        target = self.targets.get(record.address)
        if target is None:
            return self._response(consts.I2C_IN_NAK_RECEIVED, 0, 0)

        target.write(record.write_data)
        data = target.read(record.read_len) if record.read_len else b""
        return self._response(0, len(record.write_data), len(data), data)

    # Private helpers -------------------------------------------------------

    @staticmethod
    def _decode(report: bytes) -> Optional[I2cTransferRecord]:
        if len(report) < consts.I2C_IN_HEADER_SIZE:
            return None
        flags, write_len, read_len, addr_byte = report[:4]
        if (
            write_len > consts.I2C_REPORT_MAX_DATA_SIZE
            or read_len > consts.I2C_REPORT_MAX_DATA_SIZE
        ):
            return None
        payload = report[4 : 4 + write_len]

        if (addr_byte & _10BIT_HEADER_MASK) == consts.I2C_10BIT_HEADER and payload:
            value = (((addr_byte >> 1) & 0x3) << 8) | payload[0]
            address = I2cAddress.new_10bit(value)
            payload = payload[1:]
        elif addr_byte <= consts.I2C_MAX_7BIT_ADDRESS:
            address = I2cAddress.new_7bit(addr_byte)
        else:
            return None
        return I2cTransferRecord(address, flags, bytes(payload), read_len)

    @staticmethod
    def _response(status: int, write_len: int, read_len: int, data: bytes = b"") -> bytes:
        out = bytearray(consts.I2C_IN_REPORT_SIZE)
        out[0] = status & ConstUtils.MASK_8_BITS
        out[1] = write_len
        out[consts.I2C_IN_READ_LENGTH_OFFSET] = read_len
        start = consts.I2C_IN_DATA_OFFSET
        out[start : start + len(data)] = data
        return bytes(out)


def _key(address: Union[int, I2cAddress]) -> I2cAddress:
    if isinstance(address, I2cAddress):
        return address
    return I2cAddress.new_7bit(address)
