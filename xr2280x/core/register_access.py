"""Register access layer - virtual registers over HID feature reports.

The bridge exposes its configuration as 16-bit virtual registers. Every
access is a small, fixed-layout feature report:

  WriteRegister   [0x3C, addrLo, addrHi, valLo, valHi]
  SetReadAddress  [0x4B, addrLo, addrHi]
  ReadRegister    request id 0x5A, response [0x5A, valLo, valHi]

ROUTING:
The address alone selects the physical interface. The I2C control range
(0x0340-0x0342) goes to the I2C interface, everything else (GPIO, PWM,
interrupt registers) to the EDGE interface.
"""

from __future__ import annotations

import logging
from typing import Optional

from xr2280x.core import consts
from xr2280x.core.exceptions import (
    ArgumentOutOfRangeError,
    DeviceNotFound,
    FeatureReportError,
)
from xr2280x.interfaces.transport import TRANSPORT_ERRORS, HidTransport
from xr2280x.utils.consts import ConstUtils, join_le16, split_le16

logger = logging.getLogger(__name__)


class RegisterAccess:
    """Reads and writes virtual registers on up to two HID interfaces.

    A handle with only one interface is valid; accessing a register owned by
    the missing interface raises DeviceNotFound before any traffic.
    """

    def __init__(
        self,
        i2c: Optional[HidTransport] = None,
        edge: Optional[HidTransport] = None,
    ):
        self.i2c = i2c
        self.edge = edge

    @staticmethod
    def is_i2c_register(address: int) -> bool:
        """Return True if address belongs to the I2C control range."""
        return address in consts.I2C_REGISTER_RANGE

    def interface_for(self, address: int) -> HidTransport:
        """Return the transport that owns a register address.

        Raises:
            DeviceNotFound: If the owning interface was not provided
        """
        if self.is_i2c_register(address):
            if self.i2c is None:
                raise DeviceNotFound(
                    f"I2C interface required for register 0x{address:04X}"
                )
            return self.i2c
        if self.edge is None:
            raise DeviceNotFound(f"EDGE interface required for register 0x{address:04X}")
        return self.edge

    def write_register(self, address: int, value: int) -> None:
        """Write a 16-bit value to a virtual register.

        A negative return from the transport (hidapi's failure code) counts
        as a rejected report.

        Raises:
            ArgumentOutOfRangeError: If address or value do not fit 16 bits
            DeviceNotFound: If the owning interface is missing
            FeatureReportError: If the transport rejects the report
        """
        self._validate_address(address)
        if not 0 <= value <= ConstUtils.MASK_16_BITS:
            raise ArgumentOutOfRangeError(
                f"register value 0x{value:X} does not fit in 16 bits"
            )
        device = self.interface_for(address)

        addr_lo, addr_hi = split_le16(address)
        val_lo, val_hi = split_le16(value)
        report = [consts.REPORT_ID_WRITE_HID_REGISTER, addr_lo, addr_hi, val_lo, val_hi]
        logger.debug(
            "Write %s (0x%04X) = 0x%04X: %s",
            consts.register_name(address),
            address,
            value,
            bytes(report).hex(" "),
        )
        try:
            sent = device.send_feature_report(report)
        except TRANSPORT_ERRORS as exc:
            logger.debug("send_feature_report failed for 0x%04X: %s", address, exc)
            raise FeatureReportError(address) from exc
        self._check_sent(address, sent)

    def read_register(self, address: int) -> int:
        """Read a 16-bit value from a virtual register.

        Two round trips: select the read address, then fetch the value.

        Raises:
            DeviceNotFound: If the owning interface is missing
            FeatureReportError: On transport failure or a malformed response
        """
        self._validate_address(address)
        device = self.interface_for(address)

        addr_lo, addr_hi = split_le16(address)
        try:
            sent = device.send_feature_report(
                [consts.REPORT_ID_SET_HID_READ_ADDRESS, addr_lo, addr_hi]
            )
            self._check_sent(address, sent)
            response = bytes(
                device.get_feature_report(
                    consts.REPORT_ID_READ_HID_REGISTER,
                    consts.READ_REGISTER_REPORT_SIZE,
                )
            )
        except TRANSPORT_ERRORS as exc:
            logger.debug("Feature report exchange failed for 0x%04X: %s", address, exc)
            raise FeatureReportError(address) from exc

        if len(response) != consts.READ_REGISTER_REPORT_SIZE:
            logger.warning(
                "Register 0x%04X: unexpected response length %d (expected %d)",
                address,
                len(response),
                consts.READ_REGISTER_REPORT_SIZE,
            )
            raise FeatureReportError(address, details={"length": len(response)})
        if response[0] != consts.REPORT_ID_READ_HID_REGISTER:
            logger.warning(
                "Register 0x%04X: unexpected report id 0x%02X", address, response[0]
            )
            raise FeatureReportError(address, details={"report_id": response[0]})

        value = join_le16(response[1], response[2])
        logger.debug(
            "Read %s (0x%04X) = 0x%04X", consts.register_name(address), address, value
        )
        return value

    def update_register(self, address: int, mask: int, enable: bool) -> bool:
        """Set or clear mask bits with a read-modify-write.

        The write is skipped when the register already holds the target value.

        Returns:
            True if a write was issued
        """
        current = self.read_register(address)
        new_value = (current | mask) if enable else (current & ~mask)
        new_value &= ConstUtils.MASK_16_BITS
        if new_value == current:
            return False
        self.write_register(address, new_value)
        return True

    def update_field(self, address: int, field_mask: int, field_value: int) -> bool:
        """Replace the bits under field_mask, preserving all other bits.

        Returns:
            True if a write was issued
        """
        current = self.read_register(address)
        new_value = (current & ~field_mask) | (field_value & field_mask)
        new_value &= ConstUtils.MASK_16_BITS
        if new_value == current:
            return False
        self.write_register(address, new_value)
        return True

    # Private helpers -------------------------------------------------------

    @staticmethod
    def _validate_address(address: int) -> None:
        if not 0 <= address <= ConstUtils.MASK_16_BITS:
            raise ArgumentOutOfRangeError(
                f"register address 0x{address:X} does not fit in 16 bits"
            )

    @staticmethod
    def _check_sent(address: int, sent: int) -> None:
        if sent < 0:
            logger.debug("send_feature_report returned %d for 0x%04X", sent, address)
            raise FeatureReportError(address, details={"result": sent})
