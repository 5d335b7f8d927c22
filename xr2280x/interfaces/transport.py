"""HID transport protocol.

A transport is one opened USB HID interface of the bridge. The driver never
opens or closes transports itself; callers hand in objects that already talk
to the device. The method shapes follow the ``hid.device`` class of the
hidapi Python binding, so an opened hidapi device satisfies this protocol
without an adapter.

PROTOCOL CONTRACT:
- Feature reports carry the report id as byte 0, both ways
- Interrupt reads return an empty sequence when the timeout expires
- Failures are raised as OSError or ValueError (what hidapi raises)
- send_feature_report() and write() may instead report failure by
  returning -1, as hidapi does; the driver checks these return values and
  also rejects an I2C OUT report that was only partly written
- Calls block; there is no cancellation beyond the per-call timeout
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

TRANSPORT_ERRORS: tuple[type[Exception], ...] = (OSError, ValueError)
"""Exception types treated as opaque transport failures."""


class HidTransport(Protocol):
    """One opened HID interface (structural subtyping).

    Implementations must provide the methods below. This protocol does NOT
    enforce behavior, only the method existence.
    """

    def send_feature_report(self, data: Sequence[int]) -> int:
        """Send a feature report.

        Args:
            data: Full report, report id first

        Returns:
            Number of bytes sent, or -1 on failure
        """
        ...

    def get_feature_report(self, report_num: int, max_length: int) -> Sequence[int]:
        """Request a feature report.

        Args:
            report_num: Report id to request
            max_length: Maximum report size including the id byte

        Returns:
            Report bytes, report id first
        """
        ...

    def write(self, data: Sequence[int]) -> int:
        """Write an output (interrupt) report.

        Returns:
            Number of bytes written, or -1 on failure
        """
        ...

    def read(self, max_length: int, timeout_ms: int = 0) -> Sequence[int]:
        """Read an input (interrupt) report, blocking up to timeout_ms.

        Returns:
            Report bytes, or an empty sequence on timeout
        """
        ...

    def get_manufacturer_string(self) -> Optional[str]:
        """USB manufacturer string."""
        ...

    def get_product_string(self) -> Optional[str]:
        """USB product string."""
        ...

    def get_serial_number_string(self) -> Optional[str]:
        """USB serial number string."""
        ...
