"""Interface abstractions for the driver.

- HidTransport: one opened HID interface (structural protocol)
"""

from xr2280x.interfaces.transport import TRANSPORT_ERRORS, HidTransport

__all__ = [
    "HidTransport",
    "TRANSPORT_ERRORS",
]
