"""Custom exceptions used throughout the xr2280x package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from xr2280x.core.i2c import I2cAddress


class Xr2280xError(Exception):
    """Base exception for all driver errors.

    All driver-specific exceptions inherit from this class, so callers can
    catch every failure of a device handle with a single except clause.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """

        super().__init__(message)
        self.details = details or {}


class ConfigurationError(Xr2280xError):
    """Raised when there's an error in driver configuration.

    This includes:
    - Unreadable or malformed YAML
    - Missing required configuration keys
    - Values outside their allowed range
    """

    def __init__(
        self,
        config_key: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize configuration error.

        Args:
            config_key: The configuration key that caused the error
            message: Description of what's wrong. If omitted, config_key is
                treated as the message and the key defaults to "configuration".
            details: Additional context
        """
        if message is None:
            message = config_key or "Invalid configuration"
            config_key = "configuration"
        if config_key is None:
            config_key = "configuration"

        full_message = f"Configuration error for '{config_key}': {message}"
        super().__init__(message=full_message, details=details)
        self.config_key = config_key


class DeviceNotFound(Xr2280xError):
    """Raised when the HID interface needed for an operation is not available."""

    def __init__(self, message: str = "Device interface not available"):
        super().__init__(message)


class TransportError(Xr2280xError):
    """Raised when the underlying HID transport fails outside a register access.

    The original transport exception is chained as ``__cause__``; its content
    is not interpreted.
    """

    def __init__(self, operation: str, details: Optional[dict[str, Any]] = None):
        super().__init__(f"HID transport error during {operation}", details=details)
        self.operation = operation


class InvalidReportError(Xr2280xError):
    """Raised when a HID report has an unexpected size or layout."""

    def __init__(self, length: int, message: Optional[str] = None):
        if message is None:
            message = f"Invalid HID report received or unexpected size ({length} bytes)"
        super().__init__(message, details={"length": length})
        self.length = length


class FeatureReportError(Xr2280xError):
    """Raised when a register write or read over feature reports fails.

    Examples:
    - Transport rejected the feature report
    - Response had the wrong length or report id
    """

    def __init__(self, address: int, details: Optional[dict[str, Any]] = None):
        details = details or {}
        details["address"] = f"0x{address:04X}"
        message = (
            "Feature report error (e.g., incorrect length, device error) "
            f"while accessing register 0x{address:04X}"
        )
        super().__init__(message, details=details)
        self.address = address


class ArgumentOutOfRangeError(Xr2280xError):
    """Raised when a numeric argument is outside its allowed range."""

    def __init__(self, message: str):
        super().__init__(f"Argument out of range: {message}")


class PinArgumentOutOfRange(ArgumentOutOfRangeError):
    """Raised when a GPIO pin number is outside 0-31."""

    def __init__(self, pin: int, message: str = "Pin number must be 0-31"):
        super().__init__(f"GPIO pin {pin}: {message}")
        self.details["pin"] = pin
        self.pin = pin


class InvalidI2c10BitAddress(ArgumentOutOfRangeError):
    """Raised when a 10-bit I2C address is outside 0x000-0x3FF."""

    def __init__(self, address: int):
        super().__init__(f"Invalid I2C 10-bit address: 0x{address:04X}")
        self.details["address"] = f"0x{address:04X}"
        self.address = address


class UnsupportedFeature(Xr2280xError):
    """Raised when the connected chip model lacks the requested feature.

    Examples:
    - GPIO pin 8-31 on an 8-GPIO XR22800/XR22801
    - GPIO Group 1 operations on an 8-GPIO chip
    """

    def __init__(self, reason: str):
        super().__init__(f"Feature not supported by this chip model: {reason}")
        self.reason = reason


class BufferTooSmall(Xr2280xError):
    """Raised when a caller buffer cannot hold the data returned by the device."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Provided buffer is too small (expected at least {expected}, got {actual})",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class OperationTooLarge(Xr2280xError):
    """Raised when a transfer exceeds the report payload size."""

    def __init__(self, max_size: int, actual: int):
        super().__init__(
            f"Requested operation size is too large (max {max_size}, got {actual})",
            details={"max": max_size, "actual": actual},
        )
        self.max = max_size
        self.actual = actual


class InterruptParseError(Xr2280xError):
    """Raised when an interrupt report is too short for the speculative decode."""

    def __init__(self, reason: str):
        super().__init__(f"GPIO interrupt report parsing failed: {reason}")
        self.reason = reason


class GpioVerificationError(Xr2280xError):
    """Raised by verified writes when the read-back level never matches."""

    def __init__(self, pin: int, expected: Any, actual: Any, attempts: int):
        super().__init__(
            f"GPIO pin {pin} read back {actual} after writing {expected} "
            f"({attempts} attempt(s))",
            details={"pin": pin, "attempts": attempts},
        )
        self.pin = pin
        self.expected = expected
        self.actual = actual
        self.attempts = attempts


class I2cError(Xr2280xError):
    """Base exception for I2C transaction failures reported by the bridge."""

    description = "I2C transaction failed"

    def __init__(self, address: I2cAddress, details: Optional[dict[str, Any]] = None):
        details = details or {}
        details["address"] = str(address)
        super().__init__(f"{self.description} for address {address}", details=details)
        self.address = address


class I2cNack(I2cError):
    """Slave did not acknowledge. Expected during bus scans."""

    description = "I2C transaction aborted: NACK received from slave"


class I2cTimeout(I2cError):
    """Bus timeout flag set, or no response from the transport in time."""

    description = "I2C transaction aborted: Bus Timeout"


class I2cArbitrationLost(I2cError):
    """Another master won arbitration."""

    description = "I2C transaction aborted: Arbitration Lost"


class I2cRequestError(I2cError):
    """The bridge rejected the request (check arguments)."""

    description = "I2C transaction failed: Invalid request from host"


class I2cUnknownError(I2cError):
    """Status byte was non-zero but carried none of the known flags."""

    description = "I2C transaction failed: Unknown error"

    def __init__(self, address: I2cAddress, flags: int):
        super().__init__(address, details={"flags": f"0x{flags:02X}"})
        self.flags = flags
