"""Helpers for loading and validating driver configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import threading

import yaml  # type: ignore[import-untyped]

from xr2280x.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class I2cConfig:
    default_timeout_ms: int = 500
    scan_timeout_ms: int = 25
    scan_max_consecutive_timeouts: int = 3


@dataclass(frozen=True)
class InterruptConfig:
    default_timeout_ms: int = 1000
    read_size: int = 64


@dataclass(frozen=True)
class GpioWriteConfig:
    """Policy for verified GPIO writes.

    Only GpioController.write_verified() consults this; plain writes are
    always single-shot.
    """

    verify_writes: bool = False
    retry_attempts: int = 0
    retry_delay_ms: int = 10

    @classmethod
    def default(cls) -> GpioWriteConfig:
        return cls()

    @classmethod
    def fast(cls) -> GpioWriteConfig:
        """No verification, no retries."""
        return cls()

    @classmethod
    def reliable(cls) -> GpioWriteConfig:
        """Verify every write and retry up to three times."""
        return cls(verify_writes=True, retry_attempts=3, retry_delay_ms=20)


@dataclass(frozen=True)
class DriverConfig:
    i2c: I2cConfig
    interrupt: InterruptConfig
    gpio_write: GpioWriteConfig


# Configuration cache with thread safety
_LOADER_CACHE: dict[str, DriverConfig] = {}
_CACHE_LOCK = threading.RLock()


def _get_config_path(path: Optional[str] = None) -> str:
    if path is None:
        # Bundled defaults live next to the package: xr2280x/config.yaml
        base = Path(__file__).parent.parent / "config.yaml"
        path = str(base)

    return path


def _load_yaml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except Exception as exc:
        raise ConfigurationError(f"Failed to parse config: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Top-level config must be a mapping")
    return raw


def _build_i2c_cfg(i2c_raw: dict[str, Any]) -> I2cConfig:
    return I2cConfig(
        default_timeout_ms=int(i2c_raw["default_timeout_ms"]),
        scan_timeout_ms=int(i2c_raw["scan_timeout_ms"]),
        scan_max_consecutive_timeouts=int(i2c_raw["scan_max_consecutive_timeouts"]),
    )


def _build_interrupt_cfg(interrupt_raw: dict[str, Any]) -> InterruptConfig:
    return InterruptConfig(
        default_timeout_ms=int(interrupt_raw["default_timeout_ms"]),
        read_size=int(interrupt_raw["read_size"]),
    )


def _build_gpio_write_cfg(gpio_raw: dict[str, Any]) -> GpioWriteConfig:
    """Convert the gpio_write section, falling back to defaults per key."""
    defaults = GpioWriteConfig()
    verify = gpio_raw.get("verify_writes", defaults.verify_writes)
    if not isinstance(verify, bool):
        raise ConfigurationError("gpio_write.verify_writes", "must be true or false")
    return GpioWriteConfig(
        verify_writes=verify,
        retry_attempts=int(gpio_raw.get("retry_attempts", defaults.retry_attempts)),
        retry_delay_ms=int(gpio_raw.get("retry_delay_ms", defaults.retry_delay_ms)),
    )


def _parse_driver_cfg_from_dict(raw: dict[str, Any]) -> DriverConfig:
    try:
        cfg = DriverConfig(
            i2c=_build_i2c_cfg(raw["i2c"]),
            interrupt=_build_interrupt_cfg(raw["interrupt"]),
            gpio_write=_build_gpio_write_cfg(raw.get("gpio_write", {})),
        )
    except KeyError as exc:
        raise ConfigurationError(f"Missing required config key: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config schema: {exc}") from exc

    _validate_driver_config(cfg)
    return cfg


def _validate_driver_config(cfg: DriverConfig) -> None:
    """Basic sanity checks to fail fast on bad configs."""
    if cfg.i2c.default_timeout_ms <= 0:
        raise ConfigurationError("i2c.default_timeout_ms", "must be positive")
    if cfg.i2c.scan_timeout_ms <= 0:
        raise ConfigurationError("i2c.scan_timeout_ms", "must be positive")
    if cfg.i2c.scan_max_consecutive_timeouts <= 0:
        raise ConfigurationError("i2c.scan_max_consecutive_timeouts", "must be positive")

    if cfg.interrupt.default_timeout_ms <= 0:
        raise ConfigurationError("interrupt.default_timeout_ms", "must be positive")
    if cfg.interrupt.read_size <= 1:
        raise ConfigurationError(
            "interrupt.read_size", "must leave room for the report id byte"
        )

    if cfg.gpio_write.retry_attempts < 0:
        raise ConfigurationError("gpio_write.retry_attempts", "must not be negative")
    if cfg.gpio_write.retry_delay_ms < 0:
        raise ConfigurationError("gpio_write.retry_delay_ms", "must not be negative")


def load_config(path: Optional[str] = None) -> DriverConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Optional path to YAML config. If None, load the bundled
            xr2280x/config.yaml.

    Returns:
        DriverConfig instance

    Raises:
        ConfigurationError: on parse or validation errors
    """

    p = Path(_get_config_path(path=path))
    if not p.is_file():
        raise ConfigurationError(f"Config file not found: {p}")
    raw = _load_yaml_file(p)

    return _parse_driver_cfg_from_dict(raw=raw)


def get_config(path: Optional[str] = None) -> DriverConfig:
    """Return the loaded config for path, loading and caching if necessary.

    Configs are cached per resolved path; repeated calls return the cached
    instance without re-reading the YAML file.

    THREAD SAFETY: This function is thread-safe.
    """
    key = _get_config_path(path=path)
    with _CACHE_LOCK:
        if key not in _LOADER_CACHE:
            _LOADER_CACHE[key] = load_config(path=path)
        return _LOADER_CACHE[key]


def clear_config_cache() -> None:
    """Clear all cached configurations.

    All subsequent calls to get_config() will reload from disk.
    """
    with _CACHE_LOCK:
        _LOADER_CACHE.clear()
