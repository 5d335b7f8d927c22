"""
Pytest configuration and shared fixtures for the xr2280x test suite.
"""

import sys
import tempfile
from pathlib import Path

import pytest
import yaml

# Ensure project root is on PYTHONPATH so 'xr2280x' can be imported
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from xr2280x.core.capabilities import Capabilities  # noqa: E402
from xr2280x.core.register_access import RegisterAccess  # noqa: E402
from xr2280x.emulator import EmulatedXr2280x  # noqa: E402
from xr2280x.utils.config_loader import clear_config_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    """Every test starts from an empty configuration cache."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def temp_yaml_file():
    """
    Fixture that provides a temporary YAML file.

    Yields:
        Path: Path to the temporary YAML file
    """
    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".yaml",
        delete=False,
    ) as f:
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def valid_driver_config_dict():
    """
    Fixture providing a complete valid driver configuration dictionary.
    """
    return {
        "i2c": {
            "default_timeout_ms": 250,
            "scan_timeout_ms": 10,
            "scan_max_consecutive_timeouts": 2,
        },
        "interrupt": {"default_timeout_ms": 2000, "read_size": 32},
        "gpio_write": {
            "verify_writes": True,
            "retry_attempts": 2,
            "retry_delay_ms": 0,
        },
    }


@pytest.fixture
def temp_config_yaml_file(temp_yaml_file, valid_driver_config_dict):
    """
    Fixture that creates a temporary YAML file with valid configuration.

    Yields:
        Path: Path to the temporary YAML file with valid configuration
    """
    with open(temp_yaml_file, "w", encoding="utf-8") as f:
        yaml.dump(valid_driver_config_dict, f)

    yield temp_yaml_file


@pytest.fixture
def chip32():
    """Emulated 32-GPIO chip (XR22802)."""
    return EmulatedXr2280x("XR22802")


@pytest.fixture
def chip8():
    """Emulated 8-GPIO chip (XR22800)."""
    return EmulatedXr2280x("XR22800")


@pytest.fixture
def device32(chip32):
    """Opened handle on the 32-GPIO chip, with traffic counters reset."""
    device = chip32.open()
    chip32.reset_counters()
    return device


@pytest.fixture
def device8(chip8):
    """Opened handle on the 8-GPIO chip, with traffic counters reset."""
    device = chip8.open()
    chip8.reset_counters()
    return device


@pytest.fixture
def edge_access(chip32):
    """Register layer bound to both emulated interfaces of the 32-GPIO chip."""
    return RegisterAccess(i2c=chip32.i2c_interface, edge=chip32.edge_interface)


@pytest.fixture
def caps32():
    return Capabilities(gpio_count=32)


@pytest.fixture
def caps8():
    return Capabilities(gpio_count=8)


def pytest_configure(config):
    """
    Hook for initial pytest configuration.

    Used to add custom markers and configuration.
    """
    config.addinivalue_line(
        "markers",
        "speculative: tests of the unverified interrupt report decode",
    )
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
