"""Tests for the device handle."""

from unittest.mock import Mock

import pytest

from xr2280x import Xr2280x
from xr2280x.core import consts
from xr2280x.core.exceptions import DeviceNotFound, UnsupportedFeature
from xr2280x.core.gpio_enums import GpioDirection, GpioLevel
from xr2280x.utils.config_loader import DriverConfig, GpioWriteConfig, get_config


class TestOpen:
    def test_requires_an_interface(self):
        with pytest.raises(DeviceNotFound):
            Xr2280x()

    def test_detects_capabilities_once(self, chip32):
        device = chip32.open()

        assert device.capabilities.gpio_count == 32
        # one set-read-address report plus one read
        assert chip32.edge_interface.transaction_count == 2

        device.gpio.read(0)
        device.gpio.read(20)
        assert device.capabilities.gpio_count == 32

    def test_8_gpio_model(self, chip8):
        assert chip8.open().capabilities.gpio_count == 8

    def test_without_edge_assumes_8_gpio_without_traffic(self, chip32):
        device = chip32.open(edge=False)

        assert device.capabilities.gpio_count == 8
        assert chip32.transaction_count == 0
        assert device.has_i2c
        assert not device.has_edge

    def test_unsupported_pins_fail_without_traffic(self, chip32):
        device = chip32.open(edge=False)

        with pytest.raises(UnsupportedFeature):
            device.gpio.set_direction(16, GpioDirection.OUTPUT)
        assert chip32.transaction_count == 0

    def test_detection_transport_error_means_8(self):
        edge = Mock()
        edge.send_feature_report.side_effect = OSError("rejected")

        device = Xr2280x(edge=edge)

        assert device.capabilities.gpio_count == 8

    def test_uses_bundled_config_by_default(self, chip32):
        assert chip32.open().config is get_config()

    def test_explicit_config(self, chip32):
        base = get_config()
        config = DriverConfig(base.i2c, base.interrupt, GpioWriteConfig.reliable())

        device = chip32.open(config=config)

        assert device.gpio.write_config.verify_writes

    def test_controllers_share_register_layer(self, device32):
        assert device32.gpio.access is device32.registers
        assert device32.pwm.access is device32.registers
        assert device32.i2c.access is device32.registers
        assert device32.interrupts.access is device32.registers


class TestDetails:
    def test_details_prefer_edge(self, chip32, device32):
        details = device32.details()

        assert details.manufacturer == "Exar Corp."
        assert details.product == "XR22802 EDGE"
        assert details.serial_number == "EMU0001"

    def test_details_from_i2c_only(self, chip32):
        details = chip32.open(edge=False).details()

        assert details.product == "XR22802 I2C"

    def test_details_without_interfaces(self, device32):
        device32.registers.edge = None
        device32.registers.i2c = None

        with pytest.raises(DeviceNotFound):
            device32.details()


class TestEndToEnd:
    def test_gpio_output_then_i2c_read(self, chip32, device32):
        chip32.bus.attach(0x50).memory[0:2] = b"\xCA\xFE"

        device32.gpio.setup_output(5, GpioLevel.HIGH)
        data = device32.i2c.write_read(0x50, b"\x00", 2)

        assert device32.gpio.read(5) == GpioLevel.HIGH
        assert chip32.edge.read(consts.REG_DIR_0) & (1 << 5)
        assert data == b"\xCA\xFE"
