import pytest

from xr2280x.core import consts
from xr2280x.emulator import MODELS, EmulatedXr2280x, list_models


class TestModels:
    def test_list_models(self):
        assert list_models() == ["XR22800", "XR22801", "XR22802", "XR22804"]

    def test_gpio_counts(self):
        assert MODELS["XR22801"] == 8
        assert MODELS["XR22804"] == 32

    def test_unknown_model(self):
        with pytest.raises(ValueError):
            EmulatedXr2280x("XR9999")


class TestEmulatedChip:
    def test_scl_registers_reset_to_100khz(self, chip32):
        assert chip32.i2c_registers.read(consts.REG_SCL_LOW) == 300
        assert chip32.i2c_registers.read(consts.REG_SCL_HIGH) == 300

    def test_gpio_registers_only_on_edge(self, chip32):
        assert consts.REG_DIR_0 in chip32.edge.registers
        assert consts.REG_DIR_0 not in chip32.i2c_registers

    def test_product_strings(self, chip8):
        assert chip8.i2c_interface.get_product_string() == "XR22800 I2C"
        assert chip8.edge_interface.get_product_string() == "XR22800 EDGE"

    def test_open_partial(self, chip32):
        device = chip32.open(i2c=False)

        assert not device.has_i2c
        assert device.has_edge

    def test_transaction_count_spans_interfaces(self, chip32, device32):
        device32.gpio.read(0)
        device32.i2c.get_speed_khz()

        assert chip32.edge_interface.transaction_count == 2
        assert chip32.i2c_interface.transaction_count == 4
        assert chip32.transaction_count == 6

    def test_queue_interrupt(self, chip32, device32):
        chip32.queue_interrupt(b"\x00\x01\x00\x00\x00")

        assert device32.interrupts.read().data == b"\x01\x00\x00\x00"
