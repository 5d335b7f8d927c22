"""Tests for GPIO capability detection."""

from unittest.mock import Mock

import pytest

from xr2280x.core import consts
from xr2280x.core.capabilities import Capabilities, detect_capabilities
from xr2280x.core.exceptions import (
    DeviceNotFound,
    FeatureReportError,
    UnsupportedFeature,
)
from xr2280x.core.gpio_pin import GpioGroup, GpioPin
from xr2280x.core.register_access import RegisterAccess


class TestCapabilities:
    def test_default_is_8_gpio(self):
        assert Capabilities().gpio_count == 8

    @pytest.mark.parametrize("count", [0, 16, 31, 64])
    def test_rejects_other_counts(self, count):
        with pytest.raises(ValueError):
            Capabilities(gpio_count=count)

    def test_immutable(self, caps8):
        with pytest.raises(AttributeError):
            caps8.gpio_count = 32

    def test_pin_support(self, caps8, caps32):
        assert caps8.supports_pin(GpioPin(7))
        assert not caps8.supports_pin(GpioPin(8))
        assert caps32.supports_pin(GpioPin(31))

    def test_group_support(self, caps8, caps32):
        assert caps8.supports_group(GpioGroup.GROUP0)
        assert not caps8.supports_group(GpioGroup.GROUP1)
        assert caps32.supports_group(GpioGroup.GROUP1)

    def test_check_pin_raises(self, caps8):
        with pytest.raises(UnsupportedFeature):
            caps8.check_pin(GpioPin(8))

    def test_check_group_raises(self, caps8):
        with pytest.raises(UnsupportedFeature):
            caps8.check_group(GpioGroup.GROUP1)


class TestDetection:
    def test_detection_success_means_32(self):
        access = Mock(spec=RegisterAccess)
        access.read_register.return_value = 0

        assert detect_capabilities(access).gpio_count == 32
        access.read_register.assert_called_once_with(consts.REG_FUNC_SEL_1)

    def test_register_failure_means_8(self):
        access = Mock(spec=RegisterAccess)
        access.read_register.side_effect = FeatureReportError(consts.REG_FUNC_SEL_1)

        assert detect_capabilities(access).gpio_count == 8

    def test_other_errors_propagate(self):
        access = Mock(spec=RegisterAccess)
        access.read_register.side_effect = DeviceNotFound()

        with pytest.raises(DeviceNotFound):
            detect_capabilities(access)

    @pytest.mark.parametrize(
        "model, expected",
        [("XR22800", 8), ("XR22801", 8), ("XR22802", 32), ("XR22804", 32)],
    )
    def test_detection_against_emulated_models(self, model, expected):
        from xr2280x.emulator import EmulatedXr2280x

        chip = EmulatedXr2280x(model)
        access = RegisterAccess(edge=chip.edge_interface)

        assert detect_capabilities(access).gpio_count == expected
