"""Tests for the feature-report register layer."""

from unittest.mock import Mock

import pytest

from xr2280x.core import consts
from xr2280x.core.exceptions import (
    ArgumentOutOfRangeError,
    DeviceNotFound,
    FeatureReportError,
)
from xr2280x.core.register_access import RegisterAccess


# ----------------- Fixtures -----------------


@pytest.fixture
def edge():
    dev = Mock()
    dev.send_feature_report.return_value = 5
    dev.get_feature_report.return_value = [0x5A, 0x34, 0x12]
    return dev


@pytest.fixture
def i2c():
    dev = Mock()
    dev.send_feature_report.return_value = 5
    dev.get_feature_report.return_value = [0x5A, 0x2C, 0x01]
    return dev


@pytest.fixture
def access(i2c, edge):
    return RegisterAccess(i2c=i2c, edge=edge)


# ----------------- Test Classes -----------------


class TestReportEncoding:
    def test_write_register_report_layout(self, access, edge):
        access.write_register(0x03C1, 0xBEEF)

        edge.send_feature_report.assert_called_once_with([0x3C, 0xC1, 0x03, 0xEF, 0xBE])

    def test_read_register_two_phase(self, access, edge):
        value = access.read_register(0x03C4)

        assert value == 0x1234
        edge.send_feature_report.assert_called_once_with([0x4B, 0xC4, 0x03])
        edge.get_feature_report.assert_called_once_with(0x5A, 3)

    def test_write_rejects_value_wider_than_16_bits(self, access, edge):
        with pytest.raises(ArgumentOutOfRangeError):
            access.write_register(0x03C1, 0x10000)
        edge.send_feature_report.assert_not_called()

    def test_rejects_address_wider_than_16_bits(self, access, edge):
        with pytest.raises(ArgumentOutOfRangeError):
            access.read_register(0x10000)
        edge.send_feature_report.assert_not_called()


class TestRouting:
    @pytest.mark.parametrize("address", [0x0340, 0x0341, 0x0342])
    def test_i2c_range_uses_i2c_interface(self, access, i2c, edge, address):
        access.write_register(address, 1)

        assert i2c.send_feature_report.call_count == 1
        edge.send_feature_report.assert_not_called()

    @pytest.mark.parametrize("address", [0x033F, 0x0343, 0x03C0, 0x03D8])
    def test_other_addresses_use_edge_interface(self, access, i2c, edge, address):
        access.write_register(address, 1)

        assert edge.send_feature_report.call_count == 1
        i2c.send_feature_report.assert_not_called()

    def test_missing_edge_interface(self, i2c):
        access = RegisterAccess(i2c=i2c)

        with pytest.raises(DeviceNotFound):
            access.read_register(consts.REG_DIR_0)
        i2c.send_feature_report.assert_not_called()

    def test_missing_i2c_interface(self, edge):
        access = RegisterAccess(edge=edge)

        with pytest.raises(DeviceNotFound):
            access.write_register(consts.REG_SCL_LOW, 300)
        edge.send_feature_report.assert_not_called()


class TestFailures:
    def test_transport_error_on_write_becomes_feature_report_error(self, access, edge):
        edge.send_feature_report.side_effect = OSError("write failed")

        with pytest.raises(FeatureReportError) as exc_info:
            access.write_register(0x03C2, 1)

        assert exc_info.value.address == 0x03C2
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_transport_error_on_read_becomes_feature_report_error(self, access, edge):
        edge.get_feature_report.side_effect = OSError("read failed")

        with pytest.raises(FeatureReportError) as exc_info:
            access.read_register(0x03CC)

        assert exc_info.value.address == 0x03CC

    def test_short_response(self, access, edge):
        edge.get_feature_report.return_value = [0x5A, 0x01]

        with pytest.raises(FeatureReportError) as exc_info:
            access.read_register(0x03C0)

        assert exc_info.value.details["length"] == 2

    def test_wrong_report_id(self, access, edge):
        edge.get_feature_report.return_value = [0x4B, 0x01, 0x00]

        with pytest.raises(FeatureReportError) as exc_info:
            access.read_register(0x03C0)

        assert exc_info.value.details["report_id"] == 0x4B

    def test_negative_return_on_write_is_rejected(self, access, edge):
        edge.send_feature_report.return_value = -1

        with pytest.raises(FeatureReportError) as exc_info:
            access.write_register(0x03C1, 1)

        assert exc_info.value.address == 0x03C1
        assert exc_info.value.details["result"] == -1

    def test_negative_return_on_read_address_is_rejected(self, access, edge):
        edge.send_feature_report.return_value = -1

        with pytest.raises(FeatureReportError):
            access.read_register(0x03C4)

        edge.get_feature_report.assert_not_called()

    def test_other_exceptions_propagate(self, access, edge):
        edge.send_feature_report.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            access.write_register(0x03C0, 0)


class TestReadModifyWrite:
    def test_update_sets_bit(self, access, edge):
        edge.get_feature_report.return_value = [0x5A, 0x01, 0x00]

        assert access.update_register(0x03C1, 0x0004, True) is True
        edge.send_feature_report.assert_called_with([0x3C, 0xC1, 0x03, 0x05, 0x00])

    def test_update_clears_bit(self, access, edge):
        edge.get_feature_report.return_value = [0x5A, 0x05, 0x00]

        assert access.update_register(0x03C1, 0x0004, False) is True
        edge.send_feature_report.assert_called_with([0x3C, 0xC1, 0x03, 0x01, 0x00])

    def test_update_skips_unchanged(self, access, edge):
        edge.get_feature_report.return_value = [0x5A, 0x04, 0x00]

        assert access.update_register(0x03C1, 0x0004, True) is False
        # Only the set-read-address report was sent
        assert edge.send_feature_report.call_count == 1

    def test_update_field_preserves_other_bits(self, access, edge):
        edge.get_feature_report.return_value = [0x5A, 0xE3, 0x01]  # 0x01E3

        access.update_field(0x03D8, 0x001F, 0x0007)

        edge.send_feature_report.assert_called_with([0x3C, 0xD8, 0x03, 0xE7, 0x01])


class TestAgainstEmulator:
    def test_round_trip(self, edge_access):
        edge_access.write_register(consts.REG_DIR_0, 0xA5A5)

        assert edge_access.read_register(consts.REG_DIR_0) == 0xA5A5

    def test_scl_registers_live_on_i2c_interface(self, chip32, edge_access):
        edge_access.write_register(consts.REG_SCL_LOW, 0x0123)

        assert chip32.i2c_registers.read(consts.REG_SCL_LOW) == 0x0123
        assert chip32.edge_interface.transaction_count == 0

    def test_failure_code_leaves_register_untouched(self, chip32, edge_access):
        chip32.edge_interface.fail_next_with_code(-1)

        with pytest.raises(FeatureReportError):
            edge_access.write_register(consts.REG_DIR_0, 0x00FF)

        assert chip32.edge.read(consts.REG_DIR_0) == 0
