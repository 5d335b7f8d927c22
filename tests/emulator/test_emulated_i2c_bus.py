from xr2280x.core import consts
from xr2280x.core.i2c import I2cAddress, build_out_report
from xr2280x.emulator import EmulatedI2cBus, EmulatedI2cTarget


def _out(address, data=b"", read_len=0, flags=0x03):
    return build_out_report(address, data, read_len, flags)


class TestTarget:
    def test_pointer_write_then_read(self):
        target = EmulatedI2cTarget(size=16)
        target.write(b"\x04\x11\x22")
        target.write(b"\x04")

        assert target.read(3) == b"\x11\x22\x00"

    def test_pointer_wraps(self):
        target = EmulatedI2cTarget(size=4, data=b"\x01\x02\x03\x04")
        target.write(b"\x03")

        assert target.read(2) == b"\x04\x01"

    def test_empty_write_keeps_pointer(self):
        target = EmulatedI2cTarget(data=b"\xAA\xBB")
        target.read(1)
        target.write(b"")

        assert target.read(1) == b"\xBB"


class TestBus:
    def test_absent_address_naks(self):
        bus = EmulatedI2cBus()

        response = bus.handle(_out(I2cAddress.new_7bit(0x50)))

        assert response[0] == consts.I2C_IN_NAK_RECEIVED
        assert len(response) == 36

    def test_read_response_layout(self):
        bus = EmulatedI2cBus()
        bus.attach(0x50, EmulatedI2cTarget(data=b"\x10\x20\x30"))

        response = bus.handle(_out(I2cAddress.new_7bit(0x50), b"\x00", 3))

        assert response[:7] == bytes([0, 1, 3, 0, 0x10, 0x20, 0x30])

    def test_records_transfers(self):
        bus = EmulatedI2cBus()
        bus.handle(_out(I2cAddress.new_7bit(0x22), b"\x01", 2, flags=0x07))

        record = bus.transfers[0]
        assert record.address == I2cAddress.new_7bit(0x22)
        assert record.flags == 0x07
        assert record.write_data == b"\x01"
        assert record.read_len == 2

    def test_decodes_10bit_addresses(self):
        bus = EmulatedI2cBus()
        address = I2cAddress.new_10bit(0x3A5)
        bus.attach(address)

        response = bus.handle(_out(address, b"\x00\x99"))

        assert response[0] == 0
        assert bus.transfers[0].address == address
        assert bus.transfers[0].write_data == b"\x00\x99"

    def test_7bit_and_10bit_targets_are_distinct(self):
        bus = EmulatedI2cBus()
        bus.attach(I2cAddress.new_10bit(0x050))

        response = bus.handle(_out(I2cAddress.new_7bit(0x50)))

        assert response[0] == consts.I2C_IN_NAK_RECEIVED

    def test_status_override(self):
        bus = EmulatedI2cBus()
        bus.attach(0x50)
        bus.set_status(0x50, consts.I2C_IN_ARBITRATION_LOST)

        assert bus.handle(_out(I2cAddress.new_7bit(0x50)))[0] == 0x04

    def test_detach(self):
        bus = EmulatedI2cBus()
        bus.attach(0x50)
        bus.detach(0x50)

        assert bus.handle(_out(I2cAddress.new_7bit(0x50)))[0] == consts.I2C_IN_NAK_RECEIVED

    def test_stuck_bus_gives_no_response(self):
        bus = EmulatedI2cBus(stuck=True)

        assert bus.handle(_out(I2cAddress.new_7bit(0x50))) is None

    def test_queued_response_wins(self):
        bus = EmulatedI2cBus(stuck=True)
        bus.queue_response(b"\x00\x00\x00\x00")

        assert bus.handle(_out(I2cAddress.new_7bit(0x50))) == b"\x00\x00\x00\x00"
        assert bus.handle(_out(I2cAddress.new_7bit(0x50))) is None

    def test_malformed_report_is_request_error(self):
        bus = EmulatedI2cBus()

        response = bus.handle([0x03, 40, 0, 0x50])

        assert response[0] == consts.I2C_IN_REQUEST_ERROR
        assert bus.transfers == []
