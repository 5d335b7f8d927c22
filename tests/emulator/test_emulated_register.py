import pytest

from xr2280x.emulator.register import (
    ReadOnlyRegister,
    RegisterFile,
    SimpleRegister,
    WriteOnlyRegister,
)


class TestRegisters:
    def test_simple_register_masks_to_16_bits(self):
        reg = SimpleRegister(0x03C1)
        reg.write(0x12345)

        assert reg.read() == 0x2345

    def test_reset_value(self):
        reg = SimpleRegister(0x0341, reset_value=300)
        reg.write(1)
        reg.reset()

        assert reg.read() == 300

    def test_default_name_from_register_map(self):
        assert SimpleRegister(0x03C1).name == "DIR_0"
        assert SimpleRegister(0x0400).name == "0x0400"
        assert SimpleRegister(0x0400, name="CUSTOM").name == "CUSTOM"

    def test_read_only_ignores_writes(self):
        reg = ReadOnlyRegister(0x03C4, reset_value=7)
        reg.write(0)

        assert reg.read() == 7

    def test_write_only_reads_reset_value(self):
        reg = WriteOnlyRegister(0x03C2)
        reg.write(0xFFFF)

        assert reg.read() == 0


class TestRegisterFile:
    @pytest.fixture
    def regs(self):
        regs = RegisterFile()
        regs.add(SimpleRegister(0x03C0))
        regs.add(SimpleRegister(0x03C1, reset_value=5))
        return regs

    def test_read_write(self, regs):
        regs.write(0x03C0, 0xABCD)

        assert regs.read(0x03C0) == 0xABCD

    def test_unmapped_address(self, regs):
        with pytest.raises(LookupError):
            regs.read(0x03CC)
        with pytest.raises(LookupError):
            regs.write(0x03CC, 1)

    def test_duplicate_address(self, regs):
        with pytest.raises(ValueError):
            regs.add(SimpleRegister(0x03C0))

    def test_contains_and_iter(self, regs):
        assert 0x03C1 in regs
        assert 0x03CC not in regs
        assert [r.address for r in regs] == [0x03C0, 0x03C1]

    def test_reset_all(self, regs):
        regs.write(0x03C0, 1)
        regs.write(0x03C1, 1)
        regs.reset()

        assert regs.read(0x03C0) == 0
        assert regs.read(0x03C1) == 5

    def test_get_register(self, regs):
        assert regs.get_register(0x03C0).address == 0x03C0
        assert regs.get_register(0x03CC) is None
