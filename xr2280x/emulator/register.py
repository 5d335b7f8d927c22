"""16-bit virtual register abstraction for the emulator.

Every XR2280x virtual register is 16 bits wide and addressed by a virtual
address carried inside a feature report. Registers with side effects (like
the GPIO SET/CLEAR pair) subclass Register and override read()/write().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from xr2280x.core.consts import register_name
from xr2280x.utils.consts import ConstUtils


class Register(ABC):
    """Base class for any register with custom read/write behavior.

    For plain storage, use SimpleRegister.
    """

    def __init__(self, address: int, reset_value: int = 0, name: Optional[str] = None):
        """Initialize a register.

        Args:
            address: Virtual register address
            reset_value: Value to return to on reset()
            name: Symbolic name; defaults to the register map name
        """
        self.address = address
        self.name = name or register_name(address)
        self.reset_value = reset_value & ConstUtils.MASK_16_BITS
        self.value = self.reset_value

    @abstractmethod
    def read(self) -> int:
        """Return the 16-bit register value."""
        ...

    @abstractmethod
    def write(self, val: int) -> None:
        """Apply a 16-bit write."""
        ...

    def reset(self) -> None:
        """Reset to default state."""
        self.value = self.reset_value


class SimpleRegister(Register):
    """A register that is just storage (no side effects)."""

    def read(self) -> int:
        return self.value

    def write(self, val: int) -> None:
        self.value = val & ConstUtils.MASK_16_BITS


class ReadOnlyRegister(SimpleRegister):
    """A read-only register. Writes are silently ignored."""

    def write(self, val: int) -> None:
        pass


class WriteOnlyRegister(SimpleRegister):
    """A write-only register. Reads always return the reset value."""

    def read(self) -> int:
        return self.reset_value


class RegisterFile:
    """Maps virtual address -> Register.

    Unlike a memory-mapped peripheral, the bridge rejects accesses to
    registers it does not implement, so unmapped addresses raise LookupError.
    """

    def __init__(self):
        self._registers: dict[int, Register] = {}

    def add(self, reg: Register) -> Register:
        """Add a register to this file.

        Raises:
            ValueError: If a register already exists at this address
        """
        if reg.address in self._registers:
            raise ValueError(f"Register at 0x{reg.address:04X} already exists")
        self._registers[reg.address] = reg
        return reg

    def __contains__(self, address: int) -> bool:
        return address in self._registers

    def __iter__(self) -> Iterator[Register]:
        return iter(self._registers.values())

    def read(self, address: int) -> int:
        return self._lookup(address).read()

    def write(self, address: int, val: int) -> None:
        self._lookup(address).write(val)

    def reset(self) -> None:
        """Reset all registers."""
        for reg in self._registers.values():
            reg.reset()

    def get_register(self, address: int) -> Optional[Register]:
        """Return the register at address, or None."""
        return self._registers.get(address)

    # Private helpers -------------------------------------------------------

    def _lookup(self, address: int) -> Register:
        try:
            return self._registers[address]
        except KeyError:
            raise LookupError(f"No register at 0x{address:04X}") from None
