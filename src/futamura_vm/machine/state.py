"""
Machine State
=============

All mutable execution state of one interpreter run:

- 16 general purpose registers r0..r15, unsigned 32-bit
- Flags: N (negative), Z (zero), V (overflow)
- PC: unsigned 32-bit offset into the code segment
- Data segment: 256 bytes, addressed by a sign-extended 8-bit offset
- Code segment: immutable program bytes, separate from data

A state is created once per run, seeded with the input value in r0, and
discarded after the run halts or aborts.
"""

from enum import IntFlag
from typing import Optional


NUM_REGS = 16
DATA_SIZE = 0x100

MASK32 = 0xFFFFFFFF
SIGN32 = 0x80000000


class Flags(IntFlag):
    """
    Condition flags, fully recomputed by every add/sub.

    Bit layout:
        2  1  0
        V  Z  N
    """
    N = 0x01  # Negative
    Z = 0x02  # Zero
    V = 0x04  # Overflow (carry-style, see semantics.set_flags)


def sign_extend_8(value: int) -> int:
    """Interpret the low byte of value as a signed 8-bit integer."""
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def to_signed32(value: int) -> int:
    """Interpret value as a signed 32-bit integer."""
    value &= MASK32
    return value - 0x100000000 if value & SIGN32 else value


class MachineState:
    """
    Registers, flags, pc and the two memory segments.

    Register and pc writes are masked to 32 bits, so callers may assign
    Python ints freely (negative values wrap as two's complement).

    Example:
        >>> st = MachineState.create(FIBONACCI, input_value=5)
        >>> st.registers[0]
        5
    """

    def __init__(self, code: bytes, data: Optional[bytearray] = None):
        """
        Args:
            code: Program bytes
            data: Data segment buffer of exactly DATA_SIZE bytes. A zeroed
                  one is allocated when omitted.

        Raises:
            ValueError: If data is not DATA_SIZE bytes long
        """
        if data is None:
            data = bytearray(DATA_SIZE)
        elif len(data) != DATA_SIZE:
            raise ValueError(
                f"data segment must be {DATA_SIZE} bytes, got {len(data)}"
            )

        self.code = bytes(code)
        self.data = data
        self.registers: list[int] = [0] * NUM_REGS
        self.flags = Flags(0)
        self._pc = 0

    @classmethod
    def create(
        cls,
        code: bytes,
        input_value: int = 0,
        data: Optional[bytearray] = None,
    ) -> "MachineState":
        """Build a fresh state with input_value placed in r0."""
        state = cls(code, data)
        state.set_register(0, input_value)
        return state

    # ========================================
    # Registers
    # ========================================

    @property
    def pc(self) -> int:
        """Program counter (32-bit)."""
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & MASK32

    def get_register(self, index: int) -> int:
        return self.registers[index]

    def set_register(self, index: int, value: int) -> None:
        self.registers[index] = value & MASK32

    # ========================================
    # Flag Properties
    # ========================================

    @property
    def flag_n(self) -> bool:
        """Negative flag."""
        return bool(self.flags & Flags.N)

    @property
    def flag_z(self) -> bool:
        """Zero flag."""
        return bool(self.flags & Flags.Z)

    @property
    def flag_v(self) -> bool:
        """Overflow flag."""
        return bool(self.flags & Flags.V)

    # ========================================
    # Data Segment
    # ========================================

    def read_data(self, offset: int) -> int:
        """
        Read a data byte at a signed 8-bit offset.

        Negative offsets index from the end of the 256-byte segment, so
        -1 is the last byte.
        """
        return self.data[sign_extend_8(offset)]

    def write_data(self, offset: int, value: int) -> None:
        """Write the low byte of value at a signed 8-bit offset."""
        self.data[sign_extend_8(offset)] = value & 0xFF

    # ========================================
    # Snapshots
    # ========================================

    def snapshot(self) -> dict:
        """
        Capture the observable state as plain values.

        Used to compare runs across dispatch variants and to report the
        state on fatal paths.
        """
        return {
            "registers": list(self.registers),
            "flags": int(self.flags),
            "pc": self.pc,
            "data": bytes(self.data),
        }

    def __repr__(self) -> str:
        regs = " ".join(f"r{i}={v:#x}" for i, v in enumerate(self.registers) if v)
        return f"MachineState(pc={self.pc:#04x}, flags={self.flags!r}, {regs or 'all zero'})"
