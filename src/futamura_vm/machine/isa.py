"""
Instruction Set Definition
==========================

Every instruction starts with a one-byte opcode tag (an ASCII letter)
followed by a fixed operand payload whose shape depends on the tag:

    Tag  Mnemonic  Operands                        Size
    ---  --------  ------------------------------  ----
    S    store     rX, rY                          3
    L    load      rX, rY                          3
    A    add       rX, rY                          3
    U    sub       rX, rY                          3
    M    movr      rX, rY                          3
    I    movi      rX, imm8                        3
    B    branch    cc, off32 (little-endian, signed) 6
    H    halt      -                               1

Branch condition codes are also ASCII letters: E (equal), N (not equal),
L (signed less than).
"""

from dataclasses import dataclass
from enum import IntEnum


# =============================================================================
# Opcodes and Condition Codes
# =============================================================================

class Opcode(IntEnum):
    """Opcode tags, valued by their byte encoding."""
    STORE = ord("S")
    LOAD = ord("L")
    ADD = ord("A")
    SUB = ord("U")
    MOVR = ord("M")
    MOVI = ord("I")
    BRANCH = ord("B")
    HALT = ord("H")

    @property
    def tag(self) -> str:
        return chr(self.value)


class Condition(IntEnum):
    """Branch condition codes, valued by their byte encoding."""
    EQ = ord("E")
    NE = ord("N")
    LT = ord("L")


INSTRUCTION_SIZE: dict[Opcode, int] = {
    Opcode.STORE: 3,
    Opcode.LOAD: 3,
    Opcode.ADD: 3,
    Opcode.SUB: 3,
    Opcode.MOVR: 3,
    Opcode.MOVI: 3,
    Opcode.BRANCH: 6,
    Opcode.HALT: 1,
}

BRANCH_SIZE = INSTRUCTION_SIZE[Opcode.BRANCH]


def read_s32le(buf: bytes, offset: int) -> int:
    """Read a little-endian two's-complement 32-bit value."""
    return int.from_bytes(buf[offset:offset + 4], "little", signed=True)


# =============================================================================
# Decoded Instruction
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction.

    Instructions are transient: the decoder produces them on demand and
    specialized dispatch captures them at construction time.

    Attributes:
        address: pc of the opcode byte
        opcode: The opcode tag
        operands: Operand bytes following the opcode (size - 1 of them)
    """
    address: int
    opcode: Opcode
    operands: bytes

    @property
    def size(self) -> int:
        return INSTRUCTION_SIZE[self.opcode]

    @property
    def rx(self) -> int:
        """First register operand."""
        return self.operands[0]

    @property
    def ry(self) -> int:
        """Second register operand."""
        return self.operands[1]

    @property
    def imm(self) -> int:
        """Immediate operand of movi."""
        return self.operands[1]

    @property
    def condition(self) -> int:
        """Raw condition byte of a branch; not validated here."""
        return self.operands[0]

    @property
    def displacement(self) -> int:
        """Signed 32-bit branch displacement."""
        return read_s32le(self.operands, 1)

    @property
    def raw(self) -> bytes:
        return bytes([self.opcode]) + self.operands

    def __str__(self) -> str:
        """Format as 'ADDR: MNEMONIC OPERANDS', e.g. '0012: BL +27'."""
        op = self.opcode
        if op == Opcode.HALT:
            text = "H"
        elif op == Opcode.BRANCH:
            cc = self.condition
            cc_str = chr(cc) if 0x20 <= cc < 0x7F else f"?{cc:02x}"
            text = f"B{cc_str} {self.displacement:+d}"
        elif op == Opcode.MOVI:
            text = f"I r{self.rx}, #{self.imm}"
        else:
            text = f"{op.tag} r{self.rx}, r{self.ry}"
        return f"{self.address:04x}: {text}"
