"""
Instruction Decoder
===================

Extracts the opcode at a pc and the operand bytes that follow it. Operand
values are never validated: register indices and condition bytes come from
a trusted encoder, and the branch condition is only checked when the branch
executes.

Usage:
    instr = decode(code, 0x12)
    print(instr)            # 0012: BL +27

    for instr in disassemble(code):
        print(instr)
"""

import logging
from typing import Iterator

from ..errors import CodeBoundsError, IllegalInstructionError
from .isa import INSTRUCTION_SIZE, Instruction, Opcode, read_s32le

logger = logging.getLogger(__name__)

__all__ = ["decode", "disassemble", "read_s32le"]


def decode(code: bytes, pc: int) -> Instruction:
    """
    Decode the instruction at pc.

    Args:
        code: Code segment
        pc: Offset of the opcode byte

    Returns:
        The decoded Instruction

    Raises:
        CodeBoundsError: If pc, or any operand byte, is outside code
        IllegalInstructionError: If the opcode byte is not a known tag
    """
    if not 0 <= pc < len(code):
        raise CodeBoundsError(pc, len(code))

    byte = code[pc]
    try:
        opcode = Opcode(byte)
    except ValueError:
        raise IllegalInstructionError(pc, byte) from None

    end = pc + INSTRUCTION_SIZE[opcode]
    if end > len(code):
        raise CodeBoundsError(pc, len(code))

    return Instruction(pc, opcode, code[pc + 1:end])


def disassemble(code: bytes, start: int = 0) -> Iterator[Instruction]:
    """
    Linear sweep over code, yielding one instruction after another.

    The sweep assumes instructions are laid out back to back, which holds
    for compiled-in programs. An undecodable byte ends the sweep by
    raising from decode().
    """
    pc = start
    while pc < len(code):
        instr = decode(code, pc)
        yield instr
        pc += instr.size
    logger.debug(f"Disassembled {pc - start} bytes")
