"""
Futamura VM Error Hierarchy
===========================

This module defines the exception hierarchy for the interpreter. Every
fatal condition of a run is raised as a subclass of VMError, so callers
can catch all interpreter errors with a single except clause.

Exception Hierarchy
-------------------
VMError (base)
├── IllegalInstructionError - unknown opcode or branch condition
├── PCOutOfRangeError - pc beyond the specialization bound (pc/transition dispatch)
├── CodeBoundsError - pc or operand bytes outside the code segment
└── StepLimitError - optional instruction budget exhausted

None of these are recoverable: a run either halts normally or ends with
one of them.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class VMError(Exception):
    """
    Base exception for all interpreter errors.

    Example:
        try:
            interpreter.run(10)
        except VMError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Execution Exceptions
# =============================================================================

class IllegalInstructionError(VMError):
    """
    The byte at the current pc is not a known opcode, or a branch carries
    an unknown condition code.

    Attributes:
        pc: Address of the offending instruction
        opcode: The opcode byte found there
        condition: The condition byte, for branch instructions
    """

    def __init__(self, pc: int, opcode: int, condition: Optional[int] = None):
        self.pc = pc
        self.opcode = opcode
        self.condition = condition

        if condition is None:
            detail = f"opcode {_describe_byte(opcode)}"
        else:
            detail = f"branch condition {_describe_byte(condition)}"
        super().__init__(f"illegal instruction at pc {pc:#04x}: {detail}")


class PCOutOfRangeError(VMError):
    """
    pc was too large at runtime.

    Specialized dispatch only has instruction bodies for pc values below
    the bound chosen at construction time. Generic dispatch never raises
    this.
    """

    def __init__(self, pc: int, bound: int):
        self.pc = pc
        self.bound = bound
        super().__init__(f"pc {pc:#04x} was too large at runtime (bound {bound})")


class CodeBoundsError(VMError):
    """
    The pc, or the operand bytes of the instruction at pc, lie outside the
    code segment.
    """

    def __init__(self, pc: int, code_size: int):
        self.pc = pc
        self.code_size = code_size
        super().__init__(
            f"pc {pc:#04x} is outside the code segment ({code_size} bytes)"
        )


class StepLimitError(VMError):
    """Raised when a run exceeds its configured max_steps."""

    def __init__(self, steps: int):
        self.steps = steps
        super().__init__(f"step limit of {steps} instructions exceeded")


def _describe_byte(value: int) -> str:
    """Format a byte as hex, with its ASCII character when printable."""
    if 0x20 <= value < 0x7F:
        return f"{value:#04x} ('{chr(value)}')"
    return f"{value:#04x}"
