"""
Branch/Control Unit
===================

Resolves conditional control transfers from the flags register.

    E  branch if equal          Z set
    N  branch if not equal      Z clear
    L  branch if less than      N != V

The displacement is added to the pc of the branch and the 6-byte
instruction length is added as well, taken or not, so a displacement is
measured from the end of the branch instruction.
"""

from typing import Callable

from ..errors import IllegalInstructionError
from .isa import BRANCH_SIZE, Condition, Opcode
from .state import MASK32, Flags, MachineState

BranchPredicate = Callable[[Flags], bool]


def _beq(flags: Flags) -> bool:
    return bool(flags & Flags.Z)


def _bne(flags: Flags) -> bool:
    return not flags & Flags.Z


def _blt(flags: Flags) -> bool:
    n = bool(flags & Flags.N)
    v = bool(flags & Flags.V)
    return n != v


_PREDICATES: dict[Condition, BranchPredicate] = {
    Condition.EQ: _beq,
    Condition.NE: _bne,
    Condition.LT: _blt,
}


def branch_predicate(condition: int, pc: int = 0) -> BranchPredicate:
    """
    Look up the flag test for a condition byte.

    Args:
        condition: Raw condition byte from the instruction
        pc: Address of the branch, for the error report

    Raises:
        IllegalInstructionError: If the condition byte is unknown
    """
    try:
        return _PREDICATES[Condition(condition)]
    except ValueError:
        raise IllegalInstructionError(pc, Opcode.BRANCH, condition) from None


def branch_target(pc: int, displacement: int) -> int:
    """pc after a taken branch at pc."""
    return (pc + displacement + BRANCH_SIZE) & MASK32


def fallthrough(pc: int) -> int:
    """pc after a branch at pc that is not taken."""
    return (pc + BRANCH_SIZE) & MASK32


def resolve_branch(state: MachineState, condition: int, displacement: int) -> bool:
    """
    Execute the branch at state.pc.

    Returns:
        True if the branch was taken
    """
    taken = branch_predicate(condition, state.pc)(state.flags)
    if taken:
        state.pc = branch_target(state.pc, displacement)
    else:
        state.pc = fallthrough(state.pc)
    return taken
