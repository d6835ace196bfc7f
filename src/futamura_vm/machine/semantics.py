"""
Instruction Semantics
=====================

The operations behind each opcode, acting on a MachineState given decoded
operands. They are shared by every dispatch variant: the generic engine
calls execute() on freshly decoded instructions, the specialized engines
bind the same operations to pre-decoded operands at construction time.

Flag Behavior
-------------
Only add and sub touch the flags, and they replace them wholesale:

- Z: the truncated 32-bit result is zero
- N: bit 31 of the truncated result is set
- V: any bit above the low 32 bits of the widened result is set

V is a carry-style test on the widened result, not a signed-overflow
computation. add widens before summing, so a carry out of bit 31 sets V.
sub wraps to 32 bits first (two's complement), so it never sets V, and
BL after sub therefore reduces to the sign of the difference.
"""

from .branch import resolve_branch
from .isa import Instruction, Opcode
from .state import MASK32, SIGN32, Flags, MachineState


# =============================================================================
# Flag Computation
# =============================================================================

def set_flags(res: int) -> Flags:
    """
    Compute flags from a widened arithmetic result.

    Args:
        res: Non-negative result, possibly wider than 32 bits

    Returns:
        The new flags value
    """
    flags = Flags(0)
    truncated = res & MASK32
    if truncated == 0:
        flags |= Flags.Z
    if truncated & SIGN32:
        flags |= Flags.N
    # check for overflow
    if res & ~MASK32:
        flags |= Flags.V
    return flags


def apply_flags(state: MachineState, res: int) -> None:
    state.flags = set_flags(res)


# =============================================================================
# Memory Access
# =============================================================================

def store(state: MachineState, rptr: int, rval: int) -> None:
    """data[sext8(r[rptr])] = low byte of r[rval]"""
    state.write_data(state.registers[rptr], state.registers[rval])


def load(state: MachineState, rptr: int, rdst: int) -> None:
    """r[rdst] = data[sext8(r[rptr])]"""
    state.registers[rdst] = state.read_data(state.registers[rptr])


# =============================================================================
# Arithmetic
# =============================================================================

def add(state: MachineState, rdst: int, rsrc: int) -> None:
    res = state.registers[rdst] + state.registers[rsrc]
    state.registers[rdst] = res & MASK32
    apply_flags(state, res)


def sub(state: MachineState, rdst: int, rsrc: int) -> None:
    res = (state.registers[rdst] - state.registers[rsrc]) & MASK32
    state.registers[rdst] = res
    apply_flags(state, res)


# =============================================================================
# Data Movement
# =============================================================================

def movr(state: MachineState, rdst: int, rsrc: int) -> None:
    state.registers[rdst] = state.registers[rsrc]


def movi(state: MachineState, rdst: int, imm: int) -> None:
    state.registers[rdst] = imm & 0xFF


# Two-operand operations, keyed by opcode
TWO_OPERAND_OPS = {
    Opcode.STORE: store,
    Opcode.LOAD: load,
    Opcode.ADD: add,
    Opcode.SUB: sub,
    Opcode.MOVR: movr,
    Opcode.MOVI: movi,
}


# =============================================================================
# Instruction Execution
# =============================================================================

def execute(state: MachineState, instr: Instruction) -> bool:
    """
    Execute one decoded instruction and advance the pc.

    Args:
        state: Machine state; state.pc must equal instr.address
        instr: The instruction to execute

    Returns:
        False if the instruction halts the machine, True otherwise

    Raises:
        IllegalInstructionError: For a branch with an unknown condition
    """
    match instr.opcode:
        case Opcode.STORE:
            store(state, instr.rx, instr.ry)
        case Opcode.LOAD:
            load(state, instr.rx, instr.ry)
        case Opcode.ADD:
            add(state, instr.rx, instr.ry)
        case Opcode.SUB:
            sub(state, instr.rx, instr.ry)
        case Opcode.MOVR:
            movr(state, instr.rx, instr.ry)
        case Opcode.MOVI:
            movi(state, instr.rx, instr.imm)
        case Opcode.BRANCH:
            resolve_branch(state, instr.condition, instr.displacement)
            return True
        case Opcode.HALT:
            return False

    state.pc += instr.size
    return True
