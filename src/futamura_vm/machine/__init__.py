"""
Register Machine
================

The interpreter core:

- `state.py`: MachineState, Flags and bit helpers
- `isa.py`: Opcode, Condition and the decoded Instruction
- `decoder.py`: decode() and disassemble()
- `semantics.py`: the per-opcode operations and flag computation
- `branch.py`: condition predicates and branch targets
- `dispatch.py`: the generic, pc-specialized and transition-specialized engines
- `interpreter.py`: Interpreter, InterpreterConfig and RunResult
"""

from .state import (
    DATA_SIZE,
    NUM_REGS,
    Flags,
    MachineState,
    sign_extend_8,
    to_signed32,
)
from .isa import INSTRUCTION_SIZE, Condition, Instruction, Opcode
from .decoder import decode, disassemble, read_s32le
from .semantics import execute, set_flags
from .branch import branch_predicate, branch_target, resolve_branch
from .dispatch import (
    DEFAULT_PC_BOUND,
    DispatchEngine,
    DispatchMode,
    GenericDispatch,
    PCSpecializedDispatch,
    SpecializedBody,
    TransitionNode,
    TransitionSpecializedDispatch,
    create_engine,
    specialize,
)
from .interpreter import Interpreter, InterpreterConfig, RunResult

__all__ = [
    # State
    "DATA_SIZE",
    "NUM_REGS",
    "Flags",
    "MachineState",
    "sign_extend_8",
    "to_signed32",

    # Instruction set
    "INSTRUCTION_SIZE",
    "Condition",
    "Instruction",
    "Opcode",

    # Decoder
    "decode",
    "disassemble",
    "read_s32le",

    # Semantics and branch unit
    "execute",
    "set_flags",
    "branch_predicate",
    "branch_target",
    "resolve_branch",

    # Dispatch
    "DEFAULT_PC_BOUND",
    "DispatchEngine",
    "DispatchMode",
    "GenericDispatch",
    "PCSpecializedDispatch",
    "SpecializedBody",
    "TransitionNode",
    "TransitionSpecializedDispatch",
    "create_engine",
    "specialize",

    # Driver API
    "Interpreter",
    "InterpreterConfig",
    "RunResult",
]
