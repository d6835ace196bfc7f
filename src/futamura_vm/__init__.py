"""
Futamura VM - A Specializable Register-Machine Interpreter
==========================================================

A small bytecode interpreter (16 registers, N/Z/V flags, a 256-byte data
segment) with three dispatch strategies that compute identical results
while resolving more of the program at construction time:

- **generic**: decode and switch at runtime, like any bytecode interpreter
- **pc**: one pre-decoded body per pc value, dispatched through a table
- **transition**: bodies linked directly to their successors, so the
  interpreter's control flow follows the program's own control-flow graph

These mirror successive stages of specializing an interpreter against a
fixed program (the first Futamura projection).

Quick Start
-----------
Run the compiled-in fibonacci program:
    >>> from futamura_vm import Interpreter, InterpreterConfig
    >>> Interpreter(InterpreterConfig(dispatch="transition")).run(5).output_value
    8

Or use the command-line tool:
    $ fvm 5 --dispatch transition
"""

__version__ = "1.0.0"

from futamura_vm.errors import (
    VMError,
    IllegalInstructionError,
    PCOutOfRangeError,
    CodeBoundsError,
    StepLimitError,
)
from futamura_vm.programs import FIBONACCI, fibonacci_reference
from futamura_vm.machine import (
    DATA_SIZE,
    DEFAULT_PC_BOUND,
    DispatchMode,
    Flags,
    Instruction,
    Interpreter,
    InterpreterConfig,
    MachineState,
    Opcode,
    RunResult,
    create_engine,
    decode,
    disassemble,
)

__all__ = [
    "__version__",
    # Errors
    "VMError",
    "IllegalInstructionError",
    "PCOutOfRangeError",
    "CodeBoundsError",
    "StepLimitError",
    # Programs
    "FIBONACCI",
    "fibonacci_reference",
    # Machine
    "DATA_SIZE",
    "DEFAULT_PC_BOUND",
    "DispatchMode",
    "Flags",
    "Instruction",
    "Interpreter",
    "InterpreterConfig",
    "MachineState",
    "Opcode",
    "RunResult",
    "create_engine",
    "decode",
    "disassemble",
]
