"""
Dispatch Engine
===============

The fetch-decode-execute driver, in three interchangeable variants that
differ only in how much of the pc-to-instruction mapping is resolved when
the engine is built:

- **generic**: decode at the live pc on every iteration and switch on the
  opcode at runtime. An ordinary bytecode interpreter.
- **pc**: one specialized body per pc value below a bound, built once with
  the instruction pre-decoded and its operation and operands pre-bound.
  The loop indexes the body table by pc. A pc at or above the bound is
  fatal ("pc too large").
- **transition**: the same bodies, each linked to the bodies of its static
  successors (the next instruction, or both targets of a branch). Control
  follows these links without returning to a shared table, so the link
  graph mirrors the control-flow graph of the program the bytecode
  encodes.

All three share the decoder, the instruction semantics and the branch
unit, and produce identical register, flag and memory results.

Example:
    >>> engine = create_engine(DispatchMode.TRANSITION, FIBONACCI)
    >>> state = MachineState.create(FIBONACCI, input_value=5)
    >>> steps = engine.run(state)
    >>> state.registers[0]
    8
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..errors import PCOutOfRangeError, StepLimitError, VMError
from .branch import branch_predicate, branch_target, fallthrough
from .decoder import decode
from .isa import Instruction, Opcode
from .semantics import TWO_OPERAND_OPS, execute
from .state import MASK32, MachineState

logger = logging.getLogger(__name__)

# Number of pc values the specialized variants build bodies for by default
DEFAULT_PC_BOUND = 64


class DispatchMode(Enum):
    """Dispatch variant, from least to most specialized."""
    GENERIC = "generic"
    PC = "pc"
    TRANSITION = "transition"

    @classmethod
    def parse(cls, value: Union[str, "DispatchMode"]) -> "DispatchMode":
        """
        Accept a DispatchMode, its value or its name (case-insensitive).

        Raises:
            ValueError: If value names no mode
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for mode in cls:
            if text in (mode.value, mode.name.lower()):
                return mode
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"unknown dispatch mode '{value}' (expected one of: {choices})")


# =============================================================================
# Specialized Instruction Bodies
# =============================================================================

# Runs the instruction at a fixed pc; returns False on halt
Action = Callable[[MachineState], bool]


@dataclass(frozen=True)
class SpecializedBody:
    """
    An instruction body specialized to one pc.

    Attributes:
        pc: The pc this body is valid for
        action: Performs the instruction and sets the successor pc
        successors: Every pc the action can leave behind (empty for halt
                    and for bodies that raise)
        instruction: The pre-decoded instruction, None if decoding failed
    """
    pc: int
    action: Action
    successors: tuple[int, ...]
    instruction: Optional[Instruction] = None

    def __call__(self, state: MachineState) -> bool:
        return self.action(state)

    @property
    def label(self) -> str:
        if self.instruction is not None:
            return str(self.instruction)
        return f"{self.pc:04x}: ??"


def specialize(code: bytes, pc: int) -> SpecializedBody:
    """
    Build the body for the instruction at pc.

    Decoding, opcode dispatch and branch-condition lookup all happen here,
    once. If the bytes at pc do not decode, the body defers the failure:
    it decodes again when executed, so the error is raised only if the
    program actually reaches pc.
    """
    try:
        instr = decode(code, pc)
        predicate = (
            branch_predicate(instr.condition, pc)
            if instr.opcode == Opcode.BRANCH else None
        )
    except VMError as e:
        logger.debug(f"No body for pc {pc:#04x}: {e}")

        def trap(state: MachineState) -> bool:
            return execute(state, decode(code, state.pc))

        return SpecializedBody(pc, trap, ())

    match instr.opcode:
        case Opcode.HALT:
            def halt(state: MachineState) -> bool:
                return False

            return SpecializedBody(pc, halt, (), instr)

        case Opcode.BRANCH:
            taken = branch_target(pc, instr.displacement)
            not_taken = fallthrough(pc)

            def branch(state: MachineState) -> bool:
                state.pc = taken if predicate(state.flags) else not_taken
                return True

            successors = (not_taken,) if taken == not_taken else (not_taken, taken)
            return SpecializedBody(pc, branch, successors, instr)

        case _:
            operation = TWO_OPERAND_OPS[instr.opcode]
            a, b = instr.operands
            next_pc = (pc + instr.size) & MASK32

            def body(state: MachineState) -> bool:
                operation(state, a, b)
                state.pc = next_pc
                return True

            return SpecializedBody(pc, body, (next_pc,), instr)


# =============================================================================
# Engines
# =============================================================================

class DispatchEngine:
    """
    Base class for the dispatch variants.

    An engine is built for one program and may run any number of machine
    states for that program. run() returns the number of instructions
    executed (halt included) or raises a VMError on a fatal path.

    Attributes:
        code: The program this engine was built for
        max_steps: Optional instruction budget per run (None = unlimited)
    """

    mode: DispatchMode

    def __init__(self, code: bytes, max_steps: Optional[int] = None):
        self.code = bytes(code)
        self.max_steps = max_steps

    def run(self, state: MachineState) -> int:
        """
        Run state until the program halts.

        Raises:
            ValueError: If state holds a different program
            IllegalInstructionError: Unknown opcode or branch condition
            CodeBoundsError: pc or operands outside the code segment
            PCOutOfRangeError: pc at or above the bound (pc/transition only)
            StepLimitError: max_steps exceeded
        """
        if state.code != self.code:
            raise ValueError("machine state holds a different program than this engine")

        trace = logger.isEnabledFor(logging.DEBUG)
        steps = self._run(state, trace)
        if trace:
            logger.debug(f"halt after {steps} instructions")
        return steps

    def _run(self, state: MachineState, trace: bool) -> int:
        raise NotImplementedError

    def _check_budget(self, steps: int) -> None:
        if self.max_steps is not None and steps >= self.max_steps:
            raise StepLimitError(self.max_steps)


class GenericDispatch(DispatchEngine):
    """Variant A: runtime decode and runtime opcode switch."""

    mode = DispatchMode.GENERIC

    def _run(self, state: MachineState, trace: bool) -> int:
        code = self.code
        steps = 0
        while True:
            self._check_budget(steps)
            instr = decode(code, state.pc)
            if trace:
                logger.debug(f"pc {instr}")
            steps += 1
            if not execute(state, instr):
                return steps


class PCSpecializedDispatch(DispatchEngine):
    """
    Variant B: dispatch through a table of bodies indexed by pc.

    Attributes:
        pc_bound: Number of pc values with a body; pc >= pc_bound is fatal
        bodies: The body table, bodies[pc].pc == pc
    """

    mode = DispatchMode.PC

    def __init__(
        self,
        code: bytes,
        pc_bound: int = DEFAULT_PC_BOUND,
        max_steps: Optional[int] = None,
    ):
        super().__init__(code, max_steps)
        if pc_bound < 1:
            raise ValueError(f"pc bound must be at least 1, got {pc_bound}")
        if pc_bound < len(self.code):
            logger.warning(
                f"pc bound {pc_bound} does not cover the {len(self.code)}-byte program"
            )
        self.pc_bound = pc_bound
        self.bodies: list[SpecializedBody] = [
            specialize(self.code, pc) for pc in range(pc_bound)
        ]
        logger.debug(
            f"{type(self).__name__}: specialized {pc_bound} bodies "
            f"for a {len(self.code)}-byte program"
        )

    def _run(self, state: MachineState, trace: bool) -> int:
        bodies = self.bodies
        bound = self.pc_bound
        steps = 0
        while True:
            self._check_budget(steps)
            pc = state.pc
            if pc >= bound:
                raise PCOutOfRangeError(pc, bound)
            body = bodies[pc]
            if trace:
                logger.debug(f"pc {body.label}")
            steps += 1
            if not body(state):
                return steps


class TransitionNode:
    """
    A specialized body plus direct links to the nodes of its successors.

    A successor slot holding None is a pc at or above the bound; reaching
    it is fatal.
    """

    __slots__ = ("body", "bound", "next", "successors")

    def __init__(self, body: SpecializedBody, bound: int):
        self.body = body
        self.bound = bound
        self.next: Optional[TransitionNode] = None
        self.successors: dict[int, Optional[TransitionNode]] = {}

    def link(self, nodes: list["TransitionNode"]) -> None:
        for pc in self.body.successors:
            self.successors[pc] = nodes[pc] if pc < self.bound else None
        if len(self.successors) == 1:
            (self.next,) = self.successors.values()

    def successor(self, pc: int) -> Optional["TransitionNode"]:
        """The linked node for pc, or None if pc has no node."""
        if self.next is not None:
            return self.next
        return self.successors.get(pc)


class TransitionSpecializedDispatch(PCSpecializedDispatch):
    """
    Variant C: bodies linked directly to their successor bodies.

    The body table is only consulted once, to find the entry node for the
    initial pc.
    """

    mode = DispatchMode.TRANSITION

    def __init__(
        self,
        code: bytes,
        pc_bound: int = DEFAULT_PC_BOUND,
        max_steps: Optional[int] = None,
    ):
        super().__init__(code, pc_bound, max_steps)
        self.nodes = [TransitionNode(body, self.pc_bound) for body in self.bodies]
        for node in self.nodes:
            node.link(self.nodes)

    def _run(self, state: MachineState, trace: bool) -> int:
        bound = self.pc_bound
        node = self.nodes[state.pc] if state.pc < bound else None
        steps = 0
        while True:
            self._check_budget(steps)
            if node is None:
                raise PCOutOfRangeError(state.pc, bound)
            if trace:
                logger.debug(f"pc {node.body.label}")
            steps += 1
            if not node.body(state):
                return steps
            node = node.successor(state.pc)

    def transition_graph(self, entry: int = 0) -> dict[int, tuple[int, ...]]:
        """
        Successor pcs of every body reachable from entry.

        For the fibonacci program this is the control-flow graph of the
        source: straight-line chains, the early-exit branch and the loop
        back edge.
        """
        graph: dict[int, tuple[int, ...]] = {}
        pending = [entry]
        while pending:
            pc = pending.pop()
            if pc in graph or pc >= self.pc_bound:
                continue
            successors = self.bodies[pc].successors
            graph[pc] = successors
            pending.extend(successors)
        return dict(sorted(graph.items()))


_ENGINES: dict[DispatchMode, type[DispatchEngine]] = {
    DispatchMode.GENERIC: GenericDispatch,
    DispatchMode.PC: PCSpecializedDispatch,
    DispatchMode.TRANSITION: TransitionSpecializedDispatch,
}


def create_engine(
    mode: Union[str, DispatchMode],
    code: bytes,
    pc_bound: int = DEFAULT_PC_BOUND,
    max_steps: Optional[int] = None,
) -> DispatchEngine:
    """
    Build the dispatch engine for mode.

    pc_bound only applies to the specialized variants.
    """
    mode = DispatchMode.parse(mode)
    if mode == DispatchMode.GENERIC:
        return GenericDispatch(code, max_steps=max_steps)
    return _ENGINES[mode](code, pc_bound=pc_bound, max_steps=max_steps)
