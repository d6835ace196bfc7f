"""
Interpreter
===========

High-level entry point tying a program, a dispatch engine and fresh
machine states together. The engine is built once per Interpreter, so the
specialized variants pay their construction cost once and every run()
reuses it.

Example usage:
    >>> from futamura_vm import Interpreter, InterpreterConfig, DispatchMode
    >>> interp = Interpreter(InterpreterConfig(dispatch=DispatchMode.PC))
    >>> result = interp.run(5)
    >>> result.output_value
    8
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..programs import FIBONACCI
from .dispatch import DEFAULT_PC_BOUND, DispatchEngine, DispatchMode, create_engine
from .state import MASK32, MachineState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterpreterConfig:
    """
    Configuration for interpreter construction.

    Attributes:
        dispatch: Dispatch variant. Default is generic.
        pc_bound: Number of pc values the specialized variants build bodies
                  for. Ignored by generic dispatch.
        max_steps: Instruction budget per run. None (the default) lets a
                   looping program run forever.

    Example:
        >>> config = InterpreterConfig(dispatch=DispatchMode.TRANSITION)
        >>> config = InterpreterConfig(dispatch="pc", pc_bound=128)
    """
    dispatch: DispatchMode = DispatchMode.GENERIC
    pc_bound: int = DEFAULT_PC_BOUND
    max_steps: Optional[int] = None

    def __post_init__(self) -> None:
        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "dispatch", DispatchMode.parse(self.dispatch))
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must not be negative, got {self.max_steps}")


@dataclass
class RunResult:
    """
    Outcome of a run that halted normally.

    Attributes:
        input_value: r0 when the run started
        output_value: r0 after halt
        steps: Instructions executed, halt included
        state: The final machine state
    """
    input_value: int
    output_value: int
    steps: int
    state: MachineState = field(repr=False)

    def __str__(self) -> str:
        return (
            f"r0 {self.input_value} -> {self.output_value} "
            f"({self.steps} instructions)"
        )


class Interpreter:
    """
    Runs a compiled-in program with the configured dispatch variant.

    Instances are independent: each owns its engine, and every run gets a
    fresh MachineState (and data segment, unless one is passed in).

    Attributes:
        config: The InterpreterConfig used to build this instance
        code: The program
        engine: The dispatch engine built for code
    """

    def __init__(
        self,
        config: Optional[InterpreterConfig] = None,
        code: bytes = FIBONACCI,
    ):
        """
        Raises:
            ValueError: If the config is invalid (e.g. pc_bound < 1)
        """
        self.config = config or InterpreterConfig()
        self.code = bytes(code)
        self.engine: DispatchEngine = create_engine(
            self.config.dispatch,
            self.code,
            pc_bound=self.config.pc_bound,
            max_steps=self.config.max_steps,
        )
        logger.debug(
            f"Interpreter ready: {self.config.dispatch.value} dispatch, "
            f"{len(self.code)}-byte program"
        )

    @property
    def mode(self) -> DispatchMode:
        return self.engine.mode

    def new_state(self, input_value: int = 0, data: Optional[bytearray] = None) -> MachineState:
        """Create a machine state for this program with input_value in r0."""
        return MachineState.create(self.code, input_value, data)

    def execute(self, state: MachineState) -> int:
        """Run an existing state to halt, returning the instruction count."""
        return self.engine.run(state)

    def run(self, input_value: int, data: Optional[bytearray] = None) -> RunResult:
        """
        Run the program once with input_value in r0.

        Args:
            input_value: Initial r0, truncated to 32 bits
            data: Optional data segment (DATA_SIZE bytes) to run against

        Returns:
            RunResult for the halted run

        Raises:
            VMError: On any fatal condition of the run
        """
        state = self.new_state(input_value, data)
        steps = self.execute(state)
        result = RunResult(
            input_value=input_value & MASK32,
            output_value=state.registers[0],
            steps=steps,
            state=state,
        )
        logger.info(f"{self.mode.value}: {result}")
        return result
