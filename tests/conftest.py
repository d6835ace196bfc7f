"""
Shared fixtures for the interpreter tests.
"""

import pytest

from futamura_vm import DispatchMode, MachineState, create_engine


ALL_MODES = list(DispatchMode)
SPECIALIZED_MODES = [DispatchMode.PC, DispatchMode.TRANSITION]


@pytest.fixture(params=ALL_MODES, ids=lambda m: m.value)
def mode(request) -> DispatchMode:
    """Every dispatch variant in turn."""
    return request.param


@pytest.fixture(params=SPECIALIZED_MODES, ids=lambda m: m.value)
def specialized_mode(request) -> DispatchMode:
    """The variants with a pc bound."""
    return request.param


@pytest.fixture
def run_program(mode):
    """
    Run code to halt with the current dispatch variant.

    Returns a function (code, registers=None, **engine_kwargs) -> state,
    where registers maps register index to initial value.
    """
    def _run(code: bytes, registers: dict[int, int] | None = None, **kwargs) -> MachineState:
        engine = create_engine(mode, code, **kwargs)
        state = MachineState.create(code)
        for index, value in (registers or {}).items():
            state.set_register(index, value)
        engine.run(state)
        return state

    return _run
