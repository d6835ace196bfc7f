"""
Interpreter Tests
=================

Tests for the high-level Interpreter API, its configuration and the
compiled-in fibonacci program.
"""

import dataclasses
import logging

import pytest

from futamura_vm import (
    DATA_SIZE,
    FIBONACCI,
    DispatchMode,
    Interpreter,
    InterpreterConfig,
    StepLimitError,
    fibonacci_reference,
)

import vm_asm as asm


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def interp(mode):
    """Interpreter for each dispatch variant."""
    return Interpreter(InterpreterConfig(dispatch=mode))


# =============================================================================
# Configuration
# =============================================================================

class TestInterpreterConfig:
    """Test config defaults and validation."""

    def test_defaults(self):
        config = InterpreterConfig()
        assert config.dispatch == DispatchMode.GENERIC
        assert config.pc_bound == 64
        assert config.max_steps is None

    def test_dispatch_from_string(self):
        assert InterpreterConfig(dispatch="Transition").dispatch == DispatchMode.TRANSITION

    def test_frozen(self):
        config = InterpreterConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.pc_bound = 10

    def test_unknown_dispatch(self):
        with pytest.raises(ValueError):
            InterpreterConfig(dispatch="threaded")

    def test_negative_max_steps(self):
        with pytest.raises(ValueError):
            InterpreterConfig(max_steps=-1)

    def test_zero_pc_bound_rejected_by_specialized(self):
        with pytest.raises(ValueError):
            Interpreter(InterpreterConfig(dispatch="pc", pc_bound=0))


# =============================================================================
# Running
# =============================================================================

class TestRun:
    """Test Interpreter.run() across variants."""

    def test_mode(self, interp, mode):
        assert interp.mode is mode
        assert interp.code == FIBONACCI

    def test_run_result(self, interp):
        result = interp.run(5)
        assert result.input_value == 5
        assert result.output_value == 8
        assert result.steps == 43
        assert result.state.registers[0] == 8
        assert str(result) == "r0 5 -> 8 (43 instructions)"

    @pytest.mark.parametrize("n", [0, 1, 2, 7, 12, 13, 30])
    def test_matches_reference(self, interp, n):
        assert interp.run(n).output_value == fibonacci_reference(n)

    def test_input_truncated(self, interp):
        result = interp.run(0x1_0000_0003)
        assert result.input_value == 3
        assert result.output_value == 3

    def test_runs_are_independent(self, interp):
        first = interp.run(6)
        second = interp.run(6)
        assert first.state is not second.state
        assert first.state.data is not second.state.data
        assert first.state.snapshot() == second.state.snapshot()

    def test_caller_data_segment(self, interp):
        data = bytearray(DATA_SIZE)
        interp.run(6, data=data)
        assert data[0] == 13

    def test_execute_existing_state(self, interp):
        state = interp.new_state(4)
        assert interp.execute(state) == 35
        assert state.registers[0] == 5

    def test_step_budget(self, mode):
        interp = Interpreter(InterpreterConfig(dispatch=mode, max_steps=50))
        assert interp.run(5).output_value == 8
        with pytest.raises(StepLimitError):
            interp.run(100)

    def test_other_program(self, mode):
        code = asm.movi(1, 7) + asm.add(0, 1) + asm.HALT
        interp = Interpreter(InterpreterConfig(dispatch=mode), code=code)
        result = interp.run(35)
        assert result.output_value == 42
        assert result.steps == 3

    def test_logs_result(self, caplog):
        with caplog.at_level(logging.INFO, logger="futamura_vm"):
            Interpreter(InterpreterConfig(dispatch="pc")).run(5)
        assert "pc: r0 5 -> 8 (43 instructions)" in caplog.text


# =============================================================================
# Reference Function
# =============================================================================

class TestFibonacciReference:
    """Test the pure-Python model of the compiled-in program."""

    def test_first_values(self):
        assert [fibonacci_reference(n) for n in range(8)] == [1, 1, 2, 3, 5, 8, 13, 21]

    def test_wraps_at_256(self):
        assert fibonacci_reference(12) == 233
        assert fibonacci_reference(13) == 377 - 256
