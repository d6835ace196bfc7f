"""
Machine State Unit Tests
========================

Tests for register masking, the pc, flags and data segment addressing.
"""

import pytest

from futamura_vm import DATA_SIZE, FIBONACCI, Flags, MachineState
from futamura_vm.machine import NUM_REGS, sign_extend_8, to_signed32


# =============================================================================
# Construction
# =============================================================================

class TestCreate:
    """Test state construction and seeding."""

    def test_input_in_r0(self):
        """create() places the input value in r0 and zeroes the rest."""
        st = MachineState.create(FIBONACCI, input_value=42)
        assert st.registers[0] == 42
        assert st.registers[1:] == [0] * (NUM_REGS - 1)

    def test_input_truncated_to_32_bits(self):
        """Inputs wider than a register keep their low 32 bits."""
        st = MachineState.create(FIBONACCI, input_value=0x1_0000_0005)
        assert st.registers[0] == 5

    def test_initial_pc_and_flags(self):
        """pc starts at 0 and flags start clear."""
        st = MachineState.create(FIBONACCI)
        assert st.pc == 0
        assert st.flags == Flags(0)
        assert not (st.flag_n or st.flag_z or st.flag_v)

    def test_default_data_segment(self):
        """A zeroed 256-byte data segment is allocated by default."""
        st = MachineState.create(FIBONACCI)
        assert len(st.data) == DATA_SIZE
        assert not any(st.data)

    def test_caller_data_segment_is_used(self):
        """A supplied data segment is used in place, not copied."""
        data = bytearray(DATA_SIZE)
        st = MachineState.create(FIBONACCI, data=data)
        st.write_data(3, 0x7F)
        assert data[3] == 0x7F

    @pytest.mark.parametrize("size", [0, 255, 257])
    def test_wrong_data_size_rejected(self, size):
        """Data segments must be exactly DATA_SIZE bytes."""
        with pytest.raises(ValueError):
            MachineState(FIBONACCI, bytearray(size))

    def test_code_is_immutable_copy(self):
        """The code segment is stored as bytes, separate from data."""
        code = bytearray(b"H")
        st = MachineState(code)
        code[0] = 0
        assert st.code == b"H"
        assert isinstance(st.code, bytes)


# =============================================================================
# Registers and PC
# =============================================================================

class TestRegisters:
    """Test 32-bit masking."""

    def test_set_register_masks(self):
        st = MachineState(b"H")
        st.set_register(1, 0x1_2345_6789)
        assert st.get_register(1) == 0x2345_6789

    def test_negative_wraps(self):
        """Negative values wrap as two's complement."""
        st = MachineState(b"H")
        st.set_register(2, -1)
        assert st.registers[2] == 0xFFFFFFFF

    def test_pc_masked(self):
        st = MachineState(b"H")
        st.pc = -6
        assert st.pc == 0xFFFFFFFA


# =============================================================================
# Data Segment Addressing
# =============================================================================

class TestDataAddressing:
    """Test signed 8-bit offsets into the 256-byte data segment."""

    def test_minus_one_is_last_byte(self):
        """Offset -1 (0xFF in a register) addresses data[255]."""
        st = MachineState(b"H")
        st.write_data(0xFF, 0xAB)
        assert st.data[255] == 0xAB
        assert st.read_data(0xFFFFFFFF) == 0xAB

    def test_most_negative_offset(self):
        """Offset -128 (0x80) addresses data[128]."""
        st = MachineState(b"H")
        st.write_data(0x80, 0x11)
        assert st.data[128] == 0x11

    def test_only_low_byte_of_address_counts(self):
        """Higher address bits are ignored by the sign extension."""
        st = MachineState(b"H")
        st.write_data(0x1234_5605, 0x22)
        assert st.data[5] == 0x22

    def test_write_keeps_low_byte(self):
        st = MachineState(b"H")
        st.write_data(0, 0x1FF)
        assert st.data[0] == 0xFF


# =============================================================================
# Helpers and Snapshots
# =============================================================================

class TestHelpers:
    """Test bit helpers."""

    @pytest.mark.parametrize("value,expected", [
        (0x00, 0), (0x7F, 127), (0x80, -128), (0xFF, -1), (0x1FF, -1),
    ])
    def test_sign_extend_8(self, value, expected):
        assert sign_extend_8(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (0, 0), (0x7FFFFFFF, 2**31 - 1), (0x80000000, -2**31), (0xFFFFFFFF, -1),
    ])
    def test_to_signed32(self, value, expected):
        assert to_signed32(value) == expected


class TestSnapshot:
    """Test state snapshots."""

    def test_snapshot_contents(self):
        st = MachineState.create(FIBONACCI, input_value=7)
        st.flags = Flags.N | Flags.V
        st.pc = 9
        snap = st.snapshot()
        assert snap["registers"][0] == 7
        assert snap["flags"] == 0x05
        assert snap["pc"] == 9
        assert snap["data"] == bytes(DATA_SIZE)

    def test_snapshot_is_detached(self):
        """Later mutation does not change an earlier snapshot."""
        st = MachineState.create(FIBONACCI)
        snap = st.snapshot()
        st.set_register(0, 1)
        st.write_data(0, 1)
        assert snap["registers"][0] == 0
        assert snap["data"][0] == 0
