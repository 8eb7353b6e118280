"""Tests for ALU operations (8xxx)."""

import pytest
from chax import execute, ErrorCode
from conftest import set_registers


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_bitwise_operations_leave_vf_alone(self, fresh_state):
        """8XY1/2/3 do not reset VF."""
        for word in (0x8121, 0x8122, 0x8123):
            state = set_registers(fresh_state, V1=0x0C, V2=0x0A, VF=0x07)
            state = execute(state, word)
            assert state.V[15] == 0x07, f"{word:04X} touched VF"


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = set_registers(fresh_state, V1=0x10, V2=0x20)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x01)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1  # Carry set

    @pytest.mark.parametrize("vx, vy", [(0, 0), (0x7F, 0x80), (0x80, 0x80), (0xFF, 0xFF), (0xC8, 0x37), (0xC8, 0x38)])
    def test_alu_add_matches_modular_sum(self, fresh_state, vx, vy):
        """8XY4 - Result is the sum mod 256, VF is 1 iff it overflowed."""
        state = set_registers(fresh_state, V3=vx, V4=vy)

        state = execute(state, 0x8344)

        assert state.V[3] == (vx + vy) % 256
        assert state.V[15] == int(vx + vy > 255)

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1  # No borrow (VX >= VY)

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = set_registers(fresh_state, V3=0x10, V4=0x30)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0  # Borrow (VX < VY)

    def test_alu_sub_equal_operands(self, fresh_state):
        """8XY5 - Equal operands do not borrow."""
        state = set_registers(fresh_state, V1=0x42, V2=0x42)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 1

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1  # No borrow (VY >= VX)

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, with borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)

        assert state.V[1] == 0xE0
        assert state.V[15] == 0

    @pytest.mark.parametrize("vx, vy", [(0, 1), (1, 0), (0xFF, 0), (0, 0xFF), (0x80, 0x7F)])
    def test_sub_flag_polarity(self, fresh_state, vx, vy):
        """VF is 1 iff the minuend is at least the subtrahend, for both orders."""
        state = set_registers(fresh_state, V5=vx, V6=vy)
        forward = execute(state, 0x8565)
        backward = execute(state, 0x8567)

        assert forward.V[5] == (vx - vy) % 256
        assert forward.V[15] == int(vx >= vy)
        assert backward.V[5] == (vy - vx) % 256
        assert backward.V[15] == int(vy >= vx)


class TestALUShifts:
    """Shifts operate on VX itself."""

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = set_registers(fresh_state, V1=0x04, V2=0xFF)  # V2 is ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02  # 4 >> 1 = 2
        assert state.V[15] == 0  # LSB was 0

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - Shift right, odd number."""
        state = set_registers(fresh_state, V3=0x05, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02  # 5 >> 1 = 2
        assert state.V[15] == 1  # LSB was 1

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - Shift left, with overflow."""
        state = set_registers(fresh_state, V3=0x81, V4=0xFF)  # 10000001

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02  # 129 << 1 = 258 → 2
        assert state.V[15] == 1  # MSB was 1

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - Shift left, MSB clear."""
        state = set_registers(fresh_state, V3=0x41)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    def test_shift_ignores_vy(self, fresh_state):
        """VY has no influence on the shift result."""
        state = set_registers(fresh_state, V1=0x08, V2=0x03)

        state = execute(state, 0x8126)

        assert state.V[1] == 0x04  # 8 >> 1, not 3 >> 1
        assert state.V[2] == 0x03


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_undefined_operations(self, fresh_state):
        """8XY8-8XYD and 8XYF are invalid opcodes and change no register."""
        undefined_ops = [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]

        for op in undefined_ops:
            state = set_registers(fresh_state, V1=0x42, V2=0x99)

            instruction = 0x8120 | op
            state = execute(state, instruction)

            assert state.error == ErrorCode.INVALID_OPCODE, f"Undefined op {op:X} accepted"
            assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
            assert state.V[15] == 0, f"Undefined op {op:X} set VF to non-zero"

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = set_registers(fresh_state, V5=0xAA)

        # V5 ^= V5 (should become 0)
        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        # Reset and test self ADD
        state = set_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_register_operations(self, fresh_state):
        """Test that operations on VF work correctly."""
        state = set_registers(fresh_state, VF=0x42, V1=0x10)

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52, "Addition with VF as source failed"
        assert state.V[15] == 0, "VF should be overwritten by operation result"

    def test_flag_wins_when_vf_is_destination(self, fresh_state):
        """8FY4 - VF ends up holding the carry, not the sum."""
        state = set_registers(fresh_state, VF=0xF0, V1=0x20)

        state = execute(state, 0x8F14)

        assert state.V[15] == 1
