"""CHIP-8 ALU operations (8xxx).

Flag-producing operations write VX first and VF second, so ``8FY4`` and
friends leave the flag in VF. The bitwise operations leave VF alone, and the
shifts operate on VX in place.
"""

import jax.numpy as jnp
from chax.state import EmulatorState
from chax.decode import DecodedInstruction
from chax.constants import FLAG_REGISTER


def _write(state: EmulatorState, x, result, flag=None) -> EmulatorState:
    new_V = state.V.at[x].set(jnp.astype(result, jnp.uint8))
    if flag is not None:
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
    return state.replace(V=new_V)


def alu_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY0 - Set: VX = VY."""
    return _write(state, instruction.x, state.V[instruction.y])


def alu_or(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY1 - Binary OR: VX |= VY."""
    return _write(state, instruction.x, state.V[instruction.x] | state.V[instruction.y])


def alu_and(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY2 - Binary AND: VX &= VY."""
    return _write(state, instruction.x, state.V[instruction.x] & state.V[instruction.y])


def alu_xor(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY3 - Logical XOR: VX ^= VY."""
    return _write(state, instruction.x, state.V[instruction.x] ^ state.V[instruction.y])


def alu_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY4 - Add: VX += VY, VF = carry."""
    total = jnp.astype(state.V[instruction.x], jnp.int32) + state.V[instruction.y]
    return _write(state, instruction.x, total & 0xFF, total > 0xFF)


def alu_sub_xy(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    return _write(state, instruction.x, vx - vy, vx >= vy)


def alu_shift_right(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY6 - Shift right: VX >>= 1, VF = shifted-out bit."""
    vx = state.V[instruction.x]
    return _write(state, instruction.x, vx >> 1, vx & 1)


def alu_sub_yx(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    return _write(state, instruction.x, vy - vx, vy >= vx)


def alu_shift_left(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYE - Shift left: VX <<= 1, VF = shifted-out bit."""
    vx = state.V[instruction.x]
    return _write(state, instruction.x, vx << 1, vx >> 7)
