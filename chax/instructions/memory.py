"""CHIP-8 memory and register operations."""

import jax
import jax.lax
import jax.numpy as jnp
from chax.state import EmulatorState, fail
from chax.decode import DecodedInstruction
from chax.constants import FONT_END, FONT_START, MEMORY_SIZE
from chax.errors import ErrorCode


def guard_memory(state: EmulatorState, length, action, writes=False) -> EmulatorState:
    """Run ``action(state)`` only if ``I .. I+length-1`` lies inside memory.

    Otherwise the state is returned untouched with a MEMORY_OUT_OF_BOUNDS
    error pointing at the first address past the end of memory. With
    ``writes`` the font sprites count as out of bounds too, and the error
    points at the first glyph byte the write would touch.
    """
    start = jnp.astype(state.I, jnp.int32)
    end = start + length
    out_of_bounds = (length > 0) & (end > MEMORY_SIZE)
    bad_address = jnp.maximum(start, MEMORY_SIZE)
    if writes:
        touches_font = (length > 0) & (start < FONT_END) & (end > FONT_START)
        bad_address = jnp.where(touches_font, jnp.maximum(start, FONT_START), bad_address)
        out_of_bounds = out_of_bounds | touches_font
    return jax.lax.cond(
        out_of_bounds,
        lambda s: fail(s, ErrorCode.MEMORY_OUT_OF_BOUNDS, bad_address),
        action,
        state
    )


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX (no carry flag)."""
    return state.replace(V=state.V.at[instruction.x].add(jnp.astype(instruction.nn, jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    rng, random_value = state.random_source(state.rng)
    masked = jnp.astype(random_value, jnp.uint8) & jnp.astype(instruction.nn, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=rng)
