"""CHIP-8 display operations."""

import jax.numpy as jnp
from chax.state import EmulatorState
from chax.decode import DecodedInstruction
from chax.constants import (
    FLAG_REGISTER, MAX_SPRITE_HEIGHT, SCREEN_HEIGHT, SCREEN_WIDTH, SPRITE_WIDTH,
)
from chax.instructions.memory import guard_memory

# Row and column offsets of the largest possible sprite
rows = jnp.arange(MAX_SPRITE_HEIGHT)
cols = jnp.arange(SPRITE_WIDTH)


def sprite_layer(memory: jnp.ndarray, address, height, x, y) -> jnp.ndarray:
    """Rasterise a sprite into a full-screen boolean layer.

    Rows beyond ``height`` are masked out. Both axes wrap around the screen.
    """
    sprite_bytes = memory[jnp.astype(address, jnp.int32) + rows]
    bits = ((sprite_bytes[:, None] >> (7 - cols)[None, :]) & 1).astype(jnp.bool_)
    bits = bits & (rows < height)[:, None]

    xs = (jnp.astype(x, jnp.int32) % SCREEN_WIDTH + cols) % SCREEN_WIDTH
    ys = (jnp.astype(y, jnp.int32) % SCREEN_HEIGHT + rows) % SCREEN_HEIGHT
    layer = jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_)
    return layer.at[xs[None, :], ys[:, None]].set(bits)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    def draw(state):
        sprite = sprite_layer(
            state.memory, state.I, instruction.n, state.V[instruction.x], state.V[instruction.y]
        )
        collision = jnp.any(state.display & sprite)
        return state.replace(
            display=state.display ^ sprite,
            V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
        )

    return guard_memory(state, instruction.n, draw)
