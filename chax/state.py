"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chax.constants import (
    FONT_DATA, FONT_START, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START,
    SCREEN_HEIGHT, SCREEN_WIDTH, STACK_SIZE,
)
from chax.errors import ErrorCode
from chax.random import RandomSource, jax_random_byte


@dataclass(frozen=True)
class StackState:
    """Call stack of return addresses."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    Every field except ``random_source`` is a JAX array so that states can be
    carried through ``jax.lax.cond``/``switch``/``scan`` unchanged in
    structure. A nonzero ``error`` marks the state as halted.
    """
    rng: jnp.ndarray
    memory: jnp.ndarray
    pc: jnp.ndarray
    I: jnp.ndarray
    V: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    display: jnp.ndarray
    keypad: jnp.ndarray
    waiting_for_key: jnp.ndarray
    key_register: jnp.ndarray
    held_keys: jnp.ndarray
    error: jnp.ndarray
    error_pc: jnp.ndarray
    error_word: jnp.ndarray
    error_address: jnp.ndarray
    random_source: RandomSource = field(pytree_node=False, default=jax_random_byte)

    @property
    def halted(self) -> jnp.ndarray:
        return self.error != ErrorCode.NONE


def create_state(
    rng: jax.random.PRNGKey = None,
    random_source: RandomSource = jax_random_byte,
    pc: int = PROGRAM_START,
) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(jnp.array(FONT_DATA, dtype=jnp.uint8))
    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(pc, dtype=jnp.uint16),
        I=jnp.zeros((), dtype=jnp.uint16),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        stack=StackState(
            data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
            pointer=jnp.zeros((), dtype=jnp.uint8),
        ),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        display=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
        key_register=jnp.zeros((), dtype=jnp.uint8),
        held_keys=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        error=jnp.asarray(ErrorCode.NONE, dtype=jnp.uint8),
        error_pc=jnp.zeros((), dtype=jnp.uint16),
        error_word=jnp.zeros((), dtype=jnp.uint16),
        error_address=jnp.zeros((), dtype=jnp.uint16),
        random_source=random_source,
    )


def fail(state: EmulatorState, code: ErrorCode, address=0) -> EmulatorState:
    """Record a fatal error on ``state``; the caller supplies pc and word."""
    return state.replace(
        error=jnp.asarray(code, dtype=jnp.uint8),
        error_address=jnp.astype(address, jnp.uint16),
    )
