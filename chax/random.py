"""Random byte sources used by the CXNN instruction.

A source is a pure function ``(rng) -> (rng, byte)`` stored as a static field
on the emulator state. ``rng`` is a legacy ``jax.random.PRNGKey`` (a
``uint32[2]`` array), which the source is free to use as its own scratch
state.
"""

from typing import Callable, Sequence, Tuple

import jax
import jax.numpy as jnp

RandomSource = Callable[[jnp.ndarray], Tuple[jnp.ndarray, jnp.ndarray]]


def jax_random_byte(rng: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Draw a uniform byte with ``jax.random`` and return the advanced key."""
    rng, subkey = jax.random.split(rng)
    value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    return rng, jnp.astype(value, jnp.uint8)


def sequence_source(values: Sequence[int]) -> RandomSource:
    """Replay ``values`` cyclically, using the first key word as a cursor."""
    table = jnp.asarray(values, dtype=jnp.uint8)
    if table.ndim != 1 or table.size == 0:
        raise ValueError("sequence_source needs a non-empty flat sequence of bytes")
    size = table.size

    def next_byte(rng: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
        cursor = rng[0]
        return rng.at[0].add(1), table[cursor % size]

    return next_byte
