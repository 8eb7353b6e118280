"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chax import create_state, load_rom, PROGRAM_START


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set V registers by name, e.g. ``set_registers(state, V1=3)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def assemble(words):
    """Turn a list of 16-bit instruction words into ROM bytes."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def program_state(words, state=None, address=PROGRAM_START):
    """Fresh state with ``words`` loaded at ``address``."""
    return load_rom(state if state is not None else create_state(), assemble(words), address)
