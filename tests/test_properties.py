"""Whole-machine invariants checked over short programs."""

import jax
import jax.numpy as jnp
import pytest
from chax import step, tick_timers, sound_active, run_n_instructions, ErrorCode
from chax.stack import depth
from conftest import program_state, set_registers, setup_sprite_in_memory


def assert_same_state(a, b):
    for leaf_a, leaf_b in zip(jax.tree_util.tree_leaves(a), jax.tree_util.tree_leaves(b)):
        assert (leaf_a == leaf_b).all()


@pytest.mark.parametrize("x, y", [(0, 0), (10, 5), (60, 30), (63, 31)])
def test_drawing_twice_restores_display(x, y):
    state = program_state([0xA300, 0xD015, 0xD015])
    state = setup_sprite_in_memory(state, 0x300, [0xFF, 0x81, 0xA5, 0x81, 0xFF])
    state = set_registers(state, V0=x, V1=y)
    before = state.display

    state = step(step(state))
    assert state.V[0xF] == 0
    assert state.display.any()

    state = step(state)
    assert state.V[0xF] == 1
    assert (state.display == before).all()


def test_call_then_return_restores_pc_and_depth():
    state = program_state([0x2206, 0x6101, 0x1204, 0x00EE])

    state = step(state)
    assert state.pc == 0x206
    assert depth(state.stack) == 1

    state = step(state)
    assert state.pc == 0x202
    assert depth(state.stack) == 0


@pytest.mark.parametrize("word", [0x0000, 0x5AB1, 0x8AB9, 0xE0FF, 0xF0FF])
def test_invalid_opcode_changes_nothing_but_status(word):
    state = program_state([word])
    state = set_registers(state, V0=1, VA=2).replace(I=jnp.array(0x123, dtype=jnp.uint16))

    halted = step(state)

    assert halted.error == ErrorCode.INVALID_OPCODE
    assert halted.error_word == word
    assert halted.error_pc == 0x200
    cleared = halted.replace(
        error=state.error,
        error_pc=state.error_pc,
        error_word=state.error_word,
        error_address=state.error_address,
    )
    assert_same_state(cleared, state)


def test_self_jump_is_a_fixed_point():
    state = step(program_state([0x6007, 0x1202]))
    looped = run_n_instructions(state, 50)
    assert_same_state(looped, state)


@pytest.mark.parametrize("n", [0, 1, 7, 255])
def test_sound_lasts_exactly_n_ticks(fresh_state, n):
    state = fresh_state.replace(sound_timer=jnp.array(n, dtype=jnp.uint8))
    ticks = 0
    while sound_active(state):
        state = tick_timers(state)
        ticks += 1
    assert ticks == n


@pytest.mark.parametrize("x", [0, 3, 15])
def test_store_then_load_round_trip(x):
    values = {f"V{i:X}": (i * 17 + 5) & 0xFF for i in range(16)}
    state = program_state([0xA400, 0xF055 | (x << 8), 0x6000, 0xF065 | (x << 8)])
    state = set_registers(state, **values)

    for _ in range(2):
        state = step(state)
    state = state.replace(V=jnp.zeros(16, dtype=jnp.uint8))
    state = step(step(state))

    for i in range(16):
        expected = values[f"V{i:X}"] if i <= x else 0
        assert state.V[i] == expected
    assert state.I == 0x400
