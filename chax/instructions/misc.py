"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chax.state import EmulatorState
from chax.decode import DecodedInstruction
from chax.constants import ADDRESS_MASK, FLAG_REGISTER, FONT_SPRITE_SIZE, FONT_START, NUM_REGISTERS
from chax.instructions.memory import guard_memory


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF = 1 if I leaves the address space."""
    new_i = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    overflow_flag = new_i > ADDRESS_MASK
    return state.replace(
        I=jnp.astype(new_i & ADDRESS_MASK, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(overflow_flag, jnp.uint8))
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Only records the wait; the emulator stops fetching until
    :func:`resume_wait_for_key` sees a key go down. Keys already held now do
    not count until they are released and pressed again.
    """
    return state.replace(
        waiting_for_key=jnp.ones((), dtype=jnp.bool_),
        key_register=jnp.astype(instruction.x, jnp.uint8),
        held_keys=state.keypad,
    )


def resume_wait_for_key(state: EmulatorState) -> EmulatorState:
    """Finish a pending FX0A if a fresh key press is visible."""
    held = state.held_keys & state.keypad
    fresh = state.keypad & ~held

    def take_key(state):
        pressed_key = jnp.astype(jnp.argmax(fresh), jnp.uint8)
        return state.replace(
            V=state.V.at[state.key_register].set(pressed_key),
            waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
            held_keys=held,
        )

    return jax.lax.cond(jnp.any(fresh), take_key, lambda s: s.replace(held_keys=held), state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX (low nibble)."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.int32)
    font_address = FONT_START + digit * FONT_SPRITE_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    def store_digits(state):
        value = state.V[instruction.x]
        digits = jnp.array([
            value // 100,
            (value // 10) % 10,
            value % 10
        ], dtype=jnp.uint8)
        indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
        return state.replace(memory=state.memory.at[indices].set(digits))

    return guard_memory(state, 3, store_digits, writes=True)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I (I unchanged)."""
    def store(state):
        register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
        base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
        current_memory_values = state.memory[base_indices]
        new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
        return state.replace(memory=state.memory.at[base_indices].set(new_memory_values))

    return guard_memory(state, instruction.x + 1, store, writes=True)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I (I unchanged)."""
    def load(state):
        register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
        base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
        memory_values = state.memory[base_indices]
        return state.replace(V=jnp.where(register_mask, memory_values, state.V))

    return guard_memory(state, instruction.x + 1, load)
