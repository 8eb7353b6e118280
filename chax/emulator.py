"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chax.state import EmulatorState, fail
from chax.decode import Op, decode
from chax.constants import FONT_END, FONT_START, MEMORY_SIZE, PROGRAM_START
from chax.errors import ErrorCode, MemoryOutOfBounds, RomTooLarge
from chax.instructions.system import execute_clear_screen, execute_return, execute_invalid
from chax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chax.instructions.alu import (
    alu_set, alu_or, alu_and, alu_xor, alu_add, alu_sub_xy,
    alu_shift_right, alu_sub_yx, alu_shift_left,
)
from chax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chax.instructions.display import execute_display
from chax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
    resume_wait_for_key,
)


DISPATCH = {
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_IMM: execute_skip_if_equal_immediate,
    Op.SNE_IMM: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.LD_REG: alu_set,
    Op.OR: alu_or,
    Op.AND: alu_and,
    Op.XOR: alu_xor,
    Op.ADD_REG: alu_add,
    Op.SUB: alu_sub_xy,
    Op.SHR: alu_shift_right,
    Op.SUBN: alu_sub_yx,
    Op.SHL: alu_shift_left,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_OFFSET: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key_pressed,
    Op.SKNP: execute_skip_if_key_not_pressed,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_VX_K: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_I: execute_add_to_index,
    Op.LD_F: execute_font_character,
    Op.LD_B: execute_bcd_conversion,
    Op.STORE: execute_store_registers,
    Op.LOAD: execute_load_registers,
    Op.INVALID: execute_invalid,
}

_unhandled = set(Op) - set(DISPATCH)
if _unhandled:
    raise RuntimeError(f"No handler for {sorted(op.name for op in _unhandled)}")

# Branch list for jax.lax.switch, indexed by Op value
HANDLERS = [DISPATCH[op] for op in sorted(Op)]


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    PC is advanced past the instruction before it runs, so jumps, calls and
    skips work relative to the next instruction. If the instruction faults,
    the returned state is the input state plus the recorded error.
    """
    decoded_instruction = decode(instruction)
    advanced = state.replace(pc=state.pc + 2)

    result = jax.lax.switch(decoded_instruction.op, HANDLERS, advanced, decoded_instruction)

    def record_fault(result, state):
        return state.replace(
            error=result.error,
            error_address=result.error_address,
            error_pc=state.pc,
            error_word=jnp.astype(instruction, jnp.uint16),
        )

    return jax.lax.cond(
        result.error != ErrorCode.NONE,
        record_fault,
        lambda result, state: result,
        result, state
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> jnp.uint16:
    """Fetch the instruction word at PC (bounds are checked by ``step``)."""
    return _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])


def _fetch_fault(state: EmulatorState) -> EmulatorState:
    state = fail(state, ErrorCode.MEMORY_OUT_OF_BOUNDS, jnp.maximum(jnp.astype(state.pc, jnp.int32), MEMORY_SIZE))
    return state.replace(error_pc=state.pc, error_word=jnp.zeros((), dtype=jnp.uint16))


def step(state: EmulatorState) -> EmulatorState:
    """Advance the machine by one instruction slot.

    A halted state is returned unchanged. A state waiting on FX0A only checks
    the keypad. Otherwise the word at PC is fetched and executed.
    """
    def run(state):
        in_bounds = jnp.astype(state.pc, jnp.int32) + 1 < MEMORY_SIZE
        return jax.lax.cond(in_bounds, lambda s: execute(s, fetch(s)), _fetch_fault, state)

    def advance(state):
        return jax.lax.cond(state.waiting_for_key, resume_wait_for_key, run, state)

    return jax.lax.cond(state.halted, lambda s: s, advance, state)


@partial(jax.jit, static_argnums=1)
def run_n_instructions(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` instruction slots under ``jax.lax.scan``."""
    state, _ = jax.lax.scan(lambda s, _: (step(s), None), state, length=n)
    return state


def load_rom(state: EmulatorState, rom: bytes, address: int = PROGRAM_START) -> EmulatorState:
    """Copy ROM bytes into memory at ``address`` and point PC at them."""
    if not 0 <= address < MEMORY_SIZE:
        raise MemoryOutOfBounds(address)
    rom = bytes(rom)
    capacity = MEMORY_SIZE - address
    if len(rom) > capacity:
        raise RomTooLarge(len(rom), capacity)
    if rom and address < FONT_END and address + len(rom) > FONT_START:
        raise MemoryOutOfBounds(max(address, FONT_START))

    new_memory = state.memory
    if rom:
        rom_array = jnp.array(list(rom), dtype=jnp.uint8)
        new_memory = new_memory.at[address:address + len(rom)].set(rom_array)
    return state.replace(memory=new_memory, pc=jnp.asarray(address, dtype=jnp.uint16))


def read_rom(filename: str) -> bytes:
    """Read a ROM image from disk."""
    with open(filename, 'rb') as f:
        return f.read()
