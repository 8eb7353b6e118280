"""CHIP-8 virtual machine package."""

from chax.state import EmulatorState, create_state
from chax.emulator import execute, fetch, step, run_n_instructions, load_rom, read_rom
from chax.decode import DecodedInstruction, Op, decode
from chax.timers import tick_timers, sound_active, TimerClock
from chax.errors import (
    ErrorCode, Chip8Error, InvalidOpcode, StackOverflow, StackUnderflow,
    MemoryOutOfBounds, RomTooLarge, InvalidKey, raise_for_status,
)
from chax.random import jax_random_byte, sequence_source
from chax.config import MachineConfig
from chax.machine import Machine
from chax.constants import *
from chax.rendering import chip8_display_to_rgb, create_color_scheme, save_frame

__all__ = [
    "EmulatorState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_n_instructions",
    "load_rom",
    "read_rom",
    "DecodedInstruction",
    "Op",
    "decode",
    "tick_timers",
    "sound_active",
    "TimerClock",
    "ErrorCode",
    "Chip8Error",
    "InvalidOpcode",
    "StackOverflow",
    "StackUnderflow",
    "MemoryOutOfBounds",
    "RomTooLarge",
    "InvalidKey",
    "raise_for_status",
    "jax_random_byte",
    "sequence_source",
    "MachineConfig",
    "Machine",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "save_frame",
]
