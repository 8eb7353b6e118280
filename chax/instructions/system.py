"""CHIP-8 system instructions (0x0xxx) and the invalid-opcode handler."""

import jax
import jax.lax
import jax.numpy as jnp
from chax.state import EmulatorState, fail
from chax.decode import DecodedInstruction
from chax.errors import ErrorCode
from chax.stack import pop, is_empty


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def do_return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: fail(state, ErrorCode.STACK_UNDERFLOW),
        do_return,
        state
    )


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Any word matching no known pattern."""
    return fail(state, ErrorCode.INVALID_OPCODE)
