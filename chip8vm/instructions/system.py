"""CHIP-8 system instructions (00E0, 00EE) and the unknown-opcode handler."""

import jax.lax
import jax.numpy as jnp
from chip8vm.constants import UNKNOWN_OPCODE, STACK_UNDERFLOW
from chip8vm.state import EmulatorState, with_error
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import pop


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Words outside the instruction set halt the machine."""
    return with_error(state, UNKNOWN_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(
        display=jnp.zeros_like(state.display),
        redraw=jnp.asarray(True),
    )


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine.

    The popped address already points past the CALL, so pc is used as is.
    """
    stack, address, underflow = pop(state.stack)
    return jax.lax.cond(
        underflow,
        lambda s: with_error(s, STACK_UNDERFLOW),
        lambda s: s.replace(stack=stack, pc=address),
        state
    )
