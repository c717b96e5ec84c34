"""CHIP-8 miscellaneous instructions (EXNN, FXNN)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.constants import (
    MEMORY_SIZE, NUM_REGISTERS, FONT_START, FONT_GLYPH_SIZE, OUT_OF_BOUNDS,
)
from chip8vm.state import EmulatorState, with_error
from chip8vm.decode import DecodedInstruction


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
    """FX1E - Add VX to I register (mod 2^16), VF untouched."""
    new_i = state.I + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(I=new_i)


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Parks pc on this instruction and enters the awaiting-key state; the key
    is collected by a later step (see ``resolve_key_wait``).
    """
    return state.replace(
        pc=state.pc - 2,
        awaiting_key=jnp.asarray(True),
        key_register=jnp.astype(instruction.x, jnp.uint8),
    )


def resolve_key_wait(state: EmulatorState) -> EmulatorState:
    """Poll the keypad on behalf of a pending FX0A."""
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(
            V=state.V.at[state.key_register].set(pressed_key),
            pc=state.pc + 2,
            awaiting_key=jnp.asarray(False),
        )

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, lambda s: s, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=FONT_START + digit * FONT_GLYPH_SIZE)


def _guard_range(state: EmulatorState, length, action) -> EmulatorState:
    """Run ``action`` only if memory[I:I + length] exists."""
    out_of_bounds = jnp.astype(state.I, jnp.int32) + length > MEMORY_SIZE
    return jax.lax.cond(
        out_of_bounds,
        lambda s: with_error(s, OUT_OF_BOUNDS),
        action,
        state
    )


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

    return _guard_range(state, 3, store_digits)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, I unchanged."""
    count = jnp.astype(instruction.x, jnp.int32) + 1

    def store(state):
        register_mask = jnp.arange(NUM_REGISTERS) < count
        base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
        current_memory_values = state.memory.at[base_indices].get(mode="clip")
        new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
        return state.replace(memory=state.memory.at[base_indices].set(new_memory_values, mode="drop"))

    return _guard_range(state, count, store)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, I unchanged."""
    count = jnp.astype(instruction.x, jnp.int32) + 1

    def load(state):
        register_mask = jnp.arange(NUM_REGISTERS) < count
        base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
        memory_values = state.memory.at[base_indices].get(mode="clip")
        return state.replace(V=jnp.where(register_mask, memory_values, state.V))

    return _guard_range(state, count, load)
