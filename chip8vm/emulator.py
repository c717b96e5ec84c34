"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, with_error
from chip8vm.decode import INSTRUCTION_SET, decode
from chip8vm.constants import MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE, NO_ERROR, OUT_OF_BOUNDS
from chip8vm.errors import RomTooLarge
from chip8vm.instructions.system import execute_unknown, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
    resolve_key_wait
)

HANDLERS = {
    "CLS": execute_clear_screen,
    "RET": execute_return,
    "JP": execute_jump,
    "CALL": execute_call,
    "SE_IMM": execute_skip_if_equal_immediate,
    "SNE_IMM": execute_skip_if_not_equal_immediate,
    "SE_REG": execute_skip_if_equal_register,
    "LD_IMM": execute_set,
    "ADD_IMM": execute_add,
    "LD_REG": execute_alu_set,
    "OR": execute_alu_or,
    "AND": execute_alu_and,
    "XOR": execute_alu_xor,
    "ADD_REG": execute_alu_add,
    "SUB": execute_alu_sub_xy,
    "SHR": execute_alu_shift_right,
    "SUBN": execute_alu_sub_yx,
    "SHL": execute_alu_shift_left,
    "SNE_REG": execute_skip_if_not_equal_register,
    "LD_I": execute_set_index,
    "JP_V0": execute_jump_with_offset,
    "RND": execute_random,
    "DRW": execute_display,
    "SKP": execute_skip_if_key,
    "SKNP": execute_skip_if_not_key,
    "LD_VX_DT": execute_get_delay_timer,
    "LD_VX_K": execute_wait_for_key,
    "LD_DT_VX": execute_set_delay_timer,
    "LD_ST_VX": execute_set_sound_timer,
    "ADD_I": execute_add_to_index,
    "LD_F": execute_font_character,
    "LD_B": execute_bcd_conversion,
    "LD_MEM_VX": execute_store_registers,
    "LD_VX_MEM": execute_load_registers,
}

# Branch i handles INSTRUCTION_SET[i]; the trailing branch handles UNKNOWN
_BRANCHES = [HANDLERS[entry.mnemonic] for entry in INSTRUCTION_SET] + [execute_unknown]


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Expects pc to already point past the instruction, as left by ``fetch``.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.kind, _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance pc by 2."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def _run_cycle(state: EmulatorState) -> EmulatorState:
    def fetch_and_execute(state):
        state, instruction = fetch(state)
        return execute(state, instruction)

    in_bounds = jnp.astype(state.pc, jnp.int32) + 1 < MEMORY_SIZE
    new_state = jax.lax.cond(
        in_bounds,
        fetch_and_execute,
        lambda s: with_error(s, OUT_OF_BOUNDS),
        state
    )
    # A failed cycle leaves everything but the error code untouched
    return jax.lax.cond(
        new_state.error != NO_ERROR,
        lambda: with_error(state, new_state.error),
        lambda: new_state,
    )


def step(state: EmulatorState) -> EmulatorState:
    """One fetch-decode-execute cycle, or one keypad poll while awaiting a key.

    Halted states (non-zero ``error``) are returned unchanged.
    """
    def running(state):
        return jax.lax.cond(state.awaiting_key, resolve_key_wait, _run_cycle, state)

    return jax.lax.cond(state.error != NO_ERROR, lambda s: s, running, state)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, floored at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def load_rom(state: EmulatorState, rom: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200.

    Registers, stack and display are left as they are; build a fresh state
    for a hard reset.
    """
    rom_data = bytes(rom)
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLarge(len(rom_data))
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def _step_scan(state, _):
    return step(state), None


@partial(jax.jit, static_argnums=1)
def run_frame(state: EmulatorState, instructions_per_frame: int) -> EmulatorState:
    """Run one 60 Hz frame: a fixed number of steps followed by a timer tick.

    A machine that halted during the frame keeps its timers as they are.
    """
    state, _ = jax.lax.scan(_step_scan, state, length=instructions_per_frame)
    return jax.lax.cond(state.error != NO_ERROR, lambda s: s, tick_timers, state)


@partial(jax.jit, static_argnums=(1, 2))
def run_frames(state: EmulatorState, num_frames: int, instructions_per_frame: int):
    """Run ``num_frames`` frames, returning the final state and every frame's display."""
    def frame(state, _):
        state = run_frame(state, instructions_per_frame)
        return state, state.display

    return jax.lax.scan(frame, state, length=num_frames)
