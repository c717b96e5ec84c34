"""CHIP-8 display operations."""

import jax.lax
import jax.numpy as jnp
from chip8vm.constants import (
    MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, FLAG_REGISTER, OUT_OF_BOUNDS,
)
from chip8vm.state import EmulatorState, with_error
from chip8vm.decode import DecodedInstruction

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, address, x, y, height) -> jnp.ndarray:
    """Boolean screen-sized mask of the sprite pixels set at (x, y).

    Offsets are taken modulo the screen size, so sprites crossing an edge
    wrap around to the opposite side.
    """
    col_offset = (xx - x) % SCREEN_WIDTH
    row_offset = (yy - y) % SCREEN_HEIGHT
    in_sprite = (col_offset < SPRITE_WIDTH) & (row_offset < height)

    sprite_bytes = memory.at[jnp.astype(address, jnp.int32) + row_offset].get(mode="clip")
    bit_index = jnp.clip(SPRITE_WIDTH - 1 - col_offset, 0, SPRITE_WIDTH - 1)
    return (((sprite_bytes >> bit_index) & 1) == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    height = jnp.astype(instruction.n, jnp.int32)
    out_of_bounds = jnp.astype(state.I, jnp.int32) + height > MEMORY_SIZE

    def draw(state):
        sprite = sprite_mask(
            state.memory,
            state.I,
            jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH,
            jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT,
            height,
        )
        collision = jnp.any(state.display & sprite)
        return state.replace(
            display=state.display ^ sprite,
            V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
            redraw=jnp.asarray(True),
        )

    return jax.lax.cond(
        out_of_bounds,
        lambda s: with_error(s, OUT_OF_BOUNDS),
        draw,
        state
    )
