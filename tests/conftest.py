"""Test configuration and fixtures for CHIP-8 machine tests."""

import pytest
import jax.numpy as jnp
from chip8vm import Machine, create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def machine():
    """Provide a fresh machine with nothing loaded."""
    return Machine()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def assemble(*words):
    """Encode 16-bit instruction words as a big-endian ROM image."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def program_machine(*words):
    """Machine with the given instruction words loaded at 0x200."""
    machine = Machine()
    machine.load(assemble(*words))
    return machine
