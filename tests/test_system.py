"""Tests for system instructions (0xxx)."""

import jax.numpy as jnp
from chip8vm import execute


def test_execute_clear_screen(fresh_state):
    """Test 00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(True))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
    assert state.redraw


def test_execute_call_and_return(fresh_state):
    """Test 2NNN (call) and 00EE (return) together."""
    state = fresh_state
    initial_pc = state.pc

    # Call subroutine
    state = execute(state, 0x2300)  # Call 0x300
    assert state.pc == 0x300
    assert state.stack.pointer == 1
    assert state.stack.data[state.stack.pointer - 1] == initial_pc

    # Return from subroutine
    state = execute(state, 0x00EE)  # Return
    assert state.pc == initial_pc
    assert state.stack.pointer == 0


def test_nested_calls_unwind_in_order(fresh_state):
    """Returns pop addresses in reverse call order."""
    state = fresh_state.replace(pc=jnp.asarray(0x202, dtype=jnp.uint16))
    state = execute(state, 0x2300)
    state = state.replace(pc=jnp.asarray(0x304, dtype=jnp.uint16))
    state = execute(state, 0x2400)
    assert state.stack.pointer == 2

    state = execute(state, 0x00EE)
    assert state.pc == 0x304
    state = execute(state, 0x00EE)
    assert state.pc == 0x202


def test_return_on_empty_stack_sets_error(fresh_state):
    """00EE with nothing on the stack flags an underflow and keeps the pointer at 0."""
    state = execute(fresh_state, 0x00EE)

    assert state.error == 4
    assert state.stack.pointer == 0


def test_unknown_opcode_sets_error(fresh_state):
    """Words outside the instruction set flag UNKNOWN_OPCODE."""
    for word in (0x0000, 0x0123, 0x5121, 0x8128, 0x9781, 0xE0FF, 0xF0FF):
        state = execute(fresh_state, word)
        assert state.error == 2, f"0x{word:04X} should be unknown"
