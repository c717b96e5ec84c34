"""CHIP-8 stack operations.

Both operations report a failure flag instead of wrapping the pointer; the
stack is returned unchanged when the flag is set.
"""

import jax.numpy as jnp
from chip8vm.constants import STACK_SIZE
from chip8vm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack, returning the new stack and an overflow flag."""
    overflow = stack.pointer >= STACK_SIZE
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16), mode="drop")
    return stack.replace(
        data=jnp.where(overflow, stack.data, new_data),
        pointer=jnp.where(overflow, stack.pointer, stack.pointer + 1),
    ), overflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack, returning the new stack, the address and an underflow flag."""
    underflow = stack.pointer == 0
    new_pointer = jnp.where(underflow, stack.pointer, stack.pointer - 1)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(jnp.where(underflow, popped_address, 0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, underflow
