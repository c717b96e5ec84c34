"""Host-facing CHIP-8 machine.

``Machine`` owns a single ``EmulatorState`` and drives the jitted pure
transitions from ``chip8vm.emulator``. Error codes left on the state by a
failed step are turned into ``MachineError`` exceptions, and the failed
state is discarded so the machine stays exactly where it was.
"""

import enum
from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from chip8vm.constants import (
    NUM_KEYS, NO_ERROR, OUT_OF_BOUNDS, UNKNOWN_OPCODE, STACK_OVERFLOW, STACK_UNDERFLOW,
)
from chip8vm.emulator import step, tick_timers, load_rom
from chip8vm.errors import MachineError, OutOfBounds, UnknownOpcode, StackOverflow, StackUnderflow
from chip8vm.state import EmulatorState, create_state

_jit_step = jax.jit(step)
_jit_tick_timers = jax.jit(tick_timers)


class StepResult(enum.Enum):
    """Outcome of a successful ``Machine.step``."""
    EXECUTED = "executed"
    AWAITING_KEY = "awaiting_key"


class Machine:
    """CHIP-8 virtual machine with a synchronous, call-driven interface.

    Args:
        seed: Seed of the PRNG key used by CXNN
        rng: Explicit PRNG key, takes precedence over ``seed``
    """

    def __init__(self, seed: int = 0, rng: Optional[jax.random.PRNGKey] = None):
        if rng is None:
            rng = jax.random.PRNGKey(seed)
        self.state = create_state(rng)

    def load(self, rom: bytes) -> None:
        """Copy ``rom`` to 0x200. Raises RomTooLarge and leaves memory alone if it does not fit."""
        self.state = load_rom(self.state, rom)

    def step(self) -> StepResult:
        """Run one fetch-decode-execute cycle (or one key poll while waiting)."""
        new_state = _jit_step(self.state)
        code = int(new_state.error)
        if code != NO_ERROR:
            raise self._error_for(code)
        self.state = new_state
        if bool(new_state.awaiting_key):
            return StepResult.AWAITING_KEY
        return StepResult.EXECUTED

    def tick_timers(self) -> None:
        """Decrement the delay and sound timers; call at 60 Hz."""
        self.state = _jit_tick_timers(self.state)

    def get_framebuffer(self) -> np.ndarray:
        """Read-only (64, 32) uint8 grid of pixels, indexed [x, y]."""
        framebuffer = np.array(self.state.display, dtype=np.uint8)
        framebuffer.flags.writeable = False
        return framebuffer

    def consume_redraw_flag(self) -> bool:
        """Return whether the display changed since the last call, and clear the flag."""
        redraw = bool(self.state.redraw)
        if redraw:
            self.state = self.state.replace(redraw=jnp.asarray(False))
        return redraw

    def set_key_state(self, code: int, pressed: bool) -> None:
        """Mark key ``code`` (0x0-0xF) as pressed or released."""
        if not 0 <= code < NUM_KEYS:
            raise ValueError(f"Key code must be in 0..{NUM_KEYS - 1}, got {code}")
        self.state = self.state.replace(keypad=self.state.keypad.at[code].set(bool(pressed)))

    def snapshot(self) -> EmulatorState:
        """Current immutable state."""
        return self.state

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def I(self) -> int:
        return int(self.state.I)

    @property
    def V(self) -> list[int]:
        return [int(v) for v in np.asarray(self.state.V)]

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def sound_active(self) -> bool:
        return self.sound_timer > 0

    @property
    def awaiting_key(self) -> bool:
        return bool(self.state.awaiting_key)

    def _current_opcode(self) -> int:
        memory = np.asarray(self.state.memory)
        pc = self.pc
        return (int(memory[pc]) << 8) | int(memory[pc + 1])

    def _error_for(self, code: int) -> MachineError:
        pc = self.pc
        if code == OUT_OF_BOUNDS:
            return OutOfBounds(pc)
        if code == UNKNOWN_OPCODE:
            return UnknownOpcode(self._current_opcode(), pc)
        if code == STACK_OVERFLOW:
            return StackOverflow(pc)
        if code == STACK_UNDERFLOW:
            return StackUnderflow(pc)
        return MachineError(f"machine halted with error code {code} at pc=0x{pc:03X}")
