"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import execute, fetch, step, tick_timers, load_rom, run_frame, run_frames
from chip8vm.decode import DecodedInstruction, INSTRUCTION_SET, decode, mnemonic
from chip8vm.machine import Machine, StepResult
from chip8vm.cartridge import read_cartridge, load_rom_file
from chip8vm.errors import (
    MachineError, RomTooLarge, OutOfBounds, UnknownOpcode, StackOverflow, StackUnderflow,
)
from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT,
)

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "load_rom",
    "run_frame",
    "run_frames",
    "DecodedInstruction",
    "INSTRUCTION_SET",
    "decode",
    "mnemonic",
    "Machine",
    "StepResult",
    "read_cartridge",
    "load_rom_file",
    "MachineError",
    "RomTooLarge",
    "OutOfBounds",
    "UnknownOpcode",
    "StackOverflow",
    "StackUnderflow",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_ROM_SIZE",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
