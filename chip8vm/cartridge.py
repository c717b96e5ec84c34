"""Reading CHIP-8 ROM images from disk."""

from pathlib import Path
from typing import Union

from chip8vm.constants import MAX_ROM_SIZE
from chip8vm.emulator import load_rom
from chip8vm.errors import RomTooLarge
from chip8vm.state import EmulatorState


def read_cartridge(path: Union[str, Path]) -> bytes:
    """Read a raw ROM image (big-endian opcodes, no header)."""
    with open(path, 'rb') as f:
        rom_data = f.read(MAX_ROM_SIZE + 1)
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLarge(Path(path).stat().st_size)
    return rom_data


def load_rom_file(state: EmulatorState, path: Union[str, Path]) -> EmulatorState:
    """Load the ROM at ``path`` into memory starting at 0x200."""
    return load_rom(state, read_cartridge(path))
