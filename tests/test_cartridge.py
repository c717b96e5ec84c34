"""Tests for reading ROM images from disk."""

import pytest
from chip8vm import read_cartridge, load_rom_file, create_state, RomTooLarge, MAX_ROM_SIZE


def test_read_cartridge(tmp_path):
    rom_path = tmp_path / "game.ch8"
    rom_path.write_bytes(b"\x00\xE0\x12\x00")

    assert read_cartridge(rom_path) == b"\x00\xE0\x12\x00"


def test_read_cartridge_too_large(tmp_path):
    rom_path = tmp_path / "huge.ch8"
    rom_path.write_bytes(b"\x00" * (MAX_ROM_SIZE + 10))

    with pytest.raises(RomTooLarge) as excinfo:
        read_cartridge(rom_path)
    assert excinfo.value.size == MAX_ROM_SIZE + 10


def test_read_missing_cartridge(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_cartridge(tmp_path / "missing.ch8")


def test_load_rom_file(tmp_path):
    rom_path = tmp_path / "game.ch8"
    rom_path.write_bytes(b"\x60\x2A")

    state = load_rom_file(create_state(), str(rom_path))

    assert state.memory[0x200] == 0x60
    assert state.memory[0x201] == 0x2A
