"""Exceptions raised by the CHIP-8 machine facade."""

from chip8vm.constants import MAX_ROM_SIZE


class MachineError(Exception):
    """Base class for every failure surfaced to the host."""


class RomTooLarge(MachineError):
    def __init__(self, size: int):
        super().__init__(f"ROM is {size} bytes, at most {MAX_ROM_SIZE} fit in memory")
        self.size = size


class OutOfBounds(MachineError):
    def __init__(self, pc: int):
        super().__init__(f"memory access out of bounds at pc=0x{pc:03X}")
        self.pc = pc


class UnknownOpcode(MachineError):
    def __init__(self, opcode: int, pc: int):
        super().__init__(f"unknown opcode 0x{opcode:04X} at pc=0x{pc:03X}")
        self.opcode = opcode
        self.pc = pc


class StackOverflow(MachineError):
    def __init__(self, pc: int):
        super().__init__(f"call stack overflow at pc=0x{pc:03X}")
        self.pc = pc


class StackUnderflow(MachineError):
    def __init__(self, pc: int):
        super().__init__(f"return with empty call stack at pc=0x{pc:03X}")
        self.pc = pc
