"""CHIP-8 instruction decoding.

Every opcode is classified against an ordered table of ``(mask, pattern)``
rows; the index of the first matching row is the instruction ``kind`` that
the emulator dispatches on. Words that match no row decode to ``UNKNOWN``.
"""

from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
from chex import dataclass


class InstructionPattern(NamedTuple):
    mnemonic: str
    mask: int
    pattern: int


INSTRUCTION_SET = (
    InstructionPattern("CLS", 0xFFFF, 0x00E0),
    InstructionPattern("RET", 0xFFFF, 0x00EE),
    InstructionPattern("JP", 0xF000, 0x1000),
    InstructionPattern("CALL", 0xF000, 0x2000),
    InstructionPattern("SE_IMM", 0xF000, 0x3000),
    InstructionPattern("SNE_IMM", 0xF000, 0x4000),
    InstructionPattern("SE_REG", 0xF00F, 0x5000),
    InstructionPattern("LD_IMM", 0xF000, 0x6000),
    InstructionPattern("ADD_IMM", 0xF000, 0x7000),
    InstructionPattern("LD_REG", 0xF00F, 0x8000),
    InstructionPattern("OR", 0xF00F, 0x8001),
    InstructionPattern("AND", 0xF00F, 0x8002),
    InstructionPattern("XOR", 0xF00F, 0x8003),
    InstructionPattern("ADD_REG", 0xF00F, 0x8004),
    InstructionPattern("SUB", 0xF00F, 0x8005),
    InstructionPattern("SHR", 0xF00F, 0x8006),
    InstructionPattern("SUBN", 0xF00F, 0x8007),
    InstructionPattern("SHL", 0xF00F, 0x800E),
    InstructionPattern("SNE_REG", 0xF00F, 0x9000),
    InstructionPattern("LD_I", 0xF000, 0xA000),
    InstructionPattern("JP_V0", 0xF000, 0xB000),
    InstructionPattern("RND", 0xF000, 0xC000),
    InstructionPattern("DRW", 0xF000, 0xD000),
    InstructionPattern("SKP", 0xF0FF, 0xE09E),
    InstructionPattern("SKNP", 0xF0FF, 0xE0A1),
    InstructionPattern("LD_VX_DT", 0xF0FF, 0xF007),
    InstructionPattern("LD_VX_K", 0xF0FF, 0xF00A),
    InstructionPattern("LD_DT_VX", 0xF0FF, 0xF015),
    InstructionPattern("LD_ST_VX", 0xF0FF, 0xF018),
    InstructionPattern("ADD_I", 0xF0FF, 0xF01E),
    InstructionPattern("LD_F", 0xF0FF, 0xF029),
    InstructionPattern("LD_B", 0xF0FF, 0xF033),
    InstructionPattern("LD_MEM_VX", 0xF0FF, 0xF055),
    InstructionPattern("LD_VX_MEM", 0xF0FF, 0xF065),
)

UNKNOWN = len(INSTRUCTION_SET)

_MASKS = np.array([entry.mask for entry in INSTRUCTION_SET], dtype=np.uint16)
_PATTERNS = np.array([entry.pattern for entry in INSTRUCTION_SET], dtype=np.uint16)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    kind: int    # Row of INSTRUCTION_SET, or UNKNOWN
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def classify(instruction) -> jnp.ndarray:
    """Return the INSTRUCTION_SET row matching ``instruction``, or UNKNOWN."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    matches = (instruction & _MASKS) == _PATTERNS
    return jnp.where(jnp.any(matches), jnp.argmax(matches), UNKNOWN)


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    return DecodedInstruction(
        raw=instruction,
        kind=classify(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def mnemonic(instruction: int) -> str:
    """Human-readable name of a concrete instruction word."""
    kind = int(classify(instruction))
    return "UNKNOWN" if kind == UNKNOWN else INSTRUCTION_SET[kind].mnemonic
