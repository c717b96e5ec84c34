"""Tests for instruction decoding."""

import pytest
from chip8vm import decode, mnemonic, INSTRUCTION_SET
from chip8vm.decode import UNKNOWN


def test_operand_fields():
    decoded = decode(0xD12A)
    assert decoded.opcode == 0xD
    assert decoded.x == 0x1
    assert decoded.y == 0x2
    assert decoded.n == 0xA
    assert decoded.nn == 0x2A
    assert decoded.nnn == 0x12A


def test_table_has_every_documented_instruction():
    assert len(INSTRUCTION_SET) == 34
    assert len({entry.mnemonic for entry in INSTRUCTION_SET}) == 34


@pytest.mark.parametrize("word, name", [
    (0x00E0, "CLS"),
    (0x00EE, "RET"),
    (0x1ABC, "JP"),
    (0x2ABC, "CALL"),
    (0x3A12, "SE_IMM"),
    (0x4A12, "SNE_IMM"),
    (0x5AB0, "SE_REG"),
    (0x6A12, "LD_IMM"),
    (0x7A12, "ADD_IMM"),
    (0x8AB0, "LD_REG"),
    (0x8AB4, "ADD_REG"),
    (0x8ABE, "SHL"),
    (0x9AB0, "SNE_REG"),
    (0xAABC, "LD_I"),
    (0xBABC, "JP_V0"),
    (0xCA12, "RND"),
    (0xDAB5, "DRW"),
    (0xEA9E, "SKP"),
    (0xEAA1, "SKNP"),
    (0xFA0A, "LD_VX_K"),
    (0xFA33, "LD_B"),
    (0xFA65, "LD_VX_MEM"),
])
def test_classify_known(word, name):
    assert mnemonic(word) == name


@pytest.mark.parametrize("word", [0x0000, 0x00E1, 0x0FFF, 0x5AB1, 0x8AB8, 0x8ABF, 0x9AB1, 0xEA9F, 0xFA00, 0xFAFF])
def test_classify_unknown(word):
    assert mnemonic(word) == "UNKNOWN"
    assert decode(word).kind == UNKNOWN
