"""Instruction fetch, decode and disassembly."""

from __future__ import annotations

import pytest

from chip8vm.decode import decode, disassemble, fetch, listing


def test_fetch_is_big_endian() -> None:
    memory = bytearray(4096)
    memory[0x200] = 0xA2
    memory[0x201] = 0xF0

    assert fetch(memory, 0x200) == 0xA2F0


def test_fetch_wraps_at_end_of_memory() -> None:
    memory = bytearray(4096)
    memory[0xFFF] = 0x12
    memory[0x000] = 0x34

    assert fetch(memory, 0xFFF) == 0x1234


def test_decode_fields() -> None:
    op = decode(0xD12F)

    assert op.word == 0xD12F
    assert op.family == 0xD
    assert op.x == 0x1
    assert op.y == 0x2
    assert op.n == 0xF
    assert op.nn == 0x2F
    assert op.nnn == 0x12F


@pytest.mark.parametrize(
    "word, text",
    [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1ABC, "JP abc"),
        (0x2300, "CALL 300"),
        (0x3A05, "SE VA, 05"),
        (0x5120, "SE V1, V2"),
        (0x6A05, "LD VA, 05"),
        (0x8124, "ADD V1, V2"),
        (0x8126, "SHR V1"),
        (0x812E, "SHL V1"),
        (0x9120, "SNE V1, V2"),
        (0xB200, "JP V0, 200"),
        (0xD125, "DRW V1, V2, 5"),
        (0xE19E, "SKP V1"),
        (0xE1A1, "SKNP V1"),
        (0xF10A, "LD V1, K"),
        (0xF233, "LD B, V2"),
        (0xF355, "LD [I], V3"),
    ],
)
def test_disassemble(word: int, text: str) -> None:
    assert disassemble(word) == text


@pytest.mark.parametrize("word", [0x0123, 0x5121, 0x8128, 0x912F, 0xE100, 0xF1FF, 0xFFFF])
def test_disassemble_undefined(word: int) -> None:
    assert disassemble(word) is None


def test_listing_pads_trailing_byte() -> None:
    rows = list(listing(b"\x60\x01\x12", 0x200))

    assert rows == [(0x200, 0x6001, "LD V0, 01"), (0x202, 0x1200, "JP 200")]
