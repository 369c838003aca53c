# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""Instruction fetch, field decoding and disassembly."""

from collections import namedtuple

from .constants import TOTAL_RAM

# family: top nibble
# x/y: register (0-15)
# n: low nibble
# nn: low byte
# nnn: address
Instruction = namedtuple("Instruction", "word family x y n nn nnn")

ALU_MNEMONICS = {
    0x0: "LD", 0x1: "OR", 0x2: "AND", 0x3: "XOR", 0x4: "ADD",
    0x5: "SUB", 0x6: "SHR", 0x7: "SUBN", 0xE: "SHL",
}


def fetch(memory, pc):
    """Read the big-endian instruction word at pc, wrapping at the end of RAM"""
    return memory[pc % TOTAL_RAM] << 8 | memory[(pc + 1) % TOTAL_RAM]


def decode(word):
    return Instruction(
        word=word,
        family=word >> 12 & 0x0F,
        x=word >> 8 & 0x0F,
        y=word >> 4 & 0x0F,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )


def disassemble(word):
    """Return the mnemonic for an instruction word, or None if it is undefined"""
    op = decode(word)
    x, y, nn, nnn = op.x, op.y, op.nn, op.nnn
    if op.family == 0x0:
        if word == 0x00E0:
            return "CLS"
        if word == 0x00EE:
            return "RET"
        return None
    if op.family == 0x1:
        return f"JP {nnn:03x}"
    if op.family == 0x2:
        return f"CALL {nnn:03x}"
    if op.family == 0x3:
        return f"SE V{x:1X}, {nn:02x}"
    if op.family == 0x4:
        return f"SNE V{x:1X}, {nn:02x}"
    if op.family == 0x5:
        return f"SE V{x:1X}, V{y:1X}" if op.n == 0 else None
    if op.family == 0x6:
        return f"LD V{x:1X}, {nn:02x}"
    if op.family == 0x7:
        return f"ADD V{x:1X}, {nn:02x}"
    if op.family == 0x8:
        if op.n not in ALU_MNEMONICS:
            return None
        if op.n in (0x6, 0xE):
            return f"{ALU_MNEMONICS[op.n]} V{x:1X}"
        return f"{ALU_MNEMONICS[op.n]} V{x:1X}, V{y:1X}"
    if op.family == 0x9:
        return f"SNE V{x:1X}, V{y:1X}" if op.n == 0 else None
    if op.family == 0xA:
        return f"LD I, {nnn:03x}"
    if op.family == 0xB:
        return f"JP V0, {nnn:03x}"
    if op.family == 0xC:
        return f"RND V{x:1X}, {nn:02x}"
    if op.family == 0xD:
        return f"DRW V{x:1X}, V{y:1X}, {op.n:1x}"
    if op.family == 0xE:
        if nn == 0x9E:
            return f"SKP V{x:1X}"
        if nn == 0xA1:
            return f"SKNP V{x:1X}"
        return None
    # 0xF, the I/O family
    return {
        0x07: f"LD V{x:1X}, DT",
        0x0A: f"LD V{x:1X}, K",
        0x15: f"LD DT, V{x:1X}",
        0x18: f"LD ST, V{x:1X}",
        0x1E: f"ADD I, V{x:1X}",
        0x29: f"LD F, V{x:1X}",
        0x33: f"LD B, V{x:1X}",
        0x55: f"LD [I], V{x:1X}",
        0x65: f"LD V{x:1X}, [I]",
    }.get(nn)


def listing(program, origin):
    """Yield (address, word, mnemonic) for each word of a program image"""
    for offset in range(0, len(program), 2):
        word = program[offset] << 8
        if offset + 1 < len(program):
            word |= program[offset + 1]
        yield origin + offset, word, disassemble(word)
