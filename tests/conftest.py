import os
import struct
import sys
from pathlib import Path

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from chip8vm import Chip8  # noqa: E402


def assemble(*words: int) -> bytes:
    return b"".join(struct.pack(">H", word) for word in words)


def execute(machine: Chip8, word: int):
    """Run a single instruction word from 0x200 on an existing machine."""
    machine.main_mem[0x200:0x202] = struct.pack(">H", word)
    machine.reg_PC = 0x200
    return machine.step()


@pytest.fixture()
def machine() -> Chip8:
    return Chip8()
