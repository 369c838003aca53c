# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""The Chip-8 machine: state, loader, instruction set and timers.

Nothing in here touches the host. The caller supplies the key state, calls
step() at the CPU clock rate and tick_timers() at TIMER_HZ, and reads the
video memory back when draw_flag is set.
"""

import logging
import random

from .constants import (TOTAL_RAM, LOAD_POS, MAX_PROGRAM, NUM_REGS, FLAG_REG,
                        STACK_DEPTH, NUM_KEYS, VIDEO_X, VIDEO_Y, SPRITE_W,
                        FONT_LOAD, FONT_MAP, FONT_HEIGHT)
from .decode import fetch, decode, disassemble
from .errors import (LoadError, RuntimeFault, DecodeError, StackOverflowError,
                     StackUnderflowError)

logger = logging.getLogger(__name__)


class Chip8:
    """A single Chip-8 machine with a program loaded at LOAD_POS"""

    def __init__(self, program=b"", rng=None):
        self.rng = rng if rng is not None else random.Random()
        self.program = bytes(program)
        self.load(self.program)

    @classmethod
    def from_file(cls, path, rng=None):
        try:
            with open(path, 'rb') as p:
                program = p.read()
        except OSError as e:
            raise LoadError(f"Unable to load program {path}: {e}") from e
        logger.info(f"Program length {len(program)} bytes.")
        return cls(program, rng=rng)

    def load(self, program):
        """Zero the machine, install the font and copy program to LOAD_POS"""
        if len(program) > MAX_PROGRAM:
            raise LoadError(
                f"Program is too large: {len(program)} bytes, "
                f"at most {MAX_PROGRAM} fit above 0x{LOAD_POS:03x}")

        self.main_mem = bytearray(TOTAL_RAM)
        self.main_mem[FONT_LOAD:FONT_LOAD + len(FONT_MAP)] = FONT_MAP
        self.main_mem[LOAD_POS:LOAD_POS + len(program)] = program
        logger.debug(f"Fonts loaded to {FONT_LOAD:04x}")

        self.reg_V = bytearray(NUM_REGS)
        self.reg_I = 0
        self.reg_PC = LOAD_POS
        self.stack = [0] * STACK_DEPTH
        self.reg_SP = 0

        self.d_timer = 0
        self.s_timer = 0

        self.v_mem = bytearray(VIDEO_X * VIDEO_Y)
        self.draw_flag = False

        self.keys = [False] * NUM_KEYS
        self.key_wait = None
        self.opcode_address = LOAD_POS
        self.opcode = 0
        self.last_error = None

    def reset(self):
        self.load(self.program)

    ## Host interface ##

    def set_keys(self, keys):
        keys = [bool(k) for k in keys]
        if len(keys) != NUM_KEYS:
            raise ValueError(f"Expected {NUM_KEYS} key states, got {len(keys)}")
        self.keys = keys

    def press_key(self, key):
        self.keys[key & 0xF] = True

    def release_key(self, key):
        self.keys[key & 0xF] = False

    def pixel(self, x, y):
        return self.v_mem[(y % VIDEO_Y) * VIDEO_X + (x % VIDEO_X)]

    @property
    def sound_active(self):
        return self.s_timer > 0

    def step(self, keys=None):
        """Execute one instruction.

        Returns the RuntimeFault the instruction raised, or None. A fault is
        logged and the instruction is skipped so the program can carry on.
        """
        if keys is not None:
            self.set_keys(keys)

        if self.key_wait is not None:
            if self._take_key(self.key_wait):
                logger.debug(f"Key wait complete, V{self.key_wait:1X} = {self.reg_V[self.key_wait]:1x}")
                self.key_wait = None
                self.reg_PC = (self.reg_PC + 2) & 0xFFFF
            return None

        address = self.reg_PC
        instruction = fetch(self.main_mem, address)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{address:04x} | OP 0x{instruction:04X} - {disassemble(instruction) or 'Unimplemented'}")

        self.opcode_address = address
        self.opcode = instruction
        self.reg_PC = (address + 2) & 0xFFFF
        try:
            self.execute(decode(instruction))
        except RuntimeFault as fault:
            logger.error(str(fault))
            self.reg_PC = (address + 2) & 0xFFFF
            self.last_error = fault
            return fault
        return None

    def run(self, cycles):
        """Execute up to cycles instructions, stopping at the first fault"""
        for _ in range(cycles):
            fault = self.step()
            if fault is not None:
                return fault
        return None

    def tick_timers(self):
        """Count both timers down by one. Returns True when the tone should stop"""
        if self.d_timer > 0:
            self.d_timer -= 1
        if self.s_timer > 0:
            self.s_timer -= 1
            return self.s_timer == 0
        return False

    ## Dispatch ##

    def execute(self, op):
        """Run a decoded instruction. reg_PC already points past it."""
        family = op.family
        if family == 0x0:
            self._sys(op)
        elif family == 0x1:
            self.ins_jmp(op.nnn)
        elif family == 0x2:
            self.ins_call(op.nnn)
        elif family == 0x3:
            self.ins_skipim(op.x, op.nn)
        elif family == 0x4:
            self.ins_skipim(op.x, op.nn, eq=False)
        elif family == 0x5:
            if op.n != 0:
                self.unimplemented(op)
            self.ins_skipreg(op.x, op.y)
        elif family == 0x6:
            self.ins_load(op.x, op.nn)
        elif family == 0x7:
            self.ins_add(op.x, op.nn)
        elif family == 0x8:
            self._alu(op)
        elif family == 0x9:
            if op.n != 0:
                self.unimplemented(op)
            self.ins_skipreg(op.x, op.y, eq=False)
        elif family == 0xA:
            self.ins_loadi(op.nnn)
        elif family == 0xB:
            self.ins_jmp(op.nnn + self.reg_V[0])
        elif family == 0xC:
            self.ins_rnd(op.x, op.nn)
        elif family == 0xD:
            self.ins_draw(op.x, op.y, op.n)
        elif family == 0xE:
            self._skipkey(op)
        else:
            self._io(op)

    def unimplemented(self, op):
        raise DecodeError(self.opcode_address, op.word)

    def _sys(self, op):
        if op.word == 0x00E0:
            self.ins_cls()
        elif op.word == 0x00EE:
            self.ins_ret()
        else:
            # 0NNN machine calls are not supported
            self.unimplemented(op)

    def _alu(self, op):
        handler = self.ALU_OPS.get(op.n)
        if handler is None:
            self.unimplemented(op)
        handler(self, op.x, op.y)

    def _skipkey(self, op):
        if op.nn == 0x9E:
            self.ins_skipkey(op.x)
        elif op.nn == 0xA1:
            self.ins_skipkey(op.x, pressed=False)
        else:
            self.unimplemented(op)

    def _io(self, op):
        handler = self.IO_OPS.get(op.nn)
        if handler is None:
            self.unimplemented(op)
        handler(self, op.x)

    ## Instructions ##

    def _skip(self):
        self.reg_PC = (self.reg_PC + 2) & 0xFFFF

    def ins_cls(self):
        """00E0 CLS - Clear the screen"""
        self.v_mem[:] = bytes(len(self.v_mem))
        self.draw_flag = True

    def ins_ret(self):
        """00EE RET - Return from subroutine"""
        if self.reg_SP == 0:
            raise StackUnderflowError(self.opcode_address, self.opcode)
        self.reg_SP -= 1
        self.reg_PC = self.stack[self.reg_SP]

    def ins_jmp(self, n):
        """1nnn JP nnn, and Bnnn JP V0, nnn with the offset already added"""
        self.reg_PC = n & 0xFFFF

    def ins_call(self, n):
        """2nnn CALL - Call subroutine at nnn"""
        if self.reg_SP >= STACK_DEPTH:
            raise StackOverflowError(self.opcode_address, self.opcode)
        self.stack[self.reg_SP] = self.reg_PC
        self.reg_SP += 1
        self.reg_PC = n

    def ins_skipim(self, x, kk, eq=True):
        if (self.reg_V[x] == kk) == eq:
            self._skip()

    def ins_skipreg(self, x, y, eq=True):
        if (self.reg_V[x] == self.reg_V[y]) == eq:
            self._skip()

    def ins_load(self, x, nn):
        self.reg_V[x] = nn

    def ins_add(self, x, kk):
        # No carry out of 7xkk
        self.reg_V[x] = (self.reg_V[x] + kk) & 0xFF

    # 8xy_ ALU ops. Flag-setting ops write VF last, so it wins when x is F.

    def alu_ld(self, x, y):
        self.reg_V[x] = self.reg_V[y]

    def alu_or(self, x, y):
        self.reg_V[x] |= self.reg_V[y]

    def alu_and(self, x, y):
        self.reg_V[x] &= self.reg_V[y]

    def alu_xor(self, x, y):
        self.reg_V[x] ^= self.reg_V[y]

    def alu_add(self, x, y):
        result = self.reg_V[x] + self.reg_V[y]
        self.reg_V[x] = result & 0xFF
        self.reg_V[FLAG_REG] = 1 if result > 0xFF else 0

    def alu_sub(self, x, y):
        vx, vy = self.reg_V[x], self.reg_V[y]
        self.reg_V[x] = (vx - vy) & 0xFF
        self.reg_V[FLAG_REG] = 1 if vx >= vy else 0

    def alu_shr(self, x, y):
        vx = self.reg_V[x]
        self.reg_V[x] = vx >> 1
        self.reg_V[FLAG_REG] = vx & 0x1

    def alu_subn(self, x, y):
        vx, vy = self.reg_V[x], self.reg_V[y]
        self.reg_V[x] = (vy - vx) & 0xFF
        self.reg_V[FLAG_REG] = 1 if vy >= vx else 0

    def alu_shl(self, x, y):
        vx = self.reg_V[x]
        self.reg_V[x] = (vx << 1) & 0xFF
        self.reg_V[FLAG_REG] = vx >> 7 & 0x1

    ALU_OPS = {
        0x0: alu_ld,
        0x1: alu_or,
        0x2: alu_and,
        0x3: alu_xor,
        0x4: alu_add,
        0x5: alu_sub,
        0x6: alu_shr,
        0x7: alu_subn,
        0xE: alu_shl,
    }

    def ins_loadi(self, n):
        self.reg_I = n

    def ins_rnd(self, x, kk):
        self.reg_V[x] = self.rng.randint(0, 255) & kk

    def ins_draw(self, x, y, n):
        """Draw n-row sprite at location (Vx, Vy) into v_mem using reg_I as pointer"""
        # Each byte in memory at [I] represents one row of the sprite.
        # Pixels are xor'd onto the screen and wrap on both edges.
        x_pos = self.reg_V[x] % VIDEO_X
        y_pos = self.reg_V[y] % VIDEO_Y
        collision = 0
        for row in range(n):
            sprite = self.main_mem[(self.reg_I + row) % TOTAL_RAM]
            y_off = (y_pos + row) % VIDEO_Y
            for col in range(SPRITE_W):
                if not sprite >> (SPRITE_W - 1 - col) & 0x1:
                    continue
                cell = y_off * VIDEO_X + (x_pos + col) % VIDEO_X
                if self.v_mem[cell]:
                    collision = 1
                self.v_mem[cell] ^= 1
        self.reg_V[FLAG_REG] = collision
        self.draw_flag = True

    def ins_skipkey(self, x, pressed=True):
        if self.keys[self.reg_V[x] & 0xF] == pressed:
            self._skip()

    # Fx__ I/O ops

    def io_get_delay(self, x):
        self.reg_V[x] = self.d_timer

    def io_wait_key(self, x):
        # Hold PC on this instruction until step() sees a key down
        if not self._take_key(x):
            self.key_wait = x
            self.reg_PC = self.opcode_address

    def io_set_delay(self, x):
        self.d_timer = self.reg_V[x]

    def io_set_sound(self, x):
        self.s_timer = self.reg_V[x]

    def io_add_index(self, x):
        # VF is left alone on overflow
        self.reg_I = (self.reg_I + self.reg_V[x]) & 0xFFFF

    def io_font(self, x):
        self.reg_I = FONT_LOAD + FONT_HEIGHT * (self.reg_V[x] & 0xF)

    def io_bcd(self, x):
        value = self.reg_V[x]
        for offset, digit in enumerate((value // 100, value // 10 % 10, value % 10)):
            self.main_mem[(self.reg_I + offset) % TOTAL_RAM] = digit

    def io_store(self, x):
        for n in range(x + 1):
            self.main_mem[(self.reg_I + n) % TOTAL_RAM] = self.reg_V[n]

    def io_load(self, x):
        for n in range(x + 1):
            self.reg_V[n] = self.main_mem[(self.reg_I + n) % TOTAL_RAM]

    IO_OPS = {
        0x07: io_get_delay,
        0x0A: io_wait_key,
        0x15: io_set_delay,
        0x18: io_set_sound,
        0x1E: io_add_index,
        0x29: io_font,
        0x33: io_bcd,
        0x55: io_store,
        0x65: io_load,
    }

    def _take_key(self, x):
        """Store the lowest pressed key in Vx. False if nothing is down"""
        for key, down in enumerate(self.keys):
            if down:
                self.reg_V[x] = key
                return True
        return False
