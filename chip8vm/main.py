# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

import sys
import logging
import argparse
import time

import pygame

from .constants import CYCLE_HZ, TIMER_HZ, VIDEO_RES, LOAD_POS
from .decode import listing
from .display import Display
from .errors import LoadError
from .keypad import read_keys
from .machine import Chip8

logger = logging.getLogger(__name__)

# Host frame rate. The machine is paced from elapsed time, not frames.
FRAME_HZ = 60

aparser = argparse.ArgumentParser(prog="chip8vm", description="A Chip-8 virtual machine")
aparser.add_argument('program',
    help="A compiled Chip-8 program to load")
aparser.add_argument('--breakpoint',
    help="A hexadecimal program address at which to pause execution",
    metavar="X",
    nargs="+",
    default=[],
    type=lambda x: int(x, 0))
aparser.add_argument('--debug',
    help="Enable verbose debug logging",
    action="store_true")
aparser.add_argument('--cycle-hz',
    help=f"Instructions executed per second (default {CYCLE_HZ})",
    metavar="N",
    type=int,
    default=CYCLE_HZ)
aparser.add_argument('--scale',
    help=f"Size of one Chip-8 pixel on screen (default {VIDEO_RES})",
    metavar="N",
    type=int,
    default=VIDEO_RES)
aparser.add_argument('--no-ram',
    help="Hide the main memory display",
    action="store_true")
aparser.add_argument('--halt-on-error',
    help="Stop emulation at the first invalid instruction or stack fault",
    action="store_true")
aparser.add_argument('--disassemble',
    help="Print a listing of the program and exit",
    action="store_true")


class Emulator:
    """Drives a Chip-8 at its CPU clock and its 60Hz timer clock.

    The two cadences are kept apart: advance() converts elapsed wall time
    into a number of instruction steps and, separately, a number of timer
    ticks. Breakpoints and single stepping hold back the CPU only.
    """

    def __init__(self, machine, display=None, cycle_hz=CYCLE_HZ, breakpoints=(),
                 halt_on_error=False):
        self.machine = machine
        self.display = display
        self.cycle_hz = cycle_hz
        self.breakpoints = set(breakpoints)
        self.halt_on_error = halt_on_error

        self.running = False
        self.paused = False
        self.single_step = False
        self._break_at = None
        self._cycle_acc = 0.0
        self._timer_acc = 0.0

    def cycle(self):
        """Execute one instruction unless paused. False if nothing ran"""
        pc = self.machine.reg_PC
        if not self.paused and pc in self.breakpoints and pc != self._break_at:
            logger.info(f"Breakpoint at {pc:04x}. SPACE to step, P to resume.")
            self.paused = True
            self._break_at = pc
        if self.paused:
            if not self.single_step:
                return False
            self.single_step = False

        fault = self.machine.step()
        if self.machine.reg_PC != pc:
            self._break_at = None
        if fault is not None and self.halt_on_error:
            logger.error("Halting on error.")
            self.running = False
            return False
        return True

    def advance(self, elapsed):
        """Run the steps and timer ticks owed for elapsed seconds"""
        if self.paused and not self.single_step:
            self._cycle_acc = 0.0
            self._timer_acc = 0.0
            return

        self._cycle_acc += elapsed * self.cycle_hz
        while self._cycle_acc >= 1:
            self._cycle_acc -= 1
            if not self.cycle():
                self._cycle_acc = 0.0
                break

        if self.paused:
            self._timer_acc = 0.0
            return
        self._timer_acc += elapsed * TIMER_HZ
        while self._timer_acc >= 1:
            self._timer_acc -= 1
            if self.machine.tick_timers():
                logger.info("BEEP")

    def handle_event(self, event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key == pygame.K_SPACE and self.paused:
                self.single_step = True
            elif event.key == pygame.K_p:
                self.paused = not self.paused
                logger.info("Paused." if self.paused else "Resumed.")

    def run(self):
        logger.info("Emulation starting")
        clock = pygame.time.Clock()
        self.running = True
        last = time.perf_counter()
        # Main Emulation loop start
        while self.running:
            for event in pygame.event.get():
                self.handle_event(event)
            self.machine.set_keys(read_keys(pygame.key.get_pressed()))

            now = time.perf_counter()
            self.advance(now - last)
            last = now

            if self.display is not None:
                self.display.update(self.machine, self.paused)
            clock.tick(FRAME_HZ)


def print_listing(path, out=None):
    out = out or sys.stdout
    with open(path, 'rb') as p:
        program = p.read()
    for address, word, mnemonic in listing(program, LOAD_POS):
        print(f"{address:04x}  {word:04x}  {mnemonic or '???'}", file=out)


def main(argv):
    logging.basicConfig(level=logging.INFO)
    args = aparser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.disassemble:
        try:
            print_listing(args.program)
        except OSError as e:
            aparser.exit(1, f"chip8vm: {e}\n")
        return 0

    logger.info("chip8vm - A Chip-8 virtual machine")
    logger.info(f"Loading program {args.program} at 0x{LOAD_POS:04x}")
    try:
        machine = Chip8.from_file(args.program)
    except LoadError as e:
        aparser.exit(1, f"chip8vm: {e}\n")

    display = Display(scale=args.scale, show_ram=not args.no_ram)
    emulator = Emulator(machine, display,
                        cycle_hz=args.cycle_hz,
                        breakpoints=args.breakpoint,
                        halt_on_error=args.halt_on_error)
    try:
        emulator.run()
    finally:
        display.close()
    logger.info("Emulation halted.")
    return 0


def entry():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    entry()
