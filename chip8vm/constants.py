# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

## CONSTANTS ##

# Clock speeds used by Chip-8.
# The timers always run at TIMER_HZ, the CPU clock is only a default.
TIMER_HZ = 60
CYCLE_HZ = 500

TOTAL_RAM = 4096
LOAD_POS = 0x200
MAX_PROGRAM = TOTAL_RAM - LOAD_POS

NUM_REGS = 16
FLAG_REG = 0xF
STACK_DEPTH = 16
NUM_KEYS = 16

# Chip-8 Video display constants
VIDEO_X = 64
VIDEO_Y = 32
VIDEO_RES = 8
SPRITE_W = 8

# Pixel colors for display
PIXEL_ON = (255, 255, 255)
PIXEL_OFF = (64, 64, 64)

# RAM Display constants
RAM_X = 32  # bytes to display per row
RAM_Y = TOTAL_RAM // RAM_X  # total rows to display
RAM_RES = 4

# Resolution of fonts used for register display
REG_FONT_RES = 18
REG_FONT_PAD = 10

# Chip-8 ROM Font map, five bytes per glyph
FONT_LOAD = 0x000
FONT_HEIGHT = 5
FONT_MAP = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
