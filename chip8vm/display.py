# chip8vm, a Chip-8 virtual machine.
# Lindsay Gaff <lindsaygaff@gmail.com>

# To the extent possible under law, the person who associated CC0 with
# chip8vm has waived all copyright and related or neighboring rights
# to chip8vm.

# You should have received a copy of the CC0 legalcode along with this
# work.  If not, see <http://creativecommons.org/publicdomain/zero/1.0/>.

"""pygame window: Chip-8 screen, RAM viewer and register panel."""

import logging

import pygame

from .constants import (VIDEO_X, VIDEO_Y, VIDEO_RES, PIXEL_ON, PIXEL_OFF,
                        RAM_X, RAM_Y, RAM_RES, REG_FONT_RES, REG_FONT_PAD,
                        TOTAL_RAM)

logger = logging.getLogger(__name__)


def ram_color(byte):
    """Colour of a RAM viewer cell, the byte read as RRRGGGBB"""
    r = (byte >> 5 & 0x07) << 5
    g = (byte >> 2 & 0x07) << 5
    b = (byte & 0x03) << 6
    return (r, g, b)


class Display:

    def __init__(self, scale=VIDEO_RES, show_ram=True):
        self.scale = scale
        self.show_ram = show_ram

        logger.info("Initialise display engine")
        pygame.init()
        pygame.font.init()
        self.reg_font = pygame.font.SysFont('Consolas', REG_FONT_RES)
        self.line_off = self.reg_font.size("V")[1]

        self.video_w = VIDEO_X * scale
        self.video_h = VIDEO_Y * scale
        logger.debug(f"Video memory display {VIDEO_X} by {VIDEO_Y}, {self.video_w} x {self.video_h} pixels")

        self.reg_h = 5 * self.line_off + REG_FONT_PAD
        logger.debug(f"Register display {self.video_w} x {self.reg_h} pixels")

        self.ram_w = RAM_X * RAM_RES if show_ram else 0
        ram_h = RAM_Y * RAM_RES if show_ram else 0
        if show_ram:
            logger.debug(f"Main memory display {RAM_X} by {RAM_Y}, {self.ram_w} x {ram_h} pixels")

        # Total pygame display size
        screen_x = self.video_w + self.ram_w
        screen_y = max(self.video_h + self.reg_h, ram_h)
        pygame.display.set_caption("CHIP8VM DISPLAY")
        logger.info(f"Display mode {screen_x} x {screen_y}")
        self.screen = pygame.display.set_mode([screen_x, screen_y])
        self.screen.fill((0, 0, 0))

        self._ram_shadow = None

    def update(self, machine, paused=False):
        """Redraw whatever changed on the machine and flip the display"""
        if machine.draw_flag:
            self.draw_video(machine.v_mem)
            machine.draw_flag = False
        if self.show_ram:
            self.draw_ram(machine.main_mem)
        self.draw_regs(machine, paused)
        pygame.display.flip()

    def draw_video(self, v_mem):
        for y in range(VIDEO_Y):
            for x in range(VIDEO_X):
                color = PIXEL_ON if v_mem[y * VIDEO_X + x] else PIXEL_OFF
                pygame.draw.rect(self.screen, color,
                                 (x * self.scale, y * self.scale, self.scale, self.scale))

    def draw_ram(self, main_mem):
        """Repaint the RAM cells that changed since the last call"""
        shadow = self._ram_shadow
        for cell in range(TOTAL_RAM):
            byte = main_mem[cell]
            if shadow is not None and shadow[cell] == byte:
                continue
            col = cell % RAM_X
            row = cell // RAM_X
            pygame.draw.rect(self.screen, ram_color(byte),
                             (self.video_w + col * RAM_RES, row * RAM_RES, RAM_RES, RAM_RES))
        self._ram_shadow = bytes(main_mem)

    def draw_regs(self, machine, paused=False):
        top = self.video_h
        # This just blanks the register display.
        self.screen.fill((255, 255, 255), (0, top, self.video_w, self.reg_h))
        for x in range(0, 16, 4):
            disp = " ".join(f"V{x + r:1X}: 0x{machine.reg_V[x + r]:02x}" for r in range(4))
            ts = self.reg_font.render(disp, False, (0, 0, 0))
            self.screen.blit(ts, (0, top + self.line_off * (x // 4)))

        disp = (f"PC: 0x{machine.reg_PC:04x} I: 0x{machine.reg_I:04x} "
                f"DT: 0x{machine.d_timer:02x} ST: 0x{machine.s_timer:02x}")
        if paused:
            disp += " [PAUSED]"
        ts = self.reg_font.render(disp, False, (0, 0, 0))
        self.screen.blit(ts, (0, top + self.line_off * 4))

    def close(self):
        pygame.display.quit()
