import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_1, K_2, K_3, K_4,
    K_q, K_w, K_e, K_r,
    K_a, K_s, K_d, K_f,
    K_z, K_x, K_c, K_v,
    K_ESCAPE,
)

from chip8 import SCREEN_HEIGHT, SCREEN_WIDTH

DEFAULT_SCALE = 10

# left hand block of the keyboard laid out like the COSMAC VIP hex keypad
KEY_MAPPINGS = {
    K_1: 0x1, K_2: 0x2, K_3: 0x3, K_4: 0xC,
    K_q: 0x4, K_w: 0x5, K_e: 0x6, K_r: 0xD,
    K_a: 0x7, K_s: 0x8, K_d: 0x9, K_f: 0xE,
    K_z: 0xA, K_x: 0x0, K_c: 0xB, K_v: 0xF,
}


# ******************** I/O SECTION
class Screen:
    def __init__(self, s=DEFAULT_SCALE, caption="CHIP-8"):
        self.w, self.h, self.scale = SCREEN_WIDTH, SCREEN_HEIGHT, s
        self.last_frame = None
        self.surface = pygame.display.set_mode((self.w * self.scale, self.h * self.scale))
        pygame.display.set_caption(caption)

    def present(self, framebuffer):
        """paint the framebuffer colours scaled up on the window, unchanged frames are skipped"""
        if framebuffer == self.last_frame:
            return
        for pixel, colour in enumerate(framebuffer):
            y, x = divmod(pixel, self.w)
            pygame.draw.rect(
                self.surface,
                pygame.Color(colour),
                (x * self.scale, y * self.scale, self.scale, self.scale)
            )
        pygame.display.flip()
        self.last_frame = framebuffer


class Keypad:
    def poll(self, chip):
        """loop through the event queue, return True when the user asked to quit"""
        quit_requested = False
        for event in pygame.event.get():
            if self.handle(chip, event):
                quit_requested = True
        return quit_requested

    @staticmethod
    def handle(chip, event):
        if event.type == pygame.QUIT:
            return True
        if event.type in (pygame.KEYDOWN, pygame.KEYUP):
            if event.key == K_ESCAPE:
                return True
            if event.key in KEY_MAPPINGS:
                bit = 1 << KEY_MAPPINGS[event.key]
                if event.type == pygame.KEYDOWN:
                    chip.keys_pressed |= bit
                else:
                    chip.keys_pressed &= ~bit
        return False
