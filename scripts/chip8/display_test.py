import os
import unittest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame

from chip8 import BLACK, PALETTE, SCREEN_SIZE, SCREEN_WIDTH, WHITE, Chip8
from display import KEY_MAPPINGS, Keypad, Screen


def key_event(kind, key):
    return pygame.event.Event(kind, key=key)


class TestKeypad(unittest.TestCase):
    def test_layout_covers_every_key(self):
        self.assertEqual(sorted(KEY_MAPPINGS.values()), list(range(16)))
        self.assertEqual(KEY_MAPPINGS[pygame.K_x], 0x0)
        self.assertEqual(KEY_MAPPINGS[pygame.K_4], 0xC)

    def test_press_sets_and_release_clears_bit(self):
        chip = Chip8()
        self.assertFalse(Keypad.handle(chip, key_event(pygame.KEYDOWN, pygame.K_w)))
        self.assertEqual(chip.keys_pressed, 1 << 0x5)
        Keypad.handle(chip, key_event(pygame.KEYDOWN, pygame.K_v))
        self.assertEqual(chip.keys_pressed, (1 << 0x5) | (1 << 0xF))
        Keypad.handle(chip, key_event(pygame.KEYUP, pygame.K_w))
        self.assertEqual(chip.keys_pressed, 1 << 0xF)

    def test_release_without_press_leaves_key_up(self):
        chip = Chip8()
        Keypad.handle(chip, key_event(pygame.KEYUP, pygame.K_w))
        self.assertEqual(chip.keys_pressed, 0)
        Keypad.handle(chip, key_event(pygame.KEYDOWN, pygame.K_w))
        Keypad.handle(chip, key_event(pygame.KEYDOWN, pygame.K_w))
        self.assertEqual(chip.keys_pressed, 1 << 0x5)

    def test_unmapped_key_ignored(self):
        chip = Chip8()
        self.assertFalse(Keypad.handle(chip, key_event(pygame.KEYDOWN, pygame.K_p)))
        self.assertEqual(chip.keys_pressed, 0)

    def test_quit_events(self):
        chip = Chip8()
        self.assertTrue(Keypad.handle(chip, key_event(pygame.KEYDOWN, pygame.K_ESCAPE)))
        self.assertTrue(Keypad.handle(chip, pygame.event.Event(pygame.QUIT)))


class TestScreen(unittest.TestCase):
    def setUp(self):
        pygame.display.init()
        self.addCleanup(pygame.display.quit)

    def test_present_scales_pixels(self):
        screen = Screen(2)
        self.assertEqual(screen.surface.get_size(), (128, 64))
        framebuffer = [BLACK] * SCREEN_SIZE
        framebuffer[SCREEN_WIDTH + 1] = WHITE      # pixel (1, 1)
        screen.present(tuple(framebuffer))
        self.assertEqual(tuple(screen.surface.get_at((2, 2)))[:3], (255, 255, 255))
        self.assertEqual(tuple(screen.surface.get_at((3, 3)))[:3], (255, 255, 255))
        self.assertEqual(tuple(screen.surface.get_at((0, 0)))[:3], (0, 0, 0))

    def test_present_uses_palette_colours(self):
        screen = Screen(1)
        red = PALETTE[2][1]
        screen.present(tuple([red] * SCREEN_SIZE))
        self.assertEqual(tuple(screen.surface.get_at((10, 10)))[:3], (255, 0, 0))


if __name__ == "__main__":
    unittest.main()
