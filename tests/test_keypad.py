"""Host keyboard to Chip-8 keypad translation."""

from __future__ import annotations

import pygame

from chip8vm.keypad import KEY_MAP, key_index, read_keys


def test_map_covers_sixteen_distinct_keys() -> None:
    assert len(KEY_MAP) == 16
    assert len(set(KEY_MAP)) == 16


def test_layout_corners() -> None:
    assert key_index(pygame.K_1) == 0x1
    assert key_index(pygame.K_4) == 0xC
    assert key_index(pygame.K_z) == 0xA
    assert key_index(pygame.K_v) == 0xF
    assert key_index(pygame.K_x) == 0x0


def test_unmapped_key() -> None:
    assert key_index(pygame.K_SPACE) is None


def test_read_keys_from_pressed_state() -> None:
    pressed = [False] * 512
    pressed[pygame.K_w] = True
    pressed[pygame.K_x] = True

    keys = read_keys(pressed)

    assert len(keys) == 16
    assert keys[0x0] is True
    assert keys[0x5] is True
    assert sum(keys) == 2
