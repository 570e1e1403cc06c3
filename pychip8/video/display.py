"""Monochrome 64x32 display buffer."""

from __future__ import annotations

from typing import Final, Iterable

WIDTH: Final[int] = 64
HEIGHT: Final[int] = 32
SPRITE_WIDTH: Final[int] = 8


class DisplayBuffer:
    """Pixel grid mutated by XOR compositing.

    Coordinates wrap around both edges, so a sprite drawn across the right or
    bottom border reappears on the opposite side.
    """

    def __init__(self) -> None:
        self._pixels = [bytearray(WIDTH) for _ in range(HEIGHT)]

    def clear(self) -> None:
        for row in self._pixels:
            row[:] = bytes(WIDTH)

    def is_lit(self, x: int, y: int) -> bool:
        return bool(self._pixels[y % HEIGHT][x % WIDTH])

    def toggle_pixel(self, x: int, y: int) -> bool:
        """XOR the pixel at ``(x, y)`` and return whether it was lit before."""

        row = self._pixels[y % HEIGHT]
        column = x % WIDTH
        was_lit = bool(row[column])
        row[column] ^= 1
        return was_lit

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """Draw an 8-pixel wide sprite and report whether any lit pixel was erased."""

        collision = False
        for line, bits in enumerate(rows):
            for column in range(SPRITE_WIDTH):
                if bits & (0x80 >> column):
                    if self.toggle_pixel(x + column, y + line):
                        collision = True
        return collision

    def snapshot(self) -> tuple[tuple[bool, ...], ...]:
        return tuple(tuple(bool(value) for value in row) for row in self._pixels)

    def lit_count(self) -> int:
        return sum(sum(row) for row in self._pixels)
