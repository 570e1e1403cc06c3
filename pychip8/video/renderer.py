"""Rasterise a display snapshot into an RGB frame."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .display import HEIGHT, WIDTH
from .palette import MONOCHROME, RGBColor, validate_palette


@dataclass
class RenderResult:
    """RGB frame produced by :class:`Renderer`."""

    width: int
    height: int
    pixels: bytes

    def get_pixel(self, x: int, y: int) -> RGBColor:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} frame")
        offset = (y * self.width + x) * 3
        return (self.pixels[offset], self.pixels[offset + 1], self.pixels[offset + 2])

    def to_surface(self):
        import pygame  # type: ignore

        return pygame.image.frombuffer(self.pixels, (self.width, self.height), "RGB")


class Renderer:
    """Convert the 64x32 boolean grid to scaled RGB bytes."""

    def __init__(self, palette: Sequence[RGBColor] = MONOCHROME) -> None:
        self._background, self._foreground = validate_palette(palette)

    def render(self, grid: Sequence[Sequence[bool]], *, scale: int = 1) -> RenderResult:
        if scale <= 0:
            raise ValueError("scale must be positive")
        if len(grid) != HEIGHT or any(len(row) != WIDTH for row in grid):
            raise ValueError(f"display grid must be {WIDTH}x{HEIGHT}")

        background = bytes(self._background)
        foreground = bytes(self._foreground)
        out = bytearray()
        for row in grid:
            line = b"".join((foreground if lit else background) * scale for lit in row)
            out += line * scale
        return RenderResult(WIDTH * scale, HEIGHT * scale, bytes(out))
