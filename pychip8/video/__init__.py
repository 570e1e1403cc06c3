"""Display buffer and rendering helpers for the CHIP-8 interpreter."""

from __future__ import annotations

from .display import HEIGHT, WIDTH, DisplayBuffer
from .font import FONT_HEIGHT, FONT_WIDTH, FONTSET, glyph, glyph_address
from .palette import MONOCHROME, PALETTES, validate_palette
from .renderer import RenderResult, Renderer

__all__ = [
    "DisplayBuffer",
    "WIDTH",
    "HEIGHT",
    "FONTSET",
    "FONT_WIDTH",
    "FONT_HEIGHT",
    "glyph",
    "glyph_address",
    "Renderer",
    "RenderResult",
    "MONOCHROME",
    "PALETTES",
    "validate_palette",
]
