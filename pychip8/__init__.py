"""CHIP-8 interpreter.

The package hosts the memory bus, interpreter core, display buffer, keypad,
program loader and the pygame frontend used by ``run.py``.
"""

from __future__ import annotations

from . import bus, cpu, io, loader, system, ui, utils, video

__all__: list[str] = [
    "bus",
    "cpu",
    "video",
    "io",
    "loader",
    "system",
    "ui",
    "utils",
]
