"""Memory bus for the CHIP-8 interpreter."""

from .memory import (
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START,
    BoundsError,
    LoadError,
    Memory,
    OutOfBoundsError,
    SizeExceededError,
)

__all__ = [
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "BoundsError",
    "LoadError",
    "Memory",
    "OutOfBoundsError",
    "SizeExceededError",
]
