"""Loaders for CHIP-8 program images."""

from __future__ import annotations

from .program import (
    EmptyProgramError,
    ProgramImage,
    ProgramNotFoundError,
    ProgramReadError,
    load_program,
    load_program_from_path,
)

__all__ = [
    "ProgramImage",
    "EmptyProgramError",
    "ProgramNotFoundError",
    "ProgramReadError",
    "load_program",
    "load_program_from_path",
]
