"""CPU package for the CHIP-8 interpreter."""

from .core import (
    CPUError,
    CPUState,
    DecodeError,
    Interpreter,
    StackOverflowError,
    StackUnderflowError,
    StepResult,
)
from .quirks import PRESETS, QuirksConfig
from .timers import Timer
from . import opcodes

__all__ = [
    "Interpreter",
    "CPUState",
    "CPUError",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "StepResult",
    "QuirksConfig",
    "PRESETS",
    "Timer",
    "opcodes",
]
