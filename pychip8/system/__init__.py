"""CHIP-8 system assembly helpers."""

from __future__ import annotations

from .machine import (
    DEFAULT_INSTRUCTIONS_PER_SECOND,
    TIMER_FREQUENCY,
    Machine,
    MachineConfig,
    create_machine,
)

__all__ = [
    "DEFAULT_INSTRUCTIONS_PER_SECOND",
    "TIMER_FREQUENCY",
    "MachineConfig",
    "Machine",
    "create_machine",
]
