"""60 Hz countdown timers."""

from __future__ import annotations


class Timer:
    """8-bit counter decremented by the host, never below zero."""

    def __init__(self, value: int = 0) -> None:
        self._value = value & 0xFF

    def set(self, value: int) -> None:
        self._value = value & 0xFF

    def get(self) -> int:
        return self._value

    def tick(self) -> None:
        if self._value > 0:
            self._value -= 1

    @property
    def active(self) -> bool:
        return self._value > 0

    def __repr__(self) -> str:
        return f"Timer({self._value})"
