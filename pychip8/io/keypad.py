"""Logical 16-key hexadecimal keypad."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from pychip8.utils import debug_enabled, debug_log

KEY_COUNT = 16


# Host key name -> logical key. Mirrors the COSMAC VIP layout
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   q w e r
#   7 8 9 E        a s d f
#   A 0 B F        z x c v
KEY_LAYOUT: Mapping[str, int] = {
    "1": 0x1,
    "2": 0x2,
    "3": 0x3,
    "4": 0xC,
    "q": 0x4,
    "w": 0x5,
    "e": 0x6,
    "r": 0xD,
    "a": 0x7,
    "s": 0x8,
    "d": 0x9,
    "f": 0xE,
    "z": 0xA,
    "x": 0x0,
    "c": 0xB,
    "v": 0xF,
}


@dataclass
class Keypad:
    """State of the logical keys, fed by the host and queried by the interpreter."""

    layout: Mapping[str, int] = field(default_factory=lambda: dict(KEY_LAYOUT))
    _pressed: set[int] = field(default_factory=set)

    def press(self, key: int) -> None:
        key = self._check(key)
        self._pressed.add(key)
        if debug_enabled("input"):
            debug_log("input", "key_press key=%X", key)

    def release(self, key: int) -> None:
        key = self._check(key)
        self._pressed.discard(key)
        if debug_enabled("input"):
            debug_log("input", "key_release key=%X", key)

    def press_name(self, key_name: str) -> int | None:
        key = self.lookup(key_name)
        if key is None:
            if debug_enabled("input"):
                debug_log("input", "unmapped_press=%s", key_name)
            return None
        self.press(key)
        return key

    def release_name(self, key_name: str) -> int | None:
        key = self.lookup(key_name)
        if key is None:
            if debug_enabled("input"):
                debug_log("input", "unmapped_release=%s", key_name)
            return None
        self.release(key)
        return key

    def lookup(self, key_name: str) -> int | None:
        return self.layout.get(key_name.lower())

    def is_key_down(self, key: int) -> bool:
        return self._check(key) in self._pressed

    def any_key_down(self) -> int | None:
        """Return the lowest logical key currently down, or ``None``."""

        if not self._pressed:
            return None
        return min(self._pressed)

    def reset(self) -> None:
        self._pressed.clear()

    def snapshot(self) -> tuple[bool, ...]:
        return tuple(key in self._pressed for key in range(KEY_COUNT))

    @staticmethod
    def _check(key: int) -> int:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"logical key out of range: {key}")
        return key
