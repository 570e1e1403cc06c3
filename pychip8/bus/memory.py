"""Memory model for the CHIP-8 interpreter.

The address space is a flat 4 KiB array. The built-in hexadecimal font sits at
the bottom of memory and programs are loaded verbatim at ``0x200``. Addresses
are not masked to 12 bits: any access outside ``0x000-0xFFF`` raises
:class:`OutOfBoundsError` so that a malformed program stops instead of
silently touching unrelated bytes.
"""

from __future__ import annotations

from typing import Final

from pychip8.utils import debug_enabled, debug_log
from pychip8.video.font import FONT_BASE, FONTSET

MEMORY_SIZE: Final[int] = 0x1000
PROGRAM_START: Final[int] = 0x200
MAX_PROGRAM_SIZE: Final[int] = MEMORY_SIZE - PROGRAM_START


class BoundsError(Exception):
    """Raised when an access falls outside a fixed-size resource."""


class OutOfBoundsError(BoundsError):
    """Raised for memory accesses outside ``0x000-0xFFF``."""

    def __init__(self, address: int) -> None:
        super().__init__(f"address {address:#06x} outside memory 0x000-{MEMORY_SIZE - 1:#05x}")
        self.address = address


class LoadError(Exception):
    """Raised when a program image cannot be placed in memory."""


class SizeExceededError(LoadError):
    """Raised when a program image does not fit above ``0x200``."""

    def __init__(self, size: int) -> None:
        super().__init__(
            f"program of {size} bytes exceeds the {MAX_PROGRAM_SIZE} bytes available at {PROGRAM_START:#05x}"
        )
        self.size = size


class Memory:
    """4096-byte addressable memory with the font preloaded."""

    def __init__(self) -> None:
        self._data = bytearray(MEMORY_SIZE)
        self._initialized = False
        self._program_size = 0

    def initialize(self) -> None:
        """Write the font table at its reserved offset.

        Must run exactly once, before :meth:`load_program` or execution.
        """

        if self._initialized:
            raise LoadError("memory already initialised")
        self._data[FONT_BASE : FONT_BASE + len(FONTSET)] = FONTSET
        self._initialized = True

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def program_size(self) -> int:
        return self._program_size

    def load_program(self, image: bytes) -> None:
        if not self._initialized:
            raise LoadError("memory must be initialised before loading a program")
        size = len(image)
        if size > MAX_PROGRAM_SIZE:
            raise SizeExceededError(size)
        self._data[PROGRAM_START : PROGRAM_START + size] = image
        self._program_size = size
        if debug_enabled("loader"):
            debug_log("loader", "program loaded size=%d end=%04x", size, PROGRAM_START + size)

    def read(self, address: int) -> int:
        return self._data[self._check(address)]

    def write(self, address: int, value: int) -> None:
        self._data[self._check(address)] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (high byte at ``address``)."""

        high = self.read(address)
        low = self.read(address + 1)
        return (high << 8) | low

    def read_block(self, address: int, length: int) -> bytes:
        if length < 0:
            raise ValueError("length must be non-negative")
        if length:
            self._check(address)
            self._check(address + length - 1)
        return bytes(self._data[address : address + length])

    def write_block(self, address: int, data: bytes) -> None:
        if data:
            self._check(address)
            self._check(address + len(data) - 1)
        self._data[address : address + len(data)] = data

    def snapshot(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return MEMORY_SIZE

    @staticmethod
    def _check(address: int) -> int:
        if not 0 <= address < MEMORY_SIZE:
            raise OutOfBoundsError(address)
        return address
