"""Raw CHIP-8 program images."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pychip8.bus import MAX_PROGRAM_SIZE, PROGRAM_START, LoadError, SizeExceededError
from pychip8.utils import debug_enabled, debug_log


class ProgramNotFoundError(LoadError):
    """Raised when the program file does not exist."""


class ProgramReadError(LoadError):
    """Raised when the program path exists but cannot be read as a file."""


class EmptyProgramError(LoadError):
    """Raised for a zero-length program file."""


@dataclass(frozen=True)
class ProgramImage:
    """A program binary; the whole file is code/data loaded at ``0x200``."""

    data: bytes
    name: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def end_address(self) -> int:
        return PROGRAM_START + len(self.data) - 1

    def validate(self) -> "ProgramImage":
        if not self.data:
            raise EmptyProgramError(f"program {self.name or '<memory>'} is empty")
        if len(self.data) > MAX_PROGRAM_SIZE:
            raise SizeExceededError(len(self.data))
        return self


def load_program(data: bytes, name: str = "") -> ProgramImage:
    """Wrap ``data`` as a validated :class:`ProgramImage`."""

    return ProgramImage(bytes(data), name).validate()


def load_program_from_path(path: Path | str) -> ProgramImage:
    program_path = Path(path)
    try:
        data = program_path.read_bytes()
    except FileNotFoundError as exc:
        raise ProgramNotFoundError(f"program file not found: {program_path}") from exc
    except OSError as exc:
        raise ProgramReadError(f"cannot read program {program_path}: {exc.strerror or exc}") from exc
    image = load_program(data, program_path.name)
    if debug_enabled("loader"):
        debug_log("loader", "read %s size=%d", program_path, image.size)
    return image
