"""Opcode metadata for the CHIP-8 instruction set."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Iterable, List, Sequence


class InstructionKind(Enum):
    """Identity of a decoded instruction."""

    CLS = auto()
    RET = auto()
    JP = auto()
    CALL = auto()
    SE_IMM = auto()
    SNE_IMM = auto()
    SE_REG = auto()
    LD_IMM = auto()
    ADD_IMM = auto()
    LD_REG = auto()
    OR = auto()
    AND = auto()
    XOR = auto()
    ADD_REG = auto()
    SUB = auto()
    SHR = auto()
    SUBN = auto()
    SHL = auto()
    SNE_REG = auto()
    LD_I = auto()
    JP_OFFSET = auto()
    RND = auto()
    DRW = auto()
    SKP = auto()
    SKNP = auto()
    LD_VX_DT = auto()
    LD_KEY = auto()
    LD_DT_VX = auto()
    LD_ST_VX = auto()
    ADD_I = auto()
    LD_FONT = auto()
    BCD = auto()
    STORE = auto()
    LOAD = auto()


@dataclass(frozen=True)
class Instruction:
    """Metadata describing one opcode pattern.

    An opcode matches when ``opcode & mask == pattern``.
    """

    kind: InstructionKind
    pattern: int
    mask: int
    mnemonic: str
    handler: str

    def __post_init__(self) -> None:
        if not 0 <= self.pattern <= 0xFFFF:
            raise ValueError(f"pattern out of range: {self.pattern}")
        if self.mask & 0xF000 != 0xF000:
            raise ValueError("mask must cover the family nibble")
        if self.pattern & ~self.mask:
            raise ValueError(f"pattern {self.pattern:#06x} has bits outside mask {self.mask:#06x}")

    @property
    def family(self) -> int:
        return self.pattern >> 12

    def matches(self, opcode: int) -> bool:
        return opcode & self.mask == self.pattern


@dataclass(frozen=True)
class DecodedInstruction:
    """An opcode paired with its instruction metadata and operand fields."""

    instruction: Instruction
    opcode: int

    @property
    def kind(self) -> InstructionKind:
        return self.instruction.kind

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0x0F

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0x0F

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def nn(self) -> int:
        return self.opcode & 0x00FF

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF


class OpcodeTable:
    """Builder for the per-family instruction lookup."""

    _FAMILIES: Final[int] = 0x10

    def __init__(self) -> None:
        self._families: List[List[Instruction]] = [[] for _ in range(self._FAMILIES)]

    def register(self, instruction: Instruction) -> None:
        bucket = self._families[instruction.family]
        for existing in bucket:
            if existing.mask == instruction.mask and existing.pattern == instruction.pattern:
                raise ValueError(
                    f"pattern {instruction.pattern:#06x} already registered as {existing.mnemonic}")
        bucket.append(instruction)

    def register_all(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.register(instruction)

    def freeze(self) -> Sequence[Sequence[Instruction]]:
        return tuple(tuple(bucket) for bucket in self._families)


def build_instruction_table(instructions: Iterable[Instruction]) -> Sequence[Sequence[Instruction]]:
    """Build a 16-entry table of candidate instructions indexed by the top nibble."""

    table = OpcodeTable()
    table.register_all(instructions)
    return table.freeze()


_NNN = 0xF000
_XNN = 0xF000
_XY = 0xF00F
_X = 0xF0FF
_EXACT = 0xFFFF

DEFAULT_INSTRUCTIONS: Sequence[Instruction] = (
    Instruction(InstructionKind.CLS, 0x00E0, _EXACT, "CLS", "op_cls"),
    Instruction(InstructionKind.RET, 0x00EE, _EXACT, "RET", "op_ret"),
    Instruction(InstructionKind.JP, 0x1000, _NNN, "JP", "op_jp"),
    Instruction(InstructionKind.CALL, 0x2000, _NNN, "CALL", "op_call"),
    Instruction(InstructionKind.SE_IMM, 0x3000, _XNN, "SE", "op_se_imm"),
    Instruction(InstructionKind.SNE_IMM, 0x4000, _XNN, "SNE", "op_sne_imm"),
    Instruction(InstructionKind.SE_REG, 0x5000, _XY, "SE", "op_se_reg"),
    Instruction(InstructionKind.LD_IMM, 0x6000, _XNN, "LD", "op_ld_imm"),
    Instruction(InstructionKind.ADD_IMM, 0x7000, _XNN, "ADD", "op_add_imm"),
    # 8XYn register arithmetic
    Instruction(InstructionKind.LD_REG, 0x8000, _XY, "LD", "op_ld_reg"),
    Instruction(InstructionKind.OR, 0x8001, _XY, "OR", "op_or"),
    Instruction(InstructionKind.AND, 0x8002, _XY, "AND", "op_and"),
    Instruction(InstructionKind.XOR, 0x8003, _XY, "XOR", "op_xor"),
    Instruction(InstructionKind.ADD_REG, 0x8004, _XY, "ADD", "op_add_reg"),
    Instruction(InstructionKind.SUB, 0x8005, _XY, "SUB", "op_sub"),
    Instruction(InstructionKind.SHR, 0x8006, _XY, "SHR", "op_shr"),
    Instruction(InstructionKind.SUBN, 0x8007, _XY, "SUBN", "op_subn"),
    Instruction(InstructionKind.SHL, 0x800E, _XY, "SHL", "op_shl"),
    Instruction(InstructionKind.SNE_REG, 0x9000, _XY, "SNE", "op_sne_reg"),
    Instruction(InstructionKind.LD_I, 0xA000, _NNN, "LD", "op_ld_i"),
    Instruction(InstructionKind.JP_OFFSET, 0xB000, _NNN, "JP", "op_jp_offset"),
    Instruction(InstructionKind.RND, 0xC000, _XNN, "RND", "op_rnd"),
    Instruction(InstructionKind.DRW, 0xD000, _NNN, "DRW", "op_drw"),
    # Keypad
    Instruction(InstructionKind.SKP, 0xE09E, _X, "SKP", "op_skp"),
    Instruction(InstructionKind.SKNP, 0xE0A1, _X, "SKNP", "op_sknp"),
    # FXnn misc
    Instruction(InstructionKind.LD_VX_DT, 0xF007, _X, "LD", "op_ld_vx_dt"),
    Instruction(InstructionKind.LD_KEY, 0xF00A, _X, "LD", "op_ld_key"),
    Instruction(InstructionKind.LD_DT_VX, 0xF015, _X, "LD", "op_ld_dt_vx"),
    Instruction(InstructionKind.LD_ST_VX, 0xF018, _X, "LD", "op_ld_st_vx"),
    Instruction(InstructionKind.ADD_I, 0xF01E, _X, "ADD", "op_add_i"),
    Instruction(InstructionKind.LD_FONT, 0xF029, _X, "LD", "op_ld_font"),
    Instruction(InstructionKind.BCD, 0xF033, _X, "BCD", "op_bcd"),
    Instruction(InstructionKind.STORE, 0xF055, _X, "LD", "op_store"),
    Instruction(InstructionKind.LOAD, 0xF065, _X, "LD", "op_load"),
)


OPCODE_TABLE: Sequence[Sequence[Instruction]] = build_instruction_table(DEFAULT_INSTRUCTIONS)


def decode(
    opcode: int,
    table: Sequence[Sequence[Instruction]] = OPCODE_TABLE,
) -> DecodedInstruction | None:
    """Classify ``opcode``; return ``None`` when no pattern matches."""

    opcode &= 0xFFFF
    for instruction in table[opcode >> 12]:
        if instruction.matches(opcode):
            return DecodedInstruction(instruction, opcode)
    return None
