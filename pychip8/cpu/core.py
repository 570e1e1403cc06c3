"""CHIP-8 fetch/decode/execute interpreter."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Sequence

from pychip8.bus import PROGRAM_START, BoundsError, Memory
from pychip8.io import Keypad
from pychip8.utils import TraceRecorder, debug_enabled, debug_log
from pychip8.video import DisplayBuffer

from .opcodes import OPCODE_TABLE, DecodedInstruction, Instruction, decode
from .quirks import QuirksConfig
from .timers import Timer

STACK_DEPTH = 16
REGISTER_COUNT = 16
FLAG = 0xF


class CPUError(Exception):
    """Base error for interpreter failures."""


class DecodeError(CPUError):
    """Raised when an opcode matches no known instruction."""

    def __init__(self, opcode: int, address: int) -> None:
        super().__init__(f"unknown opcode {opcode:#06x} at {address:#05x}")
        self.opcode = opcode
        self.address = address


class StackOverflowError(CPUError, BoundsError):
    """Raised by ``CALL`` when all stack slots are in use."""

    def __init__(self, address: int) -> None:
        super().__init__(f"call stack overflow ({STACK_DEPTH} levels) at {address:#05x}")
        self.address = address


class StackUnderflowError(CPUError, BoundsError):
    """Raised by ``RET`` with an empty call stack."""

    def __init__(self, address: int) -> None:
        super().__init__(f"return with empty call stack at {address:#05x}")
        self.address = address


class StepResult(Enum):
    """Outcome of a single :meth:`Interpreter.step`."""

    EXECUTED = auto()
    AWAITING_KEY = auto()
    SKIPPED = auto()


@dataclass
class CPUState:
    """Register file, call stack and timers."""

    pc: int = PROGRAM_START
    i: int = 0x000
    sp: int = 0
    v: list[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    stack: list[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    delay_timer: Timer = field(default_factory=Timer)
    sound_timer: Timer = field(default_factory=Timer)


@dataclass
class Interpreter:
    """Executes one CHIP-8 instruction per :meth:`step` call.

    The interpreter never paces itself: the host calls :meth:`step` at the
    instruction rate, ticks the timers at 60 Hz and repaints whenever
    :attr:`render_pending` is set.
    """

    memory: Memory
    display: DisplayBuffer = field(default_factory=DisplayBuffer)
    keypad: Keypad = field(default_factory=Keypad)
    quirks: QuirksConfig = field(default_factory=QuirksConfig)
    strict: bool = True
    rng: random.Random = field(default_factory=random.Random)
    trace: TraceRecorder | None = None
    instruction_table: Sequence[Sequence[Instruction]] = field(default=OPCODE_TABLE)

    state: CPUState = field(default_factory=CPUState)
    render_pending: bool = False
    step_count: int = 0

    def reset(self) -> None:
        """Return registers, stack, timers and display to power-on state."""

        self.state = CPUState()
        self.display.clear()
        self.render_pending = False
        self.step_count = 0

    def step(self) -> StepResult:
        """Fetch, decode and execute a single instruction."""

        pc_before = self.state.pc
        opcode = self._fetch()
        decoded = decode(opcode, self.instruction_table)
        if decoded is None:
            if self.trace is not None:
                self.trace.record_step(self.state, opcode, mnemonic="???", note="unknown")
            if self.strict:
                raise DecodeError(opcode, pc_before)
            if debug_enabled("cpu"):
                debug_log("cpu", "pc=%03x opcode=%04x skipped", pc_before, opcode)
            self._advance()
            return StepResult.SKIPPED

        instruction = decoded.instruction
        if debug_enabled("cpu"):
            debug_log("cpu", "pc=%03x opcode=%04x %s", pc_before, opcode, instruction.mnemonic)
        if self.trace is not None:
            self.trace.record_step(self.state, opcode, mnemonic=instruction.mnemonic)

        handler = getattr(self, instruction.handler, None)
        if handler is None:
            raise CPUError(f"handler '{instruction.handler}' not implemented")

        result = handler(decoded) or StepResult.EXECUTED
        if result is not StepResult.AWAITING_KEY:
            self.step_count += 1
        return result

    def acknowledge_render(self) -> None:
        """Clear the pending-render flag once the host has presented the buffer."""

        self.render_pending = False

    # ------------------------------------------------------------------
    # Flow control

    def op_cls(self, _: DecodedInstruction) -> None:
        self.display.clear()
        self.render_pending = True
        self._advance()

    def op_ret(self, _: DecodedInstruction) -> None:
        state = self.state
        if state.sp == 0:
            raise StackUnderflowError(state.pc)
        state.sp -= 1
        state.pc = (state.stack[state.sp] + 2) & 0xFFFF

    def op_jp(self, decoded: DecodedInstruction) -> None:
        self.state.pc = decoded.nnn

    def op_call(self, decoded: DecodedInstruction) -> None:
        state = self.state
        if state.sp >= STACK_DEPTH:
            raise StackOverflowError(state.pc)
        state.stack[state.sp] = state.pc
        state.sp += 1
        state.pc = decoded.nnn

    def op_jp_offset(self, decoded: DecodedInstruction) -> None:
        register = decoded.x if self.quirks.jump_offset_uses_vx else 0
        self.state.pc = (decoded.nnn + self.state.v[register]) & 0xFFFF

    def op_se_imm(self, decoded: DecodedInstruction) -> None:
        self._skip_if(self.state.v[decoded.x] == decoded.nn)

    def op_sne_imm(self, decoded: DecodedInstruction) -> None:
        self._skip_if(self.state.v[decoded.x] != decoded.nn)

    def op_se_reg(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        self._skip_if(v[decoded.x] == v[decoded.y])

    def op_sne_reg(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        self._skip_if(v[decoded.x] != v[decoded.y])

    # ------------------------------------------------------------------
    # Register loads and arithmetic

    def op_ld_imm(self, decoded: DecodedInstruction) -> None:
        self.state.v[decoded.x] = decoded.nn
        self._advance()

    def op_add_imm(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        v[decoded.x] = (v[decoded.x] + decoded.nn) & 0xFF
        self._advance()

    def op_ld_reg(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        v[decoded.x] = v[decoded.y]
        self._advance()

    def op_or(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        v[decoded.x] |= v[decoded.y]
        self._advance()

    def op_and(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        v[decoded.x] &= v[decoded.y]
        self._advance()

    def op_xor(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        v[decoded.x] ^= v[decoded.y]
        self._advance()

    # VF is written after the result so it wins when X is F.

    def op_add_reg(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        total = v[decoded.x] + v[decoded.y]
        v[decoded.x] = total & 0xFF
        v[FLAG] = 1 if total > 0xFF else 0
        self._advance()

    def op_sub(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        vx, vy = v[decoded.x], v[decoded.y]
        v[decoded.x] = (vx - vy) & 0xFF
        v[FLAG] = 1 if vx >= vy else 0
        self._advance()

    def op_subn(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        vx, vy = v[decoded.x], v[decoded.y]
        v[decoded.x] = (vy - vx) & 0xFF
        v[FLAG] = 1 if vy >= vx else 0
        self._advance()

    def op_shr(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        source = v[decoded.y] if self.quirks.shift_uses_vy else v[decoded.x]
        v[decoded.x] = source >> 1
        v[FLAG] = source & 0x01
        self._advance()

    def op_shl(self, decoded: DecodedInstruction) -> None:
        v = self.state.v
        source = v[decoded.y] if self.quirks.shift_uses_vy else v[decoded.x]
        v[decoded.x] = (source << 1) & 0xFF
        v[FLAG] = (source >> 7) & 0x01
        self._advance()

    def op_rnd(self, decoded: DecodedInstruction) -> None:
        self.state.v[decoded.x] = self.rng.randint(0, 0xFF) & decoded.nn
        self._advance()

    # ------------------------------------------------------------------
    # Index register and memory transfers

    def op_ld_i(self, decoded: DecodedInstruction) -> None:
        self.state.i = decoded.nnn
        self._advance()

    def op_add_i(self, decoded: DecodedInstruction) -> None:
        state = self.state
        state.i = (state.i + state.v[decoded.x]) & 0xFFFF
        if self.quirks.index_overflow_flag:
            state.v[FLAG] = 1 if state.i > 0x0F00 else 0
        self._advance()

    def op_ld_font(self, decoded: DecodedInstruction) -> None:
        self.state.i = self.state.v[decoded.x] * 5
        self._advance()

    def op_bcd(self, decoded: DecodedInstruction) -> None:
        value = self.state.v[decoded.x]
        base = self.state.i
        self.memory.write(base, value // 100)
        self.memory.write(base + 1, (value // 10) % 10)
        self.memory.write(base + 2, value % 10)
        self._advance()

    def op_store(self, decoded: DecodedInstruction) -> None:
        state = self.state
        for register in range(decoded.x + 1):
            self.memory.write(state.i + register, state.v[register])
        if self.quirks.increment_index_on_bulk:
            state.i = (state.i + decoded.x + 1) & 0xFFFF
        self._advance()

    def op_load(self, decoded: DecodedInstruction) -> None:
        state = self.state
        for register in range(decoded.x + 1):
            state.v[register] = self.memory.read(state.i + register)
        if self.quirks.increment_index_on_bulk:
            state.i = (state.i + decoded.x + 1) & 0xFFFF
        self._advance()

    # ------------------------------------------------------------------
    # Display

    def op_drw(self, decoded: DecodedInstruction) -> None:
        state = self.state
        x = state.v[decoded.x]
        y = state.v[decoded.y]
        rows = [self.memory.read(state.i + line) for line in range(decoded.n)]
        collision = self.display.draw_sprite(x, y, rows)
        state.v[FLAG] = 1 if collision else 0
        self.render_pending = True
        self._advance()

    # ------------------------------------------------------------------
    # Keypad and timers

    def op_skp(self, decoded: DecodedInstruction) -> None:
        self._skip_if(self.keypad.is_key_down(self.state.v[decoded.x] & 0x0F))

    def op_sknp(self, decoded: DecodedInstruction) -> None:
        self._skip_if(not self.keypad.is_key_down(self.state.v[decoded.x] & 0x0F))

    def op_ld_key(self, decoded: DecodedInstruction) -> StepResult:
        key = self.keypad.any_key_down()
        if key is None:
            return StepResult.AWAITING_KEY
        self.state.v[decoded.x] = key
        self._advance()
        return StepResult.EXECUTED

    def op_ld_vx_dt(self, decoded: DecodedInstruction) -> None:
        self.state.v[decoded.x] = self.state.delay_timer.get()
        self._advance()

    def op_ld_dt_vx(self, decoded: DecodedInstruction) -> None:
        self.state.delay_timer.set(self.state.v[decoded.x])
        self._advance()

    def op_ld_st_vx(self, decoded: DecodedInstruction) -> None:
        self.state.sound_timer.set(self.state.v[decoded.x])
        self._advance()

    # ------------------------------------------------------------------
    # Internal helpers

    def _fetch(self) -> int:
        return self.memory.read_word(self.state.pc)

    def _advance(self, amount: int = 2) -> None:
        self.state.pc = (self.state.pc + amount) & 0xFFFF

    def _skip_if(self, condition: bool) -> None:
        self._advance(4 if condition else 2)
