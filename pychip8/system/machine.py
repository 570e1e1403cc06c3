"""CHIP-8 machine assembly."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from pychip8.bus import Memory
from pychip8.cpu import Interpreter, QuirksConfig, StepResult
from pychip8.io import Keypad
from pychip8.loader import ProgramImage
from pychip8.utils import TraceRecorder
from pychip8.video import DisplayBuffer

DEFAULT_INSTRUCTIONS_PER_SECOND = 500
TIMER_FREQUENCY = 60


@dataclass
class MachineConfig:
    """Runtime configuration for a CHIP-8 machine."""

    quirks: QuirksConfig = field(default_factory=QuirksConfig)
    program: Optional[ProgramImage] = None
    keypad: Keypad | None = None
    strict: bool = True
    seed: int | None = None
    trace_capacity: int = 0


@dataclass
class Machine:
    """Aggregates memory, interpreter, display and keypad."""

    memory: Memory
    interpreter: Interpreter
    display: DisplayBuffer
    keypad: Keypad
    trace: TraceRecorder | None = None

    def step(self) -> StepResult:
        return self.interpreter.step()

    def run_frame(self, steps: int) -> int:
        """Run up to ``steps`` instructions, returning how many made progress.

        Stops early while the interpreter waits for a key so the host can poll
        input before retrying.
        """

        executed = 0
        for _ in range(steps):
            if self.interpreter.step() is StepResult.AWAITING_KEY:
                break
            executed += 1
        return executed

    def tick_timers(self) -> None:
        state = self.interpreter.state
        state.delay_timer.tick()
        state.sound_timer.tick()

    @property
    def sound_active(self) -> bool:
        return self.interpreter.state.sound_timer.active

    @staticmethod
    def steps_per_frame(
        instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND,
        frame_rate: int = TIMER_FREQUENCY,
    ) -> int:
        if instructions_per_second <= 0 or frame_rate <= 0:
            raise ValueError("rates must be positive")
        return max(1, round(instructions_per_second / frame_rate))


def create_machine(config: MachineConfig) -> Machine:
    """Instantiate a CHIP-8 machine with the requested configuration."""

    memory = Memory()
    memory.initialize()
    if config.program is not None:
        memory.load_program(config.program.data)

    display = DisplayBuffer()
    keypad = config.keypad or Keypad()
    trace = TraceRecorder(config.trace_capacity) if config.trace_capacity > 0 else None

    interpreter = Interpreter(
        memory,
        display=display,
        keypad=keypad,
        quirks=config.quirks,
        strict=config.strict,
        rng=random.Random(config.seed),
        trace=trace,
    )

    return Machine(
        memory=memory,
        interpreter=interpreter,
        display=display,
        keypad=keypad,
        trace=trace,
    )
