"""Pygame frontend for the CHIP-8 interpreter."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from pychip8.bus import BoundsError, LoadError
from pychip8.cpu import CPUError, QuirksConfig
from pychip8.io import Keypad
from pychip8.loader import load_program_from_path
from pychip8.system import DEFAULT_INSTRUCTIONS_PER_SECOND, Machine, MachineConfig, create_machine
from pychip8.utils import debug_enabled, debug_log
from pychip8.video import HEIGHT, MONOCHROME, WIDTH, Renderer
from pychip8.video.palette import RGBColor


@dataclass
class AppConfig:
    """Configuration for the CHIP-8 frontend."""

    program_path: Optional[Path] = None
    scale: int = 10
    fullscreen: bool = False
    instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND
    quirks: QuirksConfig = field(default_factory=QuirksConfig)
    skip_unknown: bool = False
    seed: int | None = None
    palette: Sequence[RGBColor] = MONOCHROME


class Chip8App:
    """Thin wrapper around the Pygame event loop."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._running = False
        self._keypad = Keypad()
        self._machine: Machine | None = None
        self._renderer = Renderer(config.palette)
        self._perf_enabled = debug_enabled("perf")
        self._perf_frame = 0
        self._trace_capacity = 512 if debug_enabled("trace") else 0
        self._frame_counter = 0
        self._pygame = None

    @property
    def machine(self) -> Machine | None:
        return self._machine

    def run(self) -> None:
        try:
            import pygame  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required to run the UI") from exc

        if not self._config.program_path:
            raise RuntimeError("program image is required")
        machine = self._create_machine(self._config.program_path)

        self._pygame = pygame

        pygame.init()
        pygame.display.set_caption(f"CHIP-8 Interpreter - {self._config.program_path.name}")
        surface_size = (WIDTH * self._config.scale, HEIGHT * self._config.scale)
        flags = pygame.FULLSCREEN if self._config.fullscreen else 0
        screen = pygame.display.set_mode(surface_size, flags)

        clock = pygame.time.Clock()
        steps = Machine.steps_per_frame(self._config.instructions_per_second, _FRAME_RATE)
        self._running = True
        self._present(screen, machine)

        try:
            while self._running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self._running = False
                    elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                        self._running = False
                    elif event.type == pygame.KEYDOWN:
                        self._handle_key_event(pygame.key.name(event.key), pressed=True)
                    elif event.type == pygame.KEYUP:
                        self._handle_key_event(pygame.key.name(event.key), pressed=False)

                frame_start = time.perf_counter()
                executed = self.run_frame(steps)

                if machine.interpreter.render_pending:
                    self._present(screen, machine)
                    machine.interpreter.acknowledge_render()

                if self._perf_enabled:
                    self._perf_frame += 1
                    duration = time.perf_counter() - frame_start
                    debug_log(
                        "perf",
                        "frame=%d steps=%d frame_ms=%.3f",
                        self._perf_frame,
                        executed,
                        duration * 1000.0,
                    )

                clock.tick(_FRAME_RATE)
                self._frame_counter += 1
        finally:
            pygame.quit()

    def run_frame(self, steps: int) -> int:
        """Run one 60 Hz frame: ``steps`` instructions then a timer tick."""

        machine = self._machine
        if machine is None:
            raise RuntimeError("machine not created")
        try:
            executed = machine.run_frame(steps)
        except (CPUError, BoundsError) as exc:
            self._report_fatal(machine, exc)
            raise RuntimeError(f"execution halted: {exc}") from exc
        machine.tick_timers()
        return executed

    def _create_machine(self, program_path: Path) -> Machine:
        try:
            program = load_program_from_path(program_path)
        except LoadError as exc:
            raise RuntimeError(f"Failed to load program {program_path}: {exc}") from exc

        machine = create_machine(
            MachineConfig(
                quirks=self._config.quirks,
                program=program,
                keypad=self._keypad,
                strict=not self._config.skip_unknown,
                seed=self._config.seed,
                trace_capacity=self._trace_capacity,
            )
        )
        if debug_enabled("cpu"):
            debug_log("cpu", "quirks=%s strict=%s", self._config.quirks.describe(), not self._config.skip_unknown)
        self._machine = machine
        return machine

    def _handle_key_event(self, name: str, *, pressed: bool) -> None:
        canonical = _canonical_name(name)
        if debug_enabled("input"):
            debug_log("input", "event=%s canonical=%s pressed=%s", name, canonical, pressed)
        if canonical is None:
            return
        if pressed:
            self._keypad.press_name(canonical)
        else:
            self._keypad.release_name(canonical)

    def _present(self, screen, machine: Machine) -> None:
        frame = self._renderer.render(machine.display.snapshot(), scale=self._config.scale)
        screen.blit(frame.to_surface(), (0, 0))
        self._pygame.display.flip()

    def _report_fatal(self, machine: Machine, exc: Exception) -> None:
        state = machine.interpreter.state
        debug_log(
            "trace",
            "fatal=%s pc=%03x I=%03x SP=%d steps=%d",
            exc,
            state.pc,
            state.i,
            state.sp,
            machine.interpreter.step_count,
        )
        if machine.trace is not None:
            machine.trace.dump("trace", 32)


def _canonical_name(name: str) -> str | None:
    lowered = name.lower()
    if lowered.startswith("[") and lowered.endswith("]"):
        lowered = lowered[1:-1]
    if len(lowered) == 1:
        return lowered
    return None


_FRAME_RATE = 60
