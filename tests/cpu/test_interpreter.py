"""Tests for the CHIP-8 interpreter core."""

from __future__ import annotations

import random

import pytest

from pychip8.bus import PROGRAM_START, BoundsError, Memory, OutOfBoundsError
from pychip8.cpu import (
    DecodeError,
    Interpreter,
    QuirksConfig,
    StackOverflowError,
    StackUnderflowError,
    StepResult,
)
from pychip8.io import Keypad


def make_interpreter(*words: int, quirks: QuirksConfig | None = None, **kwargs) -> Interpreter:
    memory = Memory()
    memory.initialize()
    image = b"".join(word.to_bytes(2, "big") for word in words)
    memory.load_program(image)
    return Interpreter(memory, quirks=quirks or QuirksConfig(), **kwargs)


def test_initial_state() -> None:
    cpu = make_interpreter(0x00E0)
    assert cpu.state.pc == 0x200
    assert cpu.state.sp == 0
    assert cpu.state.i == 0
    assert cpu.state.v == [0] * 16
    assert cpu.render_pending is False


@pytest.mark.parametrize("x", range(16))
@pytest.mark.parametrize("nn", (0x00, 0x01, 0x7F, 0xAB, 0xFF))
def test_set_register_immediate(x: int, nn: int) -> None:
    cpu = make_interpreter(0x6000 | (x << 8) | nn)

    assert cpu.step() is StepResult.EXECUTED
    assert cpu.state.v[x] == nn
    assert cpu.state.pc == 0x202


def test_add_immediate_wraps_without_flag() -> None:
    cpu = make_interpreter(0x7105)
    cpu.state.v[1] = 0xFE
    cpu.state.v[0xF] = 0x42

    cpu.step()

    assert cpu.state.v[1] == 0x03
    assert cpu.state.v[0xF] == 0x42


def test_clear_screen_requests_render() -> None:
    cpu = make_interpreter(0x00E0)
    cpu.display.toggle_pixel(3, 4)

    cpu.step()

    assert cpu.display.lit_count() == 0
    assert cpu.render_pending is True
    cpu.acknowledge_render()
    assert cpu.render_pending is False


def test_jump_sets_pc_without_increment() -> None:
    cpu = make_interpreter(0x1300)
    cpu.step()
    assert cpu.state.pc == 0x300


def test_call_then_return() -> None:
    cpu = make_interpreter(0x2204, 0x0000, 0x00EE)

    cpu.step()
    assert cpu.state.pc == 0x204
    assert cpu.state.sp == 1
    assert cpu.state.stack[0] == 0x200

    cpu.step()
    assert cpu.state.pc == 0x202
    assert cpu.state.sp == 0


def test_call_overflow_raises() -> None:
    # Each call re-enters itself.
    cpu = make_interpreter(0x2200)
    for _ in range(16):
        cpu.step()
    assert cpu.state.sp == 16

    with pytest.raises(StackOverflowError) as excinfo:
        cpu.step()
    assert isinstance(excinfo.value, BoundsError)
    assert cpu.state.sp == 16


def test_return_with_empty_stack_raises() -> None:
    cpu = make_interpreter(0x00EE)
    with pytest.raises(StackUnderflowError):
        cpu.step()


@pytest.mark.parametrize(
    ("opcode", "vx", "vy", "expected_pc"),
    [
        (0x3012, 0x12, 0, 0x204),
        (0x3012, 0x13, 0, 0x202),
        (0x4012, 0x12, 0, 0x202),
        (0x4012, 0x13, 0, 0x204),
        (0x5010, 0x22, 0x22, 0x204),
        (0x5010, 0x22, 0x23, 0x202),
        (0x9010, 0x22, 0x22, 0x202),
        (0x9010, 0x22, 0x23, 0x204),
    ],
)
def test_conditional_skips(opcode: int, vx: int, vy: int, expected_pc: int) -> None:
    cpu = make_interpreter(opcode)
    cpu.state.v[0] = vx
    cpu.state.v[1] = vy

    cpu.step()

    assert cpu.state.pc == expected_pc


def test_bitwise_register_ops() -> None:
    cpu = make_interpreter(0x8010, 0x8121, 0x8232, 0x8313)
    v = cpu.state.v
    v[1], v[2], v[3] = 0x0F, 0xF0, 0xFF

    cpu.step()  # V0 = V1
    assert v[0] == 0x0F
    cpu.step()  # V1 |= V2
    assert v[1] == 0xFF
    cpu.step()  # V2 &= V3
    assert v[2] == 0xF0
    cpu.step()  # V3 ^= V1
    assert v[3] == 0x00


def test_register_add_sets_carry() -> None:
    cpu = make_interpreter(0x8014)
    cpu.state.v[0] = 200
    cpu.state.v[1] = 100

    cpu.step()

    assert cpu.state.v[0] == 44
    assert cpu.state.v[0xF] == 1


def test_register_add_without_carry() -> None:
    cpu = make_interpreter(0x8014)
    cpu.state.v[0] = 100
    cpu.state.v[1] = 100
    cpu.state.v[0xF] = 1

    cpu.step()

    assert cpu.state.v[0] == 200
    assert cpu.state.v[0xF] == 0


def test_register_subtract_borrow() -> None:
    cpu = make_interpreter(0x8015)
    cpu.state.v[0] = 5
    cpu.state.v[1] = 10

    cpu.step()

    assert cpu.state.v[0] == 251
    assert cpu.state.v[0xF] == 0


def test_register_subtract_equal_sets_flag() -> None:
    cpu = make_interpreter(0x8015)
    cpu.state.v[0] = 7
    cpu.state.v[1] = 7

    cpu.step()

    assert cpu.state.v[0] == 0
    assert cpu.state.v[0xF] == 1


def test_reverse_subtract() -> None:
    cpu = make_interpreter(0x8017, 0x8237)
    v = cpu.state.v
    v[0], v[1] = 5, 10
    v[2], v[3] = 10, 5

    cpu.step()
    assert v[0] == 5
    assert v[0xF] == 1

    cpu.step()
    assert v[2] == 251
    assert v[0xF] == 0


def test_flag_register_as_destination_keeps_flag() -> None:
    cpu = make_interpreter(0x8F04)
    cpu.state.v[0xF] = 0xFF
    cpu.state.v[0] = 0x01

    cpu.step()

    assert cpu.state.v[0xF] == 1


def test_shift_right_reads_vy_by_default() -> None:
    cpu = make_interpreter(0x8016)
    cpu.state.v[0] = 0x00
    cpu.state.v[1] = 0b0000_0101

    cpu.step()

    assert cpu.state.v[0] == 0b0000_0010
    assert cpu.state.v[0xF] == 1


def test_shift_left_reads_vy_by_default() -> None:
    cpu = make_interpreter(0x801E)
    cpu.state.v[1] = 0b1000_0001

    cpu.step()

    assert cpu.state.v[0] == 0b0000_0010
    assert cpu.state.v[0xF] == 1


def test_shift_in_place_quirk() -> None:
    quirks = QuirksConfig(shift_uses_vy=False)
    cpu = make_interpreter(0x8016, 0x801E, quirks=quirks)
    cpu.state.v[0] = 0b0100_0000
    cpu.state.v[1] = 0xFF

    cpu.step()
    assert cpu.state.v[0] == 0b0010_0000
    assert cpu.state.v[0xF] == 0

    cpu.step()
    assert cpu.state.v[0] == 0b0100_0000
    assert cpu.state.v[0xF] == 0


def test_set_index_and_add_to_index() -> None:
    cpu = make_interpreter(0xA123, 0xF01E)
    cpu.state.v[0] = 0x10
    cpu.state.v[0xF] = 0x55

    cpu.step()
    assert cpu.state.i == 0x123
    cpu.step()
    assert cpu.state.i == 0x133
    assert cpu.state.v[0xF] == 0x55


def test_add_to_index_overflow_flag_quirk() -> None:
    cpu = make_interpreter(0xAF00, 0xF01E, 0xA100, 0xF01E, quirks=QuirksConfig(index_overflow_flag=True))
    cpu.state.v[0] = 0x01

    cpu.step()
    cpu.step()
    assert cpu.state.i == 0xF01
    assert cpu.state.v[0xF] == 1

    cpu.step()
    cpu.step()
    assert cpu.state.v[0xF] == 0


def test_jump_with_offset_uses_v0() -> None:
    cpu = make_interpreter(0xB300)
    cpu.state.v[0] = 0x10
    cpu.state.v[3] = 0x20

    cpu.step()

    assert cpu.state.pc == 0x310


def test_jump_with_offset_vx_quirk() -> None:
    cpu = make_interpreter(0xB300, quirks=QuirksConfig(jump_offset_uses_vx=True))
    cpu.state.v[0] = 0x10
    cpu.state.v[3] = 0x20

    cpu.step()

    assert cpu.state.pc == 0x320


def test_random_is_masked() -> None:
    cpu = make_interpreter(0xC00F, 0xC100, rng=random.Random(1234))

    cpu.step()
    cpu.step()

    assert 0 <= cpu.state.v[0] <= 0x0F
    assert cpu.state.v[1] == 0


def test_random_is_reproducible_with_seed() -> None:
    first = make_interpreter(0xC0FF, rng=random.Random(7))
    second = make_interpreter(0xC0FF, rng=random.Random(7))

    first.step()
    second.step()

    assert first.state.v[0] == second.state.v[0]


def test_bcd_store() -> None:
    cpu = make_interpreter(0xF033)
    cpu.state.v[0] = 254
    cpu.state.i = 0x300

    cpu.step()

    assert cpu.memory.read_block(0x300, 3) == bytes((2, 5, 4))


def test_bulk_store_and_load_increment_index() -> None:
    cpu = make_interpreter(0xF255, 0xA300, 0xF265)
    cpu.state.i = 0x300
    cpu.state.v[0:3] = [0x11, 0x22, 0x33]

    cpu.step()
    assert cpu.memory.read_block(0x300, 3) == b"\x11\x22\x33"
    assert cpu.state.i == 0x303

    cpu.state.v[0:3] = [0, 0, 0]
    cpu.step()
    cpu.step()
    assert cpu.state.v[0:3] == [0x11, 0x22, 0x33]
    assert cpu.state.v[3] == 0
    assert cpu.state.i == 0x303


def test_bulk_store_without_index_increment() -> None:
    cpu = make_interpreter(0xF155, 0xF165, quirks=QuirksConfig(increment_index_on_bulk=False))
    cpu.state.i = 0x300
    cpu.state.v[0:2] = [0xAA, 0xBB]

    cpu.step()
    assert cpu.state.i == 0x300

    cpu.state.v[0:2] = [0, 0]
    cpu.step()
    assert cpu.state.v[0:2] == [0xAA, 0xBB]
    assert cpu.state.i == 0x300


def test_font_character_address() -> None:
    cpu = make_interpreter(0xF029)
    cpu.state.v[0] = 0xA

    cpu.step()

    assert cpu.state.i == 50
    assert cpu.memory.read(cpu.state.i) == 0xF0


def test_draw_sets_pixels_and_requests_render() -> None:
    cpu = make_interpreter(0xD015)
    cpu.state.i = 0x000  # glyph "0"
    cpu.state.v[0] = 0
    cpu.state.v[1] = 0

    cpu.step()

    assert cpu.render_pending
    assert cpu.state.v[0xF] == 0
    assert cpu.display.is_lit(0, 0)
    assert cpu.display.is_lit(3, 0)
    assert not cpu.display.is_lit(4, 0)
    assert cpu.display.is_lit(0, 1)
    assert not cpu.display.is_lit(1, 1)


def test_double_draw_restores_buffer_and_reports_collision() -> None:
    cpu = make_interpreter(0xD015, 0xD015)
    cpu.state.i = 0x005 * 3
    cpu.state.v[0] = 10
    cpu.state.v[1] = 7
    before = cpu.display.snapshot()

    cpu.step()
    assert cpu.state.v[0xF] == 0
    assert cpu.display.snapshot() != before

    cpu.step()
    assert cpu.state.v[0xF] == 1
    assert cpu.display.snapshot() == before


def test_draw_wraps_around_edges() -> None:
    cpu = make_interpreter(0xD012)
    cpu.memory.write(0x300, 0xFF)
    cpu.memory.write(0x301, 0xFF)
    cpu.state.i = 0x300
    cpu.state.v[0] = 60
    cpu.state.v[1] = 31

    cpu.step()

    assert cpu.display.is_lit(63, 31)
    assert cpu.display.is_lit(0, 31)
    assert cpu.display.is_lit(3, 0)
    assert not cpu.display.is_lit(4, 0)


def test_draw_past_end_of_memory_fails() -> None:
    cpu = make_interpreter(0xD01F)
    cpu.state.i = 0xFF8

    with pytest.raises(OutOfBoundsError):
        cpu.step()


def test_skip_if_key_down_and_up() -> None:
    keypad = Keypad()
    cpu = make_interpreter(0xE09E, 0x0000, 0xE0A1, keypad=keypad)
    cpu.state.v[0] = 0x5
    keypad.press(0x5)

    cpu.step()
    assert cpu.state.pc == 0x204

    cpu.step()
    assert cpu.state.pc == 0x206


def test_get_key_waits_until_pressed() -> None:
    keypad = Keypad()
    cpu = make_interpreter(0xF30A, keypad=keypad)

    for _ in range(5):
        assert cpu.step() is StepResult.AWAITING_KEY
        assert cpu.state.pc == PROGRAM_START

    keypad.press(0xB)
    assert cpu.step() is StepResult.EXECUTED
    assert cpu.state.pc == 0x202
    assert cpu.state.v[3] == 0xB


def test_timer_instructions() -> None:
    cpu = make_interpreter(0xF015, 0xF118, 0xF207)
    cpu.state.v[0] = 30
    cpu.state.v[1] = 40

    cpu.step()
    cpu.step()
    assert cpu.state.delay_timer.get() == 30
    assert cpu.state.sound_timer.get() == 40

    cpu.state.delay_timer.tick()
    cpu.step()
    assert cpu.state.v[2] == 29


def test_unknown_opcode_raises_decode_error() -> None:
    cpu = make_interpreter(0xFFFF)

    with pytest.raises(DecodeError) as excinfo:
        cpu.step()

    assert excinfo.value.opcode == 0xFFFF
    assert excinfo.value.address == 0x200
    assert "0xffff" in str(excinfo.value)
    assert cpu.state.pc == 0x200


@pytest.mark.parametrize("opcode", (0x0123, 0x5121, 0x800F, 0x9AB1, 0xE000, 0xF0FF))
def test_unmatched_patterns_raise(opcode: int) -> None:
    cpu = make_interpreter(opcode)
    with pytest.raises(DecodeError):
        cpu.step()


def test_unknown_opcode_skipped_when_not_strict() -> None:
    cpu = make_interpreter(0xFFFF, 0x6042, strict=False)

    assert cpu.step() is StepResult.SKIPPED
    assert cpu.state.pc == 0x202
    cpu.step()
    assert cpu.state.v[0] == 0x42


def test_fetch_past_end_of_memory_fails() -> None:
    cpu = make_interpreter(0x1FFF)
    cpu.step()

    with pytest.raises(OutOfBoundsError):
        cpu.step()


def test_reset_restores_power_on_state() -> None:
    cpu = make_interpreter(0x6A42, 0x00E0)
    cpu.step()
    cpu.step()

    cpu.reset()

    assert cpu.state.pc == 0x200
    assert cpu.state.v[0xA] == 0
    assert cpu.render_pending is False
    assert cpu.step_count == 0


def test_trace_records_steps() -> None:
    from pychip8.utils import TraceRecorder

    trace = TraceRecorder(4)
    cpu = make_interpreter(0x6012, 0x7001, trace=trace)

    cpu.step()
    cpu.step()

    entries = list(trace.entries())
    assert [entry.pc for entry in entries] == [0x200, 0x202]
    assert entries[1].v[0] == 0x12
    assert entries[1].mnemonic == "ADD"
