"""Command-line entry point for the CHIP-8 interpreter."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from pychip8.cpu import PRESETS
from pychip8.system import DEFAULT_INSTRUCTIONS_PER_SECOND
from pychip8.ui.app import AppConfig, Chip8App
from pychip8.utils import set_categories
from pychip8.video import PALETTES


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run.py",
        description="CHIP-8 interpreter",
    )
    parser.add_argument(
        "program",
        type=Path,
        help="Path to the raw CHIP-8 program image (loaded at 0x200)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=10,
        help="Integer window scale factor (default: 10)",
    )
    parser.add_argument(
        "--fullscreen",
        action="store_true",
        help="Launch the interpreter in fullscreen mode",
    )
    parser.add_argument(
        "--speed",
        type=int,
        default=DEFAULT_INSTRUCTIONS_PER_SECOND,
        help=f"Instructions per second (default: {DEFAULT_INSTRUCTIONS_PER_SECOND})",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="vip",
        help="Quirk preset the individual quirk flags are applied on top of",
    )
    parser.add_argument(
        "--shift-vx",
        action="store_true",
        help="8XY6/8XYE shift VX in place instead of reading VY",
    )
    parser.add_argument(
        "--no-index-increment",
        action="store_true",
        help="FX55/FX65 leave I unchanged",
    )
    parser.add_argument(
        "--jump-vx",
        action="store_true",
        help="BNNN adds VX instead of V0",
    )
    parser.add_argument(
        "--index-overflow",
        action="store_true",
        help="FX1E sets VF when I passes 0x0F00",
    )
    parser.add_argument(
        "--skip-unknown",
        action="store_true",
        help="Skip unknown opcodes instead of halting",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the CXNN random number generator",
    )
    parser.add_argument(
        "--palette",
        choices=sorted(PALETTES),
        default="mono",
        help="Display colours",
    )
    parser.add_argument(
        "--debug",
        metavar="CATEGORIES",
        default=None,
        help="Comma separated debug categories (overrides CHIP8_DEBUG)",
    )
    return parser


def build_config(args: argparse.Namespace) -> AppConfig:
    quirks = PRESETS[args.preset]
    overrides: dict[str, bool] = {}
    if args.shift_vx:
        overrides["shift_uses_vy"] = False
    if args.no_index_increment:
        overrides["increment_index_on_bulk"] = False
    if args.jump_vx:
        overrides["jump_offset_uses_vx"] = True
    if args.index_overflow:
        overrides["index_overflow_flag"] = True
    if overrides:
        quirks = replace(quirks, **overrides)

    return AppConfig(
        program_path=args.program,
        scale=args.scale,
        fullscreen=args.fullscreen,
        instructions_per_second=args.speed,
        quirks=quirks,
        skip_unknown=args.skip_unknown,
        seed=args.seed,
        palette=PALETTES[args.palette],
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.debug is not None:
        set_categories(args.debug)

    if not args.program.exists():
        parser.error(f"Program file not found: {args.program}")
    if args.scale <= 0:
        parser.error("--scale must be positive")
    if args.speed <= 0:
        parser.error("--speed must be positive")

    app = Chip8App(build_config(args))
    try:
        app.run()
    except RuntimeError as exc:
        parser.exit(1, f"run.py: {exc}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
