"""Category-filtered diagnostics for the interpreter.

Categories come from the comma separated ``CHIP8_DEBUG`` environment
variable (``cpu``, ``input``, ``video``, ``perf`` ...) or from
:func:`set_categories`.  ``all`` enables every category.  Messages go to
stderr so they never mix with program output.
"""

from __future__ import annotations

import os
import sys

ENV_VAR = "CHIP8_DEBUG"
ALL = "all"

_CATEGORIES: frozenset[str] | None = None


def parse_categories(value: str | None) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(name.strip().lower() for name in value.split(",") if name.strip())


def set_categories(value: str | None) -> frozenset[str]:
    """Replace the active categories, bypassing the environment."""

    global _CATEGORIES
    _CATEGORIES = parse_categories(value)
    return _CATEGORIES


def reload_categories() -> frozenset[str]:
    """Re-read the environment variable."""

    return set_categories(os.environ.get(ENV_VAR))


def _active() -> frozenset[str]:
    if _CATEGORIES is None:
        return reload_categories()
    return _CATEGORIES


def debug_enabled(category: str | None = None) -> bool:
    active = _active()
    if not active:
        return False
    return category is None or ALL in active or category.lower() in active


def debug_log(category: str, message: str, *args) -> None:
    if not debug_enabled(category):
        return
    if args:
        try:
            message = message % args
        except (TypeError, ValueError):
            message = f"{message} {args!r}"
    sys.stderr.write(f"chip8[{category}]: {message}\n")
