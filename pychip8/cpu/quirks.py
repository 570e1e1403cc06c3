"""Compatibility toggles for behaviour that differs between CHIP-8 implementations."""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class QuirksConfig:
    """Named switches consulted by the interpreter.

    - ``shift_uses_vy``: ``8XY6``/``8XYE`` shift ``Vy`` into ``Vx`` (COSMAC VIP)
      instead of shifting ``Vx`` in place.
    - ``increment_index_on_bulk``: ``FX55``/``FX65`` leave ``I`` pointing past the
      last byte transferred.
    - ``jump_offset_uses_vx``: ``BNNN`` adds ``Vx`` (SUPER-CHIP ``BXNN``) instead of ``V0``.
    - ``index_overflow_flag``: ``FX1E`` sets ``VF`` when ``I`` moves past ``0x0F00``.
    """

    shift_uses_vy: bool = True
    increment_index_on_bulk: bool = True
    jump_offset_uses_vx: bool = False
    index_overflow_flag: bool = False

    def describe(self) -> str:
        enabled = [item.name for item in fields(self) if getattr(self, item.name)]
        return ",".join(enabled) or "-"


COSMAC_VIP = QuirksConfig()
SUPER_CHIP = QuirksConfig(
    shift_uses_vy=False,
    increment_index_on_bulk=False,
    jump_offset_uses_vx=True,
)

PRESETS: dict[str, QuirksConfig] = {
    "vip": COSMAC_VIP,
    "schip": SUPER_CHIP,
}
