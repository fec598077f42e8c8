#!/usr/bin/env python3
"""
EC register map.

Offsets and byte values understood by the embedded controller of the
supported laptop. Everything here is fixed by the firmware.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


###############################################################################
# Offsets
###############################################################################

MANUAL_CONTROL_OFFSET = 0x03   # manual fan control enable
FAN_MODE_OFFSET = 0x21         # selector pair, covers 0x21 and 0x22
FAN_CURVE_OFFSET = 0x2C        # fan curve profile
GPU_FAN_OFFSET = 0x36          # left fan
CPU_FAN_OFFSET = 0x3A          # right fan

MANUAL_CONTROL_ON = 0x11

MIN_PERCENT = 0
MAX_PERCENT = 100


@dataclass(frozen=True)
class FanMode:
    """A fan control mode and the pair of bytes selecting it."""
    selector: Tuple[int, int]

    @property
    def offset(self) -> int:
        """First of the two selector registers; selector[1] goes to offset + 1."""
        return FAN_MODE_OFFSET


FAN_CURVES: Dict[str, int] = {
    "quiet": 0x00,
    "default": 0x01,
    "performance": 0x04,
}

FAN_MODES: Dict[str, FanMode] = {
    "auto": FanMode(selector=(0x10, 0x04)),
    "max": FanMode(selector=(0x20, 0x08)),
    "custom": FanMode(selector=(0x30, 0x0C)),
}


def percent_to_byte(percent: int) -> int:
    """
    Convert a fan speed percentage to the EC speed byte.

    The EC takes the percentage itself (100% is 0x64), not a 0-255 duty cycle.

    Raises:
        ValueError: if percent is not an integer in [0, 100]
    """
    if isinstance(percent, bool) or not isinstance(percent, int):
        raise ValueError(f"fan speed must be an integer percentage, got {percent!r}")
    if not MIN_PERCENT <= percent <= MAX_PERCENT:
        raise ValueError(
            f"fan speed must be between {MIN_PERCENT} and {MAX_PERCENT}, got {percent}"
        )
    return percent
