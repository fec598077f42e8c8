#!/usr/bin/env python3
"""
Command pattern implementation for EC fan control actions.

Each command owns one fixed write sequence against the register map.
"""

from abc import ABC, abstractmethod
from typing import List

from .ec import RegisterWrite, RegisterWriter
from .registers import (
    CPU_FAN_OFFSET,
    FAN_CURVE_OFFSET,
    FAN_CURVES,
    FAN_MODES,
    GPU_FAN_OFFSET,
    MANUAL_CONTROL_OFFSET,
    MANUAL_CONTROL_ON,
    percent_to_byte,
)


class Command(ABC):
    """Base command interface for the Command pattern."""

    def __init__(self, writer: RegisterWriter):
        self.writer = writer

    @abstractmethod
    def execute(self) -> List[RegisterWrite]:
        """Perform the writes, in order, and return them."""
        pass


class EnableManualControlCommand(Command):
    """Hands fan control over from the EC firmware."""

    def execute(self) -> List[RegisterWrite]:
        return [self.writer.write_byte(MANUAL_CONTROL_OFFSET, MANUAL_CONTROL_ON)]


class SetFanCurveCommand(Command):
    """Selects one of the firmware fan curve profiles."""

    def __init__(self, writer: RegisterWriter, curve: str):
        """
        Initialize the command.

        Args:
            writer: Register writer for the EC io file
            curve: 'quiet', 'default' or 'performance'

        Raises:
            ValueError: for an unknown curve name
        """
        super().__init__(writer)
        if curve not in FAN_CURVES:
            raise ValueError(
                f"unknown fan mode {curve!r} (choose from {', '.join(FAN_CURVES)})"
            )
        self.curve = curve

    def execute(self) -> List[RegisterWrite]:
        return [self.writer.write_byte(FAN_CURVE_OFFSET, FAN_CURVES[self.curve])]


class SetFanModeCommand(Command):
    """Switches the fan mode selector to 'auto' or 'max'."""

    def __init__(self, writer: RegisterWriter, mode: str):
        super().__init__(writer)
        # custom needs speeds, see SetCustomSpeedCommand
        if mode not in FAN_MODES or mode == "custom":
            raise ValueError(f"unknown fan control mode {mode!r}")
        self.mode = FAN_MODES[mode]

    def execute(self) -> List[RegisterWrite]:
        return [self.writer.write_bytes(self.mode.offset, *self.mode.selector)]


class SetCustomSpeedCommand(Command):
    """Puts the fans in custom mode and sets both speeds directly."""

    def __init__(self, writer: RegisterWriter, gpu_percent: int, cpu_percent: int):
        """
        Initialize the command.

        Both percentages are converted here, so an invalid one fails before
        anything is written.

        Args:
            writer: Register writer for the EC io file
            gpu_percent: GPU (left) fan speed, 0-100
            cpu_percent: CPU (right) fan speed, 0-100
        """
        super().__init__(writer)
        self.gpu_speed = percent_to_byte(gpu_percent)
        self.cpu_speed = percent_to_byte(cpu_percent)

    def execute(self) -> List[RegisterWrite]:
        custom = FAN_MODES["custom"]
        return [
            self.writer.write_bytes(custom.offset, *custom.selector),
            self.writer.write_byte(GPU_FAN_OFFSET, self.gpu_speed),
            self.writer.write_byte(CPU_FAN_OFFSET, self.cpu_speed),
        ]
