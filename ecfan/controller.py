#!/usr/bin/env python3
"""
Fan control logic module.

Turns a subcommand into its EC write sequence and runs it after the
common preconditions.
"""

import logging
from typing import List

from .commands import (
    Command,
    EnableManualControlCommand,
    SetCustomSpeedCommand,
    SetFanCurveCommand,
    SetFanModeCommand,
)
from .config import ConfigManager
from .ec import ECAccessProvider, KernelECAccess, PreparedECAccess, RegisterWrite, RegisterWriter

SUBCOMMANDS = ("mode", "auto", "max", "custom")


class FanController:
    """
    Runs fan commands against the EC.

    Every run follows the same order:
    - prepare EC access (module loaded with write support, debugfs mounted)
    - enable manual fan control
    - the command's own writes

    A failure at any step raises and the remaining writes are not attempted.
    """

    def __init__(self, writer: RegisterWriter = None, access: ECAccessProvider = None,
                 config: ConfigManager = None):
        """Initialize the controller with dependencies."""
        self.config = config or ConfigManager()
        self.writer = writer or RegisterWriter(self.config.ec_io_path)
        if access is None:
            access = KernelECAccess(self.config) if self.config.prepare_access else PreparedECAccess()
        self.access = access

    def build_command(self, subcommand: str, *args) -> Command:
        """
        Map a subcommand and its arguments to a command. Nothing is written.

        Raises:
            ValueError: unknown subcommand, wrong argument count or bad argument
        """
        if subcommand not in SUBCOMMANDS:
            raise ValueError(f"unknown command {subcommand!r}")

        expected = {"mode": 1, "auto": 0, "max": 0, "custom": 2}[subcommand]
        if len(args) != expected:
            raise ValueError(
                f"'{subcommand}' takes {expected} argument(s), got {len(args)}"
            )

        if subcommand == "mode":
            return SetFanCurveCommand(self.writer, args[0])
        if subcommand == "custom":
            return SetCustomSpeedCommand(self.writer, *args)
        return SetFanModeCommand(self.writer, subcommand)

    def apply(self, command: Command) -> List[RegisterWrite]:
        """Prepare access, enable manual control, then execute command."""
        self.access.ensure_ready()

        writes = EnableManualControlCommand(self.writer).execute()
        writes.extend(command.execute())
        logging.info("%s applied (%d write(s))", type(command).__name__, len(writes))
        return writes

    def run(self, subcommand: str, *args) -> List[RegisterWrite]:
        """Validate, then apply. Returns the writes in the order performed."""
        return self.apply(self.build_command(subcommand, *args))
