#!/usr/bin/env python3
"""
Embedded controller access.

Prepares the kernel interface that exposes raw EC memory (ec_sys through
debugfs) and writes bytes into the EC register file in place.
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

from .config import ConfigManager
from .events import REGISTER_WRITTEN, event_bus

# ec_sys exposes the full 256 byte EC address space
EC_SPACE_SIZE = 256


class ECError(Exception):
    """Base class for EC access errors."""


class ECAccessError(ECError):
    """The EC interface could not be made available for writing."""


class ECWriteError(ECError):
    """A write to the EC register file failed."""


@dataclass(frozen=True)
class RegisterWrite:
    """One completed write: values[0] landed at offset, values[1] at offset + 1, ..."""
    offset: int
    values: Tuple[int, ...]

    def __str__(self) -> str:
        if len(self.values) == 1:
            where = f"0x{self.offset:02X} ({self.offset})"
        else:
            last = self.offset + len(self.values) - 1
            where = f"0x{self.offset:02X}-0x{last:02X} ({self.offset}-{last})"
        return f"{where} = " + " ".join(f"0x{v:02X}" for v in self.values)


###############################################################################
# Access providers
###############################################################################

class ECAccessProvider(ABC):
    """Makes the EC register file writable before any write happens."""

    @abstractmethod
    def ensure_ready(self) -> None:
        """
        Prepare EC access. Safe to call on every run.

        Raises:
            ECAccessError: if the interface cannot be prepared
        """
        pass


class PreparedECAccess(ECAccessProvider):
    """For systems where ec_sys is loaded and debugfs mounted out of band."""

    def ensure_ready(self) -> None:
        logging.debug("EC access preparation skipped")


class KernelECAccess(ECAccessProvider):
    """
    Loads the EC module with write support and mounts debugfs.

    A module already loaded without write support is unloaded and loaded
    again with the configured options; one loaded with write support is
    left alone.
    """

    def __init__(self, config: ConfigManager = None, sysfs_module_root: str = "/sys/module"):
        self.config = config or ConfigManager()
        self.sysfs_module_root = sysfs_module_root

    def ensure_ready(self) -> None:
        self._load_module()
        self._mount_debugfs()

        io_path = self.config.ec_io_path
        if not os.path.exists(io_path):
            raise ECAccessError(f"EC register file not found: {io_path}")

    def _load_module(self) -> None:
        module = self.config.ec_module
        if os.path.isdir(os.path.join(self.sysfs_module_root, module)):
            if self._write_support_enabled():
                logging.debug("%s already loaded with write support", module)
                return
            logging.info("Reloading %s with write support", module)
            self._run(["modprobe", "-r", module])
        else:
            logging.info("Loading %s", module)
        self._run(["modprobe", module] + self.config.ec_module_options)

    def _write_support_enabled(self) -> bool:
        param = os.path.join(
            self.sysfs_module_root, self.config.ec_module, "parameters", "write_support"
        )
        try:
            with open(param) as f:
                return f.read().strip() in ("Y", "1")
        except OSError:
            return False

    def _mount_debugfs(self) -> None:
        mount_point = self.config.debugfs_path
        if os.path.ismount(mount_point):
            return
        logging.info("Mounting debugfs on %s", mount_point)
        self._run(["mount", "-t", "debugfs", "none", mount_point])

    @staticmethod
    def _run(cmd: List[str]) -> None:
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ECAccessError(f"{cmd[0]} not found: {e}") from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise ECAccessError(f"'{' '.join(cmd)}' failed: {detail}") from e


###############################################################################
# Register writer
###############################################################################

class RegisterWriter:
    """
    Writes bytes into the EC register file.

    The file is opened r+b and written in place at the given offset, so its
    length and every other offset are left untouched.
    """

    def __init__(self, path: str):
        self.path = path

    def write_byte(self, offset: int, value: int) -> RegisterWrite:
        """Write a single byte at offset."""
        return self.write_bytes(offset, value)

    def write_bytes(self, offset: int, *values: int) -> RegisterWrite:
        """
        Write consecutive bytes starting at offset.

        Raises:
            ValueError: for a negative offset, no values, or a value outside 0-255
            ECWriteError: if the file is missing, unwritable, or too short
        """
        if not values:
            raise ValueError("no values to write")
        if offset < 0:
            raise ValueError(f"negative EC offset: {offset}")
        for value in values:
            if not 0 <= value <= 0xFF:
                raise ValueError(f"EC register value out of range: {value}")

        data = bytes(values)
        try:
            with open(self.path, "r+b") as f:
                size = os.fstat(f.fileno()).st_size or EC_SPACE_SIZE
                if offset + len(data) > size:
                    raise ECWriteError(
                        f"Write of {len(data)} byte(s) at 0x{offset:02X} exceeds "
                        f"{self.path} ({size} bytes)"
                    )
                f.seek(offset)
                f.write(data)
        except OSError as e:
            raise ECWriteError(f"Unable to write {self.path} at 0x{offset:02X}: {e}") from e

        record = RegisterWrite(offset, tuple(values))
        event_bus.publish(REGISTER_WRITTEN, record)
        return record
