#!/usr/bin/env python3
"""
Configuration manager for the EC fan control tool.

Handles loading and accessing configuration from an optional YAML file.
Every setting has a default matching a stock Linux install, so running
without a config file is the normal case.
"""

import os
import shlex
from typing import List, Optional

import yaml


class ConfigManager:
    """
    Manages loading and accessing configuration from YAML file.
    """

    _instance = None

    def __new__(cls, config_path=None):
        """Singleton pattern to ensure only one config instance exists."""
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path=None):
        """Initialize the configuration manager with an optional config file path."""
        if self._initialized:
            return

        self.config_path = config_path
        self._config = {}

        if config_path:
            self.reload()

        self._initialized = True

    def reload(self) -> None:
        """Reload configuration from YAML file."""
        if not self.config_path or not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Error loading configuration: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Error loading configuration: expected a mapping in {self.config_path}"
            )

        options = data.get("ec_module_options", ["write_support=1"])
        if isinstance(options, str):
            options = shlex.split(options)
        elif not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise ValueError(
                f"Error loading configuration: ec_module_options must be a list of strings, got {options!r}"
            )
        data["ec_module_options"] = options

        if not isinstance(data.get("prepare_access", True), bool):
            raise ValueError(
                f"Error loading configuration: prepare_access must be true or false, "
                f"got {data['prepare_access']!r}"
            )
        self._config = data

    @property
    def ec_io_path(self) -> str:
        """Byte-addressable EC register file exposed by ec_sys."""
        return self._config.get("ec_io_path", "/sys/kernel/debug/ec/ec0/io")

    @property
    def debugfs_path(self) -> str:
        """Mount point of debugfs."""
        return self._config.get("debugfs_path", "/sys/kernel/debug")

    @property
    def ec_module(self) -> str:
        """Kernel module exposing the EC through debugfs."""
        return self._config.get("ec_module", "ec_sys")

    @property
    def ec_module_options(self) -> List[str]:
        """Options passed to modprobe when (re)loading the EC module."""
        return list(self._config.get("ec_module_options", ["write_support=1"]))

    @property
    def prepare_access(self) -> bool:
        """Load the module and mount debugfs before writing."""
        return self._config.get("prepare_access", True)

    @property
    def log_file(self) -> Optional[str]:
        """Optional log file, in addition to stderr."""
        return self._config.get("log_file")
