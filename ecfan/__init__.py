"""
EC Fan Control Package.

Sets laptop fan behaviour by writing fixed values to the embedded
controller's register file exposed by the ec_sys kernel module.
"""

__version__ = "0.1.0"

# Core components
from .config import ConfigManager
from .events import event_bus
from .ec import (
    ECAccessError,
    ECAccessProvider,
    ECError,
    ECWriteError,
    KernelECAccess,
    PreparedECAccess,
    RegisterWrite,
    RegisterWriter,
)
from .controller import FanController

# Commands
from .commands import (
    EnableManualControlCommand,
    SetCustomSpeedCommand,
    SetFanCurveCommand,
    SetFanModeCommand,
)

__all__ = [
    "ConfigManager",
    "event_bus",
    "ECError", "ECAccessError", "ECWriteError",
    "ECAccessProvider", "KernelECAccess", "PreparedECAccess",
    "RegisterWrite", "RegisterWriter",
    "FanController",
    "EnableManualControlCommand", "SetFanCurveCommand",
    "SetFanModeCommand", "SetCustomSpeedCommand",
    "__version__"
]
