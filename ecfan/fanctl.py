#!/usr/bin/env python3
"""EC Fan Control

Sets the fan behaviour of the laptop by writing to its embedded controller
through the ec_sys debugfs interface.

Commands:
- mode quiet|default|performance: select a firmware fan curve.
- auto: let the EC drive the fans.
- max: run both fans at full speed.
- custom GPU CPU: fixed GPU and CPU fan speeds in percent.

Every command first enables manual fan control. Requires root.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ConfigManager
from .controller import FanController
from .ec import ECError, RegisterWrite
from .events import REGISTER_WRITTEN, event_bus
from .registers import FAN_CURVES, MAX_PERCENT, MIN_PERCENT


class UsageParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def percentage(value: str) -> int:
    """argparse type for a fan speed in percent."""
    try:
        percent = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer percentage")
    if not MIN_PERCENT <= percent <= MAX_PERCENT:
        raise argparse.ArgumentTypeError(
            f"{percent} is outside {MIN_PERCENT}-{MAX_PERCENT}"
        )
    return percent


def setup_logging(log_file_path: Optional[str] = None, log_level_str: str = "INFO"):
    """Configure logging to stderr, and to a file when one is configured."""
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s [%(levelname)s] %(module)s: %(message)s',
        datefmt='%H:%M:%S',
        handlers=handlers
    )
    logging.debug(f"Logging initialized at level {log_level_str.upper()}")


def build_parser() -> argparse.ArgumentParser:
    parser = UsageParser(
        prog="ecfan",
        description="Laptop EC fan control.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML configuration file. If not provided, searches in standard locations."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level."
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    mode = sub.add_parser("mode", help="Select a fan curve profile.")
    mode.add_argument("fan_mode", choices=list(FAN_CURVES), metavar="{quiet,default,performance}")

    sub.add_parser("auto", help="Automatic fan control by the EC.")
    sub.add_parser("max", help="Both fans at maximum speed.")

    custom = sub.add_parser("custom", help="Fixed fan speeds in percent.")
    custom.add_argument("gpu_percent", type=percentage, help="GPU (left) fan speed, 0-100.")
    custom.add_argument("cpu_percent", type=percentage, help="CPU (right) fan speed, 0-100.")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments. Usage errors exit with status 1."""
    return build_parser().parse_args(argv)


def find_config_file(specified_path: str = None) -> Optional[str]:
    """
    Find the configuration file.
    Searches in order: specified path, package directory, project root, /etc, user's config.
    """
    if specified_path:
        return specified_path if os.path.exists(specified_path) else None

    package_dir = Path(__file__).resolve().parent

    search_paths = [
        package_dir / "config.yaml",
        package_dir.parent / "config.yaml",
        Path("/etc/ecfan/config.yaml"),
        Path.home() / ".config/ecfan/config.yaml"
    ]

    for path in search_paths:
        if path.exists():
            return str(path)

    return None


def command_args(args: argparse.Namespace) -> tuple:
    """Positional arguments of the chosen subcommand."""
    if args.command == "mode":
        return (args.fan_mode,)
    if args.command == "custom":
        return (args.gpu_percent, args.cpu_percent)
    return ()


def describe(args: argparse.Namespace) -> str:
    if args.command == "mode":
        return f"Fan mode set to {args.fan_mode}."
    if args.command == "auto":
        return "Fans set to automatic control."
    if args.command == "max":
        return "Fans set to maximum speed."
    return f"Custom fan speeds set: GPU {args.gpu_percent}%, CPU {args.cpu_percent}%."


def _log_write(write: RegisterWrite) -> None:
    logging.debug("EC write %s", write)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main application entry point.

    Order matters: arguments are validated before the privilege check, and
    both happen before anything touches the EC.
    """
    args = parse_args(argv)

    if os.geteuid() != 0:
        sys.exit("[ERR] This command must be run as root to write EC registers.")

    config_file_path = find_config_file(args.config)
    if args.config and not config_file_path:
        sys.exit(f"[ERR] Configuration file not found: {args.config}")

    try:
        config = ConfigManager(config_file_path)
    except (FileNotFoundError, ValueError) as e:
        sys.exit(f"[ERR] {e}")

    try:
        setup_logging(config.log_file, args.log_level)
    except OSError as e:
        sys.exit(f"[ERR] Unable to open log file: {e}")
    if config_file_path:
        logging.debug(f"Using configuration from: {config_file_path}")

    controller = FanController(config=config)

    event_bus.subscribe(REGISTER_WRITTEN, _log_write)
    try:
        writes: List[RegisterWrite] = controller.run(args.command, *command_args(args))
    except ValueError as e:
        sys.exit(f"[ERR] {e}")
    except ECError as e:
        logging.error("%s", e)
        sys.exit(1)
    finally:
        event_bus.unsubscribe(REGISTER_WRITTEN, _log_write)

    for write in writes:
        print(f"EC {write}")
    print(describe(args))


if __name__ == "__main__":
    main()
