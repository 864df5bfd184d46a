"""
Command line parsing

Numeric flags are read as strings and converted here: a value that does not
parse is reported as a warning and the configured default is kept.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import List, Optional

from models.enums import LogCategory
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)


@dataclass
class CommandLineOptions:
    """CLI overrides. None means: keep the value from the config file."""
    target_count: Optional[int] = None
    seed: Optional[int] = None
    host: Optional[str] = None
    port: Optional[int] = None
    config_path: Optional[str] = None
    log_level: Optional[str] = None
    offline: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="traffic-manager",
        description="Spawn simulator traffic and keep it under supervision until interrupted",
    )
    parser.add_argument("-n", dest="target_count", metavar="COUNT",
                        help="Number of vehicles to be spawned (0 = every spawn point)")
    parser.add_argument("-s", dest="seed", metavar="SEED",
                        help="System randomization seed integer (negative = clock)")
    parser.add_argument("--host", dest="host", help="Simulator host")
    parser.add_argument("-p", "--port", dest="port", metavar="PORT", help="Simulator port")
    parser.add_argument("--config", dest="config_path", metavar="PATH",
                        help="YAML configuration file")
    parser.add_argument("--log-level", dest="log_level", choices=["DEBUG", "INFO", "WARN", "ERROR"],
                        type=str.upper, help="Minimum log level")
    parser.add_argument("--offline", action="store_true",
                        help="Run against the in-process simulated world")
    return parser


def _parse_int(raw: Optional[str], flag: str, minimum: Optional[int] = None) -> Optional[int]:
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        log.warn(f"Failed to parse argument {flag}, choosing defaults", value=raw)
        return None
    if minimum is not None and value < minimum:
        log.warn(f"Argument {flag} must be >= {minimum}, choosing defaults", value=raw)
        return None
    return value


def parse_arguments(argv: Optional[List[str]] = None) -> CommandLineOptions:
    """
    Parse argv into CommandLineOptions.

    -h/--help prints usage and raises SystemExit(0) (argparse behaviour).
    """
    args = build_parser().parse_args(argv)

    return CommandLineOptions(
        target_count=_parse_int(args.target_count, "-n", minimum=0),
        seed=_parse_int(args.seed, "-s"),
        host=args.host,
        port=_parse_int(args.port, "-p", minimum=1),
        config_path=args.config_path,
        log_level=args.log_level,
        offline=args.offline,
    )
