"""Process runtime helpers: platform probing and command line parsing"""

from .runtime_info import RuntimeInfo
from .cli import CommandLineOptions, parse_arguments, build_parser

__all__ = ["RuntimeInfo", "CommandLineOptions", "parse_arguments", "build_parser"]
