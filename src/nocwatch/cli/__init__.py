"""
CLI commands for nocwatch.
"""

from nocwatch.cli.generate import generate_command
from nocwatch.cli.main import build_parser, main
from nocwatch.cli.validate import validate_command

__all__ = [
    "build_parser",
    "generate_command",
    "main",
    "validate_command",
]
