"""Toolchain - artifact paths and external command execution."""

from winter_circom.toolchain.commands import (
    Executable,
    ToolchainConfig,
    command_execution,
)
from winter_circom.toolchain.paths import CircuitPaths, check_file

__all__ = [
    "CircuitPaths",
    "Executable",
    "ToolchainConfig",
    "check_file",
    "command_execution",
]
