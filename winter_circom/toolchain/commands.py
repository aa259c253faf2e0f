"""Execution of the external circuit toolchain (circom, snarkjs, node)."""

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from winter_circom.errors import CommandError
from winter_circom.logging_level import LoggingLevel

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "WINTER_CIRCOM_"


class Executable(Enum):
    """External programs the pipeline drives."""
    CIRCOM = "circom"
    SNARKJS = "snarkjs"
    NODE = "node"


@dataclass(frozen=True)
class ToolchainConfig:
    """Command used to start each executable."""
    circom: str = "circom"
    snarkjs: str = "snarkjs"
    node: str = "node"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ToolchainConfig":
        """Read WINTER_CIRCOM_CIRCOM, WINTER_CIRCOM_SNARKJS and WINTER_CIRCOM_NODE."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(**{
            exe.value: env.get(ENV_PREFIX + exe.name, getattr(defaults, exe.value))
            for exe in Executable
        })

    def command(self, executable: Executable) -> str:
        return getattr(self, executable.value)


def command_execution(
    executable: Executable,
    args: Sequence[Union[str, Path]],
    cwd: Optional[Union[str, Path]] = None,
    logging_level: LoggingLevel = LoggingLevel.DEFAULT,
    config: Optional[ToolchainConfig] = None,
) -> subprocess.CompletedProcess:
    """Run executable with args and fail on a non-zero exit status.

    Tool output is shown only at the verbose level; otherwise it is captured
    and stderr is attached to the CommandError.
    """
    config = config or ToolchainConfig.from_env()
    program = config.command(executable)
    str_args = [str(a) for a in args]
    capture = not logging_level.print_command_output()

    LOGGER.debug("Running %s %s (cwd=%s)", program, " ".join(str_args), cwd)
    try:
        result = subprocess.run(
            [program, *str_args],
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CommandError(program, str_args, reason=str(e)) from e

    if result.returncode != 0:
        reason = result.stderr.strip() if capture and result.stderr else None
        raise CommandError(program, str_args, returncode=result.returncode, reason=reason)
    return result
