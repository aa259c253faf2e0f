"""Verbosity of the circuit pipeline."""

import logging
from enum import Enum


class LoggingLevel(Enum):
    """How much the pipeline reports while it runs.

    QUIET announces nothing, DEFAULT announces the big steps (compiling,
    key generation, proving), VERBOSE also shows external tool output.
    """
    QUIET = "quiet"
    DEFAULT = "default"
    VERBOSE = "verbose"

    def print_big_steps(self) -> bool:
        return self is not LoggingLevel.QUIET

    def print_command_output(self) -> bool:
        return self is LoggingLevel.VERBOSE

    def logging_level(self) -> int:
        """Matching level for logging.basicConfig."""
        return {
            LoggingLevel.QUIET: logging.WARNING,
            LoggingLevel.DEFAULT: logging.INFO,
            LoggingLevel.VERBOSE: logging.DEBUG,
        }[self]
