"""Error taxonomy for circuit generation and proof translation.

Every failure surfaced by this package is a subclass of WinterCircomError, so
callers can catch the whole family at once or pick a specific kind:

    MissingPreconditionError   a required input file is absent
    ProverError                the external STARK prover failed
    InvalidProofError          the STARK proof failed re-verification
    WinterCircomIOError        directory/file creation or write failed
    InvalidConfigurationError  options that cannot produce a valid circuit
    ProofShapeError            proof and circuit parameters do not match
    CommandError               an external tool could not run or failed
"""

from pathlib import Path
from typing import Optional, Union


class WinterCircomError(Exception):
    """Base class for all errors raised by winter_circom."""


class MissingPreconditionError(WinterCircomError):
    """A file produced by an earlier step (or supplied by the user) is missing."""

    def __init__(self, path: Union[str, Path], hint: Optional[str] = None):
        self.path = Path(path)
        self.hint = hint
        message = f"missing file: {self.path}"
        if hint:
            message += f" ({hint})"
        super().__init__(message)


class ProverError(WinterCircomError):
    """The external STARK prover raised while building the proof."""


class InvalidProofError(WinterCircomError):
    """The STARK proof did not pass independent verification."""


class WinterCircomIOError(WinterCircomError):
    """Wraps an OSError with a short description of the failed operation."""

    def __init__(self, io_error: OSError, comment: Optional[str] = None):
        self.io_error = io_error
        self.comment = comment
        message = f"I/O error: {io_error}"
        if comment:
            message += f" (while {comment})"
        super().__init__(message)


class InvalidConfigurationError(WinterCircomError, ValueError):
    """Proof options or derived sizes that cannot describe a valid circuit."""


class ProofShapeError(InvalidConfigurationError):
    """A proof does not have the array-length profile its circuit expects."""


class CommandError(WinterCircomError):
    """An external executable (circom, snarkjs, node) failed."""

    def __init__(self, executable: str, args: list[str], returncode: Optional[int] = None,
                 reason: Optional[str] = None):
        self.executable = executable
        self.args_list = list(args)
        self.returncode = returncode
        command = " ".join([executable, *self.args_list])
        if returncode is not None:
            message = f"command `{command}` exited with status {returncode}"
        else:
            message = f"command `{command}` could not be started"
        if reason:
            message += f": {reason}"
        super().__init__(message)
