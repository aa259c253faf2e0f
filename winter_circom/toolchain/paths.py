"""Artifact locations of one verification circuit.

Everything produced for circuit `<name>` lives in `target/circom/<name>/`
below the project root. The user supplies the powers-of-tau transcript and
the AIR constraints template:

    final.ptau
    circuits/verify.circom
    circuits/air/<name>.circom
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from winter_circom.errors import MissingPreconditionError


@dataclass(frozen=True)
class CircuitPaths:
    """Paths of the inputs and outputs of the circuit named circuit_name."""
    root: Path
    circuit_name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))

    # --- User Inputs ---

    @property
    def ptau(self) -> Path:
        return self.root / "final.ptau"

    @property
    def air_template(self) -> Path:
        return self.root / "circuits" / "air" / f"{self.circuit_name}.circom"

    # --- Generated Artifacts ---

    @property
    def output_dir(self) -> Path:
        return self.root / "target" / "circom" / self.circuit_name

    @property
    def verifier_circom(self) -> Path:
        return self.output_dir / "verifier.circom"

    @property
    def r1cs(self) -> Path:
        return self.output_dir / "verifier.r1cs"

    @property
    def wasm_dir(self) -> Path:
        return self.output_dir / "verifier_js"

    @property
    def wasm(self) -> Path:
        return self.wasm_dir / "verifier.wasm"

    @property
    def witness_generator(self) -> Path:
        return self.wasm_dir / "generate_witness.js"

    @property
    def initial_zkey(self) -> Path:
        return self.output_dir / "verifier_0.zkey"

    @property
    def zkey(self) -> Path:
        return self.output_dir / "verifier.zkey"

    @property
    def verification_key(self) -> Path:
        return self.output_dir / "verification_key.json"

    @property
    def solidity_verifier(self) -> Path:
        return self.output_dir / "verifier.sol"

    @property
    def input_json(self) -> Path:
        return self.output_dir / "input.json"

    @property
    def witness(self) -> Path:
        return self.output_dir / "witness.wtns"

    @property
    def proof(self) -> Path:
        return self.output_dir / "proof.json"

    @property
    def public(self) -> Path:
        return self.output_dir / "public.json"

    def relative(self, path: Path) -> str:
        """Path of a generated artifact as seen from output_dir, the tools' working directory."""
        return str(path.relative_to(self.output_dir))


def check_file(path: Union[str, Path], hint: Optional[str] = None) -> None:
    """Raise MissingPreconditionError unless path is an existing file."""
    if not Path(path).is_file():
        raise MissingPreconditionError(path, hint)
