"""Circuit pipeline: generate, prove and verify with the circom toolchain.

    circom_create  -> verifier.circom, compiled circuit and Groth16 keys
    circom_prove   -> STARK proof, input.json, witness, Groth16 proof
    circom_verify  -> snarkjs verification of the Groth16 proof

The Groth16 proof does not stand alone: the out-of-domain frame it exposes as
public signals must still be checked against the AIR by the verifier.
"""

import logging
import secrets
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence, Union

from winter_circom.errors import (
    InvalidProofError,
    ProofShapeError,
    ProverError,
    WinterCircomIOError,
)
from winter_circom.logging_level import LoggingLevel
from winter_circom.protocol.air import PublicInputs
from winter_circom.protocol.options import ProofOptions
from winter_circom.protocol.params import CircuitParameters, assemble_parameters, write_circom_main
from winter_circom.protocol.proof import StarkProof, validate_proof_structure
from winter_circom.protocol.security import DEFAULT_SECURITY_BITS
from winter_circom.protocol.witness import serialize_proof, write_input_json
from winter_circom.toolchain import (
    CircuitPaths,
    Executable,
    ToolchainConfig,
    check_file,
    command_execution,
)

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


class StarkProver(Protocol):
    """External STARK prover producing proofs over f256 with Poseidon."""

    def get_pub_inputs(self, trace: Any) -> Union[PublicInputs, List[int]]:
        ...

    def prove(self, trace: Any) -> StarkProof:
        ...

    def verify(self, proof: StarkProof, public_inputs: Union[PublicInputs, List[int]]) -> bool:
        ...


def _announce(logging_level: LoggingLevel, message: str) -> None:
    if logging_level.print_big_steps():
        LOGGER.info(message)


def _make_output_dir(paths: CircuitPaths) -> None:
    try:
        paths.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WinterCircomIOError(e, "creating circom output directory") from e


# --- Circuit Generation ---

def circom_create(
    options: ProofOptions,
    circuit_name: str,
    num_public_inputs: int,
    root: PathLike = ".",
    security_bits: int = DEFAULT_SECURITY_BITS,
    compile: bool = True,
    logging_level: LoggingLevel = LoggingLevel.DEFAULT,
    config: Optional[ToolchainConfig] = None,
) -> CircuitParameters:
    """Generate verifier.circom for options and, unless compile is False, build its keys.

    Requires `final.ptau` and `circuits/air/<circuit_name>.circom` below root;
    both are checked before anything is written.
    """
    paths = CircuitPaths(root, circuit_name)
    check_file(paths.ptau, "powers of tau phase 1 transcript, prepared for phase 2")
    check_file(paths.air_template, "transition constraints and assertions of the AIR")

    params = assemble_parameters(options, num_public_inputs, security_bits)

    _announce(logging_level, "Generating Circom code...")
    _make_output_dir(paths)
    write_circom_main(paths.verifier_circom, circuit_name, params)

    if compile:
        circom_compile(circuit_name, root, logging_level, config)
    return params


def circom_compile(
    circuit_name: str,
    root: PathLike = ".",
    logging_level: LoggingLevel = LoggingLevel.DEFAULT,
    config: Optional[ToolchainConfig] = None,
) -> None:
    """Compile verifier.circom and derive the proving and verification keys.

    Also exports verifier.sol, a Solidity contract checking the Groth16 proofs.
    """
    paths = CircuitPaths(root, circuit_name)
    check_file(paths.verifier_circom, "run circom_create first")
    check_file(paths.ptau, "powers of tau phase 1 transcript, prepared for phase 2")
    cwd = paths.output_dir
    rel = paths.relative

    _announce(logging_level, "Compiling Circom code...")
    command_execution(
        Executable.CIRCOM,
        [rel(paths.verifier_circom), "--r1cs", "--wasm", "--sym", "--output", "."],
        cwd, logging_level, config,
    )

    _announce(logging_level, "Generating circuit-specific keys...")
    command_execution(
        Executable.SNARKJS,
        ["groth16", "setup", rel(paths.r1cs), paths.ptau.resolve(), rel(paths.initial_zkey)],
        cwd, logging_level, config,
    )
    command_execution(
        Executable.SNARKJS,
        ["zkey", "contribute", rel(paths.initial_zkey), rel(paths.zkey),
         "--name=winter-circom", f"-e={secrets.token_hex(32)}"],
        cwd, logging_level, config,
    )
    command_execution(
        Executable.SNARKJS,
        ["zkey", "export", "verificationkey", rel(paths.zkey), rel(paths.verification_key)],
        cwd, logging_level, config,
    )

    _announce(logging_level, "Exporting Solidity verifier...")
    command_execution(
        Executable.SNARKJS,
        ["zkey", "export", "solidityverifier", rel(paths.zkey), rel(paths.solidity_verifier)],
        cwd, logging_level, config,
    )


# --- Proving ---

def circom_prove(
    prover: StarkProver,
    trace: Any,
    options: ProofOptions,
    circuit_name: str,
    root: PathLike = ".",
    security_bits: int = DEFAULT_SECURITY_BITS,
    debug: bool = False,
    logging_level: LoggingLevel = LoggingLevel.DEFAULT,
    config: Optional[ToolchainConfig] = None,
) -> StarkProof:
    """Prove trace with the STARK prover, then prove its verification with Groth16.

    With debug=True the STARK proof is re-verified by the prover before any
    circuit work; a rejected proof raises InvalidProofError.
    """
    _announce(logging_level, "Building STARK proof...")
    try:
        public_inputs = prover.get_pub_inputs(trace)
        proof = prover.prove(trace)
    except Exception as e:
        raise ProverError(f"STARK prover failed: {e}") from e

    if debug:
        _announce(logging_level, "Verifying STARK proof...")
        try:
            accepted = prover.verify(proof, public_inputs)
        except Exception as e:
            raise InvalidProofError(f"STARK proof verification failed: {e}") from e
        if not accepted:
            raise InvalidProofError("STARK proof verification failed")

    prove_from_stark_proof(
        proof, public_inputs, options, circuit_name,
        root=root, security_bits=security_bits,
        logging_level=logging_level, config=config,
    )
    return proof


def prove_from_stark_proof(
    proof: StarkProof,
    public_inputs: Union[PublicInputs, Sequence[int]],
    options: ProofOptions,
    circuit_name: str,
    root: PathLike = ".",
    security_bits: int = DEFAULT_SECURITY_BITS,
    generate: bool = True,
    logging_level: LoggingLevel = LoggingLevel.DEFAULT,
    config: Optional[ToolchainConfig] = None,
) -> None:
    """Write input.json for an existing STARK proof and, if generate, the Groth16 proof."""
    paths = CircuitPaths(root, circuit_name)
    if generate:
        check_file(paths.zkey, "did you run circom_create?")
        check_file(paths.wasm, "did you run circom_create?")

    errors = validate_proof_structure(proof, options)
    if errors:
        raise ProofShapeError("proof does not match proof options: " + "; ".join(errors))

    if isinstance(public_inputs, PublicInputs):
        num_public_inputs = len(public_inputs.to_elements())
    else:
        public_inputs = list(public_inputs)
        num_public_inputs = len(public_inputs)
    params = assemble_parameters(options, num_public_inputs, security_bits)

    _announce(logging_level, "Parsing proof to JSON...")
    witness = serialize_proof(proof, params, public_inputs, options.base_field)
    _make_output_dir(paths)
    write_input_json(witness, paths.input_json)

    if not generate:
        return

    cwd = paths.output_dir
    rel = paths.relative
    _announce(logging_level, "Computing execution witness...")
    command_execution(
        Executable.NODE,
        [rel(paths.witness_generator), rel(paths.wasm), rel(paths.input_json), rel(paths.witness)],
        cwd, logging_level, config,
    )

    _announce(logging_level, "Generating Groth16 proof...")
    command_execution(
        Executable.SNARKJS,
        ["groth16", "prove", rel(paths.zkey), rel(paths.witness), rel(paths.proof), rel(paths.public)],
        cwd, logging_level, config,
    )


# --- Verification ---

def circom_verify(
    circuit_name: str,
    root: PathLike = ".",
    logging_level: LoggingLevel = LoggingLevel.DEFAULT,
    config: Optional[ToolchainConfig] = None,
) -> None:
    """Verify the Groth16 proof in target/circom/<circuit_name>; raises CommandError if rejected."""
    paths = CircuitPaths(root, circuit_name)
    check_file(paths.verification_key, "needed for verification")
    check_file(paths.public, "needed for verification")
    check_file(paths.proof, "needed for verification")

    _announce(logging_level, "Verifying Groth16 proof...")
    command_execution(
        Executable.SNARKJS,
        ["g16v", paths.relative(paths.verification_key), paths.relative(paths.public),
         paths.relative(paths.proof)],
        paths.output_dir, logging_level, config,
    )
