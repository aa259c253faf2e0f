"""Protocol - circuit parameters and proof translation."""

from winter_circom.protocol.air import (
    AirContext,
    PublicInputs,
    TransitionConstraintDegree,
)
from winter_circom.protocol.fri_schedule import FoldingSchedule, folding_schedule, fri_schedule
from winter_circom.protocol.options import ProofContext, ProofOptions
from winter_circom.protocol.params import (
    CircuitParameters,
    WitnessShape,
    assemble_parameters,
    render_arguments,
    render_circom_main,
    write_circom_main,
)
from winter_circom.protocol.proof import (
    FriLayer,
    FriProof,
    MerkleProof,
    OodFrame,
    StarkProof,
    load_proof_from_json,
    proof_from_dict,
    proof_to_json,
    validate_proof_structure,
)
from winter_circom.protocol.security import failure_probability, number_of_draws
from winter_circom.protocol.witness import ProofWitness, serialize_proof, write_input_json

__all__ = [
    # AIR
    "AirContext",
    "PublicInputs",
    "TransitionConstraintDegree",
    # Options
    "ProofContext",
    "ProofOptions",
    # Security
    "failure_probability",
    "number_of_draws",
    # FRI schedule
    "FoldingSchedule",
    "folding_schedule",
    "fri_schedule",
    # Circuit parameters
    "CircuitParameters",
    "WitnessShape",
    "assemble_parameters",
    "render_arguments",
    "render_circom_main",
    "write_circom_main",
    # Proof
    "FriLayer",
    "FriProof",
    "MerkleProof",
    "OodFrame",
    "StarkProof",
    "load_proof_from_json",
    "proof_from_dict",
    "proof_to_json",
    "validate_proof_structure",
    # Witness
    "ProofWitness",
    "serialize_proof",
    "write_input_json",
]
