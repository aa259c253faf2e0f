"""Proof serializer: STARK proof -> circuit witness (input.json).

serialize_proof() re-encodes a StarkProof as the flat, order-sensitive signal
assignment the `Verify` template reads. Its array lengths must equal the
counts in the CircuitParameters the circuit was generated with; the witness is
checked against CircuitParameters.witness_shape() and rejected with
ProofShapeError before anything is emitted.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, List, Sequence, Union

import numpy as np

from winter_circom.errors import ProofShapeError, WinterCircomIOError
from winter_circom.primitives.field import F256, StarkField
from winter_circom.protocol.air import PublicInputs
from winter_circom.protocol.params import CircuitParameters, WitnessShape
from winter_circom.protocol.proof import StarkProof


# --- Witness ---

@dataclass
class ProofWitness:
    """Circuit inputs for one STARK proof, in template signal order."""
    pub_coin_seed: List[int] = field(default_factory=list)
    trace_commitment: int = 0
    constraint_commitment: int = 0
    fri_commitments: List[int] = field(default_factory=list)
    ood_trace_frame: List[List[int]] = field(default_factory=list)
    ood_frame_constraint_evaluation: List[int] = field(default_factory=list)
    query_positions: List[int] = field(default_factory=list)
    trace_evaluations: List[List[int]] = field(default_factory=list)
    trace_query_proofs: List[List[int]] = field(default_factory=list)
    constraint_evaluations: List[List[int]] = field(default_factory=list)
    constraint_query_proofs: List[List[int]] = field(default_factory=list)
    fri_layer_queries: List[List[List[int]]] = field(default_factory=list)
    fri_layer_proofs: List[List[List[int]]] = field(default_factory=list)
    fri_remainder: List[int] = field(default_factory=list)
    pow_nonce: int = 0

    def shape_errors(self, shape: WitnessShape) -> list[str]:
        """List every array whose lengths differ from shape."""
        errors: list[str] = []
        for name, expected in shape.expected().items():
            value = getattr(self, name)
            if name == "fri_layer_proofs":
                if len(value) != len(expected):
                    errors.append(f"{name}: expected {len(expected)} layers, got {len(value)}")
                    continue
                for i, layer_shape in enumerate(expected):
                    _check_shape(f"{name}[{i}]", value[i], layer_shape, errors)
            else:
                _check_shape(name, value, expected, errors)
        return errors

    def to_json(self) -> dict[str, Any]:
        """JSON object with every number as a decimal string, in signal order."""
        return {f.name: _stringify(getattr(self, f.name)) for f in fields(self)}


def _check_shape(name: str, value: Any, shape: tuple, errors: list[str]) -> None:
    if not isinstance(value, (list, tuple)):
        errors.append(f"{name}: expected an array of length {shape[0]}, got a scalar")
        return
    if len(value) != shape[0]:
        errors.append(f"{name}: expected length {shape[0]}, got {len(value)}")
        return
    if len(shape) > 1:
        for i, item in enumerate(value):
            _check_shape(f"{name}[{i}]", item, shape[1:], errors)


def _stringify(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_stringify(v) for v in value]
    return str(value)


def _canonical_array(base_field: StarkField, values: Any) -> list:
    """Canonicalize a rectangular (possibly nested) array of field elements."""
    arr = np.array(values, dtype=object)
    if arr.size == 0:
        return arr.tolist()
    flat = base_field.canonical_list(arr.ravel())
    return np.array(flat, dtype=object).reshape(arr.shape).tolist()


# --- Serialization ---

def _context_errors(proof: StarkProof, params: CircuitParameters) -> list[str]:
    ctx = proof.context
    checks = [
        ("trace width", ctx.trace_width, params.trace_width),
        ("trace length", ctx.trace_length, params.trace_length),
        ("number of queries", ctx.num_queries, params.num_queries),
        ("blowup factor", ctx.blowup_factor, params.lde_blowup_factor),
        ("folding factor", ctx.folding_factor, params.folding_factor),
        ("grinding factor", ctx.grinding_factor, params.grinding_factor),
    ]
    return [
        f"proof {what} is {actual}, circuit expects {expected}"
        for what, actual, expected in checks
        if actual != expected
    ]


def serialize_proof(
    proof: StarkProof,
    params: CircuitParameters,
    public_inputs: Union[PublicInputs, Sequence[int]],
    base_field: StarkField = F256,
) -> ProofWitness:
    """Encode a STARK proof as the witness of the circuit described by params.

    Args:
        proof: Proof produced by the prover for the same options as params.
        params: Parameters the verification circuit was generated with.
        public_inputs: The AIR's public inputs, as a PublicInputs instance or
            as their field elements.
        base_field: Field the proof elements belong to.

    Raises:
        ProofShapeError: If the proof context or any array length disagrees
            with params.
    """
    errors = _context_errors(proof, params)
    if errors:
        raise ProofShapeError("incompatible proof and circuit: " + "; ".join(errors))

    if isinstance(public_inputs, PublicInputs):
        pub_elements = public_inputs.to_elements()
    else:
        pub_elements = list(public_inputs)

    witness = ProofWitness(
        pub_coin_seed=pub_elements + proof.context.to_elements(),
        trace_commitment=proof.trace_root,
        constraint_commitment=proof.constraint_root,
        fri_commitments=[layer.root for layer in proof.fri.layers],
        ood_trace_frame=[list(proof.ood_frame.current), list(proof.ood_frame.next)],
        ood_frame_constraint_evaluation=list(proof.ood_frame.constraint_evaluations),
        query_positions=list(proof.query_positions),
        trace_evaluations=[list(q.v) for q in proof.trace_queries],
        trace_query_proofs=[list(q.mp) for q in proof.trace_queries],
        constraint_evaluations=[list(q.v) for q in proof.constraint_queries],
        constraint_query_proofs=[list(q.mp) for q in proof.constraint_queries],
        fri_layer_queries=[[list(q.v) for q in layer.queries] for layer in proof.fri.layers],
        fri_layer_proofs=[[list(q.mp) for q in layer.queries] for layer in proof.fri.layers],
        fri_remainder=list(proof.fri.remainder),
        pow_nonce=proof.pow_nonce,
    )

    errors = witness.shape_errors(params.witness_shape())
    if errors:
        raise ProofShapeError("proof does not match circuit parameters: " + "; ".join(errors))

    return _canonicalize(witness, base_field)


def _canonicalize(witness: ProofWitness, base_field: StarkField) -> ProofWitness:
    """Replace every element by its canonical representative."""
    return ProofWitness(
        pub_coin_seed=base_field.canonical_list(witness.pub_coin_seed),
        trace_commitment=base_field.canonical(witness.trace_commitment),
        constraint_commitment=base_field.canonical(witness.constraint_commitment),
        fri_commitments=base_field.canonical_list(witness.fri_commitments),
        ood_trace_frame=_canonical_array(base_field, witness.ood_trace_frame),
        ood_frame_constraint_evaluation=base_field.canonical_list(witness.ood_frame_constraint_evaluation),
        query_positions=base_field.canonical_list(witness.query_positions),
        trace_evaluations=_canonical_array(base_field, witness.trace_evaluations),
        trace_query_proofs=_canonical_array(base_field, witness.trace_query_proofs),
        constraint_evaluations=_canonical_array(base_field, witness.constraint_evaluations),
        constraint_query_proofs=_canonical_array(base_field, witness.constraint_query_proofs),
        fri_layer_queries=_canonical_array(base_field, witness.fri_layer_queries),
        # Layers have different depths, so canonicalize layer by layer
        fri_layer_proofs=[_canonical_array(base_field, layer) for layer in witness.fri_layer_proofs],
        fri_remainder=base_field.canonical_list(witness.fri_remainder),
        pow_nonce=base_field.canonical(witness.pow_nonce),
    )


def write_input_json(witness: ProofWitness, path: Union[str, Path]) -> None:
    """Write the witness as the circuit's input.json."""
    try:
        with open(path, "w") as f:
            json.dump(witness.to_json(), f)
    except OSError as e:
        raise WinterCircomIOError(e, "writing input.json") from e
