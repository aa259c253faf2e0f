"""STARK proof data structures and JSON loading.

The STARK prover is an external program; it exports each proof as JSON with
the layout below. This module only reads that layout into dataclasses and
checks its internal consistency. Numbers may be JSON integers, decimal
strings or 0x-prefixed hex strings.

    {
      "context": {trace_width, trace_length, num_queries, blowup_factor, ...},
      "trace_root": "...",
      "constraint_root": "...",
      "trace_queries":      [{"values": [...], "path": [...]}, ...],
      "constraint_queries": [{"values": [...], "path": [...]}, ...],
      "ood_frame": {"current": [...], "next": [...], "constraint_evaluations": [...]},
      "fri": {
        "layers": [{"root": "...", "queries": [{"values": [...], "path": [...]}, ...]}, ...],
        "remainder": [...]
      },
      "query_positions": [...],
      "pow_nonce": "..."
    }

Query proofs are stored per position, in the order of query_positions, which
is the order the prover drew them in.
"""

import json
from dataclasses import dataclass, field
from typing import Any, List

from winter_circom.errors import InvalidProofError
from winter_circom.protocol.options import ProofContext, ProofOptions

# --- Proof Data Structures ---


@dataclass
class MerkleProof:
    """Opened leaf values and the Merkle authentication path, leaf to root."""
    v: List[int] = field(default_factory=list)   # Leaf values
    mp: List[int] = field(default_factory=list)  # Sibling hash per level


@dataclass
class FriLayer:
    """One FRI layer: commitment root and one opening per query."""
    root: int = 0
    queries: List[MerkleProof] = field(default_factory=list)


@dataclass
class FriProof:
    """FRI layers followed by the remainder values."""
    layers: List[FriLayer] = field(default_factory=list)
    remainder: List[int] = field(default_factory=list)


@dataclass
class OodFrame:
    """Out-of-domain evaluations.

    Attributes:
        current: Trace row evaluated at the out-of-domain point z.
        next: Trace row evaluated at z * g (g the trace domain generator).
        constraint_evaluations: Constraint composition columns evaluated at z.
    """
    current: List[int] = field(default_factory=list)
    next: List[int] = field(default_factory=list)
    constraint_evaluations: List[int] = field(default_factory=list)


@dataclass
class StarkProof:
    """Complete STARK proof as exported by the prover.

    Attributes:
        context: Trace shape and proof options the proof was generated with.
        trace_root: Merkle root of the trace LDE commitment.
        constraint_root: Merkle root of the constraint evaluation commitment.
        trace_queries: Trace row openings, one per query position.
        constraint_queries: Constraint evaluation openings, one per query position.
        ood_frame: Out-of-domain trace frame and constraint evaluations.
        fri: FRI layer openings and remainder.
        query_positions: Positions in the LDE domain, in drawing order.
        pow_nonce: Proof-of-work nonce satisfying the grinding factor.
    """
    context: ProofContext
    trace_root: int = 0
    constraint_root: int = 0
    trace_queries: List[MerkleProof] = field(default_factory=list)
    constraint_queries: List[MerkleProof] = field(default_factory=list)
    ood_frame: OodFrame = field(default_factory=OodFrame)
    fri: FriProof = field(default_factory=FriProof)
    query_positions: List[int] = field(default_factory=list)
    pow_nonce: int = 0


# --- JSON Deserialization ---

def to_int(value: Any) -> int:
    """Parse a JSON number or a decimal or 0x-prefixed string."""
    if isinstance(value, str):
        s = value.strip()
        if s.lower().startswith("0x"):
            return int(s, 16)
        return int(s)
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    return int(value)


def _to_ints(values: Any) -> List[int]:
    return [to_int(v) for v in values]


def _merkle_proofs(items: Any) -> List[MerkleProof]:
    return [MerkleProof(v=_to_ints(q["values"]), mp=_to_ints(q["path"])) for q in items]


def proof_from_dict(data: dict) -> StarkProof:
    """Build a StarkProof from parsed prover JSON."""
    try:
        ood = data["ood_frame"]
        fri = data["fri"]
        return StarkProof(
            context=ProofContext.from_dict(data["context"]),
            trace_root=to_int(data["trace_root"]),
            constraint_root=to_int(data["constraint_root"]),
            trace_queries=_merkle_proofs(data["trace_queries"]),
            constraint_queries=_merkle_proofs(data["constraint_queries"]),
            ood_frame=OodFrame(
                current=_to_ints(ood["current"]),
                next=_to_ints(ood["next"]),
                constraint_evaluations=_to_ints(ood["constraint_evaluations"]),
            ),
            fri=FriProof(
                layers=[
                    FriLayer(root=to_int(layer["root"]), queries=_merkle_proofs(layer["queries"]))
                    for layer in fri["layers"]
                ],
                remainder=_to_ints(fri["remainder"]),
            ),
            query_positions=_to_ints(data["query_positions"]),
            pow_nonce=to_int(data.get("pow_nonce", 0)),
        )
    except KeyError as e:
        raise InvalidProofError(f"malformed proof: missing key {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise InvalidProofError(f"malformed proof: {e}") from e


def load_proof_from_json(path: str) -> StarkProof:
    """Load a STARK proof from a prover JSON file."""
    with open(path) as f:
        data = json.load(f)
    return proof_from_dict(data)


# --- JSON Serialization ---

def _merkle_proofs_to_json(proofs: List[MerkleProof]) -> List[dict[str, Any]]:
    return [{"values": [str(v) for v in p.v], "path": [str(h) for h in p.mp]} for p in proofs]


def proof_to_json(proof: StarkProof) -> dict[str, Any]:
    """Convert a STARK proof to a JSON-serializable dictionary (decimal strings)."""
    return {
        "context": proof.context.to_dict(),
        "trace_root": str(proof.trace_root),
        "constraint_root": str(proof.constraint_root),
        "trace_queries": _merkle_proofs_to_json(proof.trace_queries),
        "constraint_queries": _merkle_proofs_to_json(proof.constraint_queries),
        "ood_frame": {
            "current": [str(v) for v in proof.ood_frame.current],
            "next": [str(v) for v in proof.ood_frame.next],
            "constraint_evaluations": [str(v) for v in proof.ood_frame.constraint_evaluations],
        },
        "fri": {
            "layers": [
                {"root": str(layer.root), "queries": _merkle_proofs_to_json(layer.queries)}
                for layer in proof.fri.layers
            ],
            "remainder": [str(v) for v in proof.fri.remainder],
        },
        "query_positions": [str(p) for p in proof.query_positions],
        "pow_nonce": str(proof.pow_nonce),
    }


# --- Validation ---

def validate_proof_structure(proof: StarkProof, options: ProofOptions) -> list[str]:
    """Validate that a proof's context and query counts match the proof options."""
    errors = []

    expected_context = options.context()
    if proof.context != expected_context:
        for name, expected in expected_context.to_dict().items():
            actual = getattr(proof.context, name)
            if actual != expected:
                errors.append(f"Context {name} is {actual}, expected {expected}")

    n_queries = len(proof.query_positions)
    if n_queries != options.num_queries:
        errors.append(f"Expected {options.num_queries} query positions, got {n_queries}")

    if len(set(proof.query_positions)) != n_queries:
        errors.append("Query positions are not distinct")

    lde_domain_size = options.lde_domain_size
    for pos in proof.query_positions:
        if not 0 <= pos < lde_domain_size:
            errors.append(f"Query position {pos} outside LDE domain of size {lde_domain_size}")

    if len(proof.trace_queries) != n_queries:
        errors.append(f"Expected {n_queries} trace query proofs, got {len(proof.trace_queries)}")
    if len(proof.constraint_queries) != n_queries:
        errors.append(f"Expected {n_queries} constraint query proofs, got {len(proof.constraint_queries)}")

    for i, layer in enumerate(proof.fri.layers):
        if len(layer.queries) != n_queries:
            errors.append(f"FRI layer {i} has {len(layer.queries)} query proofs, expected {n_queries}")

    return errors
