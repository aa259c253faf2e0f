"""Proof options: the immutable configuration of one proving run.

A ProofOptions value fully determines every circuit parameter derived by this
package. It is validated once, at construction, against the limits of the
STARK prover; nothing downstream re-checks or coerces it.
"""

import json
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple, Union

from winter_circom.errors import InvalidConfigurationError
from winter_circom.primitives.field import F256, StarkField, get_field, is_power_of_two, log2
from winter_circom.protocol.air import AirContext, TransitionConstraintDegree, normalize_degrees

# --- Prover Limits ---

MIN_TRACE_LENGTH = 8
MAX_TRACE_WIDTH = 255
MIN_BLOWUP_FACTOR = 2
MAX_BLOWUP_FACTOR = 128
FOLDING_FACTORS = (2, 4, 8, 16)
MAX_NUM_QUERIES = 255
MAX_GRINDING_FACTOR = 32

# Hash functions known to the verification template, with their context byte
HASH_FUNCTIONS = {"poseidon": 1}

# Number of field elements the serialized proof context occupies
CONTEXT_NUM_ELEMENTS = 2

# Largest values of the u8 and u32 context header fields
MAX_CONTEXT_BYTE = 0xFF
MAX_CONTEXT_U32 = 0xFFFFFFFF


# --- Proof Context ---

@dataclass(frozen=True)
class ProofContext:
    """Trace shape and options a proof was generated with.

    The prover embeds this in every proof and absorbs it into the public-coin
    seed as two field elements:

        element 0 = bytes [trace_width, log2(trace_length)]
        element 1 = bytes [field_extension, hash_fn, blowup_factor,
                           grinding_factor, folding_factor, num_queries,
                           max_remainder_size (u32)]

    each read as a big-endian integer.
    """
    trace_width: int
    trace_length: int
    num_queries: int
    blowup_factor: int
    grinding_factor: int
    folding_factor: int
    max_remainder_size: int
    field_extension: int = 1
    hash_fn: str = "poseidon"

    def __post_init__(self) -> None:
        if self.hash_fn not in HASH_FUNCTIONS:
            raise InvalidConfigurationError(
                f"proof context hash function must be one of {sorted(HASH_FUNCTIONS)}, got {self.hash_fn!r}"
            )
        if not is_power_of_two(self.trace_length):
            raise InvalidConfigurationError(
                f"proof context trace length must be a power of two, got {self.trace_length}"
            )
        # Each of these occupies one byte of the header
        for name in ("trace_width", "num_queries", "blowup_factor", "grinding_factor",
                     "folding_factor", "field_extension"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_CONTEXT_BYTE:
                raise InvalidConfigurationError(
                    f"proof context {name} must be in [0, {MAX_CONTEXT_BYTE}], got {value}"
                )
        if not 0 <= self.max_remainder_size <= MAX_CONTEXT_U32:
            raise InvalidConfigurationError(
                f"proof context max_remainder_size must be in [0, {MAX_CONTEXT_U32}], "
                f"got {self.max_remainder_size}"
            )

    def to_elements(self) -> List[int]:
        trace_info = struct.pack(">BB", self.trace_width, log2(self.trace_length))
        options = struct.pack(
            ">BBBBBBI",
            self.field_extension,
            HASH_FUNCTIONS[self.hash_fn],
            self.blowup_factor,
            self.grinding_factor,
            self.folding_factor,
            self.num_queries,
            self.max_remainder_size,
        )
        return [int.from_bytes(trace_info, "big"), int.from_bytes(options, "big")]

    @classmethod
    def from_dict(cls, d: dict) -> "ProofContext":
        return cls(
            trace_width=int(d["trace_width"]),
            trace_length=int(d["trace_length"]),
            num_queries=int(d["num_queries"]),
            blowup_factor=int(d["blowup_factor"]),
            grinding_factor=int(d["grinding_factor"]),
            folding_factor=int(d["folding_factor"]),
            max_remainder_size=int(d["max_remainder_size"]),
            field_extension=int(d.get("field_extension", 1)),
            hash_fn=d.get("hash_fn", "poseidon"),
        )

    def to_dict(self) -> dict:
        return {
            "trace_width": self.trace_width,
            "trace_length": self.trace_length,
            "num_queries": self.num_queries,
            "blowup_factor": self.blowup_factor,
            "grinding_factor": self.grinding_factor,
            "folding_factor": self.folding_factor,
            "max_remainder_size": self.max_remainder_size,
            "field_extension": self.field_extension,
            "hash_fn": self.hash_fn,
        }


# --- Proof Options ---

@dataclass(frozen=True)
class ProofOptions:
    """STARK proof configuration plus the AIR shape it is applied to.

    Attributes:
        num_queries: Number of query positions opened by the prover.
        blowup_factor: LDE domain size divided by trace length.
        grinding_factor: Proof-of-work bits required of the query seed.
        folding_factor: Branching factor of each FRI folding round.
        max_remainder_size: FRI stops folding once the domain is this small.
        trace_width: Number of trace columns.
        trace_length: Number of trace rows.
        num_assertions: Number of boundary assertions declared by the AIR.
        transition_constraint_degrees: One descriptor per transition constraint.
        base_field: Field the proof is computed over.
        hash_fn: Hash used for commitments and the public coin.
        field_extension: Degree of the extension used for out-of-domain points.
    """
    num_queries: int
    blowup_factor: int
    grinding_factor: int
    folding_factor: int
    max_remainder_size: int
    trace_width: int
    trace_length: int
    num_assertions: int
    transition_constraint_degrees: Tuple[TransitionConstraintDegree, ...]
    base_field: StarkField = F256
    hash_fn: str = "poseidon"
    field_extension: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "transition_constraint_degrees", normalize_degrees(self.transition_constraint_degrees)
        )
        self._validate()

    def _validate(self) -> None:
        if not is_power_of_two(self.trace_length) or self.trace_length < MIN_TRACE_LENGTH:
            raise InvalidConfigurationError(
                f"trace length must be a power of two >= {MIN_TRACE_LENGTH}, got {self.trace_length}"
            )
        if not 1 <= self.trace_width <= MAX_TRACE_WIDTH:
            raise InvalidConfigurationError(
                f"trace width must be in [1, {MAX_TRACE_WIDTH}], got {self.trace_width}"
            )
        if (not is_power_of_two(self.blowup_factor)
                or not MIN_BLOWUP_FACTOR <= self.blowup_factor <= MAX_BLOWUP_FACTOR):
            raise InvalidConfigurationError(
                f"blowup factor must be a power of two in [{MIN_BLOWUP_FACTOR}, {MAX_BLOWUP_FACTOR}], "
                f"got {self.blowup_factor}"
            )
        if self.folding_factor not in FOLDING_FACTORS:
            raise InvalidConfigurationError(
                f"folding factor must be one of {FOLDING_FACTORS}, got {self.folding_factor}"
            )
        if not is_power_of_two(self.max_remainder_size) or self.max_remainder_size > MAX_CONTEXT_U32:
            raise InvalidConfigurationError(
                f"max remainder size must be a power of two <= {MAX_CONTEXT_U32}, got {self.max_remainder_size}"
            )
        if not 1 <= self.num_queries <= MAX_NUM_QUERIES:
            raise InvalidConfigurationError(
                f"number of queries must be in [1, {MAX_NUM_QUERIES}], got {self.num_queries}"
            )
        if not 0 <= self.grinding_factor <= MAX_GRINDING_FACTOR:
            raise InvalidConfigurationError(
                f"grinding factor must be in [0, {MAX_GRINDING_FACTOR}], got {self.grinding_factor}"
            )
        if self.num_assertions < 0:
            raise InvalidConfigurationError(f"number of assertions must be >= 0, got {self.num_assertions}")
        if not self.transition_constraint_degrees:
            raise InvalidConfigurationError("at least one transition constraint is required")
        for i, degree in enumerate(self.transition_constraint_degrees):
            if degree.base < 1:
                raise InvalidConfigurationError(f"transition constraint {i} has degree {degree.base} < 1")
        if self.hash_fn not in HASH_FUNCTIONS:
            raise InvalidConfigurationError(
                f"hash function must be one of {sorted(HASH_FUNCTIONS)}, got {self.hash_fn!r}"
            )
        if self.field_extension != 1:
            raise InvalidConfigurationError(
                f"only field extension degree 1 is supported, got {self.field_extension}"
            )

        ce_blowup = self.air_context().ce_blowup_factor
        if self.blowup_factor < ce_blowup:
            raise InvalidConfigurationError(
                f"blowup factor {self.blowup_factor} is smaller than the composition blowup "
                f"{ce_blowup} required by the transition constraint degrees"
            )

    # --- Derived Views ---

    @property
    def lde_domain_size(self) -> int:
        return self.trace_length * self.blowup_factor

    def air_context(self) -> AirContext:
        return AirContext(
            trace_width=self.trace_width,
            trace_length=self.trace_length,
            transition_constraint_degrees=self.transition_constraint_degrees,
            num_assertions=self.num_assertions,
            lde_blowup_factor=self.blowup_factor,
        )

    def context(self) -> ProofContext:
        """Proof context a prover running with these options embeds in its proofs."""
        return ProofContext(
            trace_width=self.trace_width,
            trace_length=self.trace_length,
            num_queries=self.num_queries,
            blowup_factor=self.blowup_factor,
            grinding_factor=self.grinding_factor,
            folding_factor=self.folding_factor,
            max_remainder_size=self.max_remainder_size,
            field_extension=self.field_extension,
            hash_fn=self.hash_fn,
        )

    # --- Serialization ---

    @classmethod
    def from_dict(cls, d: dict) -> "ProofOptions":
        """Build options from a parsed JSON object (snake_case keys)."""
        try:
            return cls(
                num_queries=int(d["num_queries"]),
                blowup_factor=int(d["blowup_factor"]),
                grinding_factor=int(d.get("grinding_factor", 0)),
                folding_factor=int(d["folding_factor"]),
                max_remainder_size=int(d["max_remainder_size"]),
                trace_width=int(d["trace_width"]),
                trace_length=int(d["trace_length"]),
                num_assertions=int(d["num_assertions"]),
                transition_constraint_degrees=tuple(d["transition_constraint_degrees"]),
                base_field=get_field(d.get("field", F256.name)),
                hash_fn=d.get("hash_fn", "poseidon"),
                field_extension=int(d.get("field_extension", 1)),
            )
        except InvalidConfigurationError:
            raise
        except KeyError as e:
            raise InvalidConfigurationError(f"proof options missing key {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise InvalidConfigurationError(f"invalid proof options: {e}") from e

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ProofOptions":
        """Load ProofOptions from a JSON file."""
        with open(path) as f:
            j = json.load(f)
        return cls.from_dict(j)

    def to_dict(self) -> dict[str, Any]:
        return {
            "num_queries": self.num_queries,
            "blowup_factor": self.blowup_factor,
            "grinding_factor": self.grinding_factor,
            "folding_factor": self.folding_factor,
            "max_remainder_size": self.max_remainder_size,
            "trace_width": self.trace_width,
            "trace_length": self.trace_length,
            "num_assertions": self.num_assertions,
            "transition_constraint_degrees": [d.to_dict() for d in self.transition_constraint_degrees],
            "field": self.base_field.name,
            "hash_fn": self.hash_fn,
            "field_extension": self.field_extension,
        }
