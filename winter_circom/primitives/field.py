"""STARK base field shared with the circom verifier.

The STARK proofs translated here are built over the 256-bit field f256, whose
modulus is the BN254 scalar-field prime. That is the native field of circom,
so every STARK field element is also a valid circuit signal value.

Uses galois for all field arithmetic. FF is the field type.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List

import galois

from winter_circom.errors import InvalidConfigurationError, InvalidProofError

# --- Field Constants ---

BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# p - 1 = 2^28 * odd
F256_TWO_ADICITY = 28

# Multiplicative generator, also the FRI domain offset
F256_GENERATOR = 5


@lru_cache(maxsize=None)
def _galois_field(modulus: int, generator: int):
    # galois would otherwise factor p - 1 to find a primitive root
    return galois.GF(modulus, primitive_element=generator, verify=False)


@dataclass(frozen=True)
class StarkField:
    """Prime field descriptor: modulus, two-adicity and canonical generator."""
    name: str
    modulus: int
    two_adicity: int
    generator: int

    @property
    def gf(self):
        """galois FieldArray class for this field."""
        return _galois_field(self.modulus, self.generator)

    def canonical(self, value) -> int:
        """Return the canonical unsigned representative of a field element.

        Accepts ints (reduced mod p) and galois scalars. Negative integers are
        rejected: a proof never encodes elements with a sign.
        """
        if isinstance(value, galois.FieldArray):
            return int(value)
        v = int(value)
        if v < 0:
            raise InvalidProofError(f"field element must be non-negative, got {v}")
        return v % self.modulus

    def canonical_list(self, values: Iterable) -> List[int]:
        """Canonicalize a sequence of field elements through the galois field."""
        reduced = [self.canonical(v) for v in values]
        if not reduced:
            return []
        return [int(x) for x in self.gf(reduced)]


F256 = StarkField(
    name="f256",
    modulus=BN254_PRIME,
    two_adicity=F256_TWO_ADICITY,
    generator=F256_GENERATOR,
)

FIELDS = {F256.name: F256}

FF = F256.gf
"""Base field GF(p) of the f256 STARK field."""


def get_field(name: str) -> StarkField:
    """Look up a supported STARK field by name."""
    try:
        return FIELDS[name]
    except KeyError:
        raise InvalidConfigurationError(
            f"unsupported field {name!r}, expected one of {sorted(FIELDS)}"
        ) from None


# --- Integer Helpers ---

def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def log2(n: int) -> int:
    """Exact base-2 logarithm of a power of two."""
    if not is_power_of_two(n):
        raise ValueError(f"{n} is not a power of two")
    return n.bit_length() - 1
