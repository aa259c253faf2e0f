"""AIR shape: transition-constraint degrees and composition-domain sizing.

The verification circuit needs the size of the constraint-composition domain
the prover used. The prover derives it from the transition-constraint degrees
alone, so the rule is reproduced here exactly:

    min_blowup(degree) = max(next_pow2(base + len(cycles) - 1), 2)
    ce_blowup_factor   = max(min_blowup(d) for d in degrees)
    ce_domain_size     = trace_length * ce_blowup_factor
"""

from dataclasses import dataclass
from typing import ClassVar, List, Sequence, Tuple

# Smallest blowup factor the prover accepts
MIN_BLOWUP_FACTOR = 2


def _next_power_of_two(n: int) -> int:
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


@dataclass(frozen=True)
class TransitionConstraintDegree:
    """Degree descriptor of a single transition constraint.

    Attributes:
        base: Degree of the constraint in the trace polynomials.
        cycles: Cycle lengths of the periodic columns the constraint uses.
    """
    base: int
    cycles: Tuple[int, ...] = ()

    @classmethod
    def from_value(cls, value) -> "TransitionConstraintDegree":
        """Accept a bare int, a {"base", "cycles"} dict or an instance."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(base=int(value["base"]), cycles=tuple(int(c) for c in value.get("cycles", ())))
        return cls(base=int(value))

    def min_blowup_factor(self) -> int:
        """Smallest power-of-two blowup able to hold the constraint evaluations."""
        return max(_next_power_of_two(self.base + len(self.cycles) - 1), MIN_BLOWUP_FACTOR)

    def to_dict(self) -> dict:
        if not self.cycles:
            return {"base": self.base}
        return {"base": self.base, "cycles": list(self.cycles)}


@dataclass(frozen=True)
class AirContext:
    """Domain sizes derived from the AIR shape and the proof options."""
    trace_width: int
    trace_length: int
    transition_constraint_degrees: Tuple[TransitionConstraintDegree, ...]
    num_assertions: int
    lde_blowup_factor: int

    @property
    def ce_blowup_factor(self) -> int:
        return max(d.min_blowup_factor() for d in self.transition_constraint_degrees)

    @property
    def ce_domain_size(self) -> int:
        return self.trace_length * self.ce_blowup_factor

    @property
    def lde_domain_size(self) -> int:
        return self.trace_length * self.lde_blowup_factor

    @property
    def num_transition_constraints(self) -> int:
        return len(self.transition_constraint_degrees)


class PublicInputs:
    """Base class for an AIR's public inputs.

    Subclasses declare how many field elements the inputs serialize to and
    return them, in order, from to_elements(). The circuit receives them as
    the leading part of the public-coin seed.
    """

    NUM_PUB_INPUTS: ClassVar[int] = 0

    def to_elements(self) -> List[int]:
        raise NotImplementedError("Subclass must implement to_elements")


def normalize_degrees(degrees: Sequence) -> Tuple[TransitionConstraintDegree, ...]:
    """Convert ints/dicts/descriptors into a tuple of TransitionConstraintDegree."""
    return tuple(TransitionConstraintDegree.from_value(d) for d in degrees)
