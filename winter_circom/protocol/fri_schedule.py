"""FRI folding schedule.

Starting from the LDE domain, FRI divides the domain size by the folding
factor until it is no larger than the maximum remainder size. Layer i commits
to the evaluations of domain i grouped by folding factor, so its Merkle tree
has depth log2 of the domain size *after* the division; those depths are the
schedule.

This must reproduce the folding the prover actually performs: a diverging
schedule yields a circuit that rejects every proof.
"""

from dataclasses import dataclass
from typing import List, Tuple

from winter_circom.errors import InvalidConfigurationError
from winter_circom.primitives.field import is_power_of_two, log2


@dataclass(frozen=True)
class FoldingSchedule:
    """Merkle tree depths of the FRI layers and the resulting remainder size."""
    depths: Tuple[int, ...]
    remainder_size: int

    @property
    def num_layers(self) -> int:
        return len(self.depths)

    @property
    def circuit_depths(self) -> Tuple[int, ...]:
        """Depths as passed to the circuit template, which rejects empty arrays."""
        return self.depths if self.depths else (0,)


def fri_schedule(
    trace_length: int,
    blowup_factor: int,
    folding_factor: int,
    max_remainder_size: int,
) -> FoldingSchedule:
    """Compute the folding schedule for an LDE domain of trace_length * blowup_factor."""
    if trace_length < 1 or blowup_factor < 1:
        raise InvalidConfigurationError(
            f"trace length and blowup factor must be positive, got {trace_length} and {blowup_factor}"
        )
    if folding_factor < 2:
        raise InvalidConfigurationError(f"folding factor must be >= 2, got {folding_factor}")
    if max_remainder_size < 1:
        raise InvalidConfigurationError(f"max remainder size must be >= 1, got {max_remainder_size}")

    domain_size = trace_length * blowup_factor
    depths: List[int] = []
    while domain_size > max_remainder_size:
        if domain_size % folding_factor != 0:
            raise InvalidConfigurationError(
                f"domain size {domain_size} is not divisible by folding factor {folding_factor}"
            )
        domain_size //= folding_factor
        if not is_power_of_two(domain_size):
            raise InvalidConfigurationError(f"folded domain size {domain_size} is not a power of two")
        depths.append(log2(domain_size))

    return FoldingSchedule(depths=tuple(depths), remainder_size=domain_size)


def folding_schedule(
    trace_length: int,
    blowup_factor: int,
    folding_factor: int,
    max_remainder_size: int,
) -> List[int]:
    """List of per-round depths; an empty schedule is represented as [0]."""
    schedule = fri_schedule(trace_length, blowup_factor, folding_factor, max_remainder_size)
    return list(schedule.circuit_depths)
