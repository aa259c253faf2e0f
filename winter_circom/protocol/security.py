"""Number of query draws the verification circuit must perform.

The circuit draws query positions uniformly from a domain of size D and keeps
the distinct ones. It must draw enough times that, except with probability at
most 2^-security_bits, it ends up with num_queries distinct positions.

Let P(x, n) be the probability of reaching num_queries distinct positions
within n more draws when x distinct positions are already held:

    P(num_queries, n) = 1
    P(x, 0)           = 0                                    (x < num_queries)
    P(x, n)           = (D - x)/D * P(x+1, n-1) + x/D * P(x, n-1)

number_of_draws() returns the smallest n with 1 - P(0, n) <= 2^-security_bits.

Binary floats cannot represent the failure probabilities involved (around
2^-128 next to 1), so all arithmetic uses decimal with a precision scaled to
security_bits.
"""

import math
from decimal import Decimal, localcontext

from winter_circom.errors import InvalidConfigurationError

DEFAULT_SECURITY_BITS = 128

# Extra bits on top of security_bits, then guard digits for rounding
PRECISION_EXTRA_BITS = 2
GUARD_DIGITS = 4


def working_precision(security_bits: int) -> int:
    """Decimal digits covering at least security_bits + 2 bits."""
    return math.ceil((security_bits + PRECISION_EXTRA_BITS) * math.log10(2)) + GUARD_DIGITS


def _check_inputs(num_queries: int, domain_size: int, security_bits: int) -> None:
    if num_queries < 0:
        raise InvalidConfigurationError(f"number of queries must be >= 0, got {num_queries}")
    if domain_size < 1:
        raise InvalidConfigurationError(f"domain size must be >= 1, got {domain_size}")
    if security_bits < 1:
        raise InvalidConfigurationError(f"security bits must be >= 1, got {security_bits}")
    if domain_size < num_queries:
        raise InvalidConfigurationError(
            f"cannot draw {num_queries} distinct positions from a domain of size {domain_size}"
        )


def _success_probability(num_queries: int, domain_size: int, draws: int) -> Decimal:
    """P(0, draws), evaluated in the active decimal context.

    The memo table is keyed by (x, n) and belongs to this call only: draws is
    the depth of the recursion, so every candidate gets a fresh table.
    """
    memo: dict[tuple[int, int], Decimal] = {}
    d = Decimal(domain_size)
    one = Decimal(1)
    zero = Decimal(0)

    # Bottom-up over the remaining draws; row n only reads row n - 1
    for n in range(draws + 1):
        for x in range(num_queries + 1):
            if x == num_queries:
                memo[(x, n)] = one
            elif n == 0:
                memo[(x, n)] = zero
            else:
                advance = (d - x) / d * memo[(x + 1, n - 1)]
                repeat = Decimal(x) / d * memo[(x, n - 1)]
                memo[(x, n)] = advance + repeat

    return memo[(0, draws)]


def failure_probability(
    num_queries: int,
    domain_size: int,
    draws: int,
    security_bits: int = DEFAULT_SECURITY_BITS,
) -> Decimal:
    """Return 1 - P(0, draws): the chance draws leave fewer than num_queries positions."""
    _check_inputs(num_queries, domain_size, security_bits)
    if draws < 0:
        raise InvalidConfigurationError(f"number of draws must be >= 0, got {draws}")
    with localcontext() as ctx:
        ctx.prec = working_precision(security_bits)
        return Decimal(1) - _success_probability(num_queries, domain_size, draws)


def number_of_draws(
    num_queries: int,
    domain_size: int,
    security_bits: int = DEFAULT_SECURITY_BITS,
) -> int:
    """Minimal number of draws meeting the 2^-security_bits failure bound."""
    _check_inputs(num_queries, domain_size, security_bits)
    if num_queries == 0:
        return 0

    with localcontext() as ctx:
        ctx.prec = working_precision(security_bits)
        bound = Decimal(2) ** -security_bits

        draws = 0
        while Decimal(1) - _success_probability(num_queries, domain_size, draws) > bound:
            draws += 1
        return draws
