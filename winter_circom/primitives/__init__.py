"""Primitives - field constants and integer helpers."""

from winter_circom.primitives.field import (
    BN254_PRIME,
    F256,
    F256_GENERATOR,
    F256_TWO_ADICITY,
    FF,
    FIELDS,
    StarkField,
    get_field,
    is_power_of_two,
    log2,
)

__all__ = [
    "BN254_PRIME",
    "F256",
    "F256_GENERATOR",
    "F256_TWO_ADICITY",
    "FF",
    "FIELDS",
    "StarkField",
    "get_field",
    "is_power_of_two",
    "log2",
]
