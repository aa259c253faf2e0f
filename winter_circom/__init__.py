"""winter_circom - Circom verification circuits for STARK proofs.

Derives the parameters of the generic Circom STARK verifier for a proof
configuration, serializes STARK proofs into the matching circuit witness and
drives circom / snarkjs to produce and check the Groth16 proof.
"""

__version__ = "0.1.0"
