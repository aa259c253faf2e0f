"""
Shared fixtures: proof options of a small two-column AIR and synthetic
proofs with exactly the array lengths those options imply.

The sample options fold an LDE domain of 64 twice (64 -> 16 -> 4), so the
FRI schedule is [4, 2] and the remainder has 4 values.
"""

import subprocess
from typing import Callable

import pytest

from winter_circom.protocol.fri_schedule import fri_schedule
from winter_circom.protocol.options import ProofOptions
from winter_circom.protocol.proof import (
    FriLayer,
    FriProof,
    MerkleProof,
    OodFrame,
    StarkProof,
)
from winter_circom.toolchain import ToolchainConfig

SAMPLE_OPTIONS = {
    "num_queries": 4,
    "blowup_factor": 8,
    "grinding_factor": 0,
    "folding_factor": 4,
    "max_remainder_size": 4,
    "trace_width": 2,
    "trace_length": 8,
    "num_assertions": 2,
    "transition_constraint_degrees": [1, 1],
}

SAMPLE_PUBLIC_INPUTS = [42]


def make_proof(options: ProofOptions, positions=None) -> StarkProof:
    """Build a proof whose every array has the length the options imply."""
    schedule = fri_schedule(
        options.trace_length,
        options.blowup_factor,
        options.folding_factor,
        options.max_remainder_size,
    )
    tree_depth = (options.trace_length * options.folding_factor).bit_length() - 1
    ce_blowup = options.air_context().ce_blowup_factor
    if positions is None:
        positions = [3 * i + 1 for i in range(options.num_queries)]

    def opening(seed: int, width: int, depth: int) -> MerkleProof:
        return MerkleProof(
            v=[seed * 100 + j for j in range(width)],
            mp=[seed * 1000 + j for j in range(depth)],
        )

    return StarkProof(
        context=options.context(),
        trace_root=11,
        constraint_root=12,
        trace_queries=[opening(q, options.trace_width, tree_depth) for q in range(options.num_queries)],
        constraint_queries=[opening(q + 50, ce_blowup, tree_depth) for q in range(options.num_queries)],
        ood_frame=OodFrame(
            current=list(range(1, options.trace_width + 1)),
            next=list(range(101, options.trace_width + 101)),
            constraint_evaluations=list(range(201, ce_blowup + 201)),
        ),
        fri=FriProof(
            layers=[
                FriLayer(
                    root=900 + i,
                    queries=[opening(q + 10 * (i + 1), options.folding_factor, depth)
                             for q in range(options.num_queries)],
                )
                for i, depth in enumerate(schedule.depths)
            ],
            remainder=list(range(7, 7 + schedule.remainder_size)),
        ),
        query_positions=list(positions),
        pow_nonce=5,
    )


@pytest.fixture
def sample_options() -> ProofOptions:
    return ProofOptions.from_dict(SAMPLE_OPTIONS)


@pytest.fixture
def sample_proof(sample_options) -> StarkProof:
    return make_proof(sample_options)


@pytest.fixture
def proof_factory() -> Callable[..., StarkProof]:
    return make_proof


@pytest.fixture
def toolchain_config() -> ToolchainConfig:
    """Default executable names, independent of the caller's environment."""
    return ToolchainConfig()


class FakeRun:
    """Stand-in for subprocess.run that records every call."""

    def __init__(self, returncode: int = 0, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        self.calls = []

    def __call__(self, cmd, cwd=None, capture_output=False, text=False, check=False):
        self.calls.append({"cmd": list(cmd), "cwd": cwd, "capture_output": capture_output})
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr=self.stderr)
