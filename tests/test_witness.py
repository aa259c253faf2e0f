"""
Tests for the proof serializer.

The sample proof has exactly the shape its options imply, so it serializes
cleanly; each mismatch test breaks one array and expects it to be named.
"""

import json

import pytest

from winter_circom.errors import InvalidProofError, ProofShapeError, WinterCircomIOError
from winter_circom.primitives.field import BN254_PRIME
from winter_circom.protocol.air import PublicInputs
from winter_circom.protocol.options import ProofOptions
from winter_circom.protocol.params import CircuitParameters, assemble_parameters
from winter_circom.protocol.witness import ProofWitness, serialize_proof, write_input_json

from tests.conftest import SAMPLE_OPTIONS, SAMPLE_PUBLIC_INPUTS


class SumPublicInputs(PublicInputs):
    """Public inputs of a sum AIR: the claimed result."""

    NUM_PUB_INPUTS = 1

    def __init__(self, result: int):
        self.result = result

    def to_elements(self):
        return [self.result]


WITNESS_ORDER = [
    "pub_coin_seed",
    "trace_commitment",
    "constraint_commitment",
    "fri_commitments",
    "ood_trace_frame",
    "ood_frame_constraint_evaluation",
    "query_positions",
    "trace_evaluations",
    "trace_query_proofs",
    "constraint_evaluations",
    "constraint_query_proofs",
    "fri_layer_queries",
    "fri_layer_proofs",
    "fri_remainder",
    "pow_nonce",
]


@pytest.fixture
def params(sample_options) -> CircuitParameters:
    return assemble_parameters(sample_options, len(SAMPLE_PUBLIC_INPUTS))


@pytest.fixture
def witness(sample_proof, params) -> ProofWitness:
    return serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)


class TestSerializeProof:
    """Test the witness produced for a well-formed proof."""

    def test_matches_circuit_shape(self, witness, params) -> None:
        assert witness.shape_errors(params.witness_shape()) == []

    def test_pub_coin_seed(self, witness, sample_options) -> None:
        assert witness.pub_coin_seed == SAMPLE_PUBLIC_INPUTS + sample_options.context().to_elements()

    def test_public_inputs_object(self, sample_proof, params, witness) -> None:
        from_object = serialize_proof(sample_proof, params, SumPublicInputs(42))
        assert from_object == witness

    def test_values(self, witness) -> None:
        assert witness.trace_commitment == 11
        assert witness.constraint_commitment == 12
        assert witness.fri_commitments == [900, 901]
        assert witness.ood_trace_frame == [[1, 2], [101, 102]]
        assert witness.ood_frame_constraint_evaluation == [201, 202]
        assert witness.trace_evaluations[1] == [100, 101]
        assert witness.fri_layer_proofs[1][0] == [20000, 20001]
        assert witness.fri_remainder == [7, 8, 9, 10]
        assert witness.pow_nonce == 5

    def test_query_order_preserved(self, sample_options, proof_factory, params) -> None:
        proof = proof_factory(sample_options, positions=[9, 2, 40, 0])
        assert serialize_proof(proof, params, SAMPLE_PUBLIC_INPUTS).query_positions == [9, 2, 40, 0]

    def test_canonical_encoding(self, sample_proof, params) -> None:
        sample_proof.trace_root = BN254_PRIME + 7
        sample_proof.trace_queries[0].v[0] = BN254_PRIME
        sample_proof.fri.layers[0].queries[0].mp[0] = 2 * BN254_PRIME + 1
        w = serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)
        assert w.trace_commitment == 7
        assert w.trace_evaluations[0][0] == 0
        assert w.fri_layer_proofs[0][0][0] == 1

    def test_negative_element(self, sample_proof, params) -> None:
        sample_proof.fri.remainder[0] = -3
        with pytest.raises(InvalidProofError, match="non-negative"):
            serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)

    def test_deterministic(self, sample_proof, params) -> None:
        a = serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)
        b = serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)
        assert a.to_json() == b.to_json()


class TestScheduleShapes:
    """Test that well-formed proofs fit the circuit across folding schedules."""

    @pytest.mark.parametrize("overrides,depths", [
        # LDE domain already within the remainder bound: no FRI layers
        ({"blowup_factor": 2, "max_remainder_size": 16}, ()),
        # Folding down to a single point ends with a depth-0 layer
        ({"folding_factor": 2, "max_remainder_size": 1}, (5, 4, 3, 2, 1, 0)),
        ({"folding_factor": 8, "max_remainder_size": 8}, (3,)),
        ({"folding_factor": 16, "trace_length": 32, "max_remainder_size": 1}, (4, 0)),
        ({"trace_width": 1}, (4, 2)),
    ])
    def test_round_trip(self, proof_factory, overrides: dict, depths: tuple) -> None:
        options = ProofOptions.from_dict(dict(SAMPLE_OPTIONS, **overrides))
        params = assemble_parameters(options, len(SAMPLE_PUBLIC_INPUTS))
        w = serialize_proof(proof_factory(options), params, SAMPLE_PUBLIC_INPUTS)

        assert params.witness_shape().fri_layer_depths == depths
        assert w.shape_errors(params.witness_shape()) == []
        assert len(w.fri_commitments) == params.num_fri_layers
        assert [len(layer[0]) for layer in w.fri_layer_proofs] == list(depths)
        assert len(w.fri_remainder) == params.remainder_size


class TestShapeMismatch:
    """Test that a proof not matching the circuit is rejected."""

    def test_context_mismatch(self, sample_options, proof_factory, params) -> None:
        other = ProofOptions.from_dict(dict(sample_options.to_dict(), folding_factor=2))
        with pytest.raises(ProofShapeError, match="folding factor is 2, circuit expects 4"):
            serialize_proof(proof_factory(other), params, SAMPLE_PUBLIC_INPUTS)

    def test_wrong_public_input_count(self, sample_proof, params) -> None:
        with pytest.raises(ProofShapeError, match="pub_coin_seed"):
            serialize_proof(sample_proof, params, [1, 2])

    def test_short_merkle_path(self, sample_proof, params) -> None:
        sample_proof.trace_queries[2].mp.pop()
        with pytest.raises(ProofShapeError, match=r"trace_query_proofs\[2\]: expected length 5, got 4"):
            serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)

    def test_fri_layer_path_depth(self, sample_proof, params) -> None:
        sample_proof.fri.layers[1].queries[0].mp.append(0)
        with pytest.raises(ProofShapeError, match=r"fri_layer_proofs\[1\]\[0\]"):
            serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)

    def test_missing_fri_layer(self, sample_proof, params) -> None:
        sample_proof.fri.layers.pop()
        with pytest.raises(ProofShapeError, match="fri_commitments"):
            serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)

    def test_remainder_length(self, sample_proof, params) -> None:
        sample_proof.fri.remainder.append(1)
        with pytest.raises(ProofShapeError, match="fri_remainder: expected length 4, got 5"):
            serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)

    def test_constraint_evaluation_width(self, sample_proof, params) -> None:
        sample_proof.ood_frame.constraint_evaluations.append(1)
        with pytest.raises(ProofShapeError, match="ood_frame_constraint_evaluation"):
            serialize_proof(sample_proof, params, SAMPLE_PUBLIC_INPUTS)


class TestWitnessJson:
    """Test the emitted input.json."""

    def test_field_order(self, witness) -> None:
        assert list(witness.to_json()) == WITNESS_ORDER

    def test_decimal_strings(self, witness) -> None:
        j = witness.to_json()
        assert j["trace_commitment"] == "11"
        assert j["ood_trace_frame"] == [["1", "2"], ["101", "102"]]
        assert j["fri_layer_queries"][0][0] == ["1000", "1001", "1002", "1003"]

    def test_write_input_json(self, tmp_path, witness) -> None:
        path = tmp_path / "input.json"
        write_input_json(witness, path)
        with open(path) as f:
            assert json.load(f) == witness.to_json()

    def test_write_failure(self, tmp_path, witness) -> None:
        with pytest.raises(WinterCircomIOError, match="writing input.json"):
            write_input_json(witness, tmp_path / "missing" / "input.json")
