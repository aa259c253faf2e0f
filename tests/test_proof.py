"""Tests for STARK proof JSON loading and structural validation."""

import json

import pytest

from winter_circom.errors import InvalidProofError
from winter_circom.protocol.options import ProofOptions
from winter_circom.protocol.proof import (
    MerkleProof,
    load_proof_from_json,
    proof_from_dict,
    proof_to_json,
    validate_proof_structure,
)


class TestProofSerialization:
    """Test proof JSON serialization and deserialization."""

    def test_proof_to_json_decimal_strings(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        assert j["trace_root"] == "11"
        assert j["pow_nonce"] == "5"
        assert j["query_positions"] == ["1", "4", "7", "10"]
        assert j["trace_queries"][0] == {"values": ["0", "1"], "path": ["0", "1", "2", "3", "4"]}
        assert len(j["fri"]["layers"]) == 2

    def test_json_round_trip(self, tmp_path, sample_proof) -> None:
        path = tmp_path / "proof.json"
        path.write_text(json.dumps(proof_to_json(sample_proof)))
        assert load_proof_from_json(str(path)) == sample_proof

    def test_accepts_hex_and_integers(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        j["trace_root"] = "0xff"
        j["constraint_root"] = 12
        proof = proof_from_dict(j)
        assert proof.trace_root == 255
        assert proof.constraint_root == 12

    def test_missing_nonce_defaults_to_zero(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        del j["pow_nonce"]
        assert proof_from_dict(j).pow_nonce == 0

    def test_missing_key(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        del j["ood_frame"]
        with pytest.raises(InvalidProofError, match="missing key 'ood_frame'"):
            proof_from_dict(j)

    def test_malformed_number(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        j["trace_root"] = "not-a-number"
        with pytest.raises(InvalidProofError, match="malformed proof"):
            proof_from_dict(j)

    def test_boolean_rejected(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        j["pow_nonce"] = True
        with pytest.raises(InvalidProofError, match="expected a number"):
            proof_from_dict(j)

    def test_unknown_hash_function(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        j["context"]["hash_fn"] = "blake3"
        with pytest.raises(InvalidProofError, match="hash function"):
            proof_from_dict(j)

    def test_remainder_size_beyond_u32(self, sample_proof) -> None:
        j = proof_to_json(sample_proof)
        j["context"]["max_remainder_size"] = 2**33
        with pytest.raises(InvalidProofError, match="max_remainder_size"):
            proof_from_dict(j)


class TestProofValidation:
    """Test validate_proof_structure."""

    def test_valid_proof(self, sample_proof, sample_options) -> None:
        assert validate_proof_structure(sample_proof, sample_options) == []

    def test_context_mismatch(self, sample_proof, sample_options) -> None:
        other = ProofOptions.from_dict(dict(sample_options.to_dict(), num_queries=5))
        errors = validate_proof_structure(sample_proof, other)
        assert "Context num_queries is 4, expected 5" in errors
        assert "Expected 5 query positions, got 4" in errors

    def test_duplicate_positions(self, sample_options, proof_factory) -> None:
        proof = proof_factory(sample_options, positions=[1, 1, 2, 3])
        errors = validate_proof_structure(proof, sample_options)
        assert errors == ["Query positions are not distinct"]

    def test_position_outside_domain(self, sample_options, proof_factory) -> None:
        proof = proof_factory(sample_options, positions=[0, 1, 2, 64])
        errors = validate_proof_structure(proof, sample_options)
        assert errors == ["Query position 64 outside LDE domain of size 64"]

    def test_missing_openings(self, sample_proof, sample_options) -> None:
        sample_proof.trace_queries.pop()
        sample_proof.fri.layers[1].queries.append(MerkleProof())
        errors = validate_proof_structure(sample_proof, sample_options)
        assert "Expected 4 trace query proofs, got 3" in errors
        assert "FRI layer 1 has 5 query proofs, expected 4" in errors
