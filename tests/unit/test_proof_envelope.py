"""
Module 01 - Proof Envelope Tests
Tests for whitelist_core/schemas/proof.py

Covers serialization of proofs for transport and fail-closed parsing of
untrusted envelopes.
"""
import json

import pytest

from whitelist_core.crypto.hashing import Hasher, sha256
from whitelist_core.merkle import MerkleTree, verify_merkle_proof
from whitelist_core.schemas.errors import ErrorCodes, MalformedProofException
from whitelist_core.schemas.proof import PROOF_SCHEMA_VERSION, ProofEnvelope


@pytest.fixture
def tree(emails):
    return MerkleTree.from_items(emails)


@pytest.fixture
def envelope(tree):
    proof = tree.get_proof("ama@example.com")
    return ProofEnvelope.from_proof(proof, root=tree.get_root(), hasher=tree.hasher, odd_policy=tree.odd_policy)


class TestFromProof:
    """Building envelopes from proofs."""

    def test_fields(self, tree, envelope):
        assert envelope.schema_version == PROOF_SCHEMA_VERSION
        assert envelope.algorithm == "sha256"
        assert envelope.odd_policy == "duplicate"
        assert envelope.root == tree.get_hex_root()
        assert envelope.leaf == "0x" + sha256(b"ama@example.com").hex()
        assert envelope.leaf_index == 0
        assert [s.side for s in envelope.steps] == ["right", "right"]

    def test_to_proof_preserves_steps(self, tree, envelope):
        assert envelope.to_proof() == tree.get_proof("ama@example.com")

    def test_root_bytes_and_hasher(self, tree, envelope):
        assert envelope.root_bytes == tree.get_root()
        assert envelope.hasher == tree.hasher

    def test_envelope_verifies(self, envelope):
        assert verify_merkle_proof(envelope.to_proof(), "ama@example.com", envelope.root_bytes, envelope.hasher)

    def test_records_alternate_parameters(self, emails):
        tree = MerkleTree.from_items(emails, hasher=Hasher("sha3_256"), odd_policy="promote")
        env = ProofEnvelope.from_proof(
            tree.get_proof("chris@example.com"),
            root=tree.get_root(),
            hasher=tree.hasher,
            odd_policy=tree.odd_policy,
        )

        assert env.algorithm == "sha3_256"
        assert env.odd_policy == "promote"
        assert len(env.steps) == 1
        assert verify_merkle_proof(env.to_proof(), "chris@example.com", env.root_bytes, env.hasher)


class TestSerialization:
    """Canonical JSON encoding."""

    def test_dumps_is_canonical(self, envelope):
        text = envelope.dumps()
        data = json.loads(text)

        assert " " not in text
        assert list(data) == sorted(data)

    def test_dumps_deterministic(self, envelope):
        assert envelope.dumps() == envelope.model_copy().dumps()

    def test_loads_restores_envelope(self, envelope):
        restored = ProofEnvelope.loads(envelope.dumps())

        assert restored == envelope
        assert restored.to_proof() == envelope.to_proof()

    def test_loads_accepts_bytes(self, envelope):
        assert ProofEnvelope.loads(envelope.dumps().encode("utf-8")) == envelope

    def test_optional_fields_omitted(self, tree):
        proof = tree.get_proof("ben@example.com")
        bare = type(proof)(steps=proof.steps)
        env = ProofEnvelope.from_proof(bare, root=tree.get_root())

        data = json.loads(env.dumps())

        assert "leaf" not in data
        assert "leaf_index" not in data
        assert ProofEnvelope.loads(env.dumps()).to_proof().steps == proof.steps


class TestMalformedEnvelopes:
    """Untrusted input is rejected with MalformedProofException."""

    def _mutate(self, envelope, **changes):
        data = json.loads(envelope.dumps())
        data.update(changes)
        return json.dumps(data)

    def test_invalid_json(self):
        with pytest.raises(MalformedProofException) as exc_info:
            ProofEnvelope.loads("{not json")

        assert exc_info.value.code == ErrorCodes.MALFORMED_PROOF

    def test_unknown_field(self, envelope):
        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(self._mutate(envelope, extra_field=1))

    def test_missing_root(self, envelope):
        data = json.loads(envelope.dumps())
        del data["root"]

        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(json.dumps(data))

    def test_bad_side(self, envelope):
        data = json.loads(envelope.dumps())
        data["steps"][0]["side"] = "up"

        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(json.dumps(data))

    @pytest.mark.parametrize("sibling", ["abcd", "0xabc", "0xzz", ""])
    def test_bad_hex(self, envelope, sibling):
        data = json.loads(envelope.dumps())
        data["steps"][0]["sibling"] = sibling

        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(json.dumps(data))

    def test_unknown_algorithm(self, envelope):
        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(self._mutate(envelope, algorithm="md5"))

    def test_unknown_schema_version(self, envelope):
        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(self._mutate(envelope, schema_version="v2"))

    def test_unknown_odd_policy(self, envelope):
        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(self._mutate(envelope, odd_policy="triplicate"))

    def test_negative_leaf_index(self, envelope):
        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads(self._mutate(envelope, leaf_index=-1))

    def test_wrong_digest_length(self, envelope):
        data = json.loads(envelope.dumps())
        data["steps"][1]["sibling"] = "0x" + "ab" * 31
        env = ProofEnvelope.loads(json.dumps(data))

        with pytest.raises(MalformedProofException) as exc_info:
            env.to_proof()

        assert exc_info.value.details["step_index"] == 1

    def test_not_an_object(self):
        with pytest.raises(MalformedProofException):
            ProofEnvelope.loads("[1, 2, 3]")
