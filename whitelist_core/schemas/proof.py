"""
Module 01 - Schemas & Canonicalization
File: proof.py

Purpose: Transport schema for Merkle inclusion proofs.

A ProofEnvelope carries everything an external party needs to check
membership while holding only the published root: the hash algorithm,
the odd-layer policy the tree was built with, and the ordered sibling path
as 0x-prefixed hex. Byte sequences and step order survive a round trip
exactly.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from whitelist_core.crypto.hashing import SUPPORTED_ALGORITHMS, Hasher, from_hex, to_hex
from whitelist_core.merkle.merkle_tree import MerkleProof, OddLayerPolicy, ProofStep, Side

from .canonical import dumps_canonical, loads_canonical
from .errors import MalformedProofException


PROOF_SCHEMA_VERSION: str = "v1"

HEX_PATTERN = r"^0x([0-9a-fA-F]{2})*$"


class ProofStepModel(BaseModel):
    """One sibling of the proof path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sibling: str = Field(..., description="Sibling digest, 0x-prefixed hex", pattern=HEX_PATTERN)
    side: Literal["left", "right"] = Field(..., description="Operand position of the sibling")


class ProofEnvelope(BaseModel):
    """
    Serializable Merkle inclusion proof.

    Example:
        >>> envelope = ProofEnvelope.from_proof(proof, root=tree.get_root())
        >>> ProofEnvelope.loads(envelope.dumps()).to_proof() == proof
        True
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: Literal["v1"] = Field(default=PROOF_SCHEMA_VERSION)
    algorithm: str = Field(default="sha256", description="Digest algorithm of the tree")
    odd_policy: Literal["duplicate", "promote"] = Field(
        default=OddLayerPolicy.DUPLICATE.value,
        description="Odd-layer policy of the tree",
    )
    root: str = Field(..., description="Merkle root, 0x-prefixed hex", pattern=HEX_PATTERN)
    leaf: str | None = Field(
        default=None,
        description="Leaf digest the proof was generated for",
        pattern=HEX_PATTERN,
    )
    leaf_index: int | None = Field(default=None, ge=0)
    steps: list[ProofStepModel] = Field(default_factory=list)

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if value not in SUPPORTED_ALGORITHMS:
            raise ValueError(
                f"Unsupported algorithm {value!r}; expected one of {list(SUPPORTED_ALGORITHMS)}"
            )
        return value

    @classmethod
    def from_proof(
        cls,
        proof: MerkleProof,
        root: bytes,
        hasher: Hasher | None = None,
        odd_policy: OddLayerPolicy | str = OddLayerPolicy.DUPLICATE,
    ) -> "ProofEnvelope":
        """Wrap a MerkleProof together with the root and tree parameters."""
        return cls(
            algorithm=(hasher or Hasher()).algorithm,
            odd_policy=OddLayerPolicy(odd_policy).value,
            root=to_hex(root),
            leaf=to_hex(proof.leaf) if proof.leaf is not None else None,
            leaf_index=proof.index,
            steps=[
                ProofStepModel(sibling=to_hex(step.sibling), side=step.side.value)
                for step in proof.steps
            ],
        )

    @property
    def hasher(self) -> Hasher:
        return Hasher(self.algorithm)

    @property
    def root_bytes(self) -> bytes:
        return from_hex(self.root)

    def to_proof(self) -> MerkleProof:
        """
        Decode back into a MerkleProof.

        Raises:
            MalformedProofException: If a digest has the wrong length for
                the envelope's algorithm
        """
        digest_size = self.hasher.digest_size
        steps: list[ProofStep] = []
        for i, step in enumerate(self.steps):
            sibling = from_hex(step.sibling)
            if len(sibling) != digest_size:
                raise MalformedProofException(
                    f"Sibling digest has length {len(sibling)}, expected {digest_size}",
                    step_index=i,
                )
            steps.append(ProofStep(sibling=sibling, side=Side(step.side)))

        leaf = from_hex(self.leaf) if self.leaf is not None else None
        return MerkleProof(steps=tuple(steps), leaf=leaf, index=self.leaf_index)

    def dumps(self) -> str:
        """Canonical JSON encoding."""
        return dumps_canonical(self)

    @classmethod
    def loads(cls, data: str | bytes) -> "ProofEnvelope":
        """
        Parse an envelope from JSON.

        Raises:
            MalformedProofException: If the document is not valid JSON or
                does not match the schema
        """
        try:
            raw = loads_canonical(data)
        except (TypeError, ValueError) as e:
            raise MalformedProofException(
                f"Proof is not valid JSON: {e}",
            ) from e
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise MalformedProofException(
                "Proof does not match the envelope schema",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
