"""
Module 02 - Merkle Proofs Convenience Wrappers
Thin class-based wrappers around the functions in merkle_tree.py.

This module provides:
- MerkleProver: Build a tree and generate proofs in one step
- MerkleVerifier: Verify proofs with a fixed hasher, holding only a root
"""
from __future__ import annotations

from typing import Iterable, Sequence

from whitelist_core.crypto.hashing import DEFAULT_HASHER, Hasher, Item
from whitelist_core.merkle.merkle_tree import (
    MerkleProof,
    MerkleTree,
    OddLayerPolicy,
    ProofLike,
    Side,
    verify_leaf,
    verify_merkle_proof,
)


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(["a", "b", "c"], "b")
        >>> len(proof)
        2
    """

    @staticmethod
    def prove(
        items: Iterable[Item],
        target: Item,
        hasher: Hasher | None = None,
        odd_policy: OddLayerPolicy | str = OddLayerPolicy.DUPLICATE,
    ) -> MerkleProof:
        """
        Build a tree over ``items`` and return the proof for ``target``.

        Raises:
            EmptySetError: If items is empty
            NotFoundError: If target is not among the items
        """
        return MerkleTree.from_items(items, hasher=hasher, odd_policy=odd_policy).get_proof(target)

    @staticmethod
    def compute_root(
        items: Iterable[Item],
        hasher: Hasher | None = None,
        odd_policy: OddLayerPolicy | str = OddLayerPolicy.DUPLICATE,
    ) -> bytes:
        """Root of the tree built over ``items``."""
        return MerkleTree.from_items(items, hasher=hasher, odd_policy=odd_policy).get_root()


class MerkleVerifier:
    """
    Verifies proofs against a published root.

    Holds no tree, only the root and the hasher the tree was built with.

    Example:
        >>> verifier = MerkleVerifier(root)
        >>> verifier.verify(proof, "ama@example.com")
        True
    """

    def __init__(self, root: bytes, hasher: Hasher | None = None) -> None:
        self.root = root
        self.hasher = hasher or DEFAULT_HASHER

    def verify(self, proof: ProofLike, item: Item) -> bool:
        """Verify that ``item`` is a member."""
        return verify_merkle_proof(proof, item, self.root, hasher=self.hasher)

    def verify_leaf(self, proof: ProofLike, leaf: bytes) -> bool:
        """Verify that a pre-hashed ``leaf`` is a member."""
        return verify_leaf(proof, leaf, self.root, hasher=self.hasher)

    def verify_path(
        self,
        item: Item,
        siblings: Sequence[bytes],
        sides: Sequence[Side | str],
    ) -> bool:
        """
        Verify using raw sibling and side lists.

        Lists of different lengths are treated as a failed proof.
        """
        if len(siblings) != len(sides):
            return False
        steps = [(sibling, side) for sibling, side in zip(siblings, sides)]
        return self.verify(steps, item)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
