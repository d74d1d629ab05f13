"""
Module 02 - Merkle Tree and Commitments
Deterministic Merkle tree construction + proof generation/verification.

This module provides:
- MerkleTree: Unbuilt -> Built tree over an ordered item set
- MerkleProof / ProofStep / Side: leaf-to-root sibling path
- verify_merkle_proof / verify_leaf: pure, fail-closed verification
- MerkleProver / MerkleVerifier: convenience wrappers

Canonical Commitment Rules:
1. Leaf hashing: hash(item), str items UTF-8 encoded
2. Parent hashing: hash(left + right)
3. Odd layers: duplicate last node (default) or promote it unchanged
4. Single leaf: root = leaf
5. Empty item set: EmptySetError

Usage:
    from whitelist_core.merkle import MerkleTree, verify_merkle_proof

    tree = MerkleTree.from_items(["ama@example.com", "ben@example.com"])
    root = tree.get_root()
    proof = tree.get_proof("ama@example.com")

    assert verify_merkle_proof(proof, "ama@example.com", root)
"""
from .merkle_tree import (
    Side,
    OddLayerPolicy,
    ProofStep,
    MerkleProof,
    MerkleTree,
    build_layers,
    compute_tree_depth,
    compute_root_from_proof,
    verify_leaf,
    verify_merkle_proof,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "Side",
    "OddLayerPolicy",
    "ProofStep",
    "MerkleProof",
    "MerkleTree",
    # Core functions
    "build_layers",
    "compute_tree_depth",
    "compute_root_from_proof",
    "verify_leaf",
    "verify_merkle_proof",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
