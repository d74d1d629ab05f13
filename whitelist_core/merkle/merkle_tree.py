"""
Module 02 - Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification.

This module provides:
- MerkleTree: builds all layers from an ordered item set and serves proofs
- MerkleProof / ProofStep: leaf-to-root sibling path with LEFT/RIGHT sides
- verify_merkle_proof / verify_leaf: pure, fail-closed verification

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = hash(item); str items are UTF-8 encoded first
2. Parent hashing: parent = hash(left + right)
3. Odd layers: OddLayerPolicy.DUPLICATE (default) pairs the last node with
   itself; OddLayerPolicy.PROMOTE carries it up unchanged. The policy is
   part of the tree's identity.
4. Single leaf: root = leaf, proof is empty
5. Empty item set: rejected with EmptySetError

Determinism Notes:
- No randomness and no sorting. Leaf order is the caller's order.
- Duplicate items resolve to the first position they occupy.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Sequence, Union

from whitelist_core.crypto.hashing import DEFAULT_HASHER, Hasher, Item, to_hex
from whitelist_core.schemas.errors import (
    EmptySetError,
    EmptyTreeError,
    MalformedProofException,
    NotFoundError,
    TreeAlreadyBuiltError,
)


logger = logging.getLogger(__name__)


class Side(str, Enum):
    """Position of a sibling digest when recombining with the running digest."""
    LEFT = "left"
    RIGHT = "right"


class OddLayerPolicy(str, Enum):
    """How an unpaired last node of a layer is carried to the next layer."""
    DUPLICATE = "duplicate"
    PROMOTE = "promote"


@dataclass(frozen=True)
class ProofStep:
    """
    One layer of a Merkle proof.

    Attributes:
        sibling: Digest of the node paired with the running digest
        side: Whether the sibling is the LEFT or RIGHT operand
    """
    sibling: bytes
    side: Side

    def __post_init__(self) -> None:
        if not isinstance(self.side, Side):
            object.__setattr__(self, "side", Side(self.side))


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    The steps are ordered leaf-to-root. ``leaf`` and ``index`` record what
    the proof was generated for; verification never relies on them.

    Attributes:
        steps: Sibling digests with their sides, bottom-up
        leaf: Leaf digest the proof was generated for
        index: 0-based position of that leaf
    """
    steps: tuple[ProofStep, ...] = ()
    leaf: bytes | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        if self.index is not None and self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[ProofStep]:
        return iter(self.steps)

    @property
    def siblings(self) -> list[bytes]:
        return [step.sibling for step in self.steps]

    @property
    def sides(self) -> list[Side]:
        return [step.side for step in self.steps]

    def to_hex_list(self) -> list[dict[str, str]]:
        """Render the steps as ``{"sibling": "0x..", "side": "left"}`` dicts."""
        return [{"sibling": to_hex(s.sibling), "side": s.side.value} for s in self.steps]


ProofLike = Union[MerkleProof, Sequence[Any]]


# =============================================================================
# Verification
# =============================================================================

def _normalize_step(raw: Any, position: int, digest_size: int) -> ProofStep:
    if isinstance(raw, ProofStep):
        sibling, side = raw.sibling, raw.side
    elif isinstance(raw, (tuple, list)) and len(raw) == 2:
        sibling, side = raw
    else:
        raise MalformedProofException(
            f"Proof step must be a ProofStep or (sibling, side) pair, got {type(raw).__name__}",
            step_index=position,
        )

    if not isinstance(sibling, (bytes, bytearray)):
        raise MalformedProofException(
            f"Sibling must be bytes, got {type(sibling).__name__}",
            step_index=position,
        )
    if len(sibling) != digest_size:
        raise MalformedProofException(
            f"Sibling digest has length {len(sibling)}, expected {digest_size}",
            step_index=position,
        )
    try:
        side = Side(side)
    except (TypeError, ValueError) as e:
        raise MalformedProofException(
            f"Invalid side flag: {side!r}",
            step_index=position,
        ) from e

    return ProofStep(sibling=bytes(sibling), side=side)


def compute_root_from_proof(
    proof: ProofLike,
    leaf: bytes,
    hasher: Hasher | None = None,
) -> bytes:
    """
    Replay a proof against a leaf digest and return the resulting root.

    Algorithm:
    1. Start with the leaf digest
    2. For each step (bottom-up):
       - LEFT sibling:  running = combine(sibling, running)
       - RIGHT sibling: running = combine(running, sibling)

    Args:
        proof: MerkleProof or sequence of ProofStep / (sibling, side) pairs
        leaf: Starting leaf digest
        hasher: Hasher the tree was built with (default SHA-256)

    Returns:
        Recomputed root digest

    Raises:
        MalformedProofException: If the leaf or any step is structurally invalid
    """
    hasher = hasher or DEFAULT_HASHER
    digest_size = hasher.digest_size

    if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != digest_size:
        raise MalformedProofException(
            f"Leaf must be a {digest_size}-byte digest",
        )

    steps = proof.steps if isinstance(proof, MerkleProof) else proof
    if isinstance(steps, (str, bytes, bytearray)) or not isinstance(steps, Iterable):
        raise MalformedProofException(
            f"Proof must be a sequence of steps, got {type(steps).__name__}",
        )

    running = bytes(leaf)
    for position, raw in enumerate(steps):
        step = _normalize_step(raw, position, digest_size)
        if step.side is Side.LEFT:
            running = hasher.combine(step.sibling, running)
        else:
            running = hasher.combine(running, step.sibling)

    return running


def verify_leaf(
    proof: ProofLike,
    leaf: bytes,
    root: bytes,
    hasher: Hasher | None = None,
) -> bool:
    """
    Verify that a leaf digest is committed to by ``root``.

    Never raises for bad input: malformed proofs, wrong-length digests and
    unknown side flags all return False.

    Args:
        proof: MerkleProof or sequence of (sibling, side) pairs
        leaf: Leaf digest to check
        root: Known Merkle root
        hasher: Hasher the tree was built with (default SHA-256)

    Returns:
        True iff the recomputed root equals ``root`` byte-wise
    """
    if not isinstance(root, (bytes, bytearray)):
        logger.debug(f"Rejecting proof: root is {type(root).__name__}, not bytes")
        return False
    try:
        computed = compute_root_from_proof(proof, leaf, hasher)
    except MalformedProofException as e:
        logger.debug(f"Rejecting malformed proof: {e.message}")
        return False
    return computed == bytes(root)


def verify_merkle_proof(
    proof: ProofLike,
    item: Item,
    root: bytes,
    hasher: Hasher | None = None,
) -> bool:
    """
    Verify that a raw item is a member of the set committed to by ``root``.

    The item is hashed into its leaf digest and checked with verify_leaf().

    Example:
        >>> tree = MerkleTree.from_items(["a", "b", "c"])
        >>> verify_merkle_proof(tree.get_proof("b"), "b", tree.get_root())
        True
    """
    hasher = hasher or DEFAULT_HASHER
    try:
        leaf = hasher.hash_item(item)
    except (TypeError, UnicodeEncodeError) as e:
        logger.debug(f"Rejecting proof for unhashable item: {e}")
        return False
    return verify_leaf(proof, leaf, root, hasher)


# =============================================================================
# Construction
# =============================================================================

def build_layers(
    leaves: Sequence[bytes],
    hasher: Hasher | None = None,
    odd_policy: OddLayerPolicy = OddLayerPolicy.DUPLICATE,
) -> tuple[tuple[bytes, ...], ...]:
    """
    Build every layer of a Merkle tree from its leaf digests.

    Padding example with DUPLICATE:
        [a, b, c] -> [parent(a,b), parent(c,c)] -> [root]
    and with PROMOTE:
        [a, b, c] -> [parent(a,b), c] -> [root]

    Args:
        leaves: Leaf digests, in order
        hasher: Hasher used to combine nodes
        odd_policy: Rule for an unpaired last node

    Returns:
        Tuple of layers, leaves first, root layer last

    Raises:
        EmptySetError: If leaves is empty
    """
    if len(leaves) == 0:
        raise EmptySetError()

    hasher = hasher or DEFAULT_HASHER
    current_level: tuple[bytes, ...] = tuple(leaves)
    layers: list[tuple[bytes, ...]] = [current_level]

    while len(current_level) > 1:
        next_level: list[bytes] = []
        for i in range(0, len(current_level), 2):
            if i + 1 < len(current_level):
                next_level.append(hasher.combine(current_level[i], current_level[i + 1]))
            elif odd_policy is OddLayerPolicy.DUPLICATE:
                next_level.append(hasher.combine(current_level[i], current_level[i]))
            else:
                next_level.append(current_level[i])

        current_level = tuple(next_level)
        layers.append(current_level)

    return tuple(layers)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of layers from leaves to root (inclusive).

    A single leaf has depth 1, two or three leaves depth 2. Both odd-layer
    policies give the same depth. An empty set has depth 0.
    """
    if num_leaves <= 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1

    return depth


class MerkleTree:
    """
    Binary Merkle tree over an ordered set of items.

    A tree starts Unbuilt and becomes Built exactly once through build().
    Built trees are immutable, so get_root/get_proof/verify can be called
    from any number of threads without locking.

    Example:
        >>> tree = MerkleTree().build([b"ama@example.com", b"ben@example.com"])
        >>> proof = tree.get_proof(b"ama@example.com")
        >>> tree.verify(proof, b"ama@example.com", tree.get_root())
        True
    """

    def __init__(
        self,
        hasher: Hasher | None = None,
        odd_policy: OddLayerPolicy | str = OddLayerPolicy.DUPLICATE,
    ) -> None:
        self.hasher: Hasher = hasher or DEFAULT_HASHER
        self.odd_policy: OddLayerPolicy = OddLayerPolicy(odd_policy)
        self._layers: tuple[tuple[bytes, ...], ...] = ()
        self._leaf_index: dict[bytes, int] = {}

    @classmethod
    def from_items(
        cls,
        items: Iterable[Item],
        hasher: Hasher | None = None,
        odd_policy: OddLayerPolicy | str = OddLayerPolicy.DUPLICATE,
    ) -> "MerkleTree":
        """Create and build a tree in one call."""
        return cls(hasher=hasher, odd_policy=odd_policy).build(items)

    def build(self, items: Iterable[Item]) -> "MerkleTree":
        """
        Hash the items into leaves and build all layers.

        Args:
            items: Ordered, non-empty collection of bytes (or str) items

        Returns:
            self, now Built

        Raises:
            TreeAlreadyBuiltError: If this tree was already built
            EmptySetError: If items is empty
            TypeError: If items is itself a str or bytes, or an item is
                neither bytes nor str
        """
        if self.is_built:
            raise TreeAlreadyBuiltError()
        if isinstance(items, (str, bytes, bytearray)):
            raise TypeError(
                f"Items must be a collection of items, got a bare {type(items).__name__}"
            )

        leaves = [self.hasher.hash_item(item) for item in items]
        if not leaves:
            raise EmptySetError()

        layers = build_layers(leaves, self.hasher, self.odd_policy)

        leaf_index: dict[bytes, int] = {}
        for i, leaf in enumerate(leaves):
            leaf_index.setdefault(leaf, i)

        self._leaf_index = leaf_index
        self._layers = layers

        logger.info(
            f"Built Merkle tree: {len(leaves)} leaves, depth {len(layers)}, "
            f"{self.hasher.algorithm}/{self.odd_policy.value}"
        )
        return self

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    @property
    def is_built(self) -> bool:
        return bool(self._layers)

    def _require_built(self) -> None:
        if not self.is_built:
            raise EmptyTreeError()

    @property
    def leaves(self) -> tuple[bytes, ...]:
        self._require_built()
        return self._layers[0]

    @property
    def layers(self) -> tuple[tuple[bytes, ...], ...]:
        self._require_built()
        return self._layers

    @property
    def leaf_count(self) -> int:
        return len(self._layers[0]) if self._layers else 0

    @property
    def depth(self) -> int:
        return len(self._layers)

    def get_root(self) -> bytes:
        """
        Return the root digest.

        Raises:
            EmptyTreeError: If the tree has not been built
        """
        self._require_built()
        return self._layers[-1][0]

    def get_hex_root(self) -> str:
        """Return the root as a 0x-prefixed hex string."""
        return to_hex(self.get_root())

    def get_leaf_index(self, item: Item) -> int | None:
        """Position of an item's leaf, or None if the item is not in the tree."""
        self._require_built()
        return self._leaf_index.get(self.hasher.hash_item(item))

    def contains(self, item: Item) -> bool:
        return self.get_leaf_index(item) is not None

    def __len__(self) -> int:
        return self.leaf_count

    def __repr__(self) -> str:
        state = f"root={self.get_hex_root()}" if self.is_built else "unbuilt"
        return (
            f"MerkleTree(leaves={self.leaf_count}, algorithm={self.hasher.algorithm!r}, "
            f"odd_policy={self.odd_policy.value!r}, {state})"
        )

    # -------------------------------------------------------------------------
    # Proofs
    # -------------------------------------------------------------------------

    def get_proof(self, target: Item) -> MerkleProof:
        """
        Generate an inclusion proof for a raw item.

        Args:
            target: Item whose membership is being proven

        Returns:
            MerkleProof ordered leaf-to-root

        Raises:
            EmptyTreeError: If the tree has not been built
            NotFoundError: If the item is not in the tree
        """
        self._require_built()
        return self.get_proof_for_leaf(self.hasher.hash_item(target))

    def get_proof_for_leaf(self, leaf: bytes) -> MerkleProof:
        """
        Generate an inclusion proof for an already hashed leaf.

        Raises:
            EmptyTreeError: If the tree has not been built
            NotFoundError: If no leaf equals ``leaf``
        """
        self._require_built()
        index = self._leaf_index.get(leaf)
        if index is None:
            raise NotFoundError("Leaf not found in Merkle tree", leaf=leaf)
        return self.get_proof_at(index)

    def get_proof_at(self, index: int) -> MerkleProof:
        """
        Generate an inclusion proof for the leaf at ``index``.

        Algorithm:
        1. Start at the target leaf index
        2. At each layer below the root:
           - sibling index = index XOR 1
           - sibling is RIGHT when index is even, LEFT when odd
           - unpaired last node: DUPLICATE records itself as RIGHT sibling,
             PROMOTE records nothing
           - move up: index = index // 2

        Raises:
            EmptyTreeError: If the tree has not been built
            IndexError: If index is out of range
        """
        self._require_built()
        if index < 0 or index >= self.leaf_count:
            raise IndexError(
                f"Leaf index {index} out of range for {self.leaf_count} leaves"
            )

        steps: list[ProofStep] = []
        current_index = index

        for layer in self._layers[:-1]:
            sibling_index = current_index ^ 1
            if sibling_index < len(layer):
                side = Side.RIGHT if current_index % 2 == 0 else Side.LEFT
                steps.append(ProofStep(sibling=layer[sibling_index], side=side))
            elif self.odd_policy is OddLayerPolicy.DUPLICATE:
                steps.append(ProofStep(sibling=layer[current_index], side=Side.RIGHT))

            current_index //= 2

        logger.debug(f"Generated proof for leaf {index}: {len(steps)} steps")
        return MerkleProof(steps=tuple(steps), leaf=self._layers[0][index], index=index)

    def verify(self, proof: ProofLike, item: Item, root: bytes) -> bool:
        """
        Verify a proof for ``item`` against ``root`` using this tree's hasher.

        The tree itself need not be built; only the hasher is used.
        """
        return verify_merkle_proof(proof, item, root, hasher=self.hasher)


__all__ = [
    "Side",
    "OddLayerPolicy",
    "ProofStep",
    "MerkleProof",
    "MerkleTree",
    "build_layers",
    "compute_tree_depth",
    "compute_root_from_proof",
    "verify_leaf",
    "verify_merkle_proof",
]
