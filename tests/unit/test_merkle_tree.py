"""
Module 02 - Merkle Tree Unit Tests
Tests for whitelist_core/merkle/merkle_tree.py (construction side)

Covers:
1. Root determinism and order sensitivity
2. Odd-layer policies (duplicate vs promote)
3. Unbuilt/Built lifecycle
4. Leaf lookup and accessors
5. The ama/ben/chris whitelist scenario
"""
import pytest

from whitelist_core.crypto.hashing import Hasher, sha256
from whitelist_core.merkle.merkle_tree import (
    MerkleTree,
    OddLayerPolicy,
    Side,
    build_layers,
    compute_tree_depth,
)
from whitelist_core.schemas.errors import (
    EmptySetError,
    EmptyTreeError,
    NotFoundError,
    TreeAlreadyBuiltError,
)


def _combine(left: bytes, right: bytes) -> bytes:
    return sha256(left + right)


class TestEmptyAndSingle:
    """Edge cases at the bottom of the size range."""

    def test_empty_items_raise(self):
        with pytest.raises(EmptySetError):
            MerkleTree().build([])

    def test_empty_generator_raises(self):
        with pytest.raises(EmptySetError):
            MerkleTree().build(x for x in [])

    def test_build_layers_empty_raises(self):
        with pytest.raises(EmptySetError):
            build_layers([])

    def test_single_item_root_equals_leaf(self):
        tree = MerkleTree.from_items([b"only"])

        assert tree.get_root() == sha256(b"only")
        assert tree.depth == 1

    def test_single_item_proof_is_empty(self):
        tree = MerkleTree.from_items([b"only"])
        proof = tree.get_proof(b"only")

        assert len(proof) == 0
        assert tree.verify(proof, b"only", tree.get_root())


class TestLifecycle:
    """Unbuilt -> Built state machine."""

    def test_new_tree_is_unbuilt(self):
        tree = MerkleTree()

        assert not tree.is_built
        assert tree.leaf_count == 0
        assert tree.depth == 0

    def test_unbuilt_get_root_raises(self):
        with pytest.raises(EmptyTreeError):
            MerkleTree().get_root()

    def test_unbuilt_get_proof_raises(self):
        with pytest.raises(EmptyTreeError):
            MerkleTree().get_proof(b"x")

    def test_unbuilt_accessors_raise(self):
        tree = MerkleTree()

        with pytest.raises(EmptyTreeError):
            tree.leaves
        with pytest.raises(EmptyTreeError):
            tree.layers
        with pytest.raises(EmptyTreeError):
            tree.contains(b"x")

    def test_build_returns_self(self):
        tree = MerkleTree()

        assert tree.build([b"a", b"b"]) is tree
        assert tree.is_built

    def test_second_build_rejected(self):
        tree = MerkleTree.from_items([b"a", b"b"])
        root = tree.get_root()

        with pytest.raises(TreeAlreadyBuiltError):
            tree.build([b"c"])

        assert tree.get_root() == root

    def test_failed_build_leaves_tree_unbuilt(self):
        tree = MerkleTree()

        with pytest.raises(EmptySetError):
            tree.build([])

        assert not tree.is_built
        tree.build([b"a"])
        assert tree.is_built

    def test_non_bytes_item_raises_type_error(self):
        with pytest.raises(TypeError):
            MerkleTree().build([b"a", 7])

    @pytest.mark.parametrize("items", ["abc", b"abc", bytearray(b"abc")])
    def test_bare_str_or_bytes_rejected(self, items):
        tree = MerkleTree()

        with pytest.raises(TypeError):
            tree.build(items)

        assert not tree.is_built

    def test_invalid_odd_policy(self):
        with pytest.raises(ValueError):
            MerkleTree(odd_policy="triplicate")

    def test_odd_policy_accepts_string(self):
        assert MerkleTree(odd_policy="promote").odd_policy is OddLayerPolicy.PROMOTE


class TestRootDeterminism:
    """Tests for deterministic root computation."""

    def test_same_items_same_root(self, many_items):
        roots = {MerkleTree.from_items(many_items).get_root() for _ in range(5)}

        assert len(roots) == 1

    def test_root_is_digest_sized(self, many_items):
        assert len(MerkleTree.from_items(many_items).get_root()) == 32
        assert len(MerkleTree.from_items(many_items, hasher=Hasher("sha512")).get_root()) == 64

    def test_reversed_items_different_root(self, emails):
        forward = MerkleTree.from_items(emails).get_root()
        backward = MerkleTree.from_items(list(reversed(emails))).get_root()

        assert forward != backward

    def test_different_items_different_root(self):
        assert MerkleTree.from_items([b"a", b"b"]).get_root() != MerkleTree.from_items([b"x", b"y"]).get_root()

    def test_hasher_changes_root(self, emails):
        assert (
            MerkleTree.from_items(emails).get_root()
            != MerkleTree.from_items(emails, hasher=Hasher("sha3_256")).get_root()
        )

    def test_str_and_bytes_items_agree(self, emails):
        as_bytes = [e.encode("utf-8") for e in emails]

        assert MerkleTree.from_items(emails).get_root() == MerkleTree.from_items(as_bytes).get_root()


class TestOddLayerPolicy:
    """Padding rules for odd-sized layers."""

    def test_duplicate_three_leaves(self):
        a, b, c = sha256(b"a"), sha256(b"b"), sha256(b"c")
        expected = _combine(_combine(a, b), _combine(c, c))

        tree = MerkleTree.from_items([b"a", b"b", b"c"], odd_policy=OddLayerPolicy.DUPLICATE)

        assert tree.get_root() == expected

    def test_promote_three_leaves(self):
        a, b, c = sha256(b"a"), sha256(b"b"), sha256(b"c")
        expected = _combine(_combine(a, b), c)

        tree = MerkleTree.from_items([b"a", b"b", b"c"], odd_policy=OddLayerPolicy.PROMOTE)

        assert tree.get_root() == expected

    def test_duplicate_five_leaves(self):
        a, b, c, d, e = (sha256(f"leaf{i}".encode()) for i in range(5))
        # [a b c d e] -> [ab cd ee] -> [abcd eeee] -> root
        ee = _combine(e, e)
        expected = _combine(_combine(_combine(a, b), _combine(c, d)), _combine(ee, ee))

        tree = MerkleTree.from_items([f"leaf{i}".encode() for i in range(5)])

        assert tree.get_root() == expected

    def test_promote_five_leaves(self):
        a, b, c, d, e = (sha256(f"leaf{i}".encode()) for i in range(5))
        # [a b c d e] -> [ab cd e] -> [abcd e] -> root
        expected = _combine(_combine(_combine(a, b), _combine(c, d)), e)

        tree = MerkleTree.from_items([f"leaf{i}".encode() for i in range(5)], odd_policy="promote")

        assert tree.get_root() == expected

    def test_even_leaves_policies_agree(self):
        items = [f"leaf{i}".encode() for i in range(8)]

        assert (
            MerkleTree.from_items(items, odd_policy="duplicate").get_root()
            == MerkleTree.from_items(items, odd_policy="promote").get_root()
        )

    def test_odd_leaves_policies_differ(self, emails):
        assert (
            MerkleTree.from_items(emails, odd_policy="duplicate").get_root()
            != MerkleTree.from_items(emails, odd_policy="promote").get_root()
        )

    def test_layer_shapes(self):
        tree = MerkleTree.from_items([f"{i}".encode() for i in range(5)])

        assert [len(layer) for layer in tree.layers] == [5, 3, 2, 1]


class TestComputeTreeDepth:
    """Tests for compute_tree_depth()."""

    @pytest.mark.parametrize(
        "num_leaves,depth",
        [(0, 0), (1, 1), (2, 2), (3, 3), (4, 3), (5, 4), (7, 4), (8, 4), (9, 5), (17, 6)],
    )
    def test_depth(self, num_leaves, depth):
        assert compute_tree_depth(num_leaves) == depth

    @pytest.mark.parametrize("policy", list(OddLayerPolicy))
    def test_depth_matches_built_tree(self, many_items, policy):
        tree = MerkleTree.from_items(many_items, odd_policy=policy)

        assert tree.depth == compute_tree_depth(len(many_items))


class TestLeafLookup:
    """Leaf index and accessors."""

    def test_leaves_preserve_order(self, emails):
        tree = MerkleTree.from_items(emails)

        assert tree.leaves == tuple(sha256(e.encode()) for e in emails)

    def test_get_leaf_index(self, emails):
        tree = MerkleTree.from_items(emails)

        assert tree.get_leaf_index("chris@example.com") == 2
        assert tree.get_leaf_index("dave@example.com") is None

    def test_contains(self, emails):
        tree = MerkleTree.from_items(emails)

        assert tree.contains("ben@example.com")
        assert not tree.contains("dave@example.com")

    def test_duplicate_items_resolve_to_first_index(self):
        tree = MerkleTree.from_items([b"x", b"y", b"x"])

        assert tree.get_leaf_index(b"x") == 0
        assert tree.get_proof(b"x").index == 0
        assert tree.leaf_count == 3

    def test_len_and_repr(self, emails):
        tree = MerkleTree.from_items(emails)

        assert len(tree) == 3
        assert tree.get_hex_root() in repr(tree)
        assert "unbuilt" in repr(MerkleTree())

    def test_get_hex_root(self, emails):
        tree = MerkleTree.from_items(emails)

        assert tree.get_hex_root() == "0x" + tree.get_root().hex()


class TestWhitelistScenario:
    """The three-address whitelist."""

    def test_member_proof_has_two_steps(self, emails):
        tree = MerkleTree.from_items(emails)
        proof = tree.get_proof("ama@example.com")

        assert len(proof) == 2
        assert proof.sides == [Side.RIGHT, Side.RIGHT]
        assert proof.siblings[0] == sha256(b"ben@example.com")

    def test_member_verifies(self, emails):
        tree = MerkleTree.from_items(emails)
        proof = tree.get_proof("ama@example.com")

        assert tree.verify(proof, "ama@example.com", tree.get_root())

    def test_proof_does_not_verify_other_item(self, emails):
        tree = MerkleTree.from_items(emails)
        proof = tree.get_proof("ama@example.com")

        assert not tree.verify(proof, "dave@example.com", tree.get_root())

    def test_absent_item_not_found(self, emails):
        tree = MerkleTree.from_items(emails)

        with pytest.raises(NotFoundError) as exc_info:
            tree.get_proof("dave@example.com")

        assert exc_info.value.details["leaf"] == "0x" + sha256(b"dave@example.com").hex()

    def test_promote_policy_scenario(self, emails):
        tree = MerkleTree.from_items(emails, odd_policy="promote")

        ama = tree.get_proof("ama@example.com")
        chris = tree.get_proof("chris@example.com")

        assert len(ama) == 2
        # chris is carried up unpaired, so only one sibling is needed
        assert len(chris) == 1
        assert chris.sides == [Side.LEFT]
        assert tree.verify(chris, "chris@example.com", tree.get_root())
