"""
Merkle commitment tests: merkle.py
"""
import hashlib

import pytest

from qapzk.errors import CommitmentError
from qapzk.merkle import (
    MerkleTree, InclusionProof, hash_leaf, hash_node, LEAF_PREFIX, NODE_PREFIX,
)
from qapzk.utils import sha256, HASH_SIZE


@pytest.fixture(scope="module")
def leaves(F101):
    return [F101(v) for v in (10, 20, 30, 40, 50)]


@pytest.fixture(scope="module")
def tree(leaves):
    return MerkleTree.build(leaves)


class TestBuild:
    def test_five_leaves_padded_to_eight(self, tree):
        assert tree.num_leaves == 5
        assert tree.depth == 3
        assert len(tree.levels[0]) == 8
        assert len(tree.root) == HASH_SIZE

    def test_padding_sentinel(self, tree):
        for digest in tree.levels[0][5:]:
            assert digest == bytes(HASH_SIZE)

    def test_leaf_and_node_domain_separation(self, F101, tree):
        assert hash_leaf(F101(10)) == sha256(LEAF_PREFIX + b"\x0a")
        left, right = tree.levels[0][0], tree.levels[0][1]
        assert tree.levels[1][0] == sha256(NODE_PREFIX + left + right)
        assert tree.levels[1][0] == hash_node(left, right)

    def test_single_leaf(self, F101):
        single = MerkleTree.build([F101(7)])
        assert single.depth == 0
        assert single.root == hash_leaf(F101(7))
        proof = single.open(0)
        assert proof.siblings == []
        assert MerkleTree.verify(F101(7), proof, single.root)

    def test_deterministic(self, leaves, tree):
        assert MerkleTree.build(leaves).root == tree.root

    def test_root_depends_on_every_leaf(self, F101, leaves, tree):
        for i in range(len(leaves)):
            changed = list(leaves)
            changed[i] = changed[i] + F101(1)
            assert MerkleTree.build(changed).root != tree.root

    def test_empty_rejected(self):
        with pytest.raises(CommitmentError):
            MerkleTree.build([])

    def test_bytes_leaves(self):
        tree = MerkleTree.build([b"a", b"b"])
        assert MerkleTree.verify(b"b", tree.open(1), tree.root)

    def test_unsupported_leaf_type(self):
        with pytest.raises(TypeError):
            MerkleTree.build(["not a leaf"])

    def test_custom_hash(self, leaves):
        def blake(data):
            return hashlib.blake2s(data).digest()

        tree = MerkleTree.build(leaves, blake)
        assert tree.root != MerkleTree.build(leaves).root
        assert MerkleTree.verify(leaves[3], tree.open(3), tree.root, blake)
        assert not MerkleTree.verify(leaves[3], tree.open(3), tree.root)


class TestOpenVerify:
    def test_every_leaf_verifies(self, leaves, tree):
        for i, leaf in enumerate(leaves):
            proof = tree.open(i)
            assert proof.index == i
            assert proof.depth == tree.depth
            assert MerkleTree.verify(leaf, proof, tree.root)

    def test_compute_root(self, leaves, tree):
        assert MerkleTree.compute_root(leaves[2], tree.open(2)) == tree.root

    @pytest.mark.parametrize("index", [5, 7, 8, -1])
    def test_open_out_of_range(self, tree, index):
        with pytest.raises(CommitmentError) as excinfo:
            tree.open(index)
        assert excinfo.value.index == index

    def test_wrong_leaf(self, F101, tree):
        assert not MerkleTree.verify(F101(11), tree.open(0), tree.root)

    def test_leaf_at_wrong_index(self, leaves, tree):
        assert not MerkleTree.verify(leaves[1], tree.open(0), tree.root)

    def test_flipped_sibling(self, leaves, tree):
        proof = tree.open(4)
        siblings = list(proof.siblings)
        siblings[1] = bytes([siblings[1][0] ^ 1]) + siblings[1][1:]
        assert not MerkleTree.verify(leaves[4], InclusionProof(4, siblings), tree.root)

    def test_moved_index(self, leaves, tree):
        proof = tree.open(2)
        assert not MerkleTree.verify(leaves[2], InclusionProof(3, proof.siblings), tree.root)

    @pytest.mark.parametrize("index", [-1, 8, 100])
    def test_index_outside_tree(self, leaves, tree, index):
        proof = tree.open(0)
        assert not MerkleTree.verify(leaves[0], InclusionProof(index, proof.siblings), tree.root)

    def test_malformed_inputs_return_false(self, leaves, tree):
        proof = tree.open(0)
        assert not MerkleTree.verify(leaves[0], proof, tree.root.hex())
        assert not MerkleTree.verify(leaves[0], None, tree.root)
        assert not MerkleTree.verify(leaves[0], InclusionProof(True, proof.siblings), tree.root)
        assert not MerkleTree.verify(leaves[0], InclusionProof(0, proof.siblings[:-1] + [b"x"]), tree.root)
        assert not MerkleTree.verify("leaf", proof, tree.root)

    def test_truncated_path(self, leaves, tree):
        proof = tree.open(0)
        assert not MerkleTree.verify(leaves[0], InclusionProof(0, proof.siblings[:-1]), tree.root)

    def test_proof_equality(self, tree):
        assert tree.open(1) == tree.open(1)
        assert tree.open(1) != tree.open(2)
        assert repr(tree.open(1)) == "InclusionProof(index=1, depth=3)"


# 리프 수 → (깊이, 패딩 후 폭)
TREE_SHAPES = {
    1: (0, 1), 2: (1, 2), 3: (2, 4), 4: (2, 4), 5: (3, 8),
    6: (3, 8), 7: (3, 8), 8: (3, 8), 9: (4, 16),
}


class TestTreeSizes:
    """크기 1..9 트리: 패딩, 모든 리프의 열기/검증, 형제 하나 변조 시 거부"""

    @staticmethod
    def _build(F101, size):
        values = [F101(3 * i + 1) for i in range(size)]
        return values, MerkleTree.build(values)

    @pytest.mark.parametrize("size", range(1, 10))
    def test_shape(self, F101, size):
        _, tree = self._build(F101, size)
        depth, width = TREE_SHAPES[size]
        assert tree.num_leaves == size
        assert tree.depth == depth
        assert len(tree.levels[0]) == width
        assert tree.levels[0][size:] == [bytes(HASH_SIZE)] * (width - size)

    @pytest.mark.parametrize("size", range(1, 10))
    def test_every_leaf_verifies(self, F101, size):
        values, tree = self._build(F101, size)
        for i, leaf in enumerate(values):
            proof = tree.open(i)
            assert proof.depth == tree.depth
            assert MerkleTree.verify(leaf, proof, tree.root)
            assert MerkleTree.compute_root(leaf, proof) == tree.root

    @pytest.mark.parametrize("size", range(1, 10))
    def test_any_flipped_sibling_rejected(self, F101, size):
        values, tree = self._build(F101, size)
        for i, leaf in enumerate(values):
            proof = tree.open(i)
            for level, sibling in enumerate(proof.siblings):
                siblings = list(proof.siblings)
                siblings[level] = bytes([sibling[0] ^ 1]) + sibling[1:]
                assert not MerkleTree.verify(leaf, InclusionProof(i, siblings), tree.root)

    @pytest.mark.parametrize("size", range(1, 10))
    def test_open_past_last_leaf(self, F101, size):
        _, tree = self._build(F101, size)
        with pytest.raises(CommitmentError):
            tree.open(size)
