"""
머클 트리 벡터 커밋먼트 (Merkle Commitment)
============================================

필드 원소 시퀀스에 대한 이진 해시 트리. 루트가 커밋먼트이며,
각 리프에 대해 포함 증명(inclusion proof)을 만들 수 있다.

**트리 구성**:
  1. 리프 수를 2의 거듭제곱으로 패딩 (패딩 리프 다이제스트 = 모두 0인 센티널)
  2. 리프 다이제스트:  H(0x00 ‖ enc(value))
  3. 내부 노드:        H(0x01 ‖ left ‖ right)
  4. 한 개의 루트가 남을 때까지 쌍을 접어 올린다

  리프와 내부 노드에 서로 다른 접두 바이트를 써서 두 종류의 해시가
  섞이지 않게 한다 (second-preimage 공격 방지).

**포함 증명**:
  리프에서 루트까지의 형제(sibling) 해시 목록 + 리프 인덱스.
  각 레벨에서 인덱스의 짝/홀이 좌/우 순서를 정한다.
  트리 깊이 ⌈log2(n)⌉, 검증 비용 O(log n) 해시.

사용 예시:
    >>> tree = MerkleTree.build([F(1), F(2), F(3)])
    >>> proof = tree.open(2)
    >>> MerkleTree.verify(F(3), proof, tree.root)
    True
"""

from qapzk.errors import CommitmentError
from qapzk.field import FieldElement, element_to_bytes
from qapzk.utils import sha256, pad_to_power_of_2

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


def _leaf_bytes(leaf):
    if isinstance(leaf, FieldElement):
        return element_to_bytes(leaf)
    if isinstance(leaf, (bytes, bytearray)):
        return bytes(leaf)
    raise TypeError(f"merkle leaves must be field elements or bytes, got {type(leaf).__name__}")


def hash_leaf(leaf, hash_fn=sha256):
    return hash_fn(LEAF_PREFIX + _leaf_bytes(leaf))


def hash_node(left, right, hash_fn=sha256):
    return hash_fn(NODE_PREFIX + left + right)


class InclusionProof:
    """리프 → 루트 경로의 형제 해시 목록과 리프 인덱스.

    속성:
        index: 리프 인덱스 (레벨별 좌/우 순서를 결정)
        siblings: 아래(리프 쪽)부터 위(루트 쪽) 순서의 형제 해시 리스트
    """

    def __init__(self, index, siblings):
        self.index = index
        self.siblings = list(siblings)

    @property
    def depth(self):
        return len(self.siblings)

    def __eq__(self, other):
        if not isinstance(other, InclusionProof):
            return NotImplemented
        return self.index == other.index and self.siblings == other.siblings

    def __repr__(self):
        return f"InclusionProof(index={self.index}, depth={self.depth})"


class MerkleTree:
    """패딩된 완전 이진 머클 트리.

    속성:
        levels: levels[0] = 리프 다이제스트 (패딩 포함), levels[-1] = [root]
        num_leaves: 패딩 전 리프 수
        hash_fn: 해시 함수
    """

    def __init__(self, levels, num_leaves, hash_fn=sha256):
        self.levels = levels
        self.num_leaves = num_leaves
        self.hash_fn = hash_fn

    @classmethod
    def build(cls, leaves, hash_fn=sha256):
        """리프 시퀀스로 트리를 만든다.

        Raises:
            CommitmentError: 리프가 비어 있을 때
        """
        leaves = list(leaves)
        if not leaves:
            raise CommitmentError("cannot commit to an empty leaf sequence")

        sentinel = bytes(len(hash_fn(b"")))
        digests = pad_to_power_of_2([hash_leaf(leaf, hash_fn) for leaf in leaves], sentinel)

        levels = [digests]
        while len(levels[-1]) > 1:
            below = levels[-1]
            levels.append([
                hash_node(below[i], below[i + 1], hash_fn)
                for i in range(0, len(below), 2)
            ])
        return cls(levels, len(leaves), hash_fn)

    @property
    def root(self):
        return self.levels[-1][0]

    @property
    def depth(self):
        return len(self.levels) - 1

    def open(self, index):
        """index 리프의 포함 증명을 만든다.

        Raises:
            CommitmentError: index가 [0, num_leaves) 밖일 때
        """
        if not isinstance(index, int) or not 0 <= index < self.num_leaves:
            raise CommitmentError(
                f"leaf index {index} out of range [0, {self.num_leaves})", index=index
            )
        siblings = []
        position = index
        for level in self.levels[:-1]:
            siblings.append(level[position ^ 1])
            position >>= 1
        return InclusionProof(index, siblings)

    @staticmethod
    def compute_root(leaf, proof, hash_fn=sha256):
        """리프와 포함 증명으로부터 루트를 다시 계산한다."""
        node = hash_leaf(leaf, hash_fn)
        position = proof.index
        for sibling in proof.siblings:
            if position & 1:
                node = hash_node(sibling, node, hash_fn)
            else:
                node = hash_node(node, sibling, hash_fn)
            position >>= 1
        return node

    @staticmethod
    def verify(leaf, proof, root, hash_fn=sha256):
        """포함 증명을 검증한다. 불일치는 예외가 아니라 False다."""
        if not isinstance(proof, InclusionProof):
            return False
        if not isinstance(proof.index, int) or isinstance(proof.index, bool):
            return False
        if not 0 <= proof.index < (1 << proof.depth):
            return False
        if not isinstance(root, (bytes, bytearray)):
            return False
        size = len(root)
        if any(not isinstance(s, (bytes, bytearray)) or len(s) != size for s in proof.siblings):
            return False
        try:
            computed = MerkleTree.compute_root(leaf, proof, hash_fn)
        except TypeError:
            return False
        return computed == bytes(root)
