"""
Round 1: 위트니스 커밋
======================

위트니스 벡터 w = [1, 공개 입력..., 비공개 값...] 전체를 머클 트리로 커밋한다.
루트가 챌린지 도출 전에 Prover를 위트니스에 묶는다.

  root = MerkleTree.build(w).root
"""

from qapzk.merkle import MerkleTree


def execute(state):
    """Round 1을 실행한다.

    Args:
        state: ProverState

    결과 (state에 기록):
        state.tree, state.proof.root
    """
    state.tree = MerkleTree.build(state.witness, state.hash_fn)
    state.proof.root = state.tree.root
