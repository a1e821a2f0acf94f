"""
Round 2: Fiat-Shamir 챌린지
===========================

대화식 Verifier의 랜덤 챌린지를 커밋먼트 해시로 대체한다.

  τ = H(context ‖ root ‖ w₁ ‖ ... ‖ w_ℓ)   (Z(τ) ≠ 0 이 될 때까지 재추출)

Verifier는 증명에 담긴 τ를 받지 않고 같은 방식으로 직접 다시 계산한다.
"""

from qapzk.transcript import derive_challenge


def execute(state):
    """Round 2를 실행한다.

    결과 (state에 기록):
        state.tau, state.proof.public_inputs
    """
    public_inputs = state.witness[1:state.r1cs.num_public + 1]
    state.proof.public_inputs = list(public_inputs)
    state.tau = derive_challenge(
        state.verifying_key, state.proof.root, public_inputs, state.hash_fn
    )
