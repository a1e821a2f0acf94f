"""
Round 4: 공개 위치 열기
=======================

상수 슬롯(0)과 공개 입력 위치(1..ℓ)의 머클 포함 증명을 만든다.
Verifier는 이를 통해 자신이 아는 공개 값이 커밋된 위트니스의 해당
위치에 실제로 들어 있음을 확인한다. 비공개 위치는 열지 않는다.
"""


def execute(state):
    """Round 4를 실행한다.

    결과 (state에 기록):
        state.proof.openings
    """
    state.proof.openings = [
        state.tree.open(i) for i in state.r1cs.public_indices
    ]
