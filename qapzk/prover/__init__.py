"""
Prover: 커밋-챌린지-응답 프로토콜 오케스트레이터
==================================================

증명 생성의 전체 흐름을 관리한다.

  ┌─────────────────────────────────────────────────────┐
  │  사전 검사: 위트니스 길이, w₀ = 1, R1CS 만족         │
  ├─────────────────────────────────────────────────────┤
  │  Round 1: 위트니스 머클 커밋                          │
  │  Prover → Verifier: root                            │
  ├─────────────────────────────────────────────────────┤
  │  Round 2: 챌린지                                     │
  │  τ = H(root ‖ public inputs)  (Fiat-Shamir)         │
  ├─────────────────────────────────────────────────────┤
  │  Round 3: 몫 다항식 + 평가값                          │
  │  h(x) = (A·B - C)/Z,  A(τ), B(τ), C(τ), Z(τ), h(τ)  │
  ├─────────────────────────────────────────────────────┤
  │  Round 4: 공개 위치 열기                              │
  │  위치 0..ℓ의 머클 포함 증명                           │
  └─────────────────────────────────────────────────────┘

어느 단계에서든 실패하면 예외가 발생하고 Proof 객체는 만들어지지 않는다
(부분 증명 없음).

사용 예시:
    >>> proof = prove(r1cs, witness)
    >>> verify(r1cs, proof.public_inputs, proof)
    True
"""

import logging

from qapzk.preprocessor import PreprocessedData, preprocess
from qapzk.prover import round1, round2, round3, round4
from qapzk.utils import sha256

logger = logging.getLogger(__name__)


class Proof:
    """증명 데이터 컨테이너.

    Round 1 (커밋먼트):
        root: 위트니스 머클 루트 (bytes)

    Round 2 (챌린지 입력):
        public_inputs: 챌린지 도출에 사용된 공개 입력 (필드 원소 리스트)

    Round 3 (평가값, 모두 τ에서):
        a_priv, b_priv, c_priv: 비공개 위치의 기여분 Σ_{i>ℓ} wᵢ·Xᵢ(τ)
        a_eval, b_eval, c_eval: 전체 평가값 A(τ), B(τ), C(τ)
        h_eval: 몫 다항식 h(τ)
        z_eval: 타깃 다항식 Z(τ)

    Round 4 (열기):
        openings: 위치 0..ℓ의 InclusionProof 리스트
    """

    EVALUATION_FIELDS = (
        "a_priv", "b_priv", "c_priv",
        "a_eval", "b_eval", "c_eval",
        "h_eval", "z_eval",
    )

    def __init__(self):
        # Round 1
        self.root = None
        # Round 2
        self.public_inputs = []
        # Round 3
        self.a_priv = None
        self.b_priv = None
        self.c_priv = None
        self.a_eval = None
        self.b_eval = None
        self.c_eval = None
        self.h_eval = None
        self.z_eval = None
        # Round 4
        self.openings = []

    def evaluations(self):
        """평가값을 EVALUATION_FIELDS 순서의 리스트로 반환한다."""
        return [getattr(self, name) for name in self.EVALUATION_FIELDS]

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return (
            self.root == other.root
            and list(self.public_inputs) == list(other.public_inputs)
            and self.evaluations() == other.evaluations()
            and self.openings == other.openings
        )

    def __repr__(self):
        root = self.root.hex()[:16] if self.root else None
        return f"Proof(root={root}..., public_inputs={[int(v) for v in self.public_inputs]})"


class ProverState:
    """라운드 간 공유되는 Prover 상태.

    속성 (입력):
        preprocessed: PreprocessedData
        witness: 검사를 마친 위트니스 (필드 원소 리스트)
        hash_fn: 해시 함수

    속성 (라운드 간 생성):
        tree: 위트니스 머클 트리 (Round 1)
        tau: 챌린지 (Round 2)
        h_poly: 몫 다항식 (Round 3)

    속성 (출력):
        proof: Proof 객체
    """

    def __init__(self, preprocessed, witness, hash_fn=sha256):
        self.preprocessed = preprocessed
        self.witness = witness
        self.hash_fn = hash_fn

        self.r1cs = preprocessed.r1cs
        self.qap = preprocessed.qap
        self.verifying_key = preprocessed.verifying_key
        self.field = preprocessed.field

        self.tree = None
        self.tau = None
        self.h_poly = None

        self.proof = Proof()

    def build_proof(self):
        """최종 증명 객체를 반환한다."""
        return self.proof


def prove(r1cs, witness, hash_fn=sha256):
    """위트니스가 R1CS를 만족함을 보이는 증명을 생성한다.

    Args:
        r1cs: R1CS 또는 PreprocessedData (반복 증명 시 전처리 재사용)
        witness: 위트니스 (정수 또는 필드 원소 리스트, w₀ = 1)
        hash_fn: 머클/챌린지 해시 함수

    Returns:
        Proof

    Raises:
        ConstraintShapeError: 위트니스 길이가 다르거나 제약이 없을 때
        UnsatisfiedWitness: 위트니스가 제약을 만족하지 않을 때
        NonDivisible: P(x)가 Z(x)로 나누어 떨어지지 않을 때
        CommitmentError: 머클 커밋 실패
    """
    preprocessed = r1cs if isinstance(r1cs, PreprocessedData) else preprocess(r1cs)

    # 사전 검사: 만족하지 않는 위트니스로는 커밋도 하지 않는다
    checked = preprocessed.r1cs.check_witness(witness)
    state = ProverState(preprocessed, checked, hash_fn)

    round1.execute(state)
    round2.execute(state)
    round3.execute(state)
    round4.execute(state)

    logger.info(
        "proof generated: %d constraints, %d public inputs, root %s",
        preprocessed.r1cs.num_constraints,
        preprocessed.r1cs.num_public,
        state.proof.root.hex()[:16],
    )
    return state.build_proof()
