"""
회로 전처리 (Preprocessing)
============================

증명/검증 전에 한 번만 계산하면 되는 데이터를 준비한다.

  R1CS ──▶ QAP (Prover용: 모든 위치의 Aᵢ, Bᵢ, Cᵢ, Z)
       └─▶ VerifyingKey (Verifier용: 공개 위치 0..ℓ의 다항식, Z, 크기 정보)

VerifyingKey는 Verifier가 알아야 하는 공개 R1CS 설명이다.
위트니스 정보는 전혀 담지 않는다.

사용 예시:
    >>> pp = preprocess(r1cs)
    >>> proof = prove(pp, witness)
    >>> verify(pp.verifying_key, public_inputs, proof)
"""

from qapzk.qap import QAP
from qapzk.utils import ceil_log2
from qapzk.field import to_field


class VerifyingKey:
    """공개 검증 키.

    속성:
        field: 필드 클래스
        witness_length: 위트니스 길이 m
        num_public: 공개 입력 수 ℓ
        num_constraints: 제약 수 n
        A_pub, B_pub, C_pub: 위치 0..ℓ의 QAP 다항식
        Z: 타깃 다항식
    """

    def __init__(self, field, witness_length, num_public, A_pub, B_pub, C_pub, Z):
        self.field = field
        self.witness_length = witness_length
        self.num_public = num_public
        self.A_pub = A_pub
        self.B_pub = B_pub
        self.C_pub = C_pub
        self.Z = Z

    @property
    def num_constraints(self):
        return self.Z.degree

    @property
    def merkle_depth(self):
        """위트니스 커밋먼트 트리의 깊이 ⌈log2(m)⌉."""
        return ceil_log2(self.witness_length)

    @classmethod
    def from_qap(cls, qap):
        k = qap.num_public + 1
        return cls(
            qap.field, qap.witness_length, qap.num_public,
            qap.A_polys[:k], qap.B_polys[:k], qap.C_polys[:k], qap.Z,
        )

    @classmethod
    def from_r1cs(cls, r1cs):
        return cls.from_qap(QAP.from_r1cs(r1cs))

    def public_evaluations(self, tau, public_inputs):
        """공개 위치의 기여분 (Σ_{i<=ℓ} wᵢ·Aᵢ(τ), ...B, ...C).

        w₀ = 1, w₁..w_ℓ = public_inputs.
        """
        tau = to_field(tau, self.field)
        values = [self.field(1)] + [to_field(v, self.field) for v in public_inputs]
        a_pub = self.field(0)
        b_pub = self.field(0)
        c_pub = self.field(0)
        for w, a, b, c in zip(values, self.A_pub, self.B_pub, self.C_pub):
            a_pub = a_pub + w * a.evaluate(tau)
            b_pub = b_pub + w * b.evaluate(tau)
            c_pub = c_pub + w * c.evaluate(tau)
        return a_pub, b_pub, c_pub


class PreprocessedData:
    """전처리 결과 묶음: R1CS, QAP, VerifyingKey."""

    def __init__(self, r1cs, qap, verifying_key):
        self.r1cs = r1cs
        self.qap = qap
        self.verifying_key = verifying_key

    @property
    def field(self):
        return self.r1cs.field


def preprocess(r1cs):
    """R1CS를 전처리한다.

    Raises:
        ConstraintShapeError: 제약이 없는 R1CS 등 QAP로 바꿀 수 없을 때
    """
    qap = QAP.from_r1cs(r1cs)
    return PreprocessedData(r1cs, qap, VerifyingKey.from_qap(qap))
