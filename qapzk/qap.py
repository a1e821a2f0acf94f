"""
QAP (Quadratic Arithmetic Program) 변환
========================================

R1CS를 다항식 형태로 바꾼다.

**변환 과정**:
  1. 각 위트니스 위치 i에 대해 제약 인덱스 k = 1..n 위의 점
     {(k, A[k][i])}를 라그랑주 보간 → A_i(x)  (B_i, C_i도 동일)
  2. 타깃 다항식 Z(x) = (x-1)(x-2)...(x-n)

**핵심 성질**:
  A(x) = Σ wᵢ·Aᵢ(x),  B(x) = Σ wᵢ·Bᵢ(x),  C(x) = Σ wᵢ·Cᵢ(x)
  P(x) = A(x)·B(x) - C(x)

  P(k) = (A_k·w)(B_k·w) - (C_k·w) 이므로
  P(x)가 Z(x)로 나누어 떨어짐 ⇔ 모든 제약이 만족됨

  몫 h(x) = P(x) / Z(x)는 부동소수점 없이 필드 위에서 정확히 계산하며,
  나머지가 0이 아니면 NonDivisible을 발생시킨다.

사용 예시:
    >>> qap = QAP.from_r1cs(r1cs)
    >>> h = qap.quotient(witness)
"""

import logging

from qapzk.errors import ConstraintShapeError, NonDivisible
from qapzk.polynomial import Polynomial, lagrange_bases, lagrange_interp, poly_div
from qapzk.field import to_field

logger = logging.getLogger(__name__)


def transpose(matrix):
    return list(map(list, zip(*matrix)))


class QAP:
    """R1CS에서 유도된 QAP.

    속성:
        field: 필드 클래스
        num_constraints: 제약 수 n
        witness_length: 위트니스 길이 m
        num_public: 공개 입력 수 ℓ
        A_polys, B_polys, C_polys: 위치별 다항식 리스트 (길이 m)
        Z: 타깃 다항식 ∏_{k=1..n} (x - k)
    """

    def __init__(self, field, num_public, A_polys, B_polys, C_polys, Z):
        self.field = field
        self.num_public = num_public
        self.A_polys = A_polys
        self.B_polys = B_polys
        self.C_polys = C_polys
        self.Z = Z

    @property
    def witness_length(self):
        return len(self.A_polys)

    @property
    def num_constraints(self):
        return self.Z.degree

    @property
    def domain(self):
        """제약 인덱스 점 1..n."""
        return [self.field(k) for k in range(1, self.num_constraints + 1)]

    @classmethod
    def from_r1cs(cls, r1cs):
        """R1CS → QAP.

        Raises:
            ConstraintShapeError: 제약이 없거나, 제약 수가 필드에 비해 너무 클 때
        """
        field = r1cs.field
        n = r1cs.num_constraints
        if n == 0:
            raise ConstraintShapeError("R1CS has no constraints")
        if n >= field.field_modulus:
            raise ConstraintShapeError(
                f"{n} constraints do not fit distinct points of GF({field.field_modulus})"
            )

        domain = [field(k) for k in range(1, n + 1)]
        bases = lagrange_bases(domain, field)

        A, B, C = r1cs.matrices()
        # 열(column) = 하나의 위트니스 위치
        A_polys = [lagrange_interp(domain, col, field, bases) for col in transpose(A)]
        B_polys = [lagrange_interp(domain, col, field, bases) for col in transpose(B)]
        C_polys = [lagrange_interp(domain, col, field, bases) for col in transpose(C)]
        Z = Polynomial.vanishing(domain, field)

        logger.debug(
            "QAP built: %d constraints, %d witness positions, GF(%d)",
            n, r1cs.witness_length, field.field_modulus,
        )
        return cls(field, r1cs.num_public, A_polys, B_polys, C_polys, Z)

    def _normalize(self, witness):
        if len(witness) != self.witness_length:
            raise ConstraintShapeError(
                f"witness has length {len(witness)}, expected {self.witness_length}"
            )
        return [to_field(v, self.field) for v in witness]

    def solution_polynomials(self, witness):
        """(A(x), B(x), C(x)) = (Σ wᵢ·Aᵢ(x), Σ wᵢ·Bᵢ(x), Σ wᵢ·Cᵢ(x))."""
        w = self._normalize(witness)
        Apoly = Polynomial.zero(self.field)
        Bpoly = Polynomial.zero(self.field)
        Cpoly = Polynomial.zero(self.field)
        for wi, a, b, c in zip(w, self.A_polys, self.B_polys, self.C_polys):
            if wi.n == 0:
                continue
            Apoly = Apoly + a * wi
            Bpoly = Bpoly + b * wi
            Cpoly = Cpoly + c * wi
        return Apoly, Bpoly, Cpoly

    def combined(self, witness):
        """P(x) = A(x)·B(x) - C(x)."""
        Apoly, Bpoly, Cpoly = self.solution_polynomials(witness)
        return Apoly * Bpoly - Cpoly

    def quotient(self, witness):
        """h(x) = P(x) / Z(x)  (정확한 나눗셈).

        Raises:
            NonDivisible: 나머지가 0이 아닐 때 (위트니스가 R1CS를 만족하지 않음)
        """
        q, r = poly_div(self.combined(witness), self.Z)
        if not r.is_zero():
            raise NonDivisible(r)
        return q

    def evaluate_columns(self, x):
        """위치별 (Aᵢ(x), Bᵢ(x), Cᵢ(x)) 리스트."""
        x = to_field(x, self.field)
        return [
            (a.evaluate(x), b.evaluate(x), c.evaluate(x))
            for a, b, c in zip(self.A_polys, self.B_polys, self.C_polys)
        ]
