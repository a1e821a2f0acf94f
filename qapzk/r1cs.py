"""
R1CS (Rank-1 Constraint System)
================================

계산을 랭크-1 제약의 집합으로 표현한다.

**제약 형태**:
  각 제약 k는 세 계수 벡터 A_k, B_k, C_k로 정의된다:

    (A_k · w) * (B_k · w) = (C_k · w)

  w는 위트니스 벡터 (길이 m).

**위트니스 레이아웃**:
  | 인덱스            | 내용                  |
  |-------------------|-----------------------|
  | 0                 | 상수 1                |
  | 1 .. ℓ            | 공개 입력 (ℓ개)        |
  | ℓ+1 .. m-1        | 비공개 값 (중간값 포함) |

  is_satisfied()는 QAP의 다항식 항등식이 동치여야 하는 기준(ground truth)이다.

사용 예시 (x * x = 9, 위트니스 [1, 9, 3]):
    >>> F = make_field(101)
    >>> r1cs = R1CS(3, 1, [([0, 0, 1], [0, 0, 1], [0, 1, 0])], field=F)
    >>> r1cs.is_satisfied([1, 9, 3])
    True
"""

import logging

from qapzk.errors import ConstraintShapeError, UnsatisfiedWitness
from qapzk.field import FR, to_field

logger = logging.getLogger(__name__)


class Constraint:
    """하나의 랭크-1 제약 (A·w) * (B·w) = (C·w).

    속성:
        a, b, c: 필드 원소 계수 벡터 (길이 = 위트니스 길이)
    """

    def __init__(self, a, b, c, field=FR):
        self.a = tuple(to_field(v, field) for v in a)
        self.b = tuple(to_field(v, field) for v in b)
        self.c = tuple(to_field(v, field) for v in c)

    @staticmethod
    def _dot(coeffs, witness):
        total = coeffs[0] * witness[0]
        for coeff, value in zip(coeffs[1:], witness[1:]):
            if coeff.n:
                total = total + coeff * value
        return total

    def evaluate(self, witness):
        """(A·w, B·w, C·w) 세 내적을 반환한다."""
        return (
            self._dot(self.a, witness),
            self._dot(self.b, witness),
            self._dot(self.c, witness),
        )

    def check(self, witness):
        """제약 만족 여부: (A·w) * (B·w) == (C·w) ?"""
        a_val, b_val, c_val = self.evaluate(witness)
        return a_val * b_val == c_val

    def __eq__(self, other):
        if not isinstance(other, Constraint):
            return NotImplemented
        return (self.a, self.b, self.c) == (other.a, other.b, other.c)

    def __hash__(self):
        return hash((self.a, self.b, self.c))

    def __repr__(self):
        def fmt(vec):
            return "[" + ", ".join(str(int(v)) for v in vec) + "]"
        return f"Constraint(a={fmt(self.a)}, b={fmt(self.b)}, c={fmt(self.c)})"


class R1CS:
    """랭크-1 제약 시스템. 생성 후에는 읽기 전용으로 취급한다.

    속성:
        field: 필드 클래스
        witness_length: 위트니스 길이 m
        num_public: 공개 입력 수 ℓ (상수 슬롯 제외, ℓ < m)
        constraints: Constraint 튜플
    """

    def __init__(self, witness_length, num_public, constraints, field=FR):
        """R1CS를 생성한다.

        Args:
            witness_length: 위트니스 길이 m (>= 1)
            num_public: 공개 입력 수 ℓ (0 <= ℓ < m)
            constraints: Constraint 또는 (a, b, c) 튜플의 리스트
            field: 필드 클래스

        Raises:
            ConstraintShapeError: 길이가 맞지 않을 때
        """
        if witness_length < 1:
            raise ConstraintShapeError(f"witness length must be >= 1, got {witness_length}")
        if not 0 <= num_public < witness_length:
            raise ConstraintShapeError(
                f"public input count must satisfy 0 <= {num_public} < {witness_length}"
            )
        self.field = field
        self.witness_length = witness_length
        self.num_public = num_public

        built = []
        for k, row in enumerate(constraints):
            if isinstance(row, Constraint):
                a, b, c = row.a, row.b, row.c
            else:
                a, b, c = row
            for name, vec in (("A", a), ("B", b), ("C", c)):
                if len(vec) != witness_length:
                    raise ConstraintShapeError(
                        f"constraint {k}: {name} has length {len(vec)}, "
                        f"expected witness length {witness_length}"
                    )
            built.append(Constraint(a, b, c, field))
        self.constraints = tuple(built)

    @property
    def num_constraints(self):
        return len(self.constraints)

    @property
    def public_indices(self):
        """상수 슬롯과 공개 입력의 위치: 0..ℓ."""
        return range(self.num_public + 1)

    def _normalize(self, witness):
        if len(witness) != self.witness_length:
            raise ConstraintShapeError(
                f"witness has length {len(witness)}, expected {self.witness_length}"
            )
        return [to_field(v, self.field) for v in witness]

    def first_unsatisfied(self, witness):
        """처음으로 실패한 제약의 인덱스. 모두 만족하면 None.

        Raises:
            ConstraintShapeError: 위트니스 길이가 다를 때
        """
        w = self._normalize(witness)
        for k, constraint in enumerate(self.constraints):
            if not constraint.check(w):
                return k
        return None

    def is_satisfied(self, witness):
        """위트니스가 모든 제약을 만족하는지.

        QAP 나누어떨어짐과 동치인 순수 제약 검사다. 상수 슬롯 규칙
        (w₀ = 1)은 check_witness에서만 검사한다.
        """
        return self.first_unsatisfied(witness) is None

    def check_witness(self, witness):
        """is_satisfied의 예외 버전. 상수 슬롯 규칙(w₀ = 1)도 검사한다.

        Returns:
            list: 필드 원소로 정규화된 위트니스

        Raises:
            ConstraintShapeError: 위트니스 길이가 다를 때
            UnsatisfiedWitness: 제약이 만족되지 않거나 w₀ ≠ 1일 때
                (후자는 constraint_index None)
        """
        w = self._normalize(witness)
        if w[0] != 1:
            raise UnsatisfiedWitness(None)
        k = self.first_unsatisfied(w)
        if k is not None:
            logger.debug("witness fails constraint %d: %r", k, self.constraints[k])
            raise UnsatisfiedWitness(k)
        return w

    def public_inputs(self, witness):
        """위트니스에서 공개 입력 부분 w[1..ℓ]을 꺼낸다."""
        w = self._normalize(witness)
        return w[1:self.num_public + 1]

    def matrices(self):
        """(A, B, C) 행렬. 각 행렬은 제약별 행의 리스트."""
        A = [list(c.a) for c in self.constraints]
        B = [list(c.b) for c in self.constraints]
        C = [list(c.c) for c in self.constraints]
        return A, B, C

    @classmethod
    def from_matrices(cls, A, B, C, num_public, field=FR):
        """행렬 A, B, C (제약 수 × 위트니스 길이)로부터 R1CS를 만든다."""
        if not (len(A) == len(B) == len(C)):
            raise ConstraintShapeError(
                f"matrices have different row counts: {len(A)}, {len(B)}, {len(C)}"
            )
        if not A:
            raise ConstraintShapeError("cannot infer witness length from empty matrices")
        return cls(len(A[0]), num_public, list(zip(A, B, C)), field=field)

    def __repr__(self):
        return (
            f"R1CS(m={self.witness_length}, public={self.num_public}, "
            f"constraints={self.num_constraints}, p={self.field.field_modulus})"
        )
