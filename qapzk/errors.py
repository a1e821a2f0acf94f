"""
증명 시스템 오류 분류 (Error Taxonomy)
======================================

증명 생성 단계의 오류는 모두 예외로 즉시 호출자에게 전달된다 (fail-fast).
검증 실패는 예외가 아니라 verify()의 bool 결과로 표현된다.

  ProofSystemError
  ├── FieldError            0의 역원, 잘못된 모듈러스, 서로 다른 필드 혼용
  ├── ConstraintShapeError  계수 벡터 / 위트니스 길이 불일치
  ├── UnsatisfiedWitness    R1CS 제약 불만족 (실패한 제약 인덱스 포함)
  ├── NonDivisible          P(x) / Z(x) 나머지가 0이 아님
  └── CommitmentError       빈 리프 시퀀스, 범위 밖 인덱스
"""


class ProofSystemError(Exception):
    """모든 증명 시스템 오류의 기반 클래스."""


class FieldError(ProofSystemError, ArithmeticError):
    pass


class ConstraintShapeError(ProofSystemError, ValueError):
    pass


class UnsatisfiedWitness(ProofSystemError, ValueError):
    """위트니스가 제약을 만족하지 않는다.

    속성:
        constraint_index: 처음으로 실패한 제약의 인덱스.
            상수 슬롯(w[0] != 1)이 잘못된 경우 None.
    """

    def __init__(self, constraint_index, message=None):
        self.constraint_index = constraint_index
        if message is None:
            if constraint_index is None:
                message = "witness[0] must be the constant 1"
            else:
                message = f"constraint {constraint_index} is not satisfied"
        super().__init__(message)


class NonDivisible(ProofSystemError, ArithmeticError):
    """P(x)가 Z(x)로 나누어 떨어지지 않는다.

    속성:
        remainder: 나머지 다항식
    """

    def __init__(self, remainder):
        self.remainder = remainder
        super().__init__(
            f"combined polynomial is not divisible by the target polynomial "
            f"(remainder degree {remainder.degree})"
        )


class CommitmentError(ProofSystemError, ValueError):
    """머클 커밋먼트 오류.

    속성:
        index: 문제가 된 리프 인덱스 (해당 없으면 None)
    """

    def __init__(self, message, index=None):
        self.index = index
        super().__init__(message)
