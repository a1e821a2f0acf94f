"""
기반 모듈: 유한체(Finite Field)
================================

증명 시스템 전체에서 사용되는 소수체 GF(p) 산술을 정의한다.

**필드 클래스**:
  py_ecc의 FQ를 상속하여 모듈러스별 필드 클래스를 만든다.
  모듈러스는 클래스 속성(field_modulus)으로 고정되며, 전역 가변 상태가
  아니므로 서로 다른 모듈러스의 필드가 한 프로세스 안에 공존할 수 있다.

  - FR: 기본 필드, bn128 스칼라 필드 (p ≈ 2^254)
  - make_field(101): 테스트용 작은 필드 GF(101)

**py_ecc와 다른 점**:
  - 0의 역원(1/0)은 0이 아니라 FieldError를 발생시킨다
  - 서로 다른 모듈러스의 원소를 섞으면 FieldError
  - 동등 비교는 (값, 모듈러스) 기준이며 원소는 해시 가능하다

사용 예시:
    >>> from qapzk.field import make_field
    >>> F = make_field(101)
    >>> F(3) * F(34)       # 102 mod 101 = 1
    1
    >>> F(3).inverse()      # 34
    34
"""

import functools

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128
from py_ecc.utils import prime_field_inv

from qapzk.errors import FieldError


# bn128 스칼라 필드 위수 (기본 모듈러스)
CURVE_ORDER = bn128.curve_order

_MR_BASES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53)


def is_probable_prime(n):
    """Miller-Rabin 소수 판정.

    n < 3.3·10^24 에서는 결정적이고, 그 이상에서는 16개 기저로
    오판 확률이 4^-16 이하이다.
    """
    if n < 2:
        return False
    for p in _MR_BASES:
        if n % p == 0:
            return n == p
    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for a in _MR_BASES:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


# ─────────────────────────────────────────────────────────────────────
# 필드 원소 기반 클래스
# ─────────────────────────────────────────────────────────────────────

class FieldElement(FQ):
    """GF(p) 원소. 하위 클래스의 field_modulus가 p를 정한다.

    모든 연산 결과는 [0, p) 범위로 축소되어 있다.
    불변 값 타입으로 취급한다 (n을 직접 수정하지 않는다).
    """
    field_modulus = CURVE_ORDER

    def __init__(self, val):
        if isinstance(val, FQ):
            self._check_same_field(val)
            val = val.n
        super().__init__(val)

    def _check_same_field(self, other):
        if isinstance(other, FQ) and other.field_modulus != self.field_modulus:
            raise FieldError(
                f"cannot mix elements of GF({self.field_modulus}) "
                f"and GF({other.field_modulus})"
            )

    def __add__(self, other):
        self._check_same_field(other)
        return super().__add__(other)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        self._check_same_field(other)
        return super().__sub__(other)

    def __mul__(self, other):
        self._check_same_field(other)
        return super().__mul__(other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        self._check_same_field(other)
        divisor = type(self)(other)
        return self * divisor.inverse()

    def __rtruediv__(self, other):
        return type(self)(other) * self.inverse()

    def __pow__(self, exponent):
        """거듭제곱. 음수 지수는 역원의 |e| 제곱이다."""
        if exponent < 0:
            return self.inverse() ** (-exponent)
        # 내장 pow는 반복 제곱(square-and-multiply)으로 O(log e)
        return type(self)(pow(self.n, exponent, self.field_modulus))

    def inverse(self):
        """곱셈 역원 a⁻¹. a = 0이면 FieldError."""
        if self.n == 0:
            raise FieldError(f"zero has no inverse in GF({self.field_modulus})")
        return type(self)(prime_field_inv(self.n, self.field_modulus))

    def __eq__(self, other):
        if isinstance(other, FQ):
            return self.n == other.n and self.field_modulus == other.field_modulus
        if isinstance(other, int):
            return self.n == other % self.field_modulus
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.n, self.field_modulus))

    def is_zero(self):
        return self.n == 0


class FR(FieldElement):
    """bn128 스칼라 필드 위의 유한체 원소 (기본 필드).

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = CURVE_ORDER


@functools.lru_cache(maxsize=None)
def make_field(modulus):
    """모듈러스 p에 대한 필드 클래스를 반환한다.

    같은 모듈러스에 대해서는 항상 같은 클래스를 반환한다.

    Raises:
        FieldError: p <= 1 이거나 소수가 아닐 때
    """
    if not isinstance(modulus, int) or modulus <= 1:
        raise FieldError(f"field modulus must be an integer > 1, got {modulus!r}")
    if modulus == CURVE_ORDER:
        return FR
    if not is_probable_prime(modulus):
        raise FieldError(f"field modulus {modulus} is not prime")
    return type(f"GF{modulus}", (FieldElement,), {"field_modulus": modulus})


def field_byte_length(field):
    """필드 원소를 고정폭으로 인코딩할 때의 바이트 수."""
    return (field.field_modulus.bit_length() + 7) // 8


def element_to_bytes(element):
    """필드 원소 → 고정폭 빅엔디안 바이트열."""
    return int(element).to_bytes(field_byte_length(type(element)), "big")


def element_from_bytes(data, field):
    """고정폭 빅엔디안 바이트열 → 필드 원소.

    p 이상의 값은 축소되지 않은 인코딩이므로 거부한다.
    """
    value = int.from_bytes(data, "big")
    if value >= field.field_modulus:
        raise FieldError(f"encoded value {value} is not reduced modulo {field.field_modulus}")
    return field(value)


def to_field(value, field):
    """정수 또는 필드 원소를 field의 원소로 변환한다."""
    if isinstance(value, field):
        return value
    return field(value)
