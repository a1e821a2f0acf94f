"""
기반 모듈: 다항식(Polynomial) 클래스
====================================

QAP 변환과 몫 다항식 계산에 사용되는 유한체 위의 다항식 연산을 제공한다.

**Polynomial 클래스**:
  계수(coefficient) 표현 기반 다항식. p(x) = c₀ + c₁·x + c₂·x² + ...
  각 다항식은 자신이 속한 필드 클래스(FR, GF101, ...)를 기억한다.

**다항식 나눗셈 (poly_div)**:
  QAP에서 h(x) = P(x) / Z(x) 계산에 필수적이다.
  부동소수점 없이 필드 위에서 정확한 긴 나눗셈을 수행한다.

**라그랑주 보간 (lagrange_interp)**:
  점 (x_k, y_k)를 지나는 유일한 다항식을 계수 형태로 구한다.

사용 예시:
    >>> from qapzk.field import make_field
    >>> F = make_field(101)
    >>> p = Polynomial([1, 2, 3], F)  # 1 + 2x + 3x²
    >>> p.evaluate(2)                 # 1 + 4 + 12 = 17
    17
"""

from qapzk.errors import FieldError
from qapzk.field import FR, FieldElement


# ─────────────────────────────────────────────────────────────────────
# Polynomial 클래스
# ─────────────────────────────────────────────────────────────────────

class Polynomial:
    """유한체 위의 다항식.

    계수 리스트로 표현: coeffs = [c₀, c₁, c₂, ...] → c₀ + c₁x + c₂x² + ...

    QAP에서의 역할:
    - A_i(x), B_i(x), C_i(x): 위트니스 위치 i의 제약 계수를 보간한 다항식
    - Z(x): 제약 인덱스 1..n에서 0이 되는 타깃 다항식
    - h(x): 몫 다항식 (A·B - C) / Z
    """

    def __init__(self, coeffs=None, field=None):
        """다항식 생성.

        Args:
            coeffs: 정수 또는 필드 원소 리스트 [c₀, c₁, ...].
                    None이면 영 다항식(0)을 생성한다.
            field: 필드 클래스. None이면 계수에서 추론하고, 없으면 FR.
        """
        coeffs = list(coeffs) if coeffs else []
        if field is None:
            field = next(
                (type(c) for c in coeffs if isinstance(c, FieldElement)), FR
            )
        self.field = field
        self.coeffs = [c if isinstance(c, field) else field(c) for c in coeffs]
        if not self.coeffs:
            self.coeffs = [field(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거하여 정규화한다.

        예: [1, 2, 0, 0] → [1, 2]  (1 + 2x)
        """
        while len(self.coeffs) > 1 and self.coeffs[-1].n == 0:
            self.coeffs.pop()

    def _coerce(self, other):
        if isinstance(other, Polynomial):
            if other.field is not self.field:
                raise FieldError(
                    f"cannot combine polynomials over GF({self.field.field_modulus}) "
                    f"and GF({other.field.field_modulus})"
                )
            return other
        return Polynomial([other], self.field)

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        """영 다항식인지 확인."""
        return len(self.coeffs) == 1 and self.coeffs[0].n == 0

    def evaluate(self, point):
        """다항식을 주어진 점에서 평가한다 (Horner's method).

        p(x) = c₀ + x(c₁ + x(c₂ + ...))
        """
        point = point if isinstance(point, self.field) else self.field(point)
        result = self.field(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __call__(self, point):
        return self.evaluate(point)

    def __add__(self, other):
        """다항식 덧셈: p(x) + q(x)."""
        other = self._coerce(other)
        zero = self.field(0)
        max_len = max(len(self.coeffs), len(other.coeffs))
        result = []
        for i in range(max_len):
            a = self.coeffs[i] if i < len(self.coeffs) else zero
            b = other.coeffs[i] if i < len(other.coeffs) else zero
            result.append(a + b)
        return Polynomial(result, self.field)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        """다항식 뺄셈: p(x) - q(x)."""
        return self + (-self._coerce(other))

    def __rsub__(self, other):
        return self._coerce(other) - self

    def __neg__(self):
        return Polynomial([-c for c in self.coeffs], self.field)

    def __mul__(self, other):
        """다항식 곱셈: p(x) · q(x) 또는 스칼라곱.

        다항식 × 다항식: O(n²) 나이브 곱셈 (convolution)
        """
        if not isinstance(other, Polynomial):
            scalar = other if isinstance(other, self.field) else self.field(other)
            return Polynomial([c * scalar for c in self.coeffs], self.field)
        other = self._coerce(other)
        result = [self.field(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a.n == 0:
                continue
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result, self.field)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FieldElement)):
            other = Polynomial([other], self.field)
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.field is other.field and self.coeffs == other.coeffs

    def __hash__(self):
        return hash((self.field.field_modulus, tuple(c.n for c in self.coeffs)))

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c.n == 0:
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def __len__(self):
        """계수 개수 반환 (차수 + 1)."""
        return len(self.coeffs)

    @classmethod
    def zero(cls, field=FR):
        return cls([0], field)

    @classmethod
    def one(cls, field=FR):
        return cls([1], field)

    @classmethod
    def vanishing(cls, points, field=FR):
        """타깃(소거) 다항식 Z(x) = ∏ (x - r_k).

        Args:
            points: 근 r_k 리스트 (정수 또는 필드 원소)
            field: 필드 클래스

        Returns:
            Polynomial: 모든 r_k에서 0이 되는 모닉 다항식
        """
        result = cls.one(field)
        for r in points:
            result = result * cls([-field(r), 1], field)
        return result


# ─────────────────────────────────────────────────────────────────────
# 다항식 나눗셈 (Polynomial Long Division)
# ─────────────────────────────────────────────────────────────────────

def poly_div(a, b):
    """다항식 나눗셈: a(x) = b(x) · q(x) + r(x),  deg r < deg b.

    Args:
        a: 피제수 다항식
        b: 제수 다항식

    Returns:
        tuple: (몫 Polynomial, 나머지 Polynomial)

    Raises:
        FieldError: 제수가 영 다항식이거나 두 다항식의 필드가 다를 때

    예시:
        >>> a = Polynomial([-1, 0, 1])  # x² - 1
        >>> b = Polynomial([-1, 1])     # x - 1
        >>> q, r = poly_div(a, b)       # q = x + 1, r = 0
    """
    b = a._coerce(b)
    if b.is_zero():
        raise FieldError("polynomial division by zero")

    field = a.field
    remainder = list(a.coeffs)
    divisor = b.coeffs
    deg_b = len(divisor) - 1
    deg_a = len(remainder) - 1

    if deg_a < deg_b:
        return Polynomial.zero(field), Polynomial(remainder, field)

    quotient = [field(0)] * (deg_a - deg_b + 1)
    lead_inv = divisor[-1].inverse()

    # 최고차 항부터 소거해 내려간다
    for i in range(deg_a - deg_b, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv
        quotient[i] = coeff
        if coeff.n == 0:
            continue
        for j in range(deg_b + 1):
            remainder[i + j] = remainder[i + j] - coeff * divisor[j]

    return Polynomial(quotient, field), Polynomial(remainder[:deg_b] or [0], field)


# ─────────────────────────────────────────────────────────────────────
# 라그랑주 보간 (Lagrange Interpolation)
# ─────────────────────────────────────────────────────────────────────

def lagrange_basis(domain, i, field=FR):
    """i번째 Lagrange 기저 다항식 L_i(x)를 계수 형태로 반환한다.

    L_i(x) = ∏_{j≠i} (x - d_j) / (d_i - d_j)
    성질: L_i(d_j) = δ_{ij}
    """
    domain = [d if isinstance(d, field) else field(d) for d in domain]
    result = Polynomial.one(field)
    denominator = field(1)
    for j, d_j in enumerate(domain):
        if j == i:
            continue
        result = result * Polynomial([-d_j, 1], field)
        denominator = denominator * (domain[i] - d_j)
    return result * denominator.inverse()


def lagrange_bases(domain, field=FR):
    """도메인 전체의 기저 [L_0(x), ..., L_{n-1}(x)].

    같은 도메인 위에서 여러 열을 보간할 때 한 번만 계산해 재사용한다.

    Raises:
        FieldError: 도메인 점이 중복될 때
    """
    domain = [d if isinstance(d, field) else field(d) for d in domain]
    if len(set(domain)) != len(domain):
        raise FieldError("interpolation points must be distinct")
    return [lagrange_basis(domain, i, field) for i in range(len(domain))]


def lagrange_interp(xs, ys, field=FR, bases=None):
    """점 (xs[k], ys[k])를 모두 지나는 차수 < len(xs)인 다항식.

    p(x) = Σ y_k · L_k(x).  y_k = 0인 항은 건너뛴다
    (R1CS 행렬은 대부분 희소하다).

    Args:
        xs, ys: 보간 점의 x, y 좌표
        field: 필드 클래스
        bases: lagrange_bases(xs)로 미리 계산한 기저 (선택)

    Raises:
        FieldError: x 좌표가 중복되거나 길이가 다를 때
    """
    if len(xs) != len(ys):
        raise FieldError(f"interpolation needs equal lengths, got {len(xs)} and {len(ys)}")
    if bases is None:
        bases = lagrange_bases(xs, field)
    ys = [y if isinstance(y, field) else field(y) for y in ys]

    result = Polynomial.zero(field)
    for basis, y in zip(bases, ys):
        if y.n == 0:
            continue
        result = result + basis * y
    return result
