"""
Polynomial module tests: polynomial.py
"""
import random

import pytest

from qapzk.errors import FieldError
from qapzk.field import FR, make_field
from qapzk.polynomial import (
    Polynomial, poly_div, lagrange_basis, lagrange_bases, lagrange_interp,
)


SAMPLE_BOUND = 2 ** 200


def _random_poly(rng, degree, field):
    coeffs = [rng.randrange(field.field_modulus) for _ in range(degree)]
    coeffs.append(rng.randrange(1, field.field_modulus))
    return Polynomial(coeffs, field)


class TestPolynomialBasics:
    def test_trim_trailing_zeros(self, F101):
        p = Polynomial([1, 2, 0, 0], F101)
        assert p.degree == 1
        assert len(p) == 2

    def test_zero_polynomial(self, F101):
        z = Polynomial(None, F101)
        assert z.is_zero()
        assert z.degree == 0
        assert z == Polynomial.zero(F101)
        assert Polynomial([0, 0, 0], F101).is_zero()

    def test_infers_field_from_coefficients(self, F101):
        p = Polynomial([F101(1), 2])
        assert p.field is F101
        assert Polynomial([1, 2]).field is FR

    def test_evaluate_horner(self, F101):
        """p(x) = 1 + 2x + 3x², p(2) = 17"""
        p = Polynomial([1, 2, 3], F101)
        assert p.evaluate(2) == F101(17)
        assert p(F101(2)) == F101(17)
        assert p(0) == F101(1)

    def test_repr(self, F101):
        assert repr(Polynomial([1, 0, 3], F101)) == "Poly(1 + 3*x^2)"
        assert repr(Polynomial.zero(F101)) == "Poly(0)"

    def test_equality_with_scalar(self, F101):
        assert Polynomial([5], F101) == 5
        assert Polynomial([5], F101) == F101(5)
        assert Polynomial([5, 1], F101) != 5


class TestPolynomialArithmetic:
    def test_add_sub(self, F101):
        p = Polynomial([1, 2], F101)
        q = Polynomial([3, 0, 4], F101)
        assert p + q == Polynomial([4, 2, 4], F101)
        assert q - p == Polynomial([2, 99, 4], F101)
        assert p - p == Polynomial.zero(F101)

    def test_scalar_ops(self, F101):
        p = Polynomial([1, 2], F101)
        assert p + 1 == Polynomial([2, 2], F101)
        assert 1 + p == Polynomial([2, 2], F101)
        assert p * 3 == Polynomial([3, 6], F101)
        assert 3 * p == Polynomial([3, 6], F101)
        assert 1 - p == Polynomial([0, 99], F101)

    def test_mul(self, F101):
        """(x + 1)(x - 1) = x² - 1"""
        p = Polynomial([1, 1], F101)
        q = Polynomial([-1, 1], F101)
        assert p * q == Polynomial([-1, 0, 1], F101)

    def test_mul_evaluates_pointwise(self):
        rng = random.Random(11)
        p = _random_poly(rng, 6, FR)
        q = _random_poly(rng, 4, FR)
        x = FR(rng.randrange(SAMPLE_BOUND))
        assert (p * q)(x) == p(x) * q(x)
        assert (p + q)(x) == p(x) + q(x)

    def test_field_mismatch(self, F101):
        p = Polynomial([1, 1], F101)
        q = Polynomial([1, 1], make_field(103))
        with pytest.raises(FieldError):
            p + q
        with pytest.raises(FieldError):
            p * q

    def test_vanishing(self, F101):
        Z = Polynomial.vanishing([1, 2, 3], F101)
        assert Z.degree == 3
        assert Z.coeffs[-1] == F101(1)
        for r in (1, 2, 3):
            assert Z(r).is_zero()
        assert Z(4) == F101(6)


class TestPolyDiv:
    def test_exact_division(self, F101):
        a = Polynomial([-1, 0, 1], F101)
        b = Polynomial([-1, 1], F101)
        q, r = poly_div(a, b)
        assert q == Polynomial([1, 1], F101)
        assert r.is_zero()

    def test_with_remainder(self, F101):
        """x² + 1 = (x - 1)(x + 1) + 2"""
        a = Polynomial([1, 0, 1], F101)
        b = Polynomial([-1, 1], F101)
        q, r = poly_div(a, b)
        assert q == Polynomial([1, 1], F101)
        assert r == Polynomial([2], F101)

    def test_lower_degree_dividend(self, F101):
        a = Polynomial([3, 1], F101)
        b = Polynomial([1, 0, 1], F101)
        q, r = poly_div(a, b)
        assert q.is_zero()
        assert r == a

    def test_division_identity_random(self, F101):
        """a = b·q + r,  deg r < deg b"""
        rng = random.Random(2024)
        for _ in range(25):
            a = _random_poly(rng, rng.randrange(0, 9), F101)
            b = _random_poly(rng, rng.randrange(0, 5), F101)
            q, r = poly_div(a, b)
            assert b * q + r == a
            assert r.is_zero() or r.degree < b.degree

    def test_divide_by_zero(self, F101):
        with pytest.raises(FieldError):
            poly_div(Polynomial([1, 1], F101), Polynomial.zero(F101))


class TestLagrange:
    def test_basis_kronecker(self, F101):
        domain = [1, 2, 3, 4]
        for i in range(4):
            L = lagrange_basis(domain, i, F101)
            for j, d in enumerate(domain):
                assert L(d) == (F101(1) if i == j else F101(0))

    def test_interpolation_passes_through_points(self, F101):
        xs = [1, 2, 3, 4, 5]
        ys = [7, 0, 55, 100, 3]
        p = lagrange_interp(xs, ys, F101)
        assert p.degree < len(xs)
        for x, y in zip(xs, ys):
            assert p(x) == F101(y)

    def test_precomputed_bases(self, F101):
        xs = [1, 2, 3]
        bases = lagrange_bases(xs, F101)
        assert lagrange_interp(xs, [4, 5, 6], F101, bases) == lagrange_interp(xs, [4, 5, 6], F101)

    def test_recovers_polynomial(self):
        rng = random.Random(5)
        p = _random_poly(rng, 5, FR)
        xs = list(range(1, 7))
        assert lagrange_interp(xs, [p(x) for x in xs]) == p

    def test_all_zero_values(self, F101):
        assert lagrange_interp([1, 2, 3], [0, 0, 0], F101).is_zero()

    def test_duplicate_points(self, F101):
        with pytest.raises(FieldError):
            lagrange_interp([1, 2, 102], [1, 2, 3], F101)

    def test_length_mismatch(self, F101):
        with pytest.raises(FieldError):
            lagrange_interp([1, 2], [1], F101)
