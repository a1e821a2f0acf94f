import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from qapzk.circuit import Circuit
from qapzk.field import make_field


# ── 테스트 상수 ──
SMALL_MODULUS = 101
SQUARE_X = 3


@pytest.fixture(scope="session")
def F101():
    """GF(101) 필드 클래스."""
    return make_field(SMALL_MODULUS)


@pytest.fixture(scope="session")
def square_r1cs(F101):
    """x · x = y 회로의 R1CS (GF(101), 레이아웃 [1, y, x])."""
    return Circuit.square_eq(F101).to_r1cs()


@pytest.fixture(scope="session")
def square_witness(F101):
    """x = 3 일 때의 위트니스 [1, 9, 3]."""
    return Circuit.square_eq(F101).compute_witness({"x": SQUARE_X})
