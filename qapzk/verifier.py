"""
Verifier
========

증명을 검증한다. 위트니스의 비공개 부분은 보지 않는다.

**검증 과정**:
  1. 공개 입력 형태 검사 (개수, 필드 범위, 증명에 담긴 값과 일치)
  2. τ를 루트와 공개 입력으로부터 직접 재계산 (Prover의 τ를 믿지 않음)
  3. Z(τ)를 공개 다항식으로 계산해 z_eval과 비교
  4. 공개 기여분 + 비공개 기여분으로 A(τ), B(τ), C(τ) 복원
  5. 스칼라 항등식:  A(τ)·B(τ) - C(τ) = h(τ)·Z(τ)
  6. 위치 0..ℓ의 포함 증명을 루트에 대해 검증 (w₀ = 1, wᵢ = 공개 입력)

  5와 6을 모두 통과해야 수락한다.

**실패 처리**:
  거절은 예외가 아니라 False다. 형식이 잘못된 증명이나 적대적 입력도
  일상적인 입력이므로 크래시 없이 False를 반환하고 사유를 로그에 남긴다.

**건전성**:
  만족하는 위트니스 없이 평가값 수준의 일치를 만들 확률은
  deg(P) / |F| 이하 (τ가 해시로 결정되므로).

사용 예시:
    >>> verify(pp.verifying_key, [9], proof)
    True
"""

import logging

from qapzk.errors import ProofSystemError
from qapzk.field import FieldElement
from qapzk.merkle import MerkleTree, InclusionProof
from qapzk.preprocessor import PreprocessedData, VerifyingKey
from qapzk.prover import Proof
from qapzk.r1cs import R1CS
from qapzk.transcript import derive_challenge
from qapzk.utils import sha256

logger = logging.getLogger(__name__)


class _Rejected(Exception):
    """검증 거절 사유를 내부적으로 전달한다."""


def _reject(reason, *args):
    raise _Rejected(reason % args if args else reason)


def _as_field(value, field, what):
    """축소된 정수 또는 같은 필드의 원소만 허용한다."""
    if isinstance(value, FieldElement):
        if type(value).field_modulus != field.field_modulus:
            _reject("%s belongs to a different field", what)
        return field(value)
    if isinstance(value, bool) or not isinstance(value, int):
        _reject("%s is not a field value: %r", what, value)
    if not 0 <= value < field.field_modulus:
        _reject("%s is not reduced modulo %d", what, field.field_modulus)
    return field(value)


def _verifying_key(key):
    if isinstance(key, VerifyingKey):
        return key
    if isinstance(key, PreprocessedData):
        return key.verifying_key
    if isinstance(key, R1CS):
        return VerifyingKey.from_r1cs(key)
    raise TypeError(f"expected VerifyingKey, PreprocessedData or R1CS, got {type(key).__name__}")


def verify(key, public_inputs, proof, hash_fn=sha256):
    """증명을 검증한다.

    Args:
        key: VerifyingKey, PreprocessedData 또는 R1CS (공개 회로 설명)
        public_inputs: Verifier가 알고 있는 공개 입력 w₁..w_ℓ
        proof: Proof
        hash_fn: Prover와 같은 해시 함수

    Returns:
        bool: 수락 여부
    """
    vk = _verifying_key(key)
    try:
        _check(vk, public_inputs, proof, hash_fn)
    except _Rejected as e:
        logger.info("proof rejected: %s", e)
        return False
    except (ProofSystemError, TypeError, ValueError) as e:
        logger.info("malformed proof rejected: %s: %s", type(e).__name__, e)
        return False
    logger.debug("proof accepted")
    return True


def _check(vk, public_inputs, proof, hash_fn):
    field = vk.field

    if not isinstance(proof, Proof):
        _reject("not a Proof object: %s", type(proof).__name__)

    # ── Step 1: 공개 입력 ──
    public_inputs = list(public_inputs)
    if len(public_inputs) != vk.num_public:
        _reject("expected %d public inputs, got %d", vk.num_public, len(public_inputs))
    public = [_as_field(v, field, f"public input {i + 1}") for i, v in enumerate(public_inputs)]
    claimed = [_as_field(v, field, "proof public input") for v in proof.public_inputs]
    if claimed != public:
        _reject("proof was generated for different public inputs")

    evals = {
        name: _as_field(getattr(proof, name), field, name)
        for name in Proof.EVALUATION_FIELDS
    }

    root = proof.root
    if not isinstance(root, (bytes, bytearray)) or len(root) != len(hash_fn(b"")):
        _reject("commitment root is not a %d-byte digest", len(hash_fn(b"")))

    # ── Step 2: 챌린지 재계산 ──
    tau = derive_challenge(vk, bytes(root), public, hash_fn)

    # ── Step 3: Z(τ) ──
    z_tau = vk.Z.evaluate(tau)
    if evals["z_eval"] != z_tau:
        _reject("Z(tau) mismatch")

    # ── Step 4: A(τ), B(τ), C(τ) 복원 ──
    a_pub, b_pub, c_pub = vk.public_evaluations(tau, public)
    a_tau = a_pub + evals["a_priv"]
    b_tau = b_pub + evals["b_priv"]
    c_tau = c_pub + evals["c_priv"]
    if (a_tau, b_tau, c_tau) != (evals["a_eval"], evals["b_eval"], evals["c_eval"]):
        _reject("declared evaluations disagree with public contributions")

    # ── Step 5: QAP 항등식 ──
    if a_tau * b_tau - c_tau != evals["h_eval"] * z_tau:
        _reject("QAP identity A*B - C = h*Z fails at tau")

    # ── Step 6: 공개 위치 열기 ──
    openings = list(proof.openings)
    if len(openings) != vk.num_public + 1:
        _reject("expected %d openings, got %d", vk.num_public + 1, len(openings))
    values = [field(1)] + public
    for position, (opening, value) in enumerate(zip(openings, values)):
        if not isinstance(opening, InclusionProof):
            _reject("opening %d is not an InclusionProof", position)
        if opening.index != position:
            _reject("opening %d has index %r", position, opening.index)
        if opening.depth != vk.merkle_depth:
            _reject("opening %d has depth %d, expected %d", position, opening.depth, vk.merkle_depth)
        if not MerkleTree.verify(value, opening, root, hash_fn):
            _reject("opening %d does not match the committed root", position)
