"""
Fiat-Shamir Transcript
======================

비대화식(non-interactive) 변환을 위한 Fiat-Shamir 해싱 구현.

**Fiat-Shamir 변환이란?**
  대화식 프로토콜에서는:
  - Prover가 위트니스 커밋먼트(머클 루트)를 보내면
  - Verifier가 랜덤 챌린지 τ를 보내고
  - Prover가 τ에서의 다항식 평가값으로 응답한다

  Fiat-Shamir 변환은 이 대화를 해시 함수로 시뮬레이션한다:
  - Prover가 지금까지의 모든 메시지를 해시하여 챌린지를 직접 생성
  - Verifier도 같은 방식으로 챌린지를 재구성 (Prover가 준 챌린지는 믿지 않음)

**이 시스템의 챌린지**:
  label ‖ modulus ‖ m ‖ ℓ ‖ n ‖ root ‖ public inputs → τ

사용 예시:
    >>> t = Transcript(field=F)
    >>> t.append_bytes(b"root", tree.root)
    >>> tau = t.challenge_scalar(b"tau")
"""

from qapzk.field import FR, element_to_bytes
from qapzk.utils import sha256, u32


class Transcript:
    """해시 기반 Fiat-Shamir 트랜스크립트.

    해시 상태를 누적하여 결정론적이면서 예측 불가능한 챌린지를 생성한다.
    Prover와 Verifier가 동일한 순서로 데이터를 추가하면
    동일한 챌린지가 생성된다.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열
        field: 챌린지가 속할 필드 클래스
        hash_fn: 해시 함수 (기본값 SHA-256)
    """

    def __init__(self, label=b"qapzk", field=FR, hash_fn=sha256):
        self.state = bytearray()
        self.field = field
        self.hash_fn = hash_fn
        self._absorb(b"label", label)

    def _absorb(self, label, data):
        # 길이 접두로 경계를 고정한다: label=b"ab", data=b"c" 와 b"a", b"bc"가 구별됨
        self.state.extend(u32(len(label)))
        self.state.extend(label)
        self.state.extend(u32(len(data)))
        self.state.extend(data)

    def append_bytes(self, label, data):
        """임의의 바이트열(예: 머클 루트)을 추가한다."""
        self._absorb(label, bytes(data))

    def append_int(self, label, value):
        """음이 아닌 정수(예: 모듈러스, 위트니스 길이)를 추가한다."""
        self._absorb(label, value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big"))

    def append_scalar(self, label, scalar):
        """필드 원소를 고정폭 빅엔디안으로 추가한다."""
        self._absorb(label, element_to_bytes(self.field(scalar)))

    def challenge_scalar(self, label):
        """트랜스크립트로부터 챌린지 스칼라를 생성한다.

        생성된 다이제스트는 상태에 다시 추가된다 (체이닝).
        같은 label로 두 번 호출해도 서로 다른 값이 나온다.

        Returns:
            필드 원소: 챌린지
        """
        self.state.extend(label)
        h = self.hash_fn(bytes(self.state))
        challenge = self.field(int.from_bytes(h, "big") % self.field.field_modulus)
        self.state.extend(h)
        return challenge


def derive_challenge(key, root, public_inputs, hash_fn=sha256):
    """위트니스 커밋먼트와 공개 입력으로부터 평가 점 τ를 도출한다.

    Prover와 Verifier가 같은 함수를 쓴다. τ가 제약 인덱스 1..n 중 하나면
    Z(τ) = 0이 되어 항등식 검사가 무의미해지므로 다시 뽑는다.

    Args:
        key: VerifyingKey (필드, 크기 정보)
        root: 머클 루트
        public_inputs: 공개 입력 필드 원소 리스트

    Returns:
        필드 원소 τ  (Z(τ) ≠ 0)
    """
    transcript = Transcript(b"qapzk-qap-merkle-v1", key.field, hash_fn)
    transcript.append_int(b"modulus", key.field.field_modulus)
    transcript.append_int(b"witness_length", key.witness_length)
    transcript.append_int(b"num_public", key.num_public)
    transcript.append_int(b"num_constraints", key.num_constraints)
    transcript.append_bytes(b"root", root)
    for value in public_inputs:
        transcript.append_scalar(b"public_input", value)

    tau = transcript.challenge_scalar(b"tau")
    while 1 <= int(tau) <= key.num_constraints:
        tau = transcript.challenge_scalar(b"tau")
    return tau
