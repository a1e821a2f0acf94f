"""
증명 시스템 유틸리티 함수
=========================

해시 프리미티브와 크기/인코딩 헬퍼를 모아둔다.

**해시 함수 계약**:
  머클 노드와 Fiat-Shamir 챌린지는 `hash_fn(data: bytes) -> bytes` 형태의
  교체 가능한 해시 함수에 의존한다. 요구 조건은 결정성, 고정폭 출력,
  충돌 저항성뿐이다. 기본값은 SHA-256.
"""

import hashlib


HASH_SIZE = 32


def sha256(data):
    """기본 해시 함수: SHA-256 (32바이트 다이제스트)."""
    return hashlib.sha256(data).digest()


def next_power_of_2(n):
    """n 이상인 가장 작은 2의 거듭제곱 (n <= 1이면 1).

    예시:
        >>> next_power_of_2(5)
        8
    """
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def ceil_log2(n):
    """⌈log2(n)⌉ (n <= 1이면 0)."""
    return (next_power_of_2(n)).bit_length() - 1


def pad_to_power_of_2(values, filler):
    """리스트를 2의 거듭제곱 길이로 filler를 채워 넣는다."""
    target = next_power_of_2(len(values))
    return list(values) + [filler] * (target - len(values))


def u32(n):
    """부호 없는 32비트 빅엔디안 정수."""
    return n.to_bytes(4, "big")
