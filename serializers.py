"""
증명 데이터 직렬화/역직렬화 헬퍼
================================

TinyDB와 JSON API에 저장 가능한 형태, 그리고 고정폭 바이너리 형태로
Proof와 관련 객체를 변환한다.

**바이너리 레이아웃** (모듈러스는 대역 외로 합의):
  root                        hash_size 바이트
  u32 공개 입력 수 ‖ 각 값     필드 원소 고정폭
  u32 평가값 수 ‖ 각 값        필드 원소 고정폭 (Proof.EVALUATION_FIELDS 순서)
  u32 열기 수 ‖ 각 열기:
      u32 index ‖ u32 형제 수 ‖ 형제 해시들 (hash_size 바이트)
"""

from qapzk.field import element_to_bytes, element_from_bytes, field_byte_length
from qapzk.merkle import InclusionProof
from qapzk.prover import Proof
from qapzk.r1cs import R1CS
from qapzk.utils import HASH_SIZE, u32


# ─── 필드 원소 ───

def serialize_fr(val):
    """필드 원소 → str(int)"""
    return str(int(val))


def deserialize_fr(s, field):
    """str(int) → 필드 원소. 축소되지 않은 값은 거부한다.

    10진 문자열과 정수만 받는다. float는 int()가 잘라버리므로 거부한다.
    """
    if isinstance(s, bool) or not isinstance(s, (str, int)):
        raise ValueError(f"field value must be a decimal string or integer, got {s!r}")
    value = int(s)
    if not 0 <= value < field.field_modulus:
        raise ValueError(f"{value} is not reduced modulo {field.field_modulus}")
    return field(value)


def serialize_fr_list(lst):
    return [serialize_fr(v) for v in lst]


def deserialize_fr_list(data, field):
    return [deserialize_fr(s, field) for s in data]


# ─── InclusionProof ───

def serialize_opening(opening):
    """InclusionProof → {"index": int, "siblings": [hex, ...]}"""
    return {
        "index": opening.index,
        "siblings": [s.hex() for s in opening.siblings],
    }


def deserialize_opening(data):
    index = data["index"]
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValueError(f"opening index must be an integer, got {index!r}")
    return InclusionProof(index, [bytes.fromhex(s) for s in data["siblings"]])


# ─── Proof (JSON) ───

def serialize_proof(proof):
    """Proof → dict"""
    data = {
        "root": proof.root.hex(),
        "public_inputs": serialize_fr_list(proof.public_inputs),
        "openings": [serialize_opening(o) for o in proof.openings],
    }
    for name in Proof.EVALUATION_FIELDS:
        data[name] = serialize_fr(getattr(proof, name))
    return data


def deserialize_proof(data, field):
    """dict → Proof

    Raises:
        ValueError, KeyError, TypeError: 형식이 잘못된 입력
    """
    proof = Proof()
    proof.root = bytes.fromhex(data["root"])
    proof.public_inputs = deserialize_fr_list(data["public_inputs"], field)
    for name in Proof.EVALUATION_FIELDS:
        setattr(proof, name, deserialize_fr(data[name], field))
    proof.openings = [deserialize_opening(o) for o in data["openings"]]
    return proof


# ─── Proof (바이너리) ───

def proof_to_bytes(proof):
    """Proof → bytes (모듈 docstring의 레이아웃)"""
    out = bytearray(proof.root)
    out += u32(len(proof.public_inputs))
    for v in proof.public_inputs:
        out += element_to_bytes(v)
    evaluations = proof.evaluations()
    out += u32(len(evaluations))
    for v in evaluations:
        out += element_to_bytes(v)
    out += u32(len(proof.openings))
    for opening in proof.openings:
        out += u32(opening.index)
        out += u32(len(opening.siblings))
        for sibling in opening.siblings:
            out += sibling
    return bytes(out)


class _Reader:
    def __init__(self, data):
        self.data = bytes(data)
        self.offset = 0

    def take(self, n):
        if self.offset + n > len(self.data):
            raise ValueError(f"proof bytes truncated at offset {self.offset}")
        chunk = self.data[self.offset:self.offset + n]
        self.offset += n
        return chunk

    def u32(self):
        return int.from_bytes(self.take(4), "big")

    def finish(self):
        if self.offset != len(self.data):
            raise ValueError(f"{len(self.data) - self.offset} trailing bytes after proof")


def proof_from_bytes(data, field, hash_size=HASH_SIZE):
    """bytes → Proof

    Raises:
        ValueError: 잘린 입력, 남는 바이트, 평가값 개수 불일치
        FieldError: 축소되지 않은 필드 원소 인코딩
    """
    width = field_byte_length(field)
    reader = _Reader(data)

    proof = Proof()
    proof.root = reader.take(hash_size)
    proof.public_inputs = [
        element_from_bytes(reader.take(width), field) for _ in range(reader.u32())
    ]
    count = reader.u32()
    if count != len(Proof.EVALUATION_FIELDS):
        raise ValueError(f"expected {len(Proof.EVALUATION_FIELDS)} evaluations, got {count}")
    for name in Proof.EVALUATION_FIELDS:
        setattr(proof, name, element_from_bytes(reader.take(width), field))
    openings = []
    for _ in range(reader.u32()):
        index = reader.u32()
        siblings = [reader.take(hash_size) for _ in range(reader.u32())]
        openings.append(InclusionProof(index, siblings))
    proof.openings = openings
    reader.finish()
    return proof


# ─── R1CS ───

def serialize_r1cs(r1cs):
    """R1CS → dict (TinyDB 저장용)"""
    A, B, C = r1cs.matrices()
    return {
        "modulus": str(r1cs.field.field_modulus),
        "witness_length": r1cs.witness_length,
        "num_public": r1cs.num_public,
        "A": [serialize_fr_list(row) for row in A],
        "B": [serialize_fr_list(row) for row in B],
        "C": [serialize_fr_list(row) for row in C],
    }


def deserialize_r1cs(data, field):
    """dict → R1CS"""
    if int(data["modulus"]) != field.field_modulus:
        raise ValueError(f"stored R1CS uses modulus {data['modulus']}")
    rows = zip(
        (deserialize_fr_list(r, field) for r in data["A"]),
        (deserialize_fr_list(r, field) for r in data["B"]),
        (deserialize_fr_list(r, field) for r in data["C"]),
    )
    return R1CS(data["witness_length"], data["num_public"], list(rows), field=field)


# ─── 표시용 ───

def fr_short(val):
    """필드 원소 → 짧은 문자열 (화면 표시용)"""
    s = str(int(val))
    if len(s) <= 16:
        return s
    return s[:8] + "..." + s[-8:]
