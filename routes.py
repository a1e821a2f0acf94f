"""
QAP 증명 Flask Blueprint: JSON API
====================================

  | 메서드 | 경로                   | 동작                                  |
  |--------|------------------------|---------------------------------------|
  | POST   | /api/circuit/example   | 예제 회로 컴파일 → R1CS 저장           |
  | POST   | /api/prove             | 저장된 회로로 증명 생성 → 증명 저장     |
  | POST   | /api/verify            | 증명 검증 → {"valid": bool}            |
  | GET    | /api/proofs/<id>       | 저장된 증명 조회                       |

증명 생성 중의 도메인 오류(ProofSystemError)는 app.py의 에러 핸들러가
HTTP 400으로 변환한다. 검증 실패는 오류가 아니라 valid=false 응답이다.
"""

from flask import Blueprint, current_app, jsonify, request
from tinydb import Query

from qapzk.circuit import Circuit
from qapzk.field import make_field
from qapzk.preprocessor import preprocess
from qapzk.prover import prove
from qapzk.verifier import verify

from serializers import (
    serialize_fr_list, deserialize_fr_list,
    serialize_proof, deserialize_proof,
    serialize_r1cs, deserialize_r1cs,
    fr_short,
)

api_bp = Blueprint('api', __name__, url_prefix='/api')

DATA = Query()

EXAMPLE_CIRCUITS = {
    "square": Circuit.square_eq,
    "cubic": Circuit.cubic_eq_35,
}

# DB는 app.py에서 주입
DB = None


def init_api_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def proofs_table():
    return DB.table("proofs")


# ─── 요청 헬퍼 ───

def current_field():
    """설정된 모듈러스의 필드 클래스."""
    return make_field(int(current_app.config["MODULUS"]))


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def bad_request(message, status=400):
    return jsonify({"error": "BadRequest", "message": message}), status


def load_circuit():
    """저장된 회로 정보를 (이름, R1CS)로 반환한다. 없으면 None."""
    stored = db_get("circuit")
    if stored is None:
        return None
    return stored["name"], deserialize_r1cs(stored["r1cs"], current_field())


# ──────────────────────────────────────────────────────────────
# Circuit
# ──────────────────────────────────────────────────────────────

@api_bp.route("/circuit/example", methods=["POST"])
def circuit_example():
    """예제 회로를 컴파일해 R1CS를 저장한다."""
    name = json_body().get("name", "square")
    factory = EXAMPLE_CIRCUITS.get(name)
    if factory is None:
        return bad_request(f"unknown example circuit {name!r}")

    circuit = factory(current_field())
    r1cs = circuit.to_r1cs()
    db_set("circuit", {
        "name": name,
        "public_names": circuit.public_names,
        "r1cs": serialize_r1cs(r1cs),
    })
    current_app.logger.info("stored example circuit %s: %r", name, r1cs)

    return jsonify({
        "name": name,
        "witness_length": r1cs.witness_length,
        "num_public": r1cs.num_public,
        "num_constraints": r1cs.num_constraints,
        "public_names": circuit.public_names,
    })


# ──────────────────────────────────────────────────────────────
# Proving
# ──────────────────────────────────────────────────────────────

@api_bp.route("/prove", methods=["POST"])
def prove_route():
    """입력 할당 또는 위트니스로 증명을 생성하고 저장한다."""
    loaded = load_circuit()
    if loaded is None:
        return bad_request("no circuit stored; POST /api/circuit/example first", 409)
    name, r1cs = loaded
    field = r1cs.field
    body = json_body()

    if "witness" in body:
        try:
            witness = deserialize_fr_list(body["witness"], field)
        except (TypeError, ValueError) as e:
            return bad_request(f"invalid witness: {e}")
    elif isinstance(body.get("inputs"), dict):
        try:
            witness = EXAMPLE_CIRCUITS[name](field).compute_witness(body["inputs"])
        except TypeError as e:
            return bad_request(f"invalid inputs: {e}")
    else:
        return bad_request("expected 'inputs' object or 'witness' list")

    proof = prove(preprocess(r1cs), witness)
    proof_data = serialize_proof(proof)
    proof_id = proofs_table().insert({"circuit": name, "proof": proof_data})
    current_app.logger.info(
        "proof %d generated for %s, public inputs %s",
        proof_id, name, [fr_short(v) for v in proof.public_inputs],
    )

    return jsonify({
        "id": proof_id,
        "proof": proof_data,
        "public_inputs": serialize_fr_list(proof.public_inputs),
    })


# ──────────────────────────────────────────────────────────────
# Verifying
# ──────────────────────────────────────────────────────────────

@api_bp.route("/verify", methods=["POST"])
def verify_route():
    """제출된 증명을 저장된 회로에 대해 검증한다."""
    loaded = load_circuit()
    if loaded is None:
        return bad_request("no circuit stored; POST /api/circuit/example first", 409)
    _, r1cs = loaded
    body = json_body()
    if "proof" not in body or "public_inputs" not in body:
        return bad_request("expected 'public_inputs' and 'proof'")

    try:
        public_inputs = deserialize_fr_list(body["public_inputs"], r1cs.field)
        proof = deserialize_proof(body["proof"], r1cs.field)
    except (KeyError, TypeError, ValueError) as e:
        current_app.logger.info("undecodable proof submitted: %s", e)
        return jsonify({"valid": False, "reason": f"malformed proof: {e}"})

    valid = verify(r1cs, public_inputs, proof)
    return jsonify({"valid": valid})


@api_bp.route("/proofs/<int:proof_id>")
def get_proof(proof_id):
    """저장된 증명을 id로 조회한다."""
    doc = proofs_table().get(doc_id=proof_id)
    if doc is None:
        return jsonify({"error": "NotFound", "message": f"no proof with id {proof_id}"}), 404
    return jsonify({"id": proof_id, "circuit": doc["circuit"], "proof": doc["proof"]})
