"""
Flask API tests: app.py, routes.py, log.py

app.test_client()로 JSON 엔드포인트 전체 흐름을 테스트한다.
"""
import logging

import pytest

from qapzk.field import CURVE_ORDER
from qapzk.errors import FieldError

from app import create_app


@pytest.fixture
def app():
    return create_app({"MODULUS": 101, "TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def square_client(client):
    """square 예제 회로가 저장된 클라이언트."""
    res = client.post("/api/circuit/example", json={"name": "square"})
    assert res.status_code == 200
    return client


def _prove(client, **body):
    return client.post("/api/prove", json=body)


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("QAPZK_MODULUS", raising=False)
        monkeypatch.delenv("QAPZK_DB_PATH", raising=False)
        app = create_app()
        assert app.config["MODULUS"] == CURVE_ORDER
        assert app.config["DB_PATH"] is None

    def test_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("QAPZK_MODULUS", "103")
        app = create_app()
        assert app.config["MODULUS"] == 103

    def test_bad_modulus_fails_at_startup(self):
        with pytest.raises(FieldError):
            create_app({"MODULUS": 100})

    def test_file_storage(self, tmp_path):
        path = tmp_path / "db.json"
        app = create_app({"MODULUS": 101, "DB_PATH": str(path)})
        client = app.test_client()
        client.post("/api/circuit/example", json={"name": "square"})
        assert path.exists()

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        app = create_app({"MODULUS": 101})
        assert app.logger.level == logging.DEBUG
        assert logging.getLogger("qapzk").level == logging.DEBUG

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        app = create_app({"MODULUS": 101})
        assert app.logger.level == logging.INFO


class TestCircuitEndpoint:
    def test_square(self, client):
        res = client.post("/api/circuit/example", json={"name": "square"})
        assert res.status_code == 200
        assert res.get_json() == {
            "name": "square",
            "witness_length": 3,
            "num_public": 1,
            "num_constraints": 1,
            "public_names": ["y"],
        }

    def test_cubic(self, client):
        data = client.post("/api/circuit/example", json={"name": "cubic"}).get_json()
        assert data["num_constraints"] == 3
        assert data["public_names"] == ["out"]

    def test_unknown_circuit(self, client):
        res = client.post("/api/circuit/example", json={"name": "sha256"})
        assert res.status_code == 400
        assert res.get_json()["error"] == "BadRequest"


class TestProveVerify:
    def test_prove_then_verify(self, square_client):
        res = _prove(square_client, inputs={"x": 3})
        assert res.status_code == 200
        body = res.get_json()
        assert body["public_inputs"] == ["9"]
        assert isinstance(body["id"], int)

        res = square_client.post("/api/verify", json={
            "public_inputs": body["public_inputs"],
            "proof": body["proof"],
        })
        assert res.get_json() == {"valid": True}

    def test_verify_wrong_public_input(self, square_client):
        proof = _prove(square_client, inputs={"x": 3}).get_json()["proof"]
        res = square_client.post("/api/verify", json={"public_inputs": ["10"], "proof": proof})
        assert res.get_json() == {"valid": False}

    def test_verify_tampered_proof(self, square_client):
        proof = _prove(square_client, inputs={"x": 3}).get_json()["proof"]
        proof["h_eval"] = str((int(proof["h_eval"]) + 1) % 101)
        res = square_client.post("/api/verify", json={"public_inputs": ["9"], "proof": proof})
        assert res.get_json() == {"valid": False}

    def test_verify_undecodable_proof(self, square_client):
        res = square_client.post("/api/verify", json={"public_inputs": ["9"], "proof": {"root": "zz"}})
        assert res.status_code == 200
        body = res.get_json()
        assert body["valid"] is False
        assert "malformed" in body["reason"]

    def test_verify_missing_fields(self, square_client):
        res = square_client.post("/api/verify", json={"proof": {}})
        assert res.status_code == 400

    def test_prove_with_explicit_witness(self, square_client):
        res = _prove(square_client, witness=["1", "9", "98"])
        assert res.status_code == 200
        assert res.get_json()["public_inputs"] == ["9"]

    def test_unsatisfied_witness(self, square_client):
        res = _prove(square_client, witness=["1", "9", "4"])
        assert res.status_code == 400
        assert res.get_json() == {
            "error": "UnsatisfiedWitness",
            "message": "constraint 0 is not satisfied",
            "constraint_index": 0,
        }

    @pytest.mark.parametrize("witness", [[1, 9, 3.7], [1, 9, 3.0], [True, 9, 3]])
    def test_non_integer_witness_rejected(self, square_client, witness):
        res = _prove(square_client, witness=witness)
        assert res.status_code == 400
        assert res.get_json()["message"].startswith("invalid witness")

    def test_wrong_witness_length(self, square_client):
        res = _prove(square_client, witness=["1", "9"])
        assert res.status_code == 400
        assert res.get_json()["error"] == "ConstraintShapeError"

    def test_missing_input(self, square_client):
        res = _prove(square_client, inputs={})
        assert res.status_code == 400
        assert res.get_json()["error"] == "ConstraintShapeError"

    def test_invalid_input_value(self, square_client):
        res = _prove(square_client, inputs={"x": "three"})
        assert res.status_code == 400

    def test_bad_body(self, square_client):
        res = square_client.post("/api/prove", data="not json", content_type="text/plain")
        assert res.status_code == 400

    def test_no_circuit(self, client):
        assert _prove(client, inputs={"x": 3}).status_code == 409
        res = client.post("/api/verify", json={"public_inputs": [], "proof": {}})
        assert res.status_code == 409


class TestStoredProofs:
    def test_get_stored_proof(self, square_client):
        body = _prove(square_client, inputs={"x": 3}).get_json()
        res = square_client.get(f"/api/proofs/{body['id']}")
        assert res.status_code == 200
        stored = res.get_json()
        assert stored["circuit"] == "square"
        assert stored["proof"] == body["proof"]

    def test_ids_increase(self, square_client):
        first = _prove(square_client, inputs={"x": 3}).get_json()["id"]
        second = _prove(square_client, inputs={"x": 98}).get_json()["id"]
        assert second > first

    def test_unknown_proof(self, square_client):
        res = square_client.get("/api/proofs/999")
        assert res.status_code == 404
        assert res.get_json()["error"] == "NotFound"
