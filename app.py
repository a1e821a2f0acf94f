"""
QAP-Merkle 증명 시스템 Flask 앱
================================

create_app()이 설정을 읽고 TinyDB를 열어 routes.api_bp에 주입한다.

**설정** (app.config, QAPZK_* 환경 변수로 덮어쓰기 가능):
  | 키       | 기본값       | 의미                                   |
  |----------|--------------|----------------------------------------|
  | DB_PATH  | None         | TinyDB 파일 경로 (None이면 메모리 DB)   |
  | MODULUS  | CURVE_ORDER  | 증명 시스템이 쓰는 소수 모듈러스        |

  예: QAPZK_DB_PATH='"db.json"' QAPZK_MODULUS=101 flask --app app run
"""

from flask import Flask, jsonify
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from qapzk.errors import ProofSystemError, UnsatisfiedWitness
from qapzk.field import CURVE_ORDER, make_field

from log import setup_logger
from routes import api_bp, init_api_bp


def open_db(path):
    if path is None:
        return TinyDB(storage=MemoryStorage)  # Memory DB
    return TinyDB(path)                       # Storage DB


def create_app(config=None):
    """Flask 앱을 만들고 설정, 로깅, DB, 블루프린트를 연결한다."""
    app = Flask(__name__)
    app.config.update(DB_PATH=None, MODULUS=CURVE_ORDER)
    app.config.from_prefixed_env("QAPZK")
    if config:
        app.config.update(config)

    setup_logger(app)

    # 잘못된 모듈러스는 요청 시점이 아니라 기동 시점에 실패한다
    make_field(int(app.config["MODULUS"]))

    db = open_db(app.config["DB_PATH"])
    init_api_bp(db)
    app.register_blueprint(api_bp)

    @app.errorhandler(ProofSystemError)
    def proof_system_error(e):
        """증명 생성 중 도메인 오류를 HTTP 400 JSON으로 변환한다."""
        body = {"error": type(e).__name__, "message": str(e)}
        if isinstance(e, UnsatisfiedWitness):
            body["constraint_index"] = e.constraint_index
        app.logger.info("request rejected: %s: %s", body["error"], e)
        return jsonify(body), 400

    app.logger.info(
        "qapzk app ready (modulus %d bits, %s db)",
        int(app.config["MODULUS"]).bit_length(),
        "memory" if app.config["DB_PATH"] is None else app.config["DB_PATH"],
    )
    return app


if __name__ == "__main__":
    create_app().run()
