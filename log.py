"""
로깅 설정
=========

Flask 앱과 qapzk 라이브러리 로거에 콘솔 핸들러를 붙인다.

**로그 레벨**:
  LOG_LEVEL 환경 변수 (DEBUG, INFO, WARNING, ...), 기본값 INFO.
  잘못된 값이면 INFO로 돌아가고 경고를 남긴다.

**로거 구성**:
  | 로거        | 용도                                        |
  |-------------|---------------------------------------------|
  | app.logger  | 요청 처리, 저장소 동작                       |
  | qapzk       | 증명 생성, 검증 거절 사유 (라이브러리 전체)   |
"""

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_log_level():
    """LOG_LEVEL 환경 변수를 logging 레벨 값으로 변환한다."""
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        return None, name
    return level, name


def initialize_log_handler(log_level):
    """포맷이 지정된 콘솔 핸들러를 만든다."""
    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_library_logger(log_level):
    """qapzk 패키지 로거를 설정한다. 이미 핸들러가 있으면 레벨만 바꾼다."""
    lib_logger = logging.getLogger("qapzk")
    lib_logger.setLevel(log_level)
    if not lib_logger.handlers:
        lib_logger.addHandler(initialize_log_handler(log_level))
    for handler in lib_logger.handlers:
        handler.setLevel(log_level)
    lib_logger.propagate = False
    return lib_logger


def setup_logger(app):
    """앱 로거와 라이브러리 로거를 LOG_LEVEL에 맞춰 설정한다."""
    log_level, name = get_log_level()
    if log_level is None:
        app.logger.warning("Invalid LOG_LEVEL '%s'. Defaulting to INFO.", name)
        log_level = logging.INFO

    app.logger.setLevel(log_level)
    setup_library_logger(log_level)
