# test_logging.py
import logging
import sys

import pytest
from loguru import logger

from nfse_service.core.logging import InterceptHandler, setup_logging


@pytest.fixture
def logging_restaurado():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers, root.level = handlers, level
    logger.remove()
    logger.add(sys.stderr)


def test_stdlib_redirecionado_para_loguru(logging_restaurado):
    setup_logging("DEBUG")
    mensagens = []
    logger.add(lambda msg: mensagens.append(msg.record["message"]), level="DEBUG")

    logging.getLogger("urllib3.connectionpool").warning("conexão recusada")

    assert "conexão recusada" in mensagens


def test_uvicorn_usa_intercept_handler(logging_restaurado):
    setup_logging("INFO")

    for nome in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(nome)
        assert len(uv_logger.handlers) == 1
        assert isinstance(uv_logger.handlers[0], InterceptHandler)
        assert uv_logger.propagate is False
