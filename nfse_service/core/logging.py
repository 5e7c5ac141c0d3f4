# nfse_service/core/logging.py
from __future__ import annotations

import logging
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)


class InterceptHandler(logging.Handler):
    """
    Redireciona o logging da stdlib (uvicorn, urllib3) para o Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # sobe a pilha até sair do módulo logging
        try:
            frame = sys._getframe(6)
            depth = 6
        except ValueError:
            frame, depth = None, 1
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """
    Troca o handler padrão do Loguru por um sink em stderr
    e intercepta os loggers do uvicorn.
    """
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level, enqueue=True, backtrace=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for nome in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(nome)
        uv_logger.handlers = [InterceptHandler()]
        uv_logger.propagate = False
