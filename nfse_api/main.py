# nfse_api/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from nfse_service.core.cliente_seguro import ClienteSeguro, construir_cliente_seguro
from nfse_service.core.config import Settings, load_settings
from nfse_service.core.errors import (
    ConfiguracaoError,
    ParametroInvalidoError,
    UpstreamError,
)
from nfse_service.core.logging import setup_logging

from .nfse_router import router as nfse_router
from .schemas import ErroResponse


# -------------------------------------------------------------------
# TRATAMENTO DE ERROS
# -------------------------------------------------------------------

def _erro(status_code: int, corpo: ErroResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=corpo.model_dump(exclude_none=True))


async def _parametro_invalido_handler(request: Request, exc: ParametroInvalidoError) -> JSONResponse:
    return _erro(400, ErroResponse(erro="Parâmetro inválido", detalhe=str(exc)))


async def _validacao_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detalhes = [
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}"
        for e in exc.errors()
    ]
    return _erro(400, ErroResponse(erro="Parâmetro inválido", detalhe="; ".join(detalhes)))


async def _configuracao_handler(request: Request, exc: ConfiguracaoError) -> JSONResponse:
    logger.error(f"Configuração inválida: {exc}")
    return _erro(500, ErroResponse(erro="Configuração inválida", detalhe=str(exc)))


async def _upstream_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.warning(f"Falha na chamada ao ADN ({exc.status_code}): {exc.detalhe}")
    return _erro(
        exc.status_code,
        ErroResponse(
            erro="Falha ao consultar o ADN",
            detalhe=exc.detalhe,
            url=exc.url,
            retorno=exc.retorno,
        ),
    )


# -------------------------------------------------------------------
# FASTAPI APP
# -------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    cliente: Optional[ClienteSeguro] = None,
) -> FastAPI:
    """
    Monta a aplicação.

    - settings: configuração já carregada (padrão: variáveis de ambiente)
    - cliente: cliente mTLS pronto; se omitido, é construído na subida
      a partir de `settings` e a subida falha se a configuração for inválida.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        proprio = False
        if getattr(app.state, "cliente", None) is None:
            cfg = settings or load_settings()
            try:
                app.state.cliente = construir_cliente_seguro(cfg)
            except ConfiguracaoError as exc:
                logger.error(f"Não foi possível iniciar o cliente mTLS: {exc}")
                raise
            proprio = True
            logger.info(f"Cliente mTLS pronto para {app.state.cliente.base_url}")
        try:
            yield
        finally:
            if proprio:
                app.state.cliente.close()
                app.state.cliente = None

    app = FastAPI(
        title="NFS-e Distribuição Gateway",
        version="1.0.0",
        description="Gateway mTLS para a distribuição de DF-e do ADN (NFS-e Nacional).",
        lifespan=lifespan,
    )
    app.state.cliente = cliente

    app.add_exception_handler(ParametroInvalidoError, _parametro_invalido_handler)
    app.add_exception_handler(RequestValidationError, _validacao_handler)
    app.add_exception_handler(ConfiguracaoError, _configuracao_handler)
    app.add_exception_handler(UpstreamError, _upstream_handler)

    @app.get("/", response_class=PlainTextResponse, summary="Health check")
    def health() -> str:
        return "OK"

    app.include_router(nfse_router)
    return app


def run() -> None:
    """Ponto de entrada: `nfse-gateway`."""
    settings = load_settings()
    setup_logging(settings.log_level)

    app = create_app(settings=settings)
    logger.info(f"Iniciando gateway NFS-e em http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
