# nfse_api/schemas.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErroResponse(BaseModel):
    erro: str = Field(..., description="Resumo do erro")
    detalhe: str | None = Field(None, description="Mensagem detalhada da falha")
    url: str | None = Field(None, description="URL completa chamada no ADN (diagnóstico)")
    retorno: Any = Field(None, description="Corpo devolvido pelo ADN, quando houver")


class DocumentoNaoEncontradoResponse(BaseModel):
    erro: str
    nsu: int
    retorno: Any = Field(None, description="Envelope bruto do ADN para diagnóstico")


RESPOSTAS_ERRO = {
    400: {"model": ErroResponse, "description": "NSU ausente ou inválido"},
    500: {"model": ErroResponse, "description": "Falha de configuração ou de comunicação com o ADN"},
}
