# nfse_service/core/distribuicao.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from loguru import logger

from .cliente_seguro import ClienteSeguro
from .errors import ParametroInvalidoError, UpstreamError


@dataclass
class DistribuicaoResult:
    """
    Retorno da consulta de distribuição (DFe) no ADN.
    - status_code: status HTTP devolvido pelo ADN
    - envelope: JSON com StatusProcessamento, ultimoNSU e LoteDFe
    - url: URL completa chamada
    """
    status_code: int
    envelope: Any
    url: str


def _somente_digitos(texto: str) -> bool:
    return texto.isascii() and texto.isdigit()


def validar_nsu(valor: Optional[str]) -> int:
    """
    Converte o parâmetro `nsu` da query em inteiro não negativo.
    """
    if valor is None or not str(valor).strip():
        raise ParametroInvalidoError("Parâmetro 'nsu' é obrigatório.")

    texto = str(valor).strip()
    # só dígitos ASCII: int() aceitaria "+5", "1_000" e dígitos não ASCII
    if texto.startswith("-") and _somente_digitos(texto[1:]):
        raise ParametroInvalidoError(f"Parâmetro 'nsu' não pode ser negativo: {texto}")
    if not _somente_digitos(texto):
        raise ParametroInvalidoError(f"Parâmetro 'nsu' deve ser um número inteiro: {valor!r}")
    return int(texto)


def _montar_params(cnpj_consulta: Optional[str], lote: bool) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if cnpj_consulta:
        params["cnpjConsulta"] = cnpj_consulta
    params["lote"] = "true" if lote else "false"
    return params


def _corpo_resposta(resp: requests.Response) -> Any:
    """JSON do ADN se possível, senão o texto cru."""
    try:
        return resp.json()
    except ValueError:
        return resp.text


def consultar_distribuicao(
    cliente: ClienteSeguro,
    nsu: int,
    cnpj_consulta: Optional[str] = None,
    lote: bool = True,
) -> DistribuicaoResult:
    """
    GET {base_url}/DFe/{nsu}?cnpjConsulta=...&lote=...

    Levanta UpstreamError em falha de transporte (status 500),
    resposta não-2xx (status do ADN) ou corpo que não seja JSON.
    """
    caminho = f"/DFe/{int(nsu)}"
    params = _montar_params(cnpj_consulta, lote)
    url = cliente.montar_url(caminho, params)

    inicio = time.perf_counter()
    try:
        resp = cliente.get(caminho, params)
    except requests.Timeout as exc:
        logger.warning(f"Timeout ao consultar ADN: {url}")
        raise UpstreamError(f"Tempo esgotado ao consultar o ADN: {exc}", url=url) from exc
    except requests.RequestException as exc:
        logger.error(f"Falha de comunicação com o ADN: {url} ({exc})")
        raise UpstreamError(f"Falha de comunicação com o ADN: {exc}", url=url) from exc

    duracao_ms = (time.perf_counter() - inicio) * 1000
    logger.info(f"ADN GET {url} -> {resp.status_code} ({duracao_ms:.0f}ms)")

    if not 200 <= resp.status_code < 300:
        raise UpstreamError(
            f"ADN retornou HTTP {resp.status_code}",
            url=url,
            status_code=resp.status_code,
            retorno=_corpo_resposta(resp),
        )

    try:
        envelope = resp.json()
    except ValueError as exc:
        raise UpstreamError(
            f"Resposta do ADN não é JSON: {exc}",
            url=url,
            retorno=resp.text,
        ) from exc

    return DistribuicaoResult(status_code=resp.status_code, envelope=envelope, url=url)
