# nfse_service/core/errors.py
from __future__ import annotations

from typing import Any, Optional


class NFSeGatewayError(Exception):
    """Base de todos os erros do gateway de distribuição NFS-e."""


class ParametroInvalidoError(NFSeGatewayError):
    """
    Parâmetro de entrada inválido (ex.: NSU ausente ou não numérico).
    Vira HTTP 400 antes de qualquer chamada ao ADN.
    """


class ConfiguracaoError(NFSeGatewayError):
    """
    Configuração ausente ou inválida (URL base, PFX, senha).
    Nunca degrada para conexão sem certificado: vira HTTP 500.
    """


class UpstreamError(NFSeGatewayError):
    """
    Falha na chamada ao ADN: conexão, handshake TLS, timeout,
    resposta não-2xx ou corpo que não é JSON.

    - status_code: status HTTP do ADN, ou 500 quando não houve resposta
    - url: URL completa (com query string) usada na chamada
    - retorno: corpo devolvido pelo ADN, quando houver
    """

    def __init__(
        self,
        detalhe: str,
        *,
        url: str,
        status_code: Optional[int] = None,
        retorno: Any = None,
    ) -> None:
        super().__init__(detalhe)
        self.detalhe = detalhe
        self.url = url
        self.status_code = status_code or 500
        self.retorno = retorno
