# nfse_service/core/cliente_seguro.py

from __future__ import annotations

import base64
import binascii
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from cryptography.hazmat.primitives.serialization.pkcs12 import (
    load_key_and_certificates,
)
from requests_pkcs12 import Pkcs12Adapter

from .config import Settings
from .errors import ConfiguracaoError


class Tls12Pkcs12Adapter(Pkcs12Adapter):
    """
    Pkcs12Adapter que exige TLS 1.2 ou superior.
    A validação da cadeia do servidor continua ligada (verify=True).
    """

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        ssl_context = getattr(self, "ssl_context", None)
        if ssl_context is not None:
            ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
        return super().init_poolmanager(*args, **kwargs)


def carregar_pfx_base64(pfx_base64: str, senha: str) -> bytes:
    """
    Decodifica o PFX (PKCS#12) em Base64 e confere se a senha abre
    a chave privada e o certificado. Retorna os bytes do PFX.
    """
    if not pfx_base64:
        raise ConfiguracaoError("Certificado PFX (NFSE_PFX_BASE64) não informado.")
    if not senha:
        raise ConfiguracaoError("Senha do certificado (NFSE_PFX_PASSWORD) não informada.")

    try:
        data = base64.b64decode("".join(pfx_base64.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfiguracaoError(f"NFSE_PFX_BASE64 não é Base64 válido: {exc}") from exc

    try:
        key, cert, _extra_certs = load_key_and_certificates(data, senha.encode("utf-8"))
    except ValueError as exc:
        raise ConfiguracaoError(f"Não foi possível abrir o PFX (senha incorreta ou arquivo corrompido): {exc}") from exc

    if key is None or cert is None:
        raise ConfiguracaoError("Não foi possível carregar chave/certificado do PFX")

    return data


@dataclass
class ClienteSeguro:
    """
    Cliente HTTPS com certificado digital (mTLS) preso à URL base do ADN.
    Criado uma vez na subida e compartilhado entre as requisições.
    """

    base_url: str
    session: requests.Session
    timeout: int = 60
    headers: Dict[str, str] = field(default_factory=lambda: {"Accept": "application/json"})

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")

    def montar_url(self, caminho: str, params: Optional[Dict[str, Any]] = None) -> str:
        """URL completa, com query string, para diagnóstico."""
        req = requests.Request("GET", f"{self.base_url}{caminho}", params=params or {})
        return req.prepare().url or f"{self.base_url}{caminho}"

    def get(self, caminho: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.session.get(
            f"{self.base_url}{caminho}",
            params=params or {},
            headers=self.headers,
            timeout=self.timeout,
        )

    def close(self) -> None:
        self.session.close()


def construir_cliente_seguro(settings: Settings) -> ClienteSeguro:
    """
    Monta a sessão HTTPS com o PFX da configuração.
    Falha com ConfiguracaoError se URL, PFX ou senha estiverem errados.
    """
    if not settings.base_url:
        raise ConfiguracaoError("URL base do ADN (NFSE_BASE_URL) não informada.")
    if not settings.base_url.lower().startswith("https://"):
        raise ConfiguracaoError(f"NFSE_BASE_URL deve usar https: {settings.base_url!r}")

    pfx = carregar_pfx_base64(settings.pfx_base64, settings.pfx_password)

    session = requests.Session()
    session.verify = True
    session.mount("https://", Tls12Pkcs12Adapter(
        pkcs12_data=pfx,
        pkcs12_password=settings.pfx_password,
        ssl_protocol=ssl.PROTOCOL_TLS_CLIENT,
    ))

    return ClienteSeguro(
        base_url=settings.base_url,
        session=session,
        timeout=settings.timeout,
    )
