# nfse_service/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfiguracaoError

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class Settings:
    """
    Configuração do gateway, montada UMA vez na inicialização.

    - base_url: URL base do ADN (ex.: https://adn.nfse.gov.br/contribuintes)
    - pfx_base64: certificado A1 (.pfx / PKCS#12) em Base64
    - pfx_password: senha do PFX
    - timeout: timeout da chamada ao ADN, em segundos
    """
    base_url: str
    pfx_base64: str
    pfx_password: str
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    timeout: int = DEFAULT_TIMEOUT
    log_level: str = "INFO"


def _ler_inteiro(nome: str, padrao: int) -> int:
    bruto = os.getenv(nome)
    if bruto is None or not bruto.strip():
        return padrao
    try:
        return int(bruto.strip())
    except ValueError:
        raise ConfiguracaoError(f"Variável {nome} deve ser um inteiro, recebido: {bruto!r}")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Lê o .env (se existir) e as variáveis de ambiente.

    A validação do certificado e da URL fica para o construtor do cliente
    seguro, que falha na subida da aplicação.
    """
    load_dotenv(env_file)

    return Settings(
        base_url=os.getenv("NFSE_BASE_URL", "").strip(),
        pfx_base64=os.getenv("NFSE_PFX_BASE64", "").strip(),
        pfx_password=os.getenv("NFSE_PFX_PASSWORD", ""),
        port=_ler_inteiro("PORT", DEFAULT_PORT),
        host=os.getenv("HOST", DEFAULT_HOST),
        timeout=_ler_inteiro("NFSE_TIMEOUT", DEFAULT_TIMEOUT),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
