# conftest.py
from __future__ import annotations

import base64
import datetime as _dt
import gzip
import json
from typing import Any

import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import BestAvailableEncryption, pkcs12
from cryptography.x509.oid import NameOID
from fastapi.testclient import TestClient

from nfse_api.main import create_app
from nfse_service.core.cliente_seguro import ClienteSeguro

BASE_URL = "https://adn.teste.local/contribuintes"
PFX_SENHA = "12345678"


def gzip_base64(texto: str) -> str:
    return base64.b64encode(gzip.compress(texto.encode("utf-8"))).decode("ascii")


def resposta_json(corpo: Any, status_code: int = 200) -> requests.Response:
    """requests.Response real, como se viesse do ADN."""
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = json.dumps(corpo).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    resp.encoding = "utf-8"
    return resp


def resposta_texto(texto: str, status_code: int = 200) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = texto.encode("utf-8")
    resp.headers["Content-Type"] = "text/html"
    resp.encoding = "utf-8"
    return resp


@pytest.fixture(scope="session")
def pfx_base64() -> str:
    """Certificado A1 autoassinado, gerado só para os testes."""
    key = ec.generate_private_key(ec.SECP256R1())
    nome = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "EMPRESA TESTE LTDA:12345678000195")])
    agora = _dt.datetime.now(_dt.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(nome)
        .issuer_name(nome)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(agora - _dt.timedelta(days=1))
        .not_valid_after(agora + _dt.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    data = pkcs12.serialize_key_and_certificates(
        b"teste",
        key,
        cert,
        None,
        BestAvailableEncryption(PFX_SENHA.encode("utf-8")),
    )
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def sessao(mocker):
    """Sessão HTTP falsa no lugar do ADN."""
    return mocker.Mock(spec=requests.Session)


@pytest.fixture
def cliente(sessao) -> ClienteSeguro:
    return ClienteSeguro(base_url=BASE_URL, session=sessao, timeout=60)


@pytest.fixture
def api(cliente):
    with TestClient(create_app(cliente=cliente)) as tc:
        yield tc
