# test_cliente_seguro.py
import base64
import ssl

import pytest

from conftest import BASE_URL, PFX_SENHA
from nfse_service.core.cliente_seguro import (
    ClienteSeguro,
    Tls12Pkcs12Adapter,
    carregar_pfx_base64,
    construir_cliente_seguro,
)
from nfse_service.core.config import Settings
from nfse_service.core.errors import ConfiguracaoError


def _settings(pfx_base64, **kwargs):
    valores = dict(base_url=BASE_URL, pfx_base64=pfx_base64, pfx_password=PFX_SENHA)
    valores.update(kwargs)
    return Settings(**valores)


def test_carregar_pfx_valido(pfx_base64):
    data = carregar_pfx_base64(pfx_base64, PFX_SENHA)
    assert data == base64.b64decode(pfx_base64)


def test_carregar_pfx_com_quebras_de_linha(pfx_base64):
    quebrado = "\n".join(pfx_base64[i:i + 64] for i in range(0, len(pfx_base64), 64))
    assert carregar_pfx_base64(quebrado, PFX_SENHA) == base64.b64decode(pfx_base64)


@pytest.mark.parametrize("pfx, senha", [("", PFX_SENHA), (None, PFX_SENHA)])
def test_pfx_ausente(pfx, senha):
    with pytest.raises(ConfiguracaoError, match="NFSE_PFX_BASE64"):
        carregar_pfx_base64(pfx, senha)


def test_senha_ausente(pfx_base64):
    with pytest.raises(ConfiguracaoError, match="NFSE_PFX_PASSWORD"):
        carregar_pfx_base64(pfx_base64, "")


def test_pfx_base64_invalido():
    with pytest.raises(ConfiguracaoError, match="Base64"):
        carregar_pfx_base64("isto-nao-e-base64!!", PFX_SENHA)


def test_pfx_corrompido():
    with pytest.raises(ConfiguracaoError):
        carregar_pfx_base64(base64.b64encode(b"nao sou um pkcs12").decode(), PFX_SENHA)


def test_senha_incorreta(pfx_base64):
    with pytest.raises(ConfiguracaoError, match="senha incorreta"):
        carregar_pfx_base64(pfx_base64, "senha-errada")


def test_construir_cliente(pfx_base64):
    cliente = construir_cliente_seguro(_settings(pfx_base64, base_url=BASE_URL + "/"))
    try:
        assert cliente.base_url == BASE_URL
        assert cliente.timeout == 60
        assert cliente.session.verify is True

        adapter = cliente.session.get_adapter(BASE_URL)
        assert isinstance(adapter, Tls12Pkcs12Adapter)
        assert adapter.ssl_context.minimum_version == ssl.TLSVersion.TLSv1_2
        assert adapter.ssl_context.verify_mode == ssl.CERT_REQUIRED
    finally:
        cliente.close()


def test_construir_cliente_sem_url(pfx_base64):
    with pytest.raises(ConfiguracaoError, match="NFSE_BASE_URL"):
        construir_cliente_seguro(_settings(pfx_base64, base_url=""))


def test_construir_cliente_exige_https(pfx_base64):
    with pytest.raises(ConfiguracaoError, match="https"):
        construir_cliente_seguro(_settings(pfx_base64, base_url="http://adn.teste.local"))


def test_construir_cliente_senha_errada(pfx_base64):
    with pytest.raises(ConfiguracaoError):
        construir_cliente_seguro(_settings(pfx_base64, pfx_password="outra"))


def test_montar_url(sessao):
    cliente = ClienteSeguro(base_url=BASE_URL, session=sessao)
    url = cliente.montar_url("/DFe/10", {"cnpjConsulta": "123", "lote": "true"})
    assert url == f"{BASE_URL}/DFe/10?cnpjConsulta=123&lote=true"
