from .cliente_seguro import ClienteSeguro, construir_cliente_seguro, carregar_pfx_base64
from .config import Settings, load_settings
from .decodificacao import decodificar_arquivo_xml, extrair_documento, selecionar_registro
from .distribuicao import DistribuicaoResult, consultar_distribuicao, validar_nsu
from .errors import (
    ConfiguracaoError,
    NFSeGatewayError,
    ParametroInvalidoError,
    UpstreamError,
)

__all__ = [
    "ClienteSeguro",
    "construir_cliente_seguro",
    "carregar_pfx_base64",
    "Settings",
    "load_settings",
    "decodificar_arquivo_xml",
    "extrair_documento",
    "selecionar_registro",
    "DistribuicaoResult",
    "consultar_distribuicao",
    "validar_nsu",
    "ConfiguracaoError",
    "NFSeGatewayError",
    "ParametroInvalidoError",
    "UpstreamError",
]
