# nfse_service/core/decodificacao.py
from __future__ import annotations

import base64
import binascii
import gzip
import zlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

CAMPO_LOTE = "LoteDFe"
CAMPO_ARQUIVO = "ArquivoXml"


@dataclass(frozen=True)
class ResultadoDecodificacao:
    """
    Resultado de UMA estratégia de decodificação do ArquivoXml.

    - estrategia: nome da estratégia aplicada
    - xml: XML decodificado, ou None se a estratégia não serviu
    - erro: motivo da falha (None em caso de sucesso)
    """
    estrategia: str
    xml: Optional[str] = None
    erro: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.xml is not None


BOM = "\ufeff"


def _parece_xml(texto: str) -> bool:
    return texto.lstrip().lstrip(BOM).lstrip().startswith("<")


def _b64decode(valor: str) -> bytes:
    compacto = "".join(valor.split())
    # aceita Base64 sem o "=" final
    compacto += "=" * (-len(compacto) % 4)
    return base64.b64decode(compacto, validate=True)


def tentar_gzip_base64(valor: str) -> ResultadoDecodificacao:
    """Base64 -> GZip -> UTF-8. Formato padrão do ADN."""
    nome = "gzip_base64"
    try:
        bruto = _b64decode(valor)
    except (binascii.Error, ValueError) as exc:
        return ResultadoDecodificacao(nome, erro=f"Base64 inválido: {exc}")

    try:
        texto = gzip.decompress(bruto).decode("utf-8-sig")
    except (OSError, EOFError, zlib.error) as exc:
        return ResultadoDecodificacao(nome, erro=f"Conteúdo não é GZip: {exc}")
    except UnicodeDecodeError as exc:
        return ResultadoDecodificacao(nome, erro=f"Conteúdo não é UTF-8: {exc}")

    if not _parece_xml(texto):
        return ResultadoDecodificacao(nome, erro="Conteúdo descompactado não é XML")
    return ResultadoDecodificacao(nome, xml=texto)


def tentar_base64(valor: str) -> ResultadoDecodificacao:
    """Base64 -> UTF-8, sem compactação."""
    nome = "base64"
    try:
        texto = _b64decode(valor).decode("utf-8-sig")
    except (binascii.Error, ValueError) as exc:
        # UnicodeDecodeError também é ValueError
        return ResultadoDecodificacao(nome, erro=f"Base64/UTF-8 inválido: {exc}")

    if not _parece_xml(texto):
        return ResultadoDecodificacao(nome, erro="Conteúdo decodificado não é XML")
    return ResultadoDecodificacao(nome, xml=texto)


def tentar_xml_bruto(valor: str) -> ResultadoDecodificacao:
    """O campo já veio como XML em texto puro."""
    if _parece_xml(valor):
        return ResultadoDecodificacao("xml_bruto", xml=valor)
    return ResultadoDecodificacao("xml_bruto", erro="Valor não começa com '<'")


# Ordem importa: gzip+base64, base64, XML puro
ESTRATEGIAS: List[Callable[[str], ResultadoDecodificacao]] = [
    tentar_gzip_base64,
    tentar_base64,
    tentar_xml_bruto,
]


def decodificar_tentativas(valor: Optional[str]) -> List[ResultadoDecodificacao]:
    """
    Aplica as estratégias em ordem e devolve todas as tentativas feitas,
    parando na primeira que retornar XML.
    """
    if not valor:
        return []

    tentativas: List[ResultadoDecodificacao] = []
    for estrategia in ESTRATEGIAS:
        resultado = estrategia(valor)
        tentativas.append(resultado)
        if resultado.ok:
            break
    return tentativas


def decodificar_arquivo_xml(valor: Optional[str]) -> Optional[str]:
    """
    Decodifica o campo ArquivoXml. Retorna o XML ou None
    quando nenhuma estratégia produziu XML.
    """
    tentativas = decodificar_tentativas(valor)
    if tentativas and tentativas[-1].ok:
        return tentativas[-1].xml
    return None


def selecionar_registro(envelope: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Primeiro registro de LoteDFe com ArquivoXml preenchido.
    Não altera o envelope.
    """
    lote = envelope.get(CAMPO_LOTE) if isinstance(envelope, Mapping) else None
    if not isinstance(lote, list):
        return None

    for registro in lote:
        if not isinstance(registro, dict):
            continue
        arquivo = registro.get(CAMPO_ARQUIVO)
        if isinstance(arquivo, str) and arquivo.strip():
            return registro
    return None


def extrair_documento(envelope: Mapping[str, Any]) -> Optional[str]:
    """
    Seleciona o registro candidato e decodifica seu ArquivoXml.
    Passada única: se o candidato falhar, os demais não são tentados.
    """
    registro = selecionar_registro(envelope)
    if registro is None:
        return None
    return decodificar_arquivo_xml(registro[CAMPO_ARQUIVO])
