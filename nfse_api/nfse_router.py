# nfse_api/nfse_router.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

from nfse_service.core.cliente_seguro import ClienteSeguro
from nfse_service.core.decodificacao import extrair_documento
from nfse_service.core.distribuicao import consultar_distribuicao, validar_nsu
from nfse_service.core.errors import ConfiguracaoError

from .schemas import RESPOSTAS_ERRO, DocumentoNaoEncontradoResponse

router = APIRouter(
    prefix="/nfse",
    tags=["NFS-e Distribuição"],
)


# --------------------------- DEPENDÊNCIAS --------------------------- #

def nsu_validado(
    nsu: Optional[str] = Query(None, description="NSU (inteiro >= 0) a partir do qual consultar"),
) -> int:
    return validar_nsu(nsu)


def obter_cliente(request: Request) -> ClienteSeguro:
    """Cliente mTLS criado na subida da aplicação."""
    cliente = getattr(request.app.state, "cliente", None)
    if cliente is None:
        raise ConfiguracaoError("Cliente seguro do ADN não foi inicializado.")
    return cliente


# --------------------------- ENDPOINTS --------------------------- #

@router.get(
    "/distribuicao",
    summary="Consultar distribuição de DF-e por NSU (JSON do ADN)",
    responses=RESPOSTAS_ERRO,
)
def nfse_distribuicao(
    nsu: int = Depends(nsu_validado),
    cnpjConsulta: Optional[str] = Query(None, description="CNPJ a consultar (opcional)"),
    lote: bool = Query(True, description="Consulta em lote (padrão: true)"),
    cliente: ClienteSeguro = Depends(obter_cliente),
):
    """
    Repassa o envelope JSON do ADN sem alterações:
    StatusProcessamento, ultimoNSU e LoteDFe.
    """
    res = consultar_distribuicao(cliente, nsu, cnpj_consulta=cnpjConsulta, lote=lote)
    return JSONResponse(content=res.envelope, status_code=res.status_code)


@router.get(
    "/documento",
    summary="Baixar o XML da NFS-e para o NSU informado",
    responses={
        200: {"content": {"application/xml": {}}, "description": "XML da NFS-e"},
        404: {"model": DocumentoNaoEncontradoResponse, "description": "Nenhum XML no retorno do ADN"},
        **RESPOSTAS_ERRO,
    },
)
def nfse_documento(
    nsu: int = Depends(nsu_validado),
    cnpjConsulta: Optional[str] = Query(None, description="CNPJ a consultar (opcional)"),
    lote: bool = Query(True, description="Consulta em lote (padrão: true)"),
    cliente: ClienteSeguro = Depends(obter_cliente),
):
    """
    Consulta o ADN e devolve o XML do primeiro documento do lote
    com ArquivoXml preenchido (GZip+Base64, Base64 ou XML puro).

    Se não houver XML aproveitável, devolve 404 com o retorno do ADN
    para diagnóstico.
    """
    res = consultar_distribuicao(cliente, nsu, cnpj_consulta=cnpjConsulta, lote=lote)

    xml = extrair_documento(res.envelope)
    if xml is None:
        logger.warning(f"Nenhum XML válido no retorno do ADN para NSU {nsu}")
        corpo = DocumentoNaoEncontradoResponse(
            erro="XML da NFS-e não encontrado no retorno do ADN",
            nsu=nsu,
            retorno=res.envelope,
        )
        return JSONResponse(status_code=404, content=corpo.model_dump())

    return Response(
        content=xml,
        media_type="application/xml; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="nfse_{nsu}.xml"'},
    )
