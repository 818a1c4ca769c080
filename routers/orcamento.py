import logging

from fastapi import APIRouter, HTTPException

from models.schemas import (
    CalculoResponse,
    OrcamentoInput,
    PrecificacaoInput,
    RevisaoInput,
)
from services.alocacao_service import impacto_por_item
from services.precificacao_service import MargemInvalidaError, precificar
from services.revisao_service import revisar
from services.totais_service import calcular_totais, total_impostos

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orcamento"])


def _entrada(orcamento: OrcamentoInput) -> tuple:
    """Plain dicts for the services; unset optional rates are left out (→ 0)."""
    itens = [i.model_dump(exclude_none=True) for i in orcamento.itens]
    fiscal = orcamento.fiscal.model_dump(exclude_none=True)
    return itens, fiscal


@router.post("/totais", response_model=CalculoResponse)
async def totais(orcamento: OrcamentoInput):
    try:
        itens, fiscal = _entrada(orcamento)
        resultado = calcular_totais(itens, fiscal)
        logger.info("Totais: %d itens, total=%.2f", len(itens), resultado["total"])
        return CalculoResponse(
            success=True,
            data={**resultado, "totalImpostos": total_impostos(resultado)},
        )
    except Exception as e:
        logger.exception("Falha ao calcular totais")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/impacto-itens", response_model=CalculoResponse)
async def impacto_itens(orcamento: OrcamentoInput):
    try:
        itens, fiscal = _entrada(orcamento)
        resultado = impacto_por_item(itens, fiscal)
        logger.info("Impacto por item: %d itens", len(itens))
        return CalculoResponse(success=True, data=resultado)
    except Exception as e:
        logger.exception("Falha ao calcular impacto por item")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/precificacao", response_model=CalculoResponse)
async def precificacao(req: PrecificacaoInput):
    """
    Considered cost, suggested price (markup or margin) and KPIs for the
    approved price, or the suggested one when none was approved.
    """
    try:
        itens, fiscal = _entrada(req)
        resultado = precificar(
            calcular_totais(itens, fiscal),
            req.pricing.model_dump(),
            preco_aprovado=req.precoAprovado,
        )
        logger.info(
            "Precificação %s: sugerido=%.2f", resultado["metodo"], resultado["precoSugerido"]
        )
        return CalculoResponse(success=True, data=resultado)
    except MargemInvalidaError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Falha na precificação")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/revisao", response_model=CalculoResponse)
async def revisao(req: RevisaoInput):
    """Totals, per-item list, tax table, reconciliation and KPIs in one call."""
    try:
        itens, fiscal = _entrada(req)
        resultado = revisar(
            itens, fiscal,
            flags=req.flags.model_dump(),
            preco_venda=req.precoVenda,
        )
        return CalculoResponse(success=True, data=resultado)
    except Exception as e:
        logger.exception("Falha na revisão do orçamento")
        raise HTTPException(status_code=500, detail=str(e))
