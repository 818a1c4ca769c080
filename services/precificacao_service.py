"""
Precificação: custo considerado, preço sugerido (markup ou margem) e KPIs de
rentabilidade para um preço de venda efetivo.

  Markup  → lucro como % do custo:  preço = custo × (1 + markup/100)
  Margem  → lucro como % do preço:  preço = custo ÷ (1 − margem/100)
"""

import logging
from typing import Mapping, Optional

from services.numeros import num
from services.totais_service import total_impostos

logger = logging.getLogger(__name__)

MARKUP = "MARKUP"
MARGIN = "MARGIN"


class MargemInvalidaError(ValueError):
    """Target margin of 100% or more has no finite, positive price."""


def custo_considerado(totais: Mapping, flags: Mapping) -> float:
    """
    base + adicionais, plus the taxes the caller chose to treat as cost.
    Never negative.
    """
    custo = num(totais.get("base")) + num(totais.get("adicionais"))
    if flags.get("icmsAsCost"):
        custo += (
            num(totais.get("icmsProprio")) + num(totais.get("icmsST"))
            + num(totais.get("fcp")) + num(totais.get("fcpST"))
        )
    if flags.get("pisCofinsAsCost"):
        custo += num(totais.get("pis")) + num(totais.get("cofins"))
    if flags.get("ipiAsCost"):
        custo += num(totais.get("ipi"))
    if flags.get("issAsCost"):
        custo += num(totais.get("iss"))
    return max(0.0, custo)


def preco_por_markup(custo: float, markup_pct: float) -> float:
    return num(custo) * (1 + num(markup_pct) / 100)


def preco_por_margem(custo: float, margem_pct: float) -> float:
    """
    Price whose margin over itself equals margem_pct.

    Raises:
        MargemInvalidaError: margem_pct >= 100 (division by zero or a
            negative price).
    """
    margem = num(margem_pct)
    if margem >= 100:
        raise MargemInvalidaError(f"Margem alvo deve ser menor que 100% (recebido {margem}%)")
    return num(custo) / (1 - margem / 100)


def preco_sugerido(custo: float, metodo: str, markup_pct: float = 0, margem_pct: float = 0) -> float:
    if metodo == MARKUP:
        return preco_por_markup(custo, markup_pct)
    return preco_por_margem(custo, margem_pct)


def kpis_por_preco(totais: Mapping, preco_venda: float, flags: Mapping) -> dict:
    """Realized profitability KPIs for a chosen sale price."""
    receita = max(0.0, num(preco_venda))
    custo = custo_considerado(totais, flags)

    lucro_bruto = max(0.0, receita - custo)
    margem_bruta = (lucro_bruto / receita) * 100 if receita > 0 else 0.0

    impostos = total_impostos(totais)

    # estimativa pós-tributos sem re-simular as bases
    lucro_pos_trib = max(0.0, receita - custo - impostos)
    margem_pos_trib = (lucro_pos_trib / receita) * 100 if receita > 0 else 0.0

    markup_sobre_custo = (receita / custo - 1) * 100 if custo > 0 else 0.0

    return {
        "receita":          receita,
        "custoConsiderado": custo,
        "lucroBruto":       lucro_bruto,
        "margemBrutaPct":   margem_bruta,
        "lucroPosTrib":     lucro_pos_trib,
        "margemPosTribPct": margem_pos_trib,
        "markupSobreCusto": markup_sobre_custo,
        "totalImpostos":    impostos,
    }


def precificar(totais: Mapping, pricing: Mapping, preco_aprovado: Optional[float] = None) -> dict:
    """
    Full pricing step: considered cost, suggested price and KPIs.

    Args:
        totais: output of calcular_totais.
        pricing: method (MARKUP/MARGIN), markupPct, marginPct and the four
            *AsCost flags.
        preco_aprovado: approved price; when None the KPIs use the suggested one.
    """
    metodo = pricing.get("method") or MARGIN
    custo = custo_considerado(totais, pricing)
    sugerido = preco_sugerido(
        custo, metodo,
        markup_pct=pricing.get("markupPct", 0),
        margem_pct=pricing.get("marginPct", 0),
    )
    preco_venda = sugerido if preco_aprovado is None else preco_aprovado

    resultado = {
        "metodo":          metodo,
        "costConsiderado": custo,
        "precoSugerido":   sugerido,
        "precoVenda":      preco_venda,
        **kpis_por_preco(totais, preco_venda, pricing),
    }
    logger.debug(
        "Precificação %s: custo=%.2f sugerido=%.2f venda=%.2f",
        metodo, custo, sugerido, num(preco_venda),
    )
    return resultado
