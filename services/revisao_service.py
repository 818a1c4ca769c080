"""
Revisão do orçamento: tabela de tributos, conciliação itens × totais e KPIs
do preço efetivo, num único snapshot.
"""

import logging
from typing import Mapping, Optional, Sequence

from services.alocacao_service import impacto_por_item
from services.numeros import num
from services.precificacao_service import kpis_por_preco
from services.totais_service import aliquotas, total_impostos

logger = logging.getLogger(__name__)

TOLERANCIA = 0.01

# Sem nenhum imposto tratado como custo
FLAGS_PADRAO = {
    "icmsAsCost": False,
    "pisCofinsAsCost": False,
    "ipiAsCost": False,
    "issAsCost": False,
}

_IMPOSTOS_ITEM = ("iss", "icms", "icmsST", "fcp", "fcpST", "ipi", "pis", "cofins")


def _pct(v: float) -> str:
    return f"{v:.2f}%"


def detalhamento_impostos(totais: Mapping, fiscal: Mapping) -> list:
    """
    One row per tax with rate, base and share of total taxes.

    Rows with no value and no rate are dropped; sorted by value, largest first.
    """
    a = aliquotas(fiscal)
    base_icms_prop = num(totais.get("baseICMSProp")) or num(totais.get("baseICMS"))
    base_st = base_icms_prop * (1 + a["icmsStMva"] / 100)
    mva = f"MVA {_pct(a['icmsStMva'])}" if a["icmsStMva"] else ""

    difal_extra = ""
    if a["difalAliqInterna"] or a["difalAliqInter"] or a["difalPartilhaDestinoPct"]:
        difal_extra = (
            f"int {_pct(a['difalAliqInterna'])} − inter {_pct(a['difalAliqInter'])}"
            f" • dest {_pct(a['difalPartilhaDestinoPct'])}"
        )

    linhas = [
        ("ICMS",    "icmsProprio", a["icmsAliq"],   "ICMS (c/ redução)", base_icms_prop, ""),
        ("ICMS-ST", "icmsST",      a["icmsStAliq"], "Base ST",           base_st,        mva),
        ("FCP",     "fcp",         a["fcpAliq"],    "ICMS (c/ redução)", base_icms_prop, ""),
        ("FCP-ST",  "fcpST",       a["fcpStAliq"],  "Base ST",           base_st,        ""),
        ("IPI",     "ipi",         a["ipiAliq"],    "Base IPI",          num(totais.get("baseIPI")), ""),
        ("PIS",     "pis",         a["pisAliq"],    "Base PIS/COFINS",   num(totais.get("basePISCOF")), ""),
        ("COFINS",  "cofins",      a["cofinsAliq"], "Base PIS/COFINS",   num(totais.get("basePISCOF")), ""),
        ("ISS",     "iss",         a["issAliq"],    "Base Serviços",     num(totais.get("base")),
         fiscal.get("municipioIncidencia") or ""),
        ("DIFAL",   "difal",       max(0.0, a["difalAliqInterna"] - a["difalAliqInter"]),
         "ICMS (c/ redução)", base_icms_prop, difal_extra),
    ]

    impostos = total_impostos(totais)
    rows = []
    for imposto, campo, aliq, base_label, base_valor, extra in linhas:
        valor = num(totais.get(campo))
        if valor <= 0 and aliq <= 0:
            continue
        rows.append({
            "imposto":         imposto,
            "valor":           valor,
            "aliquota":        aliq,
            "baseLabel":       base_label,
            "baseValor":       base_valor,
            "extra":           extra,
            "participacaoPct": (valor / impostos) * 100 if impostos > 0 else 0.0,
        })

    rows.sort(key=lambda r: r["valor"], reverse=True)
    return rows


def conciliar(lista: Sequence[Mapping], totais: Mapping) -> dict:
    """
    Compares per-item sums with the quote totals. DIFAL is never allocated to
    items, so it is added back before comparing taxes; the gap in grand totals
    (adicionais + difal) is reported as-is.
    """
    soma_impostos_itens = sum(num(it.get(c)) for it in lista for c in _IMPOSTOS_ITEM)
    impostos = total_impostos(totais)
    diferenca_impostos = abs((soma_impostos_itens + num(totais.get("difal"))) - impostos)
    soma_total_itens = sum(num(it.get("total")) for it in lista)

    return {
        "somaImpostosItens": soma_impostos_itens,
        "totalImpostos":     impostos,
        "diferencaImpostos": diferenca_impostos,
        "somaTotalItens":    soma_total_itens,
        "diferencaTotal":    num(totais.get("total")) - soma_total_itens,
        "consistente":       diferenca_impostos <= TOLERANCIA,
    }


def revisar(
    itens: Sequence[Mapping],
    fiscal: Mapping,
    flags: Optional[Mapping] = None,
    preco_venda: Optional[float] = None,
) -> dict:
    """Review snapshot; KPIs use preco_venda, falling back to fiscal["precoVenda"]."""
    impacto = impacto_por_item(itens, fiscal)
    lista, totais = impacto["list"], impacto["totals"]
    preco = num(fiscal.get("precoVenda")) if preco_venda is None else num(preco_venda)

    conciliacao = conciliar(lista, totais)
    if not conciliacao["consistente"]:
        logger.info(
            "Diferença entre impostos totais e soma por item: %.6f",
            conciliacao["diferencaImpostos"],
        )

    return {
        "totals":      {**totais, "totalImpostos": total_impostos(totais)},
        "list":        lista,
        "impostos":    detalhamento_impostos(totais, fiscal),
        "conciliacao": conciliacao,
        "kpis":        kpis_por_preco(totais, preco, flags or FLAGS_PADRAO),
    }
