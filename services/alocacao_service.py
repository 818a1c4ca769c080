"""
Impacto por item: rateia o desconto do orçamento e recalcula cada tributo
sobre a base própria de cada item, com as mesmas alíquotas dos totais.

Os tributos NÃO são divididos a partir dos totais; são recalculados por
item. Frete/seguro/outros e DIFAL não são alocados a itens, e IPI/PIS/COFINS
por item usam apenas a base do item mesmo com as flags de composição ativas.
Por isso Σ total dos itens não fecha com totais["total"]: faltam os adicionais,
o DIFAL e os tributos que incidem sobre os adicionais.
"""

import logging
from typing import Mapping, Sequence

from services.numeros import num
from services.totais_service import SERVICO, aliquotas, calcular_totais, valor_bruto

logger = logging.getLogger(__name__)


def _impacto_item(item: Mapping, totais: Mapping, a: Mapping, servico: bool) -> dict:
    bruto = valor_bruto(item)
    subtotal = totais["subtotal"]
    share = bruto / subtotal if subtotal > 0 else 0.0

    desconto = share * totais["descontoTotal"]
    base = max(0.0, bruto - desconto)

    base_icms = base * (1 - a["icmsRedBasePct"] / 100)
    icms = base_icms * (a["icmsAliq"] / 100)

    base_st = base_icms * (1 + a["icmsStMva"] / 100)
    icms_st = max(0.0, base_st * (a["icmsStAliq"] / 100) - icms)
    fcp    = base_icms * (a["fcpAliq"] / 100)
    fcp_st = base_st * (a["fcpStAliq"] / 100)

    ipi    = base * (a["ipiAliq"] / 100)
    pis    = base * (a["pisAliq"] / 100)
    cofins = base * (a["cofinsAliq"] / 100)
    iss    = base * (a["issAliq"] / 100) if servico else 0.0

    return {
        "id":        item.get("id"),
        "nome":      item.get("nome") or "Item",
        "categoria": item.get("categoria"),
        "bruto":     bruto,
        "share":     share,
        "desconto":  desconto,
        "base":      base,
        "icms":      icms,
        "icmsST":    icms_st,
        "fcp":       fcp,
        "fcpST":     fcp_st,
        "ipi":       ipi,
        "pis":       pis,
        "cofins":    cofins,
        "iss":       iss,
        "total":     base + icms + icms_st + fcp + fcp_st + ipi + pis + cofins + iss,
    }


def impacto_por_item(itens: Sequence[Mapping], fiscal: Mapping) -> dict:
    """
    Per-item breakdown alongside the quote totals.

    Returns:
        {"list": [ItemImpact, ...], "totals": Totals}
    """
    totais = calcular_totais(itens, fiscal)
    a = aliquotas(fiscal)
    servico = fiscal.get("tipoOperacao") == SERVICO

    lista = [_impacto_item(item, totais, a, servico) for item in itens]

    logger.debug(
        "Impacto por item: %d itens, soma=%.2f, total=%.2f",
        len(lista), sum(num(i["total"]) for i in lista), totais["total"],
    )
    return {"list": lista, "totals": totais}
