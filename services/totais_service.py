"""
Totais do orçamento: subtotal, descontos, bases e valor de cada tributo.

Ordem de cálculo (cada base depende das anteriores):
  subtotal → descontos → base dos produtos → adicionais (frete/seguro/outros)
  → bases por tributo (flags de composição) → redução de base do ICMS
  → ICMS próprio → ICMS-ST (com crédito do próprio) → FCP/FCP-ST
  → IPI → PIS/COFINS → ISS (só serviço) → DIFAL (partilha origem/destino)

Nenhuma validação acontece aqui: valores ausentes ou inválidos valem 0 e
descontos/adicionais negativos passam pela aritmética como vieram.
"""

import logging
from typing import Mapping, Sequence

from services.numeros import aliquota, num

logger = logging.getLogger(__name__)

SERVICO = "SERVICO"

# Tributos que compõem o total de impostos do orçamento
CAMPOS_IMPOSTOS = (
    "iss", "icmsProprio", "icmsST", "fcp", "fcpST", "ipi", "pis", "cofins", "difal",
)


def aliquotas(fiscal: Mapping) -> dict:
    """Resolves every rate field (percent, 0-100), honoring legacy *Pct aliases."""
    f = fiscal
    return {
        "icmsAliq":       aliquota(f.get("icmsAliq"), f.get("icmsPct")),
        "icmsRedBasePct": aliquota(f.get("icmsRedBasePct")),
        "icmsStMva":      aliquota(f.get("icmsStMva")),
        "icmsStAliq":     aliquota(f.get("icmsStAliq")),
        "fcpAliq":        aliquota(f.get("fcpAliq")),
        "fcpStAliq":      aliquota(f.get("fcpStAliq")),
        "ipiAliq":        aliquota(f.get("ipiAliq")),
        "pisAliq":        aliquota(f.get("pisAliq"), f.get("pisPct")),
        "cofinsAliq":     aliquota(f.get("cofinsAliq"), f.get("cofinsPct")),
        "issAliq":        aliquota(f.get("issAliq"), f.get("issPct")),
        "difalAliqInter":   aliquota(f.get("difalAliqInter")),
        "difalAliqInterna": aliquota(f.get("difalAliqInterna")),
        "difalPartilhaDestinoPct": min(100.0, max(0.0, aliquota(f.get("difalPartilhaDestinoPct")))),
    }


def valor_bruto(item: Mapping) -> float:
    return num(item.get("qtd")) * num(item.get("preco"))


def total_impostos(totais: Mapping) -> float:
    """Sum of every tax amount in a totals snapshot (missing keys count as 0)."""
    return sum(num(totais.get(campo)) for campo in CAMPOS_IMPOSTOS)


def calcular_totais(itens: Sequence[Mapping], fiscal: Mapping) -> dict:
    """
    Computes the quote-level totals.

    Args:
        itens: line items (keys qtd, preco; others ignored here).
        fiscal: fiscal parameters; every numeric field is optional.

    Returns:
        Totals dict (subtotal, descontos, bases, each tax, total).
    """
    subtotal = sum(valor_bruto(i) for i in itens)

    # ── Descontos ─────────────────────────────────────────────────────────
    desconto1 = subtotal * (num(fiscal.get("descontoPct")) / 100)
    desconto2 = num(fiscal.get("descontoValor"))
    desconto_total = min(subtotal, desconto1 + desconto2)
    base_produto = max(0.0, subtotal - desconto_total)

    # ── Adicionais e bases por tributo ────────────────────────────────────
    adicionais = (
        num(fiscal.get("frete"))
        + num(fiscal.get("seguro"))
        + num(fiscal.get("outrosCustos"))
    )
    base_icms   = base_produto + (adicionais if fiscal.get("compoeBaseICMS") else 0)
    base_ipi    = base_produto + (adicionais if fiscal.get("compoeBaseIPI") else 0)
    base_piscof = base_produto + (adicionais if fiscal.get("compoeBasePisCofins") else 0)

    a = aliquotas(fiscal)

    # ── ICMS / ICMS-ST / FCP ──────────────────────────────────────────────
    base_icms_prop = max(0.0, base_icms * (1 - a["icmsRedBasePct"] / 100))
    icms_proprio = base_icms_prop * (a["icmsAliq"] / 100)

    base_st = base_icms_prop * (1 + a["icmsStMva"] / 100)
    icms_st_bruto = base_st * (a["icmsStAliq"] / 100)
    icms_st = max(0.0, icms_st_bruto - icms_proprio)

    fcp    = base_icms_prop * (a["fcpAliq"] / 100)
    fcp_st = base_st * (a["fcpStAliq"] / 100)

    # ── Federais ──────────────────────────────────────────────────────────
    ipi    = base_ipi * (a["ipiAliq"] / 100)
    pis    = base_piscof * (a["pisAliq"] / 100)
    cofins = base_piscof * (a["cofinsAliq"] / 100)

    # ISS: sempre sobre a base dos produtos, sem adicionais
    iss = base_produto * (a["issAliq"] / 100) if fiscal.get("tipoOperacao") == SERVICO else 0.0

    # ── DIFAL ─────────────────────────────────────────────────────────────
    difal = difal_destino = difal_origem = 0.0
    if a["difalAliqInterna"] > 0 and a["difalAliqInter"] > 0:
        aliq_efetiva = max(0.0, a["difalAliqInterna"] - a["difalAliqInter"])
        difal = base_icms_prop * (aliq_efetiva / 100)
        difal_destino = difal * (a["difalPartilhaDestinoPct"] / 100)
        difal_origem = difal - difal_destino

    totais = {
        "subtotal":      subtotal,
        "desconto1":     desconto1,
        "desconto2":     desconto2,
        "descontoTotal": desconto_total,
        "base":          base_produto,
        "adicionais":    adicionais,
        "baseICMS":      base_icms,
        "baseICMSProp":  base_icms_prop,
        "basePISCOF":    base_piscof,
        "baseIPI":       base_ipi,
        "icmsProprio":   icms_proprio,
        "icmsST":        icms_st,
        "fcp":           fcp,
        "fcpST":         fcp_st,
        "ipi":           ipi,
        "pis":           pis,
        "cofins":        cofins,
        "iss":           iss,
        "difal":         difal,
        "difalDestino":  difal_destino,
        "difalOrigem":   difal_origem,
    }
    totais["total"] = base_produto + adicionais + total_impostos(totais)

    logger.debug(
        "Totais calculados: %d itens, subtotal=%.2f, total=%.2f",
        len(itens), subtotal, totais["total"],
    )
    return totais
