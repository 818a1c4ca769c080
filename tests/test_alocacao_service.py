from __future__ import annotations

import pytest

from services.alocacao_service import impacto_por_item


def build_items() -> list[dict]:
    return [
        {"id": "a", "nome": "Perfil", "un": "M", "qtd": 2, "preco": 100, "categoria": "materiais"},
        {"id": "b", "nome": "", "un": "UN", "qtd": 1, "preco": 800, "categoria": "maquinas"},
    ]


def test_discount_is_allocated_by_share() -> None:
    resultado = impacto_por_item(build_items(), {"descontoPct": 10, "icmsAliq": 18})
    a, b = resultado["list"]

    assert a["share"] == pytest.approx(0.2)
    assert b["share"] == pytest.approx(0.8)
    assert a["desconto"] == pytest.approx(20)
    assert b["desconto"] == pytest.approx(80)
    assert a["base"] == pytest.approx(180)
    assert b["base"] == pytest.approx(720)
    assert a["icms"] == pytest.approx(32.4)
    assert b["icms"] == pytest.approx(129.6)
    assert resultado["totals"]["icmsProprio"] == pytest.approx(162)


def test_items_echo_identity_and_default_name() -> None:
    a, b = impacto_por_item(build_items(), {})["list"]
    assert (a["id"], a["nome"], a["categoria"]) == ("a", "Perfil", "materiais")
    assert b["nome"] == "Item"


def test_shares_sum_to_one() -> None:
    itens = [
        {"id": str(n), "qtd": q, "preco": p}
        for n, (q, p) in enumerate([(3, 33.33), (7, 0.1), (1, 1234.56), (0.5, 9.99)])
    ]
    lista = impacto_por_item(itens, {})["list"]
    assert sum(i["share"] for i in lista) == pytest.approx(1)


def test_zero_subtotal_gives_zero_shares() -> None:
    itens = [{"id": "a", "qtd": 0, "preco": 100}, {"id": "b", "qtd": 3, "preco": 0}]
    resultado = impacto_por_item(itens, {"frete": 40, "icmsAliq": 18})
    assert all(i["share"] == 0 for i in resultado["list"])
    assert resultado["totals"]["total"] == pytest.approx(resultado["totals"]["adicionais"])


def test_items_never_receive_surcharges_or_difal() -> None:
    fiscal = {
        "tipoOperacao": "SERVICO", "issAliq": 5,
        "frete": 60, "seguro": 40,
        "compoeBaseICMS": True, "compoeBasePisCofins": True, "compoeBaseIPI": True,
        "difalAliqInterna": 18, "difalAliqInter": 12, "difalPartilhaDestinoPct": 100,
    }
    resultado = impacto_por_item([{"id": "a", "qtd": 1, "preco": 1000}], fiscal)
    totais = resultado["totals"]
    soma_itens = sum(i["total"] for i in resultado["list"])

    assert totais["difal"] == pytest.approx(66)
    assert totais["total"] - soma_itens == pytest.approx(totais["adicionais"] + totais["difal"])


def test_divergence_without_compose_flags() -> None:
    fiscal = {"frete": 100, "icmsAliq": 18, "ipiAliq": 10}
    resultado = impacto_por_item(build_items(), fiscal)
    soma_itens = sum(i["total"] for i in resultado["list"])
    assert resultado["totals"]["total"] - soma_itens == pytest.approx(100)


def test_item_federal_taxes_ignore_compose_flags() -> None:
    fiscal = {"frete": 100, "compoeBaseIPI": True, "compoeBasePisCofins": True,
              "ipiAliq": 10, "pisAliq": 1, "cofinsAliq": 3}
    resultado = impacto_por_item([{"id": "a", "qtd": 1, "preco": 1000}], fiscal)
    (linha,) = resultado["list"]
    assert linha["ipi"] == pytest.approx(100)
    assert linha["pis"] == pytest.approx(10)
    assert linha["cofins"] == pytest.approx(30)
    assert resultado["totals"]["ipi"] == pytest.approx(110)
    assert resultado["totals"]["pis"] == pytest.approx(11)


def test_goods_items_have_no_iss() -> None:
    lista = impacto_por_item(build_items(), {"tipoOperacao": "MERCADORIA", "issAliq": 5})["list"]
    assert all(i["iss"] == 0 for i in lista)


def test_item_st_uses_reduced_base_and_floors_at_zero() -> None:
    fiscal = {"icmsAliq": 18, "icmsRedBasePct": 50, "icmsStMva": 40, "icmsStAliq": 18, "fcpStAliq": 2}
    (linha,) = impacto_por_item([{"id": "a", "qtd": 1, "preco": 1000}], fiscal)["list"]
    assert linha["icms"] == pytest.approx(90)
    assert linha["icmsST"] == pytest.approx(36)   # 700 * 18% - 90
    assert linha["fcpST"] == pytest.approx(14)
    assert linha["total"] == pytest.approx(1000 + 90 + 36 + 14)

    (sem_st,) = impacto_por_item(
        [{"id": "a", "qtd": 1, "preco": 1000}], {"icmsAliq": 18, "icmsStAliq": 4}
    )["list"]
    assert sem_st["icmsST"] == 0
