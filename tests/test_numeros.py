from __future__ import annotations

import math

import pytest

from models.schemas import ParametrosFiscais
from services.numeros import aliquota, num


@pytest.mark.parametrize(
    "valor, esperado",
    [(None, 0), ("", 0), ("abc", 0), (math.nan, 0), (math.inf, 0), (-math.inf, 0),
     ("12.5", 12.5), (7, 7), (True, 1), (-3.2, -3.2)],
)
def test_num_coerces_to_finite(valor, esperado) -> None:
    assert num(valor) == esperado


def test_aliquota_returns_first_finite_number() -> None:
    assert aliquota(None, 18) == 18
    assert aliquota(math.nan, "12", 4) == 4
    assert aliquota(12, 18) == 12
    assert aliquota() == 0
    assert aliquota(None, None) == 0


def test_situation_code_follows_regime() -> None:
    simples = ParametrosFiscais(regime="SN", cst="00", csosn="102")
    presumido = ParametrosFiscais(regime="LP", cst="00", csosn="102")
    assert simples.codigo_situacao_icms == "102"
    assert presumido.codigo_situacao_icms == "00"


def test_num_uses_python_float_parsing() -> None:
    assert num("1_000") == 1000
    assert num("0x10") == 0
