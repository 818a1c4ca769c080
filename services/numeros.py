"""
Coerção numérica usada em todos os pontos de leitura do motor.

Campos ausentes, nulos ou não numéricos valem 0, nunca erro.
"""

import math
from typing import Any


def num(valor: Any) -> float:
    """
    Converts any value to a finite float; anything else becomes 0.

    Strings follow Python's float() rules: "1_000" reads as 1000 and hex
    literals such as "0x10" read as 0.
    """
    try:
        n = float(valor)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return n if math.isfinite(n) else 0.0


to_finite_number = num


def aliquota(*valores: Any) -> float:
    """
    Returns the first value that is already a finite number (aliases fallback,
    e.g. icmsAliq → icmsPct). Strings and None are skipped.
    """
    for v in valores:
        if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v):
            return float(v)
    return 0.0
