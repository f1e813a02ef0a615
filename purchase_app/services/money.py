"""Money / rounding helpers.

Centralized so purchase storage and currency conversion use identical
rounding semantics. Everything stays in Decimal; floats never enter.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: object) -> Decimal:
    """Parse an upstream/DB value losslessly; raises ValueError on garbage."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() is the shortest round-tripping literal, so 0.1 -> Decimal("0.1")
        value = repr(value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"not a decimal value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"not a finite decimal value: {value!r}")
    return result
