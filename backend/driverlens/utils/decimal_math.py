from decimal import Decimal, ROUND_HALF_UP, localcontext
import math


MONEY_QUANT = Decimal("0.01")
MIN_MONEY_PRECISION = 28


def money(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot convert non-finite amount {value!r} to money.")
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"Cannot convert non-finite amount {value!r} to money.")
    with localcontext() as ctx:
        # Quantizing to cents needs every integer digit plus two decimals.
        ctx.prec = max(MIN_MONEY_PRECISION, amount.adjusted() + 3)
        return amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def clamp_unit(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return min(1.0, max(0.0, value))
