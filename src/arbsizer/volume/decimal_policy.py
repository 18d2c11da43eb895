"""Scale and rounding rules shared by every volume computation.

All values are Decimal. Final values are rounded half-to-even so repeated
trades do not accumulate a directional bias. Intermediate quotients are kept
at a wider scale than any leg's native scale and only rounded to the leg's
scale at the very end.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_EVEN, Decimal, localcontext

# Guard digits added to the widest leg scale for intermediate arithmetic.
INTERMEDIATE_SCALE_MARGIN = 2

# Fractional digits of quote-currency estimates (profit).
CURRENCY_SCALE = 2

# Significant digits used while dividing, before rounding to a scale.
_DIVISION_PRECISION = 50


def quantum(scale: int) -> Decimal:
    """Return the smallest increment for a scale, e.g. 3 -> Decimal('0.001')."""
    return Decimal(1).scaleb(-scale)


def intermediate_scale(max_leg_scale: int) -> int:
    """Scale used for all intermediate arithmetic between two legs."""
    return max_leg_scale + INTERMEDIATE_SCALE_MARGIN


def round_final(value: Decimal, scale: int) -> Decimal:
    """Round to `scale` fractional digits, ties to even."""
    with localcontext() as ctx:
        ctx.prec = _DIVISION_PRECISION
        return value.quantize(quantum(scale), rounding=ROUND_HALF_EVEN)


def floor_to_scale(value: Decimal, scale: int) -> Decimal:
    """Round toward negative infinity, for conservative currency estimates."""
    with localcontext() as ctx:
        ctx.prec = _DIVISION_PRECISION
        return value.quantize(quantum(scale), rounding=ROUND_FLOOR)


def divide(numerator: Decimal, denominator: Decimal, scale: int) -> Decimal:
    """Divide in a widened context, then round half-even to `scale`.

    Raises:
        decimal.DivisionByZero: If denominator is zero.
    """
    with localcontext() as ctx:
        ctx.prec = _DIVISION_PRECISION
        return (numerator / denominator).quantize(quantum(scale), rounding=ROUND_HALF_EVEN)


def round_by_step(value: Decimal, step: Decimal) -> Decimal:
    """Return the multiple of `step` nearest to `value`.

    Ties go to the even multiple index, e.g. 0.15 with step 0.1 -> 0.2
    (index 2) and 0.25 -> 0.2 (index 2).

    Args:
        value: The quantity to snap.
        step: The venue's lot increment (positive).

    Returns:
        An exact multiple of step.
    """
    with localcontext() as ctx:
        ctx.prec = _DIVISION_PRECISION
        steps = (value / step).quantize(Decimal(1), rounding=ROUND_HALF_EVEN)
        return steps * step
