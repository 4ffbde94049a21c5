"""
Fixed-Point Math

Deterministic 18-decimal ("WAD") integer arithmetic used by the interest
engine. Nothing in here touches floats: every value is a Python int scaled by
``WAD = 10**18`` and every division truncates, so two runs on any platform
produce bit-identical rewards.

``ln_wad`` and ``exp_wad`` are evaluated at 36 decimals and floored back to 18,
``pow_wad`` uses binary exponentiation with a truncating product per step.
"""

from .constants import (
    BASIS_POINTS,
    DAYS_PER_YEAR,
    EXTENDED,
    LN2_EXTENDED,
    WAD,
)

# Scale factor between WAD and the extended precision
_EXT_SCALE = EXTENDED // WAD


def mul_wad(a: int, b: int) -> int:
    """a * b for WAD values, truncated."""
    return a * b // WAD


def div_wad(a: int, b: int) -> int:
    """a / b for WAD values, truncated."""
    if b == 0:
        raise ZeroDivisionError("div_wad by zero")
    return a * WAD // b


def ln_wad(x: int) -> int:
    """
    Natural logarithm of a positive WAD value.

    The argument is brought into [1, 2) by powers of two, then
    ``ln(y) = 2 * atanh((y - 1) / (y + 1))`` is summed until the next term
    vanishes at 36 decimals. The result is floored to 18 decimals, so
    ``ln_wad(WAD) == 0`` exactly.
    """
    if x <= 0:
        raise ValueError(f"ln_wad undefined for {x}")

    y = x * _EXT_SCALE
    k = 0
    while y >= 2 * EXTENDED:
        y //= 2
        k += 1
    while y < EXTENDED:
        y *= 2
        k -= 1

    z = (y - EXTENDED) * EXTENDED // (y + EXTENDED)
    z_squared = z * z // EXTENDED
    term = z
    total = z
    n = 1
    while True:
        term = term * z_squared // EXTENDED
        if term == 0:
            break
        n += 2
        total += term // n

    return (k * LN2_EXTENDED + 2 * total) // _EXT_SCALE


def exp_wad(x: int) -> int:
    """
    e ** x for a WAD value, floored to 18 decimals.

    Uses ``e**x = 2**k * e**r`` with ``0 <= r < ln 2`` and a Taylor series for
    ``e**r`` at 36 decimals.
    """
    v = x * _EXT_SCALE
    k = v // LN2_EXTENDED
    r = v - k * LN2_EXTENDED

    term = EXTENDED
    total = EXTENDED
    n = 1
    while True:
        term = term * r // (EXTENDED * n)
        if term == 0:
            break
        total += term
        n += 1

    if k >= 0:
        total <<= k
    else:
        total >>= -k
    return total // _EXT_SCALE


def pow_wad(base: int, exponent: int) -> int:
    """base ** exponent for a WAD base and a non-negative integer exponent."""
    if exponent < 0:
        raise ValueError(f"pow_wad exponent must be non-negative, got {exponent}")

    result = WAD
    while exponent > 0:
        if exponent & 1:
            result = mul_wad(result, base)
        exponent >>= 1
        if exponent:
            base = mul_wad(base, base)
    return result


def daily_rate_from_apy(apy_basis_points: int) -> int:
    """
    Per-day compounding rate (WAD) for an annual yield in basis points.

    Solves ``(1 + r) ** 365 - 1 == apy`` as ``r = exp(ln(1 + apy) / 365) - 1``.
    """
    if apy_basis_points < 0:
        raise ValueError(f"APY cannot be negative, got {apy_basis_points}")
    if apy_basis_points == 0:
        return 0

    growth = WAD + apy_basis_points * WAD // BASIS_POINTS
    return exp_wad(ln_wad(growth) // DAYS_PER_YEAR) - WAD


def compound_growth(principal: int, daily_rate: int, days: int) -> int:
    """
    Reward earned by *principal* compounding daily at *daily_rate* for *days*.

    ``principal * ((1 + daily_rate) ** days - 1)``, truncated toward zero.
    """
    if principal < 0 or daily_rate < 0 or days < 0:
        raise ValueError(
            f"compound_growth inputs must be non-negative "
            f"(principal={principal}, rate={daily_rate}, days={days})"
        )
    if principal == 0 or daily_rate == 0 or days == 0:
        return 0

    factor = pow_wad(WAD + daily_rate, days)
    return principal * (factor - WAD) // WAD
