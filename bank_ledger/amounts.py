"""
Amount Handling Module

Decimal coercion, validation, exact arithmetic and display for ledger
amounts. NEVER uses float arithmetic for monetary values.

Amounts are checked on the way in (finite, within the configured number of
decimal places and maximum magnitude) and balance arithmetic runs under a
context that traps any rounding, so a rollback always restores the exact
prior balance.
"""

from decimal import (
    Context, Decimal, Inexact, InvalidOperation, Overflow, ROUND_HALF_UP,
    getcontext, localcontext
)
from typing import Optional, Union

from .config import get_config
from .errors import InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28

AmountLike = Union[Decimal, int, float, str]

DEFAULT_PRECISION = 2
DEFAULT_SYMBOL = "$"

# Balance arithmetic must be exact: any rounding raises instead
EXACT_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_UP,
    traps=[Inexact, Overflow, InvalidOperation]
)

# Display only; wide enough to quantize any finite balance
DISPLAY_PRECISION = 200


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert a value to Decimal without binary float artifacts.

    Floats are routed through str() so 0.1 becomes Decimal('0.1'),
    not Decimal('0.1000000000000000055511151231257827...').

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a valid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise ValueError(f"Not a valid amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a valid amount: {value!r}")
    return result


def check_amount(
    value: AmountLike,
    positive: bool = True,
    precision: Optional[int] = None,
    maximum: Optional[Decimal] = None
) -> Decimal:
    """
    Coerce and validate an amount accepted by the ledger.

    Args:
        value: Raw amount
        positive: Require amount > 0 (transaction amounts); otherwise any
            sign is allowed (starting balances)
        precision: Max decimal places, config amount_precision by default
        maximum: Max magnitude, config max_amount by default

    Raises:
        InvalidAmountError: If the amount is not finite, not positive when
            required, too large, or has too many decimal places
    """
    settings = get_config()
    if precision is None:
        precision = settings.amount_precision
    if maximum is None:
        maximum = Decimal(settings.max_amount)

    try:
        amount = to_decimal(value)
    except ValueError:
        raise InvalidAmountError(value, "not a finite number")

    if positive and amount <= Decimal('0'):
        raise InvalidAmountError(amount)
    if amount.copy_abs() > maximum:
        raise InvalidAmountError(amount, f"exceeds the maximum of {maximum}")
    if amount != quantize(amount, precision):
        raise InvalidAmountError(amount, f"more than {precision} decimal places")
    return amount


def exact_add(left: Decimal, right: Decimal) -> Decimal:
    """
    Add two Decimals, raising ArithmeticError instead of rounding.

    Raises:
        decimal.Inexact, decimal.Overflow: If the sum is not representable
    """
    with localcontext(EXACT_CONTEXT):
        return left + right


def exact_sub(left: Decimal, right: Decimal) -> Decimal:
    """Subtract two Decimals, raising ArithmeticError instead of rounding"""
    with localcontext(EXACT_CONTEXT):
        return left - right


def quantize(value: AmountLike, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Round to the given number of decimal places (half up)"""
    with localcontext() as ctx:
        ctx.prec = DISPLAY_PRECISION
        return to_decimal(value).quantize(
            Decimal('0.1') ** precision,
            rounding=ROUND_HALF_UP
        )


def format_amount(
    value: AmountLike,
    symbol: str = DEFAULT_SYMBOL,
    precision: int = DEFAULT_PRECISION
) -> str:
    """
    Format for display, e.g. $1,234.50 or -$5.00

    Args:
        value: Amount to format
        symbol: Currency symbol placed before the digits
        precision: Decimal places shown
    """
    rounded = quantize(value, precision)
    sign = "-" if rounded < 0 else ""
    if precision == 0:
        digits = f"{rounded.copy_abs():,.0f}"
    else:
        digits = f"{rounded.copy_abs():,.{precision}f}"
    return f"{sign}{symbol}{digits}"
