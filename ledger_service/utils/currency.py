"""
Read-side currency conversion for balances.

Balances are always stored and computed in the group's ledger currency.
Conversion here only produces display values; a rounded, converted amount
must never be fed back into the ledger.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from ledger_service.core.config import settings
from ledger_service.core.exceptions import InvalidExchangeRate
from ledger_service.schemas.balance_schema import Balance, PresentedBalance
from ledger_service.utils.min_cash_flow import round_decimal

AMOUNT_FIELDS = ("amount_paid", "amount_owed", "settlements_in", "settlements_out", "net_balance")


def _validate_rate(rate) -> Decimal:
    try:
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidExchangeRate(rate)
    if not value.is_finite() or value <= 0:
        raise InvalidExchangeRate(rate)
    return value


def present(
    balance: Balance,
    group_currency: str,
    display_currency: str,
    rate,
    precision: Optional[Decimal] = None
) -> PresentedBalance:
    """
    Convert a balance into the viewer's currency for display.

    If both currencies match the amounts are passed through untouched, with
    no rounding. Otherwise every amount is multiplied by the rate and rounded
    to the display precision.

    Raises:
        InvalidExchangeRate: If a conversion is needed and the rate is not a positive finite number
    """
    if group_currency.upper() == display_currency.upper():
        return PresentedBalance(
            user_id=balance.user_id,
            currency=group_currency,
            rate=Decimal("1"),
            converted=False,
            **{field: getattr(balance, field) for field in AMOUNT_FIELDS}
        )

    rate = _validate_rate(rate)
    precision = settings.DISPLAY_PRECISION if precision is None else precision
    return PresentedBalance(
        user_id=balance.user_id,
        currency=display_currency,
        rate=rate,
        converted=True,
        **{field: round_decimal(getattr(balance, field) * rate, precision) for field in AMOUNT_FIELDS}
    )


def resolve_rate(rates: Iterable, from_currency: str, to_currency: str) -> Optional[Decimal]:
    """
    Find the rate converting from_currency into to_currency.

    Uses a direct rate when one exists, otherwise the inverse of the reverse
    rate. Rows need from_currency, to_currency and rate attributes. Currency
    codes are compared case-insensitively.
    """
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()
    if from_currency == to_currency:
        return Decimal("1")

    rates = [(row.from_currency.upper(), row.to_currency.upper(), row.rate) for row in rates]
    for row_from, row_to, rate in rates:
        if row_from == from_currency and row_to == to_currency:
            return Decimal(str(rate))

    for row_from, row_to, rate in rates:
        if row_from == to_currency and row_to == from_currency:
            reverse = Decimal(str(rate))
            if reverse != 0:
                return Decimal("1") / reverse

    return None


def format_amount(amount: Decimal, currency_code: str, symbol: Optional[str] = None) -> str:
    """Format an amount with two decimals and a thousands separator, e.g. '1,234.50 SAR'"""
    return f"{round_decimal(amount):,.2f} {symbol or currency_code}"
