import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy import or_, and_
from ledger_service.core.exceptions import ExchangeRateNotFound
from ledger_service.models.currencies import ExchangeRate
from ledger_service.utils.currency import resolve_rate

logger = logging.getLogger(__name__)


def get_exchange_rate(db: Session, from_currency: str, to_currency: str) -> Decimal:
    """
    Look up the latest rate converting from_currency into to_currency.

    Falls back to the inverse of the reverse pair when no direct rate is stored.
    """
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()

    rows = db.query(ExchangeRate).filter(
        or_(
            and_(ExchangeRate.from_currency == from_currency, ExchangeRate.to_currency == to_currency),
            and_(ExchangeRate.from_currency == to_currency, ExchangeRate.to_currency == from_currency)
        )
    ).order_by(ExchangeRate.date.desc()).all()

    rate = resolve_rate(rows, from_currency, to_currency)
    if rate is None:
        logger.warning(f"No exchange rate stored for {from_currency} -> {to_currency}")
        raise ExchangeRateNotFound(from_currency, to_currency)
    return rate
