"""
Unit tests for the display-side currency conversion.
"""
import pytest
from decimal import Decimal
from typing import NamedTuple

from ledger_service.core.exceptions import InvalidExchangeRate
from ledger_service.schemas.balance_schema import Balance
from ledger_service.utils.currency import present, resolve_rate, format_amount


class Rate(NamedTuple):
    from_currency: str
    to_currency: str
    rate: Decimal


@pytest.fixture
def balance():
    return Balance(
        user_id="A",
        amount_paid=Decimal("300"),
        amount_owed=Decimal("100"),
        settlements_in=Decimal("20"),
        settlements_out=Decimal("40"),
    )


@pytest.mark.unit
class TestPresent:
    """Test the present() function."""

    def test_same_currency_is_unchanged(self):
        balance = Balance(user_id="A", amount_paid=Decimal("33.335"))
        presented = present(balance, "SAR", "SAR", Decimal("1"))

        assert presented.converted is False
        assert presented.currency == "SAR"
        assert presented.rate == Decimal("1")
        # No display rounding when nothing is converted
        assert presented.amount_paid == Decimal("33.335")
        assert presented.net_balance == Decimal("33.335")

    def test_same_currency_ignores_rate(self, balance):
        presented = present(balance, "SAR", "sar", None)
        assert presented.net_balance == balance.net_balance
        assert presented.converted is False

    def test_conversion(self, balance):
        presented = present(balance, "SAR", "USD", Decimal("0.25"))

        assert presented.converted is True
        assert presented.currency == "USD"
        assert presented.rate == Decimal("0.25")
        assert presented.amount_paid == Decimal("75.00")
        assert presented.amount_owed == Decimal("25.00")
        assert presented.settlements_in == Decimal("5.00")
        assert presented.settlements_out == Decimal("10.00")
        assert presented.net_balance == Decimal("45.00")

    def test_conversion_rounds_for_display(self):
        balance = Balance(user_id="A", amount_paid=Decimal("10"))
        presented = present(balance, "SAR", "USD", Decimal("0.3333"))
        assert presented.amount_paid == Decimal("3.33")

    def test_custom_precision(self):
        balance = Balance(user_id="A", amount_paid=Decimal("10"))
        presented = present(balance, "SAR", "USD", Decimal("0.3333"), precision=Decimal("0.1"))
        assert presented.amount_paid == Decimal("3.3")

    def test_source_balance_is_untouched(self, balance):
        present(balance, "SAR", "USD", Decimal("0.25"))
        assert balance.amount_paid == Decimal("300")
        assert balance.net_balance == Decimal("180")

    def test_string_rate(self, balance):
        presented = present(balance, "SAR", "USD", "0.25")
        assert presented.amount_paid == Decimal("75.00")

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-1"), Decimal("NaN"), Decimal("Infinity"), "abc", None])
    def test_invalid_rate(self, balance, rate):
        with pytest.raises(InvalidExchangeRate):
            present(balance, "SAR", "USD", rate)


@pytest.mark.unit
class TestResolveRate:
    """Test the resolve_rate() function."""

    def test_same_currency(self):
        assert resolve_rate([], "SAR", "SAR") == Decimal("1")

    def test_direct_rate(self):
        rates = [Rate("SAR", "USD", Decimal("0.27")), Rate("USD", "SAR", Decimal("3.75"))]
        assert resolve_rate(rates, "SAR", "USD") == Decimal("0.27")

    def test_reverse_rate(self):
        rates = [Rate("USD", "SAR", Decimal("4"))]
        assert resolve_rate(rates, "SAR", "USD") == Decimal("0.25")

    def test_first_direct_row_wins(self):
        """Rows are expected newest first."""
        rates = [Rate("SAR", "USD", Decimal("0.26")), Rate("SAR", "USD", Decimal("0.27"))]
        assert resolve_rate(rates, "SAR", "USD") == Decimal("0.26")

    def test_zero_reverse_rate_is_skipped(self):
        assert resolve_rate([Rate("USD", "SAR", Decimal("0"))], "SAR", "USD") is None

    def test_codes_are_case_insensitive(self):
        rates = [Rate("sar", "usd", Decimal("0.27"))]
        assert resolve_rate(rates, "SAR", "USD") == Decimal("0.27")
        assert resolve_rate(rates, "usd", "Sar") == Decimal("1") / Decimal("0.27")
        assert resolve_rate([], "sar", "SAR") == Decimal("1")

    def test_missing_rate(self):
        assert resolve_rate([Rate("EUR", "USD", Decimal("1.1"))], "SAR", "USD") is None

    def test_accepts_generator(self):
        rates = (rate for rate in [Rate("USD", "SAR", Decimal("4"))])
        assert resolve_rate(rates, "SAR", "USD") == Decimal("0.25")


@pytest.mark.unit
class TestFormatAmount:
    """Test the format_amount() function."""

    def test_thousands_separator(self):
        assert format_amount(Decimal("1234.5"), "SAR") == "1,234.50 SAR"

    def test_symbol(self):
        assert format_amount(Decimal("12"), "USD", "$") == "12.00 $"

    def test_negative(self):
        assert format_amount(Decimal("-45.678"), "EUR") == "-45.68 EUR"
