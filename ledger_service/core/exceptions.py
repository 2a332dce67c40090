"""
Typed errors raised by the ledger core and the settlement recorder.

Every error carries an HTTP status and a short machine-readable code so the
API layer can translate it without inspecting messages.
"""


class LedgerError(Exception):
    status_code = 400
    code = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Data-integrity faults

class InvalidLedgerRow(LedgerError):
    """Malformed numeric data coming from upstream rows"""
    status_code = 409
    code = "invalid_ledger_row"

    def __init__(self, row_kind: str, field: str, value):
        super().__init__(f"Invalid {row_kind} row: {field}={value!r}")
        self.row_kind = row_kind
        self.field = field
        self.value = value


# Validation faults

class SameMemberError(LedgerError):
    code = "same_member"

    def __init__(self, user_id: str):
        super().__init__(f"Cannot settle with yourself (user {user_id})")
        self.user_id = user_id


class NonPositiveAmountError(LedgerError):
    code = "non_positive_amount"

    def __init__(self, amount):
        super().__init__(f"Settlement amount must be positive, got {amount}")
        self.amount = amount


class AmountPrecisionError(LedgerError):
    code = "amount_precision"

    def __init__(self, amount, precision):
        super().__init__(f"Settlement amount must be a multiple of {precision}, got {amount}")
        self.amount = amount
        self.precision = precision


class MemberNotInGroupError(LedgerError):
    code = "member_not_in_group"

    def __init__(self, group_id: str, user_id: str):
        super().__init__(f"User {user_id} is not a member of group {group_id}")
        self.group_id = group_id
        self.user_id = user_id


# Internal invariants

class SimplifierInternalError(LedgerError):
    status_code = 500
    code = "simplifier_internal_error"


# Presentation

class InvalidExchangeRate(LedgerError):
    code = "invalid_exchange_rate"

    def __init__(self, rate):
        super().__init__(f"Exchange rate must be a positive finite number, got {rate}")
        self.rate = rate


class ExchangeRateNotFound(LedgerError):
    status_code = 404
    code = "exchange_rate_not_found"

    def __init__(self, from_currency: str, to_currency: str):
        super().__init__(f"No exchange rate from {from_currency} to {to_currency}")
        self.from_currency = from_currency
        self.to_currency = to_currency
