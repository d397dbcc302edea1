"""Business-rule exceptions raised by the Ledger."""

from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger rule violations."""
    pass


class AmountMustBePositiveError(LedgerError):
    """A deposit or payment amount was zero or negative."""

    def __init__(self, amount: int):
        super().__init__(f"Amount must be greater than zero, got {amount}")
        self.amount = amount


class NotFoundError(LedgerError):
    """An identifier does not resolve to a ledger record."""

    entity = "record"

    def __init__(self, entity_id, message: Optional[str] = None):
        super().__init__(message or f"{self.entity.capitalize()} not found: {entity_id}")
        self.entity_id = entity_id


class AccountNotFoundError(NotFoundError):
    """No account with the given id."""
    entity = "account"


class PaymentNotFoundError(NotFoundError):
    """No payment with the given id."""
    entity = "payment"


class FavoriteNotFoundError(NotFoundError):
    """No favorite with the given id."""
    entity = "favorite"


class PhoneAlreadyRegisteredError(LedgerError):
    """Another account already uses this phone number."""

    def __init__(self, phone: str):
        super().__init__(f"Phone already registered: {phone}")
        self.phone = phone


class PaymentAlreadyExecutedError(LedgerError):
    """The payment has left the in-progress state and cannot be rejected."""

    def __init__(self, payment_id: str):
        super().__init__(f"Payment already executed: {payment_id}")
        self.payment_id = payment_id


class NotEnoughBalanceError(LedgerError):
    """The account balance does not cover the payment."""

    def __init__(self, account_id: int, balance: int, amount: int):
        super().__init__(
            f"Balance not enough on account {account_id}: {balance} < {amount}"
        )
        self.account_id = account_id
        self.balance = balance
        self.amount = amount
