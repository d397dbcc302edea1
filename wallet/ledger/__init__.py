"""Ledger package."""

from wallet.ledger.errors import (
    AccountNotFoundError,
    AmountMustBePositiveError,
    FavoriteNotFoundError,
    LedgerError,
    NotEnoughBalanceError,
    NotFoundError,
    PaymentAlreadyExecutedError,
    PaymentNotFoundError,
    PhoneAlreadyRegisteredError,
)
from wallet.ledger.service import Ledger

__all__ = [
    "AccountNotFoundError",
    "AmountMustBePositiveError",
    "FavoriteNotFoundError",
    "Ledger",
    "LedgerError",
    "NotEnoughBalanceError",
    "NotFoundError",
    "PaymentAlreadyExecutedError",
    "PaymentNotFoundError",
    "PhoneAlreadyRegisteredError",
]
