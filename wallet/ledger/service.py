"""
The Ledger

Owns the accounts, payments and favorites and enforces every rule that
spans more than one record:
- phone numbers are unique across accounts
- a balance never goes negative
- an account's balance equals its deposits minus its in-progress payments
- a failed payment stays failed

DESIGN DECISION: The ledger hands out copies. A caller can display or
persist what it receives, but changing it does not change the ledger.
All mutation goes through the operations below, and an operation mutates
only after every precondition has passed.

The ledger performs no I/O. Export and import live in
wallet.services.snapshot.
"""

import functools
from typing import Callable, Optional, TypeVar

from wallet.audit import AuditLogger
from wallet.ledger.errors import (
    AccountNotFoundError,
    AmountMustBePositiveError,
    FavoriteNotFoundError,
    LedgerError,
    NotEnoughBalanceError,
    PaymentAlreadyExecutedError,
    PaymentNotFoundError,
    PhoneAlreadyRegisteredError,
)
from wallet.models.entities import (
    Account,
    Favorite,
    Payment,
    PaymentStatus,
    new_record_id,
)


F = TypeVar("F", bound=Callable)


def _audited(operation: str) -> Callable[[F], F]:
    """Record ledger rule violations before re-raising them."""
    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self: "Ledger", *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except LedgerError as e:
                if self._audit_logger:
                    self._audit_logger.log_operation_failed(operation, e)
                raise
        return wrapper  # type: ignore[return-value]
    return decorator


class Ledger:
    """
    In-memory store of accounts, payments and favorites.

    Collections keep insertion order (used for deterministic export).
    Dict indexes map identifiers and phones to list positions; records
    are never deleted, so positions never shift.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit_logger = audit_logger
        self._next_account_id = 0

        self._accounts: list[Account] = []
        self._payments: list[Payment] = []
        self._favorites: list[Favorite] = []

        self._account_index: dict[int, int] = {}
        self._phone_index: dict[str, int] = {}
        self._payment_index: dict[str, int] = {}
        self._favorite_index: dict[str, int] = {}

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def next_account_id(self) -> int:
        """The last identifier handed out; the next registration gets this + 1."""
        return self._next_account_id

    @property
    def is_empty(self) -> bool:
        return not (self._accounts or self._payments or self._favorites)

    def accounts(self) -> list[Account]:
        return [account.model_copy() for account in self._accounts]

    def payments(self) -> list[Payment]:
        return [payment.model_copy() for payment in self._payments]

    def favorites(self) -> list[Favorite]:
        return [favorite.model_copy() for favorite in self._favorites]

    def find_account_by_id(self, account_id: int) -> tuple[Account, int]:
        """
        Look up an account.

        Returns:
            (account copy, position in insertion order)

        Raises:
            AccountNotFoundError
        """
        position = self._account_position(account_id)
        return self._accounts[position].model_copy(), position

    def find_payment_by_id(self, payment_id: str) -> tuple[Payment, int]:
        """
        Look up a payment.

        Raises:
            PaymentNotFoundError
        """
        position = self._payment_position(payment_id)
        return self._payments[position].model_copy(), position

    def find_favorite_by_id(self, favorite_id: str) -> tuple[Favorite, int]:
        """
        Look up a favorite.

        Raises:
            FavoriteNotFoundError
        """
        position = self._favorite_position(favorite_id)
        return self._favorites[position].model_copy(), position

    def find_account_by_phone(self, phone: str) -> Account:
        """
        Look up an account by exact phone match.

        Raises:
            AccountNotFoundError
        """
        try:
            account_id = self._phone_index[phone]
        except KeyError:
            raise AccountNotFoundError(phone, f"No account for phone: {phone}")
        return self.find_account_by_id(account_id)[0]

    # =========================================================================
    # Operations
    # =========================================================================

    @_audited("register_account")
    def register_account(self, phone: str) -> Account:
        """
        Register a new zero-balance account.

        Raises:
            PhoneAlreadyRegisteredError: If any account already has this phone
        """
        if phone in self._phone_index:
            raise PhoneAlreadyRegisteredError(phone)

        self._next_account_id += 1
        account = Account(id=self._next_account_id, phone=phone)
        self._append_account(account)

        if self._audit_logger:
            self._audit_logger.log_account_registered(account.id, phone)
        return account.model_copy()

    @_audited("deposit")
    def deposit(self, account_id: int, amount: int) -> None:
        """
        Credit an account.

        Amount is checked before the account lookup.

        Raises:
            AmountMustBePositiveError
            AccountNotFoundError
        """
        if amount <= 0:
            raise AmountMustBePositiveError(amount)

        account = self._accounts[self._account_position(account_id)]
        account.balance += amount

        if self._audit_logger:
            self._audit_logger.log_deposit(account_id, amount, account.balance)

    @_audited("pay")
    def pay(self, account_id: int, amount: int, category: str) -> Payment:
        """
        Debit an account and record an in-progress payment.

        Checks, in order: amount positivity, account existence, balance.

        Raises:
            AmountMustBePositiveError
            AccountNotFoundError
            NotEnoughBalanceError
        """
        return self._pay(account_id, amount, category)

    def _pay(self, account_id: int, amount: int, category: str) -> Payment:
        if amount <= 0:
            raise AmountMustBePositiveError(amount)

        account = self._accounts[self._account_position(account_id)]
        if account.balance < amount:
            raise NotEnoughBalanceError(account_id, account.balance, amount)

        payment = Payment(
            id=new_record_id(),
            account_id=account_id,
            amount=amount,
            category=category,
            status=PaymentStatus.IN_PROGRESS,
        )
        account.balance -= amount
        self._append_payment(payment)

        if self._audit_logger:
            self._audit_logger.log_payment_created(
                payment_id=payment.id,
                account_id=account_id,
                amount=amount,
                category=category,
            )
        return payment.model_copy()

    @_audited("reject")
    def reject(self, payment_id: str) -> None:
        """
        Mark an in-progress payment failed and return its amount.

        Raises:
            PaymentNotFoundError
            PaymentAlreadyExecutedError: If the payment is not in progress
            AccountNotFoundError: If the paying account is gone
        """
        payment = self._payments[self._payment_position(payment_id)]
        if not payment.is_in_progress:
            raise PaymentAlreadyExecutedError(payment_id)

        account = self._accounts[self._account_position(payment.account_id)]

        payment.status = PaymentStatus.FAILED
        account.balance += payment.amount

        if self._audit_logger:
            self._audit_logger.log_payment_rejected(
                payment_id, payment.account_id, payment.amount
            )

    @_audited("repeat")
    def repeat(self, payment_id: str) -> Payment:
        """
        Pay again with the same account, amount and category.

        The original payment's status does not matter.

        Raises:
            PaymentNotFoundError, and anything pay() raises
        """
        original = self._payments[self._payment_position(payment_id)]
        payment = self._pay(original.account_id, original.amount, original.category)

        if self._audit_logger:
            self._audit_logger.log_payment_repeated(payment_id, payment.id)
        return payment

    @_audited("favorite_payment")
    def favorite_payment(self, payment_id: str, name: str) -> Favorite:
        """
        Save a payment's account, amount and category as a named favorite.

        Raises:
            PaymentNotFoundError
        """
        payment = self._payments[self._payment_position(payment_id)]
        favorite = Favorite(
            id=new_record_id(),
            account_id=payment.account_id,
            name=name,
            amount=payment.amount,
            category=payment.category,
        )
        self._append_favorite(favorite)

        if self._audit_logger:
            self._audit_logger.log_favorite_created(favorite.id, payment_id, name)
        return favorite.model_copy()

    @_audited("pay_from_favorite")
    def pay_from_favorite(self, favorite_id: str) -> Payment:
        """
        Pay using a favorite's account, amount and category.

        Raises:
            FavoriteNotFoundError, and anything pay() raises
        """
        favorite = self._favorites[self._favorite_position(favorite_id)]
        payment = self._pay(favorite.account_id, favorite.amount, favorite.category)

        if self._audit_logger:
            self._audit_logger.log_favorite_paid(favorite_id, payment.id)
        return payment

    # =========================================================================
    # Reconciliation hooks (used by the snapshot reconciler)
    # =========================================================================

    def upsert_account(self, account: Account) -> bool:
        """
        Replace the account with the same id, or append it.

        Returns True if an existing account was replaced.
        """
        account = account.model_copy()
        position = self._account_index.get(account.id)
        if position is None:
            self._append_account(account)
            return False

        previous = self._accounts[position]
        if self._phone_index.get(previous.phone) == previous.id:
            del self._phone_index[previous.phone]
        self._accounts[position] = account
        self._phone_index[account.phone] = account.id
        return True

    def upsert_payment(self, payment: Payment) -> bool:
        """Replace the payment with the same id, or append it."""
        payment = payment.model_copy()
        position = self._payment_index.get(payment.id)
        if position is None:
            self._append_payment(payment)
            return False
        self._payments[position] = payment
        return True

    def upsert_favorite(self, favorite: Favorite) -> bool:
        """Replace the favorite with the same id, or append it."""
        favorite = favorite.model_copy()
        position = self._favorite_index.get(favorite.id)
        if position is None:
            self._append_favorite(favorite)
            return False
        self._favorites[position] = favorite
        return True

    def advance_account_counter(self, seen_max_id: int) -> None:
        """Make sure future registrations never reuse an id up to seen_max_id."""
        self._next_account_id = max(self._next_account_id, seen_max_id)

    # =========================================================================
    # Internals
    # =========================================================================

    def _account_position(self, account_id: int) -> int:
        try:
            return self._account_index[account_id]
        except KeyError:
            raise AccountNotFoundError(account_id)

    def _payment_position(self, payment_id: str) -> int:
        try:
            return self._payment_index[payment_id]
        except KeyError:
            raise PaymentNotFoundError(payment_id)

    def _favorite_position(self, favorite_id: str) -> int:
        try:
            return self._favorite_index[favorite_id]
        except KeyError:
            raise FavoriteNotFoundError(favorite_id)

    def _append_account(self, account: Account) -> None:
        self._account_index[account.id] = len(self._accounts)
        self._phone_index[account.phone] = account.id
        self._accounts.append(account)

    def _append_payment(self, payment: Payment) -> None:
        self._payment_index[payment.id] = len(self._payments)
        self._payments.append(payment)

    def _append_favorite(self, favorite: Favorite) -> None:
        self._favorite_index[favorite.id] = len(self._favorites)
        self._favorites.append(favorite)
