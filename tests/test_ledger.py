"""Tests for the Ledger operations"""

import pytest

from wallet.ledger import (
    AccountNotFoundError,
    AmountMustBePositiveError,
    FavoriteNotFoundError,
    Ledger,
    NotEnoughBalanceError,
    PaymentAlreadyExecutedError,
    PaymentNotFoundError,
    PhoneAlreadyRegisteredError,
)
from wallet.models.audit import AuditEventType
from wallet.models.entities import Account, Payment, PaymentStatus

from helpers import OTHER_PHONE, PHONE, ledger_state


def balance_of(ledger: Ledger, account_id: int) -> int:
    return ledger.find_account_by_id(account_id)[0].balance


class TestRegisterAccount:
    """Tests for account registration."""

    def test_first_account_gets_id_one(self, ledger):
        """Test identifiers start at 1 with zero balance."""
        account = ledger.register_account(PHONE)
        assert account.id == 1
        assert account.balance == 0
        assert ledger.next_account_id == 1

    def test_ids_increase(self, ledger):
        """Test sequential registrations get sequential ids."""
        first = ledger.register_account(PHONE)
        second = ledger.register_account(OTHER_PHONE)
        assert (first.id, second.id) == (1, 2)

    def test_duplicate_phone_rejected(self, ledger):
        """Test the second registration of a phone fails and changes nothing."""
        ledger.register_account(PHONE)
        before = ledger_state(ledger)

        with pytest.raises(PhoneAlreadyRegisteredError):
            ledger.register_account(PHONE)

        assert ledger_state(ledger) == before
        assert ledger.next_account_id == 1

    def test_find_account_by_phone(self, ledger):
        """Test phone lookup is exact."""
        account = ledger.register_account(PHONE)
        assert ledger.find_account_by_phone(PHONE).id == account.id
        with pytest.raises(AccountNotFoundError):
            ledger.find_account_by_phone(PHONE + " ")


class TestDeposit:
    """Tests for deposits."""

    def test_deposit_increases_balance(self, ledger):
        """Test deposit adds exactly the amount."""
        account = ledger.register_account(PHONE)
        ledger.deposit(account.id, 100)
        ledger.deposit(account.id, 25)
        assert balance_of(ledger, account.id) == 125

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive_amount(self, ledger, amount):
        """Test zero and negative deposits are rejected."""
        account = ledger.register_account(PHONE)
        with pytest.raises(AmountMustBePositiveError):
            ledger.deposit(account.id, amount)
        assert balance_of(ledger, account.id) == 0

    def test_unknown_account(self, ledger):
        """Test deposit to a missing account."""
        with pytest.raises(AccountNotFoundError):
            ledger.deposit(1, 100)

    def test_amount_checked_before_account(self, ledger):
        """Test a bad amount wins over a missing account."""
        with pytest.raises(AmountMustBePositiveError):
            ledger.deposit(42, 0)


class TestPay:
    """Tests for payments."""

    def test_pay_debits_and_records(self, ledger, funded_account):
        """Test a payment debits the account and is in progress."""
        payment = ledger.pay(funded_account.id, 50, "auto")

        assert balance_of(ledger, funded_account.id) == 50
        assert payment.status == PaymentStatus.IN_PROGRESS
        assert payment.account_id == funded_account.id
        assert payment.amount == 50
        assert payment.category == "auto"
        assert [p.id for p in ledger.payments()] == [payment.id]

    def test_pay_full_balance(self, ledger, funded_account):
        """Test the whole balance can be spent."""
        ledger.pay(funded_account.id, 100, "auto")
        assert balance_of(ledger, funded_account.id) == 0

    def test_not_enough_balance(self, ledger, funded_account):
        """Test an overdraft is refused and nothing changes."""
        before = ledger_state(ledger)
        with pytest.raises(NotEnoughBalanceError) as exc_info:
            ledger.pay(funded_account.id, 101, "auto")
        assert exc_info.value.balance == 100
        assert ledger_state(ledger) == before

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_amount(self, ledger, funded_account, amount):
        """Test zero and negative payments are rejected."""
        with pytest.raises(AmountMustBePositiveError):
            ledger.pay(funded_account.id, amount, "auto")
        assert ledger.payments() == []

    def test_unknown_account(self, ledger):
        """Test paying from a missing account."""
        with pytest.raises(AccountNotFoundError):
            ledger.pay(7, 10, "auto")

    def test_payment_ids_unique(self, ledger, funded_account):
        """Test every payment gets its own id."""
        ids = {ledger.pay(funded_account.id, 10, "auto").id for _ in range(5)}
        assert len(ids) == 5

    def test_find_payment(self, ledger, funded_account):
        """Test payment lookup returns the position too."""
        ledger.pay(funded_account.id, 10, "a")
        second = ledger.pay(funded_account.id, 20, "b")
        found, position = ledger.find_payment_by_id(second.id)
        assert found.amount == 20
        assert position == 1

    def test_find_missing_payment(self, ledger):
        """Test lookup of an unknown payment id."""
        with pytest.raises(PaymentNotFoundError):
            ledger.find_payment_by_id("nope")


class TestReject:
    """Tests for payment rejection."""

    def test_reject_refunds(self, ledger, funded_account):
        """Test rejection restores the balance and fails the payment."""
        payment = ledger.pay(funded_account.id, 40, "auto")
        ledger.reject(payment.id)

        assert balance_of(ledger, funded_account.id) == 100
        assert ledger.find_payment_by_id(payment.id)[0].status == PaymentStatus.FAILED

    def test_reject_twice(self, ledger, funded_account):
        """Test a failed payment cannot be rejected again."""
        payment = ledger.pay(funded_account.id, 40, "auto")
        ledger.reject(payment.id)
        before = ledger_state(ledger)

        with pytest.raises(PaymentAlreadyExecutedError):
            ledger.reject(payment.id)
        assert ledger_state(ledger) == before

    def test_reject_unknown(self, ledger):
        """Test rejecting an unknown payment."""
        with pytest.raises(PaymentNotFoundError):
            ledger.reject("missing")

    def test_reject_with_missing_account(self, ledger):
        """Test a payment whose account is gone is not refunded."""
        ledger.upsert_payment(Payment(id="p-1", account_id=9, amount=10, category="x"))
        with pytest.raises(AccountNotFoundError):
            ledger.reject("p-1")
        assert ledger.find_payment_by_id("p-1")[0].status == PaymentStatus.IN_PROGRESS


class TestRepeat:
    """Tests for repeating payments."""

    def test_repeat_creates_new_payment(self, ledger, funded_account):
        """Test repeat copies account, amount and category."""
        original = ledger.pay(funded_account.id, 30, "phone")
        repeated = ledger.repeat(original.id)

        assert repeated.id != original.id
        assert (repeated.account_id, repeated.amount, repeated.category) == (
            original.account_id, original.amount, original.category
        )
        assert repeated.status == PaymentStatus.IN_PROGRESS
        assert balance_of(ledger, funded_account.id) == 40

    def test_repeat_failed_payment(self, ledger, funded_account):
        """Test a rejected payment can still be repeated."""
        original = ledger.pay(funded_account.id, 30, "phone")
        ledger.reject(original.id)
        repeated = ledger.repeat(original.id)
        assert repeated.status == PaymentStatus.IN_PROGRESS
        assert balance_of(ledger, funded_account.id) == 70

    def test_repeat_without_funds(self, ledger, funded_account):
        """Test repeat is refused when the balance is short."""
        original = ledger.pay(funded_account.id, 60, "phone")
        with pytest.raises(NotEnoughBalanceError):
            ledger.repeat(original.id)
        assert len(ledger.payments()) == 1

    def test_repeat_unknown(self, ledger):
        """Test repeating an unknown payment."""
        with pytest.raises(PaymentNotFoundError):
            ledger.repeat("missing")


class TestFavorites:
    """Tests for favorites."""

    def test_favorite_copies_payment(self, ledger, funded_account):
        """Test a favorite mirrors the payment's fields."""
        payment = ledger.pay(funded_account.id, 25, "internet")
        favorite = ledger.favorite_payment(payment.id, "Home internet")

        assert favorite.id != payment.id
        assert favorite.name == "Home internet"
        assert (favorite.account_id, favorite.amount, favorite.category) == (
            funded_account.id, 25, "internet"
        )
        assert balance_of(ledger, funded_account.id) == 75

    def test_favorite_unknown_payment(self, ledger):
        """Test favoriting an unknown payment."""
        with pytest.raises(PaymentNotFoundError):
            ledger.favorite_payment("missing", "x")
        assert ledger.favorites() == []

    def test_pay_from_favorite(self, ledger, funded_account):
        """Test paying from a favorite."""
        payment = ledger.pay(funded_account.id, 25, "internet")
        favorite = ledger.favorite_payment(payment.id, "Home internet")

        paid = ledger.pay_from_favorite(favorite.id)
        assert paid.amount == 25
        assert paid.category == "internet"
        assert balance_of(ledger, funded_account.id) == 50

    def test_favorite_detached_from_rejected_payment(self, ledger, funded_account):
        """Test a favorite still pays after its source payment is rejected."""
        payment = ledger.pay(funded_account.id, 25, "internet")
        favorite = ledger.favorite_payment(payment.id, "Home internet")
        ledger.reject(payment.id)

        paid = ledger.pay_from_favorite(favorite.id)
        assert (paid.account_id, paid.amount, paid.category) == (
            payment.account_id, payment.amount, payment.category
        )

    def test_pay_from_unknown_favorite(self, ledger):
        """Test paying from an unknown favorite."""
        with pytest.raises(FavoriteNotFoundError):
            ledger.pay_from_favorite("missing")

    def test_pay_from_favorite_without_funds(self, ledger, funded_account):
        """Test the balance check applies to favorites too."""
        payment = ledger.pay(funded_account.id, 60, "internet")
        favorite = ledger.favorite_payment(payment.id, "Big one")
        with pytest.raises(NotEnoughBalanceError):
            ledger.pay_from_favorite(favorite.id)


class TestInvariants:
    """Tests for properties that hold across operations."""

    def test_register_deposit_pay_reject_scenario(self, ledger):
        """Test balance and status through deposit, pay and reject."""
        account = ledger.register_account(PHONE)
        ledger.deposit(account.id, 100)
        assert balance_of(ledger, account.id) == 100

        payment = ledger.pay(account.id, 50, "auto")
        assert balance_of(ledger, account.id) == 50
        assert payment.status == PaymentStatus.IN_PROGRESS

        ledger.reject(payment.id)
        assert balance_of(ledger, account.id) == 100
        assert ledger.find_payment_by_id(payment.id)[0].status == PaymentStatus.FAILED

    def test_balance_equals_deposits_minus_in_progress(self, populated_ledger):
        """Test balance = deposits - in-progress payments."""
        first = populated_ledger.find_account_by_phone(PHONE)
        second = populated_ledger.find_account_by_phone(OTHER_PHONE)
        assert first.balance == 1000 - 400 - 50
        assert second.balance == 300

    def test_returned_records_are_copies(self, ledger, funded_account):
        """Test mutating a returned record does not change the ledger."""
        funded_account.balance = 1
        account, _ = ledger.find_account_by_id(funded_account.id)
        assert account.balance == 100

        ledger.accounts()[0].balance = 5
        assert balance_of(ledger, funded_account.id) == 100

    def test_insertion_order(self, populated_ledger):
        """Test collections keep insertion order."""
        assert [a.phone for a in populated_ledger.accounts()] == [PHONE, OTHER_PHONE]
        assert [p.category for p in populated_ledger.payments()] == ["rent", "auto", "shop"]

    def test_is_empty(self, ledger):
        """Test is_empty."""
        assert ledger.is_empty is True
        ledger.register_account(PHONE)
        assert ledger.is_empty is False


class TestReconciliationHooks:
    """Tests for the upsert hooks used by import."""

    def test_upsert_account_replaces(self, ledger):
        """Test replacing an account moves its phone index."""
        ledger.register_account(PHONE)
        replaced = ledger.upsert_account(Account(id=1, phone=OTHER_PHONE, balance=7))

        assert replaced is True
        assert ledger.find_account_by_phone(OTHER_PHONE).balance == 7
        with pytest.raises(AccountNotFoundError):
            ledger.find_account_by_phone(PHONE)
        # The freed phone can be registered again
        assert ledger.register_account(PHONE).id == 2

    def test_upsert_account_appends(self, ledger):
        """Test an unseen id is appended."""
        assert ledger.upsert_account(Account(id=5, phone=PHONE)) is False
        assert [a.id for a in ledger.accounts()] == [5]

    def test_advance_counter(self, ledger):
        """Test the counter only moves forward."""
        ledger.advance_account_counter(5)
        assert ledger.next_account_id == 5
        ledger.advance_account_counter(2)
        assert ledger.next_account_id == 5
        assert ledger.register_account(PHONE).id == 6


class TestLedgerAudit:
    """Tests for audit events emitted by the ledger."""

    def test_operations_are_audited(self, audited_ledger, audit_storage):
        """Test each successful operation logs its event."""
        account = audited_ledger.register_account(PHONE)
        audited_ledger.deposit(account.id, 100)
        payment = audited_ledger.pay(account.id, 10, "auto")
        audited_ledger.reject(payment.id)
        audited_ledger.repeat(payment.id)
        favorite = audited_ledger.favorite_payment(payment.id, "Auto")
        audited_ledger.pay_from_favorite(favorite.id)

        types = [e.event_type for e in audit_storage.get_recent_events(limit=100)]
        for expected in (
            AuditEventType.ACCOUNT_REGISTERED,
            AuditEventType.DEPOSIT_MADE,
            AuditEventType.PAYMENT_CREATED,
            AuditEventType.PAYMENT_REJECTED,
            AuditEventType.PAYMENT_REPEATED,
            AuditEventType.FAVORITE_CREATED,
            AuditEventType.FAVORITE_PAID,
        ):
            assert expected in types
        assert AuditEventType.OPERATION_FAILED not in types

    def test_failure_audited_once(self, audited_ledger, audit_storage):
        """Test a failed repeat produces a single failure event."""
        account = audited_ledger.register_account(PHONE)
        audited_ledger.deposit(account.id, 10)
        payment = audited_ledger.pay(account.id, 10, "auto")

        with pytest.raises(NotEnoughBalanceError):
            audited_ledger.repeat(payment.id)

        failures = audit_storage.get_recent_events(
            event_type=AuditEventType.OPERATION_FAILED
        )
        assert len(failures) == 1
        assert failures[0].details["operation"] == "repeat"
        assert failures[0].error_code == "NotEnoughBalanceError"

    def test_long_free_text_values_are_audited(self, audited_ledger, audit_storage):
        """Test long phones, categories and names do not break audited operations."""
        phone = "9" * 490
        account = audited_ledger.register_account(phone)
        audited_ledger.deposit(account.id, 100)
        payment = audited_ledger.pay(account.id, 50, "c" * 500)
        audited_ledger.favorite_payment(payment.id, "n" * 600)

        assert audited_ledger.find_account_by_phone(phone).balance == 50
        created, = audit_storage.get_recent_events(
            event_type=AuditEventType.PAYMENT_CREATED
        )
        assert created.details["category"] == "c" * 500
        assert len(audit_storage.get_recent_events(
            event_type=AuditEventType.FAVORITE_CREATED
        )) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
