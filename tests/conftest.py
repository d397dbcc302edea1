"""Pytest fixtures for testing"""

import os

import pytest

from wallet.audit import AuditLogger
from wallet.config import get_settings
from wallet.ledger import Ledger
from wallet.models.entities import Account
from wallet.services.snapshot import SnapshotManager
from wallet.services.storage import InMemoryAuditStorage

from helpers import OTHER_PHONE, PHONE


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from WALLET_* variables and cached settings."""
    for name in list(os.environ):
        if name.startswith("WALLET_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def audited_ledger(audit_logger) -> Ledger:
    return Ledger(audit_logger=audit_logger)


@pytest.fixture
def funded_account(ledger) -> Account:
    """An account holding 100."""
    account = ledger.register_account(PHONE)
    ledger.deposit(account.id, 100)
    return account


@pytest.fixture
def populated_ledger() -> Ledger:
    """
    Two accounts, three payments (one rejected) and one favorite.
    """
    ledger = Ledger()
    first = ledger.register_account(PHONE)
    second = ledger.register_account(OTHER_PHONE)
    ledger.deposit(first.id, 1000)
    ledger.deposit(second.id, 300)

    rent = ledger.pay(first.id, 400, "rent")
    ledger.pay(first.id, 50, "auto")
    refunded = ledger.pay(second.id, 120, "shop")
    ledger.reject(refunded.id)
    ledger.favorite_payment(rent.id, "Monthly rent")
    return ledger


@pytest.fixture
def manager(ledger) -> SnapshotManager:
    return SnapshotManager(ledger)

