"""
Core Data Models for the Wallet Ledger

These models define the schemas for the three entity kinds the ledger owns:
accounts, payments and favorites. They are designed to:
1. Enforce the value invariants (non-negative balance, positive amounts)
2. Be copied cheaply so callers never hold a live ledger record
3. Map one-to-one onto the rows of a snapshot section

DESIGN DECISION: Models carry no behavior. Every rule that involves more
than one record (phone uniqueness, balance conservation, status
transitions) lives in the Ledger.
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PaymentStatus(str, Enum):
    """
    Payment lifecycle status.

    CRITICAL: FAILED is terminal. A payment only reaches it through
    rejection and never leaves it.
    """
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


def new_record_id() -> str:
    """Generate an opaque identifier for a payment or favorite."""
    return str(uuid4())


# =============================================================================
# ENTITIES
# =============================================================================

class Account(BaseModel):
    """
    A balance-holding account keyed by phone number.

    The id is assigned by the Ledger and is never reused.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(
        ...,
        ge=0,
        description="Ledger-assigned account identifier"
    )
    phone: str = Field(
        ...,
        description="Phone number, unique across accounts (exact match)"
    )
    balance: int = Field(
        default=0,
        ge=0,
        description="Balance in whole currency units"
    )


class Payment(BaseModel):
    """
    A debit recorded against an account.

    The amount is already deducted from the account when this record
    exists. Rejection restores it and marks the payment FAILED.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Opaque unique payment identifier"
    )
    account_id: int = Field(
        ...,
        description="Identifier of the debited account"
    )
    amount: int = Field(
        ...,
        gt=0,
        description="Debited amount in whole currency units"
    )
    category: str = Field(
        ...,
        description="Free-form category tag"
    )
    status: PaymentStatus = Field(
        default=PaymentStatus.IN_PROGRESS,
        description="Lifecycle status"
    )

    @property
    def is_in_progress(self) -> bool:
        return self.status == PaymentStatus.IN_PROGRESS


class Favorite(BaseModel):
    """
    A named payment template.

    Captured by value from a payment: later changes to that payment
    (e.g. rejection) do not affect the favorite.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Opaque unique favorite identifier"
    )
    account_id: int = Field(
        ...,
        description="Account the templated payment debits"
    )
    name: str = Field(
        ...,
        description="Caller-supplied label (not unique)"
    )
    amount: int = Field(
        ...,
        gt=0,
        description="Templated amount in whole currency units"
    )
    category: str = Field(
        ...,
        description="Templated category tag"
    )


# =============================================================================
# SNAPSHOT
# =============================================================================

class Snapshot(BaseModel):
    """The three collections as decoded from one dump directory."""

    accounts: list[Account] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    favorites: list[Favorite] = Field(default_factory=list)
