"""
Snapshot Reconciler

Merges decoded records into a live ledger by identity:
- a record whose id already exists replaces it in place (the snapshot wins)
- any other record is appended

Accounts go first, then payments, then favorites. After accounts, the
ledger's account counter is moved past the largest imported id so later
registrations cannot collide with imported accounts.

Records already in the ledger are only candidates for overwrite; an
unseen id is never an error here. Integrity checks belong to the
SnapshotValidator and must run before merge().
"""

from pydantic import BaseModel, Field

from wallet.ledger import Ledger
from wallet.models.entities import Account, Favorite, Payment, Snapshot


class SectionMergeCount(BaseModel):
    """How many records of one section were replaced or appended."""

    replaced: int = Field(default=0, ge=0)
    appended: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.replaced + self.appended


class ReconcileResult(BaseModel):
    """Outcome of merging one snapshot."""

    accounts: SectionMergeCount = Field(default_factory=SectionMergeCount)
    payments: SectionMergeCount = Field(default_factory=SectionMergeCount)
    favorites: SectionMergeCount = Field(default_factory=SectionMergeCount)

    def to_counts(self) -> dict[str, int]:
        """Flat counts for logging."""
        counts = {}
        for name in ("accounts", "payments", "favorites"):
            section = getattr(self, name)
            counts[f"{name}_replaced"] = section.replaced
            counts[f"{name}_appended"] = section.appended
        return counts


class Reconciler:
    """Upserts snapshot records into a ledger."""

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    def merge(self, snapshot: Snapshot) -> ReconcileResult:
        return ReconcileResult(
            accounts=self.merge_accounts(snapshot.accounts),
            payments=self.merge_payments(snapshot.payments),
            favorites=self.merge_favorites(snapshot.favorites),
        )

    def merge_accounts(self, accounts: list[Account]) -> SectionMergeCount:
        count = SectionMergeCount()
        for account in accounts:
            if self._ledger.upsert_account(account):
                count.replaced += 1
            else:
                count.appended += 1

        if accounts:
            self._ledger.advance_account_counter(max(a.id for a in accounts))
        return count

    def merge_payments(self, payments: list[Payment]) -> SectionMergeCount:
        count = SectionMergeCount()
        for payment in payments:
            if self._ledger.upsert_payment(payment):
                count.replaced += 1
            else:
                count.appended += 1
        return count

    def merge_favorites(self, favorites: list[Favorite]) -> SectionMergeCount:
        count = SectionMergeCount()
        for favorite in favorites:
            if self._ledger.upsert_favorite(favorite):
                count.replaced += 1
            else:
                count.appended += 1
        return count
