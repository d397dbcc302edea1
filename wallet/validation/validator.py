"""
Snapshot Integrity Validation

DESIGN DECISION: A decoded snapshot is validated in two stages before a
single record reaches the ledger:

STAGE 1 - SECTION VALIDATION:
- No identifier appears twice within one section
- This catches hand-edited or concatenated dump files

STAGE 2 - LEDGER VALIDATION:
- An imported account must not take a phone that another account keeps
- Every payment and favorite must point at an account that will exist
  after the merge (live or imported)
- This catches snapshots that would break the ledger's invariants

WHY BEFORE MERGING:
The reconciler upserts record by record. Validating up front means a bad
snapshot is rejected as a whole and the ledger is left exactly as it was.

IMPORTANT: Validation NEVER repairs a snapshot. It raises.
"""

from collections import Counter
from typing import Iterable

from wallet.ledger import AccountNotFoundError, Ledger, PhoneAlreadyRegisteredError
from wallet.models.entities import Snapshot
from wallet.services.storage import SnapshotFormatError, SnapshotSection


class SnapshotValidator:
    """
    Validates a decoded snapshot against a live ledger.

    Stage 1 needs only the snapshot; stage 2 needs the ledger.
    """

    def validate(self, snapshot: Snapshot, ledger: Ledger) -> None:
        """
        Run both stages.

        Raises:
            SnapshotFormatError: Duplicate identifiers within a section
            PhoneAlreadyRegisteredError: Two accounts would share a phone
            AccountNotFoundError: A payment or favorite has no account
        """
        self._validate_sections(snapshot)
        self._validate_against_ledger(snapshot, ledger)

    def _validate_sections(self, snapshot: Snapshot) -> None:
        """Stage 1: identifiers are unique within each section."""
        self._check_unique(SnapshotSection.ACCOUNTS, (a.id for a in snapshot.accounts))
        self._check_unique(SnapshotSection.PAYMENTS, (p.id for p in snapshot.payments))
        self._check_unique(SnapshotSection.FAVORITES, (f.id for f in snapshot.favorites))

    def _check_unique(self, section: SnapshotSection, ids: Iterable) -> None:
        duplicates = sorted(
            str(entity_id) for entity_id, count in Counter(ids).items() if count > 1
        )
        if duplicates:
            raise SnapshotFormatError(
                f"duplicate ids: {', '.join(duplicates)}", section=section
            )

    def _validate_against_ledger(self, snapshot: Snapshot, ledger: Ledger) -> None:
        """Stage 2: the merged ledger would still satisfy its invariants."""
        # Phone ownership after the merge: imported rows replace live rows by id
        phone_owner = {a.phone: a.id for a in ledger.accounts()}
        imported_ids = {a.id for a in snapshot.accounts}
        for phone, owner in list(phone_owner.items()):
            if owner in imported_ids:
                del phone_owner[phone]

        for account in snapshot.accounts:
            owner = phone_owner.get(account.phone)
            if owner is not None and owner != account.id:
                raise PhoneAlreadyRegisteredError(account.phone)
            phone_owner[account.phone] = account.id

        known_accounts = set(phone_owner.values())
        for payment in snapshot.payments:
            if payment.account_id not in known_accounts:
                raise AccountNotFoundError(
                    payment.account_id,
                    f"Payment {payment.id} refers to missing account {payment.account_id}",
                )
        for favorite in snapshot.favorites:
            if favorite.account_id not in known_accounts:
                raise AccountNotFoundError(
                    favorite.account_id,
                    f"Favorite {favorite.id} refers to missing account {favorite.account_id}",
                )
