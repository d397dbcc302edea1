"""
Snapshot Manager

Defines the end-to-end persistence flows for a ledger:
1. Export (ledger → codec → dump directory)
2. Import (dump directory → codec → validator → reconciler → ledger)
3. Backup (dump directory → dump directory, byte for byte)

DESIGN DECISION: Each flow does all the work that can fail before the
work that changes anything:
- export encodes every section before writing the first file
- import reads, decodes and validates every section before merging

Partial-file policy: accounts.dump is required. payments.dump and
favorites.dump are optional because export omits empty sections; a
ledger with accounts and no payments must still round-trip.
"""

from pathlib import Path
from typing import Callable, Optional, Union

import structlog

from wallet.audit import AuditLogger
from wallet.ledger import Ledger, LedgerError
from wallet.models.entities import Snapshot
from wallet.services.snapshot.codec import SnapshotCodec
from wallet.services.snapshot.reconciler import Reconciler, ReconcileResult
from wallet.services.storage import (
    FileSnapshotStorage,
    SnapshotIOError,
    SnapshotSection,
    SnapshotStorageInterface,
    StorageError,
    copy_file,
)
from wallet.validation import SnapshotValidator


logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]
StorageFactory = Callable[[PathLike], SnapshotStorageInterface]


class SnapshotManager:
    """
    Orchestrates snapshot export and import for one ledger.

    Flow (import):
    1. Read accounts (required), payments and favorites (optional)
    2. Decode each section (strict)
    3. Validate the snapshot against the ledger
    4. Merge with the reconciler

    Any failure in steps 1-3 leaves the ledger untouched.
    """

    def __init__(
        self,
        ledger: Ledger,
        audit_logger: Optional[AuditLogger] = None,
        codec: Optional[SnapshotCodec] = None,
        storage_factory: Optional[StorageFactory] = None,
    ):
        self._ledger = ledger
        self._audit_logger = audit_logger
        self._codec = codec or SnapshotCodec()
        self._storage_factory = storage_factory or FileSnapshotStorage
        self._validator = SnapshotValidator()
        self._reconciler = Reconciler(ledger)

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    # =========================================================================
    # Export
    # =========================================================================

    def export_snapshot(self, directory: PathLike) -> list[SnapshotSection]:
        """
        Write every non-empty collection to the directory.

        The directory must already exist. Empty collections produce no file.

        Returns:
            Sections written, in order

        Raises:
            SnapshotFormatError: A value contains a separator (nothing written)
            SnapshotIOError: A file could not be written
        """
        try:
            encoded = self.encode_sections()
            storage = self._storage_factory(directory)
            for section, text in encoded.items():
                storage.write_section(section, text)
        except StorageError as e:
            self._log_failure("export_snapshot", e, directory)
            raise

        sections = list(encoded)
        logger.info(
            "snapshot_exported",
            directory=str(directory),
            sections=[s.value for s in sections],
        )
        if self._audit_logger:
            self._audit_logger.log_snapshot_exported(
                str(directory), [s.value for s in sections]
            )
        return sections

    def encode_sections(self) -> dict[SnapshotSection, str]:
        """Encode the non-empty collections, in import order."""
        encoded: dict[SnapshotSection, str] = {}

        accounts = self._ledger.accounts()
        if accounts:
            encoded[SnapshotSection.ACCOUNTS] = self._codec.encode_accounts(accounts)

        payments = self._ledger.payments()
        if payments:
            encoded[SnapshotSection.PAYMENTS] = self._codec.encode_payments(payments)

        favorites = self._ledger.favorites()
        if favorites:
            encoded[SnapshotSection.FAVORITES] = self._codec.encode_favorites(favorites)

        return encoded

    # =========================================================================
    # Import
    # =========================================================================

    def import_snapshot(self, directory: PathLike) -> ReconcileResult:
        """
        Merge the snapshot stored in a directory into the ledger.

        Returns:
            Per-section replaced/appended counts

        Raises:
            SnapshotNotFoundError: accounts.dump is missing
            SnapshotIOError: A file could not be read
            SnapshotFormatError: A section does not decode
            AccountNotFoundError: A payment or favorite has no account
            PhoneAlreadyRegisteredError: Two accounts would share a phone
        """
        try:
            snapshot = self.load_snapshot(directory)
            self._validator.validate(snapshot, self._ledger)
        except (StorageError, LedgerError) as e:
            self._log_failure("import_snapshot", e, directory)
            raise

        result = self._reconciler.merge(snapshot)

        logger.info("snapshot_imported", directory=str(directory), **result.to_counts())
        if self._audit_logger:
            self._audit_logger.log_snapshot_imported(str(directory), result.to_counts())
        return result

    def load_snapshot(self, directory: PathLike) -> Snapshot:
        """
        Read and decode a dump directory without touching the ledger.

        Raises:
            SnapshotNotFoundError: accounts.dump is missing
            SnapshotIOError, SnapshotFormatError
        """
        storage = self._storage_factory(directory)

        accounts_text = storage.read_section(SnapshotSection.ACCOUNTS)
        payments_text = self._read_optional(storage, SnapshotSection.PAYMENTS)
        favorites_text = self._read_optional(storage, SnapshotSection.FAVORITES)

        return Snapshot(
            accounts=self._codec.decode_accounts(accounts_text),
            payments=self._codec.decode_payments(payments_text),
            favorites=self._codec.decode_favorites(favorites_text),
        )

    def _read_optional(
        self,
        storage: SnapshotStorageInterface,
        section: SnapshotSection,
    ) -> str:
        if not storage.has_section(section):
            logger.info("snapshot_section_missing", section=section.value)
            return ""
        return storage.read_section(section)

    # =========================================================================
    # Single-file accounts export/import
    # =========================================================================

    def export_accounts_to_file(self, path: PathLike) -> None:
        """
        Write only the accounts section to a file at an arbitrary path.

        An empty ledger writes an empty file.
        """
        path = Path(path)
        text = self._codec.encode_accounts(self._ledger.accounts())
        storage = FileSnapshotStorage(path.parent)
        try:
            storage.write_text(path, text)
        except StorageError as e:
            self._log_failure("export_accounts_to_file", e, path)
            raise

    def import_accounts_from_file(self, path: PathLike) -> ReconcileResult:
        """
        Merge accounts from a single file written by export_accounts_to_file().

        Accounts are upserted by id exactly as in import_snapshot().
        """
        path = Path(path)
        storage = FileSnapshotStorage(path.parent)
        try:
            snapshot = Snapshot(accounts=self._codec.decode_accounts(storage.read_text(path)))
            self._validator.validate(snapshot, self._ledger)
        except (StorageError, LedgerError) as e:
            self._log_failure("import_accounts_from_file", e, path)
            raise

        return ReconcileResult(accounts=self._reconciler.merge_accounts(snapshot.accounts))

    # =========================================================================
    # Backup
    # =========================================================================

    def backup(self, directory: PathLike, backup_directory: PathLike) -> list[SnapshotSection]:
        """
        Copy every existing dump file from one directory to another.

        The target directory must already exist. Copies are size-checked.

        Returns:
            Sections copied
        """
        source = FileSnapshotStorage(directory)
        target = FileSnapshotStorage(backup_directory)
        if not target.directory.is_dir():
            raise SnapshotIOError(
                f"Backup directory does not exist: {target.directory}",
                path=str(target.directory),
            )

        copied = []
        for section in SnapshotSection:
            if source.has_section(section):
                copy_file(source.path_for(section), target.path_for(section))
                copied.append(section)

        if self._audit_logger:
            self._audit_logger.log_snapshot_backed_up(
                str(directory), str(backup_directory), [s.value for s in copied]
            )
        return copied

    def _log_failure(self, operation: str, error: Exception, path: PathLike) -> None:
        if self._audit_logger:
            self._audit_logger.log_operation_failed(
                operation, error, details={"path": str(path)}
            )
