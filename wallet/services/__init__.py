"""Services package."""

from wallet.services.storage import (
    AuditStorageInterface,
    FileSnapshotStorage,
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
    SnapshotFormatError,
    SnapshotIOError,
    SnapshotNotFoundError,
    SnapshotSection,
    SnapshotStorageInterface,
    StorageError,
    copy_file,
)

__all__ = [
    "AuditStorageInterface",
    "FileSnapshotStorage",
    "InMemoryAuditStorage",
    "InMemorySnapshotStorage",
    "SnapshotFormatError",
    "SnapshotIOError",
    "SnapshotNotFoundError",
    "SnapshotSection",
    "SnapshotStorageInterface",
    "StorageError",
    "copy_file",
]
