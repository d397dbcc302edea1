"""
Storage Services Package

Provides abstract interfaces and concrete implementations for snapshot
and audit storage. Snapshots are stored as dump files in a directory;
in-memory implementations exist for tests and storage-less runs.
"""

from wallet.services.storage.interface import (
    AuditStorageInterface,
    SnapshotFormatError,
    SnapshotIOError,
    SnapshotNotFoundError,
    SnapshotSection,
    SnapshotStorageInterface,
    StorageError,
)
from wallet.services.storage.filesystem import (
    FileSnapshotStorage,
    copy_file,
)
from wallet.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SnapshotSection",
    "SnapshotStorageInterface",
    # Exceptions
    "SnapshotFormatError",
    "SnapshotIOError",
    "SnapshotNotFoundError",
    "StorageError",
    # Dump directory implementation
    "FileSnapshotStorage",
    "copy_file",
    # In-memory implementations
    "InMemoryAuditStorage",
    "InMemorySnapshotStorage",
]
