"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the snapshot codec and reconciler free of file handling
2. Use in-memory storage for testing
3. Swap the dump directory for another backend later

The interface is intentionally simple. A snapshot is three named text
sections; an audit trail is an append-only list of events.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from wallet.models.audit import AuditEvent, AuditEventType


class SnapshotSection(str, Enum):
    """
    The sections of a snapshot, in import order.

    Each section is stored as its own dump file.
    """
    ACCOUNTS = "accounts"
    PAYMENTS = "payments"
    FAVORITES = "favorites"

    @property
    def filename(self) -> str:
        return f"{self.value}.dump"


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot section storage.

    Any storage implementation (dump directory, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    def write_section(self, section: SnapshotSection, text: str) -> None:
        """
        Replace the stored text of a section.

        Args:
            section: Which section to write
            text: Encoded section content

        Raises:
            SnapshotIOError: If the write fails
        """
        pass

    @abstractmethod
    def read_section(self, section: SnapshotSection) -> str:
        """
        Read the stored text of a section.

        Args:
            section: Which section to read

        Returns:
            The full section content

        Raises:
            SnapshotNotFoundError: If the section was never written
            SnapshotIOError: If the read fails
        """
        pass

    @abstractmethod
    def has_section(self, section: SnapshotSection) -> bool:
        """
        Check whether a section exists in storage.

        Args:
            section: Which section to check

        Returns:
            True if the section can be read
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'account', 'payment')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return
            event_type: Only return events of this type

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SnapshotIOError(StorageError):
    """Reading or writing a dump file failed. The OSError is the __cause__."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SnapshotNotFoundError(SnapshotIOError):
    """A required snapshot section does not exist."""
    pass


class SnapshotFormatError(StorageError):
    """Snapshot text could not be encoded or decoded."""

    def __init__(
        self,
        message: str,
        section: Optional[SnapshotSection] = None,
        row: Optional[int] = None,
    ):
        location = ""
        if section is not None:
            location = f"{section.value}"
            if row is not None:
                location += f" row {row}"
            location += ": "
        super().__init__(f"{location}{message}")
        self.section = section
        self.row = row
