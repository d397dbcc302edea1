"""
In-Memory Storage Implementations

Used when no persistence is configured, and in tests.
"""

from typing import Optional

from wallet.models.audit import AuditEvent, AuditEventType
from wallet.services.storage.interface import (
    AuditStorageInterface,
    SnapshotNotFoundError,
    SnapshotSection,
    SnapshotStorageInterface,
)


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Keeps section text in a dict keyed by section."""

    def __init__(self, sections: Optional[dict[SnapshotSection, str]] = None):
        self._sections: dict[SnapshotSection, str] = dict(sections or {})

    def write_section(self, section: SnapshotSection, text: str) -> None:
        self._sections[section] = text

    def read_section(self, section: SnapshotSection) -> str:
        try:
            return self._sections[section]
        except KeyError:
            raise SnapshotNotFoundError(f"Snapshot section not found: {section.value}")

    def has_section(self, section: SnapshotSection) -> bool:
        return section in self._sections


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Append-only list of audit events.

    Audit events are append-only.
    """

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if event_type is None or e.event_type == event_type
        ]
        # Newest first; insertion order breaks timestamp ties
        events = list(reversed(events))
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

    def __len__(self) -> int:
        return len(self._events)
