"""
Audit Models for the Wallet Ledger

Every balance-affecting operation and every snapshot transfer is logged.
This provides:
1. Traceability of how a balance reached its current value
2. Debugging information when an import is rejected
3. A record of failed operations alongside successful ones

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger operation and snapshot flow has its own event type.
    """
    # Accounts
    ACCOUNT_REGISTERED = "account_registered"
    DEPOSIT_MADE = "deposit_made"

    # Payments
    PAYMENT_CREATED = "payment_created"
    PAYMENT_REJECTED = "payment_rejected"
    PAYMENT_REPEATED = "payment_repeated"

    # Favorites
    FAVORITE_CREATED = "favorite_created"
    FAVORITE_PAID = "favorite_paid"

    # Persistence
    SNAPSHOT_EXPORTED = "snapshot_exported"
    SNAPSHOT_IMPORTED = "snapshot_imported"
    SNAPSHOT_BACKED_UP = "snapshot_backed_up"

    # Failures
    OPERATION_FAILED = "operation_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'payment', 'snapshot')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_registered(account_id, phone)
        event = AuditEventBuilder.payment_rejected(payment_id, account_id, amount)
    """

    @staticmethod
    def account_registered(account_id: int, phone: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_REGISTERED,
            entity_type="account",
            entity_id=str(account_id),
            description=f"Account {account_id} registered",
            details={
                "phone": phone,
            },
        )

    @staticmethod
    def deposit_made(account_id: int, amount: int, balance: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_MADE,
            entity_type="account",
            entity_id=str(account_id),
            description=f"Deposited {amount} to account {account_id}",
            details={
                "amount": amount,
                "balance": balance,
            },
        )

    @staticmethod
    def payment_created(
        payment_id: str,
        account_id: int,
        amount: int,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CREATED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment of {amount} from account {account_id}",
            details={
                "account_id": account_id,
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def payment_rejected(payment_id: str, account_id: int, amount: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_REJECTED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment rejected, {amount} returned to account {account_id}",
            details={
                "account_id": account_id,
                "amount": amount,
            },
        )

    @staticmethod
    def payment_repeated(original_id: str, payment_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_REPEATED,
            entity_type="payment",
            entity_id=payment_id,
            description="Payment repeated",
            details={
                "original_payment_id": original_id,
            },
        )

    @staticmethod
    def favorite_created(favorite_id: str, payment_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAVORITE_CREATED,
            entity_type="favorite",
            entity_id=favorite_id,
            description="Payment saved as a favorite",
            details={
                "payment_id": payment_id,
                "name": name,
            },
        )

    @staticmethod
    def favorite_paid(favorite_id: str, payment_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAVORITE_PAID,
            entity_type="payment",
            entity_id=payment_id,
            description="Payment made from a favorite",
            details={
                "favorite_id": favorite_id,
            },
        )

    @staticmethod
    def snapshot_exported(directory: str, sections: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_EXPORTED,
            entity_type="snapshot",
            description="Snapshot exported",
            details={
                "directory": directory,
                "sections": sections,
            },
        )

    @staticmethod
    def snapshot_imported(directory: str, counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_IMPORTED,
            entity_type="snapshot",
            description="Snapshot imported",
            details={
                "directory": directory,
                **counts,
            },
        )

    @staticmethod
    def snapshot_backed_up(source: str, target: str, sections: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_BACKED_UP,
            entity_type="snapshot",
            description="Snapshot backed up",
            details={
                "source": source,
                "target": target,
                "sections": sections,
            },
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error: Exception,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Operation failed: {operation}",
            error_code=type(error).__name__,
            error_message=str(error),
            details={
                "operation": operation,
                **(details or {}),
            },
        )
