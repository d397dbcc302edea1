"""
Data Models Package

This package contains all Pydantic models used by the wallet ledger.
All data flowing through the ledger and its snapshots conforms to these schemas.
"""

from wallet.models.entities import (
    Account,
    Favorite,
    Payment,
    PaymentStatus,
    Snapshot,
    new_record_id,
)
from wallet.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entity models
    "Account",
    "Favorite",
    "Payment",
    "PaymentStatus",
    "Snapshot",
    "new_record_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
