"""
Audit Logger

DESIGN DECISION: Every balance-affecting operation in the ledger is logged.
This provides:
1. Complete traceability of balances
2. Debugging capability for rejected imports
3. A history of failed operations

The audit logger:
- Is synchronous, like the ledger that calls it
- Gracefully handles failures (never fails a ledger operation because logging failed)
- Optionally persists events through an AuditStorageInterface
"""

import logging
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from wallet.models.audit import AuditEvent, AuditEventBuilder
from wallet.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through a stdlib handler at the given level."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("wallet.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def _emit(self, build: Callable[..., AuditEvent], *args, **kwargs) -> bool:
        """
        Build an event and log it.

        An event that fails model validation is logged and dropped; the
        operation that produced it has already happened.
        """
        try:
            event = build(*args, **kwargs)
        except ValidationError as e:
            self._logger.error(
                "audit_event_invalid",
                builder=build.__name__,
                error=str(e),
            )
            return False
        return self.log(event)

    def log_account_registered(self, account_id: int, phone: str) -> None:
        self._emit(AuditEventBuilder.account_registered, account_id, phone)

    def log_deposit(self, account_id: int, amount: int, balance: int) -> None:
        self._emit(AuditEventBuilder.deposit_made, account_id, amount, balance)

    def log_payment_created(
        self,
        payment_id: str,
        account_id: int,
        amount: int,
        category: str,
    ) -> None:
        self._emit(
            AuditEventBuilder.payment_created,
            payment_id=payment_id,
            account_id=account_id,
            amount=amount,
            category=category,
        )

    def log_payment_rejected(self, payment_id: str, account_id: int, amount: int) -> None:
        self._emit(AuditEventBuilder.payment_rejected, payment_id, account_id, amount)

    def log_payment_repeated(self, original_id: str, payment_id: str) -> None:
        self._emit(AuditEventBuilder.payment_repeated, original_id, payment_id)

    def log_favorite_created(self, favorite_id: str, payment_id: str, name: str) -> None:
        self._emit(AuditEventBuilder.favorite_created, favorite_id, payment_id, name)

    def log_favorite_paid(self, favorite_id: str, payment_id: str) -> None:
        self._emit(AuditEventBuilder.favorite_paid, favorite_id, payment_id)

    def log_snapshot_exported(self, directory: str, sections: list[str]) -> None:
        self._emit(AuditEventBuilder.snapshot_exported, directory, sections)

    def log_snapshot_imported(self, directory: str, counts: dict[str, int]) -> None:
        self._emit(AuditEventBuilder.snapshot_imported, directory, counts)

    def log_snapshot_backed_up(self, source: str, target: str, sections: list[str]) -> None:
        self._emit(AuditEventBuilder.snapshot_backed_up, source, target, sections)

    def log_operation_failed(
        self,
        operation: str,
        error: Exception,
        details: Optional[dict] = None,
    ) -> None:
        """Log a ledger or snapshot operation that raised."""
        self._emit(AuditEventBuilder.operation_failed, operation, error, details)
