"""Snapshot export, import and reconciliation."""

from wallet.services.snapshot.codec import SnapshotCodec
from wallet.services.snapshot.manager import SnapshotManager
from wallet.services.snapshot.reconciler import (
    Reconciler,
    ReconcileResult,
    SectionMergeCount,
)

__all__ = [
    "Reconciler",
    "ReconcileResult",
    "SectionMergeCount",
    "SnapshotCodec",
    "SnapshotManager",
]
