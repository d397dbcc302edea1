"""Snapshot validation package."""

from wallet.validation.validator import SnapshotValidator

__all__ = ["SnapshotValidator"]
