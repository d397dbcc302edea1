"""
Wallet - Source Package

An in-memory personal-finance ledger: accounts keyed by phone number,
payments against their balances, favorite payment templates, and
snapshots persisted as delimited text dump files.

DESIGN PRINCIPLES:
1. Balances only change through ledger operations
2. Fail early, fail visibly
3. No silent corrections (imports are validated, never repaired)
4. Every balance change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Wallet Team"
