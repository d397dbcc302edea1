"""Shared test constants and helpers."""

from wallet.ledger import Ledger


PHONE = "+992000000001"
OTHER_PHONE = "+992000000002"


def ledger_state(ledger: Ledger) -> dict:
    """Order-independent view of everything a ledger holds."""
    return {
        "accounts": sorted(
            (a.model_dump() for a in ledger.accounts()), key=lambda d: d["id"]
        ),
        "payments": sorted(
            (p.model_dump() for p in ledger.payments()), key=lambda d: d["id"]
        ),
        "favorites": sorted(
            (f.model_dump() for f in ledger.favorites()), key=lambda d: d["id"]
        ),
    }
