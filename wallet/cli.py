"""
Command-line driver for a ledger kept in a dump directory.

    python -m wallet --dir ./data register +992000000001
    python -m wallet --dir ./data deposit 1 100
    python -m wallet --dir ./data pay 1 50 auto
    python -m wallet --dir ./data show

Each command loads the snapshot (if one exists), applies one operation,
prints the result and exports the snapshot again.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from wallet.audit import AuditLogger, configure_logging
from wallet.config import get_settings
from wallet.ledger import (
    AccountNotFoundError,
    AmountMustBePositiveError,
    FavoriteNotFoundError,
    Ledger,
    LedgerError,
    NotEnoughBalanceError,
    PaymentAlreadyExecutedError,
    PaymentNotFoundError,
    PhoneAlreadyRegisteredError,
)
from wallet.services.snapshot import SnapshotManager
from wallet.services.storage import SnapshotSection, StorageError


# User-facing messages per error kind
ERROR_MESSAGES = {
    AmountMustBePositiveError: "Amount must be greater than zero",
    AccountNotFoundError: "Account not found",
    PaymentNotFoundError: "Payment not found",
    FavoriteNotFoundError: "Favorite not found",
    PhoneAlreadyRegisteredError: "This phone number is already registered",
    PaymentAlreadyExecutedError: "This payment can no longer be rejected",
    NotEnoughBalanceError: "Not enough money on the account",
}


def describe_error(error: Exception) -> str:
    """Short user-facing message for a ledger or storage error."""
    for error_type, message in ERROR_MESSAGES.items():
        if isinstance(error, error_type):
            return f"{message} ({error})"
    return str(error)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="wallet",
        description="Operate on a wallet ledger stored in a dump directory",
    )
    p.add_argument(
        "--dir",
        type=Path,
        default=None,
        help="Dump directory (default: WALLET_DUMP_DIRECTORY or ./data)",
    )
    sub = p.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Register an account")
    register.add_argument("phone")

    deposit = sub.add_parser("deposit", help="Deposit to an account")
    deposit.add_argument("account_id", type=int)
    deposit.add_argument("amount", type=int)

    pay = sub.add_parser("pay", help="Pay from an account")
    pay.add_argument("account_id", type=int)
    pay.add_argument("amount", type=int)
    pay.add_argument("category")

    reject = sub.add_parser("reject", help="Reject an in-progress payment")
    reject.add_argument("payment_id")

    repeat = sub.add_parser("repeat", help="Repeat a payment")
    repeat.add_argument("payment_id")

    favorite = sub.add_parser("favorite", help="Save a payment as a favorite")
    favorite.add_argument("payment_id")
    favorite.add_argument("name")

    pay_favorite = sub.add_parser("pay-favorite", help="Pay from a favorite")
    pay_favorite.add_argument("favorite_id")

    sub.add_parser("show", help="Print all accounts, payments and favorites")

    backup = sub.add_parser("backup", help="Copy the dump files to another directory")
    backup.add_argument("target", type=Path)

    return p.parse_args(argv)


def build_manager(audit: bool = True) -> SnapshotManager:
    audit_logger = AuditLogger() if audit else None
    return SnapshotManager(Ledger(audit_logger=audit_logger), audit_logger=audit_logger)


def run_command(manager: SnapshotManager, args) -> Optional[str]:
    """Apply one command to the ledger. Returns the text to print."""
    ledger = manager.ledger

    if args.command == "register":
        account = ledger.register_account(args.phone)
        return f"account {account.id} registered for {account.phone}"
    if args.command == "deposit":
        ledger.deposit(args.account_id, args.amount)
        account, _ = ledger.find_account_by_id(args.account_id)
        return f"account {account.id} balance {account.balance}"
    if args.command == "pay":
        payment = ledger.pay(args.account_id, args.amount, args.category)
        return f"payment {payment.id} {payment.status.value}"
    if args.command == "reject":
        ledger.reject(args.payment_id)
        return f"payment {args.payment_id} rejected"
    if args.command == "repeat":
        payment = ledger.repeat(args.payment_id)
        return f"payment {payment.id} {payment.status.value}"
    if args.command == "favorite":
        favorite = ledger.favorite_payment(args.payment_id, args.name)
        return f"favorite {favorite.id} saved as {favorite.name}"
    if args.command == "pay-favorite":
        payment = ledger.pay_from_favorite(args.favorite_id)
        return f"payment {payment.id} {payment.status.value}"
    if args.command == "show":
        lines = [f"account {a.id} {a.phone} balance {a.balance}" for a in ledger.accounts()]
        lines += [
            f"payment {p.id} account {p.account_id} {p.amount} {p.category} {p.status.value}"
            for p in ledger.payments()
        ]
        lines += [
            f"favorite {f.id} '{f.name}' account {f.account_id} {f.amount} {f.category}"
            for f in ledger.favorites()
        ]
        return "\n".join(lines) if lines else "ledger is empty"
    return None


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings().ledger
    configure_logging(settings.log_level)

    directory = args.dir or settings.dump_directory
    manager = build_manager()

    try:
        if args.command == "backup":
            copied = manager.backup(directory, args.target)
            print(f"copied {', '.join(s.value for s in copied) or 'nothing'}")
            return 0

        if (directory / SnapshotSection.ACCOUNTS.filename).is_file():
            manager.import_snapshot(directory)

        output = run_command(manager, args)
        if args.command != "show":
            directory.mkdir(parents=True, exist_ok=True)
            manager.export_snapshot(directory)
    except (LedgerError, StorageError) as e:
        print(describe_error(e), file=sys.stderr)
        return 1

    if output:
        print(output)
    return 0
