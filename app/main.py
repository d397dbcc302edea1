"""
Demonstration script for the wallet ledger.

Registers an account, deposits, pays, and prints the balance after each
step. Ledger errors are shown as plain messages rather than tracebacks.

    python app/main.py
"""

from wallet.cli import describe_error
from wallet.ledger import Ledger, LedgerError


def main() -> None:
    """Main demonstration entry point."""
    ledger = Ledger()

    try:
        account = ledger.register_account("+992000000001")
        ledger.deposit(account.id, 100)
    except LedgerError as e:
        print(describe_error(e))
        return

    account, _ = ledger.find_account_by_id(account.id)
    print(account.balance)

    try:
        ledger.pay(account.id, 50, "auto")
    except LedgerError as e:
        print(describe_error(e))
        return

    account, _ = ledger.find_account_by_id(account.id)
    print(account.balance)


if __name__ == "__main__":
    main()
