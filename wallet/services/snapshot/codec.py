"""
Snapshot Codec

Converts the ledger's collections to and from the dump text format:
one record per row, fields joined by a field separator, rows joined by a
row separator, no trailing row separator.

    accounts:  id;phone;balance
    payments:  id;account_id;amount;category;status
    favorites: id;account_id;name;amount;category

DESIGN DECISION: There is no escaping. Instead of writing a value that
would split into extra fields or rows on the way back, encoding refuses
it with SnapshotFormatError.

Parsing is strict: a bad integer, a wrong column count or an unknown
status token fails the whole section. Blank rows are skipped, so a
trailing separator or an empty file decodes cleanly.
"""

import re
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from pydantic import ValidationError

from wallet.config import get_settings
from wallet.models.entities import Account, Favorite, Payment, PaymentStatus
from wallet.services.storage import SnapshotFormatError, SnapshotSection


T = TypeVar("T")

# Optional minus sign and ASCII digits only
_INTEGER = re.compile(r"-?[0-9]+")

# Column layout per section
ACCOUNT_COLUMNS = ("id", "phone", "balance")
PAYMENT_COLUMNS = ("id", "account_id", "amount", "category", "status")
FAVORITE_COLUMNS = ("id", "account_id", "name", "amount", "category")

SECTION_COLUMNS = {
    SnapshotSection.ACCOUNTS: ACCOUNT_COLUMNS,
    SnapshotSection.PAYMENTS: PAYMENT_COLUMNS,
    SnapshotSection.FAVORITES: FAVORITE_COLUMNS,
}


class SnapshotCodec:
    """
    Encodes and decodes snapshot sections.

    Separators default to the configured ones.
    """

    def __init__(
        self,
        field_separator: Optional[str] = None,
        row_separator: Optional[str] = None,
    ):
        settings = get_settings().ledger
        self.field_separator = field_separator or settings.field_separator
        self.row_separator = row_separator or settings.row_separator
        if (
            self.field_separator in self.row_separator
            or self.row_separator in self.field_separator
        ):
            raise ValueError("Field and row separators must be distinct")

    # =========================================================================
    # Encoding
    # =========================================================================

    def encode_accounts(self, accounts: Iterable[Account]) -> str:
        return self._encode(
            SnapshotSection.ACCOUNTS,
            ([str(a.id), a.phone, str(a.balance)] for a in accounts),
        )

    def encode_payments(self, payments: Iterable[Payment]) -> str:
        return self._encode(
            SnapshotSection.PAYMENTS,
            (
                [p.id, str(p.account_id), str(p.amount), p.category, p.status.value]
                for p in payments
            ),
        )

    def encode_favorites(self, favorites: Iterable[Favorite]) -> str:
        return self._encode(
            SnapshotSection.FAVORITES,
            (
                [f.id, str(f.account_id), f.name, str(f.amount), f.category]
                for f in favorites
            ),
        )

    def _encode(self, section: SnapshotSection, rows: Iterable[list[str]]) -> str:
        lines = []
        for row_number, fields in enumerate(rows, start=1):
            for column, value in zip(SECTION_COLUMNS[section], fields):
                self._check_value(section, row_number, column, value)
            lines.append(self.field_separator.join(fields))
        return self.row_separator.join(lines)

    def _check_value(
        self,
        section: SnapshotSection,
        row_number: int,
        column: str,
        value: str,
    ) -> None:
        if self.field_separator in value or self.row_separator in value:
            raise SnapshotFormatError(
                f"{column} {value!r} contains a separator and cannot be stored",
                section=section,
                row=row_number,
            )

    # =========================================================================
    # Decoding
    # =========================================================================

    def decode_accounts(self, text: str) -> list[Account]:
        def build(cols: Sequence[str], parse_int: Callable[[str, str], int]) -> Account:
            return Account(
                id=parse_int("id", cols[0]),
                phone=cols[1],
                balance=parse_int("balance", cols[2]),
            )
        return self._decode(SnapshotSection.ACCOUNTS, text, build)

    def decode_payments(self, text: str) -> list[Payment]:
        def build(cols: Sequence[str], parse_int: Callable[[str, str], int]) -> Payment:
            return Payment(
                id=cols[0],
                account_id=parse_int("account_id", cols[1]),
                amount=parse_int("amount", cols[2]),
                category=cols[3],
                status=PaymentStatus(cols[4]),
            )
        return self._decode(SnapshotSection.PAYMENTS, text, build)

    def decode_favorites(self, text: str) -> list[Favorite]:
        def build(cols: Sequence[str], parse_int: Callable[[str, str], int]) -> Favorite:
            return Favorite(
                id=cols[0],
                account_id=parse_int("account_id", cols[1]),
                name=cols[2],
                amount=parse_int("amount", cols[3]),
                category=cols[4],
            )
        return self._decode(SnapshotSection.FAVORITES, text, build)

    def _decode(
        self,
        section: SnapshotSection,
        text: str,
        build: Callable[[Sequence[str], Callable[[str, str], int]], T],
    ) -> list[T]:
        expected = len(SECTION_COLUMNS[section])
        records = []

        for row_number, row in enumerate(text.split(self.row_separator), start=1):
            if not row.strip():
                continue

            cols = row.split(self.field_separator)
            if len(cols) != expected:
                raise SnapshotFormatError(
                    f"expected {expected} fields, found {len(cols)}",
                    section=section,
                    row=row_number,
                )

            def parse_int(column: str, value: str) -> int:
                if not _INTEGER.fullmatch(value):
                    raise SnapshotFormatError(
                        f"{column} is not an integer: {value!r}",
                        section=section,
                        row=row_number,
                    )
                return int(value)

            try:
                records.append(build(cols, parse_int))
            except ValidationError as e:
                raise SnapshotFormatError(
                    f"invalid record: {e.errors()[0]['msg']}",
                    section=section,
                    row=row_number,
                ) from e
            except ValueError as e:
                # Unknown status token
                raise SnapshotFormatError(str(e), section=section, row=row_number) from e

        return records
