"""
Per-Entity Dump Directory

Layout: one file per entity type inside a directory, one
`\\n`-terminated, `;`-separated line per record:

    accounts.dump    ID;Phone;Balance
    payments.dump    ID;AccountID;Amount;Category;Status
    favorites.dump   ID;AccountID;Amount;Category

A file is only written when its collection is non-empty, and a missing
file is skipped on load. Favorite names are not stored.

Loading merges by ID: an entity already in memory with the same ID has
its fields overwritten in place, anything else is appended. This is the
opposite of the single-file export, which always appends.
"""

import os
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from wallet.config import get_settings
from wallet.models.entities import Account, Favorite, Payment, PaymentStatus
from wallet.services.storage.files import (
    parse_int,
    read_text,
    split_fields,
    split_records,
    write_text,
)
from wallet.services.storage.interface import LedgerStorageInterface, RecordParseError

if TYPE_CHECKING:
    from wallet.services.ledger import LedgerService

logger = structlog.get_logger(__name__)

ACCOUNTS_FILE = "accounts.dump"
PAYMENTS_FILE = "payments.dump"
FAVORITES_FILE = "favorites.dump"

LINE_TERMINATOR = "\n"


def _account_line(account: Account) -> str:
    return f"{account.id};{account.phone};{account.balance}"


def _payment_line(payment: Payment) -> str:
    return (
        f"{payment.id};{payment.account_id};{payment.amount};"
        f"{payment.category};{payment.status.value}"
    )


def _favorite_line(favorite: Favorite) -> str:
    return f"{favorite.id};{favorite.account_id};{favorite.amount};{favorite.category}"


class DumpDirectoryStorage(LedgerStorageInterface):
    """Full ledger snapshot as three dump files in one directory."""

    format_name = "dump"

    def __init__(self, directory: str, encoding: Optional[str] = None):
        self._directory = str(directory)
        self._encoding = encoding or get_settings().storage.encoding

    @property
    def location(self) -> str:
        return self._directory

    def _path(self, filename: str) -> str:
        return os.path.join(self._directory, filename)

    # =========================================================================
    # SAVE
    # =========================================================================

    def save(self, ledger: "LedgerService") -> dict[str, int]:
        counts = {}
        sections = (
            ("accounts", ACCOUNTS_FILE, ledger.accounts, _account_line),
            ("payments", PAYMENTS_FILE, ledger.payments, _payment_line),
            ("favorites", FAVORITES_FILE, ledger.favorites, _favorite_line),
        )
        for name, filename, items, to_line in sections:
            counts[name] = len(items)
            if not items:
                continue
            content = "".join(to_line(item) + LINE_TERMINATOR for item in items)
            write_text(self._path(filename), content, self._encoding)

        logger.debug("dump_written", directory=self._directory, **counts)
        return counts

    # =========================================================================
    # LOAD
    # =========================================================================

    def load(self, ledger: "LedgerService") -> dict[str, int]:
        counts = {
            "accounts": self._load_file(ACCOUNTS_FILE, ledger, self._merge_account),
            "payments": self._load_file(PAYMENTS_FILE, ledger, self._merge_payment),
            "favorites": self._load_file(FAVORITES_FILE, ledger, self._merge_favorite),
        }
        logger.debug("dump_read", directory=self._directory, **counts)
        return counts

    def _load_file(
        self,
        filename: str,
        ledger: "LedgerService",
        merge: Callable[["LedgerService", str, str, int], None],
    ) -> int:
        path = self._path(filename)
        if not os.path.exists(path):
            logger.debug("dump_file_missing", path=path)
            return 0

        content = read_text(path, self._encoding)
        loaded = 0
        for number, line in enumerate(split_records(content, LINE_TERMINATOR), start=1):
            merge(ledger, line, path, number)
            loaded += 1
        return loaded

    @staticmethod
    def _merge_account(ledger: "LedgerService", line: str, path: str, number: int) -> None:
        account_id, phone, balance = split_fields(line, 3, path, number)
        account_id = parse_int(account_id, "id", path, number, line)
        balance = parse_int(balance, "balance", path, number, line)

        matched = False
        for account in ledger.accounts:
            if account.id == account_id:
                account.phone = phone
                account.balance = balance
                matched = True
        if not matched:
            ledger.restore_account(Account(id=account_id, phone=phone, balance=balance))

    @staticmethod
    def _merge_payment(ledger: "LedgerService", line: str, path: str, number: int) -> None:
        payment_id, account_id, amount, category, status = split_fields(line, 5, path, number)
        account_id = parse_int(account_id, "account id", path, number, line)
        amount = parse_int(amount, "amount", path, number, line)
        try:
            status = PaymentStatus(status)
        except ValueError as e:
            raise RecordParseError(path, number, line, f"invalid status {status!r}") from e

        matched = False
        for payment in ledger.payments:
            if payment.id == payment_id:
                payment.account_id = account_id
                payment.amount = amount
                payment.category = category
                payment.status = status
                matched = True
        if not matched:
            ledger.restore_payment(Payment(
                id=payment_id,
                account_id=account_id,
                amount=amount,
                category=category,
                status=status,
            ))

    @staticmethod
    def _merge_favorite(ledger: "LedgerService", line: str, path: str, number: int) -> None:
        favorite_id, account_id, amount, category = split_fields(line, 4, path, number)
        account_id = parse_int(account_id, "account id", path, number, line)
        amount = parse_int(amount, "amount", path, number, line)

        matched = False
        for favorite in ledger.favorites:
            if favorite.id == favorite_id:
                favorite.account_id = account_id
                favorite.amount = amount
                favorite.category = category
                matched = True
        if not matched:
            ledger.restore_favorite(Favorite(
                id=favorite_id,
                account_id=account_id,
                amount=amount,
                category=category,
            ))
