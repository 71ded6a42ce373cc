"""
Single-File Account Export

Layout: every account as `ID;Phone;Balance|`, concatenated into one
string with no newline:

    1;+992000000001;0|2;+992000000002;150|

Only accounts are stored. Loading always appends: records are never
matched against accounts already in memory, so loading the same file
twice duplicates every account. Fields are not escaped; a phone
containing `;` or `|` cannot be read back.
"""

from typing import TYPE_CHECKING, Optional

import structlog

from wallet.config import get_settings
from wallet.models.entities import Account
from wallet.services.storage.files import (
    parse_int,
    read_text,
    split_fields,
    split_records,
    write_text,
)
from wallet.services.storage.interface import LedgerStorageInterface

if TYPE_CHECKING:
    from wallet.services.ledger import LedgerService

logger = structlog.get_logger(__name__)

RECORD_TERMINATOR = "|"


class PipeExportStorage(LedgerStorageInterface):
    """Accounts-only snapshot in a single pipe-terminated file."""

    format_name = "export"

    def __init__(self, path: str, encoding: Optional[str] = None):
        self._path = str(path)
        self._encoding = encoding or get_settings().storage.encoding

    @property
    def location(self) -> str:
        return self._path

    def save(self, ledger: "LedgerService") -> dict[str, int]:
        content = "".join(
            f"{account.id};{account.phone};{account.balance}{RECORD_TERMINATOR}"
            for account in ledger.accounts
        )
        write_text(self._path, content, self._encoding)

        logger.debug("export_written", path=self._path, accounts=len(ledger.accounts))
        return {"accounts": len(ledger.accounts)}

    def load(self, ledger: "LedgerService") -> dict[str, int]:
        content = read_text(self._path, self._encoding)

        loaded = 0
        for number, record in enumerate(split_records(content, RECORD_TERMINATOR), start=1):
            account_id, phone, balance = split_fields(record, 3, self._path, number)
            ledger.restore_account(Account(
                id=parse_int(account_id, "id", self._path, number, record),
                phone=phone,
                balance=parse_int(balance, "balance", self._path, number, record),
            ))
            loaded += 1

        logger.debug("export_read", path=self._path, accounts=loaded)
        return {"accounts": loaded}
