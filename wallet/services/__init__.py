"""Services package."""

from wallet.services.storage import (
    DumpDirectoryStorage,
    LedgerStorageInterface,
    PipeExportStorage,
    RecordParseError,
    StorageError,
    StorageFileNotFoundError,
)
from wallet.services.ledger import (
    AccountNotFoundError,
    AmountMustBePositiveError,
    FavoriteNotFoundError,
    LedgerError,
    LedgerService,
    NotEnoughBalanceError,
    PaymentAlreadyRejectedError,
    PaymentNotFoundError,
    PhoneAlreadyRegisteredError,
)

__all__ = [
    # Ledger
    "LedgerService",
    "AccountNotFoundError",
    "AmountMustBePositiveError",
    "FavoriteNotFoundError",
    "LedgerError",
    "NotEnoughBalanceError",
    "PaymentAlreadyRejectedError",
    "PaymentNotFoundError",
    "PhoneAlreadyRegisteredError",
    # Storage services
    "DumpDirectoryStorage",
    "LedgerStorageInterface",
    "PipeExportStorage",
    "RecordParseError",
    "StorageError",
    "StorageFileNotFoundError",
]
