"""
Storage Services Package

Provides the abstract snapshot interface and the two flat-file formats:
a single pipe-terminated account export and a per-entity dump directory.
"""

from wallet.services.storage.interface import (
    LedgerStorageInterface,
    RecordParseError,
    StorageError,
    StorageFileNotFoundError,
)
from wallet.services.storage.export_file import PipeExportStorage
from wallet.services.storage.dump_dir import DumpDirectoryStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "RecordParseError",
    "StorageError",
    "StorageFileNotFoundError",
    # Formats
    "DumpDirectoryStorage",
    "PipeExportStorage",
]
