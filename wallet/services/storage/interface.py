"""
Abstract Storage Interface

DESIGN DECISION: Snapshot formats are adapters behind one small interface.
Each adapter owns only its target location; the ledger owns every entity.
An adapter reads the ledger's collections on save and writes into them
on load, so it never holds state of its own.

The interface is intentionally simple: save everything, load everything.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from wallet.services.ledger import LedgerService


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Implementations differ in layout and in how a load treats
    entities that already exist in memory.
    """

    #: Short format name used in logs and audit events
    format_name: str = ""

    @property
    @abstractmethod
    def location(self) -> str:
        """Path of the file or directory this storage targets."""
        pass

    @abstractmethod
    def save(self, ledger: "LedgerService") -> dict[str, int]:
        """
        Write a snapshot of the ledger.

        Args:
            ledger: The ledger to snapshot

        Returns:
            Number of records written per entity type

        Raises:
            StorageFileNotFoundError: If a file cannot be opened or written
        """
        pass

    @abstractmethod
    def load(self, ledger: "LedgerService") -> dict[str, int]:
        """
        Read a snapshot into the ledger.

        Not atomic: records processed before a failure stay applied.

        Args:
            ledger: The ledger to load into

        Returns:
            Number of records read per entity type

        Raises:
            StorageFileNotFoundError: If a file cannot be opened or read
            RecordParseError: If a record is malformed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageFileNotFoundError(StorageError):
    """A snapshot file could not be opened, read or written."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"file not found: {path}")


class RecordParseError(StorageError, ValueError):
    """A persisted record could not be parsed."""

    def __init__(self, path: str, line_number: int, record: str, reason: str):
        self.path = path
        self.line_number = line_number
        self.record = record
        self.reason = reason
        super().__init__(f"{path}:{line_number}: {reason}: {record!r}")
