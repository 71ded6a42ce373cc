"""
File helpers shared by the snapshot formats.

Every OSError is logged and translated to StorageFileNotFoundError.
Close failures are logged only: the data has already been handed to the OS.
"""

import re
from typing import IO

import structlog

from wallet.services.storage.interface import RecordParseError, StorageFileNotFoundError

logger = structlog.get_logger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _close_quietly(handle: IO[str], path: str) -> None:
    try:
        handle.close()
    except OSError as e:
        logger.warning("file_close_failed", path=path, error=str(e))


def write_text(path: str, content: str, encoding: str) -> None:
    """Create or truncate `path` and write `content` verbatim."""
    try:
        # newline="" keeps "\n" as-is on every platform
        handle = open(path, "w", encoding=encoding, newline="")
    except OSError as e:
        logger.error("file_open_failed", path=path, mode="write", error=str(e))
        raise StorageFileNotFoundError(path) from e

    try:
        handle.write(content)
    except OSError as e:
        logger.error("file_write_failed", path=path, error=str(e))
        raise StorageFileNotFoundError(path) from e
    finally:
        _close_quietly(handle, path)


def read_text(path: str, encoding: str) -> str:
    """Read the whole of `path`."""
    try:
        handle = open(path, "r", encoding=encoding, newline="")
    except OSError as e:
        logger.error("file_open_failed", path=path, mode="read", error=str(e))
        raise StorageFileNotFoundError(path) from e

    try:
        return handle.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("file_read_failed", path=path, error=str(e))
        raise StorageFileNotFoundError(path) from e
    finally:
        _close_quietly(handle, path)


def split_records(content: str, terminator: str) -> list[str]:
    """
    Split on `terminator` and drop the final segment.

    The final segment is the empty string after the last terminator;
    trailing text without a terminator is dropped with it.
    """
    return content.split(terminator)[:-1]


def split_fields(
    record: str,
    expected: int,
    path: str,
    line_number: int,
) -> list[str]:
    fields = record.split(";")
    if len(fields) != expected:
        raise RecordParseError(
            path,
            line_number,
            record,
            f"expected {expected} fields, got {len(fields)}",
        )
    return fields


def parse_int(
    value: str,
    field: str,
    path: str,
    line_number: int,
    record: str,
) -> int:
    """Parse a base-10 integer field: optional sign, digits only."""
    if not _INTEGER.fullmatch(value):
        raise RecordParseError(path, line_number, record, f"invalid {field} {value!r}")
    return int(value)
