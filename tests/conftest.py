"""Shared fixtures for the wallet tests."""

import itertools
import os

import pytest

from wallet.audit import AuditLogger
from wallet.config import LedgerSettings, get_settings
from wallet.services import LedgerService


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate every test from the caller's WALLET_* environment."""
    for name in list(os.environ):
        if name.startswith("WALLET_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def ledger(id_factory):
    return LedgerService(
        id_factory=id_factory,
        audit_logger=AuditLogger(history_size=500),
        settings=LedgerSettings(),
    )


@pytest.fixture
def funded_account(ledger):
    """An account holding 1000."""
    account = ledger.register_account("+992000000001")
    ledger.deposit(account.id, 1000)
    return account
