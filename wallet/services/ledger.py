"""
Ledger Service

The ledger is the sole owner of accounts, payments and favorites.
Every mutation goes through it; snapshot formats and aggregation
read and write its collections but keep no state of their own.

DESIGN DECISION: Lookups are linear scans over insertion-ordered lists.
Iteration order is observable: account and favorite lookups return the
first match, payment lookups the last.

THREAD SAFETY: Not thread-safe. Callers must serialize access to one
ledger instance. Only sum_payments fans out to worker threads, and those
only read.

KNOWN BEHAVIOUR: reject() does not check the payment status by default,
so rejecting the same payment twice refunds it twice. Set
WALLET_LEDGER_GUARD_REJECT=true to refuse the second rejection.
"""

from typing import Callable, Optional
from uuid import uuid4

from wallet.audit import AuditLogger
from wallet.config import LedgerSettings, get_settings
from wallet.models.audit import AuditEventBuilder
from wallet.models.entities import Account, Favorite, Payment, PaymentStatus
from wallet.queries.aggregator import sum_payments
from wallet.services.storage import (
    DumpDirectoryStorage,
    LedgerStorageInterface,
    PipeExportStorage,
    StorageError,
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class PhoneAlreadyRegisteredError(LedgerError):
    """An account with this phone already exists."""

    def __init__(self, phone: str):
        self.phone = phone
        super().__init__(f"phone already registered: {phone}")


class AmountMustBePositiveError(LedgerError):
    """Amount is out of range for the operation."""

    def __init__(self, amount: int):
        self.amount = amount
        super().__init__(f"amount must be greater than zero, got {amount}")


class AccountNotFoundError(LedgerError):
    """No account has this ID."""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"account not found: {account_id}")


class NotEnoughBalanceError(LedgerError):
    """Balance does not cover the payment."""

    def __init__(self, account_id: int, balance: int, amount: int):
        self.account_id = account_id
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"account {account_id} has balance {balance}, cannot pay {amount}"
        )


class PaymentNotFoundError(LedgerError):
    """No payment has this ID."""

    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__(f"payment not found: {payment_id}")


class FavoriteNotFoundError(LedgerError):
    """No favorite has this ID."""

    def __init__(self, favorite_id: str):
        self.favorite_id = favorite_id
        super().__init__(f"favorite not found: {favorite_id}")


class PaymentAlreadyRejectedError(LedgerError):
    """Raised only when the reject guard is enabled."""

    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__(f"payment already rejected: {payment_id}")


def _new_id() -> str:
    return str(uuid4())


class LedgerService:
    """
    In-memory wallet ledger.

    Usage:
        ledger = LedgerService()
        account = ledger.register_account("+992000000001")
        ledger.deposit(account.id, 1_000)
        payment = ledger.pay(account.id, 250, "mobile")
        ledger.export("data")
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        """
        Initialize an empty ledger.

        Args:
            id_factory: Returns a fresh opaque ID for payments and favorites.
                        Defaults to uuid4 text.
            audit_logger: Receives an event for every mutation.
            settings: Ledger settings. Defaults to the environment.
        """
        self._id_factory = id_factory if id_factory is not None else _new_id
        self._audit = audit_logger if audit_logger is not None else AuditLogger()
        self._settings = settings if settings is not None else get_settings().ledger

        self._next_account_id = 0
        self._accounts: list[Account] = []
        self._payments: list[Payment] = []
        self._favorites: list[Favorite] = []

    # =========================================================================
    # COLLECTIONS
    # =========================================================================

    @property
    def accounts(self) -> list[Account]:
        return self._accounts

    @property
    def payments(self) -> list[Payment]:
        return self._payments

    @property
    def favorites(self) -> list[Favorite]:
        return self._favorites

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    def restore_account(self, account: Account) -> Account:
        """
        Append an account as-is, without a phone uniqueness check.

        The ID counter is raised so later registrations never reuse
        a restored ID.
        """
        self._accounts.append(account)
        self._next_account_id = max(self._next_account_id, account.id)
        return account

    def restore_payment(self, payment: Payment) -> Payment:
        """Append a payment as-is. Duplicate IDs are not checked."""
        self._payments.append(payment)
        return payment

    def restore_favorite(self, favorite: Favorite) -> Favorite:
        """Append a favorite as-is. Duplicate IDs are not checked."""
        self._favorites.append(favorite)
        return favorite

    def _refuse(
        self,
        operation: str,
        error: LedgerError,
        entity_type: Optional[str] = None,
        entity_id: Optional[object] = None,
    ) -> LedgerError:
        self._audit.log(AuditEventBuilder.operation_rejected(
            operation,
            error,
            entity_type=entity_type,
            entity_id=None if entity_id is None else str(entity_id),
        ))
        return error

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def register_account(self, phone: str) -> Account:
        """
        Register a new account with a zero balance.

        Raises:
            PhoneAlreadyRegisteredError: If any account already has this phone
        """
        for account in self._accounts:
            if account.phone == phone:
                raise self._refuse(
                    "register_account", PhoneAlreadyRegisteredError(phone),
                    "account", account.id,
                )

        self._next_account_id += 1
        account = Account(id=self._next_account_id, phone=phone, balance=0)
        self._accounts.append(account)

        self._audit.log(AuditEventBuilder.account_registered(account.id, phone))
        return account

    def find_account_by_id(self, account_id: int) -> Account:
        for account in self._accounts:
            if account.id == account_id:
                return account
        raise AccountNotFoundError(account_id)

    def deposit(self, account_id: int, amount: int) -> None:
        """
        Credit an account.

        Zero is accepted and changes nothing; only negative amounts
        are refused (pay refuses zero as well).

        Raises:
            AmountMustBePositiveError: If amount is negative
            AccountNotFoundError: If the account does not exist
        """
        if amount < 0:
            raise self._refuse(
                "deposit", AmountMustBePositiveError(amount), "account", account_id,
            )

        try:
            account = self.find_account_by_id(account_id)
        except AccountNotFoundError as e:
            raise self._refuse("deposit", e, "account", account_id)

        account.balance += amount
        self._audit.log(AuditEventBuilder.deposit_made(account.id, amount, account.balance))

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    def pay(self, account_id: int, amount: int, category: str) -> Payment:
        """
        Debit an account and record the payment as in progress.

        Raises:
            AmountMustBePositiveError: If amount is zero or negative
            AccountNotFoundError: If the account does not exist
            NotEnoughBalanceError: If the balance is below amount
        """
        if amount <= 0:
            raise self._refuse(
                "pay", AmountMustBePositiveError(amount), "account", account_id,
            )

        try:
            account = self.find_account_by_id(account_id)
        except AccountNotFoundError as e:
            raise self._refuse("pay", e, "account", account_id)

        if account.balance < amount:
            raise self._refuse(
                "pay",
                NotEnoughBalanceError(account.id, account.balance, amount),
                "account", account.id,
            )

        account.balance -= amount
        payment = Payment(
            id=self._id_factory(),
            account_id=account.id,
            amount=amount,
            category=category,
            status=PaymentStatus.IN_PROGRESS,
        )
        self._payments.append(payment)

        self._audit.log(AuditEventBuilder.payment_created(
            payment.id, account.id, amount, category,
        ))
        return payment

    def find_payment_by_id(self, payment_id: str) -> Payment:
        """Return the last payment with this ID."""
        found = None
        for payment in self._payments:
            if payment.id == payment_id:
                found = payment
        if found is None:
            raise PaymentNotFoundError(payment_id)
        return found

    def reject(self, payment_id: str) -> None:
        """
        Mark a payment as failed and refund its amount.

        Raises:
            PaymentNotFoundError: If the payment does not exist
            AccountNotFoundError: If the payment's account does not exist
            PaymentAlreadyRejectedError: If the reject guard is enabled
                and the payment is not in progress
        """
        try:
            payment = self.find_payment_by_id(payment_id)
            account = self.find_account_by_id(payment.account_id)
        except LedgerError as e:
            raise self._refuse("reject", e, "payment", payment_id)

        previous_status = payment.status
        if self._settings.guard_reject and previous_status != PaymentStatus.IN_PROGRESS:
            raise self._refuse(
                "reject", PaymentAlreadyRejectedError(payment_id), "payment", payment_id,
            )

        payment.status = PaymentStatus.FAIL
        account.balance += payment.amount

        self._audit.log(AuditEventBuilder.payment_rejected(
            payment.id, account.id, payment.amount, previous_status.value,
        ))

    def repeat(self, payment_id: str) -> Payment:
        """Pay again with the account, amount and category of an earlier payment."""
        payment = self.find_payment_by_id(payment_id)
        return self.pay(payment.account_id, payment.amount, payment.category)

    # =========================================================================
    # FAVORITES
    # =========================================================================

    def favorite_payment(self, payment_id: str, name: str) -> Favorite:
        """Save a payment as a named template."""
        payment = self.find_payment_by_id(payment_id)

        favorite = Favorite(
            id=self._id_factory(),
            account_id=payment.account_id,
            name=name,
            amount=payment.amount,
            category=payment.category,
        )
        self._favorites.append(favorite)

        self._audit.log(AuditEventBuilder.favorite_created(favorite.id, payment.id, name))
        return favorite

    def find_favorite_by_id(self, favorite_id: str) -> Favorite:
        for favorite in self._favorites:
            if favorite.id == favorite_id:
                return favorite
        raise FavoriteNotFoundError(favorite_id)

    def pay_from_favorite(self, favorite_id: str) -> Payment:
        favorite = self.find_favorite_by_id(favorite_id)
        return self.pay(favorite.account_id, favorite.amount, favorite.category)

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    def sum_payments(self, workers: Optional[int] = None) -> int:
        """
        Total amount of every payment, rejected ones included.

        Args:
            workers: Number of concurrent workers; 0 sums everything
                     in a single chunk. Defaults to the ledger setting.
        """
        if workers is None:
            workers = self._settings.default_workers
        return sum_payments(self._payments, workers)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save_to(self, storage: LedgerStorageInterface) -> dict[str, int]:
        try:
            counts = storage.save(self)
        except StorageError as e:
            self._audit.log(AuditEventBuilder.storage_error(
                storage.format_name, storage.location, e,
            ))
            raise
        self._audit.log(AuditEventBuilder.export_completed(
            storage.format_name, storage.location, counts,
        ))
        return counts

    def load_from(self, storage: LedgerStorageInterface) -> dict[str, int]:
        try:
            counts = storage.load(self)
        except StorageError as e:
            self._audit.log(AuditEventBuilder.storage_error(
                storage.format_name, storage.location, e,
            ))
            raise
        self._audit.log(AuditEventBuilder.import_completed(
            storage.format_name, storage.location, counts,
        ))
        return counts

    def export_to_file(self, path: Optional[str] = None) -> None:
        """Write every account to a single pipe-terminated file, overwriting it."""
        self.save_to(PipeExportStorage(path or get_settings().storage.export_file))

    def import_from_file(self, path: Optional[str] = None) -> None:
        """Append every account in a pipe-terminated file. Never merges."""
        self.load_from(PipeExportStorage(path or get_settings().storage.export_file))

    def export(self, directory: Optional[str] = None) -> None:
        """Write the non-empty collections to .dump files in a directory."""
        self.save_to(DumpDirectoryStorage(directory or get_settings().storage.dump_dir))

    def import_dump(self, directory: Optional[str] = None) -> None:
        """Merge .dump files from a directory by ID. Missing files are skipped."""
        self.load_from(DumpDirectoryStorage(directory or get_settings().storage.dump_dir))
