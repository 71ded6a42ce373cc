"""
Tests for the Ledger Service

Covers registration, deposits, payments, rejections, repeats and
favorites, including the deliberate quirks:
- deposit accepts zero while pay does not
- rejecting twice refunds twice unless the guard is enabled
- duplicate payment IDs resolve to the last one added
"""

import pytest

from wallet.audit import AuditLogger
from wallet.config import LedgerSettings
from wallet.models import AuditEventType, Payment, PaymentStatus
from wallet.services import (
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


class TestRegistration:
    """Tests for register_account and find_account_by_id."""

    def test_register_assigns_sequential_ids(self, ledger):
        """IDs start at 1 and increase by one."""
        first = ledger.register_account("+992000000001")
        second = ledger.register_account("+992000000002")
        assert (first.id, second.id) == (1, 2)
        assert first.balance == 0

    def test_duplicate_phone_rejected(self, ledger):
        """A second registration with the same phone fails and adds nothing."""
        ledger.register_account("+992000000001")
        with pytest.raises(PhoneAlreadyRegisteredError) as exc:
            ledger.register_account("+992000000001")
        assert exc.value.phone == "+992000000001"
        assert len(ledger.accounts) == 1

    def test_failed_registration_does_not_consume_id(self, ledger):
        """The ID counter only moves on success."""
        ledger.register_account("+1")
        with pytest.raises(PhoneAlreadyRegisteredError):
            ledger.register_account("+1")
        assert ledger.register_account("+2").id == 2

    def test_find_account(self, ledger):
        account = ledger.register_account("+1")
        assert ledger.find_account_by_id(account.id) is account

    def test_find_missing_account(self, ledger):
        with pytest.raises(AccountNotFoundError):
            ledger.find_account_by_id(42)

    def test_errors_share_base_class(self, ledger):
        """All ledger refusals can be caught as LedgerError."""
        with pytest.raises(LedgerError):
            ledger.find_account_by_id(42)


class TestDeposit:
    """Tests for deposit."""

    def test_deposit_credits_balance(self, ledger):
        account = ledger.register_account("+1")
        ledger.deposit(account.id, 500)
        assert account.balance == 500

    def test_deposit_zero_is_accepted(self, ledger):
        """Zero is a no-op, unlike pay."""
        account = ledger.register_account("+1")
        ledger.deposit(account.id, 0)
        assert account.balance == 0

    def test_deposit_negative_rejected(self, ledger):
        account = ledger.register_account("+1")
        with pytest.raises(AmountMustBePositiveError):
            ledger.deposit(account.id, -1)
        assert account.balance == 0

    def test_deposit_amount_checked_before_account(self, ledger):
        """A negative amount fails even for an unknown account."""
        with pytest.raises(AmountMustBePositiveError):
            ledger.deposit(99, -5)

    def test_deposit_to_missing_account(self, ledger):
        with pytest.raises(AccountNotFoundError):
            ledger.deposit(99, 10)


class TestPay:
    """Tests for pay."""

    def test_pay_debits_and_records(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 300, "mobile")
        assert funded_account.balance == 700
        assert payment.id == "id-1"
        assert payment.account_id == funded_account.id
        assert payment.amount == 300
        assert payment.category == "mobile"
        assert payment.status == PaymentStatus.IN_PROGRESS
        assert ledger.payments == [payment]

    @pytest.mark.parametrize("amount", [0, -1, -1000])
    def test_pay_non_positive_rejected(self, ledger, funded_account, amount):
        with pytest.raises(AmountMustBePositiveError):
            ledger.pay(funded_account.id, amount, "mobile")
        assert funded_account.balance == 1000
        assert ledger.payments == []

    def test_pay_amount_checked_before_account(self, ledger):
        """Amount validation happens regardless of account state."""
        with pytest.raises(AmountMustBePositiveError):
            ledger.pay(99, 0, "mobile")

    def test_pay_missing_account(self, ledger):
        with pytest.raises(AccountNotFoundError):
            ledger.pay(99, 10, "mobile")

    def test_pay_not_enough_balance(self, ledger, funded_account):
        with pytest.raises(NotEnoughBalanceError) as exc:
            ledger.pay(funded_account.id, 1001, "mobile")
        assert exc.value.balance == 1000
        assert exc.value.amount == 1001
        assert funded_account.balance == 1000
        assert ledger.payments == []

    def test_pay_whole_balance(self, ledger, funded_account):
        ledger.pay(funded_account.id, 1000, "rent")
        assert funded_account.balance == 0

    def test_payment_ids_are_unique_by_default(self):
        ledger = LedgerService(settings=LedgerSettings())
        account = ledger.register_account("+1")
        ledger.deposit(account.id, 100)
        first = ledger.pay(account.id, 10, "a")
        second = ledger.pay(account.id, 10, "a")
        assert first.id != second.id


class TestFindPayment:
    """Tests for find_payment_by_id."""

    def test_find_payment(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 10, "food")
        assert ledger.find_payment_by_id(payment.id) is payment

    def test_find_missing_payment(self, ledger):
        with pytest.raises(PaymentNotFoundError):
            ledger.find_payment_by_id("nope")

    def test_duplicate_ids_last_wins(self, ledger):
        """With two payments sharing an ID the one added last is returned."""
        first = Payment(id="dup", account_id=1, amount=10, category="a")
        second = Payment(id="dup", account_id=1, amount=20, category="b")
        ledger.restore_payment(first)
        ledger.restore_payment(second)
        assert ledger.find_payment_by_id("dup") is second


class TestReject:
    """Tests for reject."""

    def test_reject_refunds_and_fails(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 400, "mobile")
        ledger.reject(payment.id)
        assert payment.status == PaymentStatus.FAIL
        assert funded_account.balance == 1000

    def test_double_reject_refunds_twice(self, ledger, funded_account):
        """No status check: a second rejection credits the amount again."""
        payment = ledger.pay(funded_account.id, 400, "mobile")
        ledger.reject(payment.id)
        ledger.reject(payment.id)
        assert funded_account.balance == 1400

    def test_double_reject_is_audited_as_warning(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 400, "mobile")
        ledger.reject(payment.id)
        ledger.reject(payment.id)
        rejections = [
            event for event in ledger.audit.get_events_by_entity("payment", payment.id)
            if event.event_type == AuditEventType.PAYMENT_REJECTED
        ]
        assert [event.details["repeated"] for event in rejections] == [False, True]

    def test_reject_guard_refuses_second_rejection(self, id_factory):
        ledger = LedgerService(
            id_factory=id_factory,
            settings=LedgerSettings(guard_reject=True),
        )
        account = ledger.register_account("+1")
        ledger.deposit(account.id, 1000)
        payment = ledger.pay(account.id, 400, "mobile")
        ledger.reject(payment.id)
        with pytest.raises(PaymentAlreadyRejectedError):
            ledger.reject(payment.id)
        assert account.balance == 1000

    def test_reject_guard_from_environment(self, monkeypatch, id_factory):
        monkeypatch.setenv("WALLET_LEDGER_GUARD_REJECT", "true")
        ledger = LedgerService(id_factory=id_factory)
        account = ledger.register_account("+1")
        ledger.deposit(account.id, 100)
        payment = ledger.pay(account.id, 100, "mobile")
        ledger.reject(payment.id)
        with pytest.raises(PaymentAlreadyRejectedError):
            ledger.reject(payment.id)

    def test_reject_missing_payment(self, ledger):
        with pytest.raises(PaymentNotFoundError):
            ledger.reject("nope")

    def test_reject_payment_of_missing_account(self, ledger):
        ledger.restore_payment(Payment(id="orphan", account_id=7, amount=5))
        with pytest.raises(AccountNotFoundError):
            ledger.reject("orphan")

    def test_balance_equation(self, ledger):
        """Balance = deposits - kept payments; each rejection is a full refund."""
        account = ledger.register_account("+1")
        ledger.deposit(account.id, 1000)
        ledger.deposit(account.id, 250)
        kept = ledger.pay(account.id, 300, "a")
        rejected = ledger.pay(account.id, 200, "b")
        ledger.pay(account.id, 50, "c")
        ledger.reject(rejected.id)

        assert kept.status == PaymentStatus.IN_PROGRESS
        assert account.balance == 1000 + 250 - 300 - 50


class TestRepeatAndFavorites:
    """Tests for repeat, favorite_payment and pay_from_favorite."""

    def test_repeat_creates_new_payment(self, ledger, funded_account):
        original = ledger.pay(funded_account.id, 100, "internet")
        repeated = ledger.repeat(original.id)
        assert repeated.id != original.id
        assert (repeated.account_id, repeated.amount, repeated.category) == (
            funded_account.id, 100, "internet",
        )
        assert funded_account.balance == 800
        assert len(ledger.payments) == 2

    def test_repeat_checks_balance(self, ledger, funded_account):
        original = ledger.pay(funded_account.id, 600, "rent")
        with pytest.raises(NotEnoughBalanceError):
            ledger.repeat(original.id)

    def test_repeat_missing_payment(self, ledger):
        with pytest.raises(PaymentNotFoundError):
            ledger.repeat("nope")

    def test_favorite_copies_payment(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 120, "water")
        favorite = ledger.favorite_payment(payment.id, "Water bill")
        assert favorite.id != payment.id
        assert favorite.name == "Water bill"
        assert (favorite.account_id, favorite.amount, favorite.category) == (
            funded_account.id, 120, "water",
        )
        assert ledger.find_favorite_by_id(favorite.id) is favorite

    def test_favorite_missing_payment(self, ledger):
        with pytest.raises(PaymentNotFoundError):
            ledger.favorite_payment("nope", "x")
        assert ledger.favorites == []

    def test_pay_from_favorite(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 120, "water")
        favorite = ledger.favorite_payment(payment.id, "Water bill")
        again = ledger.pay_from_favorite(favorite.id)
        assert again.amount == 120
        assert again.category == "water"
        assert funded_account.balance == 760

    def test_find_missing_favorite(self, ledger):
        with pytest.raises(FavoriteNotFoundError):
            ledger.find_favorite_by_id("nope")
        with pytest.raises(FavoriteNotFoundError):
            ledger.pay_from_favorite("nope")


class TestSumPayments:
    """Tests for LedgerService.sum_payments."""

    def _ledger_with(self, ledger, amounts):
        account = ledger.register_account("+1")
        ledger.deposit(account.id, sum(amounts))
        for amount in amounts:
            ledger.pay(account.id, amount, "misc")
        return ledger

    def test_zero_workers(self, ledger):
        self._ledger_with(ledger, [100, 250, 50])
        assert ledger.sum_payments(0) == 400

    @pytest.mark.parametrize("workers", [0, 1, 2, 3, 5, 8])
    def test_independent_of_worker_count(self, ledger, workers):
        self._ledger_with(ledger, [100, 250, 50, 10, 5])
        assert ledger.sum_payments(workers) == 415

    def test_rejected_payments_are_counted(self, ledger):
        self._ledger_with(ledger, [100, 250])
        ledger.reject(ledger.payments[0].id)
        assert ledger.sum_payments(2) == 350

    def test_default_workers_from_settings(self, id_factory):
        ledger = LedgerService(
            id_factory=id_factory,
            settings=LedgerSettings(default_workers=4),
        )
        self._ledger_with(ledger, [1, 2, 3, 4, 5, 6])
        assert ledger.sum_payments() == 21

    def test_empty_ledger(self, ledger):
        assert ledger.sum_payments(3) == 0


class TestAuditTrail:
    """Tests for audit events emitted by the ledger."""

    def test_mutations_are_audited(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 10, "a")
        ledger.favorite_payment(payment.id, "fav")
        types = [event.event_type for event in reversed(ledger.audit.get_recent_events())]
        assert types == [
            AuditEventType.ACCOUNT_REGISTERED,
            AuditEventType.DEPOSIT_MADE,
            AuditEventType.PAYMENT_CREATED,
            AuditEventType.FAVORITE_CREATED,
        ]

    def test_refusals_are_audited(self, ledger, funded_account):
        with pytest.raises(NotEnoughBalanceError):
            ledger.pay(funded_account.id, 5000, "a")
        event = ledger.audit.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.OPERATION_REJECTED
        assert event.error_code == "NotEnoughBalanceError"
        assert event.details["operation"] == "pay"

    def test_custom_audit_logger(self):
        audit = AuditLogger(history_size=2)
        ledger = LedgerService(audit_logger=audit, settings=LedgerSettings())
        for phone in ("+1", "+2", "+3"):
            ledger.register_account(phone)
        assert ledger.audit is audit
        assert len(audit) == 2

    def test_empty_injected_audit_logger_is_kept(self):
        """A logger with no events yet is still the one the ledger uses."""
        audit = AuditLogger(history_size=5)
        ledger = LedgerService(audit_logger=audit, settings=LedgerSettings())
        assert ledger.audit is audit
        ledger.register_account("+1")
        assert len(audit) == 1


class TestLongValues:
    """Tests for free-form values longer than any audit description limit."""

    def test_long_phone(self, ledger):
        phone = "+" + "9" * 600
        account = ledger.register_account(phone)
        assert account.phone == phone
        assert len(ledger.accounts) == 1
        assert ledger.audit.get_recent_events(limit=1)[0].details["phone"] == phone

    def test_long_favorite_name(self, ledger, funded_account):
        payment = ledger.pay(funded_account.id, 10, "c" * 600)
        favorite = ledger.favorite_payment(payment.id, "n" * 600)
        assert favorite.name == "n" * 600
        assert len(ledger.favorites) == 1

    def test_long_dump_directory_name_is_audited(self, ledger, tmp_path):
        directory = tmp_path / ("d" * 200)
        directory.mkdir()
        ledger.register_account("+1")
        ledger.export(str(directory))
        event = ledger.audit.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.EXPORT_COMPLETED
        assert event.entity_id == str(directory)
