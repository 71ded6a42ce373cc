"""
Audit Models for the Wallet Ledger

Every balance-changing action and every snapshot written or read is
recorded as an audit event. This provides:
1. Traceability of every debit, credit and refund
2. Debugging information when an import goes wrong
3. A record of operations the ledger refused

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from wallet.models.entities import PaymentStatus


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_REGISTERED = "account_registered"
    DEPOSIT_MADE = "deposit_made"

    # Payments
    PAYMENT_CREATED = "payment_created"
    PAYMENT_REJECTED = "payment_rejected"
    FAVORITE_CREATED = "favorite_created"

    # Refusals
    OPERATION_REJECTED = "operation_rejected"

    # Persistence
    EXPORT_COMPLETED = "export_completed"
    IMPORT_COMPLETED = "import_completed"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'payment', 'favorite')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_registered(account_id, phone)
        event = AuditEventBuilder.payment_rejected(payment_id, account_id, amount)
    """

    @staticmethod
    def account_registered(account_id: int, phone: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_REGISTERED,
            entity_type="account",
            entity_id=str(account_id),
            description=f"Account registered for {phone}",
            details={"phone": phone},
        )

    @staticmethod
    def deposit_made(account_id: int, amount: int, balance: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_MADE,
            entity_type="account",
            entity_id=str(account_id),
            description=f"Deposited {amount}",
            details={"amount": amount, "balance": balance},
        )

    @staticmethod
    def payment_created(
        payment_id: str,
        account_id: int,
        amount: int,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CREATED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment of {amount} from account {account_id}",
            details={
                "account_id": account_id,
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def payment_rejected(
        payment_id: str,
        account_id: int,
        amount: int,
        previous_status: str,
    ) -> AuditEvent:
        # A repeated rejection refunds again; flag it so it stands out.
        repeated = previous_status != PaymentStatus.IN_PROGRESS.value
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_REJECTED,
            severity=AuditSeverity.WARNING if repeated else AuditSeverity.INFO,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment rejected, {amount} refunded to account {account_id}",
            details={
                "account_id": account_id,
                "amount": amount,
                "previous_status": previous_status,
                "repeated": repeated,
            },
        )

    @staticmethod
    def favorite_created(
        favorite_id: str,
        payment_id: str,
        name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAVORITE_CREATED,
            entity_type="favorite",
            entity_id=favorite_id,
            description=f"Favorite '{name}' created from payment {payment_id}",
            details={"payment_id": payment_id, "name": name},
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error: Exception,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation} refused",
            details={"operation": operation},
            error_code=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def export_completed(fmt: str, target: str, counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            entity_type="snapshot",
            entity_id=target,
            description=f"{fmt} export written to {target}",
            details={"format": fmt, **counts},
        )

    @staticmethod
    def import_completed(fmt: str, source: str, counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            entity_type="snapshot",
            entity_id=source,
            description=f"{fmt} import read from {source}",
            details={"format": fmt, **counts},
        )

    @staticmethod
    def storage_error(fmt: str, location: str, error: Exception) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="snapshot",
            entity_id=location,
            description=f"{fmt} snapshot failed at {location}",
            details={"format": fmt},
            error_code=type(error).__name__,
            error_message=str(error),
        )
