"""
Data Models Package

This package contains all Pydantic models used by the wallet ledger.
"""

from wallet.models.entities import (
    Account,
    Favorite,
    Payment,
    PaymentStatus,
)
from wallet.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entity models
    "Account",
    "Favorite",
    "Payment",
    "PaymentStatus",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
