"""
Core Data Models for the Wallet Ledger

Accounts, payments and favorites are plain records: all behaviour lives in
the ledger service. Amounts and balances are integers in the smallest
currency unit.

DESIGN DECISION: Models validate on assignment.
The ledger mutates balances and statuses in place, so a bad value
fails at the point of mutation instead of surfacing later in a snapshot.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PaymentStatus(str, Enum):
    """
    Payment lifecycle status.

    A successful payment stays IN_PROGRESS: there is no distinct
    completed state. FAIL is only reached through a rejection.
    The values are what the dump files store.
    """
    IN_PROGRESS = "INPROGRESS"
    FAIL = "FAIL"


class Account(BaseModel):
    """An account, identified by its phone number."""
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(
        ...,
        description="Sequential account ID"
    )
    phone: str = Field(
        ...,
        description="Phone number, unique at registration time"
    )
    balance: int = Field(
        default=0,
        description="Current balance in the smallest currency unit"
    )


class Payment(BaseModel):
    """A debit from an account."""
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        ...,
        description="Opaque unique payment ID"
    )
    account_id: int = Field(
        ...,
        description="Account the payment was debited from"
    )
    amount: int = Field(
        ...,
        description="Debited amount"
    )
    category: str = Field(
        default="",
        description="Free-form category tag"
    )
    status: PaymentStatus = Field(
        default=PaymentStatus.IN_PROGRESS,
        description="Payment status"
    )


class Favorite(BaseModel):
    """
    A named payment template.

    Copies the account, amount and category of the payment it was
    created from so it can be paid again later.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        ...,
        description="Opaque unique favorite ID"
    )
    account_id: int
    name: str = Field(
        default="",
        description="User-facing label"
    )
    amount: int
    category: str = ""
