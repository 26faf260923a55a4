"""
Core Data Models for PeerPay

These models define the schemas for everything the ledger persists.
They are designed to:
1. Enforce type safety at runtime
2. Round-trip exactly through the JSON codec
3. Keep identity stable (ids are assigned once, at creation)

DESIGN DECISION: Amounts are plain floats. No currency rounding is applied
anywhere, so what the user typed is exactly what gets stored.
"""

from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Kinds of balance-affecting events.

    The enum values are persisted, so they must never be renamed.
    Icon names and colors are display hints only.
    """
    SENT = "Sent"
    RECEIVED = "Received"
    GROUP = "Group"
    RECEIPT = "Receipt"
    REQUEST = "Request"

    @property
    def icon_name(self) -> str:
        return _ICON_NAMES[self]

    @property
    def icon_color(self) -> str:
        return _ICON_COLORS[self]

    @property
    def default_description(self) -> str:
        """Placeholder used when a transaction is created without text."""
        return _DEFAULT_DESCRIPTIONS[self]


_ICON_NAMES = {
    TransactionType.SENT: "arrow.up.circle",
    TransactionType.RECEIVED: "arrow.down.circle",
    TransactionType.GROUP: "person.3",
    TransactionType.RECEIPT: "doc.text",
    TransactionType.REQUEST: "arrow.right.circle",
}

_ICON_COLORS = {
    TransactionType.SENT: "red",
    TransactionType.RECEIVED: "green",
    TransactionType.GROUP: "blue",
    TransactionType.RECEIPT: "yellow",
    TransactionType.REQUEST: "orange",
}

_DEFAULT_DESCRIPTIONS = {
    TransactionType.SENT: "Payment sent",
    TransactionType.RECEIVED: "Payment received",
    TransactionType.GROUP: "Group payment",
    TransactionType.RECEIPT: "Receipt scanned",
    TransactionType.REQUEST: "Money requested",
}


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    An immutable record of one balance-affecting event.

    CRITICAL: Transactions are never edited or deleted once created.
    The model is frozen so accidental mutation fails loudly.
    """
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    type: TransactionType = Field(
        ...,
        description="Kind of event"
    )
    description: str = Field(
        default="",
        description="Free-form text shown to the user"
    )
    amount: float = Field(
        ...,
        description="Signed amount, stored without rounding"
    )

    @model_validator(mode="before")
    @classmethod
    def fill_default_description(cls, data: Any) -> Any:
        """Empty descriptions fall back to the type's placeholder."""
        if isinstance(data, dict) and not data.get("description"):
            try:
                ttype = TransactionType(data.get("type"))
            except ValueError:
                # Let field validation report the bad type
                return data
            data = {**data, "description": ttype.default_description}
        return data


class Group(BaseModel):
    """
    A named collection of member display names.

    Members are plain strings with no identity of their own, and
    duplicates are allowed. The name and member list are mutable.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique group ID"
    )
    name: str = Field(
        ...,
        description="Group label"
    )
    members: list[str] = Field(
        default_factory=list,
        description="Member display names in insertion order"
    )
