"""
Audit Models for PeerPay

Every mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. Debugging information when persisted data turns out corrupt
3. A record of user actions that were rejected as no-ops

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from peerpay.models.ledger import Group, Transaction


# Longest user-supplied text quoted in an event description
MAX_QUOTED_LENGTH = 80


def _shorten(text: str, limit: int = MAX_QUOTED_LENGTH) -> str:
    """Clip user text for descriptions; full text belongs in details."""
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger mutations
    PAYMENT_SENT = "payment_sent"
    RECEIPT_SCANNED = "receipt_scanned"
    GROUP_CREATED = "group_created"
    MEMBER_ADDED = "member_added"
    MONEY_REQUESTED = "money_requested"
    OPERATION_REJECTED = "operation_rejected"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    DECODE_FAILED = "decode_failed"
    SAVE_SKIPPED = "save_skipped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
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
        description="Type of entity (e.g., 'transaction', 'group', 'key')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

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
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_sent(transaction, balance)
        event = AuditEventBuilder.decode_failed("groups")
    """

    @staticmethod
    def payment_sent(transaction: Transaction, balance: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_SENT,
            entity_type="transaction",
            entity_id=transaction.id,
            description=f"Payment sent: {_shorten(transaction.description)}",
            details={
                "description": transaction.description,
                "amount": transaction.amount,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def receipt_scanned(transaction: Transaction, balance: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCANNED,
            entity_type="transaction",
            entity_id=transaction.id,
            description=f"Receipt scanned for {transaction.amount:.2f}",
            details={
                "amount": transaction.amount,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def group_created(group: Group) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_CREATED,
            entity_type="group",
            entity_id=group.id,
            description=f"Group created: {_shorten(group.name)}",
            details={"name": group.name},
            is_user_action=True,
        )

    @staticmethod
    def member_added(group: Group, member: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_ADDED,
            entity_type="group",
            entity_id=group.id,
            description=f"Member added to {_shorten(group.name)}: {_shorten(member)}",
            details={
                "member": member,
                "member_count": len(group.members),
            },
            is_user_action=True,
        )

    @staticmethod
    def money_requested(
        group: Group,
        amount: float,
        share: float,
        balance: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONEY_REQUESTED,
            entity_type="group",
            entity_id=group.id,
            description=f"Requested {amount:.2f} from {_shorten(group.name)}",
            details={
                "amount": amount,
                "share": share,
                "members": list(group.members),
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def operation_rejected(operation: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.DEBUG,
            description=f"{operation} ignored: {_shorten(reason)}",
            details={
                "operation": operation,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(restored: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            description=f"Ledger loaded ({len(restored)} of 3 keys restored)",
            details={"restored": restored},
        )

    @staticmethod
    def decode_failed(key: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DECODE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="key",
            description=f"Stored value for '{key}' could not be decoded; keeping current value",
            details={"key": key},
        )

    @staticmethod
    def save_skipped(key: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="key",
            description=f"Value for '{key}' could not be encoded; nothing written",
            details={"key": key},
        )
