"""
Data Models Package

This package contains all Pydantic models used in PeerPay.
Everything the ledger persists or audits conforms to these schemas.
"""

from peerpay.models.ledger import (
    Group,
    Transaction,
    TransactionType,
)
from peerpay.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Group",
    "Transaction",
    "TransactionType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
