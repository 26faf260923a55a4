"""
Audit Logger

DESIGN DECISION: Every ledger mutation and every persistence anomaly is
logged. This provides:
1. Traceability of every balance change
2. A signal for corrupt stored data, which the ledger otherwise
   recovers from silently
3. A record of user input that was ignored

The audit logger:
- Always logs locally through structlog
- Optionally appends to an audit store
- Gracefully handles store failures (doesn't crash the app if logging fails)
"""

import logging
from typing import Optional

import structlog

from peerpay.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from peerpay.models.ledger import Group, Transaction
from peerpay.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the standard library at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for the in-app history view)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("peerpay.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_payment_sent(self, transaction: Transaction, balance: float) -> None:
        self.log(AuditEventBuilder.payment_sent(transaction, balance))

    def log_receipt_scanned(self, transaction: Transaction, balance: float) -> None:
        self.log(AuditEventBuilder.receipt_scanned(transaction, balance))

    def log_group_created(self, group: Group) -> None:
        self.log(AuditEventBuilder.group_created(group))

    def log_member_added(self, group: Group, member: str) -> None:
        self.log(AuditEventBuilder.member_added(group, member))

    def log_money_requested(
        self,
        group: Group,
        amount: float,
        share: float,
        balance: float,
    ) -> None:
        self.log(AuditEventBuilder.money_requested(group, amount, share, balance))

    def log_operation_rejected(self, operation: str, reason: str) -> None:
        """Log user input that was ignored as a no-op."""
        self.log(AuditEventBuilder.operation_rejected(operation, reason))

    def log_ledger_loaded(self, restored: list[str]) -> None:
        self.log(AuditEventBuilder.ledger_loaded(restored))

    def log_decode_failed(self, key: str) -> None:
        self.log(AuditEventBuilder.decode_failed(key))

    def log_save_skipped(self, key: str) -> None:
        self.log(AuditEventBuilder.save_skipped(key))
