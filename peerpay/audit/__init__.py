"""Audit logging package."""

from peerpay.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
