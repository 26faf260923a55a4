"""Shared fixtures for PeerPay tests."""

import random

import pytest

from peerpay.audit import AuditLogger
from peerpay.config import LedgerSettings
from peerpay.ledger import LedgerModel
from peerpay.services.storage import InMemoryAuditStorage, InMemoryKeyValueStore


@pytest.fixture
def ledger_settings():
    return LedgerSettings(default_balance=100.0, receipt_min=5.0, receipt_max=100.0)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def ledger(store, audit_storage, ledger_settings):
    return LedgerModel(
        store=store,
        audit_logger=AuditLogger(audit_storage),
        rng=random.Random(1234),
        settings=ledger_settings,
    )
