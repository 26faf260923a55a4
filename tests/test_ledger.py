"""Tests for LedgerModel operations and persistence."""

import random

import pytest

from peerpay import ledger as ledger_module
from peerpay.audit import AuditLogger
from peerpay.codec import BALANCE_CODEC, GROUPS_CODEC, TRANSACTIONS_CODEC
from peerpay.config import LedgerSettings
from peerpay.ledger import (
    BALANCE_KEY,
    GROUPS_KEY,
    TRANSACTIONS_KEY,
    EmptyGroupError,
    LedgerError,
    LedgerModel,
    create_ledger,
    parse_amount,
)
from peerpay.models.audit import AuditEventType
from peerpay.models.ledger import TransactionType
from peerpay.services.storage import FileKeyValueStore, InMemoryKeyValueStore


def _group_with_members(ledger, name, members):
    ledger.create_group(name)
    index = len(ledger.groups) - 1
    for member in members:
        ledger.add_member_to_group(index, member)
    return index


def _event_types(audit_storage):
    return [event.event_type for event in audit_storage.get_recent_events()]


class TestParseAmount:
    """Tests for user amount parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("10", 10.0),
        ("0.5", 0.5),
        ("-3", -3.0),
        ("1e2", 100.0),
        (12, 12.0),
        (7.25, 7.25),
    ])
    def test_valid_amounts(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", [
        "", "abc", " 10", "10 ", "1_000", "nan", "inf", "-inf", None, True, [10],
        float("nan"), float("inf"),
    ])
    def test_invalid_amounts(self, text):
        assert parse_amount(text) is None


class TestInitialState:
    """Tests for a freshly constructed ledger."""

    def test_defaults(self, ledger):
        """Test default balance, empty history and seeded groups."""
        assert ledger.balance == 100.0
        assert ledger.transactions == []
        assert [(g.name, g.members) for g in ledger.groups] == [
            ("Group 1", ["Alice", "Bob"]),
            ("Group 2", ["Charlie"]),
        ]

    def test_seeded_groups_are_not_shared(self, store, ledger_settings):
        """Test that two ledgers do not share group objects."""
        first = LedgerModel(store, settings=ledger_settings)
        second = LedgerModel(store, settings=ledger_settings)
        first.add_member_to_group(0, "Dave")
        assert second.groups[0].members == ["Alice", "Bob"]
        assert first.groups[0].id != second.groups[0].id

    def test_construction_does_not_touch_store(self, store, ledger):
        assert store.keys() == []

    def test_read_access_returns_copies(self, ledger):
        """Test that callers cannot mutate the history directly."""
        ledger.transactions.append("bogus")
        ledger.groups.clear()
        assert ledger.transactions == []
        assert len(ledger.groups) == 2


class TestSendPayment:
    """Tests for send_payment."""

    def test_valid_payment(self, ledger, store):
        """Test balance, history and persistence after a payment."""
        transaction = ledger.send_payment("30", "Dinner")

        assert ledger.balance == 70.0
        assert ledger.transactions == [transaction]
        assert transaction.type == TransactionType.SENT
        assert transaction.amount == 30.0
        assert transaction.description == "Dinner"
        assert TRANSACTIONS_CODEC.decode(store.get(TRANSACTIONS_KEY)) == [transaction]
        assert BALANCE_CODEC.decode(store.get(BALANCE_KEY)) == 70.0

    def test_default_description(self, ledger):
        assert ledger.send_payment("5").description == "Payment sent"

    def test_newest_first(self, ledger):
        first = ledger.send_payment("1")
        second = ledger.send_payment("2")
        assert ledger.transactions == [second, first]

    def test_entire_balance_allowed(self, ledger):
        ledger.send_payment("100")
        assert ledger.balance == 0.0

    def test_accepts_numeric_amount(self, ledger):
        ledger.send_payment(12.5)
        assert ledger.balance == 87.5

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "", "100.01", "150", " 10", "nan", "inf"])
    def test_rejected_payment_is_noop(self, ledger, store, audit_storage, amount):
        """Test that invalid or unaffordable amounts change nothing."""
        assert ledger.send_payment(amount, "x") is None
        assert ledger.balance == 100.0
        assert ledger.transactions == []
        assert store.keys() == []
        assert _event_types(audit_storage) == [AuditEventType.OPERATION_REJECTED]

    def test_audited(self, ledger, audit_storage):
        transaction = ledger.send_payment("10")
        (event,) = audit_storage.get_recent_events()
        assert event.event_type == AuditEventType.PAYMENT_SENT
        assert event.entity_id == transaction.id


class TestScanReceipt:
    """Tests for scan_receipt."""

    def test_deducts_random_amount_in_range(self, ledger, store):
        """Test the drawn amount, balance and persistence."""
        transaction = ledger.scan_receipt()

        assert 5.0 <= transaction.amount <= 100.0
        assert transaction.type == TransactionType.RECEIPT
        assert transaction.description == "Receipt scanned"
        assert ledger.balance == 100.0 - transaction.amount
        assert ledger.transactions[0] == transaction
        assert TRANSACTIONS_CODEC.decode(store.get(TRANSACTIONS_KEY)) == [transaction]
        assert BALANCE_CODEC.decode(store.get(BALANCE_KEY)) == ledger.balance

    def test_uses_injected_random_source(self, store, ledger_settings):
        """Test that scans are reproducible with a seeded generator."""
        first = LedgerModel(store, rng=random.Random(7), settings=ledger_settings)
        second = LedgerModel(InMemoryKeyValueStore(), rng=random.Random(7), settings=ledger_settings)
        assert first.scan_receipt().amount == second.scan_receipt().amount

    def test_balance_can_go_negative(self, store):
        """Test that scans skip the balance check."""
        settings = LedgerSettings(default_balance=1.0, receipt_min=5.0, receipt_max=100.0, _env_file=None)
        ledger = LedgerModel(store, rng=random.Random(0), settings=settings)
        ledger.scan_receipt()
        assert ledger.balance < 0

    def test_respects_configured_range(self, store):
        settings = LedgerSettings(receipt_min=20.0, receipt_max=20.0, _env_file=None)
        ledger = LedgerModel(store, settings=settings)
        assert ledger.scan_receipt().amount == 20.0


class TestGroups:
    """Tests for create_group and add_member_to_group."""

    def test_create_group(self, ledger, store):
        """Test a new group is appended with no members and persisted."""
        group = ledger.create_group("Trip")

        assert ledger.groups[-1] == group
        assert group.name == "Trip"
        assert group.members == []
        assert GROUPS_CODEC.decode(store.get(GROUPS_KEY))[-1] == group

    def test_create_group_empty_name_is_noop(self, ledger, store):
        assert ledger.create_group("") is None
        assert len(ledger.groups) == 2
        assert store.get(GROUPS_KEY) is None

    def test_create_group_does_not_trim(self, ledger):
        """Test that only the literal empty string is rejected."""
        assert ledger.create_group("   ").name == "   "

    def test_group_ids_unique(self, ledger):
        ledger.create_group("A")
        ledger.create_group("A")
        assert len({g.id for g in ledger.groups}) == len(ledger.groups)

    def test_add_member(self, ledger, store):
        """Test that members are appended and persisted."""
        assert ledger.add_member_to_group(1, "Dana") is True
        assert ledger.groups[1].members == ["Charlie", "Dana"]
        assert GROUPS_CODEC.decode(store.get(GROUPS_KEY))[1].members == ["Charlie", "Dana"]

    def test_add_duplicate_member(self, ledger):
        ledger.add_member_to_group(1, "Charlie")
        assert ledger.groups[1].members == ["Charlie", "Charlie"]

    @pytest.mark.parametrize("index, name", [(-1, "Dana"), (2, "Dana"), (99, "Dana"), (0, "")])
    def test_add_member_rejected(self, ledger, store, index, name):
        assert ledger.add_member_to_group(index, name) is False
        assert ledger.groups[0].members == ["Alice", "Bob"]
        assert ledger.groups[1].members == ["Charlie"]
        assert store.get(GROUPS_KEY) is None


class TestRequestMoneyFromGroup:
    """Tests for request_money_from_group."""

    def test_split_across_three_members(self, ledger, store):
        """Test shares, insertion order and balance for members A, B, C."""
        index = _group_with_members(ledger, "Trip", ["A", "B", "C"])

        created = ledger.request_money_from_group(index, "90")

        assert [t.description for t in created] == [
            "Request from A", "Request from B", "Request from C",
        ]
        assert [t.description for t in ledger.transactions] == [
            "Request from C", "Request from B", "Request from A",
        ]
        assert all(t.type == TransactionType.REQUEST for t in created)
        assert all(t.amount == 30.0 for t in created)
        assert ledger.balance == pytest.approx(10.0)
        assert TRANSACTIONS_CODEC.decode(store.get(TRANSACTIONS_KEY)) == ledger.transactions
        assert BALANCE_CODEC.decode(store.get(BALANCE_KEY)) == ledger.balance

    def test_balance_uses_reconstructed_total(self, ledger):
        """Test the share-times-count computation path."""
        index = _group_with_members(ledger, "Trio", ["A", "B", "C"])
        ledger.request_money_from_group(index, 10.0)
        share = 10.0 / 3.0
        assert ledger.balance == 100.0 - share * 3.0

    def test_request_ignores_balance(self, ledger):
        """Test that requests can push the balance negative."""
        ledger.request_money_from_group(0, "500")
        assert ledger.balance == -400.0

    def test_seeded_group(self, ledger):
        created = ledger.request_money_from_group(0, "10")
        assert [t.amount for t in created] == [5.0, 5.0]
        assert ledger.balance == 90.0

    def test_empty_group_raises(self, ledger, store):
        """Test the explicit rejection for a group without members."""
        ledger.create_group("Lonely")
        groups_before = store.get(GROUPS_KEY)

        with pytest.raises(EmptyGroupError) as excinfo:
            ledger.request_money_from_group(2, "30")

        assert isinstance(excinfo.value, LedgerError)
        assert excinfo.value.group_name == "Lonely"
        assert ledger.balance == 100.0
        assert ledger.transactions == []
        assert store.get(TRANSACTIONS_KEY) is None
        assert store.get(GROUPS_KEY) == groups_before

    @pytest.mark.parametrize("index, amount", [(0, "0"), (0, "-10"), (0, "ten"), (5, "10"), (-1, "10")])
    def test_rejected_request_is_noop(self, ledger, store, index, amount):
        assert ledger.request_money_from_group(index, amount) == []
        assert ledger.balance == 100.0
        assert ledger.transactions == []
        assert store.keys() == []


class TestLoad:
    """Tests for loading persisted state."""

    def test_load_with_nothing_stored_keeps_defaults(self, ledger, audit_storage):
        """Test that an empty store leaves constructed defaults."""
        assert ledger.load() == []
        assert ledger.balance == 100.0
        assert ledger.transactions == []
        assert [g.name for g in ledger.groups] == ["Group 1", "Group 2"]
        assert AuditEventType.DECODE_FAILED not in _event_types(audit_storage)

    def test_individual_loads_report_absence(self, ledger):
        assert ledger.load_balance() is False
        assert ledger.load_transactions() is False
        assert ledger.load_groups() is False

    @pytest.mark.parametrize("garbage", [b"garbage", b"", b'{"balance": 1}', b"\x00\xff"])
    def test_corrupt_data_keeps_current_values(self, ledger, store, audit_storage, garbage):
        """Test that undecodable bytes never raise and never clobber state."""
        ledger.send_payment("25", "Before corruption")
        ledger.create_group("Trip")
        balance = ledger.balance
        transactions = ledger.transactions
        groups = ledger.groups

        for key in (BALANCE_KEY, TRANSACTIONS_KEY, GROUPS_KEY):
            store.set(key, garbage)

        assert ledger.load() == []
        assert ledger.balance == balance
        assert ledger.transactions == transactions
        assert ledger.groups == groups
        assert _event_types(audit_storage).count(AuditEventType.DECODE_FAILED) == 3

    def test_partial_load(self, store, ledger_settings):
        """Test that each key loads independently."""
        store.set(BALANCE_KEY, b"42.5")
        store.set(GROUPS_KEY, b"not json")
        ledger = LedgerModel(store, settings=ledger_settings)

        assert ledger.load() == [BALANCE_KEY]
        assert ledger.balance == 42.5
        assert [g.name for g in ledger.groups] == ["Group 1", "Group 2"]


class TestSaveAndRoundTrip:
    """Tests for saving and restoring a ledger."""

    def test_round_trip_restores_every_field(self, ledger, store, ledger_settings):
        """Test that save then load reproduces the exact prior state."""
        ledger.send_payment("12.34", "Coffee")
        ledger.scan_receipt()
        index = _group_with_members(ledger, "Trip", ["A", "B", "C"])
        ledger.request_money_from_group(index, "10")
        ledger.save()

        restored = LedgerModel(store, settings=ledger_settings)
        assert restored.load() == [BALANCE_KEY, TRANSACTIONS_KEY, GROUPS_KEY]
        assert restored.balance == ledger.balance
        assert restored.transactions == ledger.transactions
        assert restored.groups == ledger.groups

    def test_round_trip_through_files(self, tmp_path, ledger_settings):
        """Test durability across a simulated restart."""
        ledger = LedgerModel(FileKeyValueStore(tmp_path), settings=ledger_settings)
        ledger.send_payment("40")
        ledger.create_group("Roommates")

        restarted = LedgerModel(FileKeyValueStore(tmp_path), settings=ledger_settings)
        restarted.load()
        assert restarted.balance == 60.0
        assert restarted.transactions == ledger.transactions
        assert [g.name for g in restarted.groups] == ["Group 1", "Group 2", "Roommates"]

    def test_save_skipped_when_encoding_fails(self, ledger, store, audit_storage, monkeypatch):
        """Test that a failed encode writes nothing."""
        monkeypatch.setattr(ledger_module.BALANCE_CODEC, "encode", lambda value: None)

        assert ledger.save_balance() is False
        assert store.get(BALANCE_KEY) is None
        assert AuditEventType.SAVE_SKIPPED in _event_types(audit_storage)

    def test_save_writes_all_keys(self, ledger, store):
        ledger.save()
        assert store.keys() == sorted([BALANCE_KEY, TRANSACTIONS_KEY, GROUPS_KEY])


class TestCreateLedger:
    """Tests for the ledger factory."""

    def test_loads_from_given_store(self, monkeypatch):
        monkeypatch.setenv("PEERPAY_LEDGER_DEFAULT_BALANCE", "100.0")
        store = InMemoryKeyValueStore({BALANCE_KEY: b"7.0"})
        ledger = create_ledger(store=store, audit_logger=AuditLogger())
        assert ledger.balance == 7.0


class TestLongUserText:
    """Tests that long descriptions and names never break an operation."""

    LONG = 600

    def test_send_payment_with_long_description(self, ledger, store, audit_storage):
        description = "x" * self.LONG
        transaction = ledger.send_payment("10", description)

        assert transaction.description == description
        assert ledger.balance == 90.0
        assert BALANCE_CODEC.decode(store.get(BALANCE_KEY)) == 90.0
        (event,) = audit_storage.get_recent_events()
        assert event.event_type == AuditEventType.PAYMENT_SENT
        assert len(event.description) <= 500
        assert event.details["description"] == description

    def test_rejected_payment_with_long_amount_text(self, ledger, store, audit_storage):
        """Test that a long unparseable amount stays a silent no-op."""
        assert ledger.send_payment("a" * self.LONG) is None
        assert ledger.balance == 100.0
        assert store.keys() == []
        (event,) = audit_storage.get_recent_events()
        assert event.event_type == AuditEventType.OPERATION_REJECTED
        assert len(event.details["reason"]) > self.LONG

    def test_create_group_with_long_name(self, ledger, store):
        name = "g" * self.LONG
        group = ledger.create_group(name)

        assert group.name == name
        assert len(ledger.groups) == 3
        assert GROUPS_CODEC.decode(store.get(GROUPS_KEY))[-1].name == name

    def test_add_long_member_name_and_request(self, ledger, audit_storage):
        """Test member and group names both longer than the audit limit."""
        index = _group_with_members(ledger, "g" * self.LONG, ["m" * self.LONG])

        created = ledger.request_money_from_group(index, "10")

        assert ledger.groups[index].members == ["m" * self.LONG]
        assert [t.amount for t in created] == [10.0]
        assert ledger.balance == 90.0
        assert all(len(e.description) <= 500 for e in audit_storage.get_recent_events())


class TestNonFiniteBalance:
    """Tests for a balance that has overflowed to infinity."""

    def test_overflowed_balance_survives_restart(self, ledger, store, ledger_settings):
        ledger.request_money_from_group(0, "1.7e308")
        ledger.request_money_from_group(0, "1.7e308")
        assert ledger.balance == float("-inf")

        restored = LedgerModel(store, settings=ledger_settings)
        assert BALANCE_KEY in restored.load()
        assert restored.balance == float("-inf")


class TestGroupReadAccess:
    """Tests that group reads cannot bypass the operations."""

    def test_member_lists_are_copies(self, ledger, store):
        ledger.groups[0].members.append("Eve")
        ledger.groups[0].name = "Renamed"
        assert ledger.groups[0].members == ["Alice", "Bob"]
        assert ledger.groups[0].name == "Group 1"
        assert store.keys() == []

    def test_created_group_is_a_copy(self, ledger):
        group = ledger.create_group("Trip")
        group.members.append("Eve")
        assert ledger.groups[-1].members == []
