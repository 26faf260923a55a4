"""
Ledger Model for PeerPay

This module owns the app's entire mutable state (balance, transactions,
groups) and every rule for changing it:
1. Send a payment
2. Scan a receipt (simulated)
3. Create a group / add a member
4. Request money from a group
5. Save and load each field through the key-value store

DESIGN DECISION: The ledger is a plain object owned by whoever creates it
(a UI session, a test) and passed around explicitly. There is no global
instance.

Invalid user input is a silent no-op: the operation returns None, False
or an empty list and nothing changes. The one exception is requesting
money from a group with no members, which has no meaningful split and
raises EmptyGroupError.

Each operation persists exactly the fields it changed. The three keys
are written independently, so there is no atomicity across them.
"""

import math
import random
from typing import Optional, Union
from uuid import UUID

from peerpay.audit import AuditLogger
from peerpay.codec import BALANCE_CODEC, GROUPS_CODEC, TRANSACTIONS_CODEC
from peerpay.config import LedgerSettings, get_settings
from peerpay.models.ledger import Group, Transaction, TransactionType
from peerpay.services.storage import FileKeyValueStore, KeyValueStore


BALANCE_KEY = "balance"
TRANSACTIONS_KEY = "transactions"
GROUPS_KEY = "groups"

# Groups every fresh ledger starts with, before anything is loaded
DEFAULT_GROUPS = (
    ("Group 1", ("Alice", "Bob")),
    ("Group 2", ("Charlie",)),
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class EmptyGroupError(LedgerError):
    """Money was requested from a group that has no members."""

    def __init__(self, group_id: UUID, group_name: str):
        self.group_id = group_id
        self.group_name = group_name
        super().__init__(
            f"Group '{group_name}' has no members to request money from"
        )


def parse_amount(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Parse a user-entered amount.

    Accepts numbers or numeric text. Returns None for anything that is not
    a finite number, including text with surrounding whitespace or digit
    separators. Sign is not checked here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        if not value or value != value.strip() or "_" in value:
            return None
        try:
            parsed = float(value)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(parsed):
        return None
    return parsed


def _seed_groups() -> list[Group]:
    return [Group(name=name, members=list(members)) for name, members in DEFAULT_GROUPS]


class LedgerModel:
    """
    The shared ledger aggregate.

    Reads are exposed as properties; all writes go through the
    operations below so they are validated, audited and persisted.
    """

    def __init__(
        self,
        store: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        """
        Create a ledger with default state. Nothing is read from the
        store until one of the load methods is called.

        Args:
            store: Where balance, transactions and groups are persisted
            audit_logger: Audit sink (defaults to local-only logging)
            rng: Random source for simulated receipt scans
            settings: Ledger defaults (defaults to environment settings)
        """
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._rng = rng or random.Random()
        self._settings = settings or get_settings().ledger

        self._balance: float = self._settings.default_balance
        self._transactions: list[Transaction] = []
        self._groups: list[Group] = _seed_groups()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def balance(self) -> float:
        return self._balance

    @property
    def transactions(self) -> list[Transaction]:
        """Transactions, newest first."""
        return list(self._transactions)

    @property
    def groups(self) -> list[Group]:
        """Deep copies; member changes must go through add_member_to_group."""
        return [group.model_copy(deep=True) for group in self._groups]

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load_balance(self) -> bool:
        """Replace the balance with the stored one. Returns True if replaced."""
        value = self._read(BALANCE_KEY, BALANCE_CODEC)
        if value is None:
            return False
        self._balance = value
        return True

    def load_transactions(self) -> bool:
        """Replace transactions with the stored list. Returns True if replaced."""
        value = self._read(TRANSACTIONS_KEY, TRANSACTIONS_CODEC)
        if value is None:
            return False
        self._transactions = value
        return True

    def load_groups(self) -> bool:
        """Replace groups with the stored list. Returns True if replaced."""
        value = self._read(GROUPS_KEY, GROUPS_CODEC)
        if value is None:
            return False
        self._groups = value
        return True

    def load(self) -> list[str]:
        """
        Load every persisted field.

        Fields with no stored value, or an undecodable one, keep their
        current value.

        Returns:
            The keys that were restored
        """
        restored = []
        if self.load_balance():
            restored.append(BALANCE_KEY)
        if self.load_transactions():
            restored.append(TRANSACTIONS_KEY)
        if self.load_groups():
            restored.append(GROUPS_KEY)
        self._audit_logger.log_ledger_loaded(restored)
        return restored

    def save_balance(self) -> bool:
        return self._write(BALANCE_KEY, BALANCE_CODEC.encode(self._balance))

    def save_transactions(self) -> bool:
        return self._write(TRANSACTIONS_KEY, TRANSACTIONS_CODEC.encode(self._transactions))

    def save_groups(self) -> bool:
        return self._write(GROUPS_KEY, GROUPS_CODEC.encode(self._groups))

    def save(self) -> None:
        """Persist every field."""
        self.save_balance()
        self.save_transactions()
        self.save_groups()

    def _read(self, key: str, codec):
        raw = self._store.get(key)
        if raw is None:
            return None
        value = codec.decode(raw)
        if value is None:
            self._audit_logger.log_decode_failed(key)
        return value

    def _write(self, key: str, data: Optional[bytes]) -> bool:
        """Write encoded data. Returns False (nothing written) if encoding failed."""
        if data is None:
            self._audit_logger.log_save_skipped(key)
            return False
        self._store.set(key, data)
        return True

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def send_payment(
        self,
        amount_text: Union[str, float],
        description: str = "",
    ) -> Optional[Transaction]:
        """
        Send money out of the balance.

        The amount must be positive and no more than the current balance.

        Returns:
            The new transaction, or None if the input was rejected
        """
        amount = parse_amount(amount_text)
        if amount is None or amount <= 0:
            self._audit_logger.log_operation_rejected(
                "send_payment", f"invalid amount {amount_text!r}"
            )
            return None
        if amount > self._balance:
            self._audit_logger.log_operation_rejected(
                "send_payment", "insufficient balance"
            )
            return None

        self._balance -= amount
        transaction = Transaction(
            type=TransactionType.SENT,
            description=description,
            amount=amount,
        )
        self._transactions.insert(0, transaction)

        self.save_transactions()
        self.save_balance()
        self._audit_logger.log_payment_sent(transaction, self._balance)
        return transaction

    def scan_receipt(self) -> Transaction:
        """
        Simulate scanning a receipt.

        Deducts a random amount in the configured range. There is no
        balance check, so the balance can go negative.
        """
        amount = self._rng.uniform(self._settings.receipt_min, self._settings.receipt_max)

        self._balance -= amount
        transaction = Transaction(
            type=TransactionType.RECEIPT,
            description=TransactionType.RECEIPT.default_description,
            amount=amount,
        )
        self._transactions.insert(0, transaction)

        self.save_transactions()
        self.save_balance()
        self._audit_logger.log_receipt_scanned(transaction, self._balance)
        return transaction

    def create_group(self, name: str) -> Optional[Group]:
        """
        Append a new group with no members.

        Only the empty string is rejected; the name is not trimmed.
        """
        if not name:
            self._audit_logger.log_operation_rejected("create_group", "empty name")
            return None

        group = Group(name=name, members=[])
        self._groups.append(group)

        self.save_groups()
        self._audit_logger.log_group_created(group)
        return group.model_copy(deep=True)

    def add_member_to_group(self, group_index: int, member_name: str) -> bool:
        """Append a member name to the group at the given position."""
        if not self._is_valid_group_index(group_index):
            self._audit_logger.log_operation_rejected(
                "add_member_to_group", f"no group at index {group_index}"
            )
            return False
        if not member_name:
            self._audit_logger.log_operation_rejected(
                "add_member_to_group", "empty member name"
            )
            return False

        group = self._groups[group_index]
        group.members.append(member_name)

        self.save_groups()
        self._audit_logger.log_member_added(group, member_name)
        return True

    def request_money_from_group(
        self,
        group_index: int,
        amount: Union[str, float],
    ) -> list[Transaction]:
        """
        Split a requested amount evenly across a group's members.

        One Request transaction is inserted at the head per member, in
        member order, so the last member ends up newest. The balance is
        then reduced by share * member_count.

        Returns:
            The created transactions in member order (empty if rejected)

        Raises:
            EmptyGroupError: If the group has no members
        """
        parsed = parse_amount(amount)
        if parsed is None or parsed <= 0:
            self._audit_logger.log_operation_rejected(
                "request_money_from_group", f"invalid amount {amount!r}"
            )
            return []
        if not self._is_valid_group_index(group_index):
            self._audit_logger.log_operation_rejected(
                "request_money_from_group", f"no group at index {group_index}"
            )
            return []

        group = self._groups[group_index]
        member_count = len(group.members)
        if member_count == 0:
            raise EmptyGroupError(group.id, group.name)

        share = parsed / float(member_count)
        created = []
        for member in group.members:
            transaction = Transaction(
                type=TransactionType.REQUEST,
                description=f"Request from {member}",
                amount=share,
            )
            self._transactions.insert(0, transaction)
            created.append(transaction)

        # Reconstructed from the share rather than subtracting the
        # requested amount directly
        self._balance -= share * float(member_count)

        self.save_transactions()
        self.save_balance()
        self._audit_logger.log_money_requested(group, parsed, share, self._balance)
        return created

    def _is_valid_group_index(self, group_index: int) -> bool:
        return (
            isinstance(group_index, int)
            and not isinstance(group_index, bool)
            and 0 <= group_index < len(self._groups)
        )


def create_ledger(
    store: Optional[KeyValueStore] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> LedgerModel:
    """
    Factory for a ready-to-use ledger.

    Uses the configured data directory when no store is given, and loads
    whatever was persisted there.
    """
    ledger = LedgerModel(
        store=store or FileKeyValueStore(),
        audit_logger=audit_logger,
    )
    ledger.load()
    return ledger
