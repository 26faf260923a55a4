"""
JSON Codec for Persisted Ledger Values

Each persisted value (balance, transaction list, group list) is encoded
as a standalone JSON document using a pydantic TypeAdapter, so the same
schemas that validate in-memory models also validate what comes back
from disk.

Non-finite floats are written as the Infinity / -Infinity / NaN constants
(which pydantic's JSON parser accepts) so an overflowed balance survives a
restart instead of degrading to null.

DESIGN DECISION: decode() never raises. Missing, malformed or wrongly
shaped bytes all come back as None, and the caller decides what to do
(the ledger keeps its current value).
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from peerpay.models.ledger import Group, Transaction


T = TypeVar("T")

_JSON_CONFIG = ConfigDict(ser_json_inf_nan="constants")


class Codec(Generic[T]):
    """
    Encodes one value shape to JSON bytes and back.

    The shape must be a plain type or container (float, list[Model]);
    pydantic models carry their own config.
    """

    def __init__(self, type_: Any):
        self._adapter: TypeAdapter[T] = TypeAdapter(type_, config=_JSON_CONFIG)

    def encode(self, value: T) -> Optional[bytes]:
        """
        Serialize a value.

        Returns None when the value cannot be serialized, in which
        case nothing should be written.
        """
        try:
            return self._adapter.dump_json(value)
        except PydanticSerializationError:
            return None

    def decode(self, data: Optional[bytes]) -> Optional[T]:
        """
        Deserialize bytes produced by encode().

        Returns None for absent data, invalid JSON, or JSON that does not
        match the expected shape.
        """
        if data is None:
            return None
        try:
            return self._adapter.validate_json(data)
        except ValidationError:
            return None


BALANCE_CODEC: Codec[float] = Codec(float)
TRANSACTIONS_CODEC: Codec[list[Transaction]] = Codec(list[Transaction])
GROUPS_CODEC: Codec[list[Group]] = Codec(list[Group])
