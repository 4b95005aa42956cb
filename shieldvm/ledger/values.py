"""
Ledger-facing values.

PrimitiveValue is a plain typed value as the ledger sees it (no circuit
variables attached).  Projected values wrap primitives and records with the
visibility tag the ledger verifies against:

    Public(primitive)             revealed input/output
    Private(primitive)            hidden input/output
    RecordValue(nullifier, rec)   record; nullifier set when consumed as input,
                                  None for a freshly produced record
    EncryptedRecord(ciphertext)   produced record, readable only by its viewer
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Union

from shieldvm.errors import AddressTooLong

if TYPE_CHECKING:
    from shieldvm.ledger.record import PlaintextRecord

ADDRESS_CAPACITY = 63


class PrimitiveKind(str, Enum):
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    ADDRESS = "address"
    BOOLEAN = "boolean"
    FIELD = "field"


def to_address(address: str) -> bytes:
    """Copy an address string into the fixed 63-byte, zero-padded buffer."""
    raw = address.encode("utf-8")
    if len(raw) > ADDRESS_CAPACITY:
        raise AddressTooLong(
            f"Address is {len(raw)} bytes, exceeds capacity of {ADDRESS_CAPACITY}"
        )
    return raw.ljust(ADDRESS_CAPACITY, b"\x00")


def address_to_str(buffer: bytes) -> str:
    return buffer.rstrip(b"\x00").decode("utf-8")


@dataclass(frozen=True)
class PrimitiveValue:
    kind: PrimitiveKind
    value: Any

    def __post_init__(self):
        if self.kind is PrimitiveKind.ADDRESS and (
            not isinstance(self.value, bytes) or len(self.value) != ADDRESS_CAPACITY
        ):
            raise ValueError(f"Address primitives hold a {ADDRESS_CAPACITY}-byte buffer")

    @classmethod
    def address(cls, address: str) -> "PrimitiveValue":
        return cls(PrimitiveKind.ADDRESS, to_address(address))

    def to_json(self) -> dict:
        if self.kind is PrimitiveKind.ADDRESS:
            return {"type": self.kind.value, "value": address_to_str(self.value)}
        return {"type": self.kind.value, "value": self.value}

    @classmethod
    def from_json(cls, data: dict) -> "PrimitiveValue":
        kind = PrimitiveKind(data["type"])
        if kind is PrimitiveKind.ADDRESS:
            return cls.address(data["value"])
        return cls(kind, data["value"])


# ── Projected values ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Public:
    value: PrimitiveValue
    visibility: ClassVar[str] = "public"


@dataclass(frozen=True)
class Private:
    value: PrimitiveValue
    visibility: ClassVar[str] = "private"


@dataclass(frozen=True)
class RecordValue:
    nullifier: str | None
    record: "PlaintextRecord"
    visibility: ClassVar[str] = "record"

    @property
    def is_spent(self) -> bool:
        return self.nullifier is not None


@dataclass(frozen=True)
class EncryptedRecord:
    ciphertext: str
    visibility: ClassVar[str] = "encrypted_record"


ProjectedValue = Union[Public, Private, RecordValue, EncryptedRecord]
