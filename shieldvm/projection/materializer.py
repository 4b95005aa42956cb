"""
Record Materializer: turns in-circuit records into plaintext records.

    materialize   evaluate owner, gates and every entry (declaration order)
    consume       materialize + derive the spender's nullifier (input side)
    produce       materialize + encrypt for the viewer (output side)

A consumed record is never encrypted and a produced record never gets a
nullifier in the same step.
"""

import logging
from typing import assert_never

from shieldvm.accounts.keys import PrivateKey, ViewKey
from shieldvm.circuit.values import (
    Address, Boolean, CircuitRecord, CircuitValue, Field, Record,
    UInt8, UInt16, UInt32, UInt64, UInt128,
)
from shieldvm.errors import NestedRecordsUnsupported
from shieldvm.ledger.record import PlaintextRecord
from shieldvm.ledger.values import PrimitiveKind, PrimitiveValue, to_address
from shieldvm.metrics import records_consumed_total, records_produced_total

logger = logging.getLogger(__name__)


def extract_primitive(value: CircuitValue) -> PrimitiveValue:
    """
    Evaluate a non-record circuit value into a ledger primitive.

    Raises:
        UnassignedWitness: the value has no concrete assignment
        NestedRecordsUnsupported: ``value`` is a record (only reachable
            through a record entry; record registers are dispatched first)
    """
    if isinstance(value, UInt8):
        return PrimitiveValue(PrimitiveKind.U8, value.value())
    elif isinstance(value, UInt16):
        return PrimitiveValue(PrimitiveKind.U16, value.value())
    elif isinstance(value, UInt32):
        return PrimitiveValue(PrimitiveKind.U32, value.value())
    elif isinstance(value, UInt64):
        return PrimitiveValue(PrimitiveKind.U64, value.value())
    elif isinstance(value, UInt128):
        return PrimitiveValue(PrimitiveKind.U128, value.value())
    elif isinstance(value, Boolean):
        return PrimitiveValue(PrimitiveKind.BOOLEAN, value.value())
    elif isinstance(value, Field):
        return PrimitiveValue(PrimitiveKind.FIELD, value.value())
    elif isinstance(value, Address):
        return PrimitiveValue(PrimitiveKind.ADDRESS, to_address(value.value()))
    elif isinstance(value, Record):
        raise NestedRecordsUnsupported("Nested records are not supported")
    else:
        assert_never(value)


class RecordMaterializer:
    """Builds plaintext records and derives their nullifiers or ciphertexts."""

    def materialize(self, record: CircuitRecord) -> PlaintextRecord:
        entries: dict[str, PrimitiveValue] = {}
        for name, value in record.entries.items():
            if isinstance(value, Record):
                raise NestedRecordsUnsupported(f"Record entry '{name}' is itself a record")
            entries[name] = extract_primitive(value)

        return PlaintextRecord(
            owner=to_address(record.owner.value()),
            gates=record.gates.value(),
            entries=entries,
            nonce=record.nonce,
        )

    def consume(self, record: CircuitRecord, private_key: PrivateKey) -> tuple[str, PlaintextRecord]:
        """Materialize an input record and derive its serial number."""
        plaintext = self.materialize(record)
        nullifier = plaintext.serial_number(private_key)
        records_consumed_total.inc()
        logger.debug("Consumed record with %d entries", len(plaintext.entries))
        return nullifier, plaintext

    def produce(self, record: CircuitRecord, view_key: ViewKey) -> str:
        """Materialize an output record and encrypt it for ``view_key``."""
        plaintext = self.materialize(record)
        ciphertext = plaintext.encrypt(view_key)
        records_produced_total.inc()
        logger.debug("Produced record with %d entries", len(plaintext.entries))
        return ciphertext
