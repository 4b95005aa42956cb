"""
Ledger data model: primitive and projected values, plaintext records and
transitions.
"""

from shieldvm.ledger.values import (
    ADDRESS_CAPACITY, EncryptedRecord, PrimitiveKind, PrimitiveValue, Private,
    ProjectedValue, Public, RecordValue, address_to_str, to_address,
)
from shieldvm.ledger.record import PlaintextRecord, is_record_ciphertext
from shieldvm.ledger.transition import Transition

__all__ = [
    "ADDRESS_CAPACITY", "EncryptedRecord", "PrimitiveKind", "PrimitiveValue", "Private",
    "ProjectedValue", "Public", "RecordValue", "address_to_str", "to_address",
    "PlaintextRecord", "is_record_ciphertext", "Transition",
]
