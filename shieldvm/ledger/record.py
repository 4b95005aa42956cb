"""
Plaintext records.

A PlaintextRecord is the ledger view of a record after its circuit gadgets
have been evaluated.  It is immutable and is either consumed (a serial
number is derived from it) or produced (it is encrypted for a viewer).

Serial numbers are HMAC-SHA256 tags over the record commitment, keyed by
the spender's serial number key: the same record spent by the same key
always yields the same nullifier, and the tag reveals nothing about the
record's contents.

Ciphertexts are AES-256-GCM under the viewer's record cipher key.
Format: record_ct::<base64(nonce + ciphertext)>
"""

import base64
import hashlib
import hmac
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from shieldvm.accounts.keys import PrivateKey, ViewKey
from shieldvm.ledger.values import ADDRESS_CAPACITY, PrimitiveValue, address_to_str, to_address

# Prefix to identify record ciphertexts
_CIPHERTEXT_PREFIX = "record_ct::"
_RECORD_AAD = b"shieldvm-record-v1"
_NONCE_SIZE = 12
_U64_MAX = (1 << 64) - 1


@dataclass(frozen=True)
class PlaintextRecord:
    owner: bytes
    gates: int
    entries: Mapping[str, PrimitiveValue] = field(default_factory=dict)
    nonce: int | None = None

    def __post_init__(self):
        if len(self.owner) != ADDRESS_CAPACITY:
            raise ValueError(f"Record owner must be a {ADDRESS_CAPACITY}-byte buffer")
        if not 0 <= self.gates <= _U64_MAX:
            raise ValueError(f"Record gates {self.gates} out of u64 range")
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @classmethod
    def new(
        cls,
        owner: str,
        gates: int,
        entries: Mapping[str, PrimitiveValue] | None = None,
        nonce: int | None = None,
    ) -> "PlaintextRecord":
        return cls(to_address(owner), gates, entries or {}, nonce)

    @property
    def owner_address(self) -> str:
        return address_to_str(self.owner)

    def to_dict(self) -> dict:
        return {
            "owner": self.owner_address,
            "gates": self.gates,
            "entries": {name: value.to_json() for name, value in self.entries.items()},
            "nonce": None if self.nonce is None else str(self.nonce),
        }

    def _canonical_bytes(self) -> bytes:
        # Entries stay in declaration order; they are not sorted
        payload = {
            "owner": self.owner.hex(),
            "gates": self.gates,
            "entries": [[name, value.to_json()] for name, value in self.entries.items()],
            "nonce": None if self.nonce is None else str(self.nonce),
        }
        return json.dumps(payload, separators=(",", ":")).encode()

    @classmethod
    def _from_canonical_bytes(cls, raw: bytes) -> "PlaintextRecord":
        payload = json.loads(raw)
        return cls(
            owner=bytes.fromhex(payload["owner"]),
            gates=payload["gates"],
            entries={name: PrimitiveValue.from_json(value) for name, value in payload["entries"]},
            nonce=None if payload["nonce"] is None else int(payload["nonce"]),
        )

    def commitment(self) -> bytes:
        return hashlib.sha256(self._canonical_bytes()).digest()

    def serial_number(self, private_key: PrivateKey) -> str:
        """Nullifier marking this record as spent by ``private_key``."""
        return hmac.new(private_key.serial_number_key(), self.commitment(), hashlib.sha256).hexdigest()

    def encrypt(self, view_key: ViewKey) -> str:
        """Encrypt the record so only the holder of ``view_key`` can read it."""
        nonce = os.urandom(_NONCE_SIZE)
        aesgcm = AESGCM(view_key.record_cipher_key())
        ciphertext = aesgcm.encrypt(nonce, self._canonical_bytes(), _RECORD_AAD)
        payload = base64.b64encode(nonce + ciphertext).decode("ascii")
        return f"{_CIPHERTEXT_PREFIX}{payload}"

    @classmethod
    def decrypt(cls, ciphertext: str, view_key: ViewKey) -> "PlaintextRecord":
        """Decrypt a record ciphertext; raises InvalidTag for the wrong view key."""
        if not is_record_ciphertext(ciphertext):
            raise ValueError("Not a record ciphertext")

        payload = base64.b64decode(ciphertext[len(_CIPHERTEXT_PREFIX):])
        nonce = payload[:_NONCE_SIZE]
        body = payload[_NONCE_SIZE:]

        aesgcm = AESGCM(view_key.record_cipher_key())
        return cls._from_canonical_bytes(aesgcm.decrypt(nonce, body, _RECORD_AAD))


def is_record_ciphertext(value: str) -> bool:
    return bool(value) and value.startswith(_CIPHERTEXT_PREFIX)
