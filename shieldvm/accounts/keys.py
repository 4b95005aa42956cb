"""
Account keys.

A PrivateKey is a 32-byte seed.  Everything else is derived from it with
HKDF-SHA256 under distinct info labels:

    private key ──► view key            (decrypts records addressed to the owner)
    private key ──► serial number key   (derives record nullifiers)
    view key    ──► record cipher key   (AES-256-GCM key for record ciphertexts)
"""

import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_KEY_SIZE = 32

_VIEW_KEY_INFO = b"shieldvm/view-key/v1"
_SERIAL_NUMBER_INFO = b"shieldvm/serial-number-key/v1"
_RECORD_CIPHER_INFO = b"shieldvm/record-cipher-key/v1"


def _derive(secret: bytes, info: bytes) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=_KEY_SIZE, salt=None, info=info).derive(secret)


@dataclass(frozen=True)
class ViewKey:
    seed: bytes

    def __post_init__(self):
        if len(self.seed) != _KEY_SIZE:
            raise ValueError(f"View key must be {_KEY_SIZE} bytes, got {len(self.seed)}")

    def __repr__(self) -> str:
        return "ViewKey(***)"

    def record_cipher_key(self) -> bytes:
        """AES-256-GCM key used to encrypt records for this viewer."""
        return _derive(self.seed, _RECORD_CIPHER_INFO)

    @classmethod
    def from_private_key(cls, private_key: "PrivateKey") -> "ViewKey":
        return cls(_derive(private_key.seed, _VIEW_KEY_INFO))


@dataclass(frozen=True)
class PrivateKey:
    seed: bytes

    def __post_init__(self):
        if len(self.seed) != _KEY_SIZE:
            raise ValueError(f"Private key must be {_KEY_SIZE} bytes, got {len(self.seed)}")

    def __repr__(self) -> str:
        return "PrivateKey(***)"

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(secrets.token_bytes(_KEY_SIZE))

    @classmethod
    def from_hex(cls, value: str) -> "PrivateKey":
        return cls(bytes.fromhex(value))

    def hex(self) -> str:
        return self.seed.hex()

    def serial_number_key(self) -> bytes:
        """Key that binds record nullifiers to this spender."""
        return _derive(self.seed, _SERIAL_NUMBER_INFO)


def derive_view_key(private_key: PrivateKey) -> ViewKey:
    return ViewKey.from_private_key(private_key)
