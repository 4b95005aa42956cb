from shieldvm.synthesis.base import CircuitBackend, UserInput
from shieldvm.synthesis.reference import ReferenceBackend, ReferenceProof, verify_proof

__all__ = ["CircuitBackend", "UserInput", "ReferenceBackend", "ReferenceProof", "verify_proof"]
