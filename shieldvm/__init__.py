"""
shieldvm: projects circuit witnesses into shielded-ledger transitions.

Pipeline:
    1. Synthesize and prove a function on a circuit backend
    2. Resolve each declared register in the register assignment table
    3. Tag inputs/outputs public or private from the circuit's witness flags
    4. Materialize records: nullifiers for inputs, ciphertexts for outputs
    5. Assemble the Transition bound to the hex-encoded proof

Components:
    circuit      typed circuit values and the register assignment table
    projection   visibility projector and record materializer
    execution    transition assembler and execution context
    ledger       primitive/projected values, plaintext records, transitions
    accounts     private keys and view keys
    program      program model and the built-in credits program
    synthesis    circuit backend interface and the reference backend
"""

from shieldvm.accounts.keys import PrivateKey, ViewKey, derive_view_key
from shieldvm.execution.assembler import TransitionAssembler, credits_execution, execution
from shieldvm.ledger.transition import Transition
from shieldvm.projection.projector import VisibilityProjector
from shieldvm.projection.materializer import RecordMaterializer

__all__ = [
    "PrivateKey", "ViewKey", "derive_view_key",
    "TransitionAssembler", "credits_execution", "execution",
    "Transition", "VisibilityProjector", "RecordMaterializer",
]
