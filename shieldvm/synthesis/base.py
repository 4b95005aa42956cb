"""
Interface to the constraint synthesis and proving backend.

The backend compiles a function into a circuit, assigns it from the
caller's inputs and proves it.  The projection engine only needs the
resulting register assignment and an opaque proof it can serialize.
"""

from collections.abc import Sequence
from typing import Any, Protocol, Union

from shieldvm.circuit.registers import RegisterAssignmentTable
from shieldvm.ledger.record import PlaintextRecord
from shieldvm.ledger.values import PrimitiveValue
from shieldvm.program.model import Function, Program

# A caller input is a primitive for scalar registers, a record for record registers
UserInput = Union[PrimitiveValue, PlaintextRecord]


class CircuitBackend(Protocol):
    def synthesize_and_prove(
        self,
        program: Program,
        function: Function,
        inputs: Sequence[UserInput],
    ) -> tuple[RegisterAssignmentTable, Any]:
        """
        Synthesize ``function``, assign it from ``inputs`` and prove it.

        Raises:
            SynthesisError: the inputs do not type-check against the signature
        """
        ...

    def serialize_proof(self, proof: Any) -> bytes:
        ...
