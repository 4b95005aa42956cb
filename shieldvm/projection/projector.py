"""
Visibility Projector: maps a function's declared registers to the
visibility-tagged values a ledger accepts.

For each declared register, in declaration order:
    1. Resolve the register in the assignment table (missing / empty is fatal)
    2. Read the witness flag from the circuit value itself
    3. Dispatch on the value kind:
         scalar / address   Private if witness, Public otherwise
         record (input)     RecordValue(nullifier, plaintext)
         record (output)    EncryptedRecord(ciphertext)
       A record that is not a witness fails with RecordMustBePrivate.

Output tagging: with ``legacy_output_visibility`` set, non-witness outputs
are tagged with the legacy rule (boolean and field public, every other
kind private).  Otherwise inputs and outputs follow the same rule.
"""

import logging
from contextlib import contextmanager

from shieldvm.accounts.keys import PrivateKey, ViewKey
from shieldvm.circuit.registers import RegisterAssignmentTable
from shieldvm.circuit.values import Boolean, CircuitValue, Field, Record
from shieldvm.config import settings
from shieldvm.errors import ExecutionError, RecordMustBePrivate
from shieldvm.ledger.values import EncryptedRecord, Private, ProjectedValue, Public, RecordValue
from shieldvm.program.model import Function, RegisterDecl
from shieldvm.projection.materializer import RecordMaterializer, extract_primitive

logger = logging.getLogger(__name__)


class VisibilityProjector:
    """Projects register assignments into ordered, tagged ledger values."""

    def __init__(
        self,
        materializer: RecordMaterializer | None = None,
        legacy_output_visibility: bool | None = None,
    ):
        self.materializer = materializer or RecordMaterializer()
        if legacy_output_visibility is None:
            legacy_output_visibility = settings.legacy_output_visibility
        self.legacy_output_visibility = legacy_output_visibility

    def project_inputs(
        self,
        function: Function,
        table: RegisterAssignmentTable,
        private_key: PrivateKey,
    ) -> dict[str, ProjectedValue]:
        """
        Project the function's declared inputs.

        Record inputs are consumed: each yields its nullifier under
        ``private_key`` alongside the plaintext record.
        """
        projected: dict[str, ProjectedValue] = {}
        for decl in function.inputs:
            with _register_context(function, decl):
                value = table.resolve(decl.register)
                projected[decl.register] = self._project_input(value, private_key)

        logger.debug("Projected %d inputs of %s", len(projected), function.name)
        return projected

    def project_outputs(
        self,
        function: Function,
        table: RegisterAssignmentTable,
        view_key: ViewKey | None,
    ) -> dict[str, ProjectedValue]:
        """
        Project the function's declared outputs.

        Record outputs are encrypted for ``view_key``.  Without a view key
        they are returned as fresh, unspent plaintext records.
        """
        projected: dict[str, ProjectedValue] = {}
        for decl in function.outputs:
            with _register_context(function, decl):
                value = table.resolve(decl.register)
                projected[decl.register] = self._project_output(value, view_key)

        logger.debug("Projected %d outputs of %s", len(projected), function.name)
        return projected

    def _project_input(self, value: CircuitValue, private_key: PrivateKey) -> ProjectedValue:
        witness = value.is_witness()
        if isinstance(value, Record):
            if not witness:
                raise RecordMustBePrivate("Records cannot be public")
            nullifier, record = self.materializer.consume(value.record, private_key)
            return RecordValue(nullifier, record)
        return _tag(value, witness)

    def _project_output(self, value: CircuitValue, view_key: ViewKey | None) -> ProjectedValue:
        witness = value.is_witness()
        if isinstance(value, Record):
            if not witness:
                raise RecordMustBePrivate("Records cannot be public")
            if view_key is None:
                return RecordValue(None, self.materializer.materialize(value.record))
            return EncryptedRecord(self.materializer.produce(value.record, view_key))
        if not witness and self.legacy_output_visibility and not isinstance(value, (Boolean, Field)):
            return Private(extract_primitive(value))
        return _tag(value, witness)


def _tag(value: CircuitValue, witness: bool) -> ProjectedValue:
    primitive = extract_primitive(value)
    return Private(primitive) if witness else Public(primitive)


@contextmanager
def _register_context(function: Function, decl: RegisterDecl):
    """Attach function and register names to errors raised while projecting."""
    try:
        yield
    except ExecutionError as exc:
        exc.with_context(function_name=function.name, register=decl.register)
        raise
