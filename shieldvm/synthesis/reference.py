"""
Reference circuit backend.

An in-process backend for development and tests.  It assigns a function's
registers by evaluating its instructions directly instead of building
arithmetic gates, and issues an HMAC-SHA256 attestation in place of a
succinct proof.  The attestation binds the program, the function and the
function's public inputs, so it verifies only against the exact public
inputs the circuit exposed.

Supported instructions:
    add / sub / mul   unsigned integers (overflow fails synthesis) and fields
    cast              builds a record: owner, gates, then declared entries

Operands are registers (``r0``), record members (``r0.owner``,
``r0.gates``, ``r0.<entry>``) or literals (``1u64``, ``7field``,
``true``).

Witness allocation follows the declarations: private inputs and outputs
are witnesses, public ones are public inputs, and every record gadget is a
witness.  An output that names an input register must repeat its visibility.
"""

import hashlib
import hmac
import json
import logging
import operator
import re
import secrets
from collections.abc import Sequence
from dataclasses import dataclass

from shieldvm.circuit.registers import RegisterAssignmentTable
from shieldvm.circuit.values import (
    SCALAR_TYPES, UNSIGNED_TYPES, Address, CircuitRecord, CircuitValue, CircuitVariable, Field,
    Record, UInt64,
)
from shieldvm.config import settings
from shieldvm.errors import SynthesisError
from shieldvm.ledger.record import PlaintextRecord
from shieldvm.ledger.values import PrimitiveKind, PrimitiveValue, address_to_str
from shieldvm.program.model import Function, Instruction, Program, RegisterDecl, Visibility
from shieldvm.synthesis.base import UserInput

logger = logging.getLogger(__name__)

# Scalar field of BLS12-377
FIELD_MODULUS = 8444461749428370424248824938781546531375899335154063827935233455917409239041

_LITERAL_RE = re.compile(r"^(\d+)(u8|u16|u32|u64|u128|field)$")

_ARITHMETIC = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
}


@dataclass(frozen=True)
class ReferenceProof:
    program_id: str
    function_name: str
    tag: str

    def to_bytes(self) -> bytes:
        return json.dumps(
            {"program_id": self.program_id, "function": self.function_name, "tag": self.tag},
            separators=(",", ":"),
        ).encode()


def _attest(program_id: str, function_name: str, public_inputs: Sequence) -> str:
    raw = json.dumps([program_id, function_name, list(public_inputs)], separators=(",", ":"))
    return hmac.new(settings.proving_key.encode(), raw.encode(), hashlib.sha256).hexdigest()


def verify_proof(proof: ReferenceProof, public_inputs: Sequence) -> bool:
    """Check ``proof`` against the public inputs the verifier expects."""
    expected = _attest(proof.program_id, proof.function_name, public_inputs)
    return hmac.compare_digest(expected, proof.tag)


def _fresh_nonce() -> int:
    return secrets.randbelow(FIELD_MODULUS)


def _allocate(cls: type, value, witness: bool, function_name: str) -> CircuitValue:
    try:
        return cls(CircuitVariable(value, witness=witness))
    except (TypeError, ValueError) as exc:
        raise SynthesisError(str(exc), function_name=function_name) from exc


class ReferenceBackend:
    """Evaluates functions in-process; see module docstring."""

    def synthesize_and_prove(
        self,
        program: Program,
        function: Function,
        inputs: Sequence[UserInput],
    ) -> tuple[RegisterAssignmentTable, ReferenceProof]:
        if len(inputs) != len(function.inputs):
            raise SynthesisError(
                f"Function expects {len(function.inputs)} inputs, got {len(inputs)}",
                function_name=function.name,
            )

        registers: dict[str, CircuitValue | None] = {}
        for decl, user_input in zip(function.inputs, inputs):
            registers[decl.register] = self._allocate_input(program, function, decl, user_input)

        for instruction in function.instructions:
            registers[instruction.destination] = self._execute(program, function, instruction, registers)

        input_visibility = {decl.register: decl.visibility for decl in function.inputs}
        for decl in function.outputs:
            # Inputs and outputs share one register table
            declared = input_visibility.get(decl.register)
            if declared is not None and declared is not decl.visibility:
                raise SynthesisError(
                    f'Register "{decl.register}" is input as {declared.value} '
                    f"but output as {decl.visibility.value}",
                    function_name=function.name,
                    register=decl.register,
                )
            if registers.get(decl.register) is None:
                raise SynthesisError(
                    f'Output register "{decl.register}" is never assigned',
                    function_name=function.name,
                    register=decl.register,
                )
            registers[decl.register] = self._allocate_output(function, decl, registers[decl.register])

        public_inputs = [
            registers[decl.register].value()
            for decl in (*function.inputs, *function.outputs)
            if decl.visibility is Visibility.PUBLIC
        ]
        proof = ReferenceProof(program.id, function.name, _attest(program.id, function.name, public_inputs))

        logger.debug(
            "Synthesized %s/%s: %d registers, %d public inputs",
            program.id, function.name, len(registers), len(public_inputs),
        )
        return RegisterAssignmentTable(registers), proof

    def serialize_proof(self, proof: ReferenceProof) -> bytes:
        return proof.to_bytes()

    # ── Allocation ───────────────────────────────────────────────────────────

    def _allocate_input(
        self,
        program: Program,
        function: Function,
        decl: RegisterDecl,
        user_input: UserInput,
    ) -> CircuitValue:
        if decl.is_record:
            if not isinstance(user_input, PlaintextRecord):
                raise SynthesisError(
                    f"Expected a record for {decl.value_type}, got {type(user_input).__name__}",
                    function_name=function.name,
                    register=decl.register,
                )
            if program.get_record_type(decl.value_type) is None:
                raise SynthesisError(
                    f"Unknown record type {decl.value_type}",
                    function_name=function.name,
                    register=decl.register,
                )
            return Record(self._record_gadget(user_input, function.name))

        cls = SCALAR_TYPES.get(decl.value_type)
        if cls is None:
            raise SynthesisError(
                f"Unsupported input type {decl.value_type}",
                function_name=function.name,
                register=decl.register,
            )
        if not isinstance(user_input, PrimitiveValue) or user_input.kind.value != decl.value_type:
            raise SynthesisError(
                f"Expected {decl.value_type} input, got {user_input!r}",
                function_name=function.name,
                register=decl.register,
            )
        return self._primitive_gadget(user_input, decl.visibility is Visibility.PRIVATE, function.name)

    def _allocate_output(self, function: Function, decl: RegisterDecl, value: CircuitValue) -> CircuitValue:
        if isinstance(value, Record):
            if not decl.is_record:
                raise SynthesisError(
                    f"Register holds a record but is declared {decl.value_type}",
                    function_name=function.name,
                    register=decl.register,
                )
            return value
        if value.type_name != decl.value_type:
            raise SynthesisError(
                f"Register holds {value.type_name} but is declared {decl.value_type}",
                function_name=function.name,
                register=decl.register,
            )
        witness = decl.visibility is not Visibility.PUBLIC
        return type(value)(CircuitVariable(value.variable.assignment, witness=witness))

    def _primitive_gadget(self, value: PrimitiveValue, witness: bool, function_name: str) -> CircuitValue:
        cls = SCALAR_TYPES[value.kind.value]
        raw = address_to_str(value.value) if value.kind is PrimitiveKind.ADDRESS else value.value
        return _allocate(cls, raw, witness, function_name)

    def _record_gadget(self, record: PlaintextRecord, function_name: str) -> CircuitRecord:
        entries = {
            name: self._primitive_gadget(value, True, function_name)
            for name, value in record.entries.items()
        }
        return CircuitRecord(
            owner=Address.private(record.owner_address),
            gates=UInt64.private(record.gates),
            entries=entries,
            nonce=record.nonce if record.nonce is not None else _fresh_nonce(),
        )

    # ── Instructions ─────────────────────────────────────────────────────────

    def _operand(self, token: str, registers: dict, function: Function) -> CircuitValue:
        literal = _LITERAL_RE.match(token)
        if literal:
            return _allocate(SCALAR_TYPES[literal.group(2)], int(literal.group(1)), False, function.name)
        if token in ("true", "false"):
            return SCALAR_TYPES["boolean"].public(token == "true")

        register, _, member = token.partition(".")
        value = registers.get(register)
        if value is None:
            raise SynthesisError(
                f'Operand "{token}" is not assigned', function_name=function.name, register=register,
            )
        if not member:
            return value
        if not isinstance(value, Record):
            raise SynthesisError(
                f'Operand "{token}" accesses a member of a non-record', function_name=function.name,
                register=register,
            )
        if member == "owner":
            return value.record.owner
        if member == "gates":
            return value.record.gates
        if member in value.record.entries:
            return value.record.entries[member]
        raise SynthesisError(
            f'Record in "{register}" has no member "{member}"', function_name=function.name,
            register=register,
        )

    def _execute(
        self,
        program: Program,
        function: Function,
        instruction: Instruction,
        registers: dict,
    ) -> CircuitValue:
        operands = [self._operand(token, registers, function) for token in instruction.operands]

        if instruction.opcode in _ARITHMETIC:
            return self._arithmetic(function, instruction, operands)
        if instruction.opcode == "cast":
            return self._cast(program, function, instruction, operands)
        raise SynthesisError(
            f"Unsupported instruction '{instruction.opcode}'", function_name=function.name,
            register=instruction.destination,
        )

    def _arithmetic(self, function: Function, instruction: Instruction, operands: list) -> CircuitValue:
        if len(operands) != 2 or type(operands[0]) is not type(operands[1]):
            raise SynthesisError(
                f"'{instruction.opcode}' needs two operands of the same type",
                function_name=function.name,
                register=instruction.destination,
            )
        left, right = operands
        cls = type(left)
        if cls not in (*UNSIGNED_TYPES, Field):
            raise SynthesisError(
                f"'{instruction.opcode}' is not defined for {cls.type_name}",
                function_name=function.name,
                register=instruction.destination,
            )

        result = _ARITHMETIC[instruction.opcode](left.value(), right.value())
        if cls is Field:
            result %= FIELD_MODULUS
        elif not 0 <= result < (1 << cls.BITS):
            raise SynthesisError(
                f"'{instruction.opcode}' overflows {cls.type_name}",
                function_name=function.name,
                register=instruction.destination,
            )
        return cls(CircuitVariable(result, witness=left.is_witness() or right.is_witness()))

    def _cast(self, program: Program, function: Function, instruction: Instruction, operands: list) -> Record:
        record_type = program.get_record_type(instruction.cast_type or "")
        if record_type is None:
            raise SynthesisError(
                f"Unknown record type {instruction.cast_type}",
                function_name=function.name,
                register=instruction.destination,
            )
        if len(operands) != 2 + len(record_type.entries):
            raise SynthesisError(
                f"cast into {instruction.cast_type} expects {2 + len(record_type.entries)} operands",
                function_name=function.name,
                register=instruction.destination,
            )

        owner, gates, *entry_values = operands
        if not isinstance(owner, Address) or not isinstance(gates, UInt64):
            raise SynthesisError(
                "cast into a record expects an address owner and u64 gates",
                function_name=function.name,
                register=instruction.destination,
            )

        entries = {}
        for (name, entry_type), value in zip(record_type.entries, entry_values):
            if isinstance(value, Record) or value.type_name != entry_type:
                raise SynthesisError(
                    f"Record entry '{name}' expects {entry_type}",
                    function_name=function.name,
                    register=instruction.destination,
                )
            entries[name] = type(value)(CircuitVariable(value.variable.assignment, witness=True))

        return Record(CircuitRecord(
            owner=Address.private(owner.value()),
            gates=UInt64.private(gates.value()),
            entries=entries,
            nonce=_fresh_nonce(),
        ))
