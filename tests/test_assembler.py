"""End-to-end tests for transition assembly."""

import json

import pytest
from prometheus_client import REGISTRY
from pydantic import ValidationError

from shieldvm.accounts.keys import derive_view_key
from shieldvm.circuit.registers import RegisterAssignmentTable
from shieldvm.circuit.values import UInt16
from shieldvm.errors import CoinbaseNotCallable, RegisterNotFound, SynthesisError
from shieldvm.execution.assembler import TransitionAssembler, credits_execution, execution
from shieldvm.ledger.record import PlaintextRecord
from shieldvm.ledger.values import (
    EncryptedRecord, PrimitiveKind, PrimitiveValue, Private, Public, RecordValue,
)
from shieldvm.program.credits import credits
from shieldvm.program.model import (
    Function, FunctionNotFound, Instruction, Program, RegisterDecl,
)
from shieldvm.projection import VisibilityProjector
from shieldvm.schemas import TransitionSchema
from shieldvm.synthesis.reference import ReferenceProof, verify_proof
from tests.conftest import ADDRESS, OTHER_ADDRESS, PRIVATE, PUBLIC, StubBackend


def u16(value: int) -> PrimitiveValue:
    return PrimitiveValue(PrimitiveKind.U16, value)


def u64(value: int) -> PrimitiveValue:
    return PrimitiveValue(PrimitiveKind.U64, value)


_KINDS = (PrimitiveKind.U16, PrimitiveKind.U32, PrimitiveKind.U64, PrimitiveKind.U128)


def _proof(transition) -> ReferenceProof:
    data = json.loads(bytes.fromhex(transition.proof))
    return ReferenceProof(data["program_id"], data["function"], data["tag"])


def _sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


# ── Scalar functions ─────────────────────────────────────────────────────────

class TestScalarExecution:
    def test_public_addition(self, add_program, private_key):
        transition = execution(add_program, "hello_1", [u16(1), u16(1)], private_key)

        assert transition.program_id == "add.aleo"
        assert transition.function_name == "hello_1"
        assert transition.inputs == (Public(u16(1)), Public(u16(1)))
        assert transition.outputs == (Public(u16(2)),)
        assert transition.fee == 0
        assert verify_proof(_proof(transition), [1, 1, 2])

    def test_private_addition(self, add_program, private_key):
        transition = execution(add_program, "hello_2", [u16(1), u16(1)], private_key)

        assert transition.inputs == (Private(u16(1)), Private(u16(1)))
        assert transition.outputs == (Private(u16(2)),)
        assert verify_proof(_proof(transition), [])

    def test_mixed_visibility(self, add_program, private_key):
        transition = execution(add_program, "hello_3", [u16(1), u16(1)], private_key)

        assert transition.inputs == (Public(u16(1)), Private(u16(1)))
        assert transition.outputs == (Private(u16(2)),)
        assert verify_proof(_proof(transition), [1])
        assert not verify_proof(_proof(transition), [1, 1])

    @pytest.mark.parametrize("offset, kind", list(enumerate(_KINDS)))
    @pytest.mark.parametrize("program_fixture, expected", [("add_program", 5), ("sub_program", 1)])
    def test_integer_types_and_visibilities(self, request, private_key, offset, kind, program_fixture, expected):
        program = request.getfixturevalue(program_fixture)
        inputs = [PrimitiveValue(kind, 3), PrimitiveValue(kind, 2)]

        public = execution(program, f"hello_{3 * offset + 1}", inputs, private_key)
        private = execution(program, f"hello_{3 * offset + 2}", inputs, private_key)
        mixed = execution(program, f"hello_{3 * offset + 3}", inputs, private_key)

        three, two, result = PrimitiveValue(kind, 3), PrimitiveValue(kind, 2), PrimitiveValue(kind, expected)
        assert public.inputs == (Public(three), Public(two))
        assert public.outputs == (Public(result),)
        assert verify_proof(_proof(public), [3, 2, expected])

        assert private.inputs == (Private(three), Private(two))
        assert private.outputs == (Private(result),)
        assert verify_proof(_proof(private), [])

        assert mixed.inputs == (Public(three), Private(two))
        assert mixed.outputs == (Private(result),)
        assert verify_proof(_proof(mixed), [3])

    def test_u128_carries_full_width(self, add_program, private_key):
        big = (1 << 127) + 5
        transition = execution(
            add_program, "hello_11",
            [PrimitiveValue(PrimitiveKind.U128, big), PrimitiveValue(PrimitiveKind.U128, (1 << 127) - 6)],
            private_key,
        )
        assert transition.outputs == (Private(PrimitiveValue(PrimitiveKind.U128, (1 << 128) - 1)),)

    def test_u128_overflow_fails(self, add_program, private_key):
        with pytest.raises(SynthesisError, match="overflows u128"):
            execution(
                add_program, "hello_10",
                [PrimitiveValue(PrimitiveKind.U128, 1 << 127), PrimitiveValue(PrimitiveKind.U128, 1 << 127)],
                private_key,
            )

    def test_sub_underflow_fails(self, sub_program, private_key):
        with pytest.raises(SynthesisError, match="overflows u16"):
            execution(sub_program, "hello_1", [u16(1), u16(2)], private_key)

    def test_echoed_register_keeps_matching_visibility(self, private_key):
        function = Function(
            "echo",
            inputs=(RegisterDecl("r0", "u16", PRIVATE),),
            outputs=(RegisterDecl("r0", "u16", PRIVATE),),
        )
        program = Program(id="echo.aleo", functions={"echo": function})

        transition = execution(program, "echo", [u16(7)], private_key)

        assert transition.inputs == (Private(u16(7)),)
        assert transition.outputs == (Private(u16(7)),)

    @pytest.mark.parametrize("input_visibility, output_visibility", [
        (PRIVATE, PUBLIC),
        (PUBLIC, PRIVATE),
    ])
    def test_echoed_register_cannot_change_visibility(self, private_key, input_visibility, output_visibility):
        function = Function(
            "echo",
            inputs=(RegisterDecl("r0", "u16", input_visibility),),
            outputs=(RegisterDecl("r0", "u16", output_visibility),),
        )
        program = Program(id="echo.aleo", functions={"echo": function})

        with pytest.raises(SynthesisError) as exc_info:
            execution(program, "echo", [u16(7)], private_key)

        assert exc_info.value.register == "r0"
        assert exc_info.value.function_name == "echo"

    def test_outputs_follow_declaration_order(self, private_key):
        function = Function(
            "ops",
            inputs=(RegisterDecl("r0", "u16", PUBLIC), RegisterDecl("r1", "u16", PUBLIC)),
            instructions=(
                Instruction("add", ("r0", "r1"), "r2"),
                Instruction("sub", ("r1", "r0"), "r3"),
                Instruction("mul", ("r0", "r1"), "r4"),
            ),
            outputs=(
                RegisterDecl("r4", "u16", PUBLIC),
                RegisterDecl("r2", "u16", PUBLIC),
                RegisterDecl("r3", "u16", PUBLIC),
            ),
        )
        program = Program(id="ops.aleo", functions={"ops": function})

        transition = execution(program, "ops", [u16(3), u16(5)], private_key)

        assert transition.outputs == (Public(u16(15)), Public(u16(8)), Public(u16(2)))

    def test_proof_is_lowercase_hex(self, add_program, private_key):
        transition = execution(add_program, "hello_1", [u16(1), u16(1)], private_key)
        assert transition.proof
        assert transition.proof == transition.proof.lower()
        bytes.fromhex(transition.proof)

    def test_unknown_function(self, add_program, private_key):
        with pytest.raises(FunctionNotFound) as exc_info:
            execution(add_program, "hello_99", [], private_key)
        assert exc_info.value.function_name == "hello_99"


# ── Coinbase functions ───────────────────────────────────────────────────────

class TestCoinbase:
    @pytest.mark.parametrize("function_name", ["mint", "genesis"])
    def test_rejected_before_synthesis(self, counting_backend, private_key, function_name):
        labels = {"program": "credits.aleo", "function": function_name, "status": "rejected"}
        before = _sample("shieldvm_transitions_total", labels)

        with pytest.raises(CoinbaseNotCallable) as exc_info:
            credits_execution(
                function_name, [PrimitiveValue.address(ADDRESS), u64(100)], private_key,
                backend=counting_backend,
            )

        assert exc_info.value.function_name == function_name
        assert counting_backend.synthesize_calls == 0
        assert _sample("shieldvm_transitions_total", labels) == before + 1

    def test_rejection_ignores_input_validity(self, counting_backend, private_key):
        with pytest.raises(CoinbaseNotCallable):
            credits_execution("mint", [], private_key, backend=counting_backend)

    def test_coinbase_list_is_configurable(self, monkeypatch, add_program, private_key):
        from shieldvm.config import settings

        monkeypatch.setattr(settings, "coinbase_functions", "add.aleo/hello_1")
        with pytest.raises(CoinbaseNotCallable):
            execution(add_program, "hello_1", [u16(1), u16(1)], private_key)

    def test_mint_circuit_produces_unencrypted_record(self, backend, private_key):
        program = credits()
        function = program.get_function("mint")

        table, proof = backend.synthesize_and_prove(
            program, function, [PrimitiveValue.address(ADDRESS), u64(100)],
        )
        outputs = VisibilityProjector().project_outputs(function, table, None)

        record = outputs["r2"]
        assert isinstance(record, RecordValue)
        assert record.nullifier is None
        assert record.record.owner_address == ADDRESS
        assert record.record.gates == 100
        assert verify_proof(proof, [ADDRESS, 100])


# ── Record functions ─────────────────────────────────────────────────────────

class TestRecordExecution:
    def test_transfer(self, private_key):
        record = PlaintextRecord.new(ADDRESS, 10, nonce=5)

        transition = credits_execution(
            "transfer", [record, PrimitiveValue.address(OTHER_ADDRESS), u64(3)], private_key,
        )

        spent, recipient, amount = transition.inputs
        assert spent == RecordValue(record.serial_number(private_key), record)
        assert recipient == Private(PrimitiveValue.address(OTHER_ADDRESS))
        assert amount == Private(u64(3))

        view_key = derive_view_key(private_key)
        assert all(isinstance(output, EncryptedRecord) for output in transition.outputs)
        paid, change = (PlaintextRecord.decrypt(o.ciphertext, view_key) for o in transition.outputs)
        assert (paid.owner_address, paid.gates) == (OTHER_ADDRESS, 3)
        assert (change.owner_address, change.gates) == (ADDRESS, 7)
        assert paid.nonce != change.nonce

    def test_transfer_more_than_balance_fails(self, private_key):
        record = PlaintextRecord.new(ADDRESS, 2, nonce=5)
        with pytest.raises(SynthesisError):
            credits_execution("transfer", [record, PrimitiveValue.address(OTHER_ADDRESS), u64(3)], private_key)

    def test_combine(self, private_key):
        first = PlaintextRecord.new(ADDRESS, 4, nonce=1)
        second = PlaintextRecord.new(ADDRESS, 6, nonce=2)

        transition = credits_execution("combine", [first, second], private_key)

        nullifiers = [value.nullifier for value in transition.inputs]
        assert nullifiers == [first.serial_number(private_key), second.serial_number(private_key)]
        merged = PlaintextRecord.decrypt(transition.outputs[0].ciphertext, derive_view_key(private_key))
        assert merged.gates == 10

    def test_split(self, private_key):
        record = PlaintextRecord.new(ADDRESS, 10, nonce=9)

        transition = credits_execution("split", [record, u64(4)], private_key)

        view_key = derive_view_key(private_key)
        gates = [PlaintextRecord.decrypt(o.ciphertext, view_key).gates for o in transition.outputs]
        assert gates == [4, 6]


# ── Failure handling ─────────────────────────────────────────────────────────

class TestFailures:
    def test_missing_output_register_names_function_and_register(self, add_program, private_key):
        table = RegisterAssignmentTable({"r0": UInt16.public(1), "r1": UInt16.public(1)})
        assembler = TransitionAssembler(StubBackend(table))

        with pytest.raises(RegisterNotFound) as exc_info:
            assembler.execute(add_program, "hello_1", [u16(1), u16(1)], private_key)

        assert exc_info.value.function_name == "hello_1"
        assert exc_info.value.register == "r2"

    def test_backend_errors_propagate_unchanged(self, add_program, private_key):
        error = RuntimeError("prover crashed")

        class FailingBackend:
            def synthesize_and_prove(self, program, function, inputs):
                raise error

            def serialize_proof(self, proof):
                return b""

        with pytest.raises(RuntimeError) as exc_info:
            TransitionAssembler(FailingBackend()).execute(add_program, "hello_1", [u16(1), u16(1)], private_key)
        assert exc_info.value is error

    def test_failure_is_counted(self, add_program, private_key):
        labels = {"program": "add.aleo", "function": "hello_1", "status": "failed"}
        before = _sample("shieldvm_transitions_total", labels)

        with pytest.raises(RegisterNotFound):
            TransitionAssembler(StubBackend(RegisterAssignmentTable())).execute(
                add_program, "hello_1", [u16(1), u16(1)], private_key,
            )

        assert _sample("shieldvm_transitions_total", labels) == before + 1

    def test_stub_proof_is_hex_encoded(self, add_program, private_key):
        table = RegisterAssignmentTable({
            "r0": UInt16.public(1), "r1": UInt16.public(1), "r2": UInt16.public(2),
        })
        transition = TransitionAssembler(StubBackend(table)).execute(
            add_program, "hello_1", [u16(1), u16(1)], private_key,
        )
        assert transition.proof == "01ab"


# ── Serialization ────────────────────────────────────────────────────────────

class TestTransitionSerialization:
    def test_to_dict(self, private_key):
        record = PlaintextRecord.new(ADDRESS, 10, nonce=5)
        transition = credits_execution(
            "transfer", [record, PrimitiveValue.address(OTHER_ADDRESS), u64(3)], private_key,
        )

        data = transition.to_dict()

        assert data["program_id"] == "credits.aleo"
        assert data["function_name"] == "transfer"
        assert data["fee"] == 0
        assert data["inputs"][0]["visibility"] == "record"
        assert data["inputs"][0]["nullifier"] == record.serial_number(private_key)
        assert data["inputs"][0]["record"]["owner"] == ADDRESS
        assert data["inputs"][1]["value"] == {"type": "address", "value": OTHER_ADDRESS}
        assert [o["visibility"] for o in data["outputs"]] == ["encrypted_record", "encrypted_record"]

    def test_schema_rejects_non_hex_proof(self):
        with pytest.raises(ValidationError):
            TransitionSchema(program_id="p", function_name="f", inputs=[], outputs=[], proof="01AB")
