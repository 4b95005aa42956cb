"""Shared test fixtures."""

import logging

import pytest

from shieldvm.accounts.keys import PrivateKey
from shieldvm.circuit.registers import RegisterAssignmentTable
from shieldvm.program.model import Function, Instruction, Program, RegisterDecl, Visibility
from shieldvm.synthesis.reference import ReferenceBackend

ADDRESS = "aleo1sk339wl3ch4ee5k3y6f6yrmvs9w63yfsmrs9w0wwkx5a9pgjqggqlkx5zh"
OTHER_ADDRESS = "aleo1rhgdu77hgyqd3xjj8ucu3jj9r2krwz6mnzyd80gncr5fxcwlh5rsvzp9px"

PUBLIC = Visibility.PUBLIC
PRIVATE = Visibility.PRIVATE
RECORD = Visibility.RECORD


INTEGER_TYPES = ("u16", "u32", "u64", "u128")

# (first input, second input, output) for hello_1, hello_2, hello_3 of each type
_VISIBILITIES = (
    (PUBLIC, PUBLIC, PUBLIC),
    (PRIVATE, PRIVATE, PRIVATE),
    (PUBLIC, PRIVATE, PRIVATE),
)


def _binary_function(
    name: str, opcode: str, value_type: str, first: Visibility, second: Visibility, output: Visibility,
) -> Function:
    return Function(
        name,
        inputs=(RegisterDecl("r0", value_type, first), RegisterDecl("r1", value_type, second)),
        instructions=(Instruction(opcode, ("r0", "r1"), "r2"),),
        outputs=(RegisterDecl("r2", value_type, output),),
    )


def build_binary_program(program_id: str, opcode: str) -> Program:
    """hello_1..hello_12: u16/u32/u64/u128 with public, private and mixed visibility."""
    functions = []
    for offset, value_type in enumerate(INTEGER_TYPES):
        for index, (first, second, output) in enumerate(_VISIBILITIES, start=1):
            name = f"hello_{3 * offset + index}"
            functions.append(_binary_function(name, opcode, value_type, first, second, output))
    return Program(id=program_id, functions={f.name: f for f in functions})


def build_add_program() -> Program:
    return build_binary_program("add.aleo", "add")


def build_sub_program() -> Program:
    return build_binary_program("sub.aleo", "sub")


class CountingBackend:
    """Reference backend that counts how often synthesis was requested."""

    def __init__(self):
        self.inner = ReferenceBackend()
        self.synthesize_calls = 0

    def synthesize_and_prove(self, program, function, inputs):
        self.synthesize_calls += 1
        return self.inner.synthesize_and_prove(program, function, inputs)

    def serialize_proof(self, proof):
        return self.inner.serialize_proof(proof)


class StubBackend:
    """Backend returning a fixed register table, for malformed-assignment tests."""

    def __init__(self, table: RegisterAssignmentTable, proof: bytes = b"\x01\xab"):
        self.table = table
        self.proof = proof

    def synthesize_and_prove(self, program, function, inputs):
        return self.table, self.proof

    def serialize_proof(self, proof):
        return proof


@pytest.fixture
def add_program() -> Program:
    return build_add_program()


@pytest.fixture
def sub_program() -> Program:
    return build_sub_program()


@pytest.fixture
def private_key() -> PrivateKey:
    return PrivateKey(bytes(range(32)))


@pytest.fixture
def other_private_key() -> PrivateKey:
    return PrivateKey(bytes(range(32, 64)))


@pytest.fixture
def backend() -> ReferenceBackend:
    return ReferenceBackend()


@pytest.fixture
def counting_backend() -> CountingBackend:
    return CountingBackend()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
