"""
Program model.

Programs arrive already parsed: a program is a set of functions, and each
function declares its input registers, a straight-line list of
instructions and its output registers.  Declaration order of inputs and
outputs is significant: it fixes the order of a Transition's inputs and
outputs.
"""

from dataclasses import dataclass, field
from enum import Enum

from shieldvm.config import settings
from shieldvm.errors import ExecutionError


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    RECORD = "record"


@dataclass(frozen=True)
class RegisterDecl:
    """A declared input or output register: ``input r0 as u16.public``."""
    register: str
    value_type: str
    visibility: Visibility

    @property
    def is_record(self) -> bool:
        return self.visibility is Visibility.RECORD


@dataclass(frozen=True)
class Instruction:
    """``opcode operands... into destination [as cast_type]``."""
    opcode: str
    operands: tuple[str, ...]
    destination: str
    cast_type: str | None = None


@dataclass(frozen=True)
class RecordType:
    """A record declaration; entries are (name, type) pairs after owner and gates."""
    name: str
    entries: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Function:
    name: str
    inputs: tuple[RegisterDecl, ...] = ()
    instructions: tuple[Instruction, ...] = ()
    outputs: tuple[RegisterDecl, ...] = ()


class FunctionNotFound(ExecutionError):
    """The program does not declare the requested function."""


def is_coinbase(program_id: str, function_name: str) -> bool:
    """Whether only the ledger itself may invoke ``program_id/function_name``."""
    return (program_id, function_name) in settings.coinbase_pairs()


@dataclass
class Program:
    id: str
    functions: dict[str, Function] = field(default_factory=dict)
    records: dict[str, RecordType] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.id

    def get_function(self, function_name: str) -> Function:
        function = self.functions.get(function_name)
        if function is None:
            raise FunctionNotFound(
                f"Function '{function_name}' not found in program '{self.id}'",
                function_name=function_name,
            )
        return function

    def get_record_type(self, name: str) -> RecordType | None:
        return self.records.get(name.removesuffix(".record"))

    def is_coinbase(self, function_name: str) -> bool:
        return is_coinbase(self.id, function_name)
