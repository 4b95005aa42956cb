"""
Typed circuit values.

A closed set of value kinds the constraint system can hold in a register:
fixed-width unsigned integers, booleans, field elements, addresses and
records.  Every non-record kind wraps a CircuitVariable, which may or may
not have a concrete witness assigned (setup-time instantiations carry no
assignment), and which knows whether the circuit allocated it as a private
witness or as a public input.

Dispatch over the union is always written as an isinstance chain ending in
``assert_never`` so that adding a kind is caught by the type checker at
every dispatch point.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from shieldvm.errors import UnassignedWitness


@dataclass(frozen=True)
class CircuitVariable:
    """A constraint-system variable with an optional concrete assignment."""
    assignment: Any = None
    witness: bool = True

    @property
    def is_assigned(self) -> bool:
        return self.assignment is not None

    def value(self) -> Any:
        if self.assignment is None:
            raise UnassignedWitness("Circuit variable has no assigned witness")
        return self.assignment


@dataclass(frozen=True)
class _Gadget:
    """Common behaviour of every non-record circuit value."""
    variable: CircuitVariable

    type_name: ClassVar[str] = ""

    def __post_init__(self):
        if self.variable.is_assigned:
            self._check(self.variable.assignment)

    def _check(self, value: Any) -> None:
        pass

    def value(self) -> Any:
        """Return the primitive witness; raises UnassignedWitness if unassigned."""
        return self.variable.value()

    def is_witness(self) -> bool:
        return self.variable.witness

    @classmethod
    def private(cls, value: Any):
        return cls(CircuitVariable(value, witness=True))

    @classmethod
    def public(cls, value: Any):
        return cls(CircuitVariable(value, witness=False))

    @classmethod
    def unassigned(cls, witness: bool = True):
        return cls(CircuitVariable(None, witness=witness))


class _UnsignedGadget(_Gadget):
    BITS: ClassVar[int] = 0

    def _check(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{self.type_name} expects an int, got {type(value).__name__}")
        if not 0 <= value < (1 << self.BITS):
            raise ValueError(f"{value} does not fit in {self.type_name}")


@dataclass(frozen=True)
class UInt8(_UnsignedGadget):
    BITS: ClassVar[int] = 8
    type_name: ClassVar[str] = "u8"


@dataclass(frozen=True)
class UInt16(_UnsignedGadget):
    BITS: ClassVar[int] = 16
    type_name: ClassVar[str] = "u16"


@dataclass(frozen=True)
class UInt32(_UnsignedGadget):
    BITS: ClassVar[int] = 32
    type_name: ClassVar[str] = "u32"


@dataclass(frozen=True)
class UInt64(_UnsignedGadget):
    BITS: ClassVar[int] = 64
    type_name: ClassVar[str] = "u64"


@dataclass(frozen=True)
class UInt128(_UnsignedGadget):
    BITS: ClassVar[int] = 128
    type_name: ClassVar[str] = "u128"


@dataclass(frozen=True)
class Boolean(_Gadget):
    type_name: ClassVar[str] = "boolean"

    def _check(self, value: Any) -> None:
        if not isinstance(value, bool):
            raise TypeError(f"boolean expects a bool, got {type(value).__name__}")


@dataclass(frozen=True)
class Field(_Gadget):
    type_name: ClassVar[str] = "field"

    def _check(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise TypeError(f"field expects a non-negative int, got {value!r}")


@dataclass(frozen=True)
class Address(_Gadget):
    """A bech32-style account address held as a string."""
    type_name: ClassVar[str] = "address"

    def _check(self, value: Any) -> None:
        if not isinstance(value, str):
            raise TypeError(f"address expects a str, got {type(value).__name__}")


@dataclass(frozen=True)
class CircuitRecord:
    """An in-circuit record: owner and balance gadgets plus ordered entries."""
    owner: Address
    gates: UInt64
    entries: dict[str, "CircuitValue"] = field(default_factory=dict)
    # Bound when the circuit is built; never re-derived during projection
    nonce: int = 0


@dataclass(frozen=True)
class Record:
    record: CircuitRecord

    type_name: ClassVar[str] = "record"

    def is_witness(self) -> bool:
        return self.record.owner.is_witness() and self.record.gates.is_witness()

    def value(self) -> Any:
        # Records are extracted through the RecordMaterializer
        raise TypeError("Record values are extracted with RecordMaterializer.materialize()")


CircuitValue = Union[UInt8, UInt16, UInt32, UInt64, UInt128, Boolean, Field, Address, Record]

SCALAR_TYPES: dict[str, type] = {
    cls.type_name: cls
    for cls in (UInt8, UInt16, UInt32, UInt64, UInt128, Boolean, Field, Address)
}

UNSIGNED_TYPES: tuple[type, ...] = (UInt8, UInt16, UInt32, UInt64, UInt128)
