"""
Register assignment table produced by circuit synthesis.

Maps each register name of a function to the circuit value bound to it, or
to None when synthesis declared the register but never assigned it.  The
two kinds of absence are kept apart: a register that was never declared and
a register that was declared but left empty are different failures and are
reported as such.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum

from shieldvm.circuit.values import CircuitValue
from shieldvm.errors import RegisterNotAssigned, RegisterNotFound


class LookupStatus(str, Enum):
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RegisterLookup:
    """Result of looking a register up in the table."""
    register: str
    status: LookupStatus
    value: CircuitValue | None = None


class RegisterAssignmentTable(Mapping[str, CircuitValue | None]):
    """Ordered, read-only mapping from register name to circuit value."""

    def __init__(self, assignments: Mapping[str, CircuitValue | None] | None = None):
        self._assignments: dict[str, CircuitValue | None] = dict(assignments or {})

    def __getitem__(self, register: str) -> CircuitValue | None:
        return self._assignments[register]

    def __iter__(self) -> Iterator[str]:
        return iter(self._assignments)

    def __len__(self) -> int:
        return len(self._assignments)

    def __repr__(self) -> str:
        return f"RegisterAssignmentTable({list(self._assignments)})"

    def lookup(self, register: str) -> RegisterLookup:
        if register not in self._assignments:
            return RegisterLookup(register, LookupStatus.NOT_FOUND)
        value = self._assignments[register]
        if value is None:
            return RegisterLookup(register, LookupStatus.UNASSIGNED)
        return RegisterLookup(register, LookupStatus.ASSIGNED, value)

    def resolve(self, register: str) -> CircuitValue:
        """Return the value bound to ``register`` or raise the matching error."""
        result = self.lookup(register)
        if result.status is LookupStatus.NOT_FOUND:
            raise RegisterNotFound(f'Register "{register}" not found', register=register)
        if result.status is LookupStatus.UNASSIGNED:
            raise RegisterNotAssigned(f'Register "{register}" not assigned', register=register)
        return result.value
