"""
Circuit-side data: typed circuit values and the register assignment table.
"""

from shieldvm.circuit.values import (
    Address, Boolean, CircuitRecord, CircuitValue, CircuitVariable, Field, Record,
    UInt8, UInt16, UInt32, UInt64, UInt128,
)
from shieldvm.circuit.registers import LookupStatus, RegisterAssignmentTable, RegisterLookup

__all__ = [
    "Address", "Boolean", "CircuitRecord", "CircuitValue", "CircuitVariable", "Field",
    "Record", "UInt8", "UInt16", "UInt32", "UInt64", "UInt128",
    "LookupStatus", "RegisterAssignmentTable", "RegisterLookup",
]
