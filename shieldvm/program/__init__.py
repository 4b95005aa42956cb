from shieldvm.program.model import (
    Function, FunctionNotFound, Instruction, Program, RecordType, RegisterDecl, Visibility,
    is_coinbase,
)
from shieldvm.program.credits import CREDITS_PROGRAM_ID, credits

__all__ = [
    "Function", "FunctionNotFound", "Instruction", "Program", "RecordType", "RegisterDecl",
    "Visibility", "is_coinbase", "CREDITS_PROGRAM_ID", "credits",
]
