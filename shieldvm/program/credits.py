"""
The built-in credits program.

    genesis / mint   coinbase: create a record from an address and an amount
    transfer         spend a record, pay part of it to another address
    combine          merge two records of the same owner
    split            split one record into two
"""

from shieldvm.program.model import (
    Function, Instruction, Program, RecordType, RegisterDecl, Visibility,
)

CREDITS_PROGRAM_ID = "credits.aleo"
CREDITS_RECORD = "credits.record"

_PUBLIC = Visibility.PUBLIC
_PRIVATE = Visibility.PRIVATE
_RECORD = Visibility.RECORD


def _cast(owner: str, gates: str, destination: str) -> Instruction:
    return Instruction("cast", (owner, gates), destination, CREDITS_RECORD)


def credits() -> Program:
    functions = [
        Function(
            "genesis",
            inputs=(RegisterDecl("r0", "address", _PRIVATE), RegisterDecl("r1", "u64", _PRIVATE)),
            instructions=(_cast("r0", "r1", "r2"),),
            outputs=(RegisterDecl("r2", CREDITS_RECORD, _RECORD),),
        ),
        Function(
            "mint",
            inputs=(RegisterDecl("r0", "address", _PUBLIC), RegisterDecl("r1", "u64", _PUBLIC)),
            instructions=(_cast("r0", "r1", "r2"),),
            outputs=(RegisterDecl("r2", CREDITS_RECORD, _RECORD),),
        ),
        Function(
            "transfer",
            inputs=(
                RegisterDecl("r0", CREDITS_RECORD, _RECORD),
                RegisterDecl("r1", "address", _PRIVATE),
                RegisterDecl("r2", "u64", _PRIVATE),
            ),
            instructions=(
                Instruction("sub", ("r0.gates", "r2"), "r3"),
                _cast("r1", "r2", "r4"),
                _cast("r0.owner", "r3", "r5"),
            ),
            outputs=(RegisterDecl("r4", CREDITS_RECORD, _RECORD), RegisterDecl("r5", CREDITS_RECORD, _RECORD)),
        ),
        Function(
            "combine",
            inputs=(RegisterDecl("r0", CREDITS_RECORD, _RECORD), RegisterDecl("r1", CREDITS_RECORD, _RECORD)),
            instructions=(
                Instruction("add", ("r0.gates", "r1.gates"), "r2"),
                _cast("r0.owner", "r2", "r3"),
            ),
            outputs=(RegisterDecl("r3", CREDITS_RECORD, _RECORD),),
        ),
        Function(
            "split",
            inputs=(RegisterDecl("r0", CREDITS_RECORD, _RECORD), RegisterDecl("r1", "u64", _PRIVATE)),
            instructions=(
                Instruction("sub", ("r0.gates", "r1"), "r2"),
                _cast("r0.owner", "r1", "r3"),
                _cast("r0.owner", "r2", "r4"),
            ),
            outputs=(RegisterDecl("r3", CREDITS_RECORD, _RECORD), RegisterDecl("r4", CREDITS_RECORD, _RECORD)),
        ),
    ]
    return Program(
        id=CREDITS_PROGRAM_ID,
        functions={f.name: f for f in functions},
        records={"credits": RecordType("credits")},
    )
