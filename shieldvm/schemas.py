"""
Pydantic schemas for handing transitions to the ledger layer.
"""

from typing import Literal

from pydantic import BaseModel, Field

from shieldvm.ledger.record import PlaintextRecord
from shieldvm.ledger.values import (
    EncryptedRecord, PrimitiveValue, Private, ProjectedValue, Public, RecordValue,
)


# ── Values ──

class PrimitiveValueSchema(BaseModel):
    type: str
    value: int | bool | str

    @classmethod
    def from_primitive(cls, value: PrimitiveValue) -> "PrimitiveValueSchema":
        return cls(**value.to_json())


class RecordSchema(BaseModel):
    owner: str
    gates: int = Field(ge=0)
    entries: dict[str, PrimitiveValueSchema] = Field(default_factory=dict)
    nonce: str | None = None

    @classmethod
    def from_record(cls, record: PlaintextRecord) -> "RecordSchema":
        return cls.model_validate(record.to_dict())


class ProjectedValueSchema(BaseModel):
    visibility: Literal["public", "private", "record", "encrypted_record"]
    value: PrimitiveValueSchema | None = None
    nullifier: str | None = None
    record: RecordSchema | None = None
    ciphertext: str | None = None

    @classmethod
    def from_projected(cls, projected: ProjectedValue) -> "ProjectedValueSchema":
        if isinstance(projected, (Public, Private)):
            return cls(
                visibility=projected.visibility,
                value=PrimitiveValueSchema.from_primitive(projected.value),
            )
        if isinstance(projected, RecordValue):
            return cls(
                visibility=projected.visibility,
                nullifier=projected.nullifier,
                record=RecordSchema.from_record(projected.record),
            )
        if isinstance(projected, EncryptedRecord):
            return cls(visibility=projected.visibility, ciphertext=projected.ciphertext)
        raise TypeError(f"Unknown projected value {type(projected).__name__}")


# ── Transition ──

class TransitionSchema(BaseModel):
    program_id: str
    function_name: str
    inputs: list[ProjectedValueSchema]
    outputs: list[ProjectedValueSchema]
    proof: str = Field(pattern=r"^[0-9a-f]*$")
    fee: int = Field(0, ge=0)
