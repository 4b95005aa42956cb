from dataclasses import dataclass

from shieldvm.ledger.values import ProjectedValue


@dataclass(frozen=True)
class Transition:
    """
    The unit of state change produced by one function execution.

    Inputs and outputs keep the function's register declaration order.
    """
    program_id: str
    function_name: str
    inputs: tuple[ProjectedValue, ...]
    outputs: tuple[ProjectedValue, ...]
    proof: str
    fee: int = 0

    def to_schema(self):
        """Return the pydantic TransitionSchema for this transition."""
        from shieldvm.schemas import ProjectedValueSchema, TransitionSchema

        return TransitionSchema(
            program_id=self.program_id,
            function_name=self.function_name,
            inputs=[ProjectedValueSchema.from_projected(v) for v in self.inputs],
            outputs=[ProjectedValueSchema.from_projected(v) for v in self.outputs],
            proof=self.proof,
            fee=self.fee,
        )

    def to_dict(self) -> dict:
        """Serialize for the ledger layer."""
        return self.to_schema().model_dump()
