"""
Execution errors.

Every error here is fatal to the execution call that raised it: nothing is
retried and no partial Transition is ever returned.  Errors carry the
function and register they were raised for so a failed call can be
diagnosed from the log line alone.
"""


class ExecutionError(Exception):
    """Base class for all errors raised while building a transition."""

    def __init__(self, message: str, *, function_name: str | None = None, register: str | None = None):
        self.function_name = function_name
        self.register = register
        super().__init__(message)

    def with_context(self, *, function_name: str | None = None, register: str | None = None) -> "ExecutionError":
        """Fill in context that is only known further up the stack."""
        if self.function_name is None:
            self.function_name = function_name
        if self.register is None:
            self.register = register
        return self

    def __str__(self) -> str:
        message = super().__str__()
        context = []
        if self.function_name:
            context.append(f"function={self.function_name}")
        if self.register:
            context.append(f"register={self.register}")
        if context:
            return f"{message} ({', '.join(context)})"
        return message


class CoinbaseNotCallable(ExecutionError):
    """A privileged coinbase function was invoked through ordinary execution."""


class RegisterNotFound(ExecutionError):
    """A declared register is missing from the circuit assignment."""


class RegisterNotAssigned(ExecutionError):
    """A declared register exists but holds no circuit value."""


class RecordMustBePrivate(ExecutionError):
    """A record-typed register is not marked as a witness."""


class NestedRecordsUnsupported(ExecutionError):
    """A record entry is itself a record."""


class UnassignedWitness(ExecutionError):
    """A circuit variable has no concrete assignment to extract."""


class SynthesisError(ExecutionError):
    """Caller inputs do not type-check against the function signature."""


class AddressTooLong(ExecutionError, ValueError):
    """An address does not fit the fixed-size ledger address buffer."""
