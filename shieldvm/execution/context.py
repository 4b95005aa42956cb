"""
Execution context.

Stores the id of the execution currently being assembled, and the program
and function it runs, in ContextVars so that every log line emitted while
projecting a function can be correlated with the call that produced it.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

# Context variable for the current execution ID
_execution_id_var: ContextVar[str] = ContextVar("execution_id", default="")
# (program_id, function_name) of the current execution
_execution_target_var: ContextVar[tuple[str, str] | None] = ContextVar("execution_target", default=None)


def get_execution_id() -> str:
    """Get the current execution ID from context."""
    return _execution_id_var.get()


def get_execution_target() -> tuple[str, str] | None:
    return _execution_target_var.get()


@contextmanager
def execution_scope(
    execution_id: str | None = None,
    *,
    program_id: str | None = None,
    function_name: str | None = None,
):
    """Bind a fresh (or given) execution ID, and the call target, for the duration of the block."""
    execution_id = execution_id or uuid4().hex
    target = (program_id, function_name) if program_id and function_name else None
    id_token = _execution_id_var.set(execution_id)
    target_token = _execution_target_var.set(target)
    try:
        yield execution_id
    finally:
        _execution_target_var.reset(target_token)
        _execution_id_var.reset(id_token)
