"""
Transition Assembler: runs one function call end to end.

Pipeline:
    1. Reject coinbase functions (before any circuit work)
    2. Synthesize and prove the function on the backend
    3. Project declared inputs (private key) and outputs (derived view key)
    4. Hex-encode the serialized proof
    5. Return the Transition (fee 0)

Each call is independent; nothing is persisted between calls and a failure
at any step aborts the call without a partial Transition.
"""

import logging
import time
from collections.abc import Sequence

from shieldvm.accounts.keys import PrivateKey, derive_view_key
from shieldvm.errors import CoinbaseNotCallable
from shieldvm.execution.context import execution_scope
from shieldvm.ledger.transition import Transition
from shieldvm.metrics import execution_duration_seconds, transitions_total
from shieldvm.program.credits import credits
from shieldvm.program.model import Program
from shieldvm.projection.projector import VisibilityProjector
from shieldvm.synthesis.base import CircuitBackend, UserInput
from shieldvm.synthesis.reference import ReferenceBackend

logger = logging.getLogger(__name__)


class TransitionAssembler:
    """Builds Transitions from function calls on a circuit backend."""

    def __init__(self, backend: CircuitBackend, projector: VisibilityProjector | None = None):
        self.backend = backend
        self.projector = projector or VisibilityProjector()

    def execute(
        self,
        program: Program,
        function_name: str,
        inputs: Sequence[UserInput],
        private_key: PrivateKey,
    ) -> Transition:
        """
        Execute ``function_name`` of ``program`` and assemble its Transition.

        Args:
            program: The program declaring the function
            function_name: Function to call
            inputs: Caller inputs, one per declared input register
            private_key: Caller's key; consumes input records and derives
                the view key output records are encrypted for

        Raises:
            CoinbaseNotCallable: the function is reserved to the ledger
            ExecutionError: any projection or synthesis failure
        """
        with execution_scope(program_id=program.id, function_name=function_name) as execution_id:
            if program.is_coinbase(function_name):
                transitions_total.labels(program=program.id, function=function_name, status="rejected").inc()
                logger.warning("Rejected coinbase call %s/%s", program.id, function_name)
                raise CoinbaseNotCallable(
                    "Coinbase functions cannot be called", function_name=function_name,
                )

            logger.debug(
                "Executing program %s function %s with %d inputs (execution %s)",
                program.id, function_name, len(inputs), execution_id,
            )

            start_time = time.time()
            try:
                transition = self._assemble(program, function_name, inputs, private_key)
            except Exception:
                transitions_total.labels(program=program.id, function=function_name, status="failed").inc()
                logger.warning("Execution of %s/%s failed", program.id, function_name, exc_info=True)
                raise

            duration = time.time() - start_time
            duration_ms = round(duration * 1000, 2)
            transitions_total.labels(program=program.id, function=function_name, status="completed").inc()
            execution_duration_seconds.labels(program=program.id, function=function_name).observe(duration)
            logger.info(
                "Executed %s/%s: %d inputs, %d outputs %.0fms",
                program.id, function_name, len(transition.inputs), len(transition.outputs), duration_ms,
                extra={"duration_ms": duration_ms},
            )
            return transition

    def _assemble(
        self,
        program: Program,
        function_name: str,
        inputs: Sequence[UserInput],
        private_key: PrivateKey,
    ) -> Transition:
        function = program.get_function(function_name)

        table, proof = self.backend.synthesize_and_prove(program, function, inputs)

        projected_inputs = self.projector.project_inputs(function, table, private_key)
        view_key = derive_view_key(private_key)
        projected_outputs = self.projector.project_outputs(function, table, view_key)

        encoded_proof = self.backend.serialize_proof(proof).hex()

        return Transition(
            program_id=program.id,
            function_name=function.name,
            inputs=tuple(projected_inputs.values()),
            outputs=tuple(projected_outputs.values()),
            proof=encoded_proof,
            fee=0,
        )


def execution(
    program: Program,
    function_name: str,
    inputs: Sequence[UserInput],
    private_key: PrivateKey,
    backend: CircuitBackend | None = None,
) -> Transition:
    """Execute a function on ``backend`` (the reference backend by default)."""
    if backend is None:
        backend = ReferenceBackend()
    return TransitionAssembler(backend).execute(program, function_name, inputs, private_key)


def credits_execution(
    function_name: str,
    inputs: Sequence[UserInput],
    private_key: PrivateKey,
    backend: CircuitBackend | None = None,
) -> Transition:
    """Execute a function of the built-in credits program."""
    return execution(credits(), function_name, inputs, private_key, backend)
