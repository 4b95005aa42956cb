"""
Execution: assembles Transitions and carries the per-call execution context.
"""
