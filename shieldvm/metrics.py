"""
Prometheus metrics for transition assembly.

Counters and histograms are process-wide; the assembler updates them once
per execution call.
"""

from prometheus_client import Counter, Histogram

# ── Execution metrics ────────────────────────────────────────────────────────

transitions_total = Counter(
    "shieldvm_transitions_total",
    "Total execution calls by outcome",
    ["program", "function", "status"],
)

execution_duration_seconds = Histogram(
    "shieldvm_execution_duration_seconds",
    "Execution call duration in seconds (synthesis, proving and projection)",
    ["program", "function"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
)

# ── Record metrics ───────────────────────────────────────────────────────────

records_consumed_total = Counter(
    "shieldvm_records_consumed_total",
    "Records consumed as transition inputs (nullifier derived)",
)

records_produced_total = Counter(
    "shieldvm_records_produced_total",
    "Records produced as transition outputs",
)
