"""Prometheus metrics for feature evaluation and mutation.

All metric objects are defined at import time on the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter

rollout_evaluations_total = Counter(
    "rollout_evaluations_total",
    "Feature activation checks",
    ["result"],
)
rollout_mutations_total = Counter(
    "rollout_mutations_total",
    "Feature record writes by operation",
    ["operation"],
)
rollout_decode_errors_total = Counter(
    "rollout_decode_errors_total",
    "Stored feature records that failed to decode",
)


__all__ = [
    "rollout_evaluations_total",
    "rollout_mutations_total",
    "rollout_decode_errors_total",
]
