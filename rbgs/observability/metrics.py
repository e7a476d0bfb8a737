"""Prometheus counters for revision history and the update gate."""

from __future__ import annotations

from prometheus_client import Counter

revisions_built_total = Counter(
    "rbgs_revisions_built_total",
    "Revision records assembled from a parent spec.",
)

revisions_created_total = Counter(
    "rbgs_revisions_created_total",
    "Revision records persisted to the store.",
)

revisions_pruned_total = Counter(
    "rbgs_revisions_pruned_total",
    "Revision records deleted by history garbage collection.",
)

revision_store_errors_total = Counter(
    "rbgs_revision_store_errors_total",
    "Failed revision store calls.",
    ["operation"],
)

update_gate_mismatches_total = Counter(
    "rbgs_update_gate_mismatches_total",
    "Equality checks that found desired state unsatisfied, by first mismatching field.",
    ["field"],
)
