"""Update gate used by the RoleBasedGroup reconcile loop."""

from rbgs.reconciler.equality import (
    EqualityResult,
    container_satisfies,
    metadata_satisfies,
    pod_template_satisfies,
)

__all__ = [
    "EqualityResult",
    "container_satisfies",
    "metadata_satisfies",
    "pod_template_satisfies",
]
