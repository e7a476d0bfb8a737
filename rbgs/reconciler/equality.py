"""Semantic equality checks that gate updates of managed workloads.

Each check answers "does the actual object already satisfy the desired one?"
and, when it does not, names the first field that differs. The reconcile loop
logs that reason before issuing an update, which is how unexpected restarts
get traced back to a concrete field.

Metadata is compared as a subset: keys other controllers add to the actual
object (injected labels, ``deployment.kubernetes.io/revision``) are ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from rbgs.models.pod import Container, EnvVar, PodTemplateSpec, Probe
from rbgs.observability.logging import get_logger
from rbgs.observability.metrics import update_gate_mismatches_total
from rbgs.revision.hashing import canonical_bytes

_log = get_logger("reconciler.equality")


class _Labeled(Protocol):
    labels: dict[str, str]
    annotations: dict[str, str]


@dataclass(frozen=True)
class EqualityResult:
    """Result of an equality check. Truthy when the actual object satisfies the desired one."""

    equal: bool
    reason: str = ""
    field: str = ""

    def __bool__(self) -> bool:
        return self.equal


EQUAL = EqualityResult(equal=True)


def _mismatch(field: str, reason: str) -> EqualityResult:
    update_gate_mismatches_total.labels(field=field).inc()
    _log.debug("update_gate_mismatch", field=field, reason=reason)
    return EqualityResult(equal=False, reason=reason, field=field)


def _subset_mismatch(desired: Mapping[str, str] | None, actual: Mapping[str, str] | None) -> str | None:
    actual = actual or {}
    for key, value in sorted((desired or {}).items()):
        if key not in actual or actual[key] != value:
            return key
    return None


def metadata_satisfies(desired: _Labeled, actual: _Labeled) -> EqualityResult:
    """Every desired label and annotation must be present in *actual* with the same value."""
    key = _subset_mismatch(desired.labels, actual.labels)
    if key is not None:
        return _mismatch("labels", f"label {key!r} not equal")
    key = _subset_mismatch(desired.annotations, actual.annotations)
    if key is not None:
        return _mismatch("annotations", f"annotation {key!r} not equal")
    return EQUAL


def _env_entries(env: list[EnvVar]) -> dict[tuple[str, str, bytes], str]:
    entries: dict[tuple[str, str, bytes], str] = {}
    for var in env:
        value_from = canonical_bytes(var.value_from) if var.value_from is not None else b""
        entries[(var.name, var.value, value_from)] = var.name
    return entries


def _env_diff(desired: list[EnvVar], actual: list[EnvVar]) -> str | None:
    want = _env_entries(desired)
    have = _env_entries(actual)
    if want.keys() == have.keys():
        return None
    missing = sorted({want[k] for k in want.keys() - have.keys()})
    unexpected = sorted({have[k] for k in have.keys() - want.keys()})
    return f"env not equal: missing {missing}, unexpected {unexpected}"


def _probe_equal(desired: Probe | None, actual: Probe | None) -> bool:
    if desired is None or actual is None:
        return desired is actual
    return desired.with_defaults() == actual.with_defaults()


def container_satisfies(desired: Container, actual: Container) -> EqualityResult:
    """Compare name, image, env, then startup/liveness/readiness probes.

    Stops at the first mismatch. Env is compared as an unordered set of
    (name, value, valueFrom); the reason lists variable names only. Probes
    are compared on their full configuration with API server defaults
    filled in on both sides.

    Raises:
        EncodeError: an env ``valueFrom`` cannot be canonicalized.
    """
    if desired.name != actual.name:
        return _mismatch("name", "container name not equal")
    if desired.image != actual.image:
        return _mismatch("image", "container image not equal")
    env_reason = _env_diff(desired.env, actual.env)
    if env_reason is not None:
        return _mismatch("env", env_reason)
    if not _probe_equal(desired.startup_probe, actual.startup_probe):
        return _mismatch("startup_probe", "container startup probe not equal")
    if not _probe_equal(desired.liveness_probe, actual.liveness_probe):
        return _mismatch("liveness_probe", "container liveness probe not equal")
    if not _probe_equal(desired.readiness_probe, actual.readiness_probe):
        return _mismatch("readiness_probe", "container readiness probe not equal")
    return EQUAL


def _containers_satisfy(kind: str, desired: list[Container], actual: list[Container]) -> EqualityResult:
    if len(desired) != len(actual):
        return _mismatch(kind, f"{kind} count not equal: desired {len(desired)}, actual {len(actual)}")
    by_name = {container.name: container for container in actual}
    for want in desired:
        have = by_name.get(want.name)
        if have is None:
            return _mismatch(kind, f"container {want.name!r} not found in {kind}")
        result = container_satisfies(want, have)
        if not result:
            return EqualityResult(equal=False, reason=f"container {want.name!r}: {result.reason}", field=result.field)
    return EQUAL


def pod_template_satisfies(desired: PodTemplateSpec, actual: PodTemplateSpec) -> EqualityResult:
    """Template metadata subset, then init containers, then containers (matched by name)."""
    result = metadata_satisfies(desired, actual)
    if not result:
        return result
    result = _containers_satisfy("initContainers", desired.spec.init_containers, actual.spec.init_containers)
    if not result:
        return result
    return _containers_satisfy("containers", desired.spec.containers, actual.spec.containers)
