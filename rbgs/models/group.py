"""RoleBasedGroup parent resource and its role declarations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rbgs.models.meta import ObjectMeta
from rbgs.models.pod import PodTemplateSpec

GROUP = "workloads.x-k8s.io"
GROUP_VERSION = f"{GROUP}/v1alpha1"
ROLE_BASED_GROUP_KIND = "RoleBasedGroup"

# Label keys stamped on revision records.
SET_NAME_LABEL_KEY = "rolebasedgroup.workloads.x-k8s.io/name"
REVISION_LABEL_KEY = "rolebasedgroup.workloads.x-k8s.io/controller-revision-hash"
ROLE_REVISION_LABEL_KEY_FMT = "rolebasedgroup.workloads.x-k8s.io/role-revision-hash-{role}"

DEFAULT_REVISION_HISTORY_LIMIT = 10


def role_revision_label_key(role: str) -> str:
    return ROLE_REVISION_LABEL_KEY_FMT.format(role=role)


@dataclass
class WorkloadSpec:
    """API identity of the child workload a role is materialized as."""

    api_version: str = "apps/v1"
    kind: str = "StatefulSet"

    def to_dict(self) -> dict[str, Any]:
        return {"apiVersion": self.api_version, "kind": self.kind}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> WorkloadSpec:
        data = data or {}
        return cls(
            api_version=str(data.get("apiVersion", "apps/v1")),
            kind=str(data.get("kind", "StatefulSet")),
        )


@dataclass
class RoleSpec:
    """One named unit of work within a RoleBasedGroup."""

    name: str
    replicas: int = 1
    workload: WorkloadSpec = field(default_factory=WorkloadSpec)
    template: PodTemplateSpec = field(default_factory=PodTemplateSpec)
    dependencies: list[str] = field(default_factory=list)
    restart_policy: str = ""
    leader_worker_set: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "replicas": self.replicas,
            "workload": self.workload.to_dict(),
            "template": self.template.to_dict(),
        }
        if self.dependencies:
            out["dependencies"] = list(self.dependencies)
        if self.restart_policy:
            out["restartPolicy"] = self.restart_policy
        if self.leader_worker_set is not None:
            out["leaderWorkerSet"] = self.leader_worker_set
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoleSpec:
        replicas = data.get("replicas")
        return cls(
            name=str(data.get("name", "")),
            replicas=1 if replicas is None else int(replicas),
            workload=WorkloadSpec.from_dict(data.get("workload")),
            template=PodTemplateSpec.from_dict(data.get("template")),
            dependencies=list(data.get("dependencies") or []),
            restart_policy=str(data.get("restartPolicy", "") or ""),
            leader_worker_set=data.get("leaderWorkerSet"),
        )


@dataclass
class KubeSchedulingPolicy:
    """Gang scheduling through the scheduler-plugins PodGroup."""

    schedule_timeout_seconds: int | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.schedule_timeout_seconds is None:
            return {}
        return {"scheduleTimeoutSeconds": self.schedule_timeout_seconds}


@dataclass
class VolcanoSchedulingPolicy:
    """Gang scheduling through a Volcano PodGroup."""

    priority_class_name: str = ""
    queue: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.priority_class_name:
            out["priorityClassName"] = self.priority_class_name
        if self.queue:
            out["queue"] = self.queue
        return out


@dataclass
class PodGroupPolicy:
    """Group-wide scheduling policy; at most one source is set."""

    kube_scheduling: KubeSchedulingPolicy | None = None
    volcano_scheduling: VolcanoSchedulingPolicy | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.kube_scheduling is not None:
            out["kubeScheduling"] = self.kube_scheduling.to_dict()
        if self.volcano_scheduling is not None:
            out["volcanoScheduling"] = self.volcano_scheduling.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PodGroupPolicy | None:
        if data is None:
            return None
        kube = data.get("kubeScheduling")
        volcano = data.get("volcanoScheduling")
        return cls(
            kube_scheduling=(
                KubeSchedulingPolicy(schedule_timeout_seconds=kube.get("scheduleTimeoutSeconds"))
                if kube is not None
                else None
            ),
            volcano_scheduling=(
                VolcanoSchedulingPolicy(
                    priority_class_name=str(volcano.get("priorityClassName", "")),
                    queue=str(volcano.get("queue", "")),
                )
                if volcano is not None
                else None
            ),
        )


@dataclass
class RoleBasedGroupSpec:
    roles: list[RoleSpec] = field(default_factory=list)
    pod_group_policy: PodGroupPolicy | None = None
    revision_history_limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"roles": [role.to_dict() for role in self.roles]}
        if self.pod_group_policy is not None:
            out["podGroupPolicy"] = self.pod_group_policy.to_dict()
        if self.revision_history_limit is not None:
            out["revisionHistoryLimit"] = self.revision_history_limit
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RoleBasedGroupSpec:
        data = data or {}
        limit = data.get("revisionHistoryLimit")
        return cls(
            roles=[RoleSpec.from_dict(role) for role in data.get("roles") or []],
            pod_group_policy=PodGroupPolicy.from_dict(data.get("podGroupPolicy")),
            revision_history_limit=None if limit is None else int(limit),
        )


@dataclass
class RoleBasedGroup:
    """The parent grouping resource owning every role workload and revision."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: RoleBasedGroupSpec = field(default_factory=RoleBasedGroupSpec)

    api_version = GROUP_VERSION
    kind = ROLE_BASED_GROUP_KIND

    def role(self, name: str) -> RoleSpec | None:
        for role in self.spec.roles:
            if role.name == name:
                return role
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoleBasedGroup:
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=RoleBasedGroupSpec.from_dict(data.get("spec")),
        )
