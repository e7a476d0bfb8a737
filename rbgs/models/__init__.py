"""Core data structures for rbgs."""

from rbgs.models.config import RBGSConfig
from rbgs.models.group import (
    KubeSchedulingPolicy,
    PodGroupPolicy,
    RoleBasedGroup,
    RoleBasedGroupSpec,
    RoleSpec,
    VolcanoSchedulingPolicy,
    WorkloadSpec,
)
from rbgs.models.meta import ObjectMeta, OwnerReference
from rbgs.models.pod import Container, EnvVar, PodSpec, PodTemplateSpec, Probe
from rbgs.models.revision import ControllerRevision, RevisionData

__all__ = [
    "Container",
    "ControllerRevision",
    "EnvVar",
    "KubeSchedulingPolicy",
    "ObjectMeta",
    "OwnerReference",
    "PodGroupPolicy",
    "PodSpec",
    "PodTemplateSpec",
    "Probe",
    "RBGSConfig",
    "RevisionData",
    "RoleBasedGroup",
    "RoleBasedGroupSpec",
    "RoleSpec",
    "VolcanoSchedulingPolicy",
    "WorkloadSpec",
]
