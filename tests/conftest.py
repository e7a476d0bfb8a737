"""Shared fixtures for rbgs tests.

Provides an in-memory RevisionStore that honours namespace and label
selector filtering the way the API server does, plus factories for
RoleBasedGroups and revision records.
"""

from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta

import pytest

from rbgs.errors import StoreError
from rbgs.models.group import (
    SET_NAME_LABEL_KEY,
    KubeSchedulingPolicy,
    PodGroupPolicy,
    RoleBasedGroup,
    RoleBasedGroupSpec,
    RoleSpec,
    WorkloadSpec,
)
from rbgs.models.meta import ObjectMeta, OwnerReference
from rbgs.models.pod import Container, PodSpec, PodTemplateSpec
from rbgs.models.revision import ControllerRevision, RevisionData
from rbgs.revision.selector import LabelSelector
from rbgs.revision.store import RevisionStore

_T0 = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryRevisionStore(RevisionStore):
    """RevisionStore keeping records in a dict keyed by (namespace, name)."""

    def __init__(
        self,
        revisions: list[ControllerRevision] | None = None,
        fail_delete_on: set[str] | None = None,
    ) -> None:
        self.records: dict[tuple[str, str], ControllerRevision] = {}
        self.deleted: list[str] = []
        self.created: list[str] = []
        self.list_calls = 0
        self.fail_delete_on = fail_delete_on or set()
        self._clock = _T0
        for revision in revisions or []:
            self.records[(revision.metadata.namespace, revision.metadata.name)] = copy.deepcopy(revision)

    async def list(self, namespace: str, selector: LabelSelector) -> list[ControllerRevision]:
        self.list_calls += 1
        return [
            copy.deepcopy(revision)
            for (ns, _), revision in self.records.items()
            if ns == namespace and selector.matches(revision.metadata.labels)
        ]

    async def create(self, revision: ControllerRevision) -> ControllerRevision:
        key = (revision.metadata.namespace, revision.metadata.name)
        if key in self.records:
            raise StoreError("create", f"{revision.metadata.name} already exists")
        self._clock += timedelta(seconds=1)
        stored = copy.deepcopy(revision)
        stored.metadata.creation_timestamp = self._clock
        self.records[key] = stored
        self.created.append(revision.metadata.name)
        return copy.deepcopy(stored)

    async def delete(self, revision: ControllerRevision) -> None:
        if revision.metadata.name in self.fail_delete_on:
            raise StoreError("delete", "403 Forbidden")
        self.records.pop((revision.metadata.namespace, revision.metadata.name), None)
        self.deleted.append(revision.metadata.name)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_group(
    name: str = "demo",
    namespace: str = "default",
    uid: str = "group-uid",
    roles: list[RoleSpec] | None = None,
    policy: PodGroupPolicy | None = None,
    history_limit: int | None = None,
) -> RoleBasedGroup:
    """Create a RoleBasedGroup with a StatefulSet role and a LeaderWorkerSet role."""
    if roles is None:
        roles = [
            RoleSpec(
                name="role-sts",
                replicas=1,
                workload=WorkloadSpec(api_version="apps/v1", kind="StatefulSet"),
                template=PodTemplateSpec(
                    labels={"app": "nginx"},
                    spec=PodSpec(containers=[Container(name="nginx", image="nginx:1.0.0")]),
                ),
            ),
            RoleSpec(
                name="role-lws",
                replicas=1,
                workload=WorkloadSpec(api_version="leaderworkerset.x-k8s.io/v1", kind="LeaderWorkerSet"),
            ),
        ]
    return RoleBasedGroup(
        metadata=ObjectMeta(name=name, namespace=namespace, uid=uid, generation=1),
        spec=RoleBasedGroupSpec(roles=roles, pod_group_policy=policy, revision_history_limit=history_limit),
    )


def make_policy(timeout: int = 300) -> PodGroupPolicy:
    return PodGroupPolicy(kube_scheduling=KubeSchedulingPolicy(schedule_timeout_seconds=timeout))


def make_revision(
    name: str,
    revision: int,
    namespace: str = "default",
    labels: dict[str, str] | None = None,
    owner_uid: str | None = None,
    created_at: datetime | None = None,
    raw: bytes | None = None,
) -> ControllerRevision:
    """Create a ControllerRevision, optionally controlled by the owner with *owner_uid*."""
    owners = []
    if owner_uid is not None:
        owners.append(
            OwnerReference(
                api_version="workloads.x-k8s.io/v1alpha1",
                kind="RoleBasedGroup",
                name=f"owner-{owner_uid}",
                uid=owner_uid,
                controller=True,
            )
        )
    return ControllerRevision(
        metadata=ObjectMeta(
            name=name,
            namespace=namespace,
            labels=labels if labels is not None else {SET_NAME_LABEL_KEY: "demo"},
            owner_references=owners,
            creation_timestamp=created_at,
        ),
        revision=revision,
        data=RevisionData(raw=raw),
    )


@pytest.fixture()
def group() -> RoleBasedGroup:
    return make_group()


@pytest.fixture()
def store() -> InMemoryRevisionStore:
    return InMemoryRevisionStore()
