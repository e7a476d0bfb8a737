"""Kubernetes object metadata shared by every resource type."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


def format_time(value: datetime | None) -> str | None:
    """Render a timestamp the way the API server does (RFC 3339, second precision)."""
    if value is None:
        return None
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass
class OwnerReference:
    """Reference from a dependent object to its owner."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool | None = None
    block_owner_deletion: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
        }
        if self.controller is not None:
            out["controller"] = self.controller
        if self.block_owner_deletion is not None:
            out["blockOwnerDeletion"] = self.block_owner_deletion
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OwnerReference:
        return cls(
            api_version=str(data.get("apiVersion", "")),
            kind=str(data.get("kind", "")),
            name=str(data.get("name", "")),
            uid=str(data.get("uid", "")),
            controller=data.get("controller"),
            block_owner_deletion=data.get("blockOwnerDeletion"),
        )


@dataclass
class ObjectMeta:
    """Subset of metav1.ObjectMeta used by the revision core."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)
    creation_timestamp: datetime | None = None
    generation: int = 0
    resource_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.name:
            out["name"] = self.name
        if self.namespace:
            out["namespace"] = self.namespace
        if self.uid:
            out["uid"] = self.uid
        if self.labels:
            out["labels"] = dict(self.labels)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.owner_references:
            out["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        if self.creation_timestamp is not None:
            out["creationTimestamp"] = format_time(self.creation_timestamp)
        if self.generation:
            out["generation"] = self.generation
        if self.resource_version:
            out["resourceVersion"] = self.resource_version
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ObjectMeta:
        data = data or {}
        return cls(
            name=str(data.get("name", "")),
            namespace=str(data.get("namespace", "")),
            uid=str(data.get("uid", "")),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
            owner_references=[OwnerReference.from_dict(ref) for ref in data.get("ownerReferences") or []],
            creation_timestamp=parse_time(data.get("creationTimestamp")),
            generation=int(data.get("generation", 0) or 0),
            resource_version=str(data.get("resourceVersion", "")),
        )


def get_controller_of(meta: ObjectMeta) -> OwnerReference | None:
    """Return the owner reference flagged ``controller=true``, if any."""
    for ref in meta.owner_references:
        if ref.controller:
            return ref
    return None


def new_controller_ref(owner: ObjectMeta, api_version: str, kind: str) -> OwnerReference:
    """Build a controller owner reference so dependents are cascade-deleted with *owner*."""
    return OwnerReference(
        api_version=api_version,
        kind=kind,
        name=owner.name,
        uid=owner.uid,
        controller=True,
        block_owner_deletion=True,
    )
