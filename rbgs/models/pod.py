"""Pod template data structures.

Only the fields the update gate inspects are typed. Every other key of a
container or pod spec is kept verbatim in ``extra`` so that encoding a decoded
object reproduces the original document.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

# API server defaults applied to probes on admission.
PROBE_DEFAULT_TIMEOUT_SECONDS = 1
PROBE_DEFAULT_PERIOD_SECONDS = 10
PROBE_DEFAULT_SUCCESS_THRESHOLD = 1
PROBE_DEFAULT_FAILURE_THRESHOLD = 3


def _split_extra(data: dict[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


@dataclass(frozen=True)
class EnvVar:
    """A single container environment variable."""

    name: str
    value: str = ""
    value_from: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.value:
            out["value"] = self.value
        if self.value_from is not None:
            out["valueFrom"] = self.value_from
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvVar:
        return cls(
            name=str(data.get("name", "")),
            value=str(data.get("value", "") or ""),
            value_from=data.get("valueFrom"),
        )


@dataclass
class Probe:
    """Full probe configuration: handler plus timing thresholds.

    Zero means "unset" for the integer fields, as in the Kubernetes API.
    """

    exec: dict[str, Any] | None = None
    http_get: dict[str, Any] | None = None
    tcp_socket: dict[str, Any] | None = None
    grpc: dict[str, Any] | None = None
    initial_delay_seconds: int = 0
    timeout_seconds: int = 0
    period_seconds: int = 0
    success_threshold: int = 0
    failure_threshold: int = 0
    termination_grace_period_seconds: int | None = None

    _FIELDS = (
        ("exec", "exec"),
        ("http_get", "httpGet"),
        ("tcp_socket", "tcpSocket"),
        ("grpc", "grpc"),
        ("initial_delay_seconds", "initialDelaySeconds"),
        ("timeout_seconds", "timeoutSeconds"),
        ("period_seconds", "periodSeconds"),
        ("success_threshold", "successThreshold"),
        ("failure_threshold", "failureThreshold"),
        ("termination_grace_period_seconds", "terminationGracePeriodSeconds"),
    )

    def with_defaults(self) -> Probe:
        """Return a copy with the API server's defaults filled into unset fields."""
        return replace(
            self,
            timeout_seconds=self.timeout_seconds or PROBE_DEFAULT_TIMEOUT_SECONDS,
            period_seconds=self.period_seconds or PROBE_DEFAULT_PERIOD_SECONDS,
            success_threshold=self.success_threshold or PROBE_DEFAULT_SUCCESS_THRESHOLD,
            failure_threshold=self.failure_threshold or PROBE_DEFAULT_FAILURE_THRESHOLD,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, key in self._FIELDS:
            value = getattr(self, attr)
            if value is None or value == 0:
                continue
            out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Probe | None:
        if data is None:
            return None
        kwargs: dict[str, Any] = {}
        for attr, key in cls._FIELDS:
            if key in data:
                kwargs[attr] = data[key]
        return cls(**kwargs)


@dataclass
class Container:
    """A container in a pod template."""

    name: str
    image: str = ""
    command: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    ports: list[dict[str, Any]] = field(default_factory=list)
    resources: dict[str, Any] = field(default_factory=dict)
    volume_mounts: list[dict[str, Any]] = field(default_factory=list)
    image_pull_policy: str = ""
    startup_probe: Probe | None = None
    liveness_probe: Probe | None = None
    readiness_probe: Probe | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN = (
        "name",
        "image",
        "command",
        "args",
        "env",
        "ports",
        "resources",
        "volumeMounts",
        "imagePullPolicy",
        "startupProbe",
        "livenessProbe",
        "readinessProbe",
    )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out["name"] = self.name
        if self.image:
            out["image"] = self.image
        if self.command:
            out["command"] = list(self.command)
        if self.args:
            out["args"] = list(self.args)
        if self.env:
            out["env"] = [var.to_dict() for var in self.env]
        if self.ports:
            out["ports"] = list(self.ports)
        if self.resources:
            out["resources"] = dict(self.resources)
        if self.volume_mounts:
            out["volumeMounts"] = list(self.volume_mounts)
        if self.image_pull_policy:
            out["imagePullPolicy"] = self.image_pull_policy
        if self.startup_probe is not None:
            out["startupProbe"] = self.startup_probe.to_dict()
        if self.liveness_probe is not None:
            out["livenessProbe"] = self.liveness_probe.to_dict()
        if self.readiness_probe is not None:
            out["readinessProbe"] = self.readiness_probe.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Container:
        return cls(
            name=str(data.get("name", "")),
            image=str(data.get("image", "") or ""),
            command=list(data.get("command") or []),
            args=list(data.get("args") or []),
            env=[EnvVar.from_dict(var) for var in data.get("env") or []],
            ports=list(data.get("ports") or []),
            resources=dict(data.get("resources") or {}),
            volume_mounts=list(data.get("volumeMounts") or []),
            image_pull_policy=str(data.get("imagePullPolicy", "") or ""),
            startup_probe=Probe.from_dict(data.get("startupProbe")),
            liveness_probe=Probe.from_dict(data.get("livenessProbe")),
            readiness_probe=Probe.from_dict(data.get("readinessProbe")),
            extra=_split_extra(data, cls._KNOWN),
        )


@dataclass
class PodSpec:
    """Pod spec with typed containers; remaining pod fields live in ``extra``."""

    containers: list[Container] = field(default_factory=list)
    init_containers: list[Container] = field(default_factory=list)
    volumes: list[dict[str, Any]] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("containers", "initContainers", "volumes")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out["containers"] = [c.to_dict() for c in self.containers]
        if self.init_containers:
            out["initContainers"] = [c.to_dict() for c in self.init_containers]
        if self.volumes:
            out["volumes"] = list(self.volumes)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PodSpec:
        data = data or {}
        return cls(
            containers=[Container.from_dict(c) for c in data.get("containers") or []],
            init_containers=[Container.from_dict(c) for c in data.get("initContainers") or []],
            volumes=list(data.get("volumes") or []),
            extra=_split_extra(data, cls._KNOWN),
        )


@dataclass
class PodTemplateSpec:
    """Template labels/annotations plus the pod spec."""

    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    spec: PodSpec = field(default_factory=PodSpec)

    def to_dict(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {}
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        return {"metadata": metadata, "spec": self.spec.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PodTemplateSpec:
        data = data or {}
        metadata = data.get("metadata") or {}
        return cls(
            labels=dict(metadata.get("labels") or {}),
            annotations=dict(metadata.get("annotations") or {}),
            spec=PodSpec.from_dict(data.get("spec")),
        )
