"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RevisionConfig:
    """Revision history configuration."""

    history_limit: int = 10
    hash_sort_keys: bool = True


@dataclass
class StoreConfig:
    """Revision store (Kubernetes API) configuration."""

    timeout_seconds: float = 30.0
    kubeconfig: str = ""


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class RBGSConfig:
    """Top-level configuration."""

    revision: RevisionConfig = field(default_factory=RevisionConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log: LogConfig = field(default_factory=LogConfig)
