"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from rbgs.models.config import LogConfig, RBGSConfig, RevisionConfig, StoreConfig


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"RBGS_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float) -> float:
    return float(_env(key, str(default)))


def _validate_timeout(value: float) -> float:
    if value <= 0:
        raise ValueError(f"Invalid store timeout: {value}. Must be positive")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> RBGSConfig:
    """Load configuration from RBGS_* environment variables."""
    return RBGSConfig(
        revision=RevisionConfig(
            history_limit=_env_int("REVISION_HISTORY_LIMIT", 10, min_val=1, max_val=1000),
            hash_sort_keys=_env_bool("HASH_SORT_KEYS", True),
        ),
        store=StoreConfig(
            timeout_seconds=_validate_timeout(_env_float("STORE_TIMEOUT_SECONDS", 30.0)),
            kubeconfig=_env("KUBECONFIG", ""),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
