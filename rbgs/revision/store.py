"""Revision Store Gateway.

Thin async boundary over the cluster object store. ``RevisionStore`` is the
contract; ``KubernetesRevisionStore`` implements it against the apps/v1
ControllerRevision endpoints with kubernetes-asyncio.

Every call is bounded by the store's timeout. Expiry surfaces as
``StoreTimeoutError``; task cancellation propagates untouched.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import aiohttp
from kubernetes_asyncio.client.exceptions import ApiException

from rbgs.errors import StoreError, StoreTimeoutError
from rbgs.models.meta import ObjectMeta, get_controller_of
from rbgs.models.revision import ControllerRevision
from rbgs.observability.logging import get_logger
from rbgs.observability.metrics import revision_store_errors_total

if TYPE_CHECKING:
    from rbgs.models.config import StoreConfig
    from rbgs.revision.selector import LabelSelector

_log = get_logger("revision.store")

_T = TypeVar("_T")


class HasMetadata(Protocol):
    metadata: ObjectMeta


class RevisionStore(ABC):
    """Query/mutation contract for revision records."""

    @abstractmethod
    async def list(self, namespace: str, selector: LabelSelector) -> list[ControllerRevision]:
        """Return every record in *namespace* matching *selector*."""

    @abstractmethod
    async def create(self, revision: ControllerRevision) -> ControllerRevision:
        """Persist *revision* and return the stored copy."""

    @abstractmethod
    async def delete(self, revision: ControllerRevision) -> None:
        """Delete *revision*."""


class KubernetesRevisionStore(RevisionStore):
    """RevisionStore backed by ``AppsV1Api`` from kubernetes-asyncio.

    Args:
        api:             An ``AppsV1Api`` instance.
        timeout_seconds: Deadline applied to each API call.
    """

    def __init__(self, api: Any, timeout_seconds: float = 30.0) -> None:
        self._api = api
        self._timeout = timeout_seconds

    async def list(self, namespace: str, selector: LabelSelector) -> list[ControllerRevision]:
        result = await self._call(
            "list",
            self._api.list_namespaced_controller_revision(namespace, label_selector=selector.to_query()),
        )
        return [self._to_revision(item) for item in result.items or []]

    async def create(self, revision: ControllerRevision) -> ControllerRevision:
        stored = await self._call(
            "create",
            self._api.create_namespaced_controller_revision(revision.metadata.namespace, revision.to_dict()),
        )
        created = self._to_revision(stored)
        created.data.object = revision.data.object
        return created

    async def delete(self, revision: ControllerRevision) -> None:
        try:
            await self._call(
                "delete",
                self._api.delete_namespaced_controller_revision(revision.metadata.name, revision.metadata.namespace),
                ignore_status=404,
            )
        except _AlreadyGone:
            _log.debug("revision_already_deleted", name=revision.metadata.name, namespace=revision.metadata.namespace)

    async def close(self) -> None:
        """Close the underlying ApiClient connection pool."""
        await self._api.api_client.close()

    def _to_revision(self, item: Any) -> ControllerRevision:
        raw = item if isinstance(item, dict) else self._api.api_client.sanitize_for_serialization(item)
        return ControllerRevision.from_dict(raw)

    async def _call(self, operation: str, request: Awaitable[_T], ignore_status: int | None = None) -> _T:
        try:
            return await asyncio.wait_for(request, timeout=self._timeout)
        except TimeoutError as exc:
            revision_store_errors_total.labels(operation=operation).inc()
            _log.warning("revision_store_timeout", operation=operation, timeout=self._timeout)
            raise StoreTimeoutError(operation, f"deadline of {self._timeout}s exceeded") from exc
        except ApiException as exc:
            if ignore_status is not None and exc.status == ignore_status:
                raise _AlreadyGone from exc
            revision_store_errors_total.labels(operation=operation).inc()
            _log.warning("revision_store_error", operation=operation, status=exc.status, reason=exc.reason)
            raise StoreError(operation, f"{exc.status} {exc.reason}") from exc
        except aiohttp.ClientError as exc:
            revision_store_errors_total.labels(operation=operation).inc()
            _log.warning("revision_store_error", operation=operation, error=str(exc))
            raise StoreError(operation, str(exc)) from exc


class _AlreadyGone(Exception):
    """Internal signal: the object to delete no longer exists."""


async def build_revision_store(config: StoreConfig) -> KubernetesRevisionStore:
    """Configure kubernetes-asyncio and return a store bound to ``AppsV1Api``.

    An explicit kubeconfig path wins; otherwise the in-cluster service account
    is tried first with a fallback to the default kubeconfig.
    """
    import kubernetes_asyncio.config as k8s_config
    from kubernetes_asyncio import client as k8s_client

    if config.kubeconfig:
        await k8s_config.load_kube_config(config_file=config.kubeconfig)
        _log.info("k8s client configured from kubeconfig", path=config.kubeconfig)
    else:
        try:
            k8s_config.load_incluster_config()
            _log.info("k8s client configured from in-cluster service account")
        except k8s_config.ConfigException:
            await k8s_config.load_kube_config()
            _log.info("k8s client configured from kubeconfig")

    return KubernetesRevisionStore(k8s_client.AppsV1Api(), timeout_seconds=config.timeout_seconds)


async def list_revisions(
    store: RevisionStore,
    parent: HasMetadata,
    selector: LabelSelector | None,
) -> list[ControllerRevision]:
    """List revisions matching *selector* that are unowned or controlled by *parent*.

    A ``None`` selector selects nothing and issues no store call. Raises
    StoreError when the underlying list fails; an empty result is valid.
    """
    if selector is None:
        return []

    history = await store.list(parent.metadata.namespace, selector)
    owned: list[ControllerRevision] = []
    for revision in history:
        if revision.metadata.namespace and revision.metadata.namespace != parent.metadata.namespace:
            continue
        if not selector.matches(revision.metadata.labels):
            continue
        ref = get_controller_of(revision.metadata)
        if ref is None or ref.uid == parent.metadata.uid:
            owned.append(revision)
    return owned
