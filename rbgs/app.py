"""Application bootstrap for the revision core.

Startup order: config → logging → revision store → revision manager.
Shutdown closes the store's API client. The outer reconcile loop owns an
instance and calls ``manager.sync`` once per RoleBasedGroup reconcile.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbgs import __version__
from rbgs.config import load_config
from rbgs.observability.logging import get_logger, setup_logging
from rbgs.revision.manager import RevisionManager
from rbgs.revision.store import build_revision_store

if TYPE_CHECKING:
    import structlog

    from rbgs.models.config import RBGSConfig
    from rbgs.revision.store import KubernetesRevisionStore


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class RevisionApp:
    """Owns the store and manager and coordinates their lifecycle.

    ``stop()`` on an app that was never started (or already stopped) is safe.
    """

    def __init__(self, config: RBGSConfig | None = None) -> None:
        self.config = config
        self.store: KubernetesRevisionStore | None = None
        self.manager: RevisionManager | None = None
        self._log: structlog.stdlib.BoundLogger | None = None

    async def start(self) -> RevisionManager:
        """Start every component and return the ready RevisionManager.

        Raises _ComponentError if the Kubernetes client cannot be configured.
        """
        if self.config is None:
            self.config = load_config()

        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("rbgs revision core starting", version=__version__)

        try:
            self.store = await build_revision_store(self.config.store)
        except Exception as exc:
            raise _ComponentError("revision_store", exc) from exc

        self.manager = RevisionManager.from_config(self.store, self.config)
        self._log.info(
            "rbgs revision core started",
            history_limit=self.config.revision.history_limit,
            store_timeout_seconds=self.config.store.timeout_seconds,
        )
        return self.manager

    async def stop(self) -> None:
        if self.store is None:
            return
        store, self.store = self.store, None
        self.manager = None
        await store.close()
        if self._log is not None:
            self._log.info("rbgs revision core stopped")
