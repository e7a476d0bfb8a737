"""RevisionManager: keeps a parent's revision history in step with its spec.

Called once per reconcile of a RoleBasedGroup. Reconciles for one parent are
expected to be serialized by the caller; no locking happens here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rbgs.errors import PruneError
from rbgs.models.group import DEFAULT_REVISION_HISTORY_LIMIT, RoleBasedGroup
from rbgs.models.revision import ControllerRevision
from rbgs.observability.logging import get_logger
from rbgs.observability.metrics import revisions_created_total
from rbgs.revision.builder import build_revision, next_revision_number, parent_selector
from rbgs.revision.hashing import DEFAULT_HASH_OPTIONS, HashOptions
from rbgs.revision.history import highest_revision, prune_expired
from rbgs.revision.restore import apply_revision, revisions_equal
from rbgs.revision.store import list_revisions

if TYPE_CHECKING:
    from rbgs.models.config import RBGSConfig
    from rbgs.revision.store import RevisionStore

_log = get_logger("revision.manager")


@dataclass
class RevisionSyncResult:
    """Outcome of one ``RevisionManager.sync`` call."""

    current: ControllerRevision
    history: list[ControllerRevision] = field(default_factory=list)
    created: bool = False
    prune_error: PruneError | None = None


class RevisionManager:
    """Materializes the current revision for a parent and garbage-collects old ones.

    Args:
        store:          Revision store gateway.
        history_limit:  Default retention when the parent sets none.
        hash_options:   Canonicalization rules for content hashes.
    """

    def __init__(
        self,
        store: RevisionStore,
        history_limit: int = DEFAULT_REVISION_HISTORY_LIMIT,
        hash_options: HashOptions = DEFAULT_HASH_OPTIONS,
    ) -> None:
        self._store = store
        self._history_limit = history_limit
        self._hash_options = hash_options

    @classmethod
    def from_config(cls, store: RevisionStore, config: RBGSConfig) -> RevisionManager:
        return cls(
            store,
            history_limit=config.revision.history_limit,
            hash_options=HashOptions(sort_keys=config.revision.hash_sort_keys),
        )

    def history_limit_for(self, parent: RoleBasedGroup) -> int:
        limit = parent.spec.revision_history_limit
        if limit is None:
            return self._history_limit
        return max(limit, 1)

    async def sync(self, parent: RoleBasedGroup) -> RevisionSyncResult:
        """Ensure a revision exists for *parent*'s spec, then prune the history.

        The highest existing revision is reused when its patch is identical to
        the one the current spec produces. Prune failures do not fail the sync;
        they are reported on the result and retried on the next call.

        Raises:
            StoreError: listing or creating revisions failed.
            EncodeError / MalformedRevisionError: the parent spec cannot be snapshotted.
        """
        log = _log.bind(parent=parent)

        revisions = await list_revisions(self._store, parent, parent_selector(parent))
        highest = highest_revision(revisions)
        candidate = build_revision(parent, next_revision_number(revisions), self._hash_options)

        created = False
        if highest is not None and revisions_equal(highest, candidate):
            current = highest
        else:
            current = await self._store.create(candidate)
            revisions = [*revisions, current]
            created = True
            revisions_created_total.inc()
            log.info("revision_created", revision=current.revision, revision_name=current.metadata.name)

        result = RevisionSyncResult(current=current, history=revisions, created=created)
        try:
            result.history = await prune_expired(self._store, revisions, self.history_limit_for(parent))
        except PruneError as exc:
            log.warning("revision_history_prune_incomplete", error=str(exc.cause))
            result.history = exc.retained
            result.prune_error = exc
        return result

    def restore(self, live: RoleBasedGroup, revision: ControllerRevision) -> RoleBasedGroup:
        """Reconstruct the RoleBasedGroup *revision* declared, on top of *live*."""
        return apply_revision(live, revision)
