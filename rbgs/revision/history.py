"""Revision History Manager: ordering, highest revision, and retention."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from rbgs.errors import PruneError, StoreError
from rbgs.models.group import DEFAULT_REVISION_HISTORY_LIMIT
from rbgs.models.revision import ControllerRevision
from rbgs.observability.logging import get_logger
from rbgs.observability.metrics import revisions_pruned_total

if TYPE_CHECKING:
    from rbgs.revision.store import RevisionStore

_log = get_logger("revision.history")

_NO_TIMESTAMP = datetime.min.replace(tzinfo=UTC)


def highest_revision(revisions: Sequence[ControllerRevision] | None) -> ControllerRevision | None:
    """Return the revision with the greatest revision number.

    When several share that number the last one encountered wins; callers
    that care about object identity should pre-sort with ``sort_revisions``.
    """
    if not revisions:
        return None

    max_number = 0
    highest: ControllerRevision | None = None
    for revision in revisions:
        if max_number <= revision.revision:
            max_number = revision.revision
            highest = revision
    return highest


def _sort_key(revision: ControllerRevision) -> tuple[int, datetime, str]:
    return (
        revision.revision,
        revision.metadata.creation_timestamp or _NO_TIMESTAMP,
        revision.metadata.name,
    )


def sort_revisions(revisions: Sequence[ControllerRevision]) -> list[ControllerRevision]:
    """Sort ascending by (revision number, creation timestamp, name)."""
    return sorted(revisions, key=_sort_key)


async def prune_expired(
    store: RevisionStore,
    revisions: list[ControllerRevision],
    limit: int = DEFAULT_REVISION_HISTORY_LIMIT,
) -> list[ControllerRevision]:
    """Delete the oldest revisions beyond *limit* and return the retained ones.

    Deletion is best effort and not transactional: it stops at the first
    failed delete and raises PruneError carrying the original list, so the
    caller retries the whole prune later. The newest *limit* revisions are
    never deleted.
    """
    if limit < 1:
        raise ValueError(f"revision history limit must be at least 1, got {limit}")

    surplus = len(revisions) - limit
    if surplus <= 0:
        return revisions

    ordered = sort_revisions(revisions)
    for revision in ordered[:surplus]:
        try:
            await store.delete(revision)
        except StoreError as exc:
            _log.warning(
                "revision_prune_failed",
                name=revision.metadata.name,
                namespace=revision.metadata.namespace,
                revision=revision.revision,
                error=str(exc),
            )
            raise PruneError(list(revisions), exc) from exc
        revisions_pruned_total.inc()
        _log.info(
            "revision_pruned",
            name=revision.metadata.name,
            namespace=revision.metadata.namespace,
            revision=revision.revision,
        )
    return ordered[surplus:]
