"""Revision history for RoleBasedGroup parents.

Submodules:
    selector  -- Label selectors (matchLabels / matchExpressions).
    store     -- Revision Store Gateway over the ControllerRevision API.
    patch     -- Patch build, typed decode, and merge-patch apply.
    hashing   -- FNV-1a content hashes with explicit HashOptions.
    builder   -- Revision Builder (naming, labels, owner reference).
    history   -- Highest revision, ordering, retention pruning.
    restore   -- Snapshot Restore Engine and revision equality.
    manager   -- RevisionManager tying the above into one reconcile step.
"""

from rbgs.revision.builder import build_revision, new_revision, next_revision_number, revision_name
from rbgs.revision.hashing import HashOptions, compute_revision_hash, compute_role_hashes
from rbgs.revision.history import highest_revision, prune_expired, sort_revisions
from rbgs.revision.manager import RevisionManager, RevisionSyncResult
from rbgs.revision.patch import apply_merge_patch, build_patch, decode_patch
from rbgs.revision.restore import apply_revision, revisions_equal
from rbgs.revision.selector import LabelSelector, SelectorOperator, SelectorRequirement
from rbgs.revision.store import KubernetesRevisionStore, RevisionStore, build_revision_store, list_revisions

__all__ = [
    "HashOptions",
    "KubernetesRevisionStore",
    "LabelSelector",
    "RevisionManager",
    "RevisionStore",
    "RevisionSyncResult",
    "SelectorOperator",
    "SelectorRequirement",
    "apply_merge_patch",
    "apply_revision",
    "build_patch",
    "build_revision",
    "build_revision_store",
    "compute_revision_hash",
    "compute_role_hashes",
    "decode_patch",
    "highest_revision",
    "list_revisions",
    "new_revision",
    "next_revision_number",
    "prune_expired",
    "revision_name",
    "revisions_equal",
    "sort_revisions",
]
