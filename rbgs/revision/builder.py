"""Revision Builder: turns a parent's current spec into a named, hashed record."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rbgs.models.group import (
    GROUP_VERSION,
    REVISION_LABEL_KEY,
    ROLE_BASED_GROUP_KIND,
    SET_NAME_LABEL_KEY,
    RoleBasedGroup,
    role_revision_label_key,
)
from rbgs.models.meta import ObjectMeta, new_controller_ref
from rbgs.models.revision import ControllerRevision, RevisionData
from rbgs.observability.logging import get_logger
from rbgs.observability.metrics import revisions_built_total
from rbgs.revision.hashing import DEFAULT_HASH_OPTIONS, HashOptions, compute_revision_hash, compute_role_hashes
from rbgs.revision.history import highest_revision
from rbgs.revision.patch import build_patch
from rbgs.revision.selector import LabelSelector
from rbgs.revision.store import list_revisions

if TYPE_CHECKING:
    from rbgs.revision.store import RevisionStore

_log = get_logger("revision.builder")

MAX_NAME_PREFIX_LENGTH = 220
MAX_OBJECT_NAME_LENGTH = 253


def revision_name(prefix: str, hash_: str, revision_number: int) -> str:
    """Return ``<prefix>-<hash>-<revision>``.

    The prefix is truncated to 220 characters so the name stays within the
    253-character object name limit. The revision number keeps names unique
    even when the same content hash reappears in the history.
    """
    if len(prefix) > MAX_NAME_PREFIX_LENGTH:
        prefix = prefix[:MAX_NAME_PREFIX_LENGTH]
    return f"{prefix}-{hash_}-{revision_number}"


def next_revision_number(revisions: Sequence[ControllerRevision] | None) -> int:
    highest = highest_revision(revisions)
    if highest is None:
        return 1
    return highest.revision + 1


def parent_selector(parent: RoleBasedGroup) -> LabelSelector:
    """Selector matching every revision stamped with *parent*'s name."""
    return LabelSelector.from_labels({SET_NAME_LABEL_KEY: parent.metadata.name})


def build_revision(
    parent: RoleBasedGroup,
    revision_number: int,
    options: HashOptions = DEFAULT_HASH_OPTIONS,
) -> ControllerRevision:
    """Assemble the revision record for *parent*'s current spec.

    Raises:
        EncodeError: the parent spec cannot be serialized.
        MalformedRevisionError: a role has no name.
    """
    raw = build_patch(parent)
    revision_hash = compute_revision_hash(raw, None, options)
    role_hashes = compute_role_hashes(raw, options)

    labels = {
        SET_NAME_LABEL_KEY: parent.metadata.name,
        REVISION_LABEL_KEY: revision_hash,
    }
    for role, role_hash in role_hashes.items():
        labels[role_revision_label_key(role)] = role_hash

    revision = ControllerRevision(
        metadata=ObjectMeta(
            name=revision_name(parent.metadata.name, revision_hash, revision_number),
            namespace=parent.metadata.namespace,
            labels=labels,
            owner_references=[new_controller_ref(parent.metadata, GROUP_VERSION, ROLE_BASED_GROUP_KIND)],
        ),
        revision=revision_number,
        data=RevisionData(raw=raw),
    )
    revisions_built_total.inc()
    _log.debug(
        "revision_built",
        name=revision.metadata.name,
        namespace=revision.metadata.namespace,
        revision=revision_number,
        roles=len(role_hashes),
    )
    return revision


async def new_revision(
    store: RevisionStore,
    parent: RoleBasedGroup,
    options: HashOptions = DEFAULT_HASH_OPTIONS,
) -> ControllerRevision:
    """Build the next revision for *parent* without persisting it.

    Raises:
        StoreError: listing existing revisions failed.
        EncodeError / MalformedRevisionError: see ``build_revision``.
    """
    existing = await list_revisions(store, parent, parent_selector(parent))
    return build_revision(parent, next_revision_number(existing), options)
