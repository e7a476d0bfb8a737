"""Snapshot Restore Engine: reconstruct what a historical revision declared."""

from __future__ import annotations

from rbgs.errors import DecodeError
from rbgs.models.group import RoleBasedGroup
from rbgs.models.revision import ControllerRevision, decode_raw, encode_raw
from rbgs.revision.patch import apply_merge_patch


def apply_revision(live: RoleBasedGroup, revision: ControllerRevision) -> RoleBasedGroup:
    """Return a new RoleBasedGroup: *live* with *revision*'s patch applied.

    Roles and group policy come from the revision; every other field keeps
    its live value. *live* is not modified.

    Raises:
        EncodeError: *live* cannot be encoded.
        DecodeError: the revision has no data, or a document cannot be decoded.
        PatchApplyError: the patch cannot be applied.
    """
    original = decode_raw(encode_raw(live.to_dict()))
    if not revision.data.raw:
        raise DecodeError(f"revision {revision.metadata.name!r} carries no patch data")
    patch = decode_raw(revision.data.raw)

    patched = apply_merge_patch(original, patch)
    try:
        return RoleBasedGroup.from_dict(patched)
    except (AttributeError, TypeError, ValueError) as exc:
        raise DecodeError(f"cannot decode restored RoleBasedGroup: {exc}") from exc


def revisions_equal(lhs: ControllerRevision | None, rhs: ControllerRevision | None) -> bool:
    """Two revisions are equal when raw bytes and decoded objects both match."""
    if lhs is None or rhs is None:
        return lhs is rhs
    return (lhs.data.raw or b"") == (rhs.data.raw or b"") and lhs.data.object == rhs.data.object
