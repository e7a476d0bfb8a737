"""Error hierarchy for the revision history and update-gating core.

StoreError is the only retryable family: it wraps transport, permission and
deadline failures raised by the cluster object store. Encode/Decode/Patch
errors indicate an incompatible object shape and need a code or data fix.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rbgs.models.revision import ControllerRevision


class RevisionError(Exception):
    """Base class for every error raised by rbgs."""


class StoreError(RevisionError):
    """A list/create/delete call against the revision store failed."""

    retryable = True

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"revision store {operation} failed: {message}")
        self.operation = operation


class StoreTimeoutError(StoreError):
    """A store call exceeded its deadline."""


class EncodeError(RevisionError):
    """An object could not be serialized."""


class DecodeError(RevisionError):
    """Bytes or a document could not be decoded into the expected shape."""


class MalformedRevisionError(DecodeError):
    """A stored revision patch lacks the expected ``spec.roles`` structure.

    Such a revision is unusable for per-role hashing but may still be hashed
    as a whole.
    """


class PatchApplyError(RevisionError):
    """A revision patch could not be applied to the live encoding."""


class PruneError(RevisionError):
    """Garbage collection stopped at the first failed delete.

    ``retained`` is the original, un-pruned list handed to the prune call so
    the caller can retry the whole prune on the next reconcile.
    """

    def __init__(self, retained: list[ControllerRevision], cause: StoreError) -> None:
        super().__init__(f"pruning revisions stopped: {cause}")
        self.retained = retained
        self.cause = cause
