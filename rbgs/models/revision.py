"""ControllerRevision: an immutable, hashed snapshot of a parent's versioned fields."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from rbgs.errors import DecodeError, EncodeError
from rbgs.models.meta import ObjectMeta

CONTROLLER_REVISION_API_VERSION = "apps/v1"
CONTROLLER_REVISION_KIND = "ControllerRevision"


def encode_raw(document: Any) -> bytes:
    """Serialize *document* to compact JSON with sorted keys.

    Revision data is always written through this encoder so that records read
    back from the store are byte-identical to the ones that were created.
    """
    try:
        return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"cannot encode document: {exc}") from exc


def decode_raw(raw: bytes) -> Any:
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"cannot decode revision data: {exc}") from exc


@dataclass
class RevisionData:
    """Raw patch bytes plus an optional decoded object attached in-process."""

    raw: bytes | None = None
    object: Any = None


@dataclass
class ControllerRevision:
    """A single entry in a parent's revision history.

    ``data`` never changes after creation; updates produce a new record.
    """

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    revision: int = 0
    data: RevisionData = field(default_factory=RevisionData)

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "apiVersion": CONTROLLER_REVISION_API_VERSION,
            "kind": CONTROLLER_REVISION_KIND,
            "metadata": self.metadata.to_dict(),
            "revision": self.revision,
        }
        if self.data.raw:
            out["data"] = decode_raw(self.data.raw)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ControllerRevision:
        payload = data.get("data")
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            revision=int(data.get("revision", 0) or 0),
            data=RevisionData(raw=encode_raw(payload) if payload is not None else None),
        )
