"""Content hashing for revision records.

Hashes are 32-bit FNV-1a digests rendered as DNS-label-safe strings.
Structured inputs are canonicalized before hashing under an explicit
``HashOptions`` value (sorted keys by default); the same patch hashed with
the same options always yields the same string.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from rbgs.errors import EncodeError
from rbgs.revision.patch import decode_patch

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193

# Alphabet without vowels and confusable characters, shared with the
# Kubernetes pod-template-hash encoding.
_SAFE_ALPHANUMS = "bcdfghjklmnpqrstvwxz2456789"


@dataclass(frozen=True)
class HashOptions:
    """Canonicalization rules applied before hashing structured content."""

    sort_keys: bool = True
    indent: int | None = None


DEFAULT_HASH_OPTIONS = HashOptions()


class Fnv32a:
    """Incremental 32-bit FNV-1a accumulator."""

    def __init__(self) -> None:
        self._value = _FNV32_OFFSET_BASIS

    def update(self, data: bytes) -> None:
        value = self._value
        for byte in data:
            value ^= byte
            value = (value * _FNV32_PRIME) & 0xFFFFFFFF
        self._value = value

    def intdigest(self) -> int:
        return self._value


def safe_encode(value: str) -> str:
    """Map every character onto the safe alphabet, keeping the length."""
    return "".join(_SAFE_ALPHANUMS[ord(ch) % len(_SAFE_ALPHANUMS)] for ch in value)


def _json_default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    raise TypeError(f"unhashable content of type {type(obj).__name__}")


def canonical_bytes(obj: Any, options: HashOptions = DEFAULT_HASH_OPTIONS) -> bytes:
    """Deterministic byte representation of *obj* under *options*."""
    separators = (",", ":") if options.indent is None else (",", ": ")
    try:
        text = json.dumps(
            obj,
            sort_keys=options.sort_keys,
            indent=options.indent,
            separators=separators,
            default=_json_default,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"cannot canonicalize {type(obj).__name__} for hashing: {exc}") from exc
    return text.encode("utf-8")


def compute_revision_hash(
    raw: bytes | None,
    obj: Any = None,
    options: HashOptions = DEFAULT_HASH_OPTIONS,
) -> str:
    """Hash raw patch bytes and, when present, the decoded object in one accumulator."""
    hasher = Fnv32a()
    if raw:
        hasher.update(raw)
    if obj is not None:
        hasher.update(canonical_bytes(obj, options))
    return safe_encode(str(hasher.intdigest()))


def compute_role_hashes(raw: bytes | None, options: HashOptions = DEFAULT_HASH_OPTIONS) -> dict[str, str]:
    """Hash every role of a revision patch individually, keyed by role name.

    Raises:
        MalformedRevisionError: the patch lacks ``spec.roles`` or a role has no name.
    """
    if not raw:
        return {}

    patch = decode_patch(raw)
    hashes: dict[str, str] = {}
    for role in patch.roles:
        hasher = Fnv32a()
        hasher.update(canonical_bytes(role, options))
        hashes[role["name"]] = safe_encode(str(hasher.intdigest()))
    return hashes
