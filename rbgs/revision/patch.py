"""Revision patch documents: build, typed decode, and apply.

A revision patch has the shape::

    {"spec": {"$patch": "replace", "podGroupPolicy": {...} | null, "roles": [...]}}

The ``$patch: replace`` directive makes every key named in ``spec`` overwrite
the live value wholesale, so role lists of different lengths are never merged
position by position. Keys the patch does not name keep their live values.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from rbgs.errors import DecodeError, MalformedRevisionError, PatchApplyError
from rbgs.models.revision import decode_raw, encode_raw

if TYPE_CHECKING:
    from rbgs.models.group import RoleBasedGroup

PATCH_DIRECTIVE_KEY = "$patch"


class PatchDirective(StrEnum):
    """Values accepted for the ``$patch`` directive."""

    MERGE = "merge"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True)
class RevisionPatch:
    """Typed view of a decoded revision patch."""

    roles: list[dict[str, Any]]
    pod_group_policy: dict[str, Any] | None = None
    directive: PatchDirective | None = None


def build_patch(parent: RoleBasedGroup) -> bytes:
    """Serialize the versioned fields of *parent* (roles and group policy).

    Raises:
        EncodeError: a field cannot be serialized.
    """
    policy = parent.spec.pod_group_policy
    document = {
        "spec": {
            PATCH_DIRECTIVE_KEY: PatchDirective.REPLACE.value,
            "podGroupPolicy": policy.to_dict() if policy is not None else None,
            "roles": [role.to_dict() for role in parent.spec.roles],
        }
    }
    return encode_raw(document)


def decode_patch(raw: bytes) -> RevisionPatch:
    """Decode patch bytes into a RevisionPatch, validating its structure.

    Raises:
        MalformedRevisionError: not a JSON object, no ``spec`` object, no
            ``roles`` array, a role that is not an object, or a role without
            a non-empty ``name``.
    """
    try:
        document = decode_raw(raw)
    except DecodeError as exc:
        raise MalformedRevisionError(str(exc)) from exc

    if not isinstance(document, dict):
        raise MalformedRevisionError("revision patch is not a JSON object")
    spec = document.get("spec")
    if not isinstance(spec, dict):
        raise MalformedRevisionError("spec not found or wrong type")
    roles = spec.get("roles")
    if not isinstance(roles, list):
        raise MalformedRevisionError("roles not found or wrong type")

    for role in roles:
        if not isinstance(role, dict):
            raise MalformedRevisionError("invalid role structure")
        name = role.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedRevisionError("role missing name field")

    policy = spec.get("podGroupPolicy")
    if policy is not None and not isinstance(policy, dict):
        raise MalformedRevisionError("podGroupPolicy has wrong type")

    directive = spec.get(PATCH_DIRECTIVE_KEY)
    try:
        parsed_directive = PatchDirective(directive) if directive is not None else None
    except ValueError as exc:
        raise MalformedRevisionError(f"unknown patch directive {directive!r}") from exc

    return RevisionPatch(roles=roles, pod_group_policy=policy, directive=parsed_directive)


def apply_merge_patch(document: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Apply *patch* to *document* and return a new document.

    Merge-patch rules: objects merge recursively, lists and scalars replace,
    ``null`` removes a key. A ``$patch: replace`` map overwrites each key it
    names without recursing; ``$patch: delete`` removes the map.

    Raises:
        PatchApplyError: the patch is not an object or carries an unknown directive.
    """
    if not isinstance(patch, dict):
        raise PatchApplyError(f"patch must be a JSON object, got {type(patch).__name__}")
    if _directive_of(patch) == PatchDirective.DELETE:
        raise PatchApplyError("patch cannot delete the whole document")
    return _merge(document, patch)


def _directive_of(patch: dict[str, Any]) -> PatchDirective | None:
    value = patch.get(PATCH_DIRECTIVE_KEY)
    if value is None:
        return None
    try:
        return PatchDirective(value)
    except ValueError as exc:
        raise PatchApplyError(f"unknown patch directive {value!r}") from exc


def _merge(original: Any, patch: Any) -> Any:
    if not isinstance(patch, dict):
        return _strip_directives(patch)

    directive = _directive_of(patch)
    result = copy.deepcopy(original) if isinstance(original, dict) else {}
    for key, value in patch.items():
        if key == PATCH_DIRECTIVE_KEY:
            continue
        if value is None or (isinstance(value, dict) and _directive_of(value) == PatchDirective.DELETE):
            result.pop(key, None)
        elif directive == PatchDirective.REPLACE:
            result[key] = _strip_directives(value)
        else:
            result[key] = _merge(result.get(key), value)
    return result


def _strip_directives(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_directives(v) for k, v in value.items() if k != PATCH_DIRECTIVE_KEY}
    if isinstance(value, list):
        return [_strip_directives(item) for item in value]
    return value
