"""Tests for the Snapshot Restore Engine."""

from __future__ import annotations

import copy

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rbgs.errors import DecodeError, PatchApplyError
from rbgs.models.group import RoleSpec
from rbgs.models.pod import Container, PodSpec, PodTemplateSpec
from rbgs.models.revision import encode_raw
from rbgs.revision.builder import build_revision
from rbgs.revision.restore import apply_revision, revisions_equal

from tests.conftest import make_group, make_policy, make_revision


class TestApplyRevision:
    def test_restores_roles_and_policy(self) -> None:
        snapshot = make_group(policy=make_policy(300))
        revision = build_revision(snapshot, 1)

        live = make_group()
        live.spec.roles[0].template.spec.containers[0].image = "nginx:2.0.0"
        live.spec.roles[0].replicas = 5
        live.spec.pod_group_policy = make_policy(30)

        restored = apply_revision(live, revision)

        assert restored.spec.roles == snapshot.spec.roles
        assert restored.spec.pod_group_policy == make_policy(300)

    def test_restored_group_rebuilds_identical_revision(self) -> None:
        snapshot = make_group(policy=make_policy())
        revision = build_revision(snapshot, 1)

        restored = apply_revision(make_group(roles=[RoleSpec(name="only")]), revision)

        assert revisions_equal(build_revision(restored, 2), revision)

    def test_absent_policy_removes_live_policy(self) -> None:
        revision = build_revision(make_group(), 1)
        restored = apply_revision(make_group(policy=make_policy()), revision)
        assert restored.spec.pod_group_policy is None

    def test_role_list_of_different_length_is_replaced(self) -> None:
        revision = build_revision(make_group(roles=[RoleSpec(name="solo", replicas=2)]), 1)
        restored = apply_revision(make_group(), revision)
        assert [role.name for role in restored.spec.roles] == ["solo"]
        assert restored.spec.roles[0].replicas == 2

    def test_unversioned_fields_keep_live_values(self) -> None:
        revision = build_revision(make_group(history_limit=3), 1)
        live = make_group(history_limit=7)
        live.metadata.labels = {"team": "infra"}
        live.metadata.generation = 4

        restored = apply_revision(live, revision)

        assert restored.spec.revision_history_limit == 7
        assert restored.metadata == live.metadata

    def test_live_is_not_modified(self) -> None:
        revision = build_revision(make_group(roles=[RoleSpec(name="solo")]), 1)
        live = make_group()
        before = copy.deepcopy(live)
        apply_revision(live, revision)
        assert live == before

    def test_revision_without_data(self) -> None:
        with pytest.raises(DecodeError):
            apply_revision(make_group(), make_revision("empty", 1))

    def test_undecodable_data(self) -> None:
        with pytest.raises(DecodeError):
            apply_revision(make_group(), make_revision("garbled", 1, raw=b"{not json"))

    def test_non_object_patch(self) -> None:
        with pytest.raises(PatchApplyError):
            apply_revision(make_group(), make_revision("listy", 1, raw=encode_raw([1, 2])))

    def test_incompatible_shape(self) -> None:
        raw = encode_raw({"spec": {"$patch": "replace", "roles": [{"name": "x", "replicas": "many"}]}})
        with pytest.raises(DecodeError):
            apply_revision(make_group(), make_revision("bad-shape", 1, raw=raw))

    @settings(max_examples=40, deadline=None)
    @given(
        roles=st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=100),
                st.sampled_from(["nginx:1.0.0", "redis:7", "busybox:latest"]),
            ),
            min_size=1,
            max_size=5,
        ),
        timeout=st.one_of(st.none(), st.integers(min_value=1, max_value=3600)),
    )
    def test_restore_reproduces_snapshot(self, roles: list[tuple[int, str]], timeout: int | None) -> None:
        role_specs = [
            RoleSpec(
                name=f"role-{i}",
                replicas=replicas,
                template=PodTemplateSpec(spec=PodSpec(containers=[Container(name="main", image=image)])),
            )
            for i, (replicas, image) in enumerate(roles)
        ]
        snapshot = make_group(roles=role_specs, policy=make_policy(timeout) if timeout is not None else None)

        restored = apply_revision(make_group(), build_revision(snapshot, 1))

        assert restored.spec.roles == snapshot.spec.roles
        assert restored.spec.pod_group_policy == snapshot.spec.pod_group_policy


class TestRevisionsEqual:
    def test_same_bytes(self) -> None:
        assert revisions_equal(build_revision(make_group(), 1), build_revision(make_group(), 2))

    def test_different_bytes(self) -> None:
        changed = make_group()
        changed.spec.roles[0].replicas = 9
        assert not revisions_equal(build_revision(make_group(), 1), build_revision(changed, 2))

    def test_decoded_object_participates(self) -> None:
        lhs = build_revision(make_group(), 1)
        rhs = build_revision(make_group(), 1)
        rhs.data.object = {"attached": True}
        assert not revisions_equal(lhs, rhs)

    def test_none_handling(self) -> None:
        assert revisions_equal(None, None)
        assert not revisions_equal(build_revision(make_group(), 1), None)
        assert not revisions_equal(None, build_revision(make_group(), 1))

    def test_missing_raw_equals_empty_raw(self) -> None:
        assert revisions_equal(make_revision("a", 1), make_revision("b", 1, raw=b""))
