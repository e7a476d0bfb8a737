"""Tests for revision ordering, highest-revision lookup and pruning."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from prometheus_client import REGISTRY

from rbgs.errors import PruneError
from rbgs.revision.history import highest_revision, prune_expired, sort_revisions

from tests.conftest import InMemoryRevisionStore, make_revision

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


# ---------------------------------------------------------------------------
# highest_revision
# ---------------------------------------------------------------------------


class TestHighestRevision:
    def test_empty(self) -> None:
        assert highest_revision([]) is None
        assert highest_revision(None) is None

    def test_single(self) -> None:
        only = make_revision("r1", 1)
        assert highest_revision([only]) is only

    def test_unordered(self) -> None:
        revisions = [make_revision("r1", 1), make_revision("r3", 3), make_revision("r2", 2)]
        result = highest_revision(revisions)
        assert result is not None
        assert result.revision == 3

    def test_tie_last_encountered_wins(self) -> None:
        first = make_revision("r2a", 2)
        second = make_revision("r2b", 2)
        assert highest_revision([make_revision("r1", 1), first, second]) is second
        assert highest_revision([second, first]) is first

    def test_zero_revision_is_returned(self) -> None:
        zero = make_revision("r0", 0)
        assert highest_revision([zero]) is zero


# ---------------------------------------------------------------------------
# sort_revisions
# ---------------------------------------------------------------------------


class TestSortRevisions:
    def test_by_number_then_timestamp_then_name(self) -> None:
        revisions = [
            make_revision("b", 2, created_at=_T0),
            make_revision("a", 2, created_at=_T0),
            make_revision("late", 1, created_at=_T0 + timedelta(minutes=5)),
            make_revision("early", 1, created_at=_T0),
            make_revision("unstamped", 1),
        ]
        assert [r.metadata.name for r in sort_revisions(revisions)] == ["unstamped", "early", "late", "a", "b"]

    def test_does_not_mutate_input(self) -> None:
        revisions = [make_revision("r2", 2), make_revision("r1", 1)]
        sort_revisions(revisions)
        assert [r.metadata.name for r in revisions] == ["r2", "r1"]


# ---------------------------------------------------------------------------
# prune_expired
# ---------------------------------------------------------------------------


def _history(count: int) -> list:
    return [make_revision(f"rev-{i}", i, created_at=_T0 + timedelta(seconds=i)) for i in range(1, count + 1)]


class TestPruneExpired:
    async def test_within_limit_is_untouched(self) -> None:
        revisions = _history(3)
        store = InMemoryRevisionStore(revisions)
        retained = await prune_expired(store, revisions, limit=5)
        assert retained is revisions
        assert store.deleted == []

    async def test_exactly_at_limit(self) -> None:
        revisions = _history(10)
        store = InMemoryRevisionStore(revisions)
        retained = await prune_expired(store, revisions)
        assert len(retained) == 10
        assert store.deleted == []

    async def test_deletes_oldest_beyond_default_limit(self) -> None:
        revisions = list(reversed(_history(12)))
        store = InMemoryRevisionStore(revisions)

        retained = await prune_expired(store, revisions)

        assert store.deleted == ["rev-1", "rev-2"]
        assert [r.revision for r in retained] == list(range(3, 13))

    async def test_limit_one_keeps_newest(self) -> None:
        revisions = _history(4)
        store = InMemoryRevisionStore(revisions)
        retained = await prune_expired(store, revisions, limit=1)
        assert [r.metadata.name for r in retained] == ["rev-4"]
        assert store.deleted == ["rev-1", "rev-2", "rev-3"]

    async def test_failure_stops_and_returns_original(self) -> None:
        revisions = _history(5)
        store = InMemoryRevisionStore(revisions, fail_delete_on={"rev-2"})

        with pytest.raises(PruneError) as exc_info:
            await prune_expired(store, revisions, limit=2)

        assert store.deleted == ["rev-1"]
        assert [r.metadata.name for r in exc_info.value.retained] == [r.metadata.name for r in revisions]
        assert exc_info.value.cause.operation == "delete"

    async def test_counts_pruned_revisions(self) -> None:
        before = REGISTRY.get_sample_value("rbgs_revisions_pruned_total") or 0.0
        revisions = _history(4)
        await prune_expired(InMemoryRevisionStore(revisions), revisions, limit=1)
        assert REGISTRY.get_sample_value("rbgs_revisions_pruned_total") == before + 3

    @pytest.mark.parametrize("limit", [0, -1])
    async def test_invalid_limit(self, limit: int) -> None:
        with pytest.raises(ValueError):
            await prune_expired(InMemoryRevisionStore(), _history(2), limit=limit)

    @settings(max_examples=50, deadline=None)
    @given(
        numbers=st.lists(st.integers(min_value=1, max_value=50), max_size=20, unique=True),
        limit=st.integers(min_value=1, max_value=12),
    )
    def test_retains_newest_limit(self, numbers: list[int], limit: int) -> None:
        revisions = [make_revision(f"rev-{n}", n) for n in numbers]
        store = InMemoryRevisionStore(revisions)

        retained = asyncio.run(prune_expired(store, revisions, limit=limit))

        assert len(retained) == min(len(numbers), limit)
        assert sorted(r.revision for r in retained) == sorted(numbers)[-limit:]
        assert len(store.deleted) == max(len(numbers) - limit, 0)
