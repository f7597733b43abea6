"""Tests for session.py — SyncSession selection, fetching and transfers."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from uniform_sync.errors import (
    InputValidationError,
    NotFoundError,
    SyncError,
    SyncInProgressError,
    UpstreamError,
)
from uniform_sync.models import Component, Freshness, Side, SyncOutcome
from uniform_sync.session import SyncSession
from uniform_sync.sync.engine import SyncEngine


def _component(component_id, day=1, params=0):
    return Component(
        id=component_id,
        name=component_id,
        parameter_count=params,
        last_updated=datetime(2024, 1, day, tzinfo=timezone.utc),
    )


def _outcome(source, destination, component):
    return SyncOutcome(
        component_id=component.id,
        source_project_id=source.id,
        destination_project_id=destination.id,
        component=component,
        completed_at="2024-07-01T00:00:00+00:00",
    )


@pytest.fixture
def session(project_a, project_b, project_c):
    return SyncSession([project_a, project_b, project_c])


@pytest.fixture
def paired(session, project_a, project_b):
    session.select(Side.A, project_a.id)
    session.select(Side.B, project_b.id)
    return session


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_select_returns_project(self, session, project_a):
        assert session.select(Side.A, project_a.id) == project_a
        assert session.project(Side.A) == project_a
        assert session.project(Side.B) is None

    def test_select_unknown_project(self, session):
        with pytest.raises(NotFoundError):
            session.select(Side.A, "00000000-0000-4000-8000-000000000000")

    def test_same_project_clears_other_side(self, paired, project_a):
        paired.set_components(Side.A, [_component("hero")])

        paired.select(Side.B, project_a.id)

        assert paired.selected[Side.B] == project_a.id
        assert paired.selected[Side.A] is None
        assert paired.components[Side.A] == []

    def test_changing_selection_resets_components(self, paired, project_c):
        paired.set_components(Side.B, [_component("hero")])
        paired.select(Side.B, project_c.id)
        assert paired.components[Side.B] == []

    def test_reselecting_keeps_components(self, paired, project_b):
        paired.set_components(Side.B, [_component("hero")])
        paired.select(Side.B, project_b.id)
        assert [c.id for c in paired.components[Side.B]] == ["hero"]

    def test_set_projects_drops_vanished_selection(
        self, paired, project_a, project_c
    ):
        paired.set_components(Side.B, [_component("hero")])
        paired.set_projects([project_a, project_c])
        assert paired.selected[Side.A] == project_a.id
        assert paired.selected[Side.B] is None
        assert paired.components[Side.B] == []


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


class TestRefreshComponents:
    async def test_fetches_both_sides(self, paired, mock_gateway, project_a, project_b):
        lists = {
            project_a.id: [_component("hero"), _component("card")],
            project_b.id: [_component("hero", day=5)],
        }
        mock_gateway.list_components.side_effect = lambda pid, key: lists[pid]

        await paired.refresh_components(mock_gateway)

        assert [c.id for c in paired.components[Side.A]] == ["hero", "card"]
        assert [c.id for c in paired.components[Side.B]] == ["hero"]
        rows = paired.table()
        assert [r.component_id for r in rows] == ["card", "hero"]
        assert rows[1].freshness_b is Freshness.NEWER

    async def test_failure_leaves_lists_untouched(
        self, paired, mock_gateway, project_a
    ):
        paired.set_components(Side.A, [_component("old-a")])
        paired.set_components(Side.B, [_component("old-b")])

        def _list(project_id, api_key):
            if project_id == project_a.id:
                return [_component("new-a")]
            raise UpstreamError("Uniform API returned 500")

        mock_gateway.list_components.side_effect = _list

        with pytest.raises(UpstreamError):
            await paired.refresh_components(mock_gateway)

        assert [c.id for c in paired.components[Side.A]] == ["old-a"]
        assert [c.id for c in paired.components[Side.B]] == ["old-b"]

    async def test_only_selected_sides_fetched(
        self, session, mock_gateway, project_a
    ):
        session.select(Side.A, project_a.id)
        mock_gateway.list_components.return_value = [_component("hero")]

        await session.refresh_components(mock_gateway)

        mock_gateway.list_components.assert_called_once_with(
            project_a.id, project_a.api_key
        )
        assert session.components[Side.B] == []

    def test_search_term_filters_table(self, paired):
        paired.set_components(Side.A, [_component("Hero"), _component("footer")])
        paired.search_term = "HER"
        assert [r.component_id for r in paired.table()] == ["Hero"]


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------


class TestSync:
    async def test_success_replaces_destination_entry(
        self, paired, project_a, project_b
    ):
        paired.set_components(Side.A, [_component("hero", day=1, params=2)])
        paired.set_components(
            Side.B, [_component("card"), _component("hero", day=9, params=5)]
        )
        copied = _component("hero", day=9, params=5)
        engine = MagicMock(spec=SyncEngine)
        engine.sync_component.return_value = _outcome(project_b, project_a, copied)

        outcome = await paired.sync(engine, Side.B, "hero", backup=True)

        engine.sync_component.assert_called_once_with(
            project_b, project_a, "hero", True
        )
        assert outcome.component == copied
        hero_a = [c for c in paired.components[Side.A] if c.id == "hero"]
        assert hero_a == [copied]
        assert [c.id for c in paired.components[Side.B]] == ["card", "hero"]
        assert paired.in_flight == set()
        assert paired.table()[1].freshness_a is Freshness.SAME

    async def test_failure_leaves_lists_and_clears_marker(
        self, paired, project_a, project_b
    ):
        before_a = [_component("hero", day=1)]
        paired.set_components(Side.A, before_a)
        engine = MagicMock(spec=SyncEngine)
        engine.sync_component.side_effect = SyncError("write failed")

        with pytest.raises(SyncError):
            await paired.sync(engine, Side.B, "hero", backup=False)

        assert paired.components[Side.A] == before_a
        assert "hero" not in paired.in_flight

    async def test_second_sync_of_same_component_rejected(
        self, paired, project_a, project_b
    ):
        started = asyncio.Event()
        release = asyncio.Event()
        loop = asyncio.get_running_loop()

        def _slow_sync(source, destination, component_id, backup):
            loop.call_soon_threadsafe(started.set)
            asyncio.run_coroutine_threadsafe(release.wait(), loop).result()
            return _outcome(source, destination, _component(component_id))

        engine = MagicMock(spec=SyncEngine)
        engine.sync_component.side_effect = _slow_sync

        first = asyncio.create_task(paired.sync(engine, Side.A, "hero", False))
        await started.wait()
        assert "hero" in paired.in_flight

        with pytest.raises(SyncInProgressError) as exc_info:
            await paired.sync(engine, Side.A, "hero", False)
        assert exc_info.value.status == 409

        release.set()
        await first
        assert paired.in_flight == set()
        assert engine.sync_component.call_count == 1

    async def test_requires_both_sides(self, session, project_a):
        session.select(Side.A, project_a.id)
        engine = MagicMock(spec=SyncEngine)
        with pytest.raises(InputValidationError):
            await session.sync(engine, Side.A, "hero", False)
        engine.sync_component.assert_not_called()

    async def test_empty_component_id(self, paired):
        engine = MagicMock(spec=SyncEngine)
        with pytest.raises(InputValidationError):
            await paired.sync(engine, Side.A, " ", False)
        engine.sync_component.assert_not_called()
