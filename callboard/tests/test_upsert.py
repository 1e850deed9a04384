"""
Test Module for the upsert write contract and CallRecordRepository.

Covers:
- Replace-on-key semantics and idempotence of apply_upsert
- Selective replace through restrict_to_hours
- In-batch deduplication (last occurrence wins)
- Repository: one executemany per batch, empty batch skips the write,
  store failures surface as WriteError with the store's message
- Snapshot loading and roster writes
"""

from datetime import date
from unittest.mock import AsyncMock

import asyncpg
import pytest

from callboard.core.exceptions import WriteError
from callboard.models import Agent, CallRecord, Team
from callboard.services.upsert import (
    CallRecordRepository,
    apply_upsert,
    dedupe_batch,
    restrict_to_hours,
)
from callboard.sql import (
    CLEAR_CALL_DATA_QUERY,
    INSERT_AGENT_QUERY,
    INSERT_TEAM_QUERY,
    SELECT_TEAMS_QUERY,
    UPSERT_CALL_DATA_QUERY,
)


DAY = date(2024, 1, 1)


def _record(agent_id: str = "agent-john", hour: int = 9, calls: int = 5, minutes: int = 10, sales: int = 1) -> CallRecord:
    return CallRecord(
        agent_id=agent_id,
        date=DAY,
        hour=hour,
        calls_made=calls,
        total_call_time=minutes,
        sales_made=sales,
    )


# =============================================================================
# TEST CLASS: Write Contract
# =============================================================================

class TestApplyUpsert:
    """Pure replace-on-key semantics."""

    def test_insert_into_empty_store(self):
        record = _record()
        assert apply_upsert({}, [record]) == {record.key: record}

    def test_existing_key_replaced_not_summed(self):
        old = _record(calls=5, minutes=10, sales=1)
        new = _record(calls=3, minutes=4, sales=0)
        state = apply_upsert({old.key: old}, [new])
        assert state[new.key].calls_made == 3
        assert state[new.key].total_call_time == 4
        assert state[new.key].sales_made == 0

    def test_idempotent(self):
        batch = [_record(hour=9), _record(hour=10, calls=2), _record("agent-jane", hour=9)]
        once = apply_upsert({}, batch)
        twice = apply_upsert(once, batch)
        assert once == twice

    def test_other_keys_untouched(self):
        kept = _record(hour=11, calls=8)
        state = apply_upsert({kept.key: kept}, [_record(hour=9)])
        assert state[kept.key] is kept
        assert len(state) == 2

    def test_input_mapping_not_modified(self):
        existing = {}
        apply_upsert(existing, [_record()])
        assert existing == {}

    def test_later_row_in_batch_wins(self):
        state = apply_upsert({}, [_record(calls=1), _record(calls=9)])
        assert state[_record().key].calls_made == 9


class TestRestrictToHours:
    """Selective replace."""

    def test_none_means_everything(self):
        batch = [_record(hour=9), _record(hour=10)]
        assert restrict_to_hours(batch, None) == batch
        assert restrict_to_hours(batch, []) == batch

    def test_filters_to_selected_hours(self):
        batch = [_record(hour=9), _record(hour=10), _record(hour=11)]
        assert [r.hour for r in restrict_to_hours(batch, [9, 11])] == [9, 11]

    def test_unselected_hours_survive_upsert(self):
        existing_ten = _record(hour=10, calls=7)
        batch = [_record(hour=9, calls=1), _record(hour=10, calls=1)]
        state = apply_upsert({existing_ten.key: existing_ten}, restrict_to_hours(batch, [9]))
        assert state[existing_ten.key].calls_made == 7


class TestDedupeBatch:

    def test_last_occurrence_wins_first_position_kept(self):
        batch = [_record(hour=9, calls=1), _record(hour=10), _record(hour=9, calls=4)]
        deduped = dedupe_batch(batch)
        assert [(r.hour, r.calls_made) for r in deduped] == [(9, 4), (10, 5)]


# =============================================================================
# TEST CLASS: Repository Writes
# =============================================================================

class TestUpsertCallRecords:
    """Batched writes against a mock pool."""

    async def test_single_executemany_for_batch(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        written = await repository.upsert_call_records([_record(hour=9), _record(hour=10)])

        assert written == 2
        mock_conn.executemany.assert_awaited_once()
        query, args = mock_conn.executemany.await_args.args
        assert query == UPSERT_CALL_DATA_QUERY
        assert args == [
            ("agent-john", DAY, 9, 5, 10, 1),
            ("agent-john", DAY, 10, 5, 10, 1),
        ]

    async def test_empty_batch_does_not_write(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        assert await repository.upsert_call_records([]) == 0
        mock_conn.executemany.assert_not_called()

    async def test_hour_selection_applied(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        written = await repository.upsert_call_records([_record(hour=9), _record(hour=10)], hours=[10])
        assert written == 1
        _, args = mock_conn.executemany.await_args.args
        assert [row[2] for row in args] == [10]

    async def test_selection_excluding_everything_skips_write(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        assert await repository.upsert_call_records([_record(hour=9)], hours=[15]) == 0
        mock_conn.executemany.assert_not_called()

    async def test_duplicate_keys_collapsed(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        written = await repository.upsert_call_records([_record(calls=1), _record(calls=2)])
        assert written == 1
        _, args = mock_conn.executemany.await_args.args
        assert args[0][3] == 2

    async def test_store_failure_raises_write_error(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        mock_conn.executemany.side_effect = OSError("connection refused")

        with pytest.raises(WriteError) as exc_info:
            await repository.upsert_call_records([_record(), _record(hour=10)])

        assert str(exc_info.value) == "connection refused"
        assert exc_info.value.store_message == "connection refused"
        assert exc_info.value.batch_size == 2
        assert exc_info.value.code == "WRITE_FAILED"

    async def test_interface_error_raises_write_error(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        mock_conn.executemany.side_effect = asyncpg.InterfaceError("pool is closed")

        with pytest.raises(WriteError) as exc_info:
            await repository.upsert_call_records([_record()])
        assert exc_info.value.store_message == "pool is closed"

    def test_upsert_sql_replaces_every_measure(self):
        assert "ON CONFLICT (agent_id, date, hour)" in UPSERT_CALL_DATA_QUERY
        for measure in ("calls_made", "total_call_time", "sales_made"):
            assert f"{measure} = EXCLUDED.{measure}" in UPSERT_CALL_DATA_QUERY
        assert "+" not in UPSERT_CALL_DATA_QUERY


class TestRosterWrites:

    async def test_create_teams(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        teams = [Team(id="t1", name="Alpha", color="#3b82f6")]
        assert await repository.create_teams(teams) == teams
        query, args = mock_conn.executemany.await_args.args
        assert query == INSERT_TEAM_QUERY
        assert args == [("t1", "Alpha", "#3b82f6", None)]

    async def test_create_agents(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        agents = [Agent(id="a1", name="Ann", email="ann@x.com", team_id="t1")]
        await repository.create_agents(agents)
        query, args = mock_conn.executemany.await_args.args
        assert query == INSERT_AGENT_QUERY
        assert args == [("a1", "Ann", "ann@x.com", "t1", True)]

    async def test_empty_roster_writes_skipped(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        assert await repository.create_teams([]) == []
        assert await repository.create_agents([]) == []
        mock_conn.executemany.assert_not_called()

    async def test_clear_call_records(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        await repository.clear_call_records()
        mock_conn.execute.assert_awaited_once_with(CLEAR_CALL_DATA_QUERY)


# =============================================================================
# TEST CLASS: Snapshot
# =============================================================================

class TestFetchSnapshot:

    async def test_builds_models_from_rows(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        mock_conn.fetch.side_effect = [
            [{"id": "c1", "name": "Solar", "color": "#f59e0b", "is_active": True}],
            [{"id": "t1", "name": "Alpha", "color": "#3b82f6", "campaign_id": "c1"}],
            [{"id": "a1", "name": "Ann", "email": None, "team_id": "t1", "is_active": True}],
            [{
                "agent_id": "a1", "date": DAY, "hour": 9,
                "calls_made": 4, "total_call_time": 12, "sales_made": 1,
            }],
        ]

        snapshot = await repository.fetch_snapshot(DAY, DAY)

        assert snapshot.campaigns[0].id == "c1"
        assert snapshot.teams[0].campaign_id == "c1"
        assert snapshot.agents[0].team_id == "t1"
        assert snapshot.records[0].calls_made == 4

        call_query_args = mock_conn.fetch.await_args_list[3].args
        assert call_query_args[1:] == (DAY, DAY)
        assert "date >= $1" in call_query_args[0]
        assert "date <= $2" in call_query_args[0]


class TestFetchTeams:

    async def test_reads_only_teams(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        mock_conn.fetch.return_value = [
            {"id": "t1", "name": "Alpha", "color": "#3b82f6", "campaign_id": "c1"},
            {"id": "t2", "name": "Floating", "color": "#8b5cf6", "campaign_id": None},
        ]

        teams = await repository.fetch_teams()

        mock_conn.fetch.assert_awaited_once_with(SELECT_TEAMS_QUERY)
        assert [team.name for team in teams] == ["Alpha", "Floating"]
        assert all(isinstance(team, Team) for team in teams)
        assert teams[1].campaign_id is None

    async def test_no_teams(self, repository: CallRecordRepository, mock_conn: AsyncMock):
        mock_conn.fetch.return_value = []
        assert await repository.fetch_teams() == []
