"""
Unit tests for SupabaseRecordCacheRepository.

The Supabase query builder is replaced by a MagicMock chain whose builder
methods return the mock itself.
"""

from unittest.mock import MagicMock

import pytest

from application.exceptions import ProviderError
from application.ports import RecordFilter
from infrastructure.db import RecordCacheError, SupabaseRecordCacheRepository
from infrastructure.db.record_cache_repository import record_to_row, row_to_record
from tests.fakes import AUTHORITY_A, make_exercise_record

pytestmark = pytest.mark.unit


def _row(record_id: str, identifier: str = "squat", created_at: int = 100) -> dict:
    return {
        "id": record_id,
        "kind": 33401,
        "authority": AUTHORITY_A,
        "identifier": identifier,
        "content": "",
        "tags": [["d", identifier]],
        "created_at": created_at,
    }


def _mock_client(rows=None, error=None):
    client = MagicMock()
    query = MagicMock()
    client.table.return_value = query
    for method in ("select", "in_", "gte", "lte", "order", "limit", "upsert"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=rows or [])
    return client, query


class TestRowMapping:
    def test_row_uses_d_identifier(self):
        record = make_exercise_record("squat", record_id="evt-1")
        row = record_to_row(record)
        assert row["identifier"] == "squat"
        assert row["tags"] == record.tags
        assert row_to_record(row) == record

    def test_missing_optional_columns(self):
        record = row_to_record({"id": "x", "kind": 1301, "authority": AUTHORITY_A, "created_at": 5})
        assert record.content == ""
        assert record.tags == []


class TestQuery:
    def test_builds_filtered_query(self):
        client, query = _mock_client([_row("evt-1")])
        repo = SupabaseRecordCacheRepository(client, table="records")
        record_filter = RecordFilter(
            kinds=[33401], authors=[AUTHORITY_A], identifiers=["squat"], since=10, limit=5
        )

        records = repo.query(record_filter)

        assert [r.id for r in records] == ["evt-1"]
        client.table.assert_called_with("records")
        query.in_.assert_any_call("kind", [33401])
        query.in_.assert_any_call("authority", [AUTHORITY_A])
        query.in_.assert_any_call("identifier", ["squat"])
        query.gte.assert_called_once_with("created_at", 10)
        query.lte.assert_not_called()
        query.order.assert_called_once_with("created_at", desc=True)
        query.limit.assert_called_once_with(5)

    def test_unconstrained_filter_skips_clauses(self):
        client, query = _mock_client([])
        SupabaseRecordCacheRepository(client).query(RecordFilter())
        query.in_.assert_not_called()
        query.limit.assert_not_called()

    def test_malformed_rows_are_skipped(self):
        client, _ = _mock_client([_row("evt-1"), {"id": "broken"}])
        records = SupabaseRecordCacheRepository(client).query(RecordFilter())
        assert [r.id for r in records] == ["evt-1"]

    def test_failure_raises_provider_error(self):
        client, _ = _mock_client(error=RuntimeError("connection reset"))

        with pytest.raises(RecordCacheError) as exc_info:
            SupabaseRecordCacheRepository(client).query(RecordFilter())

        assert isinstance(exc_info.value, ProviderError)

    def test_query_many_dedupes_by_id(self):
        client, _ = _mock_client([_row("evt-1"), _row("evt-2", "bench")])
        repo = SupabaseRecordCacheRepository(client)

        records = repo.query_many([RecordFilter(kinds=[33401]), RecordFilter(authors=[AUTHORITY_A])])

        assert [r.id for r in records] == ["evt-1", "evt-2"]


class TestSaveMany:
    def test_upserts_on_id(self):
        client, query = _mock_client()
        records = [make_exercise_record("squat"), make_exercise_record("bench")]

        count = SupabaseRecordCacheRepository(client).save_many(records)

        assert count == 2
        rows = query.upsert.call_args.args[0]
        assert [r["identifier"] for r in rows] == ["squat", "bench"]
        assert query.upsert.call_args.kwargs == {"on_conflict": "id"}

    def test_empty_is_noop(self):
        client, _ = _mock_client()
        assert SupabaseRecordCacheRepository(client).save_many([]) == 0
        client.table.assert_not_called()

    def test_failure_raises(self):
        client, _ = _mock_client(error=RuntimeError("read only"))
        with pytest.raises(RecordCacheError):
            SupabaseRecordCacheRepository(client).save_many([make_exercise_record("squat")])
