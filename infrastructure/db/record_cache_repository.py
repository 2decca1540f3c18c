"""
Supabase implementation of the local durable record cache.

Raw records are stored one row per record id:
``id, kind, authority, identifier, content, tags (jsonb), created_at``.
The ``identifier`` column holds the record's 'd' identifier so filters on
identifiers translate to a single ``in_`` clause.
"""
import logging
from typing import Any, Dict, List, Sequence

from pydantic import ValidationError
from supabase import Client

from application.exceptions import ProviderError
from application.ports.record_provider import RecordFilter
from domain.models.record import RawRecord

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "records"


class RecordCacheError(ProviderError):
    """The local record cache could not be read or written."""

    pass


def record_to_row(record: RawRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "kind": record.kind,
        "authority": record.authority,
        "identifier": record.d_tag,
        "content": record.content,
        "tags": record.tags,
        "created_at": record.created_at,
    }


def row_to_record(row: Dict[str, Any]) -> RawRecord:
    return RawRecord(
        id=row["id"],
        kind=row["kind"],
        authority=row["authority"],
        identifier=row.get("identifier") or "",
        content=row.get("content") or "",
        tags=row.get("tags") or [],
        created_at=row["created_at"],
    )


class SupabaseRecordCacheRepository:
    """
    Supabase-backed record cache.

    The client is injected via constructor for testability. Unlike a plain
    lookup table, read failures are raised (as RecordCacheError) so callers
    can tell "nothing cached" from "cache unreadable".
    """

    def __init__(self, client: Client, table: str = DEFAULT_TABLE):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected, not global)
            table: Name of the records table
        """
        self._client = client
        self._table = table

    def query(self, record_filter: RecordFilter) -> List[RawRecord]:
        """
        Return cached records matching one filter, newest first.

        Raises:
            RecordCacheError: If the query failed.
        """
        try:
            query = self._client.table(self._table).select("*")
            if record_filter.kinds:
                query = query.in_("kind", record_filter.kinds)
            if record_filter.authors:
                query = query.in_("authority", record_filter.authors)
            if record_filter.identifiers:
                query = query.in_("identifier", record_filter.identifiers)
            if record_filter.since is not None:
                query = query.gte("created_at", record_filter.since)
            if record_filter.until is not None:
                query = query.lte("created_at", record_filter.until)
            query = query.order("created_at", desc=True)
            if record_filter.limit is not None:
                query = query.limit(record_filter.limit)
            result = query.execute()
        except Exception as e:
            logger.exception(f"Error querying {self._table}")
            raise RecordCacheError(f"Record cache query failed: {e}") from e

        records = []
        for row in result.data or []:
            try:
                records.append(row_to_record(row))
            except (KeyError, ValidationError) as e:
                logger.warning(f"Skipping malformed cached row {row.get('id')}: {e}")
        return records

    def query_many(self, filters: Sequence[RecordFilter]) -> List[RawRecord]:
        """Return records matching any filter, each record once."""
        seen = set()
        records: List[RawRecord] = []
        for record_filter in filters:
            for record in self.query(record_filter):
                if record.id not in seen:
                    seen.add(record.id)
                    records.append(record)
        return records

    def save_many(self, records: Sequence[RawRecord]) -> int:
        """
        Upsert records by id.

        Returns:
            Number of records written

        Raises:
            RecordCacheError: If the upsert failed.
        """
        if not records:
            return 0
        rows = [record_to_row(record) for record in records]
        try:
            self._client.table(self._table).upsert(rows, on_conflict="id").execute()
        except Exception as e:
            logger.exception(f"Error saving {len(rows)} records to {self._table}")
            raise RecordCacheError(f"Record cache write failed: {e}") from e
        logger.debug(f"Cached {len(rows)} records")
        return len(rows)
