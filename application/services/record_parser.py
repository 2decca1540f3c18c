"""
Memoizing record parser.

Wraps the pure converters in domain.converters.records_to_domain with a
ParseCache keyed by record id. Parsing is idempotent, so a cache hit returns
the same object (or the same None for a record that failed validation).
"""

import logging
from typing import Optional

from application.services.parse_cache import ParseCache
from domain.converters.records_to_domain import PARSERS, DomainObject, parse_record
from domain.exceptions import UnsupportedRecordKindError
from domain.models.record import RawRecord
from domain.models.reference import RecordKind

logger = logging.getLogger(__name__)


class RecordParser:
    """Parses raw records into domain objects through a bounded memo cache."""

    def __init__(self, cache: Optional[ParseCache] = None):
        self._cache = cache if cache is not None else ParseCache()

    @property
    def cache(self) -> ParseCache:
        return self._cache

    def parse(self, record: RawRecord) -> Optional[DomainObject]:
        """Parse any supported record; None when the kind is unknown or invalid."""
        return self._cache.get_or_parse(record.id, lambda: parse_record(record))

    def parse_as(self, record: RawRecord, kind: RecordKind) -> Optional[DomainObject]:
        """
        Parse a record that must be of ``kind``.

        Raises:
            UnsupportedRecordKindError: If the record is of another kind.
        """
        if record.kind != int(kind):
            raise UnsupportedRecordKindError(expected=int(kind), actual=record.kind)
        return self._cache.get_or_parse(record.id, lambda: PARSERS[kind](record))
