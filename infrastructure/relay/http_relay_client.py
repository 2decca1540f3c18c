"""
HTTP client for the record relay gateway.

The gateway fronts the decentralized record network: it fans a query out to
its relays and returns the matching signed records, and it signs and
broadcasts published drafts.

Endpoints:
- POST /records/query  {"filters": [...]}        -> {"records": [...]}
- POST /records        {"draft": {...}}          -> {"record": {...}}
"""

import logging
from typing import List, Optional, Sequence

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from application.exceptions import ProviderError
from application.ports.record_provider import RecordFilter
from domain.models.record import RawRecord, RecordDraft

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_PUBLISH_MAX_ATTEMPTS = 3


class RelayClientError(ProviderError):
    """Base exception for relay gateway errors."""

    pass


class RelayUnavailable(RelayClientError):
    """Raised when the gateway is unreachable, times out, or returns 5xx."""

    pass


class RelayAPIError(RelayClientError):
    """Raised when the gateway rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HttpRelayClient:
    """
    HTTP client for relay gateway communication.

    A new ``httpx.AsyncClient`` is opened per call; the client holds no
    connections between calls. Queries are never retried here. Publishing
    retries transient failures with exponential backoff.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        publish_max_attempts: int = DEFAULT_PUBLISH_MAX_ATTEMPTS,
        retry_min_wait_seconds: float = 1.0,
        retry_max_wait_seconds: float = 10.0,
    ):
        """
        Initialize the relay client.

        Args:
            base_url: Base URL of the gateway (e.g., "http://relay-gateway:8010")
            timeout: Default request timeout in seconds
            publish_max_attempts: Attempts per publish before giving up
            retry_min_wait_seconds: Minimum backoff between publish attempts
            retry_max_wait_seconds: Maximum backoff between publish attempts
        """
        if publish_max_attempts < 1:
            raise ValueError(f"publish_max_attempts must be >= 1, got {publish_max_attempts}")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._publish_max_attempts = publish_max_attempts
        self._retry_min_wait = retry_min_wait_seconds
        self._retry_max_wait = retry_max_wait_seconds

    async def query(
        self, filters: Sequence[RecordFilter], timeout_ms: Optional[int] = None
    ) -> List[RawRecord]:
        """
        Fetch records matching any of the filters from the network.

        Raises:
            RelayUnavailable: If the gateway is not reachable
            RelayAPIError: If the gateway rejects the query
        """
        url = f"{self._base_url}/records/query"
        payload = {"filters": [f.model_dump(exclude_none=True) for f in filters]}
        timeout = timeout_ms / 1000 if timeout_ms is not None else self._timeout

        data = await self._post(url, payload, timeout, expected=(200,))
        records = []
        for item in data.get("records") or []:
            try:
                records.append(RawRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Dropping malformed record from gateway: {e}")
        logger.debug(f"Gateway returned {len(records)} records for {len(filters)} filters")
        return records

    async def publish(self, draft: RecordDraft) -> RawRecord:
        """
        Sign and broadcast a draft through the gateway.

        Returns:
            The signed record as accepted by the gateway

        Raises:
            RelayUnavailable: If every attempt failed transiently
            RelayAPIError: If the gateway rejected the draft
        """
        url = f"{self._base_url}/records"
        payload = {"draft": draft.model_dump()}

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RelayUnavailable),
            stop=stop_after_attempt(self._publish_max_attempts),
            wait=wait_exponential(
                multiplier=1, min=self._retry_min_wait, max=self._retry_max_wait
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                data = await self._post(url, payload, self._timeout, expected=(200, 201))
                try:
                    record = RawRecord.model_validate(data["record"])
                except (KeyError, ValidationError) as e:
                    raise RelayAPIError(f"Relay gateway returned no valid record: {e}") from e
                logger.info(f"Published kind {record.kind} record {record.id}")
                return record

    async def _post(self, url: str, payload: dict, timeout: float, expected) -> dict:
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.ConnectError as e:
            logger.error(f"Relay gateway unavailable: {e}")
            raise RelayUnavailable(f"Relay gateway is not available at {self._base_url}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Relay gateway timeout: {e}")
            raise RelayUnavailable("Relay gateway request timed out") from e
        except httpx.TransportError as e:
            logger.error(f"Relay gateway transport error: {e}")
            raise RelayUnavailable(f"Relay gateway connection failed: {e}") from e

        if response.status_code in expected:
            try:
                data = response.json()
            except ValueError as e:
                logger.error(f"Relay gateway returned a non-JSON body: {response.text[:200]}")
                raise RelayAPIError("Relay gateway returned a non-JSON body", response.status_code) from e
            if not isinstance(data, dict):
                raise RelayAPIError(
                    f"Relay gateway returned {type(data).__name__}, expected an object",
                    response.status_code,
                )
            return data

        logger.error(f"Relay gateway error: {response.status_code} - {response.text}")
        if response.status_code >= 500:
            raise RelayUnavailable(f"Relay gateway error {response.status_code}: {response.text}")
        raise RelayAPIError(
            f"Relay gateway rejected request: {response.text}", response.status_code
        )
