"""
Tracking Service.
Runs tracking queries end to end: fetch, extract, and return a typed result.
"""

import asyncio
from typing import Optional, Union
import aiohttp
from loguru import logger

from tracker.carriers import get_carrier, new_session, resolve_carrier_id
from tracker.config import TrackerConfig, get_config
from tracker.errors import (
    ExtractionError,
    NoDataError,
    NotFoundError,
    TrackerError,
    TransportError,
    TransportErrorKind,
)
from tracker.extraction.pipeline import run_pipeline
from tracker.logging_config import QueryLogger
from tracker.models import (
    CarrierId,
    FailureKind,
    TrackingFailure,
    TrackingQuery,
    TrackingResult,
    TrackingSuccess,
)


TRANSPORT_FAILURES = {
    TransportErrorKind.TIMEOUT: FailureKind.TIMEOUT,
    TransportErrorKind.NETWORK: FailureKind.NETWORK,
    TransportErrorKind.UPSTREAM_STATUS: FailureKind.UPSTREAM_STATUS,
}


def failure_from_error(query: TrackingQuery, error: TrackerError) -> TrackingFailure:
    """Map a pipeline exception onto the failure payload callers see."""
    status_code = None

    if isinstance(error, TransportError):
        kind = TRANSPORT_FAILURES[error.kind]
        status_code = error.status_code
    elif isinstance(error, NotFoundError):
        kind = FailureKind.NOT_FOUND
    elif isinstance(error, NoDataError):
        kind = FailureKind.NO_DATA
    elif isinstance(error, ExtractionError):
        kind = FailureKind.EXTRACTION_ERROR
    else:
        raise error

    return TrackingFailure(
        kind=kind,
        message=error.message,
        tracking_number=query.tracking_number,
        carrier_id=query.carrier_id,
        status_code=status_code,
    )


class TrackingService:
    """
    Runs tracking lookups against carrier sites.

    Queries share nothing but an optional outbound connection pool; every
    query gets its own session and its own cookies. There are no retries.

    Usage:
        async with TrackingService(config) as service:
            result = await service.track("transmoralar", "1234567890")
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or get_config()
        self._connector: Optional[aiohttp.TCPConnector] = None

    async def __aenter__(self) -> "TrackingService":
        if self.config.pool_limit > 0:
            self._connector = aiohttp.TCPConnector(limit=self.config.pool_limit)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Release the shared connection pool."""
        if self._connector is not None:
            await self._connector.close()
            self._connector = None

    async def track(self, carrier_id: Union[CarrierId, str], tracking_number: str) -> TrackingResult:
        """
        Track one shipment.

        Args:
            carrier_id: Carrier to ask
            tracking_number: Carrier tracking number, used as given (trimmed)

        Returns:
            TrackingSuccess or TrackingFailure

        Raises:
            UnknownCarrierError: carrier_id is not supported
        """
        query = TrackingQuery(
            carrier_id=resolve_carrier_id(carrier_id),
            tracking_number=tracking_number,
        )
        carrier = get_carrier(query.carrier_id, self.config)
        log = QueryLogger(carrier.get_carrier_name(), query.tracking_number)

        log.info("Consulting carrier")

        try:
            async with new_session(self.config, self._connector) as session:
                raw = await carrier.fetch(query.tracking_number, session)

            log.debug(f"Fetched {len(raw.content)} bytes (HTTP {raw.http_status})")

            output = run_pipeline(
                raw.content,
                carrier,
                query.tracking_number,
                min_content_bytes=self.config.min_content_bytes,
                min_text_length=self.config.min_text_length,
            )
        except TrackerError as e:
            failure = failure_from_error(query, e)
            log.warning(f"Tracking failed ({failure.kind}): {e}")
            return failure

        log.info(f"Status: {output.record.current_status}")

        return TrackingSuccess(
            carrier_id=query.carrier_id,
            record=output.record,
            raw_text=output.text.plain_text,
            source_kind=output.text.source_kind,
            source_url=raw.url,
        )

    async def track_batch(
        self,
        queries: list[tuple[Union[CarrierId, str], str]],  # (carrier, number)
    ) -> list[TrackingResult]:
        """
        Track several shipments concurrently.

        Results come back in the same order as the queries.
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        logger.info(f"Tracking {len(queries)} shipments ({self.config.max_concurrency} at a time)")

        async def bounded(carrier_id, number):
            async with semaphore:
                return await self.track(carrier_id, number)

        return list(await asyncio.gather(*(bounded(c, n) for c, n in queries)))


async def track(
    carrier_id: Union[CarrierId, str],
    tracking_number: str,
    config: Optional[TrackerConfig] = None,
) -> TrackingResult:
    """One-shot lookup with a throwaway service."""
    async with TrackingService(config) as service:
        return await service.track(carrier_id, tracking_number)
