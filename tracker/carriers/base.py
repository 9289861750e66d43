"""
Carrier adapter contract.
Each carrier fetches raw tracking content its own way behind the same interface.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional
import aiohttp
from loguru import logger

from tracker.config import TrackerConfig
from tracker.errors import TransportError
from tracker.extraction.fields import FieldLayout
from tracker.models import CarrierId, RawFetchResult


def new_session(
    config: TrackerConfig,
    connector: Optional[aiohttp.BaseConnector] = None,
) -> aiohttp.ClientSession:
    """
    Create a session for a single query.

    Cookies never persist in the session; stateful carriers forward them
    explicitly so nothing leaks between queries. A shared connector is only
    borrowed, never closed by the session.
    """
    return aiohttp.ClientSession(
        connector=connector,
        connector_owner=connector is None,
        cookie_jar=aiohttp.DummyCookieJar(),
        timeout=aiohttp.ClientTimeout(total=config.request_timeout),
    )


class CarrierAdapter(ABC):
    """Base class for carrier scrapers."""

    carrier_id: CarrierId
    display_name: str = ""
    protocol: str = ""  # short human description for the CLI

    # Footer / watermark text that must never become a timeline entry
    brand_name: str = ""

    # Lower-case phrases meaning "no such shipment"
    no_result_phrases: tuple[str, ...] = ()

    layout: FieldLayout = FieldLayout()

    def __init__(self, config: TrackerConfig):
        self.config = config

    def get_carrier_name(self) -> str:
        return self.carrier_id.value

    def base_headers(self, accept: str) -> dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": accept,
            "Accept-Language": self.config.accept_language,
        }

    async def fetch(
        self,
        tracking_number: str,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> RawFetchResult:
        """
        Fetch raw tracking content for a shipment.

        The whole exchange, every request of a multi-step carrier included,
        is bounded by the configured timeout.

        Raises:
            TransportError: on timeout, connection failure or unusable status
        """
        if session is None:
            async with new_session(self.config) as own_session:
                return await self._bounded_fetch(own_session, tracking_number)
        return await self._bounded_fetch(session, tracking_number)

    async def _bounded_fetch(self, session: aiohttp.ClientSession, tracking_number: str) -> RawFetchResult:
        name = self.display_name or self.get_carrier_name()
        try:
            return await asyncio.wait_for(
                self._fetch(session, tracking_number),
                timeout=self.config.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"{name} timed out after {self.config.request_timeout}s")
            raise TransportError.timeout(name, self.config.request_timeout)
        except aiohttp.ClientError as e:
            logger.warning(f"{name} connection error: {e}")
            raise TransportError.network(name, str(e)) from e

    @abstractmethod
    async def _fetch(self, session: aiohttp.ClientSession, tracking_number: str) -> RawFetchResult:
        """Perform the carrier-specific HTTP exchange."""
        pass
