"""
Transmoralar tracking scraper.
A single parameterized GET returns the ENC010 shipment report, normally as a PDF.
"""

import aiohttp
from loguru import logger

from tracker.carriers.base import CarrierAdapter
from tracker.errors import TransportError
from tracker.extraction.fields import FieldLayout
from tracker.models import CarrierId, RawFetchResult


class TransmoralarCarrier(CarrierAdapter):
    """
    Transmoralar report endpoint.

    4xx answers are not transport failures here: the report server uses
    them for some "no data" pages, so the body is handed to extraction
    together with the status.
    """

    carrier_id = CarrierId.TRANSMORALAR
    display_name = "Transmoralar"
    protocol = "GET report (ENC010), PDF or HTML"
    brand_name = "TRANSMORALAR"

    REPORT_NAME = "ENC010"

    no_result_phrases = (
        "no se encontraron",
        "no existe remesa",
        "no existe el pedido",
        "no se encontro",
        "no hay registros",
        "sin resultados",
    )

    # The report prints the sender block first, then the receiver block,
    # each with its own "Nombre" and "Dirección" lines.
    layout = FieldLayout(
        origin="Origen",
        destination="Destino",
        unit="Unidad",
        name="Nombre",
        address="Direcci[oó]n",
    )

    @property
    def report_url(self) -> str:
        return f"{self.config.transmoralar_base_url.rstrip('/')}/reporte"

    async def _fetch(self, session: aiohttp.ClientSession, tracking_number: str) -> RawFetchResult:
        params = {"nombre": self.REPORT_NAME, "P_PEDIDO": tracking_number}

        async with session.get(
            self.report_url,
            params=params,
            headers=self.base_headers("application/pdf,text/html,*/*"),
            allow_redirects=True,
            max_redirects=self.config.max_redirects,
        ) as resp:
            content = await resp.read()

            if not 200 <= resp.status < 500:
                raise TransportError.upstream_status(self.display_name, resp.status)

            logger.debug(f"Transmoralar answered {resp.status} with {len(content)} bytes")

            return RawFetchResult(
                content=content,
                http_status=resp.status,
                url=str(resp.url),
                content_type=resp.headers.get("Content-Type", ""),
            )
