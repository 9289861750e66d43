"""
Copetran tracking scraper.
Two-step form flow: open the tracking form for a session, then post the query.
"""

import aiohttp
from loguru import logger

from tracker.carriers.base import CarrierAdapter
from tracker.errors import TransportError
from tracker.extraction.fields import FieldLayout
from tracker.models import CarrierId, RawFetchResult


HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


class CopetranCarrier(CarrierAdapter):
    """
    Copetran "traking de remesas" page.

    The controller only answers posts that carry the session cookie issued
    by the form page and a Referer pointing back at that form.
    """

    carrier_id = CarrierId.COPETRAN
    display_name = "Copetran"
    protocol = "GET form (session cookies) + POST query, HTML"
    brand_name = "COPETRAN"

    # Longest first: the first match is the phrase reported.
    # "la remesa consultada" alone also heads successful result pages.
    no_result_phrases = (
        "la remesa consultada no existe",
        "remesa consultada no existe",
        "no se encontraron remesas",
        "no se encontraron",
        "no existe remesa",
        "no se encontro",
        "no hay registros",
        "sin resultados",
    )

    layout = FieldLayout()

    @property
    def form_url(self) -> str:
        return f"{self.config.copetran_base_url.rstrip('/')}/Forms/trakingRemesas.php"

    @property
    def controller_url(self) -> str:
        return f"{self.config.copetran_base_url.rstrip('/')}/controller/controlador.php"

    def build_form(self, tracking_number: str) -> dict[str, str]:
        return {
            "PR00": tracking_number,
            "Archivo": "Remesas",
            "Clase": "Remesas",
            "Funcion": "trakingRemesas",
            "PR20": "",
            "PR01": "true",
            "Boton": "Boton",
        }

    async def _fetch(self, session: aiohttp.ClientSession, tracking_number: str) -> RawFetchResult:
        headers = self.base_headers(HTML_ACCEPT)

        # Step 1: session cookies
        async with session.get(
            self.form_url,
            headers=headers,
            max_redirects=self.config.max_redirects,
        ) as resp:
            await resp.read()
            if resp.status >= 400:
                raise TransportError.upstream_status(self.display_name, resp.status)
            cookies = {name: morsel.value for name, morsel in resp.cookies.items()}

        logger.debug(f"Copetran session established ({len(cookies)} cookies)")

        # Step 2: the actual query
        post_headers = dict(headers)
        post_headers["Referer"] = self.form_url
        if cookies:
            post_headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())

        async with session.post(
            self.controller_url,
            data=self.build_form(tracking_number),
            headers=post_headers,
            max_redirects=self.config.max_redirects,
        ) as resp:
            content = await resp.read()
            if resp.status >= 400:
                raise TransportError.upstream_status(self.display_name, resp.status)

            logger.debug(f"Copetran answered {resp.status} with {len(content)} bytes")

            return RawFetchResult(
                content=content,
                http_status=resp.status,
                url=str(resp.url),
                content_type=resp.headers.get("Content-Type", ""),
                cookies=cookies,
            )
