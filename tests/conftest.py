"""Shared fixtures: configuration, sample carrier documents, and a fake carrier server."""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from tracker.config import TrackerConfig

from tests.samples import NOT_FOUND_HTML, REPORT_LINES, TRACKING_HTML, build_pdf


@pytest.fixture
def config():
    """Create test configuration."""
    return TrackerConfig(
        request_timeout=2.0,
        pool_limit=5,
        log_level="DEBUG",
    )


@pytest.fixture
def report_pdf():
    return build_pdf(REPORT_LINES)


class FakeCarriers:
    """Records what the fake carrier endpoints received."""

    def __init__(self):
        self.session_counter = 0
        self.posts: list[dict] = []
        self.report_requests: list[dict] = []
        self.copetran_body: bytes = TRACKING_HTML.encode("utf-8")
        self.report_body: bytes = b""


@pytest.fixture
async def carrier_server(report_pdf):
    """
    Local stand-in for both carrier sites.

    Transmoralar answers depend on the P_PEDIDO value:
    ``slow`` sleeps past the timeout, ``404``/``500`` answer with that
    status, ``moved`` redirects, ``short`` returns a tiny body and
    ``html`` returns the markup report. Anything else gets the PDF.
    """
    state = FakeCarriers()
    state.report_body = report_pdf

    async def copetran_form(request):
        state.session_counter += 1
        response = web.Response(text="<html><form>PR00</form></html>", content_type="text/html")
        response.set_cookie("PHPSESSID", f"session-{state.session_counter}")
        return response

    async def copetran_controller(request):
        form = await request.post()
        state.posts.append({
            "form": dict(form),
            "cookie": request.headers.get("Cookie", ""),
            "referer": request.headers.get("Referer", ""),
            "user_agent": request.headers.get("User-Agent", ""),
        })
        if form.get("PR00") == "error":
            return web.Response(status=503, text="maintenance")
        return web.Response(body=state.copetran_body, content_type="text/html")

    async def report(request):
        number = request.query.get("P_PEDIDO", "")
        state.report_requests.append(dict(request.query))

        if number == "slow":
            await asyncio.sleep(1.5)
        if number == "404":
            return web.Response(status=404, text="<html><body>" + "Pedido no registrado. " * 10 + "</body></html>")
        if number == "500":
            return web.Response(status=500, text="boom")
        if number == "moved":
            raise web.HTTPFound("/reporte?nombre=ENC010&P_PEDIDO=1234567890")
        if number == "short":
            return web.Response(body=b"x" * 40)
        if number == "html":
            return web.Response(body=TRACKING_HTML.encode("utf-8"), content_type="text/html")
        if number == "notfound":
            return web.Response(body=NOT_FOUND_HTML.encode("utf-8"), content_type="text/html")

        # PDF served with a misleading content type on purpose
        return web.Response(body=state.report_body, content_type="text/html")

    app = web.Application()
    app.router.add_get("/gestion_2/Forms/trakingRemesas.php", copetran_form)
    app.router.add_post("/gestion_2/controller/controlador.php", copetran_controller)
    app.router.add_get("/reporte", report)

    server = TestServer(app)
    await server.start_server()
    yield server, state
    await server.close()


@pytest.fixture
def server_config(carrier_server):
    """Configuration pointing both carriers at the fake server."""
    server, _ = carrier_server
    base = str(server.make_url("/")).rstrip("/")
    return TrackerConfig(
        request_timeout=0.5,
        pool_limit=5,
        copetran_base_url=f"{base}/gestion_2",
        transmoralar_base_url=base,
    )
