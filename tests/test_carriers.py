"""Tests for carrier adapters against a local fake carrier server."""

import pytest

from tracker.carriers import (
    CopetranCarrier,
    TransmoralarCarrier,
    get_carrier,
    new_session,
    resolve_carrier_id,
)
from tracker.config import TrackerConfig
from tracker.errors import TransportError, TransportErrorKind, UnknownCarrierError
from tracker.models import CarrierId


class TestRegistry:
    """Tests for carrier lookup."""

    def test_lookup_by_id(self, config):
        assert isinstance(get_carrier(CarrierId.COPETRAN, config), CopetranCarrier)
        assert isinstance(get_carrier("Transmoralar", config), TransmoralarCarrier)

    def test_unknown_carrier(self, config):
        with pytest.raises(UnknownCarrierError) as exc_info:
            resolve_carrier_id("servientrega")

        assert "copetran" in exc_info.value.available

    def test_every_carrier_has_no_result_phrases(self, config):
        for carrier_id in CarrierId:
            carrier = get_carrier(carrier_id, config)
            assert carrier.no_result_phrases
            assert all(phrase == phrase.lower() for phrase in carrier.no_result_phrases)
            assert carrier.brand_name


class TestCopetran:
    """Tests for the two-step Copetran flow."""

    @pytest.mark.asyncio
    async def test_session_then_post(self, carrier_server, server_config):
        _, state = carrier_server
        carrier = CopetranCarrier(server_config)

        raw = await carrier.fetch("800123")

        assert raw.http_status == 200
        assert b"DIGITADA" in raw.content
        assert raw.cookies == {"PHPSESSID": "session-1"}

        post = state.posts[0]
        assert post["form"] == {
            "PR00": "800123",
            "Archivo": "Remesas",
            "Clase": "Remesas",
            "Funcion": "trakingRemesas",
            "PR20": "",
            "PR01": "true",
            "Boton": "Boton",
        }
        assert post["cookie"] == "PHPSESSID=session-1"
        assert post["referer"].endswith("/Forms/trakingRemesas.php")
        assert post["user_agent"] == server_config.user_agent

    @pytest.mark.asyncio
    async def test_cookies_do_not_leak_between_queries(self, carrier_server, server_config):
        _, state = carrier_server
        carrier = CopetranCarrier(server_config)

        async with new_session(server_config) as session:
            await carrier.fetch("1", session)
            await carrier.fetch("2", session)

        assert [p["cookie"] for p in state.posts] == [
            "PHPSESSID=session-1",
            "PHPSESSID=session-2",
        ]

    @pytest.mark.asyncio
    async def test_upstream_error_status(self, carrier_server, server_config):
        carrier = CopetranCarrier(server_config)

        with pytest.raises(TransportError) as exc_info:
            await carrier.fetch("error")

        assert exc_info.value.kind == TransportErrorKind.UPSTREAM_STATUS
        assert exc_info.value.status_code == 503


class TestTransmoralar:
    """Tests for the parameterized Transmoralar GET."""

    @pytest.mark.asyncio
    async def test_report_query(self, carrier_server, server_config, report_pdf):
        _, state = carrier_server
        carrier = TransmoralarCarrier(server_config)

        raw = await carrier.fetch("1234567890")

        assert raw.content == report_pdf
        assert raw.content_type.startswith("text/html")
        assert state.report_requests == [{"nombre": "ENC010", "P_PEDIDO": "1234567890"}]

    @pytest.mark.asyncio
    async def test_client_errors_are_not_transport_failures(self, carrier_server, server_config):
        carrier = TransmoralarCarrier(server_config)

        raw = await carrier.fetch("404")

        assert raw.http_status == 404
        assert b"Pedido no registrado" in raw.content

    @pytest.mark.asyncio
    async def test_server_error(self, carrier_server, server_config):
        carrier = TransmoralarCarrier(server_config)

        with pytest.raises(TransportError) as exc_info:
            await carrier.fetch("500")

        assert exc_info.value.kind == TransportErrorKind.UPSTREAM_STATUS
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_redirect_followed(self, carrier_server, server_config, report_pdf):
        _, state = carrier_server
        carrier = TransmoralarCarrier(server_config)

        raw = await carrier.fetch("moved")

        assert raw.content == report_pdf
        assert raw.url.endswith("P_PEDIDO=1234567890")
        assert len(state.report_requests) == 2

    @pytest.mark.asyncio
    async def test_redirect_limit(self, carrier_server, server_config):
        server_config.max_redirects = 1
        carrier = TransmoralarCarrier(server_config)

        with pytest.raises(TransportError) as exc_info:
            await carrier.fetch("moved")

        assert exc_info.value.kind == TransportErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_timeout(self, carrier_server, server_config):
        carrier = TransmoralarCarrier(server_config)

        with pytest.raises(TransportError) as exc_info:
            await carrier.fetch("slow")

        assert exc_info.value.kind == TransportErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        config = TrackerConfig(transmoralar_base_url="http://127.0.0.1:1", request_timeout=2.0)
        carrier = TransmoralarCarrier(config)

        with pytest.raises(TransportError) as exc_info:
            await carrier.fetch("1")

        assert exc_info.value.kind == TransportErrorKind.NETWORK
