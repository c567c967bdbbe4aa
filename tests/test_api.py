"""
Tests for the Distance Matrix API client
"""

import asyncio

import aiohttp
import pytest

from custom_components.google_traffic.api import (
    GoogleTrafficApi,
    MissingOriginError,
    NoDestinationsError,
    TransportError,
    UpstreamStatusError,
)
from custom_components.google_traffic.const import (
    API_URL,
    STATUS_API_ERROR,
    STATUS_MISSING_ORIGIN,
    STATUS_NO_DESTINATIONS,
    STATUS_TRANSPORT_ERROR,
    USER_AGENT,
)

from conftest import make_element, make_response, mock_session

ORIGIN = (52.52, 13.405)


class TestBuildParams:
    """Test query parameter construction"""

    def test_params(self):
        api = GoogleTrafficApi(mock_session(), "secret", language="de", units="metric")

        params = api.build_params(ORIGIN, ["Paris", "48.85,2.35"], now=1700000000.5)

        assert params == {
            "departure_time": "1700000000",
            "origins": "52.52,13.405",
            "destinations": "Paris|48.85,2.35",
            "language": "de",
            "units": "metric",
            "key": "secret",
            "traffic_model": "best_guess",
            "avoid": "ferries",
        }

    def test_headers(self):
        api = GoogleTrafficApi(mock_session(), "secret")

        assert api.headers == {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }


class TestFetch:
    """Test the HTTP round trip and its failure modes"""

    @pytest.mark.asyncio
    async def test_success(self):
        data = make_response(make_element(600, 720))
        session = mock_session(data)
        api = GoogleTrafficApi(session, "secret", units="imperial")

        result = await api.fetch(ORIGIN, ["Paris"])

        assert result == data
        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args == (API_URL,)
        assert kwargs["ssl"] is False
        assert kwargs["params"]["destinations"] == "Paris"
        assert kwargs["params"]["units"] == "imperial"
        assert kwargs["headers"]["User-Agent"] == USER_AGENT

    @pytest.mark.asyncio
    async def test_empty_destinations(self):
        """No request is issued without destinations"""
        session = mock_session()
        api = GoogleTrafficApi(session, "secret")

        with pytest.raises(NoDestinationsError) as exc:
            await api.fetch(ORIGIN, [])

        assert exc.value.status_code == STATUS_NO_DESTINATIONS
        session.get.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("origin", [None, (0, 13.4), (52.5, 0), ("", "")])
    async def test_missing_origin(self, origin):
        session = mock_session()
        api = GoogleTrafficApi(session, "secret")

        with pytest.raises(MissingOriginError) as exc:
            await api.fetch(origin, ["Paris"])

        assert exc.value.status_code == STATUS_MISSING_ORIGIN
        session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_error(self):
        api = GoogleTrafficApi(mock_session({}, status=500), "secret")

        with pytest.raises(TransportError) as exc:
            await api.fetch(ORIGIN, ["Paris"])

        assert exc.value.status_code == STATUS_TRANSPORT_ERROR

    @pytest.mark.asyncio
    async def test_upstream_status(self):
        api = GoogleTrafficApi(mock_session({"status": "REQUEST_DENIED"}), "secret")

        with pytest.raises(UpstreamStatusError) as exc:
            await api.fetch(ORIGIN, ["Paris"])

        assert exc.value.status == "REQUEST_DENIED"
        assert exc.value.status_code == STATUS_API_ERROR

    @pytest.mark.asyncio
    async def test_timeout(self):
        session = mock_session()
        session.get.side_effect = asyncio.TimeoutError()
        api = GoogleTrafficApi(session, "secret")

        with pytest.raises(TransportError):
            await api.fetch(ORIGIN, ["Paris"])

    @pytest.mark.asyncio
    async def test_client_error(self):
        session = mock_session()
        session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
        api = GoogleTrafficApi(session, "secret")

        with pytest.raises(TransportError, match="connection refused"):
            await api.fetch(ORIGIN, ["Paris"])

    @pytest.mark.asyncio
    async def test_non_dict_body(self):
        api = GoogleTrafficApi(mock_session(["unexpected"]), "secret")

        with pytest.raises(TransportError):
            await api.fetch(ORIGIN, ["Paris"])
