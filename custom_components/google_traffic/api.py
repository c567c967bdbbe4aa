"""Client for the Google Distance Matrix API."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
import time
from typing import Optional

import aiohttp
import async_timeout

from .const import (
    API_PARAMS,
    API_TIMEOUT,
    API_URL,
    STATUS_API_ERROR,
    STATUS_MISSING_ORIGIN,
    STATUS_NO_DESTINATIONS,
    STATUS_TRANSPORT_ERROR,
    USER_AGENT,
)

_LOGGER = logging.getLogger(__name__)


class GoogleTrafficError(Exception):
    """Base error for a failed traffic query."""

    status_code = STATUS_TRANSPORT_ERROR


class TransportError(GoogleTrafficError):
    """The HTTP request failed or did not return 200."""

    status_code = STATUS_TRANSPORT_ERROR


class UpstreamStatusError(GoogleTrafficError):
    """The API answered with a status other than OK."""

    status_code = STATUS_API_ERROR

    def __init__(self, status: str) -> None:
        super().__init__(f"Google Traffic API status: {status}")
        self.status = status


class MissingOriginError(GoogleTrafficError):
    """No usable origin coordinates."""

    status_code = STATUS_MISSING_ORIGIN


class NoDestinationsError(GoogleTrafficError):
    """No destinations to query."""

    status_code = STATUS_NO_DESTINATIONS


class GoogleTrafficApi:
    """Query travel times with traffic for a batch of destinations."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        language: str = "en",
        units: str = "metric",
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.language = language
        self.units = units

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    def build_params(
        self,
        origin: tuple[float, float],
        destinations: Sequence[str],
        now: Optional[float] = None,
    ) -> dict[str, str]:
        """Build the query parameters for one batched request."""
        latitude, longitude = origin
        params = dict(API_PARAMS)
        params["departure_time"] = str(int(time.time() if now is None else now))
        params["origins"] = f"{latitude},{longitude}"
        params["destinations"] = "|".join(destinations)
        params["language"] = self.language
        params["units"] = self.units
        params["key"] = self.api_key
        return params

    async def fetch(
        self,
        origin: Optional[tuple[float, float]],
        destinations: Sequence[str],
    ) -> dict:
        """Fetch the distance matrix for all destinations.

        Raises a GoogleTrafficError subclass on every failure; nothing is
        requested when the origin or the destination list is missing.
        """
        if not destinations:
            raise NoDestinationsError("No destinations configured")

        if not origin or not all(origin):
            raise MissingOriginError("Origin coordinates are missing")

        params = self.build_params(origin, destinations)
        _LOGGER.debug(f"请求路况：起点={params['origins']}, 目的地数量={len(destinations)}")

        try:
            async with async_timeout.timeout(API_TIMEOUT):
                # TLS verification is disabled on purpose
                async with self.session.get(
                    API_URL, params=params, headers=self.headers, ssl=False
                ) as response:
                    if response.status != 200:
                        raise TransportError(f"HTTP status {response.status}")
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError as err:
            raise TransportError("Request timed out") from err
        except aiohttp.ClientError as err:
            raise TransportError(str(err)) from err
        except ValueError as err:
            raise TransportError(f"Invalid JSON: {err}") from err

        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response type: {type(data).__name__}")

        status = data.get("status")
        if status != "OK":
            raise UpstreamStatusError(str(status))

        return data
