# file: pollution_client/openweather_api.py

import asyncio
import logging
import ssl

import aiohttp
import certifi
from pydantic import ValidationError

from pollution_client.errors import FetchError
from pollution_client.models import PollResponse

OPENWEATHER_URL = "http://api.openweathermap.org/data/2.5/air_pollution"
REQUEST_TIMEOUT = 30


def build_pollution_url(lat: float, lon: float, api_key: str) -> str:
    """Build the air pollution URL once; it is reused for every poll."""
    return f"{OPENWEATHER_URL}?lat={lat}&lon={lon}&appid={api_key}"


def create_session() -> aiohttp.ClientSession:
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    return aiohttp.ClientSession(connector=aiohttp.TCPConnector(ssl=ssl_context),
                                 timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT))


async def fetch_pollution(session: aiohttp.ClientSession, url: str) -> PollResponse:
    """Fetch current pollution for the configured location.

    Every failure is raised as FetchError: `status` is set for non-2xx answers,
    `kind` names the transport failure otherwise.
    """
    try:
        async with session.get(url) as response:
            if response.status >= 400:
                body = await response.read()
                text = body.decode("utf-8", errors="replace")
                raise FetchError(f"{response.reason} {text}".strip(), status=response.status)
            payload = await response.json(content_type=None)
    except aiohttp.ClientResponseError as e:
        raise FetchError(str(e.message), status=e.status) from e
    except asyncio.TimeoutError as e:
        raise FetchError("request timed out", kind="timeout") from e
    except aiohttp.ClientError as e:
        raise FetchError(str(e), kind=type(e).__name__) from e
    except ValueError as e:
        raise FetchError(f"malformed JSON: {e}", kind="decode") from e

    try:
        return PollResponse.model_validate(payload)
    except ValidationError as e:
        raise FetchError(f"unexpected response shape: {e}", kind="decode") from e
