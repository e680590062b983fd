# file: pollution_client/scheduler.py

import asyncio
import enum
import logging
from typing import Awaitable, Callable, NoReturn, Optional

from pollution_client.config import Config, validate_for_polling
from pollution_client.database import build_client, open_write_api, write_to_db
from pollution_client.errors import FetchError, RetryBudgetExhausted
from pollution_client.models import PollResponse, PollutionReading
from pollution_client.openweather_api import build_pollution_url, create_session, fetch_pollution

Fetcher = Callable[[str], Awaitable[PollResponse]]
Writer = Callable[[PollutionReading], str]
Sleeper = Callable[[float], Awaitable[None]]


class PollState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    WRITE_SUCCESS = "write_success"
    FETCH_FAILURE = "fetch_failure"
    SLEEPING = "sleeping"
    TERMINATED = "terminated"


def sleep_after_success(interval: int) -> int:
    return interval


def sleep_after_failure(interval: int) -> int:
    """Retry at half the interval while the API keeps failing (3601 -> 1800)."""
    return interval // 2


class PollLoop:
    """Fetch, write and sleep forever until the failure budget runs out.

    A fetch failure is counted and retried after half the interval. A write
    failure is not caught here and ends the loop.
    """

    def __init__(self, config: Config, fetch: Fetcher, write: Writer, sleep: Optional[Sleeper] = None) -> None:
        self.config = config
        self.fetch = fetch
        self.write = write
        self.sleep = sleep or asyncio.sleep
        self.error_count = 0
        self.state = PollState.IDLE

    def _terminate(self) -> NoReturn:
        self.state = PollState.TERMINATED
        logging.warning(f"Max errors reached! {self.error_count} consecutive failures, limit {self.config.max_retry}.")
        raise RetryBudgetExhausted("Max errors reached! Terminating loop and script.")

    async def run_once(self, url: str) -> int:
        """Run one fetch/write cycle and return how long to sleep before the next one."""
        self.state = PollState.FETCHING
        try:
            response = await self.fetch(url)
        except FetchError as e:
            self.error_count += 1
            self.state = PollState.FETCH_FAILURE
            logging.warning(f"Error encountered while grabbing stats ({self.error_count}/{self.config.max_retry}). {e.describe()}")
            if self.error_count >= self.config.max_retry:
                self._terminate()
            return sleep_after_failure(self.config.poll_interval)

        reading = response.unpack()
        result = self.write(reading)
        self.state = PollState.WRITE_SUCCESS
        logging.info(f"Successfully written to DB {self.config.db_name}: {result}")
        self.error_count = 0
        return sleep_after_success(self.config.poll_interval)

    async def run(self) -> None:
        lat, lon = validate_for_polling(self.config)
        logging.info(f"Location added: {self.config.location.name} ({lat}, {lon})")
        url = build_pollution_url(lat, lon, self.config.api_key)

        while True:
            if self.error_count >= self.config.max_retry:
                self._terminate()
            delay = await self.run_once(url)
            self.state = PollState.SLEEPING
            logging.debug(f"Sleeping {delay}s before the next poll")
            await self.sleep(delay)


async def run_polling(config: Config, session_factory: Optional[Callable] = None) -> None:
    """Wire the HTTP session and InfluxDB client into a PollLoop and run it."""
    # fail before opening any connection
    validate_for_polling(config)
    logging.info(f"InfluxDB server set to: {config.db_server}")
    logging.info(f"InfluxDB name set to {config.db_name}")

    client = build_client(config)
    write_api = open_write_api(client)
    location = config.location.name

    def write(reading: PollutionReading) -> str:
        return write_to_db(write_api, config.db_name, reading, location)

    try:
        async with (session_factory or create_session)() as session:
            async def fetch(url: str) -> PollResponse:
                return await fetch_pollution(session, url)

            await PollLoop(config, fetch, write).run()
    finally:
        write_api.close()
        client.close()
