"""Shared fixtures for the pollution client test suite."""

import copy

import pytest

from pollution_client.config import Config
from pollution_client.models import ZipLocation

POLLUTION_PAYLOAD = {
    "coord": {"lon": -118.4065, "lat": 34.0901},
    "list": [
        {
            "main": {"aqi": 2},
            "components": {
                "co": 201.94,
                "no": 0.01,
                "no2": 0.77,
                "o3": 68.66,
                "so2": 0.64,
                "pm2_5": 0.5,
                "pm10": 0.54,
                "nh3": 0.12,
            },
            "dt": 1606147200,
        }
    ],
}

GEOCODING_PAYLOAD = {"zip": "90210", "name": "Beverly Hills", "lat": 34.0901, "lon": -118.4065, "country": "US"}


@pytest.fixture()
def pollution_payload():
    return copy.deepcopy(POLLUTION_PAYLOAD)


@pytest.fixture()
def zip_location():
    return ZipLocation(**GEOCODING_PAYLOAD)


@pytest.fixture()
def config(zip_location):
    return Config(api_key="test_key", location=zip_location, poll_interval=3600, max_retry=3)


@pytest.fixture()
def geocoding_payload():
    return dict(GEOCODING_PAYLOAD)
