"""Tests for the zip code geocoding lookup."""

from unittest.mock import MagicMock

import pytest
import requests

from pollution_client.errors import LocationResolutionError
from pollution_client.geocoding import GEOCODING_URL, resolve_zip_location


def _session(payload=None, status_error=None, get_error=None):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status = MagicMock(side_effect=status_error)
    session = MagicMock()
    if get_error is not None:
        session.get.side_effect = get_error
    else:
        session.get.return_value = response
    return session


class TestResolveZipLocation:
    def test_happy_path(self, geocoding_payload):
        session = _session(geocoding_payload)
        location = resolve_zip_location("90210", "US", "key", session=session)

        session.get.assert_called_once_with(GEOCODING_URL, params={"zip": "90210,US", "appid": "key"}, timeout=30)
        assert location.name == "Beverly Hills"
        assert location.coordinates == (34.0901, -118.4065)

    def test_status_error_carries_code(self):
        not_found = MagicMock(status_code=404)
        session = _session(status_error=requests.HTTPError("404 Not Found", response=not_found))
        with pytest.raises(LocationResolutionError) as exc_info:
            resolve_zip_location("00000", "US", "key", session=session)
        assert exc_info.value.status == 404

    def test_transport_error(self):
        session = _session(get_error=requests.ConnectionError("refused"))
        with pytest.raises(LocationResolutionError) as exc_info:
            resolve_zip_location("90210", "US", "key", session=session)
        assert exc_info.value.status is None

    def test_malformed_body(self):
        session = _session({"cod": "404", "message": "not found"})
        with pytest.raises(LocationResolutionError, match="malformed"):
            resolve_zip_location("90210", "US", "key", session=session)

    def test_invalid_json(self):
        session = _session()
        session.get.return_value.json.side_effect = ValueError("no json")
        with pytest.raises(LocationResolutionError):
            resolve_zip_location("90210", "US", "key", session=session)
