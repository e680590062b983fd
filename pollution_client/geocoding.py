# file: pollution_client/geocoding.py

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from pollution_client.errors import LocationResolutionError
from pollution_client.models import ZipLocation

GEOCODING_URL = "http://api.openweathermap.org/geo/1.0/zip"
REQUEST_TIMEOUT = 30


def resolve_zip_location(zip_code: str, country: str, api_key: str,
                         session: Optional[requests.Session] = None) -> ZipLocation:
    """Resolve a postal code and country into coordinates with one geocoding call."""
    http = session or requests
    params = {"zip": f"{zip_code},{country}", "appid": api_key}
    try:
        response = http.get(GEOCODING_URL, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        location = ZipLocation.model_validate(response.json())
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise LocationResolutionError(f"Geocoding request for {zip_code},{country} failed: {e}", status=status) from e
    except requests.RequestException as e:
        raise LocationResolutionError(f"Geocoding request for {zip_code},{country} failed: {e}") from e
    except (ValueError, ValidationError) as e:
        raise LocationResolutionError(f"Geocoding response for {zip_code},{country} is malformed: {e}") from e

    logging.info(f"Location resolved: {location}")
    return location
