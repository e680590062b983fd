# file: pollution_client/config.py

import math
import os
import logging
import tomllib
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from pollution_client.errors import ConfigError
from pollution_client.geocoding import resolve_zip_location
from pollution_client.models import ZipLocation

load_dotenv()

DEFAULT_POLL_INTERVAL = 3600
DEFAULT_MAX_RETRY = 3
DEFAULT_COUNTRY = "US"
DEFAULT_DB_NAME = "test"
DEFAULT_DB_PORT = "8086"
DEFAULT_DB_SERVER = f"http://localhost:{DEFAULT_DB_PORT}"
DEFAULT_DB_ORG = "-"

CONFIG_FILE_ENV = "FILE_POLL_CONFIG"
API_KEY = "OPENWEATHER_API_KEY"
POLL_ZIP = "OPENWEATHER_POLL_ZIP"
POLL_COUNTRY = "OPENWEATHER_POLL_COUNTRY"
POLL_TIMING = "OPENWEATHER_POLL_TIMING"
MAX_RETRY = "OPENWEATHER_MAX_RETRY"
DB_NAME = "OPENWEATHER_INFLUXDB_NAME"
DB_SERVER = "OPENWEATHER_INFLUXDB_SERVER"
DB_USER = "OPENWEATHER_INFLUXDB_DBUSER"
DB_PASS = "OPENWEATHER_INFLUXDB_DBPASS"
DB_TOKEN = "OPENWEATHER_INFLUXDB_TOKEN"
DB_ORG = "OPENWEATHER_INFLUXDB_ORG"
LOG_LEVEL = "OPENWEATHER_LOG_LEVEL"

Resolver = Callable[[str, str, str], ZipLocation]


def normalize_db_server(server: str) -> str:
    """Ensure the InfluxDB URL carries a scheme and a port.

    "localhost" -> "http://localhost:8086", "localhost:9000" -> "http://localhost:9000",
    "https://host:9000" is kept as is.
    """
    server = server.strip()
    if not (server.startswith("http://") or server.startswith("https://")):
        server = f"http://{server}"
    if server.count(":") < 2:
        server = f"{server}:{DEFAULT_DB_PORT}"
    return server


def check_credential_pair(user: Optional[str], password: Optional[str]) -> None:
    if user is not None and password is None:
        raise ConfigError("InfluxDB user set but password is not.")
    if user is None and password is not None:
        raise ConfigError("InfluxDB password set but user is not.")


class Config(BaseModel):
    """Runtime configuration, built once at startup and never mutated."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    location: Optional[ZipLocation] = None
    poll_interval: int = Field(DEFAULT_POLL_INTERVAL, gt=0, description="Seconds between successful polls")
    max_retry: int = Field(DEFAULT_MAX_RETRY, ge=0, description="Consecutive fetch failures tolerated")
    db_server: str = DEFAULT_DB_SERVER
    db_name: str = DEFAULT_DB_NAME
    db_user: Optional[str] = None
    db_pass: Optional[str] = None
    db_token: Optional[str] = None
    db_org: str = Field(DEFAULT_DB_ORG, description="Organization for token auth against InfluxDB 2.x")

    @field_validator("db_server")
    @classmethod
    def _normalize_server(cls, value: str) -> str:
        return normalize_db_server(value)

    @model_validator(mode="after")
    def _credentials_complete(self) -> "Config":
        check_credential_pair(self.db_user, self.db_pass)
        return self


def build_config(values: Dict[str, Any]) -> Config:
    """Construct a Config, turning pydantic validation failures into ConfigError."""
    try:
        return Config(**{key: value for key, value in values.items() if value is not None})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _as_int(name: str, value: Any, default: int) -> int:
    """Parse an integer setting, falling back to the default when it is not a number."""
    if value is None or value == "":
        return default
    if isinstance(value, float) and not value.is_integer():
        logging.warning(f"{name}={value!r} is not a whole number, using default {default}")
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logging.warning(f"{name}={value!r} is not an integer, using default {default}")
        return default


def _from_mapping(source: Mapping[str, Any], resolver: Resolver) -> Config:
    api_key = _clean(source.get(API_KEY))
    zip_code = _clean(source.get(POLL_ZIP))
    country = _clean(source.get(POLL_COUNTRY)) or DEFAULT_COUNTRY

    location = None
    if zip_code is not None:
        if api_key is None:
            logging.warning(f"{POLL_ZIP} set but {API_KEY} is not, skipping location lookup")
        else:
            location = resolver(zip_code, country, api_key)

    return build_config({
        "api_key": api_key,
        "location": location,
        "poll_interval": _as_int(POLL_TIMING, source.get(POLL_TIMING), DEFAULT_POLL_INTERVAL),
        "max_retry": _as_int(MAX_RETRY, source.get(MAX_RETRY), DEFAULT_MAX_RETRY),
        "db_server": _clean(source.get(DB_SERVER)),
        "db_name": _clean(source.get(DB_NAME)),
        "db_user": _clean(source.get(DB_USER)),
        "db_pass": _clean(source.get(DB_PASS)),
        "db_token": _clean(source.get(DB_TOKEN)),
        "db_org": _clean(source.get(DB_ORG)),
    })


def config_from_env(environ: Optional[Mapping[str, str]] = None,
                    resolver: Resolver = resolve_zip_location) -> Config:
    """Build the configuration from OPENWEATHER_* environment variables."""
    return _from_mapping(os.environ if environ is None else environ, resolver)


def config_from_file(path: str, resolver: Resolver = resolve_zip_location) -> Config:
    """Build the configuration from a TOML file using the same keys as the environment."""
    try:
        with open(path, "rb") as f:
            contents = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read configuration file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Error processing configuration file {path}. Message: {e}") from e
    logging.info(f"Configuration loaded from {path}")
    return _from_mapping(contents, resolver)


def load_config(resolver: Resolver = resolve_zip_location) -> Config:
    """Use the TOML file named by FILE_POLL_CONFIG if set, otherwise the environment."""
    config_file = os.getenv(CONFIG_FILE_ENV)
    if config_file:
        return config_from_file(config_file, resolver)
    return config_from_env(resolver=resolver)


def validate_for_polling(config: Config) -> Tuple[float, float]:
    """Check that polling can start and return the (lat, lon) to poll."""
    if config.api_key is None:
        raise ConfigError("API key not set. Unable to proceed.")
    if config.location is None:
        raise ConfigError("Location not set. Unable to proceed.")

    lat, lon = config.location.coordinates
    if not math.isfinite(lat) or not -90 <= lat <= 90:
        raise ConfigError(f"Latitude looks malformed. {lat} given.")
    if not math.isfinite(lon) or not -180 <= lon <= 180:
        raise ConfigError(f"Longitude looks malformed. {lon} given.")
    return lat, lon
