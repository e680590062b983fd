# file: pollution_client/database.py

import logging
from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS, WriteApi

from pollution_client.config import Config, check_credential_pair
from pollution_client.errors import SinkWriteError
from pollution_client.models import COMPONENT_FIELDS, PollutionReading

MEASUREMENT = "pollution"
V1_ORG = "-"


def build_client(config: Config) -> InfluxDBClient:
    """Create the InfluxDB client from the configuration.

    A user/password pair uses the 1.x compatibility token ("user:pass"), otherwise
    a 2.x token (with the configured org) is used when present, otherwise the client is unauthenticated.
    """
    check_credential_pair(config.db_user, config.db_pass)

    if config.db_user is not None:
        logging.info(f"InfluxDB user added: {config.db_user}")
        return InfluxDBClient(url = config.db_server, token = f"{config.db_user}:{config.db_pass}", org = V1_ORG)
    if config.db_token is not None:
        logging.info("InfluxDB token authentication added")
        return InfluxDBClient(url = config.db_server, token = config.db_token, org = config.db_org)

    logging.info("InfluxDBv1 authentication not added due to blank USER/PASS configuration.")
    return InfluxDBClient(url = config.db_server, org = V1_ORG)


def open_write_api(client: InfluxDBClient) -> WriteApi:
    """Writes are synchronous so a failed write surfaces in the poll cycle that caused it."""
    return client.write_api(write_options = SYNCHRONOUS)


def reading_to_point(reading: PollutionReading, location: str) -> Point:
    point = Point(MEASUREMENT).tag("location", location).time(reading.time)
    point.field("aqi", int(reading.aqi))
    for field in COMPONENT_FIELDS:
        point.field(field, float(getattr(reading, field)))
    return point


def write_to_db(write_api: WriteApi, bucket: str, reading: PollutionReading, location: str) -> str:
    """Write one reading and return the line protocol record the sink accepted."""
    point = reading_to_point(reading, location)
    try:
        write_api.write(bucket = bucket, record = point)
    except Exception as e:
        logging.error(f"Error saving pollution data to InfluxDB: {e}")
        raise SinkWriteError(f"Write to InfluxDB database {bucket} failed: {e}") from e
    return point.to_line_protocol()
