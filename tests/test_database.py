"""Tests for the InfluxDB writer."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import pytz

from pollution_client.config import Config
from pollution_client.database import build_client, reading_to_point, write_to_db
from pollution_client.errors import ConfigError, SinkWriteError
from pollution_client.models import PollResponse

CAPTURE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=pytz.utc)


@pytest.fixture()
def reading(pollution_payload, monkeypatch):
    monkeypatch.setattr("pollution_client.models.get_current_time", lambda: CAPTURE_TIME)
    return PollResponse.model_validate(pollution_payload).unpack()


class TestBuildClient:
    def test_user_password_uses_v1_token(self):
        config = Config(db_server="influx", db_user="admin", db_pass="secret")
        with patch("pollution_client.database.InfluxDBClient") as client_cls:
            build_client(config)
        client_cls.assert_called_once_with(url="http://influx:8086", token="admin:secret", org="-")

    def test_token(self):
        config = Config(db_token="tok")
        with patch("pollution_client.database.InfluxDBClient") as client_cls:
            build_client(config)
        client_cls.assert_called_once_with(url="http://localhost:8086", token="tok", org="-")

    def test_token_with_org(self):
        config = Config(db_token="tok", db_org="home")
        with patch("pollution_client.database.InfluxDBClient") as client_cls:
            build_client(config)
        client_cls.assert_called_once_with(url="http://localhost:8086", token="tok", org="home")

    def test_password_wins_over_token(self):
        config = Config(db_user="admin", db_pass="secret", db_token="tok")
        with patch("pollution_client.database.InfluxDBClient") as client_cls:
            build_client(config)
        assert client_cls.call_args.kwargs["token"] == "admin:secret"

    def test_no_auth(self):
        with patch("pollution_client.database.InfluxDBClient") as client_cls:
            build_client(Config())
        client_cls.assert_called_once_with(url="http://localhost:8086", org="-")

    @pytest.mark.parametrize("values", [{"db_user": "admin"}, {"db_pass": "secret"}])
    def test_half_credentials_fail_fast(self, values):
        # model_construct skips validation, so only build_client can catch this
        config = Config.model_construct(**values)
        with patch("pollution_client.database.InfluxDBClient") as client_cls:
            with pytest.raises(ConfigError):
                build_client(config)
        client_cls.assert_not_called()


class TestReadingToPoint:
    def test_all_values_survive(self, reading):
        line = reading_to_point(reading, "Boston").to_line_protocol()

        assert line.startswith("pollution,location=Boston ")
        assert "aqi=2i" in line
        for field, value in reading.components().items():
            assert f"{field}={value}" in line
        assert line.endswith(str(int(CAPTURE_TIME.timestamp()) * 10 ** 9))

    def test_location_escaped(self, reading):
        line = reading_to_point(reading, "Beverly Hills").to_line_protocol()
        assert line.startswith("pollution,location=Beverly\\ Hills ")


class TestWriteToDb:
    def test_single_write(self, reading):
        write_api = MagicMock()
        ack = write_to_db(write_api, "test", reading, "Boston")

        write_api.write.assert_called_once()
        kwargs = write_api.write.call_args.kwargs
        assert kwargs["bucket"] == "test"
        assert kwargs["record"].to_line_protocol() == ack

    def test_error_propagates(self, reading):
        write_api = MagicMock()
        write_api.write.side_effect = RuntimeError("connection refused")
        with pytest.raises(SinkWriteError, match="connection refused"):
            write_to_db(write_api, "test", reading, "Boston")
