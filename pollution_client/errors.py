# file: pollution_client/errors.py

from typing import Optional


class PollutionClientError(Exception):
    """Base class for failures that terminate or interrupt polling."""

    error_code = "POLLUTION_CLIENT_ERROR"
    exit_code = 1


class ConfigError(PollutionClientError):
    """Raised for missing, malformed or contradictory configuration."""

    error_code = "CONFIG_ERROR"
    exit_code = 2


class LocationResolutionError(PollutionClientError):
    """Raised when the postal code cannot be turned into coordinates."""

    error_code = "LOCATION_ERROR"
    exit_code = 3

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class FetchError(PollutionClientError):
    """A single failed pollution request. Counted against the failure budget."""

    error_code = "FETCH_ERROR"

    def __init__(self, message: str, status: Optional[int] = None, kind: str = "status") -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.kind = kind

    def describe(self) -> str:
        if self.status is not None:
            return f"Status: {self.status}, Text: {self.message}"
        return f"Kind: {self.kind}, Message: {self.message or 'N/A'}"


class RetryBudgetExhausted(PollutionClientError):
    error_code = "MAX_ERRORS"
    exit_code = 4


class SinkWriteError(PollutionClientError):
    """Raised when InfluxDB rejects or fails a write. Never retried."""

    error_code = "SINK_ERROR"
    exit_code = 5
