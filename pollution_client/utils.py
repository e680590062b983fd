# file: pollution_client/utils.py

from datetime import datetime
import pytz


def get_current_time() -> datetime:
    """Get the current UTC time as a timezone-aware datetime."""
    return datetime.now(pytz.utc)
