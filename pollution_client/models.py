# file: pollution_client/models.py

import logging
from datetime import datetime
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from pollution_client.utils import get_current_time

COMPONENT_FIELDS = ("co", "no", "no2", "o3", "so2", "pm2_5", "pm10", "nh3")


class ZipLocation(BaseModel):
    """Location returned by the OpenWeatherMap zip geocoding endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    zip: str = Field(..., description="Postal code as understood by OpenWeatherMap")
    name: str = Field(..., description="Canonical place name")
    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")
    country: str = Field(..., description="Country code")

    @property
    def coordinates(self) -> Tuple[float, float]:
        return self.lat, self.lon

    def __str__(self) -> str:
        return f"Zip-Code: {self.zip}, Country: {self.country}, City: {self.name}, Lat: {self.lat}, Lon: {self.lon}"


class Components(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    co: float = Field(..., ge=0, description="Carbon monoxide (µg/m³)")
    no: float = Field(..., ge=0, description="Nitrogen monoxide (µg/m³)")
    no2: float = Field(..., ge=0, description="Nitrogen dioxide (µg/m³)")
    o3: float = Field(..., ge=0, description="Ozone (µg/m³)")
    so2: float = Field(..., ge=0, description="Sulphur dioxide (µg/m³)")
    pm2_5: float = Field(..., ge=0, description="Fine particulate matter (µg/m³)")
    pm10: float = Field(..., ge=0, description="Coarse particulate matter (µg/m³)")
    nh3: float = Field(..., ge=0, description="Ammonia (µg/m³)")

    def __str__(self) -> str:
        return (f"Carbon Monoxide: {self.co} µg/m³, Nitrogen Monoxide: {self.no} µg/m³, "
                f"Nitrogen Dioxide: {self.no2} µg/m³, Ozone: {self.o3} µg/m³, "
                f"Sulphur Dioxide: {self.so2} µg/m³, Fine Particulate Matter: {self.pm2_5} µg/m³, "
                f"Coarse Particulate Matter: {self.pm10} µg/m³, Ammonia: {self.nh3} µg/m³")


class MainAqi(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    aqi: int = Field(..., description="Air Quality Index (1 good - 5 very poor)")


class PollEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    main: MainAqi
    components: Components


class PollutionReading(BaseModel):
    """Flat record written to InfluxDB once per successful poll."""

    model_config = ConfigDict(frozen=True)

    time: datetime = Field(..., description="Capture time (UTC), not the API timestamp")
    aqi: int
    co: float = Field(..., ge=0)
    no: float = Field(..., ge=0)
    no2: float = Field(..., ge=0)
    o3: float = Field(..., ge=0)
    so2: float = Field(..., ge=0)
    pm2_5: float = Field(..., ge=0)
    pm10: float = Field(..., ge=0)
    nh3: float = Field(..., ge=0)

    def components(self) -> dict:
        return {field: getattr(self, field) for field in COMPONENT_FIELDS}


class PollResponse(BaseModel):
    """Top level of the air pollution response. The API's own `dt` is ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    entries: List[PollEntry] = Field(..., alias="list", min_length=1)

    def unpack(self) -> PollutionReading:
        """Turn the first entry into a PollutionReading stamped with the capture time.

        The API normally sends one entry per location; any further entries are discarded.
        """
        current = self.entries[0]
        logging.info(f"Air Quality: {current.main.aqi}")
        logging.info(f"Component breakdown: {current.components}")
        return PollutionReading(time=get_current_time(), aqi=current.main.aqi,
                                **current.components.model_dump())
