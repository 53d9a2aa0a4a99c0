"""
Position Sources

Fetch the current ISS position. Every call is a fresh network round trip;
nothing is cached and nothing is retried. A failed fetch is surfaced to the
caller immediately.
"""

from abc import ABC, abstractmethod
from typing import Optional

import pydantic
import requests

from config import CELESTRAK_API_BASE, HTTP_TIMEOUT, ISS_API_URL, ISS_NORAD_ID
from iss_loc.errors import UpstreamError, UpstreamHTTPError, ValidationError
from iss_loc.models import Position
from iss_loc.tle_propagation import TLEError, load_satellite, split_tle, subsatellite_point
from logging_config import get_logger

logger = get_logger(__name__)

INVALID_RESPONSE = "Invalid ISS API response"


class PositionSource(ABC):
    """Produces one validated Position per call."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = HTTP_TIMEOUT):
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @abstractmethod
    def fetch(self) -> Position: ...

    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"Failed to fetch ISS position: {e}") from e

        if not response.ok:
            raise UpstreamHTTPError(
                f"Failed to fetch ISS position: {response.status_code} {response.reason}",
                status_code=response.status_code,
                reason=response.reason,
            )
        return response


class WhereTheISSPositionSource(PositionSource):
    """Position from the wheretheiss.at telemetry API"""

    def __init__(self, url: str = ISS_API_URL, **kwargs):
        super().__init__(**kwargs)
        self.url = url

    def fetch(self) -> Position:
        response = self._get(self.url)

        try:
            payload = response.json()
        except ValueError as e:
            raise ValidationError(INVALID_RESPONSE) from e

        if not isinstance(payload, dict):
            raise ValidationError(INVALID_RESPONSE)

        try:
            position = Position.model_validate(payload)
        except pydantic.ValidationError as e:
            logger.debug("telemetry payload rejected", errors=e.errors(include_url=False))
            raise ValidationError(INVALID_RESPONSE) from e

        logger.info(
            "ISS position fetched",
            latitude=position.latitude,
            longitude=position.longitude,
            altitude=position.altitude,
        )
        return position


class TLEPositionSource(PositionSource):
    """
    Position propagated locally from the satellite's current TLE.

    The TLE is downloaded from CelesTrak on every call and propagated to the
    current time with SGP4.
    """

    def __init__(
        self,
        norad_id: int = ISS_NORAD_ID,
        celestrak_base: str = CELESTRAK_API_BASE,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.norad_id = norad_id
        self.url = f"{celestrak_base}/NORAD/elements/gp.php?CATNR={norad_id}&FORMAT=tle"

    def fetch(self) -> Position:
        response = self._get(self.url)

        try:
            name, line1, line2 = split_tle(response.text)
            satellite = load_satellite(line1, line2)
            latitude, longitude, altitude = subsatellite_point(satellite)
            position = Position(latitude=latitude, longitude=longitude, altitude=altitude)
        except (TLEError, pydantic.ValidationError) as e:
            logger.debug("TLE propagation failed", norad_id=self.norad_id, error=str(e))
            raise ValidationError(INVALID_RESPONSE) from e

        logger.info(
            "ISS position propagated",
            satellite=name or self.norad_id,
            latitude=position.latitude,
            longitude=position.longitude,
            altitude=position.altitude,
        )
        return position
