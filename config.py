"""
ISS LOC Sync Configuration and Constants

This module contains the runtime configuration read from the environment and
the fixed constants used throughout the project.

Constants:
    LOC record policy values. Size and precisions are not measured; they mark
    the record as a point location with coarse stated precision (RFC 1876
    expresses them in centimetres).

    WGS-84 ellipsoid constants used when the position is
    computed locally from a TLE.

Environment:
    ZONE_ID, RECORD_NAME and CLOUDFLARE_DNS_API_TOKEN are required. Everything
    else has a default suitable for tracking the ISS once a minute.

References:
    Davis, C., Vixie, P., Goodwin, T., & Dickinson, I. (1996).
    A Means for Expressing Location Information in the Domain Name System.
    RFC 1876.
"""

import os
from dataclasses import dataclass
from typing import Optional

from iss_loc.errors import ConfigurationError

# API endpoints
ISS_API_URL: str = "https://api.wheretheiss.at/v1/satellites/25544"
CLOUDFLARE_API_BASE: str = "https://api.cloudflare.com/client/v4"
CELESTRAK_API_BASE: str = "https://celestrak.org"

ISS_NORAD_ID: int = 25544

# DNS record policy
DNS_TTL: int = 120  # 2x UPDATE_INTERVAL
UPDATE_INTERVAL: int = 60  # seconds
HTTP_TIMEOUT: float = 30.0  # seconds

LOC_SIZE_CM: int = 100
LOC_PRECISION_HORZ_CM: int = 10000
LOC_PRECISION_VERT_CM: int = 10

# WGS-84 ellipsoid
WGS84_A_KM: float = 6378.137  # equatorial radius (km)
WGS84_F: float = 1.0 / 298.257223563  # flattening

POSITION_SOURCES = ("wheretheiss", "tle")

# Order matters: the first missing one is reported
REQUIRED_VARIABLES = ("ZONE_ID", "RECORD_NAME", "CLOUDFLARE_DNS_API_TOKEN")


def _parse(env, name, convert, default):
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return convert(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from None


@dataclass
class SyncConfig:
    """Settings for one sync process, usually built with ``from_env``."""

    zone_id: Optional[str] = None
    record_name: Optional[str] = None
    api_token: Optional[str] = None

    iss_api_url: str = ISS_API_URL
    cloudflare_api_base: str = CLOUDFLARE_API_BASE
    celestrak_api_base: str = CELESTRAK_API_BASE
    position_source: str = "wheretheiss"
    norad_id: int = ISS_NORAD_ID

    update_interval: int = UPDATE_INTERVAL
    http_timeout: float = HTTP_TIMEOUT
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls, environ=None) -> "SyncConfig":
        """
        Build a config from environment variables.

        Parameters
        ----------
        environ : mapping, optional
            Variables to read. Defaults to ``os.environ``.

        Returns
        -------
        SyncConfig
            Config with defaults for every unset optional variable. Required
            variables are left as ``None`` when unset; call ``validate``.
        """
        env = os.environ if environ is None else environ
        return cls(
            zone_id=env.get("ZONE_ID") or None,
            record_name=env.get("RECORD_NAME") or None,
            api_token=env.get("CLOUDFLARE_DNS_API_TOKEN") or None,
            iss_api_url=env.get("ISS_API_URL", ISS_API_URL),
            cloudflare_api_base=env.get("CLOUDFLARE_API_BASE", CLOUDFLARE_API_BASE).rstrip("/"),
            celestrak_api_base=env.get("CELESTRAK_API_BASE", CELESTRAK_API_BASE).rstrip("/"),
            position_source=env.get("POSITION_SOURCE", "wheretheiss").lower(),
            norad_id=_parse(env, "NORAD_ID", int, ISS_NORAD_ID),
            update_interval=_parse(env, "UPDATE_INTERVAL", int, UPDATE_INTERVAL),
            http_timeout=_parse(env, "HTTP_TIMEOUT", float, HTTP_TIMEOUT),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_format=env.get("LOG_FORMAT", "console").lower(),
        )

    def validate(self) -> None:
        """Raise ConfigurationError for the first missing or invalid setting."""
        values = {
            "ZONE_ID": self.zone_id,
            "RECORD_NAME": self.record_name,
            "CLOUDFLARE_DNS_API_TOKEN": self.api_token,
        }
        for name in REQUIRED_VARIABLES:
            if not values[name]:
                raise ConfigurationError(f"Missing required environment variable: {name}")

        if self.position_source not in POSITION_SOURCES:
            raise ConfigurationError(
                f"Unknown POSITION_SOURCE {self.position_source!r}, "
                f"expected one of {', '.join(POSITION_SOURCES)}"
            )
        if self.update_interval <= 0:
            raise ConfigurationError("UPDATE_INTERVAL must be a positive number of seconds")
