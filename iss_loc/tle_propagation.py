"""
TLE Propagation

Computes the sub-satellite point from a Two-Line Element set with the SGP4
model, for use as a local position source.

The sgp4 library returns TEME coordinates. These are rotated into ECEF
through Greenwich apparent sidereal time and then converted to WGS-84
geodetic latitude, longitude and altitude.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple

import numpy as np
from sgp4.api import Satrec, jday

from config import WGS84_A_KM, WGS84_F

# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}


class TLEError(ValueError):
    """The TLE text cannot be parsed or propagated."""


def split_tle(text: str) -> Tuple[str, str, str]:
    """
    Extract (name, line1, line2) from a TLE document.

    Accepts both the three-line form (name line first) and the bare two-line
    form; only the first element set is used.
    """
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    for index, line in enumerate(lines):
        if line.startswith("1 ") and index + 1 < len(lines) and lines[index + 1].startswith("2 "):
            name = lines[index - 1] if index > 0 else ""
            return name, line, lines[index + 1]
    raise TLEError("no two-line element set found")


def load_satellite(line1: str, line2: str) -> Satrec:
    try:
        return Satrec.twoline2rv(line1, line2)
    except Exception as e:
        raise TLEError(f"Failed to load satellite: {e}") from e


def teme_to_ecef(r_teme: np.ndarray, jd: float, fr: float) -> np.ndarray:
    """
    Rotate a TEME position vector into ECEF.

    Args:
        r_teme: Position vector in TEME coordinates [x, y, z] (km)
        jd: Julian day (integer-and-a-half part)
        fr: Fraction of day

    Returns:
        Position vector in ECEF coordinates (km)
    """
    # Julian centuries from J2000
    T = (jd - 2451545.0 + fr) / 36525.0

    gmst_sec = (
        67310.54841 +
        (876600.0 * 3600.0 + 8640184.812866) * T +
        0.093104 * T * T -
        6.2e-6 * T * T * T
    )
    gmst_rad = (gmst_sec % 86400.0) * (2.0 * math.pi / 86400.0)

    # Equation of equinoxes
    omega = 125.04452 - 1934.136261 * T
    delta_psi = -0.000319 * math.sin(math.radians(omega))
    gast = gmst_rad + delta_psi * math.cos(math.radians(23.4393))

    cos_gast = math.cos(gast)
    sin_gast = math.sin(gast)
    rotation = np.array([
        [cos_gast, sin_gast, 0.0],
        [-sin_gast, cos_gast, 0.0],
        [0.0, 0.0, 1.0],
    ])
    return rotation @ np.asarray(r_teme, dtype=float)


def ecef_to_geodetic(r_ecef: np.ndarray) -> Tuple[float, float, float]:
    """
    ECEF to WGS-84 geodetic coordinates.

    Uses Bowring's closed-form latitude from the parametric latitude; for
    points below a few thousand kilometres of altitude the error is far below
    the one-arcsecond resolution of a LOC record.

    Returns:
        Tuple of (latitude_deg, longitude_deg, altitude_km)
    """
    b = WGS84_A_KM * (1.0 - WGS84_F)
    e2 = WGS84_F * (2.0 - WGS84_F)
    x, y, z = (float(c) for c in r_ecef)
    p = math.hypot(x, y)
    lon = math.degrees(math.atan2(y, x))

    if p < 1e-10:
        return math.copysign(90.0, z), lon, abs(z) - b

    u = math.atan2(z * WGS84_A_KM, p * b)
    lat = math.atan2(
        z + e2 / (1.0 - e2) * b * math.sin(u) ** 3,
        p - e2 * WGS84_A_KM * math.cos(u) ** 3,
    )

    # Height along the ellipsoid normal, valid at any latitude
    sin_lat = math.sin(lat)
    N = WGS84_A_KM / math.sqrt(1.0 - e2 * sin_lat * sin_lat)
    alt = p * math.cos(lat) + z * sin_lat - WGS84_A_KM * WGS84_A_KM / N

    return math.degrees(lat), lon, alt


def subsatellite_point(
    satellite: Satrec, when: Optional[datetime] = None
) -> Tuple[float, float, float]:
    """
    Propagate a satellite and return its geodetic position.

    Args:
        satellite: Loaded Satrec
        when: Target time, timezone-aware (default: now, UTC)

    Returns:
        Tuple of (latitude_deg, longitude_deg, altitude_km), longitude
        normalised to [-180, 180]

    Raises:
        TLEError: SGP4 reported an error for this time
    """
    if when is None:
        when = datetime.now(timezone.utc)
    when = when.astimezone(timezone.utc)

    jd, fr = jday(
        when.year, when.month, when.day,
        when.hour, when.minute, when.second + when.microsecond / 1e6,
    )
    error, r_teme, _ = satellite.sgp4(jd, fr)
    if error != 0:
        raise TLEError(f"SGP4 error {error}: {SGP4_ERROR_CODES.get(error, 'Unknown error')}")

    lat, lon, alt = ecef_to_geodetic(teme_to_ecef(np.array(r_teme), jd, fr))
    lon = (lon + 180.0) % 360.0 - 180.0
    return lat, lon, alt
