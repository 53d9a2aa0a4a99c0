"""
LOC Record Encoding

Converts a decimal-degree Position into the degrees/minutes/seconds field set
of a DNS LOC record (RFC 1876), and back.

Known limitation: seconds are rounded after the minutes have been floored, so
a value within half an arcsecond of the next minute encodes as 60 seconds.
The overflow is not carried into the minutes.
"""

import math
from typing import Tuple

from config import LOC_PRECISION_HORZ_CM, LOC_PRECISION_VERT_CM, LOC_SIZE_CM
from iss_loc.models import LOCFields, Position


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_sexagesimal(value: float) -> Tuple[int, int, int]:
    """Split an angle into (degrees, minutes, seconds), sign discarded."""
    magnitude = abs(value)
    degrees = math.floor(magnitude)
    minutes_decimal = (magnitude - degrees) * 60
    minutes = math.floor(minutes_decimal)
    seconds = _round_half_up((minutes_decimal - minutes) * 60)
    return int(degrees), int(minutes), seconds


def encode(position: Position) -> LOCFields:
    """
    Encode a position as LOC record fields.

    Args:
        position: Validated position (decimal degrees, altitude in km)

    Returns:
        LOCFields with non-negative degrees/minutes/seconds, hemisphere
        letters, altitude in whole meters and the fixed precision envelope
    """
    lat_degrees, lat_minutes, lat_seconds = _to_sexagesimal(position.latitude)
    long_degrees, long_minutes, long_seconds = _to_sexagesimal(position.longitude)

    return LOCFields(
        lat_degrees=lat_degrees,
        lat_minutes=lat_minutes,
        lat_seconds=lat_seconds,
        lat_direction="N" if position.latitude >= 0 else "S",
        long_degrees=long_degrees,
        long_minutes=long_minutes,
        long_seconds=long_seconds,
        long_direction="E" if position.longitude >= 0 else "W",
        altitude=_round_half_up(position.altitude * 1000),
        size=LOC_SIZE_CM,
        precision_horz=LOC_PRECISION_HORZ_CM,
        precision_vert=LOC_PRECISION_VERT_CM,
    )


def decode(fields: LOCFields) -> Tuple[float, float]:
    """Return the signed (latitude, longitude) in decimal degrees."""
    latitude = fields.lat_degrees + fields.lat_minutes / 60 + fields.lat_seconds / 3600
    longitude = fields.long_degrees + fields.long_minutes / 60 + fields.long_seconds / 3600
    if fields.lat_direction == "S":
        latitude = -latitude
    if fields.long_direction == "W":
        longitude = -longitude
    return latitude, longitude


def _centimetres(value: int) -> str:
    # 100 -> "1m", 10 -> "0.1m", 10000 -> "100m"
    return f"{value / 100:.2f}".rstrip("0").rstrip(".") + "m"


def to_presentation(fields: LOCFields) -> str:
    """
    Format LOC fields in master-file text form.

    Example: ``33 4 14 N 124 46 1 W 419493m 1m 100m 0.1m``
    """
    return (
        f"{fields.lat_degrees} {fields.lat_minutes} {fields.lat_seconds} {fields.lat_direction} "
        f"{fields.long_degrees} {fields.long_minutes} {fields.long_seconds} {fields.long_direction} "
        f"{fields.altitude}m "
        f"{_centimetres(fields.size)} {_centimetres(fields.precision_horz)} "
        f"{_centimetres(fields.precision_vert)}"
    )
