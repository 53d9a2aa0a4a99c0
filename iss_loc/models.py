"""
Data models for the ISS LOC sync.

Position is produced fresh on every run, LOCFields is derived from it, and
DNSRecord mirrors the provider-owned record. None of them outlive a run.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Position(BaseModel):
    """Sub-satellite point: decimal degrees and altitude in kilometers"""

    model_config = ConfigDict(frozen=True, extra="ignore", allow_inf_nan=False)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    altitude: float

    @field_validator("latitude", "longitude", "altitude", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        # JSON numbers only; bool is an int subclass and strings would coerce
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        return value


class LOCFields(BaseModel):
    """
    Sexagesimal field set of a LOC record, in the shape the DNS provider
    expects as the record's ``data`` payload.

    Degrees, minutes and seconds are never negative; the hemisphere is
    carried by the direction letters. Size and precisions are centimetres.
    """

    model_config = ConfigDict(frozen=True)

    lat_degrees: int = Field(ge=0, le=90)
    lat_minutes: int = Field(ge=0, le=59)
    lat_seconds: int = Field(ge=0, le=60)
    lat_direction: Literal["N", "S"]
    long_degrees: int = Field(ge=0, le=180)
    long_minutes: int = Field(ge=0, le=59)
    long_seconds: int = Field(ge=0, le=60)
    long_direction: Literal["E", "W"]
    altitude: int
    size: int
    precision_horz: int
    precision_vert: int


class DNSRecord(BaseModel):
    """A DNS record as returned by the provider"""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    name: str
    content: Optional[str] = None
    ttl: Optional[int] = None
    data: Optional[Dict[str, Any]] = None


class SyncResult(BaseModel):
    """Outcome of one successful run"""

    id: str
    created: bool
