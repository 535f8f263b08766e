import math
from enum import Enum
from typing import Any, Dict, List, NamedTuple

from pydantic import BaseModel, Field, JsonValue, StrictStr, field_validator

from geofilter.utils.constants import DEFAULT_GEN_NUMBER, GEONUM_FIELD


class LatLon(NamedTuple):
    lat: float
    lon: float


class BoundingBox(NamedTuple):
    top_left: LatLon
    bottom_right: LatLon

    def contains(self, point: LatLon) -> bool:
        if not self.bottom_right.lat <= point.lat <= self.top_left.lat:
            return False
        west, east = self.top_left.lon, self.bottom_right.lon
        if west <= east:
            return west <= point.lon <= east
        # wraps across the antimeridian
        return point.lon >= west or point.lon <= east


class DeleteResult(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


def _check_finite(value: Any) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("option values must be finite numbers")
    if isinstance(value, list):
        for item in value:
            _check_finite(item)
    elif isinstance(value, dict):
        for item in value.values():
            _check_finite(item)


class UserRecord(BaseModel):
    """Stored under geonum_user:<id>: the user's options plus its current cell.

    Option values are a tagged union of string, integer, float, boolean, null,
    list and string-keyed mapping, so a record survives encode/decode with
    every value keeping its type and every mapping keeping its key order.
    """

    geonum: StrictStr
    options: Dict[str, JsonValue] = Field(default_factory=dict)

    @field_validator("options")
    @classmethod
    def _finite_values(cls, options: Dict[str, JsonValue]) -> Dict[str, JsonValue]:
        _check_finite(options)
        return options

    def as_mapping(self) -> Dict[str, Any]:
        return {GEONUM_FIELD: self.geonum, **self.options}


class SweepSummary(BaseModel):
    expired: int
    removed: int


class GenerateInput(BaseModel):
    cell_id: str
    count: int = Field(default=DEFAULT_GEN_NUMBER, ge=0)


class GenerateOutput(BaseModel):
    cell_id: str
    user_ids: List[str]
