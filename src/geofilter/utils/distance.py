import math
from typing import TYPE_CHECKING

from geofilter.utils.constants import EARTH_RADIUS_KM

if TYPE_CHECKING:
    from geofilter.clients.geocodec import GeoCodec


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two points given in degrees."""
    rlat1, rlon1, rlat2, rlon2 = map(math.radians, (lat1, lon1, lat2, lon2))
    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    )
    # rounding can push a just outside [0, 1] near coincident or antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(a))


def distance_to_cell(lat: float, lon: float, cell_id: str, codec: "GeoCodec") -> float:
    """Distance from a point to the center of a cell, used as the membership score."""
    center = codec.decode(cell_id)
    return haversine(lat, lon, center.lat, center.lon)
