import math
from typing import List

import pygeohash as pgh

from geofilter.errors import CodecError
from geofilter.models.models import BoundingBox, LatLon
from geofilter.utils.constants import NEIGHBOR_ORDER

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
MAX_PRECISION = 12


class GeoCodec:
    """Geohash cells on top of pygeohash.

    A cell id is a geohash string and its precision is its length. The codec
    never does I/O; every failure is a CodecError raised to the caller.
    """

    def encode(self, lat: float, lon: float, precision: int) -> str:
        self._check_point(lat, lon)
        self._check_precision(precision)
        return pgh.encode(lat, lon, precision=precision)

    def decode(self, cell_id: str) -> LatLon:
        lat, lon, _, _ = self._decode_exactly(cell_id)
        return LatLon(lat, lon)

    def decode_bbox(self, cell_id: str) -> BoundingBox:
        lat, lon, lat_err, lon_err = self._decode_exactly(cell_id)
        return BoundingBox(
            top_left=LatLon(lat + lat_err, lon - lon_err),
            bottom_right=LatLon(lat - lat_err, lon + lon_err),
        )

    def neighbors(self, cell_id: str) -> List[str]:
        """The 8 adjacent cells, always ordered N, S, E, W, NW, NE, SW, SE.

        Longitude wraps at the antimeridian. Latitude is clamped at the poles,
        so a polar cell reports itself as its own out-of-range neighbors.
        """
        lat, lon, lat_err, lon_err = self._decode_exactly(cell_id)
        precision = len(cell_id)
        result = []
        for direction in NEIGHBOR_ORDER:
            dlat, dlon = direction.value
            n_lat = min(90.0, max(-90.0, lat + dlat * 2 * lat_err))
            n_lon = wrap_lon(lon + dlon * 2 * lon_err)
            result.append(pgh.encode(n_lat, n_lon, precision=precision))
        return result

    def precision(self, cell_id: str) -> int:
        self._check_cell(cell_id)
        return len(cell_id)

    def _decode_exactly(self, cell_id: str):
        self._check_cell(cell_id)
        lat, lon, lat_err, lon_err = pgh.decode_exactly(cell_id)
        return float(lat), float(lon), float(lat_err), float(lon_err)

    @staticmethod
    def _check_point(lat: float, lon: float):
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise CodecError(f"Coordinates must be finite, got ({lat}, {lon})")
        if not -90.0 <= lat <= 90.0:
            raise CodecError(f"Latitude out of range: {lat}")
        if not -180.0 <= lon <= 180.0:
            raise CodecError(f"Longitude out of range: {lon}")

    @staticmethod
    def _check_precision(precision: int):
        if isinstance(precision, bool) or not isinstance(precision, int):
            raise CodecError(f"Precision must be an integer, got {precision!r}")
        if not 1 <= precision <= MAX_PRECISION:
            raise CodecError(f"Precision must be in 1..{MAX_PRECISION}, got {precision}")

    @staticmethod
    def _check_cell(cell_id: str):
        if not isinstance(cell_id, str) or not cell_id:
            raise CodecError(f"Cell id must be a non-empty string, got {cell_id!r}")
        if len(cell_id) > MAX_PRECISION or any(c not in BASE32 for c in cell_id):
            raise CodecError(f"Invalid cell id: {cell_id!r}")


def wrap_lon(lon: float) -> float:
    if -180.0 <= lon < 180.0:
        return lon
    return (lon + 180.0) % 360.0 - 180.0
