from typing import List

from geofilter.clients.geocodec import GeoCodec
from geofilter.clients.redis_client import RedisCommandExecutor
from geofilter.models.models import BoundingBox, UserRecord
from geofilter.utils.constants import (
    NORTH_WEST_INDEX,
    SOUTH_EAST_INDEX,
    membership_key,
    user_key,
)
from geofilter.utils.record_codec import decode_record


class QueryEngine:
    """Read side of the index. Every call blocks until the store answers."""

    def __init__(self, executor: RedisCommandExecutor, codec: GeoCodec):
        self.executor = executor
        self.codec = codec

    def hashes_3x3(self, cell_id: str) -> List[str]:
        """The cell followed by its neighbors in codec order (N, S, E, W, NW, NE, SW, SE)."""
        return [cell_id] + self.codec.neighbors(cell_id)

    def bbox(self, cell_id: str) -> BoundingBox:
        return self.codec.decode_bbox(cell_id)

    def bbox_3x3(self, cell_id: str) -> BoundingBox:
        cells = self.hashes_3x3(cell_id)
        top_left = self.bbox(cells[NORTH_WEST_INDEX]).top_left
        bottom_right = self.bbox(cells[SOUTH_EAST_INDEX]).bottom_right
        return BoundingBox(top_left, bottom_right)

    def neighbors(self, cell_id: str) -> List[str]:
        """Members of the 3x3 block, nearest-first within each cell, cells in block order.

        Cells repeated by the codec near the poles are read once.
        """
        cells = list(dict.fromkeys(self.hashes_3x3(cell_id)))
        results = self.executor.pipeline(
            [("ZRANGE", membership_key(cell), 0, -1) for cell in cells]
        )
        return [user_id for members in results for user_id in members]

    def neighbors_full(self, cell_id: str) -> List[UserRecord]:
        user_ids = self.neighbors(cell_id)
        raws = self.executor.pipeline([("GET", user_key(user_id)) for user_id in user_ids])
        return [
            decode_record(user_id, raw)
            for user_id, raw in zip(user_ids, raws)
            if raw is not None
        ]
