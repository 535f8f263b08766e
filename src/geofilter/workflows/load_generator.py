import logging
import random
from typing import Any, Dict, List, Optional

from geofilter.clients.geocodec import GeoCodec, wrap_lon
from geofilter.models.models import GenerateInput, GenerateOutput
from geofilter.utils.constants import DEFAULT_GEN_NUMBER, GEN_ID_UPPER_BOUND, GeneratedUser
from geofilter.workflows.proximity_index import ProximityIndex
from geofilter.workflows.query_engine import QueryEngine
from geofilter.workflows.workflow import Workflow

logger = logging.getLogger(__name__)


class LoadGenerator(Workflow):
    """Fills the 3x3 block around a cell with synthetic users. Dev and load-test only."""

    def __init__(
        self,
        proximity_index: ProximityIndex,
        query_engine: QueryEngine,
        codec: GeoCodec,
        rng: Optional[random.Random] = None,
    ):
        self.proximity_index = proximity_index
        self.query_engine = query_engine
        self.codec = codec
        self.rng = rng or random.Random()

    def generate(self, cell_id: str, count: int = DEFAULT_GEN_NUMBER) -> List[str]:
        box = self.query_engine.bbox_3x3(cell_id)
        max_lat, min_lon = box.top_left
        min_lat, max_lon = box.bottom_right
        precision = self.codec.precision(cell_id)
        if max_lon < min_lon:
            # block crosses the antimeridian
            max_lon += 360.0

        user_ids: List[str] = []
        taken = set()
        for _ in range(count):
            lat = self.rng.random() * (max_lat - min_lat) + min_lat
            lon = wrap_lon(self.rng.random() * (max_lon - min_lon) + min_lon)
            user_id = self._fresh_id(taken)
            cell = self.codec.encode(lat, lon, precision)
            self.proximity_index.upsert_cell(
                user_id, cell, lat, lon, self._placeholder_fields(user_id, lat, lon)
            )
            user_ids.append(user_id)
        logger.info(f"Generated {len(user_ids)} users around {cell_id}")
        return user_ids

    def _fresh_id(self, taken: set) -> str:
        while True:
            user_id = f"{GeneratedUser.ID_PREFIX.value}{self.rng.randint(1, GEN_ID_UPPER_BOUND)}"
            if user_id not in taken:
                taken.add(user_id)
                return user_id

    @staticmethod
    def _placeholder_fields(user_id: str, lat: float, lon: float) -> Dict[str, Any]:
        return {
            "id": user_id,
            "lat": lat,
            "lon": lon,
            "first_name": user_id,
            "last_name": GeneratedUser.LAST_NAME.value,
        }

    def run(self, input: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = GenerateInput(**(input or {}))
        user_ids = self.generate(payload.cell_id, payload.count)
        return GenerateOutput(cell_id=payload.cell_id, user_ids=user_ids).model_dump()
