import logging
from typing import List, Optional

from geofilter.clients.redis_client import RedisCommandExecutor
from geofilter.clients.write_dispatcher import WriteDispatcher
from geofilter.models.models import BoundingBox, DeleteResult, SweepSummary, UserRecord
from geofilter.utils.constants import DEFAULT_GEN_NUMBER
from geofilter.utils.record_codec import Options
from geofilter.workflows.expiry_sweeper import ExpirySweeper
from geofilter.workflows.load_generator import LoadGenerator
from geofilter.workflows.proximity_index import ProximityIndex
from geofilter.workflows.query_engine import QueryEngine

logger = logging.getLogger(__name__)


class Geofilter:
    """Public operations of the proximity index.

    `set` and `delete` return before their writes reach the store; reads see
    those writes once the user's dispatcher lane has run them.
    """

    def __init__(
        self,
        executor: RedisCommandExecutor,
        dispatcher: WriteDispatcher,
        proximity_index: ProximityIndex,
        query_engine: QueryEngine,
        expiry_sweeper: ExpirySweeper,
        load_generator: LoadGenerator,
    ):
        self.executor = executor
        self.dispatcher = dispatcher
        self.proximity_index = proximity_index
        self.query_engine = query_engine
        self.expiry_sweeper = expiry_sweeper
        self.load_generator = load_generator

    def bbox(self, cell_id: str) -> BoundingBox:
        return self.query_engine.bbox(cell_id)

    def bbox_3x3(self, cell_id: str) -> BoundingBox:
        return self.query_engine.bbox_3x3(cell_id)

    def neighbors(self, cell_id: str) -> List[str]:
        return self.query_engine.neighbors(cell_id)

    def neighbors_full(self, cell_id: str) -> List[UserRecord]:
        return self.query_engine.neighbors_full(cell_id)

    def set(
        self,
        user_id: str,
        lat: float,
        lon: float,
        precision: int,
        options: Optional[Options] = None,
    ) -> str:
        return self.proximity_index.upsert(user_id, lat, lon, precision, options)

    def get(self, user_id: str) -> Optional[UserRecord]:
        return self.proximity_index.get_record(user_id)

    def delete(self, user_id: str) -> DeleteResult:
        return self.proximity_index.remove(user_id)

    def cleanup_expired(self) -> SweepSummary:
        return self.expiry_sweeper.cleanup_expired()

    def generate(self, cell_id: str, count: int = DEFAULT_GEN_NUMBER) -> List[str]:
        return self.load_generator.generate(cell_id, count)

    def flushall(self):
        # queued writes would otherwise land after the flush
        self.dispatcher.flush()
        logger.info("Flushing all records")
        return self.executor.cmd("FLUSHALL")

    def wait_for_writes(self, timeout: Optional[float] = None) -> bool:
        return self.dispatcher.flush(timeout)
