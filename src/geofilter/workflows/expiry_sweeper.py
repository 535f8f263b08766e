import logging
from typing import Any, Callable, Dict, Optional

from geofilter.clients.redis_client import RedisCommandExecutor
from geofilter.errors import RecordDecodeError
from geofilter.models.models import DeleteResult, SweepSummary
from geofilter.utils.clock import now_ms
from geofilter.utils.constants import DEFAULT_EXPIRATION_MS, GEONUM_EXPIRE_KEY
from geofilter.workflows.proximity_index import ProximityIndex
from geofilter.workflows.workflow import Workflow

logger = logging.getLogger(__name__)


class ExpirySweeper(Workflow):
    """Evicts users whose last update is older than the expiration window.

    Entries are processed one by one with no transaction around the sweep. A
    sweep that dies halfway leaves the rest for the next run, and re-removing
    an already removed user is a no-op. Each listed user is checked again on
    its own lane, so one refreshed since the listing is kept.
    """

    def __init__(
        self,
        executor: RedisCommandExecutor,
        proximity_index: ProximityIndex,
        expiration_ms: int = DEFAULT_EXPIRATION_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.executor = executor
        self.proximity_index = proximity_index
        self.expiration_ms = expiration_ms
        self.clock = clock

    def cleanup_expired(self) -> SweepSummary:
        cutoff = self.clock() - self.expiration_ms
        expired = self.executor.cmd("ZRANGEBYSCORE", GEONUM_EXPIRE_KEY, "-inf", cutoff)
        removed = 0
        for user_id in expired:
            try:
                result = self.proximity_index.remove_expired(user_id, cutoff)
            except RecordDecodeError as e:
                logger.warning(f"Skipping expired user: {e}")
                continue
            if result is DeleteResult.FOUND:
                removed += 1
        if expired:
            logger.info(f"Expiry sweep: {removed} of {len(expired)} expired users removed")
        return SweepSummary(expired=len(expired), removed=removed)

    def run(self, input: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.cleanup_expired().model_dump()
