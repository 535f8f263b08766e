import logging
import zlib
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Iterator, List, Optional

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class WriteDispatcher:
    """Background execution of store mutations, one ordered lane per key.

    Every key hashes to one single-threaded lane, so work submitted for the
    same user id runs strictly in submission order and never overlaps. Work
    for different keys runs concurrently across lanes.

    Delivery is at-most-once and unacknowledged: the submitter is not told
    whether the work succeeded. Store failures are logged and dropped; the
    next write for that user or the next expiry sweep repairs the state.
    """

    def __init__(self, lanes: int = 4):
        if lanes < 1:
            raise ValueError("WriteDispatcher needs at least one lane")
        self._lanes: List[ThreadPoolExecutor] = [
            ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"geofilter-lane-{i}")
            for i in range(lanes)
        ]

    @property
    def lane_count(self) -> int:
        return len(self._lanes)

    def lane_for(self, key: str) -> int:
        return zlib.crc32(key.encode("utf-8")) % len(self._lanes)

    def submit(self, key: str, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._lanes[self.lane_for(key)].submit(fn, *args)
        future.add_done_callback(lambda f: _log_failure(key, f))
        return future

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until everything submitted so far has run. False on timeout."""
        markers = [lane.submit(_noop) for lane in self._lanes]
        _, not_done = wait(markers, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True):
        for lane in self._lanes:
            lane.shutdown(wait=wait)


def _noop():
    return None


def _log_failure(key: str, future: Future):
    if future.cancelled():
        return
    error = future.exception()
    if error is None:
        return
    if isinstance(error, RedisError):
        logger.warning(f"Dropped background write for {key!r}: {error}")
    else:
        logger.error(
            f"Background write for {key!r} failed",
            exc_info=(type(error), error, error.__traceback__),
        )


def init_write_dispatcher(lanes: int = 4) -> Iterator[WriteDispatcher]:
    dispatcher = WriteDispatcher(lanes=lanes)
    try:
        yield dispatcher
    finally:
        dispatcher.shutdown(wait=True)
