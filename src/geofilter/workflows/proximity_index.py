import logging
from concurrent.futures import Future
from typing import Callable, List, Optional

from geofilter.clients.geocodec import GeoCodec
from geofilter.clients.redis_client import Command, RedisCommandExecutor
from geofilter.clients.write_dispatcher import WriteDispatcher
from geofilter.errors import RecordDecodeError
from geofilter.models.models import DeleteResult, UserRecord
from geofilter.utils.clock import now_ms
from geofilter.utils.constants import GEONUM_EXPIRE_KEY, membership_key, user_key
from geofilter.utils.distance import distance_to_cell
from geofilter.utils.record_codec import Options, build_record, decode_record, encode_record

logger = logging.getLogger(__name__)


class ProximityIndex:
    """Owns the three views of a user: its record, its cell membership and its expiry entry.

    All mutations for a user id run on that id's dispatcher lane, one after the
    other, so a user is a member of exactly one cell once its writes have
    landed, even when callers race on the same id. Writes are fire-and-forget:
    the caller is never told whether they reached the store.

    Calls from inside a dispatcher lane must not use `remove` or
    `remove_expired`, which wait on the lane they would be queued behind.
    """

    def __init__(
        self,
        executor: RedisCommandExecutor,
        dispatcher: WriteDispatcher,
        codec: GeoCodec,
        clock: Callable[[], int] = now_ms,
    ):
        self.executor = executor
        self.dispatcher = dispatcher
        self.codec = codec
        self.clock = clock

    def upsert(
        self,
        user_id: str,
        lat: float,
        lon: float,
        precision: int,
        options: Optional[Options] = None,
    ) -> str:
        cell_id = self.codec.encode(lat, lon, precision)
        self.upsert_cell(user_id, cell_id, lat, lon, options)
        return cell_id

    def upsert_cell(
        self,
        user_id: str,
        cell_id: str,
        lat: float,
        lon: float,
        options: Optional[Options] = None,
    ) -> Future:
        """Index a user in an already-encoded cell. The returned future is for tests and flushing."""
        record = build_record(cell_id, options)
        score = distance_to_cell(lat, lon, cell_id, self.codec)
        return self.dispatcher.submit(
            user_id, self._write_user, user_id, record, score, self.clock()
        )

    def remove(self, user_id: str) -> DeleteResult:
        """Blocks for the record lookup only; the deletes run in the background."""
        lookup: Future = Future()
        self.dispatcher.submit(user_id, self._remove_user, user_id, lookup)
        return lookup.result()

    def remove_expired(self, user_id: str, cutoff: int) -> DeleteResult:
        """Remove the user only if its expiry entry is still at or before `cutoff`.

        The expiry score is read on the user's lane, after any write queued
        before this call, so a user refreshed since the sweep listed it is kept
        and reported NOT_FOUND. An expiry entry with no record is dropped.
        """
        lookup: Future = Future()
        self.dispatcher.submit(user_id, self._remove_expired_user, user_id, cutoff, lookup)
        return lookup.result()

    def get_record(self, user_id: str) -> Optional[UserRecord]:
        raw = self.executor.cmd("GET", user_key(user_id))
        if raw is None:
            return None
        return decode_record(user_id, raw)

    def _write_user(self, user_id: str, record: UserRecord, score: float, timestamp: int):
        commands: List[Command] = []
        previous = self._previous_cell(user_id)
        if previous is not None and previous != record.geonum:
            commands.append(("ZREM", membership_key(previous), user_id))
        commands.extend(
            [
                ("SET", user_key(user_id), encode_record(record)),
                ("ZADD", membership_key(record.geonum), score, user_id),
                ("ZADD", GEONUM_EXPIRE_KEY, timestamp, user_id),
            ]
        )
        self.executor.pipeline(commands)
        logger.debug(f"Indexed {user_id} in {record.geonum} ({score:.3f} km from center)")

    def _previous_cell(self, user_id: str) -> Optional[str]:
        try:
            previous = self.get_record(user_id)
        except RecordDecodeError as e:
            # the overwrite below replaces the bad record; its old membership cannot be found
            logger.warning(f"{e}; overwriting")
            return None
        return previous.geonum if previous is not None else None

    def _remove_user(self, user_id: str, lookup: Future):
        try:
            record = self.get_record(user_id)
        except Exception as e:
            lookup.set_exception(e)
            return
        if record is None:
            lookup.set_result(DeleteResult.NOT_FOUND)
            return
        lookup.set_result(DeleteResult.FOUND)
        self.executor.pipeline(
            [
                ("DEL", user_key(user_id)),
                ("ZREM", membership_key(record.geonum), user_id),
                ("ZREM", GEONUM_EXPIRE_KEY, user_id),
            ]
        )
        logger.debug(f"Removed {user_id} from {record.geonum}")

    def _remove_expired_user(self, user_id: str, cutoff: int, lookup: Future):
        try:
            score = self.executor.cmd("ZSCORE", GEONUM_EXPIRE_KEY, user_id)
        except Exception as e:
            lookup.set_exception(e)
            return
        if score is None or float(score) > cutoff:
            lookup.set_result(DeleteResult.NOT_FOUND)
            return
        self._remove_user(user_id, lookup)
        if lookup.exception() is None and lookup.result() is DeleteResult.NOT_FOUND:
            # orphan expiry entry
            self.executor.cmd("ZREM", GEONUM_EXPIRE_KEY, user_id)
