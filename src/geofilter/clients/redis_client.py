import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import redis

logger = logging.getLogger(__name__)

Command = Tuple[Any, ...]


def init_redis_pool(
    host: str,
    port: int,
    db: int = 0,
    pool_size: int = 10,
    socket_timeout: Optional[float] = None,
) -> Iterator[redis.ConnectionPool]:
    """Fixed-size pool shared by the whole process.

    Callers block for a free connection instead of failing when all of them
    are busy. The pool is disconnected when the owning container shuts down.
    """
    pool = redis.BlockingConnectionPool(
        host=host,
        port=port,
        db=db,
        max_connections=pool_size,
        timeout=None,
        socket_timeout=socket_timeout,
        decode_responses=True,
    )
    logger.info(f"Redis pool ready: {host}:{port}/{db} ({pool_size} connections)")
    try:
        yield pool
    finally:
        pool.disconnect()
        logger.info("Redis pool disconnected")


class RedisCommandExecutor:
    """Runs raw store commands on a pooled connection."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def cmd(self, *command: Any) -> Any:
        return self.client.execute_command(*command)

    def pipeline(self, commands: Sequence[Command]) -> List[Any]:
        """Send a batch in one round trip; results come back in submission order."""
        if not commands:
            return []
        with self.client.pipeline(transaction=False) as pipe:
            for command in commands:
                pipe.execute_command(*command)
            return pipe.execute()
