import redis
from dependency_injector import containers, providers

from geofilter.clients.geocodec import GeoCodec
from geofilter.clients.redis_client import RedisCommandExecutor, init_redis_pool
from geofilter.clients.write_dispatcher import init_write_dispatcher
from geofilter.config.config import Settings
from geofilter.utils.clock import now_ms
from geofilter.workflows.expiry_sweeper import ExpirySweeper
from geofilter.workflows.geofilter import Geofilter
from geofilter.workflows.load_generator import LoadGenerator
from geofilter.workflows.proximity_index import ProximityIndex
from geofilter.workflows.query_engine import QueryEngine


class Container(containers.DeclarativeContainer):
    """Process-wide wiring.

    The pool and the write lanes are resources: `init_resources()` opens
    them, `shutdown_resources()` drains the lanes and disconnects the pool.
    Tests override `redis_client` (and `clock`) instead of touching a server.
    """

    settings = providers.Singleton(Settings)
    clock = providers.Object(now_ms)

    # Clients
    redis_pool = providers.Resource(
        init_redis_pool,
        host=settings.provided.redis_host,
        port=settings.provided.redis_port,
        db=settings.provided.redis_db,
        pool_size=settings.provided.redis_pool_size,
        socket_timeout=settings.provided.redis_socket_timeout,
    )
    redis_client = providers.Singleton(redis.Redis, connection_pool=redis_pool)
    command_executor = providers.Singleton(RedisCommandExecutor, client=redis_client)
    write_dispatcher = providers.Resource(
        init_write_dispatcher, lanes=settings.provided.write_lanes
    )
    geocodec = providers.Singleton(GeoCodec)

    # Index
    proximity_index = providers.Singleton(
        ProximityIndex,
        executor=command_executor,
        dispatcher=write_dispatcher,
        codec=geocodec,
        clock=clock,
    )
    query_engine = providers.Singleton(
        QueryEngine, executor=command_executor, codec=geocodec
    )

    # Workflows
    expiry_sweeper = providers.Singleton(
        ExpirySweeper,
        executor=command_executor,
        proximity_index=proximity_index,
        expiration_ms=settings.provided.expiration_ms,
        clock=clock,
    )
    load_generator = providers.Singleton(
        LoadGenerator,
        proximity_index=proximity_index,
        query_engine=query_engine,
        codec=geocodec,
    )
    geofilter = providers.Singleton(
        Geofilter,
        executor=command_executor,
        dispatcher=write_dispatcher,
        proximity_index=proximity_index,
        query_engine=query_engine,
        expiry_sweeper=expiry_sweeper,
        load_generator=load_generator,
    )
