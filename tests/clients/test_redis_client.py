from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ResponseError

from geofilter.clients.redis_client import init_redis_pool


def test_cmd_runs_single_command(executor):
    assert executor.cmd("SET", "k", "v")
    assert executor.cmd("GET", "k") == "v"
    assert executor.cmd("GET", "missing") is None


def test_pipeline_returns_results_in_order(executor):
    results = executor.pipeline(
        [
            ("ZADD", "z", 2.5, "b"),
            ("ZADD", "z", 1.0, "a"),
            ("ZRANGE", "z", 0, -1),
            ("SET", "k", "v"),
            ("GET", "k"),
        ]
    )
    assert results[0] == 1
    assert results[1] == 1
    assert results[2] == ["a", "b"]
    assert results[4] == "v"


def test_empty_pipeline(executor):
    assert executor.pipeline([]) == []


def test_pipeline_raises_store_errors(executor):
    executor.cmd("SET", "k", "v")
    with pytest.raises(ResponseError):
        executor.pipeline([("ZADD", "k", 1, "a")])


def test_pool_resource_disconnects_on_shutdown():
    pool = MagicMock()
    with patch("geofilter.clients.redis_client.redis.BlockingConnectionPool", return_value=pool) as cls:
        gen = init_redis_pool("redis.local", 6380, db=2, pool_size=3, socket_timeout=1.5)
        assert next(gen) is pool
        pool.disconnect.assert_not_called()
        with pytest.raises(StopIteration):
            next(gen)
    pool.disconnect.assert_called_once()
    kwargs = cls.call_args.kwargs
    assert kwargs["host"] == "redis.local"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 2
    assert kwargs["max_connections"] == 3
    assert kwargs["socket_timeout"] == 1.5
    assert kwargs["decode_responses"] is True
