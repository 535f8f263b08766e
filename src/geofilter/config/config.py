import os
from dataclasses import dataclass
from typing import Optional

from geofilter.utils.constants import DEFAULT_EXPIRATION_MS, EnvConstants
from geofilter.utils.load_secrets import load_env_vars


def _env(name: EnvConstants, default: str) -> str:
    return os.getenv(name.value, default).strip()


def _env_int(name: EnvConstants, default: int, minimum: int = 0) -> int:
    raw = _env(name, str(default))
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name.value} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ValueError(f"{name.value} must be >= {minimum}, got {value}")
    return value


def _env_optional_float(name: EnvConstants) -> Optional[float]:
    raw = _env(name, "")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name.value} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    redis_host: str
    redis_port: int
    redis_db: int
    redis_pool_size: int
    redis_socket_timeout: Optional[float]
    expiration_ms: int
    write_lanes: int
    log_level: str

    def __init__(self):
        load_env_vars()
        object.__setattr__(
            self, "redis_host", _env(EnvConstants.REDIS_HOST, "localhost")
        )
        object.__setattr__(
            self, "redis_port", _env_int(EnvConstants.REDIS_PORT, 6379, minimum=1)
        )
        object.__setattr__(self, "redis_db", _env_int(EnvConstants.REDIS_DB, 0))
        object.__setattr__(
            self,
            "redis_pool_size",
            _env_int(EnvConstants.REDIS_POOL_SIZE, 10, minimum=1),
        )
        object.__setattr__(
            self,
            "redis_socket_timeout",
            _env_optional_float(EnvConstants.REDIS_SOCKET_TIMEOUT),
        )
        object.__setattr__(
            self,
            "expiration_ms",
            _env_int(EnvConstants.EXPIRATION_MS, DEFAULT_EXPIRATION_MS),
        )
        object.__setattr__(
            self, "write_lanes", _env_int(EnvConstants.WRITE_LANES, 4, minimum=1)
        )
        object.__setattr__(
            self, "log_level", _env(EnvConstants.LOG_LEVEL, "INFO").upper()
        )
