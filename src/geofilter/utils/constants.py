from enum import Enum

EARTH_RADIUS_KM = 6372.8
DEFAULT_GEN_NUMBER = 100
DEFAULT_EXPIRATION_MS = 1_800_000  # 30 minutes
GEN_ID_UPPER_BOUND = 10_000_000

GEONUM_FIELD = "geonum"
GEONUM_EXPIRE_KEY = "geonum_expire"
GEONUM_KEY_PREFIX = "geonum:"
USER_KEY_PREFIX = "geonum_user:"

# Positions in [cell] + neighbors(cell); neighbors come back as N, S, E, W, NW, NE, SW, SE.
NORTH_WEST_INDEX = 5
SOUTH_EAST_INDEX = -1


class Direction(Enum):
    NORTH = (1, 0)
    SOUTH = (-1, 0)
    EAST = (0, 1)
    WEST = (0, -1)
    NORTH_WEST = (1, -1)
    NORTH_EAST = (1, 1)
    SOUTH_WEST = (-1, -1)
    SOUTH_EAST = (-1, 1)


NEIGHBOR_ORDER = [
    Direction.NORTH,
    Direction.SOUTH,
    Direction.EAST,
    Direction.WEST,
    Direction.NORTH_WEST,
    Direction.NORTH_EAST,
    Direction.SOUTH_WEST,
    Direction.SOUTH_EAST,
]


class EnvConstants(Enum):
    REDIS_HOST = "GEOFILTER_REDIS_HOST"
    REDIS_PORT = "GEOFILTER_REDIS_PORT"
    REDIS_DB = "GEOFILTER_REDIS_DB"
    REDIS_POOL_SIZE = "GEOFILTER_REDIS_POOL_SIZE"
    REDIS_SOCKET_TIMEOUT = "GEOFILTER_REDIS_SOCKET_TIMEOUT"
    EXPIRATION_MS = "GEOFILTER_EXPIRATION_MS"
    WRITE_LANES = "GEOFILTER_WRITE_LANES"
    LOG_LEVEL = "GEOFILTER_LOG_LEVEL"


class GeneratedUser(Enum):
    ID_PREFIX = "neighbor_"
    LAST_NAME = "neighbor"


def membership_key(cell_id: str) -> str:
    return f"{GEONUM_KEY_PREFIX}{cell_id}"


def user_key(user_id: str) -> str:
    return f"{USER_KEY_PREFIX}{user_id}"
