import logging


class RedisDebugFilter(logging.Filter):
    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return self.level <= logging.DEBUG or record.levelno > logging.DEBUG


def setup_logging(level: str = "INFO"):
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(levelname)s - %(threadName)s - %(message)s",
    )
    for logger_name in ["redis", "redis.connection"]:
        logger = logging.getLogger(logger_name)
        logger.addFilter(RedisDebugFilter(numeric_level))
