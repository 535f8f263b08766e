import time


def now_ms() -> int:
    """Wall-clock time in milliseconds, the score unit of the expiry registry."""
    return time.time_ns() // 1_000_000
