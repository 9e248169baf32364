import time


def now_ms() -> int:
    """Wall clock in integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000
