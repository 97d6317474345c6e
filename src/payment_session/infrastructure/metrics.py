import time
from collections.abc import Awaitable, Callable
from functools import wraps

from prometheus_client import Counter, Histogram


PAYMENT_ATTEMPTS_TOTAL = Counter(
    "payment_attempts_total",
    "Total number of governed payment attempts",
    ["outcome"],
)

NOTIFICATIONS_DISPATCHED_TOTAL = Counter(
    "notifications_dispatched_total",
    "Total completion notifications handed to the channel",
    ["topic"],
)

NOTIFICATIONS_FAILED_TOTAL = Counter(
    "notifications_failed_total",
    "Total completion notifications the channel failed to deliver",
    ["topic"],
)

NOTIFICATION_DISPATCH_DURATION_SECONDS = Histogram(
    "notification_dispatch_duration_seconds",
    "Completion notification dispatch duration",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)


def track_dispatch_duration[**P, R](
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            NOTIFICATION_DISPATCH_DURATION_SECONDS.observe(time.perf_counter() - start)

    return wrapper
