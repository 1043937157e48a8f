"""Background workers.

Workers:
- ProxyExpiryWorker: Periodically expires proxy grants whose window elapsed
"""

from src.workers.proxy_expiry_worker import (
    DEFAULT_SWEEP_INTERVAL_SECONDS,
    ProxyExpiryWorker,
)

__all__ = [
    "DEFAULT_SWEEP_INTERVAL_SECONDS",
    "ProxyExpiryWorker",
]
