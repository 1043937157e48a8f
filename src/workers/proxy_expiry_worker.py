"""Proxy expiry background worker.

Runs ProxyGraphService.expire_sweep on a fixed interval so grants whose
effective window has elapsed move to expired without waiting for the next
ballot to notice. The sweep is idempotent, so overlapping or repeated runs
change nothing further.

Note:
    Started and stopped with the API lifespan.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from src.infrastructure.observability import correlation_scope, get_logger_for_service

if TYPE_CHECKING:
    from src.application.ports.time_authority import TimeAuthorityProtocol
    from src.application.services.proxy_graph_service import ProxyGraphService

DEFAULT_SWEEP_INTERVAL_SECONDS: float = 60.0


class ProxyExpiryWorker:
    """Periodic proxy grant expiry.

    Attributes:
        running: Whether the sweep loop is running.
        interval_seconds: Seconds between sweeps.

    Example:
        >>> worker = ProxyExpiryWorker(proxy_graph, time_authority)
        >>> await worker.start()
        >>> # ... application runs ...
        >>> await worker.stop()
    """

    def __init__(
        self,
        proxy_graph: "ProxyGraphService",
        time_authority: "TimeAuthorityProtocol",
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._proxy_graph = proxy_graph
        self._time = time_authority
        self._interval = interval_seconds
        self._running: bool = False
        self._task: Optional[asyncio.Task[None]] = None
        self._sweeps_completed: int = 0
        self._log = get_logger_for_service("ProxyExpiryWorker", component="workers")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def sweeps_completed(self) -> int:
        return self._sweeps_completed

    async def start(self) -> None:
        """Start the sweep loop. Calling start twice is safe."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        self._log.info("proxy_expiry_worker_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the sweep loop and wait for the task to finish."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("proxy_expiry_worker_stopped")

    async def run_once(self) -> list[UUID]:
        """Run a single sweep under its own correlation id.

        Returns:
            IDs of grants expired by this sweep.
        """
        with correlation_scope():
            expired = await self._proxy_graph.expire_sweep(self._time.now())
        self._sweeps_completed += 1
        return expired

    async def _run_loop(self) -> None:
        while self._running:
            try:
                start = self._time.monotonic()
                expired = await self.run_once()
                elapsed = self._time.monotonic() - start
                self._log.debug(
                    "proxy_sweep_complete",
                    expired_count=len(expired),
                    elapsed_seconds=elapsed,
                )
                await asyncio.sleep(max(0.0, self._interval - elapsed))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error(
                    "proxy_sweep_failed", error=str(e), error_type=type(e).__name__
                )
                await asyncio.sleep(self._interval)
