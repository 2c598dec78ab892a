import asyncio
import logging
from typing import Optional

from . import config
from .security import TokenStore

log = logging.getLogger(__name__)


class TokenSweeper:
    """Periodically evicts stale tokens from a TokenStore.

    Runs as one asyncio task on the loop that called start(). A cycle that
    raises is logged and the loop carries on with the next one.
    """

    def __init__(self, store: TokenStore, interval: float = None):
        interval = config.CSRF_SWEEP_INTERVAL if interval is None else interval
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self.store = store
        self.interval = float(interval)
        self._task: Optional[asyncio.Task] = None
        self._stop: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._stop = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="csrf-sweeper")
        log.info("sweeper started interval=%.1fs ttl=%.1fs", self.interval, self.store.ttl)
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._stop.set()
        try:
            await self._task
        finally:
            self._task = None
        log.info("sweeper stopped")

    def sweep_once(self) -> int:
        try:
            removed = self.store.sweep()
        except Exception:
            log.exception("sweep cycle failed")
            return 0
        live = len(self.store)
        if removed:
            log.info("swept %d stale tokens, %d live", removed, live)
        else:
            log.debug("sweep found nothing stale, %d live", live)
        return removed

    async def _run(self):
        while not self._stop.is_set():
            self.sweep_once()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
