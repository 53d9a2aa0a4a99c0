"""
Fixed-interval trigger for the sync.

Each cycle is one independent run. A failed cycle is logged and skipped; the
next cycle starts on schedule and gets a fresh chance once the upstream
problem clears.
"""

import threading
import time
from typing import Callable, Optional

from config import SyncConfig
from iss_loc import orchestrator
from iss_loc.errors import SyncError
from iss_loc.models import SyncResult
from logging_config import get_logger

logger = get_logger(__name__)


class Scheduler:
    """
    Calls ``run_once`` every ``config.update_interval`` seconds.

    The interval is measured from the start of one cycle to the start of the
    next. Cycles run in the calling thread, so they never overlap; a cycle
    that takes longer than the interval is followed immediately by the next.
    ``stop`` interrupts the wait between cycles but never a running cycle.
    """

    def __init__(
        self,
        config: SyncConfig,
        run_once: Optional[Callable[[], SyncResult]] = None,
        sleep: Optional[Callable[[float], object]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.run_once = run_once or self._default_run
        self._stopped = threading.Event()
        self.sleep = sleep or self._stopped.wait
        self.clock = clock
        self._running = False

    def _default_run(self) -> SyncResult:
        return orchestrator.run(
            self.config.zone_id,
            self.config.record_name,
            self.config.api_token,
            config=self.config,
        )

    def run_cycle(self) -> Optional[SyncResult]:
        """Run once; return the result, or None if the run failed."""
        try:
            result = self.run_once()
        except SyncError as e:
            logger.error("Failed to update ISS LOC record", error=str(e), error_type=type(e).__name__)
            return None
        except Exception:
            logger.exception("Failed to update ISS LOC record")
            return None

        logger.debug("cycle complete", record_id=result.id, created=result.created)
        return result

    def run_forever(self, max_cycles: Optional[int] = None) -> int:
        """Run cycles until stopped (or ``max_cycles`` ran); return the count."""
        self._running = True
        self._stopped.clear()
        cycles = 0
        logger.info("scheduler started", interval=self.config.update_interval)

        while self._running:
            started = self.clock()
            self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            if not self._running:
                break

            remaining = self.config.update_interval - (self.clock() - started)
            if remaining > 0:
                self.sleep(remaining)

        self._running = False
        logger.info("scheduler stopped", cycles=cycles)
        return cycles

    def stop(self) -> None:
        logger.info("scheduler stopping")
        self._running = False
        self._stopped.set()

    def is_running(self) -> bool:
        return self._running
