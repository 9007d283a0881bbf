"""Cancellable repeating timer that drives day advancement."""

import uuid
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler

from ...config.logging import get_logger
from ...scheduler import add_interval_job, get_global_scheduler, remove_job, start_scheduler

logger = get_logger(__name__)


class GameClock:
    """
    One interval job on a scheduler, owned by a single game controller.

    ``stop()`` removes the job, so no tick is scheduled after it returns.
    A tick already executing when ``stop()`` is called still finishes; the
    controller guards against that with its own lock and run token.
    """

    def __init__(
        self,
        on_tick: Callable[[], None],
        scheduler: Optional[BaseScheduler] = None,
        job_id: Optional[str] = None,
    ):
        self._on_tick = on_tick
        self._scheduler = scheduler
        self.job_id = job_id or f"day-advance-{uuid.uuid4().hex[:8]}"
        self.interval_ms: Optional[int] = None
        self.logger = logger.bind(component="game_clock", job_id=self.job_id)

    @property
    def scheduler(self) -> BaseScheduler:
        if self._scheduler is None:
            self._scheduler = get_global_scheduler()
        return self._scheduler

    @property
    def is_running(self) -> bool:
        return self.interval_ms is not None

    def start(self, interval_ms: int) -> None:
        """Start ticking every ``interval_ms``, replacing any running job."""
        if interval_ms <= 0:
            raise ValueError("Interval must be positive")
        if not self.scheduler.running:
            start_scheduler(self.scheduler)
        add_interval_job(
            self.scheduler,
            self.job_id,
            self._on_tick,
            interval_ms,
            name="Advance simulated day",
        )
        self.interval_ms = interval_ms
        self.logger.info("Game clock started", interval_ms=interval_ms)

    def reschedule(self, interval_ms: int) -> None:
        """Restart at a new cadence if running; otherwise do nothing."""
        if self.is_running and interval_ms != self.interval_ms:
            self.start(interval_ms)

    def stop(self) -> None:
        if self.interval_ms is None:
            return
        remove_job(self.scheduler, self.job_id)
        self.interval_ms = None
        self.logger.info("Game clock stopped")
