"""Scheduler configuration for the simulation clock."""

from typing import Callable, Dict, List, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MAX_INSTANCES
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from .config.logging import get_logger
from .config.settings import get_settings

logger = get_logger(__name__)


def create_scheduler(max_workers: Optional[int] = None) -> BackgroundScheduler:
    """
    Create and configure a BackgroundScheduler with an in-memory job store.

    Day-advance jobs are bound to a live controller, so they are never
    persisted across restarts.

    Returns:
        Configured BackgroundScheduler instance
    """
    jobstores = {"default": MemoryJobStore()}

    executors = {
        "default": ThreadPoolExecutor(
            max_workers=max_workers or get_settings().scheduler_max_workers
        )
    }

    # Job defaults
    job_defaults = {
        "coalesce": True,  # Missed ticks collapse into one
        "max_instances": 1,  # Only one instance of each job at a time
        "misfire_grace_time": 1,
    }

    scheduler = BackgroundScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults,
        timezone="UTC",
    )

    # Add event listeners for logging
    scheduler.add_listener(job_executed_listener, EVENT_JOB_EXECUTED)
    scheduler.add_listener(job_error_listener, EVENT_JOB_ERROR)
    scheduler.add_listener(job_skipped_listener, EVENT_JOB_MAX_INSTANCES)

    return scheduler


def job_executed_listener(event):
    """Log successful job executions."""
    logger.debug("Job executed", job_id=event.job_id, run_time=str(event.scheduled_run_time))


def job_error_listener(event):
    """Log job execution errors."""
    logger.error(
        "Job crashed",
        job_id=event.job_id,
        error=str(event.exception),
        traceback=event.traceback,
    )


def job_skipped_listener(event):
    """Log ticks dropped because the previous run is still in flight."""
    logger.info("Job run skipped, previous run still active", job_id=event.job_id)


def get_global_scheduler() -> BackgroundScheduler:
    """
    Get or create the global scheduler instance.

    Returns:
        Global BackgroundScheduler instance
    """
    if not hasattr(get_global_scheduler, "_scheduler"):
        get_global_scheduler._scheduler = create_scheduler()

    return get_global_scheduler._scheduler


def start_scheduler(scheduler: Optional[BackgroundScheduler] = None) -> BackgroundScheduler:
    """Start a scheduler (the global one by default) if it is not running."""
    scheduler = scheduler or get_global_scheduler()
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")
    return scheduler


def shutdown_scheduler(scheduler: Optional[BackgroundScheduler] = None) -> None:
    """Shutdown a scheduler (the global one by default)."""
    scheduler = scheduler or get_global_scheduler()
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shutdown complete")


def add_interval_job(
    scheduler: BackgroundScheduler,
    job_id: str,
    func: Callable[[], None],
    interval_ms: int,
    name: Optional[str] = None,
) -> None:
    """
    Add or replace a repeating job.

    Args:
        scheduler: Scheduler to register the job on
        job_id: Unique job identifier
        func: Callable run on every tick
        interval_ms: Milliseconds between ticks
        name: Human readable job name
    """
    scheduler.add_job(
        func=func,
        trigger="interval",
        seconds=interval_ms / 1000,
        id=job_id,
        name=name or job_id,
        replace_existing=True,
        max_instances=1,
    )
    logger.debug("Added interval job", job_id=job_id, interval_ms=interval_ms)


def remove_job(scheduler: BackgroundScheduler, job_id: str) -> bool:
    """Remove a job; returns False if it was not scheduled."""
    try:
        scheduler.remove_job(job_id)
    except JobLookupError:
        return False
    logger.debug("Removed job", job_id=job_id)
    return True


def list_scheduled_jobs(scheduler: Optional[BackgroundScheduler] = None) -> List[Dict]:
    """List all currently scheduled jobs."""
    scheduler = scheduler or get_global_scheduler()
    return [
        {"id": job.id, "name": job.name, "next_run_time": job.next_run_time}
        for job in scheduler.get_jobs()
    ]
