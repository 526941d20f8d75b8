"""Threading glue between the schedule library and the engine jobs."""

import functools
import threading
from typing import Any, Callable, Optional

import schedule

from infrastructure.logging import bind_request_context, get_module_logger

logger = get_module_logger()


def safe_run(job: Callable[..., Any]) -> Callable[..., Optional[Any]]:
    """Wrap a job so one failing run is logged and the next run still happens.

    schedule stops calling a job whose callable raises, and a raise here
    would also kill the runner thread.
    """

    @functools.wraps(job)
    def wrapper(*args, **kwargs):
        name = getattr(job, "__name__", repr(job))
        with bind_request_context(job=name):
            try:
                return job(*args, **kwargs)
            except Exception as e:  # pylint: disable=broad-except
                logger.error("scheduled_job_failed", job=name, error=str(e), exc_info=True)
                return None

    return wrapper


def run_continuously(
    scheduler: schedule.Scheduler, interval: float = 1
) -> threading.Event:
    """Run ``scheduler.run_pending()`` every ``interval`` seconds on a daemon thread.

    Returns the event that stops the loop. Runs missed while a long job was
    executing are not replayed.
    """
    stop = threading.Event()

    def loop() -> None:
        while not stop.is_set():
            scheduler.run_pending()
            stop.wait(interval)

    threading.Thread(target=loop, daemon=True, name="notification-scheduler").start()
    return stop
