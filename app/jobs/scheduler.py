"""Notification scheduler.

Owns the single daily trigger (evaluation, email warnings, queue drain and
daily report) and the periodic delivery sweep. Both run on a
``schedule.Scheduler`` driven by one background runner thread, so jobs never
overlap within a process. Only one scheduler may be active per deployment.
"""

import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import schedule

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import utcnow
from infrastructure.notifications.worker import DeliveryWorker
from infrastructure.persistence.repositories import SettingsRepository
from jobs import schedule_config
from jobs.scheduled_tasks import run_continuously, safe_run
from modules.expiry.evaluator import RuleEvaluator
from modules.expiry.warnings import ExpiryWarningMailer
from modules.reports.aggregator import DailyReportAggregator
from modules.telegram.polling import TelegramPoller

logger = get_module_logger()

DAILY_TAG = "daily-report"
SWEEP_TAG = "delivery-sweep"


class SchedulerService:
    """Daily trigger and delivery sweep.

    Attributes:
        settings: Stored configuration (send time, timezone)
        hotel_id: Hotel whose settings take precedence, if any
        send_time: Currently scheduled HH:MM
        timezone: Currently scheduled IANA timezone
        last_runs: Outcome of the latest run of each phase
    """

    def __init__(
        self,
        settings: SettingsRepository,
        evaluator: RuleEvaluator,
        worker: DeliveryWorker,
        mailer: ExpiryWarningMailer,
        aggregator: DailyReportAggregator,
        scheduler: Optional[schedule.Scheduler] = None,
        clock: Callable[[], datetime] = utcnow,
        hotel_id: Optional[str] = None,
        default_send_time: str = schedule_config.DEFAULT_SEND_TIME,
        fallback_timezone: str = schedule_config.FALLBACK_TIMEZONE,
        sweep_interval_minutes: int = 5,
        run_interval_seconds: float = 1.0,
        poller: Optional[TelegramPoller] = None,
    ):
        self.settings = settings
        self.evaluator = evaluator
        self.worker = worker
        self.mailer = mailer
        self.aggregator = aggregator
        self.scheduler = scheduler or schedule.Scheduler()
        self.hotel_id = hotel_id
        self.default_send_time = default_send_time
        self.fallback_timezone = fallback_timezone
        self.sweep_interval_minutes = sweep_interval_minutes
        self.run_interval_seconds = run_interval_seconds
        self.poller = poller
        self._clock = clock

        self.send_time: Optional[str] = None
        self.timezone: Optional[str] = None
        self.last_runs: Dict[str, Dict[str, Any]] = {}
        self._daily_job: Optional[schedule.Job] = None
        self._sweep_job: Optional[schedule.Job] = None
        self._stop_event: Optional[threading.Event] = None
        self._lock = threading.Lock()
        # Held while a phase runs; manual triggers wait for a scheduled run
        self._phase_lock = threading.RLock()

    # Resolution

    def resolve_send_time(self) -> str:
        return schedule_config.resolve_send_time(
            self.settings, self.hotel_id, default=self.default_send_time
        )

    def resolve_timezone(self) -> str:
        return schedule_config.resolve_timezone(
            self.settings, self.hotel_id, fallback=self.fallback_timezone
        )

    # Triggers

    def reschedule(
        self, send_time: Optional[str] = None, timezone: Optional[str] = None
    ) -> schedule.Job:
        """Install the daily trigger, replacing any previous one.

        Args:
            send_time: HH:MM; resolved from settings when None
            timezone: IANA name; resolved from settings when None

        Returns:
            The installed job. If neither value changed the existing job is
            returned untouched.

        Raises:
            ValidationError: If send_time or timezone is invalid
        """
        send_time = schedule_config.validate_send_time(
            send_time if send_time is not None else self.resolve_send_time()
        )
        timezone = schedule_config.validate_timezone(
            timezone if timezone is not None else self.resolve_timezone()
        )

        with self._lock:
            if (
                self._daily_job is not None
                and send_time == self.send_time
                and timezone == self.timezone
            ):
                logger.info(
                    "daily_trigger_unchanged", send_time=send_time, timezone=timezone
                )
                return self._daily_job

            if self._daily_job is not None:
                self.scheduler.cancel_job(self._daily_job)

            self._daily_job = (
                self.scheduler.every()
                .day.at(send_time, timezone)
                .do(safe_run(self.run_daily_cycle))
                .tag(DAILY_TAG)
            )
            self.send_time = send_time
            self.timezone = timezone

        logger.info(
            "daily_trigger_scheduled",
            send_time=send_time,
            timezone=timezone,
            next_run=_isoformat(self._daily_job.next_run),
        )
        return self._daily_job

    def start(self) -> None:
        """Install triggers and start the runner thread."""
        self.reschedule()

        with self._lock:
            if self._sweep_job is None:
                self._sweep_job = (
                    self.scheduler.every(self.sweep_interval_minutes)
                    .minutes.do(safe_run(self.run_delivery_sweep_now))
                    .tag(SWEEP_TAG)
                )
            if self._stop_event is None:
                self._stop_event = run_continuously(
                    self.scheduler, interval=self.run_interval_seconds
                )

        logger.info(
            "scheduler_started",
            sweep_interval_minutes=self.sweep_interval_minutes,
        )

    def stop(self) -> None:
        """Cancel triggers and stop the runner. In-flight work completes."""
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
                self._stop_event = None
            self.scheduler.clear(DAILY_TAG)
            self.scheduler.clear(SWEEP_TAG)
            self._daily_job = None
            self._sweep_job = None
        logger.info("scheduler_stopped")

    # Phases

    def _run_phase(self, name: str, func: Callable[[], Any]) -> Any:
        with self._phase_lock:
            return self._run_phase_locked(name, func)

    def _run_phase_locked(self, name: str, func: Callable[[], Any]) -> Any:
        started = self._clock()
        logger.info("scheduler_phase_started", phase=name)
        try:
            result = func()
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "scheduler_phase_failed", phase=name, error=str(e), exc_info=True
            )
            self.last_runs[name] = {
                "startedAt": started.isoformat(),
                "finishedAt": self._clock().isoformat(),
                "error": str(e),
            }
            return None

        self.last_runs[name] = {
            "startedAt": started.isoformat(),
            "finishedAt": self._clock().isoformat(),
            "result": result,
        }
        logger.info("scheduler_phase_completed", phase=name, result=result)
        return result

    def run_rule_evaluation_now(self) -> Optional[int]:
        return self._run_phase("ruleEvaluation", self.evaluator.evaluate)

    def run_email_warnings_now(self) -> Optional[int]:
        return self._run_phase("emailWarnings", self.mailer.run)

    def run_delivery_sweep_now(self) -> Optional[dict]:
        return self._run_phase("deliverySweep", self.worker.process_queue)

    def run_daily_report_now(self) -> Optional[dict]:
        return self._run_phase("dailyReport", self.aggregator.run)

    def run_daily_cycle(self) -> Dict[str, Any]:
        """Evaluation, email warnings, queue drain, daily report, in order.

        A failing phase is recorded and the next phase still runs.
        """
        logger.info("daily_cycle_started")
        with self._phase_lock:
            results = {
                "notificationsCreated": self.run_rule_evaluation_now(),
                "emailWarningsSent": self.run_email_warnings_now(),
                "delivery": self.run_delivery_sweep_now(),
                "dailyReport": self.run_daily_report_now(),
            }
        logger.info("daily_cycle_completed", **results)
        return results

    # Status

    def get_job_status(self) -> Dict[str, Any]:
        return {
            "dailyReport": {
                "running": self._daily_job is not None,
                "nextRun": _isoformat(self._daily_job.next_run if self._daily_job else None),
                "sendTime": self.send_time,
            },
            "deliverySweep": {
                "running": self._sweep_job is not None,
                "nextRun": _isoformat(self._sweep_job.next_run if self._sweep_job else None),
            },
            "telegramPolling": bool(self.poller and self.poller.running),
            "lastRuns": dict(self.last_runs),
        }

    def get_schedule_status(self) -> Dict[str, Any]:
        return {
            "isScheduled": self._daily_job is not None,
            "sendTime": self.send_time or self.resolve_send_time(),
            "timezone": self.timezone or self.resolve_timezone(),
            "nextRun": _isoformat(self._daily_job.next_run if self._daily_job else None),
        }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
