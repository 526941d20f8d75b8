"""Notification engine administration endpoints."""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from api.dependencies.rate_limits import get_limiter
from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.notifications.errors import ValidationError
from infrastructure.notifications.models import NotificationRule
from infrastructure.services import RuleServiceDep, SchedulerServiceDep
from modules.expiry import RuleUpsert, StatsRow

logger = get_module_logger()
router = APIRouter(prefix="/notifications", tags=["Notifications"])
limiter = get_limiter()


class RescheduleRequest(BaseModel):
    send_time: Optional[str] = None
    timezone: Optional[str] = None


def _context(request: Request):
    return bind_request_context(
        correlation_id=request.headers.get("x-request-id"),
        request_path=request.url.path,
        request_method=request.method,
    )


# Jobs


@router.post("/jobs/evaluate")
@limiter.limit("10/minute")
def run_rule_evaluation(request: Request, scheduler: SchedulerServiceDep):
    """Evaluate expiry rules now and queue notifications."""
    with _context(request):
        created = scheduler.run_rule_evaluation_now()
    return {"notificationsCreated": created}


@router.post("/jobs/deliver")
@limiter.limit("10/minute")
def run_delivery_sweep(request: Request, scheduler: SchedulerServiceDep):
    """Drain the notification queue now."""
    with _context(request):
        stats = scheduler.run_delivery_sweep_now()
    return stats or {}


@router.post("/jobs/daily-report")
@limiter.limit("5/minute")
def run_daily_report(request: Request, scheduler: SchedulerServiceDep):
    """Send the daily report now."""
    with _context(request):
        result = scheduler.run_daily_report_now()
    return result or {"telegramSent": 0, "emailSent": 0}


@router.post("/jobs/email-warnings")
@limiter.limit("5/minute")
def run_email_warnings(request: Request, scheduler: SchedulerServiceDep):
    """Send the hotel administrator expiry warnings now."""
    with _context(request):
        sent = scheduler.run_email_warnings_now()
    return {"emailsSent": sent}


@router.get("/jobs/status")
@limiter.limit("30/minute")
def get_job_status(request: Request, scheduler: SchedulerServiceDep):  # pylint: disable=unused-argument
    return scheduler.get_job_status()


# Schedule


@router.get("/schedule")
@limiter.limit("30/minute")
def get_schedule(request: Request, scheduler: SchedulerServiceDep):  # pylint: disable=unused-argument
    return scheduler.get_schedule_status()


@router.post("/schedule/reschedule")
@limiter.limit("10/minute")
def reschedule(
    request: Request,
    scheduler: SchedulerServiceDep,
    payload: Optional[RescheduleRequest] = None,
) -> Dict[str, Any]:
    """Re-read or override the daily send time and timezone.

    Without a body the values are resolved from stored settings.
    """
    payload = payload or RescheduleRequest()
    with _context(request):
        try:
            scheduler.reschedule(payload.send_time, payload.timezone)
        except ValidationError as e:
            logger.warning("reschedule_rejected", error=str(e))
            raise HTTPException(status_code=422, detail=str(e)) from e
    return scheduler.get_schedule_status()


# Rules and statistics


@router.get("/rules", response_model=List[NotificationRule])
@limiter.limit("30/minute")
def get_rules(
    request: Request,  # pylint: disable=unused-argument
    rules: RuleServiceDep,
    hotel_id: Optional[str] = None,
):
    return rules.get_rules(hotel_id)


@router.put("/rules", response_model=NotificationRule)
@limiter.limit("10/minute")
def upsert_rule(request: Request, payload: RuleUpsert, rules: RuleServiceDep):
    with _context(request):
        try:
            return rules.upsert_rule(payload)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/stats/{hotel_id}", response_model=List[StatsRow])
@limiter.limit("30/minute")
def get_stats(
    request: Request,  # pylint: disable=unused-argument
    hotel_id: str,
    rules: RuleServiceDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    return rules.get_stats(hotel_id, start_date, end_date)
