"""Scheduler infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class SchedulerSettings(InfrastructureSettings):
    """Daily trigger and delivery sweep configuration.

    Only one scheduler may be active per deployment; there is no
    distributed locking between instances.

    Environment Variables:
        SCHEDULER_ENABLED: Start the scheduler with the application (default: True)
        SCHEDULER_HOTEL_ID: Hotel whose settings override system send time/timezone
        SCHEDULER_DEFAULT_SEND_TIME: Send time when none is configured (09:00)
        SCHEDULER_FALLBACK_TIMEZONE: Timezone when nothing else resolves
        SCHEDULER_SWEEP_INTERVAL_MINUTES: Delivery sweep period (default: 5)
        SCHEDULER_RUN_INTERVAL_SECONDS: Runner thread tick (default: 1)
    """

    enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    hotel_id: str | None = Field(default=None, alias="SCHEDULER_HOTEL_ID")
    default_send_time: str = Field(
        default="09:00", alias="SCHEDULER_DEFAULT_SEND_TIME"
    )
    fallback_timezone: str = Field(
        default="Asia/Almaty", alias="SCHEDULER_FALLBACK_TIMEZONE"
    )
    sweep_interval_minutes: int = Field(
        default=5, alias="SCHEDULER_SWEEP_INTERVAL_MINUTES"
    )
    run_interval_seconds: float = Field(
        default=1.0, alias="SCHEDULER_RUN_INTERVAL_SECONDS"
    )
