"""Scheduler infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class SchedulerSettings(InfrastructureSettings):
    """Recurring tick that releases deferred notification deliveries.

    Environment Variables:
        SCHEDULER_ENABLED: Start the background scheduler thread (default: True)
        SCHEDULER_TICK_SECONDS: Seconds between due-delivery scans (default: 60)
    """

    enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    tick_seconds: int = Field(default=60, alias="SCHEDULER_TICK_SECONDS", ge=1)
