import threading
import time
from typing import Any, Sequence

import schedule

from infrastructure.logging import get_module_logger
from modules.notifications.scheduler import ScheduledDispatcher

logger = get_module_logger()

SCHEDULED_NOTIFICATIONS_TAG = "scheduled_notifications"


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            job(*args, **kwargs)
        except Exception as e:
            logger.error(
                "scheduled_job_failed",
                job=getattr(job, "__name__", "unknown"),
                error=str(e),
                exc_info=True,
            )

    return wrapper


def init(
    dispatcher: ScheduledDispatcher,
    tick_seconds: int = 60,
    purgeables: Sequence[Any] = (),
):
    """Register the recurring jobs of the notification engine.

    ``purgeables`` are stores of expiring state (idempotency claims, chat
    counters) swept once an hour.
    """
    schedule.clear(SCHEDULED_NOTIFICATIONS_TAG)
    schedule.every(tick_seconds).seconds.do(
        safe_run(process_scheduled_notifications), dispatcher=dispatcher
    ).tag(SCHEDULED_NOTIFICATIONS_TAG)
    schedule.every(5).minutes.do(safe_run(scheduler_heartbeat)).tag(
        SCHEDULED_NOTIFICATIONS_TAG
    )
    if purgeables:
        schedule.every().hour.do(
            safe_run(purge_expired_state), purgeables=list(purgeables)
        ).tag(SCHEDULED_NOTIFICATIONS_TAG)
    logger.info("scheduled_tasks_initialized", tick_seconds=tick_seconds)


def process_scheduled_notifications(dispatcher: ScheduledDispatcher):
    dispatcher.process_due()


def purge_expired_state(purgeables: Sequence[Any]):
    removed = {type(p).__name__: p.purge_expired() for p in purgeables}
    logger.info("expired_state_purged", removed=removed)


def scheduler_heartbeat():
    logger.info("scheduler_heartbeat", at=time.ctime())


def run_continuously(interval=1):
    """Continuously run, while executing pending jobs at each
    elapsed time interval.
    @return cease_continuous_run: threading. Event which can
    be set to cease continuous run. Please note that it is
    *intended behavior that run_continuously() does not run
    missed jobs*. For example, if the tick is one minute and the
    process was paused for an hour, the job runs once, not 60 times.
    Due records are never lost this way: every tick picks up all
    pending records whose occurrence has passed.
    """
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        @classmethod
        def run(cls):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                time.sleep(interval)

    continuous_thread = ScheduleThread(daemon=True, name="notification-scheduler")
    continuous_thread.start()
    return cease_continuous_run
