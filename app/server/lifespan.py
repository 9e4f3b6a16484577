from contextlib import asynccontextmanager
import threading
from typing import AsyncIterator, Optional, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.events import shutdown_event_executor
from infrastructure.logging.setup import configure_logging
from infrastructure.services import (
    get_delivery_executor,
    get_idempotency_cache,
    get_settings,
)
from jobs import scheduled_tasks
from modules.chat.dependencies import get_daily_message_counter
from modules.notifications.dependencies import (
    get_dispatch_engine,
    get_event_registry,
    get_scheduled_dispatcher,
)
from modules.notifications.domain import RegistryUnavailable, ValidationError
from modules.notifications.listeners import (
    bind_event_listeners,
    unbind_event_listeners,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(settings=settings)


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _initialize_registry(logger: BoundLogger) -> None:
    """Scan the event registry and bind one bus listener per event key.

    A failing scan leaves previously registered events usable, so startup
    continues with whatever the registry already holds.
    """
    registry = get_event_registry()
    try:
        result = registry.scan()
        logger.info(
            "event_registry_initialized",
            inserted=result.inserted,
            skipped=len(result.skipped),
        )
    except (RegistryUnavailable, ValidationError) as exc:
        logger.error("event_registry_scan_failed", error=str(exc))

    bind_event_listeners(get_dispatch_engine(), registry)


def _start_scheduled_tasks(
    settings: "Settings",
    logger: BoundLogger,
) -> Optional[threading.Event]:
    if not settings.scheduler.enabled:
        logger.info("scheduled_tasks_skipped", reason="scheduler_disabled")
        return None

    scheduled_tasks.init(
        get_scheduled_dispatcher(),
        tick_seconds=settings.scheduler.tick_seconds,
        purgeables=[get_idempotency_cache(), get_daily_message_counter()],
    )
    stop_event = scheduled_tasks.run_continuously()
    logger.info("scheduled_tasks_started")
    return stop_event


def _stop_scheduled_tasks(stop_event: Optional[threading.Event]) -> None:
    if stop_event is None:
        return
    stop_event.set()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    _initialize_registry(logger)
    app.state.scheduled_stop_event = _start_scheduled_tasks(settings, logger)

    yield

    logger.info("application_shutdown")

    _stop_scheduled_tasks(app.state.scheduled_stop_event)
    unbind_event_listeners()
    shutdown_event_executor(wait=False)
    get_delivery_executor().shutdown(wait=False)
