"""In-process event bus.

Handlers are registered per event type and called when events are
dispatched, either synchronously or on a managed background executor.
"""

import atexit
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from infrastructure.events.models import Event
from infrastructure.logging import get_module_logger

logger = get_module_logger()

# Event handler registry: event_type -> list of handlers
EVENT_HANDLERS: Dict[str, List[Callable[[Event], Any]]] = {}
_registry_lock = Lock()

# Managed executor for background dispatches
_EXECUTOR: Optional[ThreadPoolExecutor] = None
_executor_lock = Lock()
_executor_shutdown = False


def register_event_handler(event_type: str):
    """Decorator to register an event handler for a specific event type.

    Args:
        event_type: The event key to handle (e.g. 'kyc_approved').

    Returns:
        Decorator function that registers the handler.
    """

    def decorator(handler_func: Callable[[Event], Any]) -> Callable[[Event], Any]:
        with _registry_lock:
            EVENT_HANDLERS.setdefault(event_type, []).append(handler_func)
            total = len(EVENT_HANDLERS[event_type])
        logger.debug(
            "registered_event_handler",
            handler=getattr(handler_func, "__name__", "unknown"),
            event_type=event_type,
            total_handlers=total,
        )
        return handler_func

    return decorator


def unregister_event_handler(
    event_type: str, handler_func: Callable[[Event], Any]
) -> bool:
    """Remove a previously registered handler.

    Returns:
        True if the handler was registered for the event type.
    """
    with _registry_lock:
        handlers = EVENT_HANDLERS.get(event_type, [])
        if handler_func not in handlers:
            return False
        handlers.remove(handler_func)
        if not handlers:
            del EVENT_HANDLERS[event_type]
    return True


def dispatch_event(event: Event) -> List[Any]:
    """Dispatch event synchronously to all registered handlers.

    A failing handler is logged and skipped; remaining handlers still run.

    Returns:
        List of return values from the handlers that succeeded.
    """
    with _registry_lock:
        handlers = list(EVENT_HANDLERS.get(event.event_type, []))

    logger.info(
        "dispatching_event",
        event_type=event.event_type,
        handler_count=len(handlers),
        correlation_id=str(event.correlation_id),
    )

    results = []
    for handler in handlers:
        try:
            results.append(handler(event))
        except Exception as e:
            logger.error(
                "event_handler_failed",
                handler=getattr(handler, "__name__", "unknown"),
                event_type=event.event_type,
                error=str(e),
                correlation_id=str(event.correlation_id),
            )
    return results


def _background_worker(evt: Event) -> None:
    try:
        dispatch_event(evt)
    except Exception as e:
        logger.exception(
            "background_event_dispatch_failed",
            event_type=evt.event_type,
            error=str(e),
            correlation_id=str(evt.correlation_id),
        )


def _get_or_create_executor(max_workers: int = 4) -> Optional[ThreadPoolExecutor]:
    """Lazily create the module-scoped executor; None once shut down."""
    global _EXECUTOR
    with _executor_lock:
        if _executor_shutdown:
            return None
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="event-bus"
            )
            logger.debug("created_background_event_executor", max_workers=max_workers)
        return _EXECUTOR


def shutdown_event_executor(wait: bool = True) -> None:
    """Shut down the background executor and refuse further submissions.

    Idempotent; safe to call multiple times.
    """
    global _EXECUTOR, _executor_shutdown
    with _executor_lock:
        if _EXECUTOR is None:
            _executor_shutdown = True
            return
        try:
            _EXECUTOR.shutdown(wait=wait)
            logger.debug("background_event_executor_shut_down", wait=wait)
        finally:
            _EXECUTOR = None
            _executor_shutdown = True


@atexit.register
def _atexit_shutdown():
    shutdown_event_executor(wait=False)


def dispatch_background(event: Event) -> None:
    """Fire-and-forget dispatch on the internal executor.

    Handler exceptions are logged inside the worker. Submissions after
    shutdown are dropped with an error log.
    """
    executor = _get_or_create_executor()
    if executor is None:
        logger.error(
            "event_executor_unavailable",
            event_type=event.event_type,
            correlation_id=str(event.correlation_id),
        )
        return
    executor.submit(_background_worker, event)


def get_registered_events() -> List[str]:
    """Event types with at least one handler."""
    with _registry_lock:
        return list(EVENT_HANDLERS.keys())


def clear_handlers() -> None:
    """Clear all registered handlers.

    WARNING: This is intended for testing only.
    """
    with _registry_lock:
        EVENT_HANDLERS.clear()
    logger.debug("cleared_all_event_handlers")
