"""Event bus listeners forwarding registered events to the dispatch engine.

After the startup scan, and after any scan route call that inserts keys,
every known event key gets one handler, so host code can raise
``Event(event_type="kyc_approved", payload={...})`` on the bus instead of
calling the engine directly. Rebinding replaces the previous handlers; a
key is never bound twice.
"""

from threading import Lock
from typing import Any, Callable, Dict, List

from infrastructure.events import (
    Event,
    register_event_handler,
    unregister_event_handler,
)
from infrastructure.logging import get_module_logger
from modules.notifications.dispatch import DispatchEngine
from modules.notifications.registry import EventRegistry

logger = get_module_logger()

_BOUND_HANDLERS: Dict[str, Callable[[Event], Any]] = {}
_bind_lock = Lock()


def _emit_handler(engine: DispatchEngine, event_key: str) -> Callable[[Event], Any]:
    def handle_notification_event(event: Event):
        logger.info(
            "notification_event_received",
            event_type=event.event_type,
            correlation_id=str(event.correlation_id),
            actor=event.actor,
        )
        return engine.emit(event_key, event.payload)

    return handle_notification_event


def bind_event_listeners(engine: DispatchEngine, registry: EventRegistry) -> List[str]:
    """(Re)bind one emit handler per registered event key.

    Returns:
        The bound event keys.
    """
    keys = [descriptor.key for descriptor in registry.list()]
    with _bind_lock:
        _unbind_locked()
        for key in keys:
            handler = register_event_handler(key)(_emit_handler(engine, key))
            _BOUND_HANDLERS[key] = handler
    logger.info("notification_listeners_bound", event_types=keys)
    return keys


def unbind_event_listeners() -> None:
    with _bind_lock:
        _unbind_locked()


def bound_event_keys() -> List[str]:
    with _bind_lock:
        return sorted(_BOUND_HANDLERS)


def _unbind_locked() -> None:
    for key, handler in _BOUND_HANDLERS.items():
        unregister_event_handler(key, handler)
    _BOUND_HANDLERS.clear()
