"""In-process event bus.

Usage:
    from infrastructure.events import Event, dispatch_event

    dispatch_event(Event(event_type="kyc_approved", payload={"userName": "Ava"}))
"""

from infrastructure.events.models import Event
from infrastructure.events.dispatcher import (
    clear_handlers,
    dispatch_background,
    dispatch_event,
    get_registered_events,
    register_event_handler,
    shutdown_event_executor,
    unregister_event_handler,
)

__all__ = [
    "Event",
    "clear_handlers",
    "dispatch_background",
    "dispatch_event",
    "get_registered_events",
    "register_event_handler",
    "shutdown_event_executor",
    "unregister_event_handler",
]
