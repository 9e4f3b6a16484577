"""
Notification engine providers and FastAPI dependency aliases.

Components are application-scoped singletons built on the shared
infrastructure providers. Tests override them with
``app.dependency_overrides[get_dispatch_engine] = lambda: engine``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from infrastructure.services import (
    get_delivery_executor,
    get_document_store,
    get_idempotency_cache,
    get_settings,
    get_user_directory,
)
from modules.notifications.dispatch import DispatchEngine
from modules.notifications.inbox import Inbox
from modules.notifications.ledger import DeliveryLedger
from modules.notifications.registry import EventRegistry, EventSource, StaticEventSource
from modules.notifications.sample_data import SampleDataStore
from modules.notifications.scheduler import ScheduledDispatcher
from modules.notifications.store import NotificationTypeStore


@lru_cache
def get_event_source() -> EventSource:
    """Built-in platform events; replace to discover events elsewhere."""
    return StaticEventSource()


@lru_cache
def get_event_registry() -> EventRegistry:
    return EventRegistry(get_document_store(), get_event_source())


@lru_cache
def get_notification_type_store() -> NotificationTypeStore:
    return NotificationTypeStore(
        get_document_store(),
        get_event_registry(),
        known_roles=get_settings().platform.roles,
    )


@lru_cache
def get_delivery_ledger() -> DeliveryLedger:
    return DeliveryLedger(get_document_store())


@lru_cache
def get_dispatch_engine() -> DispatchEngine:
    return DispatchEngine(
        registry=get_event_registry(),
        types=get_notification_type_store(),
        ledger=get_delivery_ledger(),
        directory=get_user_directory(),
        executor=get_delivery_executor(),
        timezone_name=get_settings().notifications.schedule_timezone,
    )


@lru_cache
def get_scheduled_dispatcher() -> ScheduledDispatcher:
    return ScheduledDispatcher(
        ledger=get_delivery_ledger(),
        types=get_notification_type_store(),
        engine=get_dispatch_engine(),
        idempotency=get_idempotency_cache(),
        claim_ttl_seconds=get_settings().idempotency.IDEMPOTENCY_TTL_SECONDS,
    )


@lru_cache
def get_sample_data_store() -> SampleDataStore:
    return SampleDataStore(get_document_store(), get_event_registry())


@lru_cache
def get_inbox() -> Inbox:
    return Inbox(get_document_store())


EventRegistryDep = Annotated[EventRegistry, Depends(get_event_registry)]
NotificationTypeStoreDep = Annotated[
    NotificationTypeStore, Depends(get_notification_type_store)
]
DeliveryLedgerDep = Annotated[DeliveryLedger, Depends(get_delivery_ledger)]
DispatchEngineDep = Annotated[DispatchEngine, Depends(get_dispatch_engine)]
SampleDataStoreDep = Annotated[SampleDataStore, Depends(get_sample_data_store)]
InboxDep = Annotated[Inbox, Depends(get_inbox)]
