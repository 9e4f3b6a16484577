"""Shared fixtures for the notification engine test suite.

Every fixture builds components on a fresh in-memory document store, so
tests never share state through the application-scoped providers.
"""

from datetime import datetime, timezone

import pytest
import schedule
from fastapi.testclient import TestClient

from infrastructure.events import clear_handlers
from infrastructure.identity import InMemoryUserDirectory
from infrastructure.idempotency import DocumentStoreIdempotencyCache
from infrastructure.notifications import DeliveryExecutor, InAppChannel
from infrastructure.persistence import InMemoryDocumentStore
from infrastructure.services import providers
from modules.chat import dependencies as chat_dependencies
from modules.chat.counters import DailyMessageCounter
from modules.chat.policy import ChatPolicyEvaluator
from modules.chat.settings_store import ChatSettingsStore
from modules.notifications import dependencies as notification_dependencies
from modules.notifications.dispatch import DispatchEngine
from modules.notifications.inbox import Inbox
from modules.notifications.ledger import DeliveryLedger
from modules.notifications.listeners import unbind_event_listeners
from modules.notifications.registry import EventRegistry, StaticEventSource
from modules.notifications.sample_data import SampleDataStore
from modules.notifications.scheduler import ScheduledDispatcher
from modules.notifications.store import NotificationTypeStore
from server.server import create_app
from tests.factories.identity import ROLES, make_enrollment, make_user
from tests.factories.notifications import RecordingChannel

# Monday 2024-05-06 08:00 UTC
NOW = datetime(2024, 5, 6, 8, 0, tzinfo=timezone.utc)

_PROVIDERS = [
    providers.get_settings,
    providers.get_document_store,
    providers.get_user_directory,
    providers.get_idempotency_cache,
    providers.get_delivery_executor,
    notification_dependencies.get_event_source,
    notification_dependencies.get_event_registry,
    notification_dependencies.get_notification_type_store,
    notification_dependencies.get_delivery_ledger,
    notification_dependencies.get_dispatch_engine,
    notification_dependencies.get_scheduled_dispatcher,
    notification_dependencies.get_sample_data_store,
    notification_dependencies.get_inbox,
    chat_dependencies.get_chat_settings_store,
    chat_dependencies.get_daily_message_counter,
    chat_dependencies.get_chat_policy_evaluator,
]


@pytest.fixture(autouse=True)
def reset_application_state():
    """Clear cached providers, bus handlers and scheduled jobs around each test."""
    for provider in _PROVIDERS:
        provider.cache_clear()
    unbind_event_listeners()
    clear_handlers()
    schedule.clear()
    yield
    unbind_event_listeners()
    clear_handlers()
    schedule.clear()
    for provider in _PROVIDERS:
        provider.cache_clear()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def directory():
    """Directory with two creators, two learners, a brand and an admin.

    Learner l-1 is enrolled in c-1's course with 3 completed lessons,
    learner l-2 with 1.
    """
    return InMemoryUserDirectory(
        users=[
            make_user("c-1", role="creator", name="Cara", phone_number="+15145550101"),
            make_user("c-2", role="creator", name="Cody"),
            make_user("l-1", role="learner", name="Lia", bio="Loves pottery"),
            make_user("l-2", role="learner", name="Leo"),
            make_user("b-1", role="brand", name="Brandly"),
            make_user("a-1", role="admin", name="Ada"),
        ],
        enrollments=[
            make_enrollment("l-1", "course-1", "c-1", completed_lessons=3),
            make_enrollment("l-2", "course-1", "c-1", completed_lessons=1),
        ],
    )


@pytest.fixture
def registry(document_store):
    """Event registry scanned from the built-in platform events."""
    registry = EventRegistry(document_store, StaticEventSource())
    registry.scan()
    return registry


@pytest.fixture
def type_store(document_store, registry):
    return NotificationTypeStore(document_store, registry, known_roles=ROLES)


@pytest.fixture
def ledger(document_store):
    return DeliveryLedger(document_store)


@pytest.fixture
def channels(document_store):
    """Recording channels for every medium, real inbox channel for inApp."""
    return {
        "email": RecordingChannel("email"),
        "sms": RecordingChannel("sms"),
        "push": RecordingChannel("push"),
        "whatsapp": RecordingChannel("whatsapp"),
        "inApp": InAppChannel(document_store),
    }


@pytest.fixture
def executor(channels):
    executor = DeliveryExecutor(channels, timeout_seconds=2.0, max_workers=4)
    yield executor
    executor.shutdown(wait=False)


@pytest.fixture
def engine(registry, type_store, ledger, directory, executor, now):
    return DispatchEngine(
        registry=registry,
        types=type_store,
        ledger=ledger,
        directory=directory,
        executor=executor,
        clock=lambda: now,
    )


@pytest.fixture
def idempotency(document_store):
    return DocumentStoreIdempotencyCache(document_store)


@pytest.fixture
def scheduled_dispatcher(ledger, type_store, engine, idempotency, now):
    return ScheduledDispatcher(
        ledger=ledger,
        types=type_store,
        engine=engine,
        idempotency=idempotency,
        clock=lambda: now,
    )


@pytest.fixture
def chat_settings(document_store):
    return ChatSettingsStore(document_store)


@pytest.fixture
def message_counter(document_store):
    return DailyMessageCounter(document_store)


@pytest.fixture
def chat_policy(chat_settings, message_counter, directory):
    """Chat evaluator whose clock reads Monday 12:00 UTC (inside every window)."""
    return ChatPolicyEvaluator(
        settings=chat_settings,
        counters=message_counter,
        directory=directory,
        clock=lambda: datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def app(
    document_store,
    registry,
    type_store,
    ledger,
    engine,
    chat_settings,
    chat_policy,
):
    """Application wired to the test components; the lifespan never runs."""
    app = create_app()
    app.dependency_overrides.update(
        {
            notification_dependencies.get_event_registry: lambda: registry,
            notification_dependencies.get_notification_type_store: lambda: type_store,
            notification_dependencies.get_delivery_ledger: lambda: ledger,
            notification_dependencies.get_dispatch_engine: lambda: engine,
            notification_dependencies.get_sample_data_store: lambda: SampleDataStore(
                document_store, registry
            ),
            notification_dependencies.get_inbox: lambda: Inbox(document_store),
            chat_dependencies.get_chat_settings_store: lambda: chat_settings,
            chat_dependencies.get_chat_policy_evaluator: lambda: chat_policy,
        }
    )
    yield app
    app.dependency_overrides = {}


@pytest.fixture
def client(app):
    return TestClient(app)
