"""Notifications HTTP API: registry, types, emission, ledger and inbox."""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Response

from infrastructure.logging import get_module_logger
from infrastructure.persistence import ConditionFailedError
from modules.notifications.api import schemas
from modules.notifications.dependencies import (
    DeliveryLedgerDep,
    DispatchEngineDep,
    EventRegistryDep,
    InboxDep,
    NotificationTypeStoreDep,
    SampleDataStoreDep,
)
from modules.notifications.domain import (
    DeliveryRecord,
    DeliveryRecordNotFound,
    DeliveryStatus,
    EventDescriptor,
    NotificationType,
    NotificationTypeNotFound,
    RecordAlreadyResolved,
    RegistryUnavailable,
    UnknownEvent,
    ValidationError,
)
from modules.notifications.listeners import bind_event_listeners

logger = get_module_logger()

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@contextmanager
def notification_errors():
    """Translate engine errors raised inside a route into HTTP errors."""
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except (UnknownEvent, NotificationTypeNotFound, DeliveryRecordNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RegistryUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except (RecordAlreadyResolved, ConditionFailedError) as e:
        raise HTTPException(status_code=409, detail=str(e))


# Event registry


@router.post("/events/scan", response_model=schemas.ScanResponse)
def scan_events(registry: EventRegistryDep, engine: DispatchEngineDep):
    """Reconcile the event source with the registry.

    New event keys are inserted, known ones are reported as skipped.
    Inserted keys get a bus listener right away.
    """
    with notification_errors():
        result = registry.scan()
    if result.inserted:
        bind_event_listeners(engine, registry)
    return schemas.ScanResponse(
        events=result.events, inserted=result.inserted, skipped=result.skipped
    )


@router.get("/events", response_model=List[EventDescriptor])
def list_events(registry: EventRegistryDep):
    return registry.list()


@router.delete("/events", response_model=schemas.PurgeResponse)
def purge_events(registry: EventRegistryDep, engine: DispatchEngineDep):
    """Administrative purge of every event descriptor and its bus listener."""
    deleted = registry.purge()
    bind_event_listeners(engine, registry)
    return schemas.PurgeResponse(deleted=deleted)


@router.get("/template-variables", response_model=schemas.TemplateVariablesResponse)
def get_template_variables(
    registry: EventRegistryDep,
    event_type: Optional[str] = Query(default=None, alias="eventType"),
):
    """Variables legal in templates of an event (default catalog without one)."""
    with notification_errors():
        variables = registry.catalog(event_type)
    return schemas.TemplateVariablesResponse(event_type=event_type, variables=variables)


# Notification types


@router.get("/types", response_model=List[NotificationType])
def list_notification_types(
    types: NotificationTypeStoreDep,
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    role: Optional[str] = None,
    search: Optional[str] = None,
):
    return types.list(is_active=is_active, role=role, search=search)


@router.post("/types", response_model=NotificationType, status_code=201)
def create_notification_type(
    types: NotificationTypeStoreDep,
    payload: Dict[str, Any] = Body(...),
):
    with notification_errors():
        return types.create(payload)


@router.get("/types/role/{role}", response_model=List[NotificationType])
def list_notification_types_for_role(role: str, types: NotificationTypeStoreDep):
    """Active notification types targeting ``role``."""
    return types.list_for_role(role)


@router.get("/types/{notification_type_id}", response_model=NotificationType)
def get_notification_type(notification_type_id: str, types: NotificationTypeStoreDep):
    with notification_errors():
        return types.get(notification_type_id)


@router.put("/types/{notification_type_id}", response_model=NotificationType)
def update_notification_type(
    notification_type_id: str,
    types: NotificationTypeStoreDep,
    patch: Dict[str, Any] = Body(...),
):
    """Partially update a notification type; schedule and channels merge."""
    with notification_errors():
        return types.update(notification_type_id, patch)


@router.patch(
    "/types/{notification_type_id}/toggle", response_model=schemas.ToggleResponse
)
def toggle_notification_type(
    notification_type_id: str, types: NotificationTypeStoreDep
):
    with notification_errors():
        is_active = types.toggle_active(notification_type_id)
    return schemas.ToggleResponse(id=notification_type_id, is_active=is_active)


@router.delete("/types/{notification_type_id}", status_code=204)
def delete_notification_type(
    notification_type_id: str, types: NotificationTypeStoreDep
):
    with notification_errors():
        types.delete(notification_type_id)
    return Response(status_code=204)


# Emission and preview


@router.post("/emit", response_model=schemas.EmitResponse)
def emit_event(request: schemas.EmitRequest, engine: DispatchEngineDep):
    """Emit an event manually, exactly as host code would."""
    with notification_errors():
        records = engine.emit(request.event_type, request.context)
    return schemas.EmitResponse(emitted=len(records), records=records)


@router.post("/preview", response_model=schemas.PreviewResponse)
def preview_notification(request: schemas.PreviewRequest, engine: DispatchEngineDep):
    with notification_errors():
        rendered = engine.preview(
            context=request.context,
            notification_type_id=request.notification_type_id,
            template=request.message_template,
            title=request.title,
            event_type=request.event_type,
        )
    return schemas.PreviewResponse(**rendered)


@router.get("/test-data/{event_type}", response_model=schemas.SampleDataResponse)
def get_test_data(event_type: str, samples: SampleDataStoreDep):
    with notification_errors():
        context = samples.get(event_type)
    return schemas.SampleDataResponse(event_type=event_type, context=context)


@router.put("/test-data/{event_type}", response_model=schemas.SampleDataResponse)
def put_test_data(
    event_type: str, request: schemas.SampleDataRequest, samples: SampleDataStoreDep
):
    with notification_errors():
        context = samples.put(event_type, request.context)
    return schemas.SampleDataResponse(event_type=event_type, context=context)


# Delivery ledger


def _query(
    ledger,
    status: Optional[DeliveryStatus],
    channel: Optional[str],
    event_type: Optional[str],
    notification_type_id: Optional[str],
    user_id: Optional[str],
    since: Optional[datetime],
    until: Optional[datetime],
    limit: Optional[int] = None,
) -> List[DeliveryRecord]:
    return ledger.query(
        status=status.value if status else None,
        channel=channel,
        event_type=event_type,
        notification_type_id=notification_type_id,
        recipient_user_id=user_id,
        since=since,
        until=until,
        limit=limit,
    )


@router.get("/deliveries", response_model=List[DeliveryRecord])
def list_deliveries(
    ledger: DeliveryLedgerDep,
    status: Optional[DeliveryStatus] = None,
    channel: Optional[str] = None,
    event_type: Optional[str] = Query(default=None, alias="eventType"),
    notification_type_id: Optional[str] = Query(
        default=None, alias="notificationTypeId"
    ),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
):
    return _query(
        ledger, status, channel, event_type, notification_type_id, user_id,
        since, until, limit,
    )


@router.get("/deliveries/export")
def export_deliveries(
    ledger: DeliveryLedgerDep,
    types: NotificationTypeStoreDep,
    status: Optional[DeliveryStatus] = None,
    channel: Optional[str] = None,
    event_type: Optional[str] = Query(default=None, alias="eventType"),
    notification_type_id: Optional[str] = Query(
        default=None, alias="notificationTypeId"
    ),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
):
    """Download matching delivery records as CSV."""
    records = _query(
        ledger, status, channel, event_type, notification_type_id, user_id,
        since, until,
    )
    titles = {t.id: t.title for t in types.list()}
    return Response(
        content=ledger.export_csv(records, type_titles=titles),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="deliveries.csv"'},
    )


@router.get("/deliveries/analytics")
def delivery_analytics(
    ledger: DeliveryLedgerDep,
    event_type: Optional[str] = Query(default=None, alias="eventType"),
    notification_type_id: Optional[str] = Query(
        default=None, alias="notificationTypeId"
    ),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
):
    """Totals and success rates overall, per channel and per notification type."""
    records = _query(
        ledger, None, None, event_type, notification_type_id, None, since, until
    )
    return ledger.analytics(records)


@router.post("/deliveries/{record_id}/status", response_model=DeliveryRecord)
def update_delivery_status(
    record_id: str,
    update: schemas.DeliveryStatusUpdate,
    ledger: DeliveryLedgerDep,
):
    """Channel callback resolving a record the provider accepted earlier."""
    with notification_errors():
        return ledger.resolve(
            record_id,
            DeliveryStatus(update.status),
            error_message=update.error_message,
            external_id=update.external_id,
        )


# In-app inbox


@router.get("/inbox/{user_id}")
def get_inbox(
    user_id: str,
    inbox: InboxDep,
    unread_only: bool = Query(default=False, alias="unreadOnly"),
):
    return inbox.list(user_id, unread_only=unread_only)


@router.post("/inbox/{user_id}/read-all", response_model=schemas.MarkReadResponse)
def mark_inbox_read(user_id: str, inbox: InboxDep):
    return schemas.MarkReadResponse(user_id=user_id, updated=inbox.mark_all_read(user_id))
