"""Unit tests for notification type validation."""

import pytest

from modules.notifications.domain import ImmediateSchedule, ScheduledSchedule, ValidationError
from modules.notifications.validation import as_payload, validate_draft
from tests.factories.identity import ROLES
from tests.factories.notifications import make_type_payload

pytestmark = pytest.mark.unit


def errors_by_field(exc_info):
    return {e.field: e.message for e in exc_info.value.errors}


class TestValidDrafts:
    """Tests for payloads that pass validation."""

    def test_minimal_payload(self, registry):
        draft = validate_draft(make_type_payload(), registry, ROLES)

        assert draft.title == "Welcome aboard"
        assert draft.is_active is True
        assert draft.priority.value == "medium"
        assert isinstance(draft.schedule, ImmediateSchedule)

    def test_snake_case_payload_is_accepted(self, registry):
        payload = {
            "title": "Welcome aboard",
            "message_template": "Hi {{userName}}, welcome!",
            "event_type": "creator_signup",
            "roles": ["creator"],
        }

        draft = validate_draft(payload, registry, ROLES)

        assert draft.message_template == "Hi {{userName}}, welcome!"

    def test_missing_schedule_type_means_immediate(self, registry):
        payload = make_type_payload(schedule={"time": "09:00"})

        draft = validate_draft(payload, registry, ROLES)

        assert isinstance(draft.schedule, ImmediateSchedule)
        assert draft.schedule.enabled is False

    def test_immediate_schedule_drops_deferred_fields(self, registry):
        payload = make_type_payload(
            schedule={"type": "immediate", "enabled": True, "time": "09:00", "days": ["monday"]}
        )

        schedule = validate_draft(payload, registry, ROLES).schedule

        assert schedule.model_dump() == {"type": "immediate", "enabled": False}

    def test_scheduled_days_are_normalized(self, registry):
        payload = make_type_payload(
            schedule={"type": "scheduled", "time": "9:05", "days": ["Monday", "monday", "friday"]}
        )

        schedule = validate_draft(payload, registry, ROLES).schedule

        assert isinstance(schedule, ScheduledSchedule)
        assert schedule.time == "09:05"
        assert [d.value for d in schedule.days] == ["monday", "friday"]

    def test_cron_alone_is_enough(self, registry):
        payload = make_type_payload(schedule={"type": "scheduled", "cron": "0 9 * * 1-5"})

        assert validate_draft(payload, registry, ROLES).schedule.cron == "0 9 * * 1-5"

    def test_duplicate_roles_are_collapsed(self, registry):
        payload = make_type_payload(roles=["creator", " creator", "learner"])

        assert validate_draft(payload, registry, ROLES).roles == ["creator", "learner"]


class TestInvalidDrafts:
    """Tests for collecting every violated field."""

    def test_reports_every_invalid_field_at_once(self, registry):
        payload = make_type_payload(title="Hi", messageTemplate="short", roles=[])

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert {"title", "messageTemplate", "roles"} <= set(errors_by_field(exc_info))

    def test_unregistered_event_type(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(make_type_payload(eventType="course_archived"), registry, ROLES)

        assert errors_by_field(exc_info) == {
            "eventType": "Event type 'course_archived' is not registered"
        }

    def test_unknown_roles(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(make_type_payload(roles=["creator", "pirate"]), registry, ROLES)

        assert errors_by_field(exc_info) == {"roles": "Unknown roles: pirate"}

    def test_unregistered_event_reported_with_field_errors(self, registry):
        payload = make_type_payload(eventType="course_archived", title="")

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert {"title", "eventType"} <= set(errors_by_field(exc_info))

    def test_unknown_channel_name(self, registry):
        payload = make_type_payload(channels={"email": True, "fax": True})

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert "channels.fax" in errors_by_field(exc_info)

    def test_non_boolean_channel_toggle(self, registry):
        payload = make_type_payload(channels={"email": "yes"})

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert "channels.email" in errors_by_field(exc_info)

    def test_scheduled_without_time_or_cron(self, registry):
        payload = make_type_payload(schedule={"type": "scheduled", "days": ["monday"]})

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert "schedule.time" in errors_by_field(exc_info)

    def test_scheduled_date_requires_time(self, registry):
        payload = make_type_payload(
            schedule={"type": "scheduled", "date": "2024-06-01", "cron": "0 9 * * *"}
        )

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert errors_by_field(exc_info)["schedule.time"] == "A scheduled date requires a time"

    def test_malformed_time(self, registry):
        payload = make_type_payload(schedule={"type": "scheduled", "time": "25:00"})

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert errors_by_field(exc_info)["schedule.time"] == (
            "Time must be in HH:MM format (00:00-23:59)"
        )

    def test_unknown_weekday(self, registry):
        payload = make_type_payload(
            schedule={"type": "scheduled", "time": "09:00", "days": ["funday"]}
        )

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert "schedule.days" in errors_by_field(exc_info)

    def test_invalid_cron(self, registry):
        payload = make_type_payload(schedule={"type": "scheduled", "cron": "every day"})

        with pytest.raises(ValidationError) as exc_info:
            validate_draft(payload, registry, ROLES)

        assert "schedule.cron" in errors_by_field(exc_info)

    def test_invalid_priority(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(make_type_payload(priority="urgent"), registry, ROLES)

        assert "priority" in errors_by_field(exc_info)

    def test_to_dict_lists_errors(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(make_type_payload(title="Hi"), registry, ROLES)

        assert exc_info.value.to_dict()["errors"][0]["field"] == "title"


def test_as_payload_drops_stored_only_fields():
    document = {"id": "t-1", "title": "x", "created_at": "a", "updated_at": "b", "deleted_at": None}

    assert as_payload(document) == {"title": "x"}
