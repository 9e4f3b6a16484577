"""Unit tests for versioned chat settings."""

import pytest

from modules.chat.domain import (
    ChatRestriction,
    ChatRestrictionSet,
    SettingsVersionConflict,
)
from modules.chat.settings_store import ChatSettingsStore
from tests.factories.chat import make_cell, make_matrix

pytestmark = pytest.mark.unit


class TestDefaults:
    """Tests for first-read seeding."""

    def test_permissions_seeded_from_defaults(self, chat_settings):
        matrix = chat_settings.get_permissions()

        assert matrix.version == 0
        cell = matrix.cell("learner", "creator")
        assert cell.can_respond is True
        assert cell.can_initiate is False
        assert cell.lesson_threshold == 2

    def test_availability_defaults(self, chat_settings):
        availability = chat_settings.get_availability()

        assert availability.global_chat_window.start == "08:00"
        assert availability.creator_default_hours.end == "17:00"
        assert availability.timezone == "UTC"
        assert availability.enforce_availability is True

    def test_restrictions_defaults(self, chat_settings):
        restrictions = chat_settings.get_restrictions()

        assert {r.type for r in restrictions.active_for("learner")} == {
            "lesson_completion",
            "course_enrollment",
        }

    def test_defaults_shared_across_store_instances(self, document_store):
        ChatSettingsStore(document_store).get_permissions()

        assert ChatSettingsStore(document_store).get_permissions().version == 0


class TestReplace:
    """Tests for optimistic replacement."""

    def test_replace_bumps_version(self, chat_settings):
        matrix = make_matrix({"admin": {"creator": make_cell()}}, version=0)

        saved = chat_settings.replace_permissions(matrix)

        assert saved.version == 1
        assert chat_settings.get_permissions().cell("learner", "creator") is None
        assert chat_settings.get_permissions().cell("admin", "creator").can_chat is True

    def test_stale_replacement_conflicts(self, chat_settings):
        chat_settings.replace_permissions(make_matrix({}, version=0))

        with pytest.raises(SettingsVersionConflict) as exc_info:
            chat_settings.replace_permissions(make_matrix({"admin": {}}, version=0))

        assert exc_info.value.expected_version == 0
        assert exc_info.value.current_version == 1
        assert chat_settings.get_permissions().matrix == {}

    def test_availability_replacement(self, chat_settings):
        current = chat_settings.get_availability()

        saved = chat_settings.replace_availability(
            current.model_copy(update={"max_daily_chats": 10})
        )

        assert saved.version == current.version + 1
        assert chat_settings.get_availability().max_daily_chats == 10

    def test_restrictions_replacement_and_conflict(self, chat_settings):
        replacement = ChatRestrictionSet(
            version=0,
            restrictions=[ChatRestriction(role="brand", type="campaign_only", value="yes")],
        )

        saved = chat_settings.replace_restrictions(replacement)

        assert saved.version == 1
        assert [r.type for r in saved.active_for("brand")] == ["campaign_only"]
        with pytest.raises(SettingsVersionConflict):
            chat_settings.replace_restrictions(replacement)
