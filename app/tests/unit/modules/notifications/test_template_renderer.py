"""Unit tests for template rendering."""

import pytest

from modules.notifications.domain import TemplateVariable
from modules.notifications.renderer import recipient_bindings, render
from tests.factories.identity import make_user

pytestmark = pytest.mark.unit

CATALOG = [
    TemplateVariable(variable="userName"),
    TemplateVariable(variable="courseTitle"),
    TemplateVariable(variable="count"),
]


class TestRender:
    """Tests for placeholder substitution."""

    def test_substitutes_catalog_variables(self):
        result = render(
            "Hi {{userName}}, {{courseTitle}} is ready", {"userName": "Lia", "courseTitle": "Pottery"}, CATALOG
        )

        assert result == "Hi Lia, Pottery is ready"

    def test_tolerates_whitespace_inside_braces(self):
        assert render("Hi {{ userName }}", {"userName": "Lia"}, CATALOG) == "Hi Lia"

    def test_missing_binding_renders_braced_name(self):
        assert render("Course: {{courseTitle}}", {}, CATALOG) == "Course: {courseTitle}"

    def test_none_binding_renders_braced_name(self):
        assert render("Course: {{courseTitle}}", {"courseTitle": None}, CATALOG) == (
            "Course: {courseTitle}"
        )

    def test_unknown_variable_left_untouched(self):
        result = render("Code {{promoCode}}", {"promoCode": "SAVE10"}, CATALOG)

        assert result == "Code {{promoCode}}"

    def test_non_string_values_are_stringified(self):
        assert render("{{count}} lessons", {"count": 3}, CATALOG) == "3 lessons"

    def test_repeated_placeholder(self):
        assert render("{{userName}} {{userName}}", {"userName": "Lia"}, CATALOG) == "Lia Lia"

    def test_plain_string_catalog(self):
        assert render("Hi {{name}}", {"name": "Ava"}, ["name"]) == "Hi Ava"


class TestRecipientBindings:
    """Tests for layering recipient fields and emitted context."""

    def test_recipient_fields(self):
        user = make_user("l-1", role="learner", name="Lia", email="lia@example.com")

        bindings = recipient_bindings(user, {})

        assert bindings["userName"] == "Lia"
        assert bindings["userEmail"] == "lia@example.com"
        assert bindings["userRole"] == "learner"
        assert bindings["userId"] == "l-1"

    def test_profile_attributes_are_available(self):
        user = make_user("l-1", bio="Loves pottery")

        assert recipient_bindings(user, {})["bio"] == "Loves pottery"

    def test_emitted_context_wins(self):
        user = make_user("l-1", name="Lia")

        bindings = recipient_bindings(user, {"userName": "Lia M.", "courseTitle": "Pottery"})

        assert bindings["userName"] == "Lia M."
        assert bindings["courseTitle"] == "Pottery"
