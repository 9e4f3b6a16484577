"""Unit tests for the notifications HTTP routes."""

import pytest

from modules.notifications.domain import DeliveryStatus
from modules.notifications.listeners import bound_event_keys
from tests.factories.notifications import make_delivery_record, make_type_payload

pytestmark = pytest.mark.unit

BASE = "/api/v1/notifications"


def create_type(client, **overrides):
    response = client.post(f"{BASE}/types", json=make_type_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestEventRoutes:
    """Tests for the event registry routes."""

    def test_list_events(self, client):
        response = client.get(f"{BASE}/events")

        assert response.status_code == 200
        assert "creator_signup" in [e["key"] for e in response.json()]

    def test_rescan_skips_known_events(self, client):
        response = client.post(f"{BASE}/events/scan")

        body = response.json()
        assert response.status_code == 200
        assert body["inserted"] == []
        assert "creator_signup" in body["skipped"]

    def test_purge_then_scan_reinserts(self, client):
        purged = client.delete(f"{BASE}/events").json()
        rescanned = client.post(f"{BASE}/events/scan").json()

        assert purged["deleted"] > 0
        assert "creator_signup" in rescanned["inserted"]

    def test_scan_inserting_keys_binds_bus_listeners(self, client):
        client.delete(f"{BASE}/events")

        client.post(f"{BASE}/events/scan")

        assert "creator_signup" in bound_event_keys()

    def test_purge_unbinds_bus_listeners(self, client):
        client.delete(f"{BASE}/events")
        client.post(f"{BASE}/events/scan")

        client.delete(f"{BASE}/events")

        assert bound_event_keys() == []

    def test_template_variables_for_event(self, client):
        response = client.get(
            f"{BASE}/template-variables", params={"eventType": "creator_signup"}
        )

        body = response.json()
        assert body["eventType"] == "creator_signup"
        assert "userName" in [v["variable"] for v in body["variables"]]

    def test_template_variables_for_unknown_event(self, client):
        response = client.get(
            f"{BASE}/template-variables", params={"eventType": "course_archived"}
        )

        assert response.status_code == 404


class TestTypeRoutes:
    """Tests for notification type CRUD routes."""

    def test_create_returns_camel_case_type(self, client):
        created = create_type(client)

        assert created["id"]
        assert created["eventType"] == "creator_signup"
        assert created["messageTemplate"] == "Hi {{userName}}, welcome to the platform"
        assert created["isActive"] is True

    def test_create_reports_every_field_error(self, client):
        response = client.post(
            f"{BASE}/types", json=make_type_payload(title="Hi", roles=[])
        )

        assert response.status_code == 422
        fields = {e["field"] for e in response.json()["detail"]["errors"]}
        assert {"title", "roles"} <= fields

    def test_create_for_unknown_event_is_rejected(self, client):
        response = client.post(
            f"{BASE}/types", json=make_type_payload(eventType="course_archived")
        )

        assert response.status_code == 422

    def test_get_missing_type(self, client):
        assert client.get(f"{BASE}/types/missing").status_code == 404

    def test_update_and_toggle(self, client):
        created = create_type(client)

        updated = client.put(
            f"{BASE}/types/{created['id']}", json={"title": "Welcome creators"}
        )
        toggled = client.patch(f"{BASE}/types/{created['id']}/toggle")

        assert updated.json()["title"] == "Welcome creators"
        assert toggled.json() == {"id": created["id"], "isActive": False}

    def test_list_filters(self, client):
        create_type(client)
        create_type(client, title="Learner hello", roles=["learner"])

        by_role = client.get(f"{BASE}/types", params={"role": "learner"}).json()
        by_search = client.get(f"{BASE}/types", params={"search": "welcome"}).json()
        for_role = client.get(f"{BASE}/types/role/creator").json()

        assert [t["title"] for t in by_role] == ["Learner hello"]
        assert [t["title"] for t in by_search] == ["Welcome aboard"]
        assert [t["title"] for t in for_role] == ["Welcome aboard"]

    def test_delete_hides_type(self, client):
        created = create_type(client)

        response = client.delete(f"{BASE}/types/{created['id']}")

        assert response.status_code == 204
        assert client.get(f"{BASE}/types/{created['id']}").status_code == 404
        assert client.delete(f"{BASE}/types/{created['id']}").status_code == 404


class TestEmitAndPreviewRoutes:
    """Tests for manual emission and preview."""

    def test_emit_delivers_to_role_audience(self, client, channels):
        create_type(client)

        response = client.post(
            f"{BASE}/emit",
            json={"eventType": "creator_signup", "context": {"platform": "Acme"}},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["emitted"] == 2
        assert {r["recipientUserId"] for r in body["records"]} == {"c-1", "c-2"}
        assert {r["status"] for r in body["records"]} == {"success"}
        assert sorted(m.body for m in channels["email"].sent) == [
            "Hi Cara, welcome to the platform",
            "Hi Cody, welcome to the platform",
        ]

    def test_emit_unknown_event(self, client):
        response = client.post(f"{BASE}/emit", json={"eventType": "course_archived"})

        assert response.status_code == 404

    def test_preview_template(self, client):
        response = client.post(
            f"{BASE}/preview",
            json={
                "messageTemplate": "Hello {{userName}}, {{missing}} stays",
                "title": "For {{userName}}",
                "context": {"userName": "Lia"},
            },
        )

        assert response.json() == {
            "title": "For Lia",
            "body": "Hello Lia, {{missing}} stays",
        }

    def test_preview_requires_template_or_type(self, client):
        response = client.post(f"{BASE}/preview", json={"context": {}})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"][0]["field"] == "messageTemplate"

    def test_test_data_round_trip(self, client):
        put = client.put(
            f"{BASE}/test-data/creator_signup", json={"context": {"userName": "Sam"}}
        )
        got = client.get(f"{BASE}/test-data/creator_signup")

        assert put.status_code == 200
        assert got.json() == {"eventType": "creator_signup", "context": {"userName": "Sam"}}


class TestDeliveryRoutes:
    """Tests for ledger queries, exports and callbacks."""

    @pytest.fixture
    def emitted(self, client):
        create_type(client)
        return client.post(
            f"{BASE}/emit", json={"eventType": "creator_signup", "context": {}}
        ).json()["records"]

    def test_query_by_user(self, client, emitted):
        response = client.get(f"{BASE}/deliveries", params={"userId": "c-1"})

        assert [r["recipientUserId"] for r in response.json()] == ["c-1"]

    def test_query_by_status(self, client, emitted):
        assert len(client.get(f"{BASE}/deliveries", params={"status": "success"}).json()) == 2
        assert client.get(f"{BASE}/deliveries", params={"status": "failed"}).json() == []

    def test_export_csv(self, client, emitted):
        response = client.get(f"{BASE}/deliveries/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert len(lines) == 3
        assert "Welcome aboard" in lines[1]

    def test_analytics(self, client, emitted):
        body = client.get(f"{BASE}/deliveries/analytics").json()

        assert body["total"] == 2
        assert body["success_rate"] == 1.0
        assert body["by_channel"]["email"]["success"] == 2

    def test_status_callback_on_resolved_record_conflicts(self, client, emitted):
        response = client.post(
            f"{BASE}/deliveries/{emitted[0]['id']}/status", json={"status": "failed"}
        )

        assert response.status_code == 409

    def test_status_callback_resolves_accepted_record(self, client, ledger):
        record = ledger.append(make_delivery_record())

        response = client.post(
            f"{BASE}/deliveries/{record.id}/status",
            json={"status": "failed", "errorMessage": "bounced"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == DeliveryStatus.FAILED.value
        assert response.json()["errorMessage"] == "bounced"

    def test_status_callback_for_missing_record(self, client):
        response = client.post(
            f"{BASE}/deliveries/missing/status", json={"status": "success"}
        )

        assert response.status_code == 404


class TestInboxRoutes:
    """Tests for the in-app inbox routes."""

    def test_inbox_lists_and_marks_read(self, client):
        create_type(client, channels={"inApp": True})
        client.post(f"{BASE}/emit", json={"eventType": "creator_signup", "context": {}})

        inbox = client.get(f"{BASE}/inbox/c-1").json()
        marked = client.post(f"{BASE}/inbox/c-1/read-all").json()
        unread = client.get(f"{BASE}/inbox/c-1", params={"unreadOnly": True}).json()

        assert len(inbox) == 1
        assert marked == {"userId": "c-1", "updated": 1}
        assert unread == []
