import pytest

from tests.conftest import broker_member_payload, broker_payload, create_firm, create_member


@pytest.fixture
def broker(client, admin_headers):
    return create_firm(client, admin_headers, broker_payload())


@pytest.fixture
def member(client, admin_headers, broker):
    return create_member(client, admin_headers, broker_member_payload(broker["id"]))


@pytest.fixture
def event_body(broker, member):
    return {
        "firm_id": broker["id"],
        "member_id": member["id"],
        "name": "Q1 results call",
        "event_type": "Earnings call",
        "mode": "Virtual",
        "start_date": "2024-04-20T09:00:00Z",
        "end_date": "2024-04-20T10:00:00Z",
        "internal_attendees": "CFO, IR head",
    }


class TestCreateEvent:
    """Tests for event creation rules"""

    def test_create_event(self, client, admin_headers, event_body):
        response = client.post("/api/events", headers=admin_headers, json=event_body)

        assert response.status_code == 201
        event = response.json()
        assert event["next_step"] == "TBD"
        assert event["is_invited"] is False
        assert event["location"] is None

    def test_physical_requires_location(self, client, admin_headers, event_body):
        response = client.post(
            "/api/events", headers=admin_headers, json={**event_body, "mode": "Physical"}
        )

        assert response.status_code == 422

    def test_start_after_end(self, client, admin_headers, event_body):
        response = client.post(
            "/api/events",
            headers=admin_headers,
            json={**event_body, "start_date": "2024-04-21T09:00:00Z"},
        )

        assert response.status_code == 422

    def test_missing_member(self, client, admin_headers, event_body):
        response = client.post("/api/events", headers=admin_headers, json={**event_body, "member_id": 999})

        assert response.status_code == 404

    def test_member_of_other_firm(self, client, admin_headers, event_body):
        """Test an event cannot pair a firm with someone else's member"""
        other = create_firm(client, admin_headers, broker_payload(name="Other Broker"))

        response = client.post(
            "/api/events", headers=admin_headers, json={**event_body, "firm_id": other["id"]}
        )

        assert response.status_code == 400
        assert client.get("/api/events", headers=admin_headers).json()["total"] == 0

    def test_missing_firm(self, client, admin_headers, event_body):
        response = client.post("/api/events", headers=admin_headers, json={**event_body, "firm_id": 999})

        assert response.status_code == 404


class TestManageEvents:
    """Tests for listing and updating events"""

    def test_list_filters(self, client, admin_headers, event_body):
        client.post("/api/events", headers=admin_headers, json=event_body)
        client.post(
            "/api/events",
            headers=admin_headers,
            json={**event_body, "name": "Site visit", "mode": "Physical", "location": "Pune"},
        )

        physical = client.get("/api/events?mode=Physical", headers=admin_headers).json()

        assert physical["total"] == 1
        assert physical["events"][0]["name"] == "Site visit"

    def test_update_next_step(self, client, admin_headers, event_body):
        event = client.post("/api/events", headers=admin_headers, json=event_body).json()

        response = client.patch(
            f"/api/events/{event['id']}",
            headers=admin_headers,
            json={"next_step": "Confirmed", "is_invited": True},
        )

        assert response.status_code == 200
        assert response.json()["next_step"] == "Confirmed"
        assert response.json()["is_invited"] is True

    def test_put_is_partial_update(self, client, admin_headers, event_body):
        event = client.post("/api/events", headers=admin_headers, json=event_body).json()

        response = client.put(
            f"/api/events/{event['id']}", headers=admin_headers, json={"next_step": "Send deck"}
        )

        assert response.status_code == 200
        assert response.json()["next_step"] == "Send deck"
        assert response.json()["mode"] == event_body["mode"]

    def test_update_rechecks_location_rule(self, client, admin_headers, event_body):
        """Test switching to Physical without a location is rejected"""
        event = client.post("/api/events", headers=admin_headers, json=event_body).json()

        response = client.patch(
            f"/api/events/{event['id']}", headers=admin_headers, json={"mode": "Physical"}
        )

        assert response.status_code == 400
        assert response.json()["fields"][0]["field"] == "location"

    def test_update_rechecks_dates(self, client, admin_headers, event_body):
        event = client.post("/api/events", headers=admin_headers, json=event_body).json()

        response = client.patch(
            f"/api/events/{event['id']}",
            headers=admin_headers,
            json={"end_date": "2024-04-19T10:00:00Z"},
        )

        assert response.status_code == 400

    def test_delete_event(self, client, admin_headers, event_body):
        event = client.post("/api/events", headers=admin_headers, json=event_body).json()

        response = client.delete(f"/api/events/{event['id']}", headers=admin_headers)

        assert response.status_code == 204
        assert client.get(f"/api/events/{event['id']}", headers=admin_headers).status_code == 404
