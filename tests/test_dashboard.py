from tests.conftest import (
    ADDRESS,
    broker_member_payload,
    broker_payload,
    create_firm,
    create_interaction,
    create_member,
    investor_member_payload,
    investor_payload,
)


def add_coverage(client, headers, broker_id: int, tp: str, quarter: str = "1"):
    response = client.post(
        f"/api/coverages/{broker_id}",
        headers=headers,
        data={"tp": tp, "fiscal_year": "2024", "quarter": quarter, "recommendation": "Buy"},
    )
    assert response.status_code == 201
    return response.json()


class TestDashboard:
    """Tests for dashboard aggregates"""

    def test_empty_dashboard(self, client, member_headers):
        response = client.get("/api/dashboard", headers=member_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["totals"]["total_firms"] == 0
        assert data["firm_stats"]["broker"]["top_coverages"] == []
        assert data["member_stats"]["investor"]["by_country"] == []

    def test_aggregates(self, client, admin_headers):
        acme = create_firm(client, admin_headers, broker_payload())
        zenith = create_firm(
            client, admin_headers, broker_payload(name="Zenith Brokers", location_type="Foreign")
        )
        globex = create_firm(client, admin_headers, investor_payload())

        jane = create_member(client, admin_headers, broker_member_payload(acme["id"]))
        create_member(client, admin_headers, investor_member_payload(globex["id"]))
        create_member(
            client,
            admin_headers,
            investor_member_payload(
                globex["id"],
                name="Mary Poe",
                email="mary.poe@globexcapital.com",
                mobile_number="9123456780",
                designation="fund manager",
                regional_focus=["Asia", "Europe"],
                address=ADDRESS,
            ),
        )
        create_interaction(client, admin_headers, acme["id"], jane["id"])
        add_coverage(client, admin_headers, acme["id"], "900")
        add_coverage(client, admin_headers, zenith["id"], "2500")

        data = client.get("/api/dashboard", headers=admin_headers).json()

        totals = data["totals"]
        assert totals["total_firms"] == 3
        assert totals["total_brokers"] == 2
        assert totals["total_investors"] == 1
        assert totals["total_members"] == 3
        assert totals["total_analysts"] == 1
        assert totals["total_fund_managers"] == 2
        assert totals["total_interactions"] == 1
        assert totals["total_events"] == 0
        assert totals["total_coverages"] == 2

        broker_stats = data["firm_stats"]["broker"]
        assert {row["location_type"]: row["count"] for row in broker_stats["by_location_type"]} == {
            "Domestic": 1,
            "Foreign": 1,
        }
        assert [(c["name"], c["tp"]) for c in broker_stats["top_coverages"]] == [
            ("Zenith Brokers", 2500.0),
            ("Acme Securities", 900.0),
        ]
        assert data["firm_stats"]["investor"]["by_location_type"] == [
            {"location_type": "Foreign", "count": 1}
        ]

        investor_members = data["member_stats"]["investor"]
        assert {row["country"]: row["count"] for row in investor_members["by_country"]} == {
            "Singapore": 1,
            "India": 1,
        }
        assert investor_members["by_regional_focus"][0] == {"regional_focus": "Asia", "count": 2}
        assert {"regional_focus": "Europe", "count": 1} in investor_members["by_regional_focus"]

    def test_requires_authentication(self, client):
        assert client.get("/api/dashboard").status_code == 401
