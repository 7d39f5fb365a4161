import pytest

from tests.conftest import (
    broker_member_payload,
    broker_payload,
    create_firm,
    create_member,
    investor_payload,
)


class TestCreateFirm:
    """Tests for firm creation through the type resolver"""

    def test_create_broker(self, client, admin_user, admin_headers):
        """Test creating a broker firm"""
        response = client.post("/api/firms", headers=admin_headers, json=broker_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["firm_type"] == "broker"
        assert data["name"] == "Acme Securities"
        assert data["sectors"] == ["Banking", "IT"]
        assert data["coverage_ids"] == []
        assert data["member_ids"] == []
        assert data["is_active"] is True
        assert data["created_by_id"] == admin_user.id
        assert data["regional_focus"] is None

    def test_create_investor(self, client, admin_headers):
        """Test creating an investor firm"""
        response = client.post("/api/firms", headers=admin_headers, json=investor_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["firm_type"] == "investor"
        assert data["regional_focus"] == ["Asia", "Europe"]
        assert data["fund_size_indian"] == 750.0
        assert data["fund_factsheets"] == []
        assert data["sectors"] is None

    def test_creator_lists_firm(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.get("/api/users/me", headers=admin_headers)

        assert response.json()["firm_ids"] == [firm["id"]]

    def test_unknown_firm_type(self, client, admin_headers):
        """Test an unknown tag is an invalid-type error"""
        response = client.post(
            "/api/firms", headers=admin_headers, json=broker_payload(firm_type="custodian")
        )

        assert response.status_code == 400
        assert "custodian" in response.json()["message"]

    def test_missing_firm_type(self, client, admin_headers):
        payload = broker_payload()
        del payload["firm_type"]

        response = client.post("/api/firms", headers=admin_headers, json=payload)

        assert response.status_code == 400
        assert response.json()["fields"][0]["field"] == "firm_type"

    def test_broker_requires_sectors(self, client, admin_headers):
        """Test variant-specific required fields are checked"""
        response = client.post("/api/firms", headers=admin_headers, json=broker_payload(sectors=[]))

        assert response.status_code == 400
        assert any(item["field"] == "sectors" for item in response.json()["fields"])

    def test_investor_requires_regional_focus(self, client, admin_headers):
        payload = investor_payload()
        del payload["regional_focus"]

        response = client.post("/api/firms", headers=admin_headers, json=payload)

        assert response.status_code == 400
        assert any(item["field"] == "regional_focus" for item in response.json()["fields"])

    def test_broker_rejects_investor_fields(self, client, admin_headers):
        response = client.post(
            "/api/firms",
            headers=admin_headers,
            json=broker_payload(regional_focus=["Asia"]),
        )

        assert response.status_code == 400

    def test_all_invalid_fields_reported(self, client, admin_headers):
        """Test every offending field is listed, not just the first"""
        response = client.post(
            "/api/firms",
            headers=admin_headers,
            json=broker_payload(name="", location_type="Offshore"),
        )

        assert response.status_code == 400
        fields = {item["field"] for item in response.json()["fields"]}
        assert {"name", "location_type"} <= fields

    def test_address_requires_country(self, client, admin_headers):
        response = client.post(
            "/api/firms",
            headers=admin_headers,
            json=broker_payload(address={"state": "MH", "region": "West", "postal_code": "1"}),
        )

        assert response.status_code == 400
        assert any(item["field"] == "address.country" for item in response.json()["fields"])

    def test_duplicate_name_across_variants(self, client, admin_headers):
        """Test firm names are unique regardless of variant"""
        create_firm(client, admin_headers, broker_payload(name="Shared Name"))

        response = client.post(
            "/api/firms", headers=admin_headers, json=investor_payload(name="Shared Name")
        )

        assert response.status_code == 409
        assert response.json()["field"] == "name"

    def test_create_requires_admin(self, client, member_headers):
        response = client.post("/api/firms", headers=member_headers, json=broker_payload())

        assert response.status_code == 403


class TestListFirms:
    """Tests for firm listing and filters"""

    @pytest.fixture
    def firms(self, client, admin_headers):
        return [
            create_firm(client, admin_headers, broker_payload()),
            create_firm(
                client,
                admin_headers,
                broker_payload(
                    name="Zenith Brokers",
                    sectors=["Pharma"],
                    location_type="Foreign",
                    address=None,
                ),
            ),
            create_firm(client, admin_headers, investor_payload()),
        ]

    def test_list_all(self, client, member_headers, firms):
        """Test listing is open to any authenticated user"""
        response = client.get("/api/firms", headers=member_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 3

    def test_filter_by_type(self, client, member_headers, firms):
        response = client.get("/api/firms?firm_type=investor", headers=member_headers)

        data = response.json()
        assert data["total"] == 1
        assert data["firms"][0]["name"] == "Globex Capital"

    def test_filter_by_name_case_insensitive(self, client, member_headers, firms):
        response = client.get("/api/firms?name=acme", headers=member_headers)

        assert [f["name"] for f in response.json()["firms"]] == ["Acme Securities"]

    def test_filter_by_sectors_any(self, client, member_headers, firms):
        response = client.get("/api/firms?sectors=Pharma,Energy", headers=member_headers)

        assert [f["name"] for f in response.json()["firms"]] == ["Zenith Brokers"]

    def test_filter_by_regional_focus(self, client, member_headers, firms):
        response = client.get("/api/firms?regional_focus=Europe", headers=member_headers)

        assert [f["name"] for f in response.json()["firms"]] == ["Globex Capital"]

    def test_filter_by_location_type(self, client, member_headers, firms):
        response = client.get("/api/firms?location_type=Foreign", headers=member_headers)

        assert response.json()["total"] == 2

    def test_filter_by_localities(self, client, member_headers, firms):
        response = client.get("/api/firms?localities=Fort", headers=member_headers)

        assert [f["name"] for f in response.json()["firms"]] == ["Acme Securities"]

    def test_pagination(self, client, member_headers, firms):
        """Test total counts every match while the page is limited"""
        response = client.get("/api/firms?page=2&per_page=2", headers=member_headers)

        data = response.json()
        assert data["total"] == 3
        assert len(data["firms"]) == 1


class TestUpdateFirm:
    """Tests for partial firm updates"""

    def test_update_uses_stored_variant(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.patch(
            f"/api/firms/{firm['id']}",
            headers=admin_headers,
            json={"sectors": ["Auto"], "website": "https://acme.example.com"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sectors"] == ["Auto"]
        assert data["website"].startswith("https://acme.example.com")
        assert data["name"] == "Acme Securities"

    def test_put_is_partial_update(self, client, admin_headers):
        """Test PUT behaves like PATCH"""
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.put(f"/api/firms/{firm['id']}", headers=admin_headers, json={"remark": "Key account"})

        assert response.status_code == 200
        assert response.json()["remark"] == "Key account"
        assert response.json()["name"] == "Acme Securities"

    def test_cannot_change_firm_type(self, client, admin_headers):
        """Test the discriminator is not updatable"""
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.patch(
            f"/api/firms/{firm['id']}", headers=admin_headers, json={"firm_type": "investor"}
        )

        assert response.status_code == 400
        assert client.get(f"/api/firms/{firm['id']}", headers=admin_headers).json()["firm_type"] == "broker"

    def test_cannot_set_fields_of_other_variant(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.patch(
            f"/api/firms/{firm['id']}", headers=admin_headers, json={"fund_size_indian": 10}
        )

        assert response.status_code == 400

    def test_cannot_clear_required_field(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.patch(f"/api/firms/{firm['id']}", headers=admin_headers, json={"name": None})

        assert response.status_code == 400

    def test_update_to_duplicate_name(self, client, admin_headers):
        create_firm(client, admin_headers, broker_payload())
        other = create_firm(client, admin_headers, investor_payload())

        response = client.patch(
            f"/api/firms/{other['id']}", headers=admin_headers, json={"name": "Acme Securities"}
        )

        assert response.status_code == 409

    def test_update_missing_firm(self, client, admin_headers):
        response = client.patch("/api/firms/999", headers=admin_headers, json={"remark": "x"})

        assert response.status_code == 404

    def test_set_remark(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.post(
            f"/api/firms/{firm['id']}/remark", headers=admin_headers, json={"remark": "Key account"}
        )

        assert response.status_code == 200
        assert response.json()["remark"] == "Key account"


class TestDeactivateFirm:
    """Tests for soft delete"""

    def test_soft_delete_keeps_relations(self, client, admin_headers):
        """Test deactivation leaves members and references untouched"""
        firm = create_firm(client, admin_headers, broker_payload())
        member = create_member(client, admin_headers, broker_member_payload(firm["id"]))

        response = client.delete(f"/api/firms/{firm['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["is_active"] is False

        refetched = client.get(f"/api/firms/{firm['id']}", headers=admin_headers).json()
        assert refetched["is_active"] is False
        assert refetched["member_ids"] == [member["id"]]

        member_after = client.get(f"/api/members/{member['id']}", headers=admin_headers).json()
        assert member_after["firm_id"] == firm["id"]

    def test_filter_inactive(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())
        create_firm(client, admin_headers, investor_payload())
        client.delete(f"/api/firms/{firm['id']}", headers=admin_headers)

        active = client.get("/api/firms?is_active=true", headers=admin_headers).json()

        assert [f["name"] for f in active["firms"]] == ["Globex Capital"]

    def test_no_members_added_to_inactive_firm(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())
        client.delete(f"/api/firms/{firm['id']}", headers=admin_headers)

        response = client.post(
            "/api/members", headers=admin_headers, json=broker_member_payload(firm["id"])
        )

        assert response.status_code == 400


class TestFundFactsheets:
    """Tests for investor fund factsheets"""

    def test_upload_list_and_delete(self, client, admin_headers):
        firm = create_firm(client, admin_headers, investor_payload())

        upload = client.post(
            f"/api/firms/{firm['id']}/sheet",
            headers=admin_headers,
            files={"sheet": ("factsheet.pdf", b"%PDF-1.4 factsheet", "application/pdf")},
            data={"document_date": "2024-03-31"},
        )
        assert upload.status_code == 201
        file_id = upload.json()["file_id"]
        assert upload.json()["document_date"] == "2024-03-31"

        listed = client.get(f"/api/firms/{firm['id']}/sheet", headers=admin_headers).json()
        assert [sheet["file_id"] for sheet in listed] == [file_id]

        firm_view = client.get(f"/api/firms/{firm['id']}", headers=admin_headers).json()
        assert firm_view["fund_factsheets"][0]["file_id"] == file_id

        deleted = client.delete(f"/api/firms/{firm['id']}/sheet/{file_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert client.get(f"/api/files/{file_id}", headers=admin_headers).status_code == 404

    def test_broker_has_no_factsheets(self, client, admin_headers):
        firm = create_firm(client, admin_headers, broker_payload())

        response = client.post(
            f"/api/firms/{firm['id']}/sheet",
            headers=admin_headers,
            files={"sheet": ("factsheet.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
